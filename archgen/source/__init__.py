"""Source layer: local directory walking and GitHub listings."""

from .github import GitHubClient
from .models import GitHubEntry, RepoInfo
from .walker import (
    DEFAULT_EXCLUDE_PATTERNS,
    is_excluded,
    is_local_repository,
    parse_repository_ref,
    walk_local,
)

__all__ = [
    "GitHubClient",
    "GitHubEntry",
    "RepoInfo",
    "DEFAULT_EXCLUDE_PATTERNS",
    "is_excluded",
    "is_local_repository",
    "parse_repository_ref",
    "walk_local",
]
