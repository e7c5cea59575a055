"""Pydantic models for repository sources."""

from pydantic import BaseModel


class GitHubEntry(BaseModel):
    """One entry of a GitHub contents listing."""

    type: str
    path: str
    name: str
    size: int = 0
    sha: str = ""


class RepoInfo(BaseModel):
    """Descriptive repository metadata used in the enhancement prompt."""

    name: str = "unknown"
    description: str = ""
    language: str = "unknown"
    stars: int = 0
    forks: int = 0
    last_updated: str = ""
    license: str = "unknown"
