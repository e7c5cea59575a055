"""Local file discovery and repository reference routing."""

import logging
import os
import re
from functools import lru_cache
from pathlib import Path

from ..errors import ConfigurationError, SourceError

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_PATTERNS = ["node_modules", "dist", ".git"]

GITHUB_URL_PATTERN = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/([^/\s]+)/([^/\s]+?)(?:\.git)?/?$"
)
OWNER_REPO_PATTERN = re.compile(r"^([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+)$")
REGEX_SYNTAX = re.compile(r"[*+?\[\](){}|^$\\]")


@lru_cache(maxsize=None)
def _compile_exclusion(pattern: str) -> re.Pattern | None:
    """Compile an exclusion regex, warning once if it is invalid."""
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.warning(
            "Exclusion pattern %r is not a valid regular expression (%s); "
            "only substring matches will apply",
            pattern,
            e,
        )
        return None


def is_excluded(path: str, patterns: list[str]) -> bool:
    """Check whether a path matches any exclusion pattern.

    A pattern matches when it occurs in the path as a substring. Patterns
    holding regex syntax beyond a plain dot (so ".git" stays literal) are
    also tried as regular expressions searched anywhere in the path. A
    pattern that does not compile, such as the glob "*.test.ts", is logged
    once and used as a substring only.

    Args:
        path: Relative path using forward slashes.
        patterns: Substrings or regular expressions.

    Returns:
        True if the path should be skipped.
    """
    for pattern in patterns:
        if pattern in path:
            return True
        if not REGEX_SYNTAX.search(pattern):
            continue
        regex = _compile_exclusion(pattern)
        if regex is not None and regex.search(path):
            return True
    return False


def walk_local(root: str | Path, exclude_patterns: list[str] | None = None) -> list[str]:
    """List every file under a directory.

    Args:
        root: Directory to scan.
        exclude_patterns: Patterns for `is_excluded`; defaults apply when None.

    Returns:
        Relative POSIX paths, in a stable order.

    Raises:
        SourceError: If the root cannot be listed.
    """
    patterns = DEFAULT_EXCLUDE_PATTERNS if exclude_patterns is None else exclude_patterns
    root = Path(root)

    if not root.is_dir():
        raise SourceError(f"Not a directory: {root}", str(root))

    def _raise(error: OSError) -> None:
        raise SourceError(f"Cannot list directory: {error}", error.filename) from error

    files: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        prefix = "" if rel_dir == "." else f"{rel_dir}/"

        # Prune excluded directories in place so os.walk skips them
        dirnames[:] = sorted(
            d for d in dirnames if not is_excluded(prefix + d, patterns)
        )

        for filename in sorted(filenames):
            rel_path = prefix + filename
            if is_excluded(rel_path, patterns):
                continue
            files.append(rel_path)

    logger.debug("Found %d file(s) under %s", len(files), root)
    return files


def is_local_repository(ref: str) -> bool:
    """Check whether a repository reference names a local directory."""
    if not ref or not ref.strip():
        return False
    return Path(ref).expanduser().is_dir()


def parse_repository_ref(ref: str) -> tuple[str, str]:
    """Split a remote repository reference into owner and name.

    Accepts `owner/repo` and GitHub URLs.

    Raises:
        ConfigurationError: If the reference is malformed.
    """
    ref = ref.strip()
    match = GITHUB_URL_PATTERN.match(ref) or OWNER_REPO_PATTERN.match(ref)
    if not match:
        raise ConfigurationError(
            f"Invalid repository format: {ref!r}. Use owner/repo"
        )
    return match.group(1), match.group(2)
