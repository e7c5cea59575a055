"""Diagram generation from local directories and GitHub repositories."""

import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field

from ..errors import ConfigurationError, SourceError
from ..source.github import GitHubClient
from ..source.models import RepoInfo
from ..source.walker import (
    DEFAULT_EXCLUDE_PATTERNS,
    is_excluded,
    is_local_repository,
    parse_repository_ref,
    walk_local,
)
from .builder import DiagramBuilder, add_file, make_listing_resolver, make_local_resolver
from .models import Diagram, DiagramMetadata
from .node_types import DiagramType

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"


class GeneratorOptions(BaseModel):
    """Options for a generation call."""

    token: str | None = None
    branch: str = DEFAULT_BRANCH
    exclude_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS)
    )


def generate_diagram(
    repository: str,
    diagram_type: DiagramType = DiagramType.FUNCTIONAL,
    options: GeneratorOptions | None = None,
    client: GitHubClient | None = None,
) -> Diagram:
    """Generate a diagram for a local directory or a GitHub repository.

    A reference naming an existing directory is scanned locally; anything
    else is treated as a GitHub `owner/repo` reference.

    Args:
        repository: Local path or `owner/repo`.
        diagram_type: The kind of diagram to produce.
        options: Token, branch and exclusion settings.
        client: GitHub client to use instead of creating one.

    Returns:
        The generated Diagram.

    Raises:
        ConfigurationError: If a remote repository is requested without a
            token, or the reference is malformed.
        SourceError: If files or listings cannot be read.
    """
    options = options or GeneratorOptions()

    if is_local_repository(repository):
        return generate_from_local(repository, diagram_type, options.exclude_patterns)

    if client is None and not options.token:
        raise ConfigurationError("GitHub token is required for remote repositories")

    owner, repo = parse_repository_ref(repository)
    client = client or GitHubClient(options.token)
    return generate_from_github(
        client, owner, repo, options.branch, diagram_type, options.exclude_patterns
    )


def generate_from_local(
    root: str | Path,
    diagram_type: DiagramType = DiagramType.FUNCTIONAL,
    exclude_patterns: list[str] | None = None,
) -> Diagram:
    """Scan a local directory into a Diagram.

    Raises:
        SourceError: If a file cannot be read.
    """
    root = Path(root).expanduser().resolve()
    files = walk_local(root, exclude_patterns)

    builder = DiagramBuilder()
    resolve = make_local_resolver(root)

    for rel_path in files:
        path = root / rel_path
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
            stat = path.stat()
        except OSError as e:
            raise SourceError(f"Cannot read file: {e}", rel_path) from e

        add_file(
            builder,
            rel_path,
            content,
            resolve=resolve,
            diagram_type=diagram_type,
            metadata={
                "size": stat.st_size,
                "last_modified": datetime.fromtimestamp(
                    stat.st_mtime, timezone.utc
                ).isoformat(),
            },
        )

    diagram = builder.build(DiagramMetadata(type=diagram_type, repository=str(root)))
    logger.info(
        "Built diagram for %s: %d nodes, %d edges",
        root, len(diagram.nodes), len(diagram.edges),
    )
    return diagram


def generate_from_github(
    client: GitHubClient,
    owner: str,
    repo: str,
    branch: str = DEFAULT_BRANCH,
    diagram_type: DiagramType = DiagramType.FUNCTIONAL,
    exclude_patterns: list[str] | None = None,
) -> Diagram:
    """Build a Diagram from the top-level listing of a GitHub repository.

    Only the first directory level is listed. A file whose content cannot be
    fetched still contributes its node, without dependencies.

    Raises:
        SourceError: If the listing itself fails.
    """
    patterns = DEFAULT_EXCLUDE_PATTERNS if exclude_patterns is None else exclude_patterns
    entries = client.list_directory(owner, repo, ref=branch)

    builder = DiagramBuilder()
    resolve = make_listing_resolver({e.path for e in entries if e.type == "file"})

    for entry in entries:
        if is_excluded(entry.path, patterns):
            continue

        content = None
        if entry.type == "file":
            try:
                content = client.get_file_content(owner, repo, entry.path, ref=branch)
            except SourceError as e:
                logger.warning("Error extracting dependencies from %s: %s", entry.path, e)

        add_file(
            builder,
            entry.path,
            content,
            resolve=resolve,
            diagram_type=diagram_type,
            metadata={"sha": entry.sha, "size": entry.size, "kind": entry.type},
        )

    diagram = builder.build(
        DiagramMetadata(type=diagram_type, repository=f"{owner}/{repo}")
    )
    logger.info(
        "Built diagram for %s/%s: %d nodes, %d edges",
        owner, repo, len(diagram.nodes), len(diagram.edges),
    )
    return diagram


def describe_repository(
    repository: str,
    diagram: Diagram,
    options: GeneratorOptions | None = None,
    client: GitHubClient | None = None,
) -> RepoInfo:
    """Collect descriptive metadata for the enhancement prompt.

    Local repositories are described from the diagram itself. Remote
    metadata failures fall back to a name-only description.
    """
    options = options or GeneratorOptions()

    if is_local_repository(repository):
        languages = Counter(
            node.metadata.get("language")
            for node in diagram.nodes
            if node.metadata.get("language") not in (None, "unknown")
        )
        return RepoInfo(
            name=Path(repository).expanduser().resolve().name,
            language=languages.most_common(1)[0][0] if languages else "unknown",
        )

    try:
        owner, repo = parse_repository_ref(repository)
        client = client or GitHubClient(options.token)
        return client.get_repository(owner, repo)
    except (ConfigurationError, SourceError) as e:
        logger.warning("Could not fetch repository metadata for %s: %s", repository, e)
        return RepoInfo(name=repository)
