"""GitHub REST client for remote repository listings."""

import base64
import binascii
import logging

import requests

from ..errors import ConfigurationError, SourceError
from .models import GitHubEntry, RepoInfo

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30


class GitHubClient:
    """Minimal client for the GitHub contents and repository endpoints."""

    def __init__(
        self,
        token: str | None,
        api_url: str = GITHUB_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the client.

        Args:
            token: GitHub access token.
            api_url: Base URL of the REST API.
            timeout: Per-request timeout in seconds.

        Raises:
            ConfigurationError: If no token is given.
        """
        if not token:
            raise ConfigurationError("GitHub token is required for remote repositories")
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._session: requests.Session | None = None

    @property
    def session(self) -> requests.Session:
        """Lazy-load the HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update(
                {
                    "Authorization": f"Bearer {self.token}",
                    "Accept": "application/vnd.github.v3+json",
                    "User-Agent": "archgen",
                }
            )
        return self._session

    def _get(self, url: str, params: dict | None = None):
        """GET a URL, mapping transport and HTTP errors to SourceError."""
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise SourceError(f"GitHub request failed: {e}", url) from e
        except ValueError as e:
            raise SourceError(f"Invalid JSON from GitHub: {e}", url) from e

    def list_directory(
        self, owner: str, repo: str, path: str = "", ref: str | None = None
    ) -> list[GitHubEntry]:
        """List one directory of a repository.

        Args:
            owner: Repository owner.
            repo: Repository name.
            path: Directory path inside the repository ("" for the root).
            ref: Branch, tag or commit.

        Returns:
            The directory entries.

        Raises:
            SourceError: If the request fails or the path is not a directory.
        """
        url = f"{self.api_url}/repos/{owner}/{repo}/contents/{path}"
        data = self._get(url, params={"ref": ref} if ref else None)

        if not isinstance(data, list):
            raise SourceError("Unexpected response from GitHub API", path or "/")

        return [GitHubEntry.model_validate(item) for item in data]

    def get_file_content(
        self, owner: str, repo: str, path: str, ref: str | None = None
    ) -> str:
        """Fetch and decode the text content of one file.

        Raises:
            SourceError: If the request fails or the payload has no content.
        """
        url = f"{self.api_url}/repos/{owner}/{repo}/contents/{path}"
        data = self._get(url, params={"ref": ref} if ref else None)

        if not isinstance(data, dict) or "content" not in data:
            raise SourceError(f"No content returned for {path}", path)

        try:
            raw = base64.b64decode(data["content"])
        except (binascii.Error, TypeError) as e:
            raise SourceError(f"Cannot decode content of {path}: {e}", path) from e
        return raw.decode("utf-8", errors="replace")

    def get_repository(self, owner: str, repo: str) -> RepoInfo:
        """Fetch descriptive repository metadata.

        Raises:
            SourceError: If the request fails.
        """
        data = self._get(f"{self.api_url}/repos/{owner}/{repo}")
        license_info = data.get("license") or {}

        return RepoInfo(
            name=data.get("full_name") or f"{owner}/{repo}",
            description=data.get("description") or "",
            language=data.get("language") or "unknown",
            stars=data.get("stargazers_count") or 0,
            forks=data.get("forks_count") or 0,
            last_updated=data.get("updated_at") or "",
            license=license_info.get("name") or "unknown",
        )
