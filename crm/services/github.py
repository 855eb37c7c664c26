"""GitHub REST API client for repository metadata."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime

import httpx

from crm.config import get_settings
from crm.exceptions import (
    InputValidationError,
    RateLimitedError,
    UpstreamError,
    UpstreamNotFoundError,
)

logger = logging.getLogger(__name__)

REPO_PATH_PATTERN = re.compile(r"^[A-Za-z0-9._-]+/[A-Za-z0-9._-]+$")
INVALID_REPO_PATH_MESSAGE = "Invalid repository path format. Expected format: owner/repository"


def is_valid_repo_path(repo_path: str) -> bool:
    """Check that repo_path looks like ``owner/repository``."""
    return bool(REPO_PATH_PATTERN.match(repo_path))


@dataclass
class RepositoryData:
    """Repository metadata mapped onto the project shape."""

    owner: str
    name: str
    url: str
    stars: int
    forks: int
    open_issues: int
    created_at: int
    github_path: str
    description: str | None = None
    language: str | None = None
    default_branch: str | None = None
    is_private: bool = False
    is_archived: bool = False
    is_disabled: bool = False


def _to_unix_timestamp(value: str) -> int:
    # GitHub returns e.g. "2011-01-26T19:01:12Z"
    return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())


class GitHubService:
    """Service for reading public repository metadata from GitHub."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = get_settings()
        self.base_url = self.settings.github_api_url.rstrip("/")
        self.timeout = self.settings.github_timeout
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "Simple-CRM-App",
        }
        if self.settings.github_token:
            headers["Authorization"] = f"Bearer {self.settings.github_token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self.transport,
        )

    async def get_repository_data(self, repo_path: str) -> RepositoryData:
        """Fetch and map metadata for ``owner/repository``."""
        if not is_valid_repo_path(repo_path):
            raise InputValidationError(
                INVALID_REPO_PATH_MESSAGE,
                details=[{"field": "repoPath", "message": INVALID_REPO_PATH_MESSAGE}],
            )

        try:
            async with self._client() as client:
                response = await client.get(f"/repos/{repo_path}")
        except httpx.TimeoutException as e:
            logger.error(f"GitHub request for {repo_path} timed out: {e}")
            raise UpstreamError("GitHub API request timed out. Please try again later.") from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling GitHub for {repo_path}: {e}")
            raise UpstreamError("Failed to fetch repository data from GitHub") from e

        if response.status_code == 404:
            raise UpstreamNotFoundError()
        if response.status_code in (403, 429):
            logger.warning(f"GitHub rate limit hit for {repo_path}")
            raise RateLimitedError()
        if not response.is_success:
            logger.error(f"GitHub API error for {repo_path}: {response.status_code}")
            raise UpstreamError(f"GitHub API error: {response.status_code} {response.reason_phrase}")

        try:
            repo = response.json()
            return RepositoryData(
                owner=repo["owner"]["login"],
                name=repo["name"],
                url=repo["html_url"],
                stars=repo.get("stargazers_count") or 0,
                forks=repo.get("forks_count") or 0,
                open_issues=repo.get("open_issues_count") or 0,
                created_at=_to_unix_timestamp(repo["created_at"]),
                github_path=repo.get("full_name") or repo_path,
                description=repo.get("description"),
                language=repo.get("language"),
                default_branch=repo.get("default_branch"),
                is_private=bool(repo.get("private")),
                is_archived=bool(repo.get("archived")),
                is_disabled=bool(repo.get("disabled")),
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Unexpected GitHub payload for {repo_path}: {e}")
            raise UpstreamError("GitHub returned an unexpected response") from e

    async def check_exists(self, repo_path: str) -> bool:
        """Check whether GitHub knows the repository. Never raises."""
        if not is_valid_repo_path(repo_path):
            return False
        try:
            async with self._client() as client:
                response = await client.get(f"/repos/{repo_path}")
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning(f"GitHub existence check for {repo_path} failed: {e}")
            return False


def get_github_service() -> GitHubService:
    """Get a GitHub service instance."""
    return GitHubService()
