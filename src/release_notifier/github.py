"""GitHub API client for creating and updating releases.

Two calls are made per run:
- POST  /repos/{owner}/{repo}/releases               create the release
- PATCH /repos/{owner}/{repo}/releases/{release_id}  replace its body

Design notes:
- Uses httpx for async HTTP requests
- Non-2xx responses raise httpx.HTTPStatusError; callers decide whether
  that is fatal
- Uses a Protocol so the workflow doesn't depend on the concrete
  implementation (makes testing with mocks easy)

GitHub API docs: https://docs.github.com/en/rest/releases/releases
"""

from __future__ import annotations

import os
from typing import Any, Protocol

import httpx

from release_notifier.logging_config import get_logger
from release_notifier.schemas import Release, ReleaseRequest

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Protocol (Interface)
# ---------------------------------------------------------------------------


class GitHubClientProtocol(Protocol):
    """Interface for the release calls the workflow makes."""

    async def create_release(
        self,
        repo: str,
        tag_name: str,
        *,
        generate_release_notes: bool = False,
    ) -> Release:
        """Create a published release for `tag_name` in `repo` ("owner/name")."""
        ...

    async def update_release(self, repo: str, release_id: int, body: str) -> Release:
        """Replace the body of an existing release."""
        ...


# ---------------------------------------------------------------------------
# Concrete Implementation
# ---------------------------------------------------------------------------


class GitHubClient:
    """Real GitHub API client using httpx.

    Usage:
        client = GitHubClient(token="ghp_...")
        release = await client.create_release("myorg/app", "v1.2.3")
        await client.update_release("myorg/app", release.id, "# What's New")
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub token. Falls back to the GITHUB_TOKEN environment
                   variable if not provided.
            base_url: API root, for GitHub Enterprise installs.
            transport: Optional httpx transport (used by tests).
        """
        self._token = token or os.environ.get("GITHUB_TOKEN", "")
        self._base_url = base_url or self.BASE_URL
        self._transport = transport
        self._headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            self._headers["Authorization"] = f"Bearer {self._token}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=30.0,
            transport=self._transport,
        )

    async def create_release(
        self,
        repo: str,
        tag_name: str,
        *,
        generate_release_notes: bool = False,
    ) -> Release:
        """Create a release named "Release {tag}" with an empty body.

        The release is published immediately (not a draft, not a
        prerelease). The body is a placeholder that the workflow later
        overwrites with the generated summary.

        Args:
            repo: Repository in "owner/name" format
            tag_name: Tag to release
            generate_release_notes: Let GitHub fill the body with its
                generated notes instead of leaving it empty

        Returns:
            The created Release

        Raises:
            ValueError: If tag_name is empty
            httpx.HTTPStatusError: If GitHub rejects the request
        """
        if not tag_name:
            raise ValueError("A release tag is required to create a release")

        payload = ReleaseRequest.for_tag(
            tag_name, generate_release_notes=generate_release_notes
        )
        data = await self._send(
            "POST", f"/repos/{repo}/releases", payload.model_dump()
        )
        release = Release.model_validate(data)
        logger.info(
            "release_created",
            repo=repo,
            tag=release.tag_name,
            release_id=release.id,
            name=release.name,
        )
        return release

    async def update_release(self, repo: str, release_id: int, body: str) -> Release:
        """Overwrite a release body.

        Args:
            repo: Repository in "owner/name" format
            release_id: Numeric id of the release
            body: New markdown body

        Returns:
            The updated Release

        Raises:
            httpx.HTTPStatusError: If GitHub rejects the request
        """
        data = await self._send(
            "PATCH", f"/repos/{repo}/releases/{release_id}", {"body": body}
        )
        logger.info("release_notes_updated", repo=repo, release_id=release_id)
        return Release.model_validate(data)

    async def _send(self, method: str, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        async with self._client() as client:
            resp = await client.request(method, url, json=payload)
            resp.raise_for_status()
            return resp.json()


# ---------------------------------------------------------------------------
# Mock Implementation (for testing)
# ---------------------------------------------------------------------------


class MockGitHubClient:
    """Mock GitHub client that keeps releases in memory.

    Use this in tests and local runs when you don't want to create real
    releases.

    Usage:
        client = MockGitHubClient(bodies={"v1.2.3": "fix: crash on startup"})
        release = await client.create_release("myorg/app", "v1.2.3")
    """

    def __init__(self, bodies: dict[str, str] | None = None) -> None:
        """Initialize with optional predefined release bodies.

        Args:
            bodies: tag -> body the created release should carry, standing
                    in for GitHub's generated notes
        """
        self._bodies = bodies or {}
        self.releases: dict[int, Release] = {}
        self.updates: list[tuple[str, int, str]] = []

    async def create_release(
        self,
        repo: str,
        tag_name: str,
        *,
        generate_release_notes: bool = False,
    ) -> Release:
        if not tag_name:
            raise ValueError("A release tag is required to create a release")
        release_id = len(self.releases) + 1
        release = Release(
            id=release_id,
            tag_name=tag_name,
            name=f"Release {tag_name}",
            body=self._bodies.get(tag_name, ""),
            html_url=f"https://github.com/{repo}/releases/tag/{tag_name}",
        )
        self.releases[release_id] = release
        return release

    async def update_release(self, repo: str, release_id: int, body: str) -> Release:
        """Replace the stored body.

        Raises:
            KeyError: If no release with this id was created
        """
        release = self.releases[release_id].model_copy(update={"body": body})
        self.releases[release_id] = release
        self.updates.append((repo, release_id, body))
        return release
