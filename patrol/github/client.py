"""GitHub REST client used to post command outcomes back to conversations."""

from __future__ import annotations

import dataclasses
import os
import typing as typ

import httpx

from .errors import GitHubAPIError, GitHubConfigError

if typ.TYPE_CHECKING:
    from patrol.registry.models import RepositoryRef

_HTTP_ERROR_STATUS_THRESHOLD = 400


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Configuration for the GitHub REST API client."""

    token: str
    api_url: str = "https://api.github.com"
    timeout_s: float = 20.0
    user_agent: str = "contribution-patrol/0.1"

    @classmethod
    def from_env(cls) -> GitHubRestConfig:
        """Build configuration using the ``PATROL_GITHUB_TOKEN`` env var."""
        token = os.environ.get("PATROL_GITHUB_TOKEN", "").strip()
        if not token:
            raise GitHubConfigError.missing_token()
        return cls(token=token)


class GitHubCommentClient:
    """Post comments on issues and pull requests.

    Pull request conversations share the issue comment endpoint, so one
    route serves every ``conversation_id`` produced by the webhook layer.
    """

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.token}",
                "User-Agent": config.user_agent,
                "Accept": "application/vnd.github+json",
            },
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def post_message(
        self, repository: RepositoryRef, conversation_id: int, text: str
    ) -> None:
        """Create a comment with ``text`` on the issue or pull request.

        Raises
        ------
        GitHubAPIError
            If GitHub answers with a non-2xx status.

        """
        url = (
            f"{self._config.api_url.rstrip('/')}/repos/{repository.owner}/"
            f"{repository.name}/issues/{conversation_id}/comments"
        )
        response = await self._client.post(url, json={"body": text})
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(response.status_code)
