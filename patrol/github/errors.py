"""GitHub boundary errors."""

from __future__ import annotations


class GitHubAPIError(RuntimeError):
    """Raised when GitHub returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(f"GitHub REST HTTP {status_code}", status_code=status_code)


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> GitHubConfigError:
        """Return an error when no GitHub token is configured."""
        return cls("PATROL_GITHUB_TOKEN is required for GitHub API")

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")


class WebhookPayloadError(ValueError):
    """Raised when a webhook body cannot be decoded into the expected shape."""

    @classmethod
    def malformed(cls, event_name: str, detail: object) -> WebhookPayloadError:
        """Return an error for a body that failed decoding or validation."""
        return cls(f"Malformed {event_name} payload: {detail}")
