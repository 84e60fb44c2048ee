"""GitHub webhook payloads, signature checks and the comment client."""

from __future__ import annotations

from .client import GitHubCommentClient, GitHubRestConfig
from .errors import GitHubAPIError, GitHubConfigError, WebhookPayloadError
from .events import (
    CommentEvent,
    InstallationEvent,
    WebhookEventName,
    parse_comment_event,
    parse_installation_event,
)
from .signature import compute_signature, verify_signature

__all__ = [
    "CommentEvent",
    "GitHubAPIError",
    "GitHubCommentClient",
    "GitHubConfigError",
    "GitHubRestConfig",
    "InstallationEvent",
    "WebhookEventName",
    "WebhookPayloadError",
    "compute_signature",
    "parse_comment_event",
    "parse_installation_event",
    "verify_signature",
]
