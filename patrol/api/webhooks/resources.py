"""Falcon resource for ``POST /webhooks/github``.

The resource verifies the body signature when a secret is configured, routes
the event by ``X-GitHub-Event`` and answers with the outcome status::

    {"event": "issue_comment", "outcome": "success"}

Events and actions the bot does not handle are acknowledged with
``"ignored"`` so GitHub does not retry them.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from http import HTTPStatus

from patrol.api.errors import InvalidPayloadError, InvalidSignatureError
from patrol.commands.outcome import IGNORED, Success
from patrol.github.errors import WebhookPayloadError
from patrol.github.events import (
    WebhookEventName,
    parse_comment_event,
    parse_installation_event,
)
from patrol.github.signature import verify_signature
from patrol.logging import get_logger, log_debug

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from patrol.commands.service import CommentCommandService
    from patrol.registry import InstallationService

__all__ = ["GitHubWebhookResource", "WebhookResourceDependencies"]

logger = get_logger(__name__)

EVENT_HEADER = "X-GitHub-Event"
SIGNATURE_HEADER = "X-Hub-Signature-256"


@dc.dataclass(frozen=True, slots=True)
class WebhookResourceDependencies:
    """Collaborators for :class:`GitHubWebhookResource`.

    Attributes
    ----------
    comment_service
        Handles comment events carrying moderation commands.
    installation_service
        Registers repositories from ``installation.created`` events.
    webhook_secret
        Shared secret for signature checks; ``None`` disables them.

    """

    comment_service: CommentCommandService
    installation_service: InstallationService
    webhook_secret: str | None = None


class GitHubWebhookResource:
    """Receive GitHub App webhooks."""

    def __init__(self, dependencies: WebhookResourceDependencies) -> None:
        """Store the services events are routed to."""
        self._deps = dependencies

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /webhooks/github requests.

        Raises
        ------
        InvalidSignatureError
            If a secret is configured and the signature does not verify.
        InvalidPayloadError
            If the event header is missing or the body is malformed.

        """
        body = await req.stream.read()
        secret = self._deps.webhook_secret
        if secret is not None and not verify_signature(
            secret, body, req.get_header(SIGNATURE_HEADER)
        ):
            raise InvalidSignatureError

        event_name = req.get_header(EVENT_HEADER)
        if not event_name:
            msg = f"missing {EVENT_HEADER} header"
            raise InvalidPayloadError(msg)

        try:
            status = await self._route(event_name, body)
        except WebhookPayloadError as exc:
            raise InvalidPayloadError(str(exc), event=event_name) from exc

        resp.media = {"event": event_name, "outcome": status}
        resp.status = HTTPStatus.OK

    async def _route(self, event_name: str, body: bytes) -> str:
        match event_name:
            case WebhookEventName.INSTALLATION:
                installation = parse_installation_event(event_name, body)
                if installation is None:
                    return IGNORED.status
                try:
                    await self._deps.installation_service.handle(installation)
                except ValueError as exc:
                    raise WebhookPayloadError.malformed(event_name, exc) from exc
                return Success.status
            case (
                WebhookEventName.ISSUE_COMMENT
                | WebhookEventName.PULL_REQUEST_REVIEW_COMMENT
            ):
                comment = parse_comment_event(event_name, body)
                if comment is None:
                    return IGNORED.status
                outcome = await self._deps.comment_service.process(comment)
                return outcome.status
            case _:
                log_debug(logger, "Ignoring unhandled webhook event %s", event_name)
                return IGNORED.status
