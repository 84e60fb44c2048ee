"""Application factory for the contribution patrol Falcon ASGI app.

Usage
-----
Create a health-only app (no database)::

    app = create_app()

Create a full app with the webhook endpoint::

    from patrol.api.app import AppDependencies, create_app

    deps = AppDependencies(
        comment_service=comment_service,
        installation_service=installation_service,
    )
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from patrol.api.errors import (
    InvalidPayloadError,
    InvalidSignatureError,
    handle_invalid_payload,
    handle_invalid_signature,
)
from patrol.api.health.resources import HealthResource, ReadyResource
from patrol.config import PatrolConfig

if typ.TYPE_CHECKING:
    from patrol.commands.service import CommentCommandService
    from patrol.registry import InstallationService

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    When both services are provided the application registers
    ``POST /webhooks/github``. Otherwise only health endpoints exist.

    Attributes
    ----------
    comment_service
        Handles comment events carrying moderation commands.
    installation_service
        Registers repositories from installation events.
    config
        Supplies the webhook secret.

    """

    comment_service: CommentCommandService | None = None
    installation_service: InstallationService | None = None
    config: PatrolConfig = dc.field(default_factory=PatrolConfig)


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None`` or incomplete, only
        ``/health`` and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    app = falcon.asgi.App()

    comment_service = dependencies.comment_service if dependencies else None
    installation_service = (
        dependencies.installation_service if dependencies else None
    )
    webhooks_enabled = comment_service is not None and installation_service is not None

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(webhooks_enabled=webhooks_enabled))

    if (
        dependencies is not None
        and comment_service is not None
        and installation_service is not None
    ):
        from patrol.api.webhooks.resources import (
            GitHubWebhookResource,
            WebhookResourceDependencies,
        )

        app.add_route(
            "/webhooks/github",
            GitHubWebhookResource(
                WebhookResourceDependencies(
                    comment_service=comment_service,
                    installation_service=installation_service,
                    webhook_secret=dependencies.config.webhook_secret,
                )
            ),
        )

    app.add_error_handler(InvalidSignatureError, handle_invalid_signature)
    app.add_error_handler(InvalidPayloadError, handle_invalid_payload)

    return app
