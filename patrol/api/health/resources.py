"""Health probe resources for liveness and readiness checks.

These resources are stateless and never touch the moderation database. They
are registered whether or not the webhook endpoint is enabled.
"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource returning ``{"status": "ready"}``.

    ``webhooks_enabled`` reports whether the app was built with moderation
    services, which lets a deployment notice a missing database URL.
    """

    def __init__(self, *, webhooks_enabled: bool = False) -> None:
        """Record whether the webhook endpoint is registered."""
        self._webhooks_enabled = webhooks_enabled

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests."""
        resp.media = {"status": "ready", "webhooks": self._webhooks_enabled}
        resp.status = HTTPStatus.OK
