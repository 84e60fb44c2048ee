"""Webhook exceptions and the Falcon error handlers that map them to HTTP.

Usage
-----
Register error handlers on the Falcon app::

    app.add_error_handler(InvalidSignatureError, handle_invalid_signature)
    app.add_error_handler(InvalidPayloadError, handle_invalid_payload)

"""

from __future__ import annotations

import typing as typ

import falcon

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = [
    "InvalidPayloadError",
    "InvalidSignatureError",
    "handle_invalid_payload",
    "handle_invalid_signature",
]


class InvalidSignatureError(Exception):
    """Raised when ``X-Hub-Signature-256`` is missing or does not verify."""

    def __init__(self) -> None:
        """Initialise with a fixed message that leaks nothing about the secret."""
        super().__init__("Webhook signature verification failed.")


class InvalidPayloadError(Exception):
    """Raised for webhook requests that should map to HTTP 400.

    Attributes
    ----------
    reason
        Human-readable description of the problem.
    event
        ``X-GitHub-Event`` value, when one was sent.

    """

    def __init__(self, reason: str, *, event: str | None = None) -> None:
        """Initialise with a reason and the optional event name."""
        self.reason = reason
        self.event = event
        super().__init__(reason)


async def handle_invalid_signature(
    _req: Request,
    resp: Response,
    ex: InvalidSignatureError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidSignatureError`` to an HTTP 401 JSON response."""
    resp.status = falcon.HTTP_401
    resp.media = {"title": "Invalid signature", "description": str(ex)}


async def handle_invalid_payload(
    _req: Request,
    resp: Response,
    ex: InvalidPayloadError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidPayloadError`` to an HTTP 400 JSON response.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        The exception carrying the reason and optional event name.
    _params
        URI template parameters (unused).

    """
    resp.status = falcon.HTTP_400
    media: dict[str, str] = {"title": "Invalid payload", "description": ex.reason}
    if ex.event is not None:
        media["event"] = ex.event
    resp.media = media
