"""Contribution patrol runtime entrypoint.

This module provides the ASGI application factory served by Granian. It
delegates to :func:`patrol.api.app.create_app` while keeping the
``patrol.runtime:create_app`` entrypoint stable.

When ``PATROL_DATABASE_URL`` is set, the runtime builds the moderation
services and a GitHub comment client so the app accepts webhooks. Otherwise
it starts in health-only mode.

Configuration is driven by environment variables:

- ``PATROL_HOST``: Bind address (default ``0.0.0.0``)
- ``PATROL_PORT``: Listen port (default ``8080``)
- ``PATROL_LOG_LEVEL``: Log level (default ``INFO``)
- ``PATROL_DATABASE_URL``: Database connection URL (optional; enables the
  webhook endpoint when set)
- ``PATROL_GITHUB_TOKEN``: Token used to post replies (required with
  ``PATROL_DATABASE_URL``)
- ``PATROL_WEBHOOK_SECRET``: Shared secret for signature checks (optional)

Run the service directly with ``python -m patrol.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from patrol.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid PATROL_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def create_app() -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    Raises
    ------
    GitHubConfigError
        If ``PATROL_DATABASE_URL`` is set without ``PATROL_GITHUB_TOKEN``.

    """
    from patrol.api.app import create_app as _create_api_app

    database_url = os.environ.get("PATROL_DATABASE_URL")

    if database_url is None:
        return _create_api_app()

    from sqlalchemy.ext.asyncio import async_sessionmaker

    from patrol.api.factory import build_app_dependencies
    from patrol.github import GitHubCommentClient, GitHubRestConfig
    from patrol.storage import create_storage_engine

    engine = create_storage_engine(database_url)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    channel = GitHubCommentClient(GitHubRestConfig.from_env())
    return _create_api_app(build_app_dependencies(session_factory, channel=channel))


def main() -> None:
    """Start the contribution patrol server using Granian.

    Reads ``PATROL_HOST``, ``PATROL_PORT``, and ``PATROL_LOG_LEVEL`` from the
    environment and starts the ASGI server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("PATROL_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port_str = os.environ.get("PATROL_PORT", "8080")
    port = _parse_port(port_str)
    log_level_str = os.environ.get("PATROL_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid PATROL_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting contribution patrol on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "patrol.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
