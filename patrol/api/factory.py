"""Assemble the moderation services behind the webhook endpoint.

Usage
-----
Build dependencies for the API layer::

    from patrol.api.factory import build_app_dependencies

    deps = build_app_dependencies(session_factory, channel=comment_client)
    app = create_app(deps)

"""

from __future__ import annotations

import typing as typ

from patrol.api.app import AppDependencies
from patrol.bans import BanLedger
from patrol.commands import CommandDispatcher, CommentCommandService
from patrol.config import PatrolConfig
from patrol.identity import IdentityResolver
from patrol.observability import ModerationEventLogger
from patrol.registry import InstallationService, RepositoryRegistryService
from patrol.trust import TrustRegistry

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from patrol.commands import MessageChannel

__all__ = ["build_app_dependencies"]


def build_app_dependencies(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    channel: MessageChannel,
    config: PatrolConfig | None = None,
) -> AppDependencies:
    """Build the comment and installation services over one session factory.

    Parameters
    ----------
    session_factory
        Async session factory for the moderation database.
    channel
        Destination for outcome messages, usually a GitHub comment client.
    config
        Patrol configuration; read from the environment when omitted.

    Returns
    -------
    AppDependencies
        Dependencies that enable ``POST /webhooks/github``.

    """
    config = config or PatrolConfig.from_env()
    event_logger = ModerationEventLogger()
    identity = IdentityResolver(session_factory)
    registry = RepositoryRegistryService(session_factory)
    trust = TrustRegistry(session_factory)
    bans = BanLedger(session_factory, max_write_attempts=config.max_write_attempts)
    dispatcher = CommandDispatcher(
        identity=identity,
        trust=trust,
        bans=bans,
        config=config,
        event_logger=event_logger,
    )
    return AppDependencies(
        comment_service=CommentCommandService(
            registry, dispatcher, channel, event_logger
        ),
        installation_service=InstallationService(identity, registry),
        config=config,
    )
