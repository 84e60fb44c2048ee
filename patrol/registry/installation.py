"""Bookkeeping for App installations: the installer and its repositories."""

from __future__ import annotations

import typing as typ

from patrol.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    from patrol.github.events import InstallationEvent
    from patrol.identity import IdentityResolver
    from patrol.registry.models import RepositoryInfo
    from patrol.registry.service import RepositoryRegistryService

logger = get_logger(__name__)


class InstallationService:
    """Register the installing account and every repository it selected."""

    def __init__(
        self,
        identity: IdentityResolver,
        registry: RepositoryRegistryService,
    ) -> None:
        """Store the collaborators used to record an installation."""
        self._identity = identity
        self._registry = registry

    async def handle(self, event: InstallationEvent) -> list[RepositoryInfo]:
        """Resolve the sender and register the installation's repositories."""
        await self._identity.resolve(event.sender)
        repositories = await self._registry.register_many(event.repositories)
        log_info(
            logger,
            "Installation created by %s for %d repositories",
            event.sender,
            len(repositories),
        )
        return repositories
