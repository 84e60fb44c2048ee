"""Repository registry service backed by the ``repositories`` table."""

from __future__ import annotations

import typing as typ

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from patrol.common.slug import parse_repo_slug, repo_slug
from patrol.errors import StorageFailureError
from patrol.logging import get_logger, log_info
from patrol.registry.models import RepositoryInfo
from patrol.storage import Repository

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = get_logger(__name__)


async def _find(session: AsyncSession, owner: str, name: str) -> Repository | None:
    return await session.scalar(
        select(Repository).where(
            Repository.owner_username == owner,
            Repository.repo_name == name,
        )
    )


class RepositoryRegistryService:
    """Maps ``(owner, name)`` pairs to registered repository identities.

    Parameters
    ----------
    session_factory:
        Async session factory for the moderation database.

    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Configure the service with its session factory."""
        self._session_factory = session_factory

    async def lookup(self, owner: str, name: str) -> RepositoryInfo | None:
        """Return the registered repository for ``owner/name``, if any.

        Parameters
        ----------
        owner:
            GitHub login of the repository owner.
        name:
            Repository name.

        Returns
        -------
        RepositoryInfo | None
            Repository identity, or ``None`` when the App was never installed
            on it.

        """
        async with self._session_factory() as session:
            repo = await _find(session, owner, name)
            return RepositoryInfo.from_row(repo) if repo is not None else None

    async def get_by_slug(self, slug: str) -> RepositoryInfo | None:
        """Look up a repository by ``owner/name`` slug.

        Malformed slugs return ``None`` rather than raising.
        """
        try:
            owner, name = parse_repo_slug(slug)
        except ValueError:
            return None
        return await self.lookup(owner, name)

    async def register(self, owner: str, name: str) -> RepositoryInfo:
        """Create the repository row if it does not exist and return it.

        Concurrent registrations of the same pair converge on one row.

        Raises
        ------
        StorageFailureError
            If the insert conflicted but no existing row could be loaded.

        """
        slug = repo_slug(owner, name)
        async with self._session_factory() as session:
            existing = await _find(session, owner, name)
            if existing is not None:
                log_info(
                    logger, "Repository already exists: %s (id=%d)", slug, existing.id
                )
                return RepositoryInfo.from_row(existing)

            repo = Repository(owner_username=owner, repo_name=name)
            session.add(repo)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                winner = await _find(session, owner, name)
                if winner is None:
                    raise StorageFailureError.conflict_exhausted(
                        "register repository", 1
                    ) from exc
                return RepositoryInfo.from_row(winner)

            await session.refresh(repo)
            log_info(logger, "Created repository: %s (id=%d)", slug, repo.id)
            return RepositoryInfo.from_row(repo)

    async def register_many(
        self, slugs: cabc.Iterable[str]
    ) -> list[RepositoryInfo]:
        """Register every ``owner/name`` slug and return them in input order.

        Raises
        ------
        ValueError
            If any slug is not in ``owner/name`` format.

        """
        registered: list[RepositoryInfo] = []
        for slug in slugs:
            owner, name = parse_repo_slug(slug)
            registered.append(await self.register(owner, name))
        return registered
