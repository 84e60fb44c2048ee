"""Trust registry backed by the ``trusted_users`` table."""

from __future__ import annotations

import typing as typ

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from patrol.errors import StorageFailureError, UnknownUserError
from patrol.identity import find_user
from patrol.logging import get_logger, log_info
from patrol.storage import TrustGrant, User
from patrol.trust.models import TrustedUser

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = get_logger(__name__)


async def _find_grant(
    session: AsyncSession, user_id: int, repository_id: int
) -> TrustGrant | None:
    return await session.scalar(
        select(TrustGrant).where(
            TrustGrant.user_id == user_id,
            TrustGrant.repo_id == repository_id,
        )
    )


class TrustRegistry:
    """Maintain the set of trusted usernames per repository."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Store the session factory used for trust operations."""
        self._session_factory = session_factory

    async def grant(self, username: str, repository_id: int) -> TrustedUser:
        """Trust ``username`` for the repository; a no-op when already trusted.

        Raises
        ------
        UnknownUserError
            If ``username`` has not been resolved to an identity.
        StorageFailureError
            If the insert conflicted but no existing grant could be loaded.

        """
        async with self._session_factory() as session:
            user = await find_user(session, username)
            if user is None:
                raise UnknownUserError(username)
            user_id = user.id

            existing = await _find_grant(session, user_id, repository_id)
            if existing is not None:
                return TrustedUser(username=username, granted_at=existing.created_at)

            grant = TrustGrant(user_id=user_id, repo_id=repository_id)
            session.add(grant)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                winner = await _find_grant(session, user_id, repository_id)
                if winner is None:
                    raise StorageFailureError.conflict_exhausted(
                        "grant trust", 1
                    ) from exc
                return TrustedUser(username=username, granted_at=winner.created_at)

            await session.refresh(grant)
            log_info(
                logger,
                "Added %s to trusted users for repo %d",
                username,
                repository_id,
            )
            return TrustedUser(username=username, granted_at=grant.created_at)

    async def revoke(self, username: str, repository_id: int) -> bool:
        """Remove the grant for ``username`` if present.

        Returns
        -------
        bool
            ``True`` when a grant row was deleted. Unknown users and missing
            grants both return ``False``.

        """
        async with self._session_factory() as session, session.begin():
            user = await find_user(session, username)
            if user is None:
                return False
            result = await session.execute(
                delete(TrustGrant).where(
                    TrustGrant.user_id == user.id,
                    TrustGrant.repo_id == repository_id,
                )
            )
            removed = bool(result.rowcount)

        if removed:
            log_info(
                logger,
                "Removed %s from trusted users for repo %d",
                username,
                repository_id,
            )
        return removed

    async def is_trusted(self, username: str, repository_id: int) -> bool:
        """Return whether ``username`` holds a grant for the repository."""
        async with self._session_factory() as session:
            grant_id = await session.scalar(
                select(TrustGrant.id)
                .join(User, User.id == TrustGrant.user_id)
                .where(User.username == username, TrustGrant.repo_id == repository_id)
                .limit(1)
            )
            return grant_id is not None

    async def list_trusted(self, repository_id: int) -> list[TrustedUser]:
        """Return every trusted user for the repository, ordered by username."""
        async with self._session_factory() as session:
            rows = await session.execute(
                select(User.username, TrustGrant.created_at)
                .select_from(TrustGrant)
                .join(User, User.id == TrustGrant.user_id)
                .where(TrustGrant.repo_id == repository_id)
                .order_by(User.username)
            )
            return [
                TrustedUser(username=username, granted_at=granted_at)
                for username, granted_at in rows
            ]
