"""Race-safe resolution of usernames to internal user identities."""

from __future__ import annotations

import typing as typ

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from patrol.errors import StorageFailureError
from patrol.identity.models import UserInfo
from patrol.logging import get_logger, log_info
from patrol.storage import User

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = get_logger(__name__)


async def find_user(session: AsyncSession, username: str) -> User | None:
    """Return the ``User`` row for ``username`` within an open session."""
    return await session.scalar(select(User).where(User.username == username))


class IdentityResolver:
    """Resolve GitHub logins to ``User`` rows, creating them lazily.

    Concurrent first-sight resolutions of the same login converge on a single
    row: the unique constraint on ``users.username`` rejects the losing insert,
    which is rolled back before the winner is fetched.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Store the session factory used for identity lookups."""
        self._session_factory = session_factory

    async def get(self, username: str) -> UserInfo | None:
        """Return the identity for ``username`` without creating one."""
        async with self._session_factory() as session:
            user = await find_user(session, username)
            return UserInfo.from_row(user) if user is not None else None

    async def resolve(self, username: str) -> UserInfo:
        """Return the identity for ``username``, inserting it when unseen.

        Raises
        ------
        StorageFailureError
            If the insert conflicted but no existing row could be loaded.

        """
        async with self._session_factory() as session:
            existing = await find_user(session, username)
            if existing is not None:
                return UserInfo.from_row(existing)

            user = User(username=username)
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                winner = await find_user(session, username)
                if winner is None:
                    raise StorageFailureError.conflict_exhausted(
                        "resolve user", 1
                    ) from exc
                return UserInfo.from_row(winner)

            await session.refresh(user)
            log_info(logger, "Created user: %s (id=%d)", username, user.id)
            return UserInfo.from_row(user)
