"""Ban ledger backed by the ``bans`` table.

Each ``(user, repository)`` pair holds at most one ban row, enforced by the
``uq_bans_user_repo`` constraint. Writes read the existing row, decide whether
to keep, update or replace it, and commit in one transaction. A concurrent
writer that wins the race makes the loser's flush fail with
``IntegrityError``; the loser retries against the now-visible row until
``max_write_attempts`` is exhausted.
"""

from __future__ import annotations

import datetime as dt
import typing as typ

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError

from patrol.bans.models import BanInfo
from patrol.common.time import utcnow
from patrol.config import MAX_BAN_DAYS
from patrol.errors import InvalidDurationError, StorageFailureError, UnknownUserError
from patrol.identity import find_user
from patrol.logging import get_logger, log_info, log_warning
from patrol.storage import Ban, User

if typ.TYPE_CHECKING:
    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from patrol.common.time import Clock

logger = get_logger(__name__)

type _BanWriter = typ.Callable[
    [AsyncSession, int, Ban | None, dt.datetime], typ.Awaitable[Ban]
]


def _is_active(row: Ban, now: dt.datetime) -> bool:
    return row.expires_at is None or row.expires_at > now


def _active_clause(now: dt.datetime) -> ColumnElement[bool]:
    return or_(Ban.expires_at.is_(None), Ban.expires_at > now)


def _validate_duration(duration_days: object) -> int:
    if (
        isinstance(duration_days, bool)
        or not isinstance(duration_days, int)
        or duration_days < 1
    ):
        raise InvalidDurationError(duration_days)
    if duration_days > MAX_BAN_DAYS:
        raise InvalidDurationError.too_long(duration_days, MAX_BAN_DAYS)
    return duration_days


async def _insert_fresh(
    session: AsyncSession,
    user_id: int,
    existing: Ban | None,
    *,
    repository_id: int,
    reason: str | None,
    expires_at: dt.datetime | None,
) -> Ban:
    """Insert a new ban row, first deleting an expired row for the pair."""
    if existing is not None:
        await session.delete(existing)
        await session.flush()
    row = Ban(
        user_id=user_id,
        repo_id=repository_id,
        reason=reason or None,
        expires_at=expires_at,
    )
    session.add(row)
    return row


class BanLedger:
    """Create, renew, remove and query repository bans.

    Parameters
    ----------
    session_factory:
        Async session factory for the moderation database.
    clock:
        Callable returning the current aware UTC time. Every expiry decision
        uses one reading of this clock.
    max_write_attempts:
        Attempts made by ``ban`` and ``temp_ban`` when the uniqueness
        constraint rejects a concurrent insert.

    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        clock: Clock = utcnow,
        max_write_attempts: int = 3,
    ) -> None:
        """Configure the ledger with storage, clock and retry budget."""
        if max_write_attempts < 1:
            msg = f"max_write_attempts must be positive, got: {max_write_attempts}"
            raise ValueError(msg)
        self._session_factory = session_factory
        self._clock = clock
        self._max_write_attempts = max_write_attempts

    async def ban(
        self, username: str, repository_id: int, reason: str | None = None
    ) -> BanInfo:
        """Permanently ban ``username`` from the repository.

        An active ban (permanent or temporary) is returned unchanged, so
        re-issuing a ban never alters its reason. When no active ban exists a
        fresh permanent row is written, replacing any expired row.

        Raises
        ------
        UnknownUserError
            If ``username`` has not been resolved to an identity.
        StorageFailureError
            If concurrent writers kept conflicting past the retry budget.

        """

        async def _write(
            session: AsyncSession,
            user_id: int,
            existing: Ban | None,
            now: dt.datetime,
        ) -> Ban:
            if existing is not None and _is_active(existing, now):
                return existing
            row = await _insert_fresh(
                session,
                user_id,
                existing,
                repository_id=repository_id,
                reason=reason,
                expires_at=None,
            )
            log_info(
                logger,
                "Banned %s from repo %d%s",
                username,
                repository_id,
                f" - Reason: {reason}" if reason else "",
            )
            return row

        return await self._write("ban", username, repository_id, _write)

    async def temp_ban(
        self,
        username: str,
        repository_id: int,
        duration_days: int,
        reason: str | None = None,
    ) -> BanInfo:
        """Ban ``username`` until ``now + duration_days``.

        An active ban is renewed in place: its expiry is overwritten with the
        new value (last write wins, so a renewal may shorten the ban) and its
        reason replaced only when ``reason`` is given. Otherwise a fresh row is
        written.

        Raises
        ------
        InvalidDurationError
            If ``duration_days`` is not a positive integer or exceeds
            ``MAX_BAN_DAYS``.
        UnknownUserError
            If ``username`` has not been resolved to an identity.
        StorageFailureError
            If concurrent writers kept conflicting past the retry budget.

        """
        days = _validate_duration(duration_days)

        async def _write(
            session: AsyncSession,
            user_id: int,
            existing: Ban | None,
            now: dt.datetime,
        ) -> Ban:
            expires_at = now + dt.timedelta(days=days)
            if existing is not None and _is_active(existing, now):
                existing.expires_at = expires_at
                if reason:
                    existing.reason = reason
                log_info(
                    logger,
                    "Updated temp ban for %s on repo %d until %s",
                    username,
                    repository_id,
                    expires_at.isoformat(),
                )
                return existing
            row = await _insert_fresh(
                session,
                user_id,
                existing,
                repository_id=repository_id,
                reason=reason,
                expires_at=expires_at,
            )
            log_info(
                logger,
                "Temp banned %s from repo %d until %s%s",
                username,
                repository_id,
                expires_at.isoformat(),
                f" - Reason: {reason}" if reason else "",
            )
            return row

        return await self._write("tempban", username, repository_id, _write)

    async def unban(self, username: str, repository_id: int) -> bool:
        """Delete the ban row for the pair, whether active or expired.

        Returns
        -------
        bool
            ``True`` when a row was deleted.

        Raises
        ------
        UnknownUserError
            If ``username`` has not been resolved to an identity.

        """
        async with self._session_factory() as session, session.begin():
            user = await find_user(session, username)
            if user is None:
                raise UnknownUserError(username)
            result = await session.execute(
                delete(Ban).where(
                    Ban.user_id == user.id,
                    Ban.repo_id == repository_id,
                )
            )
            removed = bool(result.rowcount)

        log_info(logger, "Unbanned %s from repo %d", username, repository_id)
        return removed

    async def is_banned(self, username: str, repository_id: int) -> bool:
        """Return whether ``username`` has an active ban right now."""
        now = self._clock()
        async with self._session_factory() as session:
            ban_id = await session.scalar(
                select(Ban.id)
                .join(User, User.id == Ban.user_id)
                .where(
                    User.username == username,
                    Ban.repo_id == repository_id,
                    _active_clause(now),
                )
                .limit(1)
            )
            return ban_id is not None

    async def get(self, username: str, repository_id: int) -> BanInfo | None:
        """Return the ban row for the pair regardless of expiry."""
        async with self._session_factory() as session:
            row = await session.scalar(
                select(Ban)
                .join(User, User.id == Ban.user_id)
                .where(User.username == username, Ban.repo_id == repository_id)
            )
            return BanInfo.from_row(row, username) if row is not None else None

    async def list_active(self, repository_id: int) -> list[BanInfo]:
        """Return the bans in force right now for the repository."""
        now = self._clock()
        async with self._session_factory() as session:
            rows = await session.execute(
                select(Ban, User.username)
                .join(User, User.id == Ban.user_id)
                .where(Ban.repo_id == repository_id, _active_clause(now))
                .order_by(Ban.created_at, User.username)
            )
            return [BanInfo.from_row(ban, username) for ban, username in rows]

    async def _write(
        self,
        operation: str,
        username: str,
        repository_id: int,
        writer: _BanWriter,
    ) -> BanInfo:
        """Run ``writer`` in a transaction, retrying on uniqueness conflicts."""
        last_error: IntegrityError | None = None
        for attempt in range(1, self._max_write_attempts + 1):
            try:
                return await self._write_once(username, repository_id, writer)
            except IntegrityError as exc:
                last_error = exc
                log_warning(
                    logger,
                    "%s for %s on repo %d conflicted (attempt %d/%d)",
                    operation,
                    username,
                    repository_id,
                    attempt,
                    self._max_write_attempts,
                )
        raise StorageFailureError.conflict_exhausted(
            operation, self._max_write_attempts
        ) from last_error

    async def _write_once(
        self,
        username: str,
        repository_id: int,
        writer: _BanWriter,
    ) -> BanInfo:
        now = self._clock()
        async with self._session_factory() as session, session.begin():
            user = await find_user(session, username)
            if user is None:
                raise UnknownUserError(username)
            existing = await session.scalar(
                select(Ban).where(
                    Ban.user_id == user.id,
                    Ban.repo_id == repository_id,
                )
            )
            row = await writer(session, user.id, existing, now)
            await session.flush()
            return BanInfo.from_row(row, username)
