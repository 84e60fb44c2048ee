"""Data transfer objects for ban rows."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt

    from patrol.storage import Ban


@dataclasses.dataclass(slots=True, frozen=True)
class BanInfo:
    """Snapshot of a ban row joined with the banned username."""

    id: int
    username: str
    repository_id: int
    reason: str | None
    created_at: dt.datetime
    expires_at: dt.datetime | None

    @property
    def is_permanent(self) -> bool:
        """Return whether the ban has no expiry."""
        return self.expires_at is None

    @classmethod
    def from_row(cls, row: Ban, username: str) -> BanInfo:
        """Build the DTO from a persisted ``Ban`` row."""
        return cls(
            id=row.id,
            username=username,
            repository_id=row.repo_id,
            reason=row.reason,
            created_at=row.created_at,
            expires_at=row.expires_at,
        )
