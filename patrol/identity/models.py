"""Data transfer objects for resolved identities."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt

    from patrol.storage import User


@dataclasses.dataclass(slots=True, frozen=True)
class UserInfo:
    """Resolved GitHub account."""

    id: int
    username: str
    created_at: dt.datetime

    @classmethod
    def from_row(cls, row: User) -> UserInfo:
        """Build the DTO from a persisted ``User`` row."""
        return cls(id=row.id, username=row.username, created_at=row.created_at)
