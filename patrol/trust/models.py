"""Data transfer objects for trust grants."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt


@dataclasses.dataclass(slots=True, frozen=True)
class TrustedUser:
    """Whitelisted username and the moment the grant was recorded."""

    username: str
    granted_at: dt.datetime
