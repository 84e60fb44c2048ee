"""Common time utilities."""

from __future__ import annotations

import datetime as dt
import typing as typ

type Clock = typ.Callable[[], dt.datetime]


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp used for expiry checks and DB defaults."""
    return dt.datetime.now(dt.UTC)
