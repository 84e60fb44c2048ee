"""Deterministic clock for expiry-sensitive tests."""

from __future__ import annotations

import datetime as dt

NOW = dt.datetime(2025, 3, 1, 12, 0, tzinfo=dt.UTC)


class FakeClock:
    """Settable clock; returns ``now`` until moved."""

    def __init__(self, now: dt.datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, delta: dt.timedelta) -> None:
        """Move the clock forward by ``delta``."""
        self.now += delta
