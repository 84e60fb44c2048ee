"""Ban ledger: one permanent or time-limited ban per user and repository.

Expiry is evaluated lazily on every read; rows are never swept in the
background. A ban is active while ``expires_at`` is NULL or strictly in the
future.

Usage
-----
::

    from patrol.bans import BanLedger

    ledger = BanLedger(session_factory)
    await ledger.temp_ban("spammer", repo.id, 7, reason="link spam")
    assert await ledger.is_banned("spammer", repo.id)

"""

from patrol.bans.models import BanInfo
from patrol.bans.service import BanLedger

__all__ = ["BanInfo", "BanLedger"]
