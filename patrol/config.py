"""Configuration for command handling and ledger writes.

Usage
-----
Create a configuration with defaults:

>>> config = PatrolConfig()
>>> config.mention
'@contribution-patrol'

Or override individual settings:

>>> PatrolConfig(max_write_attempts=5).max_write_attempts
5

Deployments load ``PATROL_*`` environment variables with
:meth:`PatrolConfig.from_env`.

"""

from __future__ import annotations

import dataclasses as dc
import os

DEFAULT_MENTION = "@contribution-patrol"

# Upper bound on temporary ban durations (roughly a century).
MAX_BAN_DAYS = 36_500


@dc.dataclass(frozen=True, slots=True)
class PatrolConfig:
    """Settings shared by the dispatcher, the ledgers and the webhook surface.

    Attributes
    ----------
    mention
        Trigger token that activates command parsing in comment bodies.
    max_write_attempts
        Attempts made by race-prone ledger writes before reporting a storage
        failure. Conflicts on the ``(user, repository)`` uniqueness constraint
        trigger a retry.
    webhook_secret
        Shared secret used to verify ``X-Hub-Signature-256``. When ``None``,
        signatures are not checked.

    """

    mention: str = DEFAULT_MENTION
    max_write_attempts: int = 3
    webhook_secret: str | None = None

    @staticmethod
    def _parse_positive_int(env_var: str, default: int) -> int:
        """Read a positive integer env var, falling back to a default."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            msg = f"{env_var} must be an integer, got: {raw!r}"
            raise ValueError(msg) from exc
        if value < 1:
            msg = f"{env_var} must be positive, got: {value}"
            raise ValueError(msg)
        return value

    @classmethod
    def from_env(cls) -> PatrolConfig:
        """Create configuration from environment variables.

        Reads ``PATROL_MENTION``, ``PATROL_MAX_WRITE_ATTEMPTS`` and
        ``PATROL_WEBHOOK_SECRET``. Blank values fall back to the defaults.

        Raises
        ------
        ValueError
            If ``PATROL_MAX_WRITE_ATTEMPTS`` is not a positive integer.

        """
        mention = os.environ.get("PATROL_MENTION", "").strip() or DEFAULT_MENTION
        secret = os.environ.get("PATROL_WEBHOOK_SECRET", "").strip() or None
        return cls(
            mention=mention,
            max_write_attempts=cls._parse_positive_int("PATROL_MAX_WRITE_ATTEMPTS", 3),
            webhook_secret=secret,
        )
