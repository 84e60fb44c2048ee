"""Permission tiers and the command authorization table."""

from __future__ import annotations

import enum
import typing as typ

from patrol.errors import PermissionDeniedError

if typ.TYPE_CHECKING:
    from patrol.trust import TrustRegistry


class Tier(enum.IntEnum):
    """Actor permission level for one repository, strictly ordered."""

    NONE = 0
    TRUSTED = 1
    OWNER = 2


class CommandKind(enum.StrEnum):
    """Recognised command verbs."""

    BAN = "ban"
    TEMPBAN = "tempban"
    UNBAN = "unban"
    WHITELIST = "whitelist"
    UNWHITELIST = "unwhitelist"


def parse_command_kind(verb: str) -> CommandKind | None:
    """Return the command for ``verb`` (case-insensitive), or ``None``."""
    try:
        return CommandKind(verb.lower())
    except ValueError:
        return None


def required_tier(kind: CommandKind) -> Tier:
    """Return the minimum tier allowed to run ``kind``."""
    match kind:
        case CommandKind.BAN | CommandKind.TEMPBAN | CommandKind.UNBAN:
            return Tier.TRUSTED
        case CommandKind.WHITELIST | CommandKind.UNWHITELIST:
            return Tier.OWNER
        case _:
            typ.assert_never(kind)


def authorize(tier: Tier, command: CommandKind | str) -> bool:
    """Return whether ``tier`` satisfies the requirement for ``command``.

    Unrecognised commands are always denied.

    Examples
    --------
    >>> authorize(Tier.OWNER, "whitelist")
    True
    >>> authorize(Tier.TRUSTED, "whitelist")
    False

    """
    kind = command if isinstance(command, CommandKind) else parse_command_kind(command)
    if kind is None:
        return False
    return tier >= required_tier(kind)


class AuthorizationPolicy:
    """Derive an actor's tier and enforce the command table.

    Tiers are recomputed on every call; repository context differs between
    invocations, so no decision is cached.
    """

    def __init__(self, trust: TrustRegistry) -> None:
        """Store the trust registry consulted for non-owners."""
        self._trust = trust

    async def resolve_tier(
        self, actor: str, owner: str, repository_id: int
    ) -> Tier:
        """Return ``OWNER``, ``TRUSTED`` or ``NONE`` for ``actor``."""
        if actor == owner:
            return Tier.OWNER
        if await self._trust.is_trusted(actor, repository_id):
            return Tier.TRUSTED
        return Tier.NONE

    async def ensure_allowed(
        self, actor: str, owner: str, repository_id: int, kind: CommandKind
    ) -> Tier:
        """Return the actor's tier, raising when it is insufficient for ``kind``.

        Raises
        ------
        PermissionDeniedError
            If the actor's tier is below ``required_tier(kind)``.

        """
        tier = await self.resolve_tier(actor, owner, repository_id)
        if not authorize(tier, kind):
            raise PermissionDeniedError(kind.value, required_tier(kind).name)
        return tier
