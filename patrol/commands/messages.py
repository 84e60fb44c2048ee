"""Comment text posted back to the conversation for each outcome."""

from __future__ import annotations

import typing as typ

from patrol.commands.parser import command_syntax
from patrol.commands.policy import CommandKind, Tier, required_tier

if typ.TYPE_CHECKING:
    import datetime as dt

REPOSITORY_NOT_REGISTERED = "❌ Repository not registered. Please reinstall the app."
STORAGE_UNAVAILABLE = "the moderation store is unavailable, please try again later"

_DESCRIPTIONS: dict[CommandKind, str] = {
    CommandKind.BAN: "Permanently ban a user (maintainer/whitelist)",
    CommandKind.TEMPBAN: "Temporarily ban a user (maintainer/whitelist)",
    CommandKind.UNBAN: "Unban a user (maintainer/whitelist)",
    CommandKind.WHITELIST: "Add user to whitelist (maintainer only)",
    CommandKind.UNWHITELIST: "Remove user from whitelist (maintainer only)",
}

_FAILURE_VERBS: dict[CommandKind, str] = {
    CommandKind.BAN: "ban",
    CommandKind.TEMPBAN: "temp ban",
    CommandKind.UNBAN: "unban",
    CommandKind.WHITELIST: "whitelist",
    CommandKind.UNWHITELIST: "unwhitelist",
}


def _reason_suffix(reason: str | None) -> str:
    return f"\nReason: {reason}" if reason else ""


def unknown_command(verb: str) -> str:
    """Return the reply listing every recognised command."""
    lines = [
        f"- `{command_syntax(kind)}` - {_DESCRIPTIONS[kind]}" for kind in CommandKind
    ]
    return f"❌ Unknown command: `{verb}`\n\nAvailable commands:\n" + "\n".join(lines)


def permission_denied(kind: CommandKind) -> str:
    """Return the reply naming the tier ``kind`` requires."""
    if required_tier(kind) is Tier.OWNER:
        return f"❌ Only repository maintainers can use the {kind} command."
    return (
        "❌ You must be a repository maintainer or whitelisted user "
        "to use moderation commands."
    )


def failure(kind: CommandKind, detail: str) -> str:
    """Return the reply for an operation that could not be completed."""
    return f"❌ Failed to {_FAILURE_VERBS[kind]} user: {detail}"


def banned(target: str, reason: str | None) -> str:
    """Reply for a permanent ban."""
    return (
        f"✅ User @{target} has been permanently banned from this repository."
        f"{_reason_suffix(reason)}"
    )


def already_temp_banned(target: str, expires_at: dt.datetime) -> str:
    """Reply when ``ban`` finds an active temporary ban left in place."""
    return (
        f"✅ User @{target} is already banned from this repository until "
        f"{expires_at:%Y-%m-%d %H:%M} UTC."
    )


def temp_banned(target: str, days: int, reason: str | None) -> str:
    """Reply for a temporary ban or its renewal."""
    return (
        f"✅ User @{target} has been temporarily banned for {days} day(s)."
        f"{_reason_suffix(reason)}"
    )


def unbanned(target: str) -> str:
    """Reply for ``unban``."""
    return f"✅ User @{target} has been unbanned from this repository."


def whitelisted(target: str) -> str:
    """Reply for ``whitelist``."""
    return (
        f"✅ User @{target} has been added to the whitelist and can now use "
        "moderation commands."
    )


def unwhitelisted(target: str) -> str:
    """Reply for ``unwhitelist``."""
    return f"✅ User @{target} has been removed from the whitelist."
