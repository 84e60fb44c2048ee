"""Trigger detection and argument extraction for comment commands.

A command follows the mention token::

    @contribution-patrol tempban @spammer 7 link spam

The verb is the first token after the mention, even when it starts a new
line. The remaining whitespace-separated tokens on the verb's line are
positional arguments. The mention only triggers when followed by whitespace
or the end of the text, so ``@contribution-patrol-bot`` is not a trigger.
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from patrol.commands.policy import CommandKind
from patrol.config import DEFAULT_MENTION, MAX_BAN_DAYS
from patrol.errors import InvalidDurationError, MissingArgumentError

_USAGE: dict[CommandKind, str] = {
    CommandKind.BAN: "ban <username> [reason]",
    CommandKind.TEMPBAN: "tempban <username> <days> [reason]",
    CommandKind.UNBAN: "unban <username>",
    CommandKind.WHITELIST: "whitelist <username>",
    CommandKind.UNWHITELIST: "unwhitelist <username>",
}


@dc.dataclass(frozen=True, slots=True)
class ParsedCommand:
    """Verb and raw positional arguments found after the mention."""

    verb: str
    args: tuple[str, ...]


@dc.dataclass(frozen=True, slots=True)
class CommandArguments:
    """Validated arguments for one command."""

    target: str
    duration_days: int | None = None
    reason: str | None = None


def _mention_pattern(mention: str) -> re.Pattern[str]:
    return re.compile(re.escape(mention) + r"(?!\S)")


def parse_command(text: str, mention: str = DEFAULT_MENTION) -> ParsedCommand | None:
    """Extract the command following ``mention`` in ``text``.

    Returns
    -------
    ParsedCommand | None
        The lower-cased verb and its arguments, or ``None`` when the mention
        is absent or not followed by a verb.

    Examples
    --------
    >>> parse_command("@contribution-patrol BAN spammer flooding issues")
    ParsedCommand(verb='ban', args=('spammer', 'flooding', 'issues'))
    >>> parse_command("thanks @contribution-patrol") is None
    True

    """
    match = _mention_pattern(mention).search(text)
    if match is None:
        return None

    command_line = text[match.end() :].lstrip().split("\n", 1)[0]
    tokens = command_line.split()
    if not tokens:
        return None
    return ParsedCommand(verb=tokens[0].lower(), args=tuple(tokens[1:]))


def normalize_username(raw: str) -> str:
    """Strip one leading ``@`` from a username argument."""
    return raw.removeprefix("@")


def command_syntax(kind: CommandKind) -> str:
    """Return the argument syntax for ``kind`` without the mention."""
    return _USAGE[kind]


def usage(kind: CommandKind, mention: str = DEFAULT_MENTION) -> str:
    """Return the usage line for ``kind``."""
    return f"{mention} {command_syntax(kind)}"


def parse_duration(raw: str) -> int:
    """Parse a ban duration in days.

    Raises
    ------
    InvalidDurationError
        If ``raw`` is not a run of ASCII digits, is zero, or exceeds
        ``MAX_BAN_DAYS``.

    """
    if not (raw.isascii() and raw.isdigit()):
        raise InvalidDurationError(raw)
    days = int(raw)
    if days <= 0:
        raise InvalidDurationError(raw)
    if days > MAX_BAN_DAYS:
        raise InvalidDurationError.too_long(raw, MAX_BAN_DAYS)
    return days


def _require_target(
    kind: CommandKind, args: tuple[str, ...], mention: str
) -> str:
    target = normalize_username(args[0]) if args else ""
    if not target:
        raise MissingArgumentError(usage(kind, mention))
    return target


def extract_arguments(
    kind: CommandKind,
    args: tuple[str, ...],
    mention: str = DEFAULT_MENTION,
) -> CommandArguments:
    """Validate ``args`` for ``kind``.

    Raises
    ------
    MissingArgumentError
        If the target (or the ``tempban`` duration) is missing.
    InvalidDurationError
        If the ``tempban`` duration is not a positive integer.

    """
    target = _require_target(kind, args, mention)
    match kind:
        case CommandKind.BAN:
            return CommandArguments(target=target, reason=" ".join(args[1:]) or None)
        case CommandKind.TEMPBAN:
            if len(args) < 2:  # noqa: PLR2004 - target and days
                raise MissingArgumentError(usage(kind, mention))
            return CommandArguments(
                target=target,
                duration_days=parse_duration(args[1]),
                reason=" ".join(args[2:]) or None,
            )
        case CommandKind.UNBAN | CommandKind.WHITELIST | CommandKind.UNWHITELIST:
            return CommandArguments(target=target)
        case _:
            typ.assert_never(kind)
