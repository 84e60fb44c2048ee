"""Comment-driven moderation commands.

Usage
-----
::

    from patrol.commands import CommandDispatcher

    dispatcher = CommandDispatcher(identity=identity, trust=trust, bans=ledger)
    outcome = await dispatcher.handle_command(
        "@contribution-patrol tempban @spammer 7 link spam",
        actor_username="octo",
        owner_username="octo",
        repo_name="reef",
        repository_id=repo.id,
    )

"""

from patrol.commands.dispatcher import CommandDispatcher
from patrol.commands.outcome import IGNORED, Ignored, Outcome, Rejected, Success
from patrol.commands.parser import (
    CommandArguments,
    ParsedCommand,
    extract_arguments,
    parse_command,
)
from patrol.commands.policy import (
    AuthorizationPolicy,
    CommandKind,
    Tier,
    authorize,
    required_tier,
)
from patrol.commands.service import CommentCommandService, MessageChannel

__all__ = [
    "IGNORED",
    "AuthorizationPolicy",
    "CommandArguments",
    "CommandDispatcher",
    "CommandKind",
    "CommentCommandService",
    "Ignored",
    "MessageChannel",
    "Outcome",
    "ParsedCommand",
    "Rejected",
    "Success",
    "Tier",
    "authorize",
    "extract_arguments",
    "parse_command",
    "required_tier",
]
