"""Turn a comment body into a moderation outcome.

The dispatcher is stateless: every call re-parses the text, re-derives the
actor's tier and talks to the ledgers through their own sessions. Expected
failures surface as ``Rejected`` outcomes; only storage faults are logged with
the exception attached.
"""

from __future__ import annotations

import typing as typ

from sqlalchemy.exc import SQLAlchemyError

from patrol.commands import messages
from patrol.commands.outcome import IGNORED, Outcome, Rejected, Success
from patrol.commands.parser import extract_arguments, parse_command, usage
from patrol.commands.policy import (
    AuthorizationPolicy,
    CommandKind,
    parse_command_kind,
)
from patrol.common.slug import repo_slug
from patrol.config import PatrolConfig
from patrol.errors import (
    MissingArgumentError,
    ModerationError,
    NotFoundError,
    PermissionDeniedError,
    RejectionReason,
    RepositoryNotRegisteredError,
    StorageFailureError,
    UnknownCommandError,
)
from patrol.observability import ModerationEventLogger

if typ.TYPE_CHECKING:
    from patrol.bans import BanLedger
    from patrol.commands.parser import CommandArguments
    from patrol.identity import IdentityResolver
    from patrol.trust import TrustRegistry


def _rejection_message(exc: ModerationError, kind: CommandKind | None) -> str:
    match exc:
        case RepositoryNotRegisteredError():
            return messages.REPOSITORY_NOT_REGISTERED
        case UnknownCommandError(verb=verb):
            return messages.unknown_command(verb)
        case PermissionDeniedError() if kind is not None:
            return messages.permission_denied(kind)
        case NotFoundError() if kind is not None:
            return messages.failure(kind, str(exc))
        case _:
            return f"❌ {exc}"


class CommandDispatcher:
    """Parse, authorize and execute moderation commands.

    Parameters
    ----------
    identity:
        Resolver used to create target identities on first sight.
    trust:
        Trust registry consulted for tiers and mutated by (un)whitelisting.
    bans:
        Ban ledger mutated by ``ban``, ``tempban`` and ``unban``.
    policy:
        Authorization policy; defaults to one backed by ``trust``.
    config:
        Supplies the trigger mention; defaults to :class:`PatrolConfig`.
    event_logger:
        Structured event sink; defaults to :class:`ModerationEventLogger`.

    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        identity: IdentityResolver,
        trust: TrustRegistry,
        bans: BanLedger,
        policy: AuthorizationPolicy | None = None,
        config: PatrolConfig | None = None,
        event_logger: ModerationEventLogger | None = None,
    ) -> None:
        """Wire the dispatcher to its collaborators."""
        self._identity = identity
        self._trust = trust
        self._bans = bans
        self._policy = policy or AuthorizationPolicy(trust)
        self._config = config or PatrolConfig()
        self._events = event_logger or ModerationEventLogger()

    async def handle_command(  # noqa: PLR0913
        self,
        text: str,
        actor_username: str,
        owner_username: str,
        repo_name: str,
        repository_id: int | None,
    ) -> Outcome:
        """Handle one comment body posted by ``actor_username``.

        Parameters
        ----------
        text:
            Raw comment body.
        actor_username:
            Login of the comment author.
        owner_username:
            Login owning the repository; the owner holds the ``OWNER`` tier.
        repo_name:
            Repository name, used for logging.
        repository_id:
            Registered repository identity, or ``None`` when the App was never
            installed on the repository.

        Returns
        -------
        Outcome
            ``Ignored`` without a trigger, otherwise ``Success`` or
            ``Rejected`` carrying the reply text.

        """
        parsed = parse_command(text, self._config.mention)
        if parsed is None:
            return IGNORED

        slug = repo_slug(owner_username, repo_name)
        try:
            if repository_id is None:
                raise RepositoryNotRegisteredError(slug)
            kind = parse_command_kind(parsed.verb)
            if kind is None:
                raise UnknownCommandError(parsed.verb)
            arguments = extract_arguments(kind, parsed.args, self._config.mention)
        except ModerationError as exc:
            return self._reject(
                exc, None, actor=actor_username, slug=slug, verb=parsed.verb
            )

        try:
            await self._policy.ensure_allowed(
                actor_username, owner_username, repository_id, kind
            )
            message = await self._execute(kind, arguments, repository_id)
        except (StorageFailureError, SQLAlchemyError) as exc:
            self._events.log_command_failed(
                actor=actor_username, repo_slug=slug, verb=parsed.verb, exc=exc
            )
            return Rejected(
                reason=RejectionReason.STORAGE_FAILURE,
                message=messages.failure(kind, messages.STORAGE_UNAVAILABLE),
            )
        except ModerationError as exc:
            return self._reject(
                exc, kind, actor=actor_username, slug=slug, verb=parsed.verb
            )

        self._events.log_command_succeeded(
            actor=actor_username,
            repo_slug=slug,
            command=kind,
            target=arguments.target,
        )
        return Success(command=kind, message=message)

    def _reject(
        self,
        exc: ModerationError,
        kind: CommandKind | None,
        *,
        actor: str,
        slug: str,
        verb: str,
    ) -> Rejected:
        self._events.log_command_rejected(
            actor=actor, repo_slug=slug, verb=verb, reason=exc.reason
        )
        return Rejected(reason=exc.reason, message=_rejection_message(exc, kind))

    async def _execute(
        self, kind: CommandKind, arguments: CommandArguments, repository_id: int
    ) -> str:
        target = arguments.target
        match kind:
            case CommandKind.BAN:
                await self._identity.resolve(target)
                ban = await self._bans.ban(target, repository_id, arguments.reason)
                if ban.expires_at is not None:
                    return messages.already_temp_banned(target, ban.expires_at)
                return messages.banned(target, ban.reason)
            case CommandKind.TEMPBAN:
                days = arguments.duration_days
                if days is None:
                    raise MissingArgumentError(usage(kind, self._config.mention))
                await self._identity.resolve(target)
                await self._bans.temp_ban(
                    target, repository_id, days, arguments.reason
                )
                return messages.temp_banned(target, days, arguments.reason)
            case CommandKind.UNBAN:
                if await self._identity.get(target) is not None:
                    await self._bans.unban(target, repository_id)
                return messages.unbanned(target)
            case CommandKind.WHITELIST:
                await self._identity.resolve(target)
                await self._trust.grant(target, repository_id)
                return messages.whitelisted(target)
            case CommandKind.UNWHITELIST:
                await self._trust.revoke(target, repository_id)
                return messages.unwhitelisted(target)
            case _:
                typ.assert_never(kind)
