"""Glue between a normalised comment event, the dispatcher and the reply."""

from __future__ import annotations

import typing as typ

import httpx

from patrol.commands.outcome import Ignored
from patrol.github.errors import GitHubAPIError
from patrol.observability import ModerationEventLogger
from patrol.registry.models import RepositoryRef

if typ.TYPE_CHECKING:
    from patrol.commands.dispatcher import CommandDispatcher
    from patrol.commands.outcome import Outcome
    from patrol.github.events import CommentEvent
    from patrol.registry import RepositoryRegistryService


class MessageChannel(typ.Protocol):
    """Destination for outcome messages."""

    async def post_message(
        self, repository: RepositoryRef, conversation_id: int, text: str
    ) -> None:
        """Post ``text`` into the conversation."""
        ...


class CommentCommandService:
    """Handle comment events end to end.

    The outcome message is posted once per event, including the rejection for
    an unregistered repository. Delivery failures are logged and do not alter
    the outcome, since any moderation change has already been committed.
    """

    def __init__(
        self,
        registry: RepositoryRegistryService,
        dispatcher: CommandDispatcher,
        channel: MessageChannel,
        event_logger: ModerationEventLogger | None = None,
    ) -> None:
        """Store the collaborators used per event."""
        self._registry = registry
        self._dispatcher = dispatcher
        self._channel = channel
        self._events = event_logger or ModerationEventLogger()

    async def process(self, event: CommentEvent) -> Outcome:
        """Dispatch ``event`` and post the resulting message."""
        repository = await self._registry.lookup(event.owner, event.repo_name)
        outcome = await self._dispatcher.handle_command(
            event.body,
            event.actor,
            event.owner,
            event.repo_name,
            repository.id if repository is not None else None,
        )
        if isinstance(outcome, Ignored):
            return outcome

        ref = RepositoryRef(owner=event.owner, name=event.repo_name)
        try:
            await self._channel.post_message(
                ref, event.conversation_id, outcome.message
            )
        except (GitHubAPIError, httpx.HTTPError) as exc:
            self._events.log_delivery_failed(
                repo_slug=ref.slug, conversation_id=event.conversation_id, exc=exc
            )
        return outcome
