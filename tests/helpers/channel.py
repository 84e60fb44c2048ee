"""In-memory message channel for asserting posted replies."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from patrol.registry import RepositoryRef


class RecordingChannel:
    """Record ``post_message`` calls, optionally failing after recording."""

    def __init__(self, error: Exception | None = None) -> None:
        self.posted: list[tuple[RepositoryRef, int, str]] = []
        self._error = error

    async def post_message(
        self, repository: RepositoryRef, conversation_id: int, text: str
    ) -> None:
        """Record the reply and raise the configured error, if any."""
        self.posted.append((repository, conversation_id, text))
        if self._error is not None:
            raise self._error
