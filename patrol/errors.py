"""Error taxonomy for moderation commands and ledger operations.

Every error carries a machine-readable :class:`RejectionReason` so the command
dispatcher can turn it into a ``Rejected`` outcome without inspecting
messages. Only :class:`StorageFailureError` represents a system fault; the
other categories are expected and answered with a usage or setup message.
"""

from __future__ import annotations

import enum


class RejectionReason(enum.StrEnum):
    """Machine-readable reasons attached to rejected commands."""

    USER_INPUT = "user_input"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    UNKNOWN_COMMAND = "unknown_command"
    STORAGE_FAILURE = "storage_failure"


class ModerationError(Exception):
    """Base class for moderation errors."""

    reason: RejectionReason = RejectionReason.STORAGE_FAILURE


class UserInputError(ModerationError):
    """Raised for malformed or missing command arguments."""

    reason = RejectionReason.USER_INPUT


class MissingArgumentError(UserInputError):
    """Raised when a required positional argument is absent."""

    def __init__(self, usage: str) -> None:
        """Record the usage line shown to the requester."""
        self.usage = usage
        super().__init__(f"Usage: `{usage}`")


class InvalidDurationError(UserInputError):
    """Raised when a temporary ban duration is not a positive integer."""

    def __init__(
        self, raw: object, message: str = "Days must be a positive number"
    ) -> None:
        """Record the offending duration value."""
        self.raw = raw
        super().__init__(message)

    @classmethod
    def too_long(cls, raw: object, maximum: int) -> InvalidDurationError:
        """Return an error for durations beyond the supported maximum."""
        return cls(raw, f"Days must be at most {maximum}")


class PermissionDeniedError(ModerationError):
    """Raised when the actor's tier does not satisfy a command."""

    reason = RejectionReason.PERMISSION_DENIED

    def __init__(self, command: str, required_tier: str) -> None:
        """Record the command and the tier it requires."""
        self.command = command
        self.required_tier = required_tier
        super().__init__(f"{command} requires tier {required_tier}")


class NotFoundError(ModerationError):
    """Raised when a repository or identity required by an operation is absent."""

    reason = RejectionReason.NOT_FOUND


class UnknownUserError(NotFoundError):
    """Raised when a username has no resolved identity."""

    def __init__(self, username: str) -> None:
        """Initialise with the unresolved username."""
        self.username = username
        super().__init__(f"User {username} not found")


class RepositoryNotRegisteredError(NotFoundError):
    """Raised when a repository has not been registered by an installation."""

    def __init__(self, slug: str) -> None:
        """Initialise with the missing repository slug."""
        self.slug = slug
        super().__init__(f"Repository not registered: {slug}")


class UnknownCommandError(ModerationError):
    """Raised when a command verb is not recognised."""

    reason = RejectionReason.UNKNOWN_COMMAND

    def __init__(self, verb: str) -> None:
        """Initialise with the unrecognised verb."""
        self.verb = verb
        super().__init__(f"Unknown command: {verb}")


class StorageFailureError(ModerationError):
    """Raised when a ledger write cannot be completed."""

    reason = RejectionReason.STORAGE_FAILURE

    @classmethod
    def conflict_exhausted(cls, operation: str, attempts: int) -> StorageFailureError:
        """Return an error for writes that kept hitting uniqueness conflicts."""
        return cls(f"{operation} conflicted after {attempts} attempt(s)")


__all__ = [
    "InvalidDurationError",
    "MissingArgumentError",
    "ModerationError",
    "NotFoundError",
    "PermissionDeniedError",
    "RejectionReason",
    "RepositoryNotRegisteredError",
    "StorageFailureError",
    "UnknownCommandError",
    "UnknownUserError",
    "UserInputError",
]
