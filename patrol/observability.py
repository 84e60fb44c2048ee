"""Structured log events for moderation command handling.

Usage
-----
>>> event_logger = ModerationEventLogger()
>>> event_logger.log_command_rejected(
...     actor="octocat",
...     repo_slug="octo/reef",
...     verb="ban",
...     reason=RejectionReason.PERMISSION_DENIED,
... )

"""

from __future__ import annotations

import enum

from sqlalchemy.exc import (
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)

from patrol.errors import RejectionReason, StorageFailureError
from patrol.logging import get_logger, log_exception, log_info

logger = get_logger(__name__)


class ModerationEventType(enum.StrEnum):
    """Structured log event types for command handling."""

    COMMAND_SUCCEEDED = "moderation.command.succeeded"
    COMMAND_REJECTED = "moderation.command.rejected"
    COMMAND_FAILED = "moderation.command.failed"
    DELIVERY_FAILED = "moderation.delivery.failed"


class ErrorCategory(enum.StrEnum):
    """Categories for storage failures in alerts."""

    DATABASE_CONNECTIVITY = "database_connectivity"
    WRITE_CONFLICT = "write_conflict"
    DATA_INTEGRITY = "data_integrity"
    DATABASE_ERROR = "database_error"
    DELIVERY = "delivery"
    UNKNOWN = "unknown"


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (StorageFailureError, ErrorCategory.WRITE_CONFLICT),
    (OperationalError, ErrorCategory.DATABASE_CONNECTIVITY),
    (InterfaceError, ErrorCategory.DATABASE_CONNECTIVITY),
    (IntegrityError, ErrorCategory.DATA_INTEGRITY),
    (SQLAlchemyError, ErrorCategory.DATABASE_ERROR),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize a failure for alert routing."""
    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category
    return ErrorCategory.UNKNOWN


class ModerationEventLogger:
    """Emit structured command events via femtologging."""

    def log_command_succeeded(
        self, *, actor: str, repo_slug: str, command: str, target: str
    ) -> None:
        """Log a command that mutated (or confirmed) moderation state."""
        log_info(
            logger,
            "[%s] actor=%s repo_slug=%s command=%s target=%s",
            ModerationEventType.COMMAND_SUCCEEDED,
            actor,
            repo_slug,
            command,
            target,
        )

    def log_command_rejected(
        self,
        *,
        actor: str,
        repo_slug: str,
        verb: str,
        reason: RejectionReason,
    ) -> None:
        """Log an expected rejection (input, permission, setup, unknown verb)."""
        log_info(
            logger,
            "[%s] actor=%s repo_slug=%s verb=%s reason=%s",
            ModerationEventType.COMMAND_REJECTED,
            actor,
            repo_slug,
            verb,
            reason,
        )

    def log_command_failed(
        self, *, actor: str, repo_slug: str, verb: str, exc: BaseException
    ) -> None:
        """Log a storage failure with the exception attached."""
        log_exception(
            logger,
            f"[{ModerationEventType.COMMAND_FAILED}] actor={actor} "
            f"repo_slug={repo_slug} verb={verb} "
            f"error_category={categorize_error(exc)} "
            f"error_type={type(exc).__name__} error={exc}",
            exc,
        )

    def log_delivery_failed(
        self, *, repo_slug: str, conversation_id: int, exc: BaseException
    ) -> None:
        """Log an outcome message that could not be posted."""
        log_exception(
            logger,
            f"[{ModerationEventType.DELIVERY_FAILED}] repo_slug={repo_slug} "
            f"conversation_id={conversation_id} "
            f"error_category={ErrorCategory.DELIVERY} "
            f"error_type={type(exc).__name__} error={exc}",
            exc,
        )
