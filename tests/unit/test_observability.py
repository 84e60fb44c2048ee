"""Unit tests for moderation event logging."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import (
    IntegrityError,
    InterfaceError,
    NoResultFound,
    OperationalError,
)

from patrol.errors import RejectionReason, StorageFailureError
from patrol.observability import (
    ErrorCategory,
    ModerationEventLogger,
    ModerationEventType,
    categorize_error,
)
from tests.helpers.femtologging_capture import capture_femto_logs


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (
            StorageFailureError.conflict_exhausted("ban", 3),
            ErrorCategory.WRITE_CONFLICT,
        ),
        (
            OperationalError("SELECT 1", {}, Exception("locked")),
            ErrorCategory.DATABASE_CONNECTIVITY,
        ),
        (
            InterfaceError("SELECT 1", {}, Exception("closed")),
            ErrorCategory.DATABASE_CONNECTIVITY,
        ),
        (
            IntegrityError("INSERT", {}, Exception("unique")),
            ErrorCategory.DATA_INTEGRITY,
        ),
        (NoResultFound(), ErrorCategory.DATABASE_ERROR),
        (RuntimeError("boom"), ErrorCategory.UNKNOWN),
    ],
)
def test_categorize_error(exc: BaseException, expected: ErrorCategory) -> None:
    """Exceptions map to the most specific matching category."""
    assert categorize_error(exc) is expected


class TestModerationEventLogger:
    """Events are emitted on the patrol.observability logger."""

    def test_success_event(self) -> None:
        """Successful commands log actor, repository and target."""
        with capture_femto_logs("patrol.observability") as capture:
            ModerationEventLogger().log_command_succeeded(
                actor="octo", repo_slug="octo/reef", command="ban", target="bob"
            )
            capture.wait_for_count(1)

        record = capture.records[0]
        assert record.level == "INFO"
        assert record.message == (
            f"[{ModerationEventType.COMMAND_SUCCEEDED}] actor=octo "
            "repo_slug=octo/reef command=ban target=bob"
        )

    def test_rejection_event(self) -> None:
        """Rejections carry the machine-readable reason."""
        with capture_femto_logs("patrol.observability") as capture:
            ModerationEventLogger().log_command_rejected(
                actor="mallory",
                repo_slug="octo/reef",
                verb="whitelist",
                reason=RejectionReason.PERMISSION_DENIED,
            )
            capture.wait_for_count(1)

        message = capture.messages()[0]
        assert message.startswith(f"[{ModerationEventType.COMMAND_REJECTED}]")
        assert "reason=permission_denied" in message

    def test_failure_event_is_categorised(self) -> None:
        """Storage failures log at ERROR with their category."""
        exc = OperationalError("INSERT", {}, Exception("database is locked"))

        with capture_femto_logs("patrol.observability") as capture:
            ModerationEventLogger().log_command_failed(
                actor="octo", repo_slug="octo/reef", verb="ban", exc=exc
            )
            capture.wait_for_count(1)

        record = capture.records[0]
        assert record.level == "ERROR"
        assert "error_category=database_connectivity" in record.message
        assert "error_type=OperationalError" in record.message

    def test_delivery_failure_event(self) -> None:
        """Reply delivery failures name the conversation."""
        with capture_femto_logs("patrol.observability") as capture:
            ModerationEventLogger().log_delivery_failed(
                repo_slug="octo/reef",
                conversation_id=42,
                exc=RuntimeError("GitHub REST HTTP 502"),
            )
            capture.wait_for_count(1)

        message = capture.messages()[0]
        assert message.startswith(f"[{ModerationEventType.DELIVERY_FAILED}]")
        assert "conversation_id=42" in message
        assert "error_category=delivery" in message
