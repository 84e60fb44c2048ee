"""Unit tests for webhook payload normalisation and signatures."""

from __future__ import annotations

import pytest

from patrol.github import (
    CommentEvent,
    InstallationEvent,
    WebhookPayloadError,
    compute_signature,
    parse_comment_event,
    parse_installation_event,
    verify_signature,
)
from tests.helpers.github_events import (
    installation_payload,
    issue_comment_payload,
    review_comment_payload,
)


class TestParseCommentEvent:
    """Both comment kinds normalise to one event shape."""

    def test_issue_comment(self) -> None:
        """Issue comments carry the issue number as conversation id."""
        body = issue_comment_payload(actor="alice", body="@contribution-patrol ban bob")

        assert parse_comment_event("issue_comment", body) == CommentEvent(
            actor="alice",
            owner="octo",
            repo_name="reef",
            body="@contribution-patrol ban bob",
            conversation_id=42,
        )

    def test_review_comment(self) -> None:
        """Review comments carry the pull request number."""
        body = review_comment_payload(actor="alice", body="hi", number=7)

        event = parse_comment_event("pull_request_review_comment", body)

        assert event is not None
        assert event.conversation_id == 7

    def test_only_created_actions_are_handled(self) -> None:
        """Edited and deleted comments are ignored."""
        body = issue_comment_payload(actor="alice", body="x", action="edited")

        assert parse_comment_event("issue_comment", body) is None

    def test_other_events_are_ignored(self) -> None:
        """Event names the bot does not handle return None without decoding."""
        assert parse_comment_event("push", b"not json") is None

    def test_malformed_body_raises(self) -> None:
        """Bodies missing required fields are rejected."""
        with pytest.raises(WebhookPayloadError, match="issue_comment"):
            parse_comment_event("issue_comment", b'{"action": "created"}')

    def test_null_comment_body_becomes_empty(self) -> None:
        """GitHub may send a null body; it normalises to an empty string."""
        body = (
            b'{"action":"created","comment":{"body":null,"user":{"login":"a"}},'
            b'"issue":{"number":1},'
            b'"repository":{"name":"reef","owner":{"login":"octo"}}}'
        )

        event = parse_comment_event("issue_comment", body)

        assert event is not None
        assert event.body == ""


class TestParseInstallationEvent:
    """Installation payloads list the covered repositories."""

    def test_created(self) -> None:
        """Repositories are reported by full name."""
        body = installation_payload(sender="octo", repositories=["octo/reef"])

        assert parse_installation_event("installation", body) == InstallationEvent(
            sender="octo", repositories=["octo/reef"]
        )

    def test_deleted_is_ignored(self) -> None:
        """Only installation.created is handled."""
        body = installation_payload(sender="octo", repositories=[], action="deleted")

        assert parse_installation_event("installation", body) is None


class TestSignature:
    """HMAC verification of webhook bodies."""

    def test_valid_signature(self) -> None:
        """A signature computed with the shared secret verifies."""
        header = compute_signature("s3cret", b"payload")

        assert header.startswith("sha256=")
        assert verify_signature("s3cret", b"payload", header)

    @pytest.mark.parametrize(
        "header",
        [None, "", "sha1=abc", "sha256=deadbeef"],
    )
    def test_invalid_signatures(self, header: str | None) -> None:
        """Missing, wrong-algorithm and wrong-digest headers fail."""
        assert not verify_signature("s3cret", b"payload", header)

    def test_wrong_secret(self) -> None:
        """A different secret produces a different signature."""
        header = compute_signature("other", b"payload")

        assert not verify_signature("s3cret", b"payload", header)
