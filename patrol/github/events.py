"""Typed webhook payloads, normalised once at the boundary.

Only the fields the bot reads are declared; msgspec ignores the rest of each
GitHub payload. Issue comments and pull request review comments both become a
:class:`CommentEvent` whose ``conversation_id`` is the issue or pull request
number, so nothing downstream branches on the event kind.
"""

from __future__ import annotations

import enum

import msgspec

from .errors import WebhookPayloadError

HANDLED_ACTION = "created"


class WebhookEventName(enum.StrEnum):
    """``X-GitHub-Event`` values the bot understands."""

    ISSUE_COMMENT = "issue_comment"
    PULL_REQUEST_REVIEW_COMMENT = "pull_request_review_comment"
    INSTALLATION = "installation"


class _Account(msgspec.Struct):
    login: str


class _Owner(msgspec.Struct):
    login: str


class _Repository(msgspec.Struct):
    name: str
    owner: _Owner


class _Comment(msgspec.Struct):
    user: _Account
    body: str | None = None


class _Numbered(msgspec.Struct):
    number: int


class IssueCommentPayload(msgspec.Struct, kw_only=True):
    """Subset of the ``issue_comment`` webhook payload."""

    action: str
    comment: _Comment
    issue: _Numbered
    repository: _Repository


class ReviewCommentPayload(msgspec.Struct, kw_only=True):
    """Subset of the ``pull_request_review_comment`` webhook payload."""

    action: str
    comment: _Comment
    pull_request: _Numbered
    repository: _Repository


class _InstalledRepository(msgspec.Struct):
    full_name: str


class InstallationPayload(msgspec.Struct, kw_only=True):
    """Subset of the ``installation`` webhook payload."""

    action: str
    sender: _Account
    repositories: list[_InstalledRepository] = msgspec.field(default_factory=list)


class CommentEvent(msgspec.Struct, kw_only=True, frozen=True):
    """A comment that may carry a moderation command."""

    actor: str
    owner: str
    repo_name: str
    body: str
    conversation_id: int


class InstallationEvent(msgspec.Struct, kw_only=True, frozen=True):
    """An App installation and the ``owner/name`` repositories it covers."""

    sender: str
    repositories: list[str] = msgspec.field(default_factory=list)


def _decode[T](event_name: str, body: bytes, payload_type: type[T]) -> T:
    try:
        return msgspec.json.decode(body, type=payload_type)
    except msgspec.DecodeError as exc:
        raise WebhookPayloadError.malformed(event_name, exc) from exc


def parse_comment_event(event_name: str, body: bytes) -> CommentEvent | None:
    """Normalise a comment webhook into a :class:`CommentEvent`.

    Parameters
    ----------
    event_name:
        Value of the ``X-GitHub-Event`` header.
    body:
        Raw JSON request body.

    Returns
    -------
    CommentEvent | None
        The normalised event, or ``None`` for other event kinds and for
        actions other than ``created``.

    Raises
    ------
    WebhookPayloadError
        If the body is not valid JSON of the expected shape.

    """
    match event_name:
        case WebhookEventName.ISSUE_COMMENT:
            issue = _decode(event_name, body, IssueCommentPayload)
            action, comment, repo = issue.action, issue.comment, issue.repository
            conversation_id = issue.issue.number
        case WebhookEventName.PULL_REQUEST_REVIEW_COMMENT:
            review = _decode(event_name, body, ReviewCommentPayload)
            action, comment, repo = review.action, review.comment, review.repository
            conversation_id = review.pull_request.number
        case _:
            return None

    if action != HANDLED_ACTION:
        return None
    return CommentEvent(
        actor=comment.user.login,
        owner=repo.owner.login,
        repo_name=repo.name,
        body=comment.body or "",
        conversation_id=conversation_id,
    )


def parse_installation_event(event_name: str, body: bytes) -> InstallationEvent | None:
    """Normalise an ``installation.created`` webhook.

    Raises
    ------
    WebhookPayloadError
        If the body is not valid JSON of the expected shape.

    """
    if event_name != WebhookEventName.INSTALLATION:
        return None
    payload = _decode(event_name, body, InstallationPayload)
    if payload.action != HANDLED_ACTION:
        return None
    return InstallationEvent(
        sender=payload.sender.login,
        repositories=[repo.full_name for repo in payload.repositories],
    )
