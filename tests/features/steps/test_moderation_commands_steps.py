"""Behavioural coverage for moderation commands arriving via webhooks."""

from __future__ import annotations

import asyncio
import datetime as dt
import typing as typ

import falcon.testing
import pytest
from pytest_bdd import given, parsers, scenario, then, when
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.pool import NullPool

from patrol.api import create_app
from patrol.api.factory import build_app_dependencies
from patrol.bans import BanLedger
from patrol.common.slug import parse_repo_slug
from patrol.common.time import utcnow
from patrol.config import PatrolConfig
from patrol.identity import IdentityResolver
from patrol.registry import RepositoryRegistryService
from patrol.storage import create_storage_engine, init_storage
from patrol.trust import TrustRegistry
from tests.helpers.channel import RecordingChannel
from tests.helpers.github_events import installation_payload, issue_comment_payload

if typ.TYPE_CHECKING:
    from pathlib import Path

    from falcon.testing.client import Result
    from sqlalchemy.ext.asyncio import AsyncSession

    from patrol.bans import BanInfo

FEATURE = "../moderation_commands.feature"


class ModerationContext(typ.TypedDict, total=False):
    """Shared mutable scenario state."""

    session_factory: async_sessionmaker[AsyncSession]
    client: falcon.testing.TestClient
    channel: RecordingChannel
    repository_id: int
    response: Result


def run_async[T](coro: typ.Coroutine[typ.Any, typ.Any, T]) -> T:
    """Run async coroutines in sync BDD step functions."""
    return asyncio.run(coro)


@scenario(FEATURE, "The repository owner permanently bans a spammer")
def test_owner_bans_spammer() -> None:
    """Wrap the pytest-bdd scenario."""


@scenario(FEATURE, "A trusted user issues a temporary ban")
def test_trusted_user_temp_bans() -> None:
    """Wrap the pytest-bdd scenario."""


@scenario(FEATURE, "An untrusted user cannot ban")
def test_untrusted_user_rejected() -> None:
    """Wrap the pytest-bdd scenario."""


@scenario(FEATURE, "A leading @ on the target names the same user")
def test_target_mention_normalised() -> None:
    """Wrap the pytest-bdd scenario."""


@scenario(FEATURE, "Comments without the mention are left alone")
def test_plain_comment_ignored() -> None:
    """Wrap the pytest-bdd scenario."""


@pytest.fixture
def moderation_context(tmp_path: Path) -> typ.Iterator[ModerationContext]:
    """Provision the webhook app over a fresh SQLite database.

    Each step runs its own event loop, so connections are not pooled across
    steps.
    """
    engine = create_storage_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'moderation.db'}", poolclass=NullPool
    )
    run_async(init_storage(engine))
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    channel = RecordingChannel()
    deps = build_app_dependencies(
        session_factory, channel=channel, config=PatrolConfig()
    )
    try:
        yield {
            "session_factory": session_factory,
            "client": falcon.testing.TestClient(create_app(deps)),
            "channel": channel,
        }
    finally:
        run_async(engine.dispose())


def _ban(context: ModerationContext, username: str) -> BanInfo | None:
    ledger = BanLedger(context["session_factory"])
    return run_async(ledger.get(username, context["repository_id"]))


@given(parsers.parse('the app is installed on "{slug}" by "{sender}"'))
def given_installed(
    moderation_context: ModerationContext, slug: str, sender: str
) -> None:
    """Deliver an installation webhook and remember the repository id."""
    result = moderation_context["client"].simulate_post(
        "/webhooks/github",
        body=installation_payload(sender=sender, repositories=[slug]),
        headers={"X-GitHub-Event": "installation"},
    )
    assert result.json == {"event": "installation", "outcome": "success"}

    owner, name = parse_repo_slug(slug)
    registry = RepositoryRegistryService(moderation_context["session_factory"])
    repo = run_async(registry.lookup(owner, name))
    assert repo is not None, f"{slug} should be registered by the installation"
    moderation_context["repository_id"] = repo.id


@given(parsers.parse('"{username}" is trusted on "{slug}"'))
def given_trusted(
    moderation_context: ModerationContext, username: str, slug: str
) -> None:
    """Grant trust directly through the trust registry."""
    session_factory = moderation_context["session_factory"]

    async def _grant() -> None:
        repo = await RepositoryRegistryService(session_factory).get_by_slug(slug)
        assert repo is not None, f"{slug} should be registered"
        await IdentityResolver(session_factory).resolve(username)
        await TrustRegistry(session_factory).grant(username, repo.id)

    run_async(_grant())


@when(parsers.parse('"{actor}" comments "{body}"'))
def when_comment(moderation_context: ModerationContext, actor: str, body: str) -> None:
    """Deliver an issue_comment webhook on octo/reef."""
    moderation_context["response"] = moderation_context["client"].simulate_post(
        "/webhooks/github",
        body=issue_comment_payload(actor=actor, body=body),
        headers={"X-GitHub-Event": "issue_comment"},
    )


@then(parsers.parse('the webhook outcome is "{status}"'))
def then_outcome(moderation_context: ModerationContext, status: str) -> None:
    """Assert the status reported in the webhook response."""
    response = moderation_context["response"]
    assert response.status_code == 200, f"unexpected HTTP {response.status_code}"
    assert response.json["outcome"] == status, f"got {response.json}"


@then(parsers.parse('"{username}" is permanently banned with reason "{reason}"'))
def then_banned_with_reason(
    moderation_context: ModerationContext, username: str, reason: str
) -> None:
    """Assert a permanent ban carrying ``reason``."""
    ban = _ban(moderation_context, username)
    assert ban is not None, f"{username} should be banned"
    assert ban.is_permanent
    assert ban.reason == reason


@then(parsers.parse('"{username}" is permanently banned with no reason'))
def then_banned_without_reason(
    moderation_context: ModerationContext, username: str
) -> None:
    """Assert a permanent ban without a reason."""
    ban = _ban(moderation_context, username)
    assert ban is not None, f"{username} should be banned"
    assert ban.is_permanent
    assert ban.reason is None


@then(parsers.parse('"{username}" is banned for {days:d} days without a reason'))
def then_temp_banned(
    moderation_context: ModerationContext, username: str, days: int
) -> None:
    """Assert a temporary ban expiring roughly ``days`` from now."""
    ban = _ban(moderation_context, username)
    assert ban is not None, f"{username} should be banned"
    assert ban.expires_at is not None
    expected = utcnow() + dt.timedelta(days=days)
    assert abs(ban.expires_at - expected) < dt.timedelta(minutes=1)
    assert ban.reason is None


@then(parsers.parse('"{username}" is not banned'))
def then_not_banned(moderation_context: ModerationContext, username: str) -> None:
    """Assert no ban row exists."""
    assert _ban(moderation_context, username) is None


@then(parsers.parse('no identity exists for "{username}"'))
def then_no_identity(moderation_context: ModerationContext, username: str) -> None:
    """Assert the username was never resolved to its own identity."""
    resolver = IdentityResolver(moderation_context["session_factory"])
    assert run_async(resolver.get(username)) is None


@then(parsers.parse('the reply starts with "{prefix}"'))
def then_reply_prefix(moderation_context: ModerationContext, prefix: str) -> None:
    """Assert exactly one reply was posted, beginning with ``prefix``."""
    posted = moderation_context["channel"].posted
    assert len(posted) == 1, f"expected one reply, got {posted}"
    _, conversation_id, text = posted[0]
    assert conversation_id == 42
    assert text.startswith(prefix), text


@then("no reply is posted")
def then_no_reply(moderation_context: ModerationContext) -> None:
    """Assert the channel stayed silent."""
    assert moderation_context["channel"].posted == []
