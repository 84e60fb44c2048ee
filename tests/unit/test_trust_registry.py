"""Unit tests for the trust registry."""

from __future__ import annotations

import asyncio
import typing as typ

import pytest

from patrol.errors import UnknownUserError

if typ.TYPE_CHECKING:
    from patrol.identity import IdentityResolver
    from patrol.registry import RepositoryInfo, RepositoryRegistryService
    from patrol.trust import TrustRegistry


@pytest.mark.asyncio
async def test_grant_requires_resolved_user(
    trust: TrustRegistry, repo: RepositoryInfo
) -> None:
    """Granting trust to an unseen login raises a not-found error."""
    with pytest.raises(UnknownUserError, match="User ghost not found"):
        await trust.grant("ghost", repo.id)


@pytest.mark.asyncio
async def test_grant_is_idempotent(
    trust: TrustRegistry, identity: IdentityResolver, repo: RepositoryInfo
) -> None:
    """Repeated and concurrent grants leave one trust entry."""
    await identity.resolve("alice")

    first = await trust.grant("alice", repo.id)
    await asyncio.gather(*(trust.grant("alice", repo.id) for _ in range(3)))

    listed = await trust.list_trusted(repo.id)
    assert [entry.username for entry in listed] == ["alice"]
    assert listed[0].granted_at == first.granted_at
    assert await trust.is_trusted("alice", repo.id)


@pytest.mark.asyncio
async def test_revoke_reports_removal(
    trust: TrustRegistry, identity: IdentityResolver, repo: RepositoryInfo
) -> None:
    """revoke() removes grants and is a no-op for absent entries."""
    await identity.resolve("alice")
    await trust.grant("alice", repo.id)

    assert await trust.revoke("alice", repo.id) is True
    assert await trust.revoke("alice", repo.id) is False
    assert await trust.revoke("ghost", repo.id) is False
    assert not await trust.is_trusted("alice", repo.id)


@pytest.mark.asyncio
async def test_trust_is_scoped_per_repository(
    trust: TrustRegistry,
    identity: IdentityResolver,
    repo: RepositoryInfo,
    registry: RepositoryRegistryService,
) -> None:
    """A grant on one repository does not leak to another."""
    other = await registry.register("octo", "kelp")
    await identity.resolve("alice")
    await trust.grant("alice", repo.id)

    assert await trust.is_trusted("alice", repo.id)
    assert not await trust.is_trusted("alice", other.id)
    assert not await trust.is_trusted("nobody", repo.id)


@pytest.mark.asyncio
async def test_list_trusted_orders_by_username(
    trust: TrustRegistry, identity: IdentityResolver, repo: RepositoryInfo
) -> None:
    """Enumeration is stable across calls."""
    for login in ("carol", "alice", "bob"):
        await identity.resolve(login)
        await trust.grant(login, repo.id)

    listed = await trust.list_trusted(repo.id)

    assert [entry.username for entry in listed] == ["alice", "bob", "carol"]
