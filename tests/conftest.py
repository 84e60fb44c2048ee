"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from patrol.bans import BanLedger
from patrol.identity import IdentityResolver
from patrol.registry import RepositoryRegistryService
from patrol.storage import create_storage_engine, init_storage
from patrol.trust import TrustRegistry
from tests.helpers.clock import FakeClock

if typ.TYPE_CHECKING:
    from pathlib import Path

    from patrol.registry import RepositoryInfo


@pytest_asyncio.fixture
async def session_factory(
    tmp_path: Path,
) -> typ.AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Yield a fresh async session factory backed by sqlite."""
    engine = create_storage_engine(f"sqlite+aiosqlite:///{tmp_path / 'patrol.db'}")
    await init_storage(engine)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    try:
        yield factory
    finally:
        await engine.dispose()


@pytest.fixture
def clock() -> FakeClock:
    """Return a clock frozen at ``NOW`` until advanced."""
    return FakeClock()


@pytest.fixture
def identity(session_factory: async_sessionmaker[AsyncSession]) -> IdentityResolver:
    """Return an identity resolver over the test database."""
    return IdentityResolver(session_factory)


@pytest.fixture
def registry(
    session_factory: async_sessionmaker[AsyncSession],
) -> RepositoryRegistryService:
    """Return a repository registry over the test database."""
    return RepositoryRegistryService(session_factory)


@pytest.fixture
def trust(session_factory: async_sessionmaker[AsyncSession]) -> TrustRegistry:
    """Return a trust registry over the test database."""
    return TrustRegistry(session_factory)


@pytest.fixture
def ledger(
    session_factory: async_sessionmaker[AsyncSession], clock: FakeClock
) -> BanLedger:
    """Return a ban ledger reading time from ``clock``."""
    return BanLedger(session_factory, clock=clock)


@pytest_asyncio.fixture
async def repo(registry: RepositoryRegistryService) -> RepositoryInfo:
    """Register and return ``octo/reef``."""
    return await registry.register("octo", "reef")
