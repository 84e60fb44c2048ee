"""Operator commands for inspecting and editing moderation state."""

from __future__ import annotations

import argparse
import asyncio
import os
import typing as typ

from sqlalchemy.ext.asyncio import async_sessionmaker

from patrol.bans import BanLedger
from patrol.common.slug import parse_repo_slug
from patrol.config import PatrolConfig
from patrol.errors import ModerationError, RepositoryNotRegisteredError
from patrol.identity import IdentityResolver
from patrol.registry import RepositoryRegistryService
from patrol.storage import create_storage_engine, init_storage
from patrol.trust import TrustRegistry

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from patrol.registry import RepositoryInfo


class _Services:
    """Services sharing one session factory for the duration of a command."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession], config: PatrolConfig
    ) -> None:
        self.identity = IdentityResolver(session_factory)
        self.registry = RepositoryRegistryService(session_factory)
        self.trust = TrustRegistry(session_factory)
        self.bans = BanLedger(
            session_factory, max_write_attempts=config.max_write_attempts
        )

    async def repository(self, slug: str) -> RepositoryInfo:
        owner, name = parse_repo_slug(slug)
        repo = await self.registry.lookup(owner, name)
        if repo is None:
            raise RepositoryNotRegisteredError(slug)
        return repo


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patrol-admin", description="Inspect and edit moderation state."
    )
    parser.add_argument(
        "--database-url",
        default=os.environ.get("PATROL_DATABASE_URL"),
        help="SQLAlchemy async URL (default: $PATROL_DATABASE_URL)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create the moderation tables")

    for name, help_text in (
        ("bans", "List active bans for a repository"),
        ("trusted", "List trusted users for a repository"),
    ):
        listing = commands.add_parser(name, help=help_text)
        listing.add_argument("repository", help="owner/name")

    ban = commands.add_parser("ban", help="Ban a user, permanently unless --days")
    ban.add_argument("repository", help="owner/name")
    ban.add_argument("username")
    ban.add_argument("--days", type=int, default=None)
    ban.add_argument("--reason", default=None)

    for name, help_text in (
        ("unban", "Remove a user's ban"),
        ("trust", "Allow a user to issue moderation commands"),
        ("untrust", "Revoke a user's trust"),
    ):
        target = commands.add_parser(name, help=help_text)
        target.add_argument("repository", help="owner/name")
        target.add_argument("username")

    return parser


async def _ban(services: _Services, args: argparse.Namespace) -> None:
    repo = await services.repository(args.repository)
    username = args.username
    await services.identity.resolve(username)
    if args.days is None:
        ban = await services.bans.ban(username, repo.id, args.reason)
    else:
        ban = await services.bans.temp_ban(username, repo.id, args.days, args.reason)
    until = ban.expires_at.isoformat() if ban.expires_at else "permanent"
    print(f"banned {username} from {repo.slug} ({until})")


async def _run_command(services: _Services, args: argparse.Namespace) -> None:  # noqa: C901
    match args.command:
        case "bans":
            repo = await services.repository(args.repository)
            for ban in await services.bans.list_active(repo.id):
                until = ban.expires_at.isoformat() if ban.expires_at else "permanent"
                print(f"{ban.username}\t{until}\t{ban.reason or ''}")
        case "trusted":
            repo = await services.repository(args.repository)
            for trusted in await services.trust.list_trusted(repo.id):
                print(f"{trusted.username}\t{trusted.granted_at.isoformat()}")
        case "ban":
            await _ban(services, args)
        case "unban":
            repo = await services.repository(args.repository)
            removed = await services.bans.unban(args.username, repo.id)
            print(f"unbanned {args.username}" if removed else "no ban to remove")
        case "trust":
            repo = await services.repository(args.repository)
            await services.identity.resolve(args.username)
            await services.trust.grant(args.username, repo.id)
            print(f"trusted {args.username} on {repo.slug}")
        case "untrust":
            repo = await services.repository(args.repository)
            removed = await services.trust.revoke(args.username, repo.id)
            print(f"untrusted {args.username}" if removed else "no trust to revoke")
        case other:
            msg = f"unhandled command: {other}"
            raise AssertionError(msg)


async def _run(args: argparse.Namespace) -> int:
    engine = create_storage_engine(args.database_url)
    try:
        if args.command == "init-db":
            await init_storage(engine)
            print("moderation tables created")
            return 0
        session_factory = async_sessionmaker(engine, expire_on_commit=False)
        services = _Services(session_factory, PatrolConfig.from_env())
        try:
            await _run_command(services, args)
        except (ModerationError, ValueError) as exc:
            print(f"error: {exc}")
            return 1
        return 0
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    """Run one administrative command against the moderation database.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when the command is rejected (unknown
        repository or user, invalid duration or slug).

    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "username", None):
        args.username = args.username.removeprefix("@")
    if not args.database_url:
        parser.error("--database-url or PATROL_DATABASE_URL is required")
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
