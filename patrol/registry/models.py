"""Data transfer objects for the repository registry."""

from __future__ import annotations

import dataclasses
import typing as typ

from patrol.common.slug import repo_slug

if typ.TYPE_CHECKING:
    import datetime as dt

    from patrol.storage import Repository


@dataclasses.dataclass(slots=True, frozen=True)
class RepositoryRef:
    """GitHub address of a repository, registered or not."""

    owner: str
    name: str

    @property
    def slug(self) -> str:
        """Return owner/name in GitHub notation."""
        return repo_slug(self.owner, self.name)


@dataclasses.dataclass(slots=True, frozen=True)
class RepositoryInfo:
    """Lightweight DTO for a registered repository.

    Carries the identity handed to the ledgers and the owner/name pair needed
    to address comments back to GitHub.
    """

    id: int
    owner: str
    name: str
    created_at: dt.datetime

    @property
    def slug(self) -> str:
        """Return owner/name in GitHub notation."""
        return repo_slug(self.owner, self.name)

    @property
    def ref(self) -> RepositoryRef:
        """Return the GitHub address of this repository."""
        return RepositoryRef(owner=self.owner, name=self.name)

    @classmethod
    def from_row(cls, row: Repository) -> RepositoryInfo:
        """Build the DTO from a persisted ``Repository`` row."""
        return cls(
            id=row.id,
            owner=row.owner_username,
            name=row.repo_name,
            created_at=row.created_at,
        )
