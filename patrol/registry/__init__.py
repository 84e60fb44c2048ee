"""Repository registry for installations of the moderation App.

The registry maps GitHub ``owner/name`` pairs to internal repository ids. The
command path only reads from it; installations populate it.

Usage
-----
Register repositories from an installation::

    from patrol.registry import RepositoryRegistryService

    registry = RepositoryRegistryService(session_factory)
    await registry.register_many(["octo/reef", "octo/kelp"])

Look up a repository when a comment arrives::

    repo = await registry.lookup("octo", "reef")
    if repo is None:
        ...  # not installed

"""

from patrol.registry.installation import InstallationService
from patrol.registry.models import RepositoryInfo, RepositoryRef
from patrol.registry.service import RepositoryRegistryService

__all__ = [
    "InstallationService",
    "RepositoryInfo",
    "RepositoryRef",
    "RepositoryRegistryService",
]
