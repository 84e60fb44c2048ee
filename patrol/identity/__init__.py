"""Identity resolution for GitHub accounts referenced by moderation commands.

Usage
-----
Resolve a login, creating the user row on first sight::

    from patrol.identity import IdentityResolver

    resolver = IdentityResolver(session_factory)
    user = await resolver.resolve("octocat")

"""

from patrol.identity.models import UserInfo
from patrol.identity.service import IdentityResolver, find_user

__all__ = ["IdentityResolver", "UserInfo", "find_user"]
