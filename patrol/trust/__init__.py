"""Trust registry: per-repository whitelist of moderators.

A trust grant lets a non-owner issue ``ban``, ``tempban`` and ``unban``. Grants
never expire; the repository owner adds and removes them.
"""

from patrol.trust.models import TrustedUser
from patrol.trust.service import TrustRegistry

__all__ = ["TrustRegistry", "TrustedUser"]
