"""Verification of the ``X-Hub-Signature-256`` webhook header."""

from __future__ import annotations

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


def compute_signature(secret: str, body: bytes) -> str:
    """Return the ``sha256=<hex>`` signature GitHub sends for ``body``."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(secret: str, body: bytes, header: str | None) -> bool:
    """Return whether ``header`` is a valid signature of ``body``.

    A missing header or one without the ``sha256=`` prefix never verifies.
    The comparison runs in constant time.

    Examples
    --------
    >>> header = compute_signature("s3cret", b"{}")
    >>> verify_signature("s3cret", b"{}", header)
    True
    >>> verify_signature("s3cret", b"{}", None)
    False

    """
    if not header or not header.startswith(SIGNATURE_PREFIX):
        return False
    return hmac.compare_digest(compute_signature(secret, body), header)
