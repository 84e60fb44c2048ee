"""Repository slug utilities.

Repository slugs are GitHub identifiers in ``owner/name`` format. They are not
filesystem paths, even though they use ``/`` as a separator, so they should be
parsed using these helpers rather than ``pathlib``.
"""

from __future__ import annotations


def repo_slug(owner: str, name: str) -> str:
    """Build a repository slug from owner and name.

    Examples
    --------
    >>> repo_slug("octo", "reef")
    'octo/reef'

    """
    return f"{owner}/{name}"


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Parse a repository slug into owner and name.

    Parameters
    ----------
    slug:
        Repository slug in ``owner/name`` format, as used by installation
        payloads (``full_name``) and the admin CLI.

    Returns
    -------
    tuple[str, str]
        ``(owner, name)``.

    Raises
    ------
    ValueError
        If the slug is not in ``owner/name`` format.

    Examples
    --------
    >>> parse_repo_slug("octo/reef")
    ('octo', 'reef')

    """
    if slug.count("/") != 1:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    owner, name = slug.split("/")
    if not owner or not name:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    return owner, name
