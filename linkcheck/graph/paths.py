"""Path algebra for hrefs found in the document tree.

Everything here is pure string manipulation: nothing touches the filesystem
and nothing is percent-decoded, so the functions can be tested without any
files on disk.
"""

from __future__ import annotations

import posixpath
from urllib.parse import urlsplit

from linkcheck.errors import ResolutionError

_UP_DIR = "../"
_OFFSITE_SCHEMES = frozenset({"http", "https"})
_CHECKABLE_SCHEMES = _OFFSITE_SCHEMES | {""}


def _scheme(href: str) -> str | None:
    try:
        return urlsplit(href).scheme.lower()
    except ValueError:
        return None


def offsite(href: str) -> bool:
    """Return ``True`` if *href* is an ``http``/``https`` URL.

    Decided by the URI scheme, so a relative ``http_rb.html`` stays on-site.
    """
    return _scheme(href) in _OFFSITE_SCHEMES


def checkable(href: str | None) -> bool:
    """Return ``True`` if *href* is something the checker knows how to verify.

    That is a non-empty href whose scheme is ``http``, ``https`` or absent.
    ``mailto:``, ``javascript:`` and hrefs ``urlsplit`` rejects (bad IPv6
    hosts) are not checkable.  ``urlsplit`` is lenient, so this is mostly a
    scheme check: hrefs with spaces or other unescaped characters pass.
    """
    if not href:
        return False
    return _scheme(href) in _CHECKABLE_SCHEMES


def split_fragment(href: str) -> tuple[str, str | None]:
    """Split *href* at the first ``#`` into ``(path, fragment)``."""
    path, sep, fragment = href.partition("#")
    return path, (fragment if sep else None)


def dirname(path: str) -> str:
    """Directory part of a repository-relative *path*; ``""`` at the root.

    Off-site URLs have no directory in this sense and also give ``""``.
    """
    if offsite(path):
        return ""
    return posixpath.dirname(path)


def resolve(origin_dir: str, href: str) -> str:
    """Turn *href*, found in a page under *origin_dir*, into a canonical path.

    >>> resolve("a/b", "../c.html")
    'a/c.html'
    >>> resolve("a", "./b.html")
    'b.html'

    Raises:
        ResolutionError: If *href* has more leading ``../`` segments than
            *origin_dir* has components.
    """
    if offsite(href):
        return href
    if href.startswith("./"):
        return href[2:]
    if not origin_dir:
        return href

    levels = 0
    rest = href
    while rest.startswith(_UP_DIR):
        levels += 1
        rest = rest[len(_UP_DIR):]

    if levels == 0:
        return f"{origin_dir}/{href}"

    dirs = origin_dir.split("/")
    if len(dirs) < levels:
        raise ResolutionError(origin_dir, href)
    stripped = href.replace(_UP_DIR, "")
    dirs = dirs[: len(dirs) - levels]
    if not dirs:
        return stripped
    return "/".join(dirs) + "/" + stripped
