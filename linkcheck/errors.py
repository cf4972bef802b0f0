"""Exception types raised (or recorded) by the link checker.

Only :class:`ResolutionError` and :class:`ConfigError` ever escape a run.
:class:`FetchError` instances are stored on the affected links and surfaced
in the report instead of being raised.
"""

from __future__ import annotations


class LinkCheckError(Exception):
    """Base class for every error defined by this package."""


class ResolutionError(LinkCheckError, ValueError):
    """A relative href climbs above the root of the document tree."""

    def __init__(self, origin_dir: str, href: str) -> None:
        self.origin_dir = origin_dir
        self.href = href
        super().__init__(
            f"Cannot resolve {href!r} from {origin_dir!r}: "
            "too many '../' segments for the directory depth"
        )


class ConfigError(LinkCheckError):
    """The configuration file is unreadable or invalid."""


class FetchError(LinkCheckError):
    """A remote target could not be retrieved over the network."""

    def __init__(self, url: str, cause: BaseException | None = None) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"{url}: {cause}" if cause is not None else url)

    @property
    def message(self) -> str:
        """Multi-line description used by the report."""
        return (
            f"{type(self).__name__}:\n"
            "An exception was raised when checking page availability:\n"
            f"  Url: {self.url}\n"
            f"  Class: {type(self.cause).__name__}\n"
            f"  Message: {self.cause}\n"
        )


class HttpStatusError(FetchError):
    """The server answered with a status outside [200, 400)."""

    def __init__(self, url: str, code: int) -> None:
        self.code = code
        super().__init__(url)
        self.args = (f"{url}: HTTP {code}",)

    @property
    def message(self) -> str:
        return (
            f"{type(self).__name__}:\n"
            "  The return code for the page was not 2xx/3xx:\n"
            f"    Url: {self.url}\n"
            f"    Return code: {self.code}\n"
        )
