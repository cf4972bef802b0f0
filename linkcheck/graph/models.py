"""Dataclass models for the link graph.

These are plain Python objects created once per checking run.  Pages are
keyed by canonical path in :class:`linkcheck.graph.builder.LinkGraph`;
links refer to their target by that key, never by object reference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from linkcheck.errors import FetchError
from linkcheck.graph.paths import dirname, offsite, resolve, split_fragment


def html_like(content_type: str | None) -> bool:
    """Return ``True`` if *content_type* names an HTML document."""
    return content_type is not None and "html" in content_type.lower()


class Origin(str, Enum):
    SOURCE = "source"
    TARGET = "target"


class Validity(str, Enum):
    UNKNOWN = "unknown"
    VALID = "valid"
    INVALID = "invalid"


@dataclass
class Link:
    href: str
    text: str
    target_path: str
    fragment: str | None = None
    validity: Validity = Validity.UNKNOWN
    error: FetchError | None = None

    @classmethod
    def from_href(cls, href: str, text: str, page_path: str) -> Link:
        """Build a link found on the page at *page_path*.

        A fragment-only href (``#top``) targets the page it was found on.
        An empty fragment (``#``, ``page.html#``) means the top of the
        document and is dropped.

        Raises:
            ResolutionError: If the href climbs above the tree root.
        """
        path, fragment = split_fragment(href)
        target = resolve(dirname(page_path), path) if path else page_path
        return cls(href=href, text=text, target_path=target, fragment=fragment or None)

    # ------------------------------------------------------------------
    # Validity
    # ------------------------------------------------------------------
    @property
    def valid(self) -> bool:
        return self.validity is Validity.VALID

    @property
    def decided(self) -> bool:
        return self.validity is not Validity.UNKNOWN

    def mark(self, valid: bool) -> None:
        """Set the validity once; later calls leave a decided link alone."""
        if self.decided:
            return
        self.validity = Validity.VALID if valid else Validity.INVALID

    def fail(self, error: FetchError) -> None:
        """Record a fetch failure and mark the link invalid."""
        if self.error is None:
            self.error = error
        self.mark(False)


@dataclass
class Page:
    path: str
    origin: Origin
    content_type: str | None = None
    status_code: int | None = None
    # None until extraction has run; an empty set means "no anchors".
    anchors: set[str] | None = None
    links: list[Link] = field(default_factory=list)
    found: bool = True
    document: str | None = field(default=None, repr=False)

    @property
    def dirname(self) -> str:
        return dirname(self.path)

    @property
    def is_remote(self) -> bool:
        return offsite(self.path)

    @property
    def is_html(self) -> bool:
        return html_like(self.content_type)

    @property
    def anchor_count(self) -> int:
        return len(self.anchors or ())

    def broken_links(self) -> list[Link]:
        return [link for link in self.links if link.validity is Validity.INVALID]


@dataclass
class RunCounts:
    source_pages: int = 0
    target_pages: int = 0
    links_checked: int = 0
    links_broken: int = 0
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def elapsed(self) -> timedelta:
        if self.start_time is None or self.end_time is None:
            return timedelta(0)
        return self.end_time - self.start_time
