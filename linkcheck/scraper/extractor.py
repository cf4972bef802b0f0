"""HTML extraction: outbound links and addressable anchors.

Two anchor strategies exist.  Remote documents have unknown structure, so
every ``id``, every ``name`` and every in-page ``href="#..."`` counts.  Local
documents come from a known generator; scanning every attribute of every
element is slow on large trees, so only the elements that generator actually
uses as link targets are consulted (see ``_LOCAL_RULES``).
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, List

from bs4 import BeautifulSoup, Tag

from linkcheck.graph.models import Link, Page
from linkcheck.graph.paths import checkable, offsite

# Pilcrow and up-arrow anchors are navigation decoration, not content links.
_SKIP_TEXTS = frozenset({"¶", "↑"})

_HEADINGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


class AnchorStrategy(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


def strategy_for(path: str) -> AnchorStrategy:
    """Pick the anchor strategy for the page at *path*."""
    return AnchorStrategy.REMOTE if offsite(path) else AnchorStrategy.LOCAL


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


# ---------------------------------------------------------------------------
# Local allow-list
# ---------------------------------------------------------------------------

def _body_id(body: Tag) -> Iterable[str | None]:
    # The body id is the conventional "top" target.
    return [body.get("id")]


def _anchor_ids(body: Tag) -> Iterable[str | None]:
    return (a.get("id") for a in body.find_all("a"))


def _method_detail_ids(body: Tag) -> Iterable[str | None]:
    for div in body.find_all("div", class_=True):
        if "method-" in " ".join(div.get_attribute_list("class")):
            yield div.get("id")


def _definition_term_ids(body: Tag) -> Iterable[str | None]:
    # Constants are documented in <dt> elements.
    return (dt.get("id") for dt in body.find_all("dt"))


def _heading_ids(body: Tag) -> Iterable[str | None]:
    return (h.get("id") for h in body.find_all(_HEADINGS))


# Append new rules here when the generator starts linking to new elements.
_LOCAL_RULES: List[Callable[[Tag], Iterable[str | None]]] = [
    _body_id,
    _anchor_ids,
    _method_detail_ids,
    _definition_term_ids,
    _heading_ids,
]


def _local_anchors(soup: BeautifulSoup) -> set[str]:
    # html.parser does not synthesise a <body>; scan the whole tree instead.
    body = soup.body or soup
    return {anchor for rule in _LOCAL_RULES for anchor in rule(body) if anchor}


def _remote_anchors(soup: BeautifulSoup) -> set[str]:
    anchors: set[str] = set()
    anchors.update(el["id"] for el in soup.find_all(id=True))
    anchors.update(el["name"] for el in soup.find_all(attrs={"name": True}))
    for a in soup.find_all("a", href=True):
        href = a["href"]
        if href.startswith("#"):
            anchors.add(href[1:])
    return anchors


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_anchors(soup: BeautifulSoup, strategy: AnchorStrategy) -> set[str]:
    """Return the set of fragment ids addressable in *soup*."""
    if strategy is AnchorStrategy.REMOTE:
        return _remote_anchors(soup)
    return _local_anchors(soup)


def gather_anchors(page: Page, soup: BeautifulSoup | None = None) -> set[str] | None:
    """Fill in ``page.anchors`` unless that has already happened.

    Parses the page's retained document when *soup* is not given.  A page
    with neither stays un-extracted and ``None`` is returned.  The retained
    document is released once the anchors are known.
    """
    if page.anchors is not None:
        return page.anchors
    if soup is None:
        if page.document is None:
            return None
        soup = parse_html(page.document)
    page.anchors = extract_anchors(soup, strategy_for(page.path))
    page.document = None
    return page.anchors


def extract_links(soup: BeautifulSoup, page: Page, *, onsite_only: bool = False) -> list[Link]:
    """Return the checkable outbound links of *page*, in document order.

    Raises:
        ResolutionError: If an href climbs above the root of the tree.
    """
    links: list[Link] = []
    for a in soup.find_all("a"):
        text = a.get_text()
        if text.strip() in _SKIP_TEXTS:
            continue
        href = a.get("href")
        if not href:
            continue
        if onsite_only and offsite(href):
            continue
        if not checkable(href):
            continue
        link = Link.from_href(href, text, page.path)
        if not link.target_path:
            continue
        links.append(link)
    return links
