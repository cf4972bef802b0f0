"""Single validation pass over a completed link graph."""

from __future__ import annotations

from typing import TYPE_CHECKING

from linkcheck.graph.models import Link, Page

if TYPE_CHECKING:
    from linkcheck.graph.builder import LinkGraph


def link_is_valid(link: Link, target: Page | None) -> bool:
    """Decide validity for *link* given its (possibly missing) *target*."""
    if target is None:
        return False
    if link.fragment is None:
        return True
    # Fragments cannot be verified outside HTML; accept them.
    if not target.is_html:
        return True
    return link.fragment in (target.anchors or ())


def validate_links(graph: LinkGraph) -> tuple[int, int]:
    """Mark every undecided link in *graph* and return ``(checked, broken)``.

    Links already marked invalid by a fetch failure keep that verdict but are
    still counted.
    """
    checked = 0
    broken = 0
    for page in graph.pages.values():
        for link in page.links:
            checked += 1
            if not link.decided:
                link.mark(link_is_valid(link, graph.lookup(link.target_path)))
            if not link.valid:
                broken += 1
    return checked, broken
