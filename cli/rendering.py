"""Utilities for rendering check results in the CLI."""

from __future__ import annotations

from typing import List

from linkcheck.graph.builder import LinkGraph
from linkcheck.graph.models import Link, RunCounts
from linkcheck.report.html import format_elapsed


def render_summary(counts: RunCounts) -> str:
    """Render the run counters as aligned ``label : value`` lines."""
    rows = [
        ("Source pages", counts.source_pages),
        ("Target pages", counts.target_pages),
        ("Links checked", counts.links_checked),
        ("Links broken", counts.links_broken),
        ("Elapsed", format_elapsed(counts)),
    ]
    width = max(len(label) for label, _ in rows)
    return "\n".join(f"{label.ljust(width)} : {value}" for label, value in rows)


def _describe(link: Link) -> str:
    if link.error is not None:
        return f"{link.href}  [{type(link.error).__name__}: {link.error}]"
    if link.fragment is not None:
        return f"{link.href}  [fragment not found]"
    return f"{link.href}  [target not found]"


def render_broken_links(graph: LinkGraph) -> str:
    """Render broken links as an ASCII tree grouped by source page.

    Returns an empty string when nothing is broken.
    """
    lines: List[str] = []
    for path, page in graph.pages.items():
        broken = page.broken_links()
        if not broken:
            continue
        lines.append(f"📄 {path} ({len(broken)})")
        count = len(broken)
        for i, link in enumerate(broken):
            connector = "└── " if i == count - 1 else "├── "
            lines.append(f"{connector}{_describe(link)}")
    return "\n".join(lines)
