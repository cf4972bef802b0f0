"""Plain-data summary of a finished run (for ``--json`` output)."""

from __future__ import annotations

from typing import Any

from linkcheck.graph.builder import LinkGraph
from linkcheck.graph.models import RunCounts


def summarize(graph: LinkGraph, counts: RunCounts) -> dict[str, Any]:
    """Return counters and broken links as JSON-serialisable data."""
    broken: dict[str, list[dict[str, Any]]] = {}
    for page, link in graph.broken_links():
        broken.setdefault(page.path, []).append(
            {
                "href": link.href,
                "text": link.text,
                "path": link.target_path,
                "fragment": link.fragment,
                "error": str(link.error) if link.error is not None else None,
            }
        )
    return {
        "root": str(graph.root),
        "counts": {
            "source_pages": counts.source_pages,
            "target_pages": counts.target_pages,
            "links_checked": counts.links_checked,
            "links_broken": counts.links_broken,
            "start_time": counts.start_time.isoformat() if counts.start_time else None,
            "end_time": counts.end_time.isoformat() if counts.end_time else None,
            "elapsed_seconds": counts.elapsed.total_seconds(),
        },
        "broken_links": broken,
    }
