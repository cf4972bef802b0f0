"""Render ``Report.htm`` for a finished run.

The report is built as a BeautifulSoup tree and written in one go.  It has a
summary (parameters, times, counts) followed by one block per source page
that carries broken links.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup, Tag

from linkcheck.graph.builder import LinkGraph
from linkcheck.graph.models import Link, RunCounts

_STYLE = """\
*        { font-family: sans-serif }
.data    { font-family: courier }
.center  { text-align: center }
.good    { color: rgb(  0,  97,   0); background-color: rgb(198, 239, 206) }
.iffy    { color: rgb(156, 101,   0); background-color: rgb(255, 235, 156) }
.bad     { color: rgb(156,   0,   6); background-color: rgb(255, 199, 206) }
.neutral { color: rgb(  0,   0,   0); background-color: rgb(217, 217, 214) }
"""

_CLASSES = {
    "label": "label center neutral",
    "good": "data center good",
    "iffy": "data center iffy",
    "bad": "data center bad",
}

_TIME_FORMAT = "%Y-%m-%d-%a-%H:%M:%SZ"

# A row is (label, value, value_class); values may be text or a Tag.
Row = tuple[str, Any, str]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _add(soup: BeautifulSoup, parent: Tag, name: str, text: str | None = None, **attrs: Any) -> Tag:
    tag = soup.new_tag(name, attrs={k: str(v) for k, v in attrs.items()})
    if text is not None:
        tag.string = text
    parent.append(tag)
    return tag


def _table(soup: BeautifulSoup, parent: Tag, rows: list[Row], table_id: str, title: str | None = None) -> Tag:
    table = _add(soup, parent, "table", id=table_id)
    if title:
        tr = _add(soup, table, "tr")
        _add(soup, tr, "th", title, colspan=2)
    for label, value, value_class in rows:
        tr = _add(soup, table, "tr")
        _add(soup, tr, "td", label, **{"class": _CLASSES["label"]})
        td = _add(soup, tr, "td", **{"class": _CLASSES[value_class]})
        if isinstance(value, Tag):
            td.append(value)
        else:
            td.string = "" if value is None else str(value)
    return table


def format_elapsed(counts: RunCounts) -> str:
    seconds = int(counts.elapsed.total_seconds())
    return f"{seconds // 3600:02d}:{seconds // 60 % 60:02d}:{seconds % 60:02d}"


def _format_time(value) -> str:
    return value.strftime(_TIME_FORMAT) if value is not None else ""


def _add_summary(soup: BeautifulSoup, body: Tag, graph: LinkGraph, counts: RunCounts) -> None:
    _add(soup, body, "h2", "Summary")

    options = graph.options
    params: list[Row] = [
        ("html_dirpath", repr(str(graph.root)), "good"),
        ("onsite_only", str(options.onsite_only).lower(), "good"),
        ("no_toc", str(options.no_toc).lower(), "good"),
    ]
    _table(soup, body, params, "parameters", "Parameters")
    _add(soup, body, "p")

    times: list[Row] = [
        ("Start Time", _format_time(counts.start_time), "good"),
        ("End Time", _format_time(counts.end_time), "good"),
        ("Elapsed Time", format_elapsed(counts), "good"),
    ]
    _table(soup, body, times, "times", "Times")
    _add(soup, body, "p")

    totals: list[Row] = [
        ("Source Pages", counts.source_pages, "good"),
        ("Target Pages", counts.target_pages, "good"),
        ("Links Checked", counts.links_checked, "good"),
        ("Links Broken", counts.links_broken, "bad"),
    ]
    _table(soup, body, totals, "counts", "Counts")
    _add(soup, body, "p")


def _link_rows(soup: BeautifulSoup, link: Link) -> list[Row]:
    href = soup.new_tag("a", href=link.href)
    href.string = link.href
    has_fragment = link.fragment is not None
    rows: list[Row] = [
        ("Href", href, "bad"),
        ("Text", link.text, "good"),
        # The part that failed is shown reddish.
        ("Path", link.target_path, "good" if has_fragment else "bad"),
        ("Fragment", link.fragment, "bad" if has_fragment else "good"),
    ]
    if link.error is not None:
        rows.append(("Exception", type(link.error).__name__, "bad"))
        rows.append(("Message", link.error.message, "bad"))
    return rows


def _add_broken_links(soup: BeautifulSoup, body: Tag, graph: LinkGraph, counts: RunCounts) -> None:
    _add(soup, body, "h2", "Broken Links by Source Page")
    if counts.links_broken == 0:
        _add(soup, body, "p", "None.")
        return

    legend = _add(soup, body, "ul")
    _add(soup, legend, "li", "Href: the href of the anchor element.")
    _add(soup, legend, "li", "Text: the text of the anchor element.")
    _add(soup, legend, "li", "Path: the URL or path of the link (not including the fragment). "
                             "If the path is reddish, the page was not found.")
    _add(soup, legend, "li", "Fragment: the fragment of the link. "
                             "If the fragment is reddish, the fragment was not found.")

    for path, page in graph.pages.items():
        broken = page.broken_links()
        if not broken:
            continue
        page_div = _add(soup, body, "div", **{"class": "broken_page", "path": path, "count": len(broken)})
        h3 = _add(soup, page_div, "h3")
        _add(soup, h3, "a", f"{path} ({len(broken)})", href=path)
        for link in broken:
            link_div = _add(soup, page_div, "div", **{"class": "broken_link"})
            table_id = "bad_url" if link.error is not None else "bad_fragment"
            _table(soup, link_div, _link_rows(soup, link), table_id)
            _add(soup, page_div, "p")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def render_report(graph: LinkGraph, counts: RunCounts) -> str:
    """Return the report document as a string."""
    soup = BeautifulSoup("", "html.parser")
    html = _add(soup, soup, "html")
    head = _add(soup, html, "head")
    _add(soup, head, "title", "Link Checker Report")
    _add(soup, head, "style", _STYLE)
    body = _add(soup, html, "body")
    _add(soup, body, "h1", "Link Checker Report")

    _add_summary(soup, body, graph, counts)
    _add_broken_links(soup, body, graph, counts)
    return soup.prettify()


def write_report(graph: LinkGraph, counts: RunCounts, path: str | Path) -> Path:
    """Render the report and write it to *path*; return the path written."""
    path = Path(path)
    path.write_text(render_report(graph, counts), encoding="utf-8")
    return path
