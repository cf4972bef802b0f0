"""Tests for link-graph construction, end to end over a temporary HTML tree.

Mocking strategy:
- Local documents are written into ``tmp_path``.
- Off-site targets are served by ``respx``; unmocked hosts would raise, so
  every test that has off-site links mocks them explicitly.
- Progress output is silenced through ``settings.progress``.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import respx

from linkcheck.errors import FetchError, ResolutionError
from linkcheck.graph.builder import LinkGraph, check_tree
from linkcheck.graph.models import Link, Origin, Page, Validity
from linkcheck.options import CheckOptions

_HTML_HEADERS = {"content-type": "text/html"}


def _write(root: Path, rel: str, body: str, body_id: str | None = None) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    id_attr = f' id="{body_id}"' if body_id else ""
    path.write_text(f"<html><head></head><body{id_attr}>{body}</body></html>", encoding="utf-8")


@pytest.fixture(autouse=True)
def quiet(monkeypatch):
    monkeypatch.setattr("linkcheck.graph.builder.settings.progress", False)


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

class TestDiscover:
    def test_sorted_relative_paths(self, tmp_path) -> None:
        _write(tmp_path, "b.html", "")
        _write(tmp_path, "a.html", "")
        _write(tmp_path, "lib/c.html", "")
        (tmp_path / "notes.txt").write_text("not html")

        graph = LinkGraph(tmp_path)
        assert graph.discover() == ["a.html", "b.html", "lib/c.html"]
        assert all(p.origin is Origin.SOURCE for p in graph.pages.values())
        assert graph.counts.source_pages == 3

    def test_omit_patterns(self, tmp_path) -> None:
        _write(tmp_path, "index.html", "")
        _write(tmp_path, "js/search.html", "")
        graph = LinkGraph(tmp_path, CheckOptions(source_file_omits=["^js/"]))
        assert graph.discover() == ["index.html"]

    def test_include_patterns(self, tmp_path) -> None:
        _write(tmp_path, "index.html", "")
        _write(tmp_path, "lib/a.html", "")
        graph = LinkGraph(tmp_path, CheckOptions(source_file_includes=["^lib/"]))
        assert graph.discover() == ["lib/a.html"]


# ---------------------------------------------------------------------------
# End-to-end scenarios
# ---------------------------------------------------------------------------

class TestScenarios:
    def test_local_fragment_found(self, tmp_path) -> None:
        """index.html → page.html#section1, and page.html has that id."""
        _write(tmp_path, "index.html", '<a href="page.html#section1">Section</a>')
        _write(tmp_path, "page.html", '<h2 id="section1">Section 1</h2>')

        graph = check_tree(tmp_path)

        (link,) = graph.pages["index.html"].links
        assert link.validity is Validity.VALID
        assert graph.counts.links_broken == 0

    def test_unreachable_host(self, tmp_path) -> None:
        _write(tmp_path, "index.html", '<a href="https://nosuch.invalid/">Nowhere</a>')
        with respx.mock:
            respx.get("https://nosuch.invalid/").mock(side_effect=httpx.ConnectError("no such host"))
            graph = check_tree(tmp_path)

        (link,) = graph.pages["index.html"].links
        assert link.validity is Validity.INVALID
        assert isinstance(link.error, FetchError)
        assert graph.counts.links_broken == 1

    def test_remote_fragment_missing(self, tmp_path) -> None:
        _write(tmp_path, "index.html", '<a href="https://example.com/doc.html#missing">Doc</a>')
        with respx.mock:
            respx.get("https://example.com/doc.html").mock(
                return_value=httpx.Response(
                    200, text="<html><body><p id='present'>x</p></body></html>", headers=_HTML_HEADERS
                )
            )
            graph = check_tree(tmp_path)

        (link,) = graph.pages["index.html"].links
        assert link.validity is Validity.INVALID
        assert link.error is None
        assert graph.pages["https://example.com/doc.html"].anchors == {"present"}

    def test_shared_target(self, tmp_path) -> None:
        _write(tmp_path, "one.html", '<a href="shared.html">Shared</a>')
        _write(tmp_path, "two.html", '<a href="shared.html">Shared</a>')
        _write(tmp_path, "shared.html", "<p>shared</p>")

        graph = check_tree(tmp_path)

        assert list(graph.pages).count("shared.html") == 1
        targets = {id(graph.lookup(link.target_path)) for p in graph.source_pages() for link in p.links}
        assert len(targets) == 1
        assert all(link.valid for p in graph.source_pages() for link in p.links)


# ---------------------------------------------------------------------------
# Target materialisation
# ---------------------------------------------------------------------------

class TestMaterializeTargets:
    def test_local_target_read_once(self, tmp_path, monkeypatch) -> None:
        _write(tmp_path, "one.html", '<a href="lib/shared.html#a">A</a>')
        _write(tmp_path, "two.html", '<a href="lib/shared.html#b">B</a>')
        _write(tmp_path, "lib/shared.html", '<h2 id="a">A</h2><h2 id="b">B</h2>')
        graph = LinkGraph(tmp_path, CheckOptions(source_file_omits=["^lib/"]))

        calls: list[str] = []
        original = LinkGraph._load_local

        def counting(self, page: Page) -> bool:
            calls.append(page.path)
            return original(self, page)

        monkeypatch.setattr(LinkGraph, "_load_local", counting)
        counts = graph.check()

        assert calls == ["lib/shared.html"]
        assert counts.target_pages == 1
        assert graph.pages["lib/shared.html"].origin is Origin.TARGET
        assert counts.links_broken == 0

    def test_remote_target_fetched_once(self, tmp_path) -> None:
        _write(tmp_path, "one.html", '<a href="https://example.com/">E</a>')
        _write(tmp_path, "two.html", '<a href="https://example.com/#top">E</a>')
        with respx.mock:
            route = respx.get("https://example.com/").mock(
                return_value=httpx.Response(200, text="<body id='top'></body>", headers=_HTML_HEADERS)
            )
            graph = check_tree(tmp_path)

        assert route.call_count == 1
        assert graph.counts.links_broken == 0

    def test_fetch_error_marks_every_link_to_target(self, tmp_path) -> None:
        _write(tmp_path, "one.html", '<a href="https://down.example.com/">D</a>')
        _write(tmp_path, "two.html", '<a href="https://down.example.com/">D</a>')
        with respx.mock:
            route = respx.get("https://down.example.com/").mock(side_effect=httpx.ConnectTimeout("timeout"))
            graph = check_tree(tmp_path)

        assert route.call_count == 1
        links = [link for p in graph.source_pages() for link in p.links]
        assert all(link.validity is Validity.INVALID for link in links)
        assert all(isinstance(link.error, FetchError) for link in links)

    def test_missing_local_file_is_placeholder(self, tmp_path) -> None:
        _write(tmp_path, "one.html", '<a href="nope.html">X</a>')
        _write(tmp_path, "two.html", '<a href="nope.html">X</a>')
        graph = check_tree(tmp_path)

        placeholder = graph.pages["nope.html"]
        assert placeholder.found is False
        assert placeholder.anchors is None
        assert graph.lookup("nope.html") is None
        assert graph.counts.target_pages == 1
        assert graph.counts.links_broken == 2

    def test_non_html_local_target_accepts_fragment(self, tmp_path) -> None:
        _write(tmp_path, "index.html", '<a href="data.txt#line-3">Data</a>')
        (tmp_path / "data.txt").write_text("one\ntwo\nthree\n")
        graph = check_tree(tmp_path)

        assert graph.pages["data.txt"].content_type == "text/plain"
        assert graph.counts.links_broken == 0

    def test_not_found_status_without_fragment_is_valid(self, tmp_path) -> None:
        _write(tmp_path, "index.html", '<a href="https://example.com/404">X</a>')
        with respx.mock:
            respx.get("https://example.com/404").mock(return_value=httpx.Response(404))
            graph = check_tree(tmp_path)

        assert graph.pages["https://example.com/404"].status_code == 404
        assert graph.counts.links_broken == 0

    def test_not_found_status_broken_in_strict_mode(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setattr("linkcheck.scraper.fetcher.settings.strict_status", True)
        _write(tmp_path, "index.html", '<a href="https://example.com/404">X</a>')
        with respx.mock:
            respx.get("https://example.com/404").mock(return_value=httpx.Response(404))
            graph = check_tree(tmp_path)

        assert graph.counts.links_broken == 1

    def test_parallel_fetch_keeps_claim_order(self, tmp_path) -> None:
        hrefs = [f"https://example.com/p{i}" for i in range(6)]
        _write(tmp_path, "index.html", "".join(f'<a href="{h}">{h}</a>' for h in hrefs))
        graph = LinkGraph(tmp_path, max_concurrent_fetches=4)
        with respx.mock:
            for h in hrefs:
                respx.get(h).mock(return_value=httpx.Response(200, text="<p>x</p>", headers=_HTML_HEADERS))
            graph.check()

        assert [p.path for p in graph.target_pages()] == hrefs
        assert all(p.status_code == 200 for p in graph.target_pages())


# ---------------------------------------------------------------------------
# Options and edge cases
# ---------------------------------------------------------------------------

class TestOptionsAndEdges:
    def test_onsite_only_skips_offsite(self, tmp_path) -> None:
        _write(tmp_path, "index.html", '<a href="https://example.com/">E</a><a href="index.html">Me</a>')
        graph = check_tree(tmp_path, CheckOptions(onsite_only=True))
        assert [link.href for link in graph.pages["index.html"].links] == ["index.html"]

    def test_no_toc_skips_table_of_contents_links(self, tmp_path) -> None:
        _write(tmp_path, "table_of_contents.html", '<a href="missing.html">M</a>')
        graph = check_tree(tmp_path, CheckOptions(no_toc=True))
        assert graph.pages["table_of_contents.html"].links == []
        assert graph.counts.links_checked == 0

    def test_same_page_fragment(self, tmp_path) -> None:
        _write(tmp_path, "index.html", '<a href="#top">Top</a><a href="#nowhere">No</a>', body_id="top")
        graph = check_tree(tmp_path)
        verdicts = [link.valid for link in graph.pages["index.html"].links]
        assert verdicts == [True, False]
        assert graph.counts.target_pages == 0

    def test_bare_hash_is_top_of_page(self, tmp_path) -> None:
        _write(tmp_path, "index.html", '<a href="#">menu</a><a href="page.html#">page</a>', body_id="top")
        _write(tmp_path, "page.html", "")
        graph = check_tree(tmp_path)
        links = graph.pages["index.html"].links
        assert [link.fragment for link in links] == [None, None]
        assert all(link.valid for link in links)
        assert graph.counts.links_broken == 0

    def test_http_prefixed_sibling_is_local(self, tmp_path) -> None:
        _write(tmp_path, "lib/a.html", '<a href="http_rb.html#label-Usage">HTTP</a>')
        _write(tmp_path, "lib/http_rb.html", '<h2 id="label-Usage">Usage</h2>')
        # No respx mock: an attempted fetch would fail the link.
        graph = check_tree(tmp_path)
        (link,) = graph.pages["lib/a.html"].links
        assert link.target_path == "lib/http_rb.html"
        assert link.error is None
        assert link.valid

    def test_fragment_into_document_without_body_tag(self, tmp_path) -> None:
        _write(tmp_path, "index.html", '<a href="page.html#section1">Section</a>')
        (tmp_path / "page.html").write_text('<h2 id="section1">Section 1</h2>', encoding="utf-8")
        graph = check_tree(tmp_path)
        assert graph.pages["page.html"].anchors == {"section1"}
        assert graph.counts.links_broken == 0

    def test_relative_parent_links(self, tmp_path) -> None:
        _write(tmp_path, "lib/net/http.html", '<a href="../uri.html#label-Usage">URI</a>')
        _write(tmp_path, "lib/uri.html", '<h2 id="label-Usage">Usage</h2>')
        graph = check_tree(tmp_path)
        (link,) = graph.pages["lib/net/http.html"].links
        assert link.target_path == "lib/uri.html"
        assert link.valid

    def test_resolution_error_aborts(self, tmp_path) -> None:
        _write(tmp_path, "lib/a.html", '<a href="../../../x.html">X</a>')
        with pytest.raises(ResolutionError):
            check_tree(tmp_path)

    def test_counts_and_timestamps(self, tmp_path) -> None:
        _write(tmp_path, "index.html", '<a href="a.html">A</a><a href="b.html">B</a>')
        _write(tmp_path, "a.html", "")
        counts = LinkGraph(tmp_path).check()
        assert counts.source_pages == 2
        assert counts.target_pages == 1
        assert counts.links_checked == 2
        assert counts.links_broken == 1
        assert counts.start_time <= counts.end_time


class TestBackfill:
    def test_unextracted_target_is_backfilled(self, tmp_path) -> None:
        graph = LinkGraph(tmp_path)
        source = Page(path="index.html", origin=Origin.SOURCE, content_type="text/html", anchors=set())
        target = Page(path="t.html", origin=Origin.TARGET, content_type="text/html")
        target.document = "<body><h3 id='late'>Late</h3></body>"
        graph.pages = {"index.html": source, "t.html": target}

        source.links = [Link.from_href("t.html#late", "Late", "index.html")]
        graph.backfill_fragments()
        graph.validate()

        assert target.anchors == {"late"}
        assert source.links[0].valid
