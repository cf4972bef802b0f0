"""Link-graph construction: discovery, scanning, target materialisation.

A :class:`LinkGraph` owns the page registry for one checking run.  The run is
strictly phase-sequential::

    discover → scan_sources → materialize_targets → backfill_fragments → validate

Every distinct canonical destination is claimed in the registry exactly once,
on the calling thread, before any network I/O starts.  That is what keeps N
links to the same target down to a single read or fetch, and what keeps
results in claim order when fetches run in a thread pool.
"""

from __future__ import annotations

import mimetypes
import os
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from pathlib import Path

from linkcheck.config import settings
from linkcheck.errors import FetchError
from linkcheck.graph.models import Link, Origin, Page, RunCounts
from linkcheck.graph.paths import checkable, offsite
from linkcheck.graph.validator import validate_links
from linkcheck.options import CheckOptions
from linkcheck.scraper.extractor import extract_links, gather_anchors, parse_html
from linkcheck.scraper.fetcher import fetch_url, make_client
from linkcheck.scraper.models import FetchResult


def _progress(message: str) -> None:
    if settings.progress:
        print(message)


class LinkGraph:
    """Registry of pages (canonical path → :class:`Page`) for one run."""

    def __init__(
        self,
        root: str | Path,
        options: CheckOptions | None = None,
        *,
        max_concurrent_fetches: int | None = None,
    ) -> None:
        self.root = Path(root)
        self.options = options or CheckOptions()
        self.max_concurrent_fetches = max_concurrent_fetches or settings.max_concurrent_fetches
        self.pages: dict[str, Page] = {}
        self.counts = RunCounts()

    # ------------------------------------------------------------------
    # Registry access
    # ------------------------------------------------------------------
    def lookup(self, path: str) -> Page | None:
        """Return the page at *path* if its document was actually found."""
        page = self.pages.get(path)
        if page is None or not page.found:
            return None
        return page

    def source_pages(self) -> list[Page]:
        return [p for p in self.pages.values() if p.origin is Origin.SOURCE]

    def target_pages(self) -> list[Page]:
        return [p for p in self.pages.values() if p.origin is Origin.TARGET]

    def broken_links(self) -> list[tuple[Page, Link]]:
        return [(page, link) for page in self.pages.values() for link in page.broken_links()]

    # ------------------------------------------------------------------
    # Phase 1 — discovery
    # ------------------------------------------------------------------
    def discover(self) -> list[str]:
        """Register every matching ``*.html`` file under the root as a source page."""
        includes = [re.compile(p) for p in self.options.source_file_includes]
        omits = [re.compile(p) for p in self.options.source_file_omits]

        paths = sorted(
            p.relative_to(self.root).as_posix()
            for p in self.root.rglob("*.html")
            if p.is_file()
        )
        if includes:
            paths = [p for p in paths if any(r.search(p) for r in includes)]
        paths = [p for p in paths if not any(r.search(p) for r in omits)]

        for path in paths:
            self.pages[path] = Page(path=path, origin=Origin.SOURCE, content_type="text/html")
        self.counts.source_pages = len(paths)
        _progress(f"[DISCOVER] {len(paths)} source page(s) under {str(self.root)!r}.")
        return paths

    # ------------------------------------------------------------------
    # Phase 2 — source scan
    # ------------------------------------------------------------------
    def scan_sources(self) -> None:
        """Parse each source page once; gather its links and its own anchors."""
        link_count = 0
        for page in self.source_pages():
            soup = parse_html(self._read(page.path))
            if not (self.options.no_toc and page.path == settings.toc_filename):
                page.links = extract_links(soup, page, onsite_only=self.options.onsite_only)
                link_count += len(page.links)
            gather_anchors(page, soup)
        _progress(f"[SCAN] {link_count} link(s) gathered.")

    # ------------------------------------------------------------------
    # Phase 3 — target materialisation
    # ------------------------------------------------------------------
    def materialize_targets(self) -> None:
        """Create a target page for every destination not yet in the registry.

        Local files are read and parsed straight away.  Off-site targets are
        claimed first and fetched afterwards; a fetch failure marks every
        link to that destination invalid.
        """
        pending: list[Page] = []
        created = 0
        for source in self.source_pages():
            for link in source.links:
                if link.target_path in self.pages:
                    continue
                page = Page(path=link.target_path, origin=Origin.TARGET)
                self.pages[page.path] = page
                created += 1
                if self._load_local(page):
                    continue
                if offsite(page.path) and checkable(page.path):
                    pending.append(page)
                else:
                    page.found = False

        errors: dict[str, FetchError] = {}
        for page, result in zip(pending, self._fetch_all([p.path for p in pending])):
            self._apply_fetch(page, result)
            if result.error is not None:
                errors[page.path] = result.error

        if errors:
            for source in self.source_pages():
                for link in source.links:
                    error = errors.get(link.target_path)
                    if error is not None:
                        link.fail(error)

        self.counts.target_pages = created
        _progress(
            f"[TARGETS] {created} target page(s), {len(pending)} fetched, "
            f"{len(errors)} fetch error(s)."
        )

    def _read(self, path: str) -> str:
        return (self.root / path).read_text(encoding="utf-8", errors="replace")

    def _load_local(self, page: Page) -> bool:
        """Read *page* from disk if it is a readable local file."""
        if offsite(page.path):
            return False
        file = self.root / page.path.lstrip("/")
        if not file.is_file() or not os.access(file, os.R_OK):
            return False
        content_type = mimetypes.guess_type(file.name)[0] or "text/html"
        try:
            text = file.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return False
        page.content_type = content_type
        if page.is_html:
            page.document = text
            gather_anchors(page)
        return True

    def _fetch_all(self, urls: list[str]) -> list[FetchResult]:
        """Fetch *urls*, returning results in the same order."""
        if not urls:
            return []
        results: list[FetchResult | None] = [None] * len(urls)
        with make_client() as client:
            if self.max_concurrent_fetches <= 1 or len(urls) == 1:
                for i, url in enumerate(urls):
                    _progress(f"[FETCH] {url}")
                    results[i] = fetch_url(url, client)
            else:
                with ThreadPoolExecutor(max_workers=self.max_concurrent_fetches) as pool:
                    future_to_index = {
                        pool.submit(fetch_url, url, client): i for i, url in enumerate(urls)
                    }
                    for future in as_completed(future_to_index):
                        i = future_to_index[future]
                        _progress(f"[FETCH] {urls[i]}")
                        results[i] = future.result()
        return [r for r in results if r is not None]

    def _apply_fetch(self, page: Page, result: FetchResult) -> None:
        page.status_code = result.status_code
        page.content_type = result.content_type
        if result.error is not None:
            _progress(f"[FETCH] ✗ {page.path}: {result.error}")
            page.found = result.status_code is not None
            return
        if result.usable:
            page.document = result.html
            gather_anchors(page)

    # ------------------------------------------------------------------
    # Phase 4 — fragment backfill
    # ------------------------------------------------------------------
    def backfill_fragments(self) -> None:
        """Extract anchors for fragment targets that have not been scanned yet.

        ``check()`` extracts every page as soon as its bytes arrive, so this
        only acts on pages registered from outside with a retained document
        and no anchors.
        """
        for source in self.source_pages():
            for link in source.links:
                if link.fragment is None:
                    continue
                target = self.pages.get(link.target_path)
                if target is None or target.anchors is not None:
                    continue
                if target.is_html:
                    gather_anchors(target)

    # ------------------------------------------------------------------
    # Phase 5 — validation
    # ------------------------------------------------------------------
    def validate(self) -> None:
        checked, broken = validate_links(self)
        self.counts.links_checked = checked
        self.counts.links_broken = broken
        _progress(f"[VALIDATE] {checked} link(s) checked, {broken} broken.")

    # ------------------------------------------------------------------
    # Entry-point
    # ------------------------------------------------------------------
    def check(self) -> RunCounts:
        """Run every phase in order and return the run counters.

        Raises:
            ResolutionError: If a link climbs above the root of the tree.
        """
        self.counts.start_time = datetime.now(timezone.utc)
        self.discover()
        self.scan_sources()
        self.materialize_targets()
        self.backfill_fragments()
        self.validate()
        self.counts.end_time = datetime.now(timezone.utc)
        return self.counts


def check_tree(root: str | Path, options: CheckOptions | None = None) -> LinkGraph:
    """Build and validate the link graph for *root*; return the graph."""
    graph = LinkGraph(root, options)
    graph.check()
    return graph
