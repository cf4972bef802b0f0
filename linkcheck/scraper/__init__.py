"""Scraper package — remote fetch & HTML extraction."""

from linkcheck.scraper.extractor import (
    AnchorStrategy,
    extract_anchors,
    extract_links,
    gather_anchors,
    parse_html,
)
from linkcheck.scraper.fetcher import fetch_url
from linkcheck.scraper.models import FetchResult

__all__ = [
    "fetch_url",
    "extract_anchors",
    "extract_links",
    "gather_anchors",
    "parse_html",
    "AnchorStrategy",
    "FetchResult",
]
