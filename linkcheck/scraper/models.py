"""Data models for the fetch pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field

from linkcheck.errors import FetchError
from linkcheck.graph.models import html_like


@dataclass
class FetchResult:
    """The outcome of one GET against a remote target."""

    url: str
    status_code: int | None = None
    content_type: str | None = None
    html: str | None = field(default=None, repr=False)
    error: FetchError | None = None

    @property
    def usable(self) -> bool:
        """Whether the body may be parsed for anchors."""
        if self.error is not None or self.status_code is None:
            return False
        return 200 <= self.status_code < 400 and html_like(self.content_type)
