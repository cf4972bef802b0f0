"""HTTP fetcher for off-site link targets."""

from __future__ import annotations

import httpx

from linkcheck.config import settings
from linkcheck.errors import FetchError, HttpStatusError
from linkcheck.scraper.models import FetchResult

# Failures of the transport itself.  Anything else escaping ``client.get`` is
# a bug and is left to propagate.
_TRANSPORT_ERRORS = (httpx.TransportError, httpx.TooManyRedirects, httpx.InvalidURL)


def make_client() -> httpx.Client:
    """Return an ``httpx.Client`` configured from :data:`settings`."""
    return httpx.Client(
        headers={"User-Agent": settings.user_agent},
        timeout=settings.request_timeout,
        follow_redirects=True,
    )


def fetch_url(url: str, client: httpx.Client | None = None) -> FetchResult:
    """GET *url* once and return a :class:`FetchResult`.

    Transport failures (DNS, connection refused, timeouts, protocol errors)
    are returned on ``result.error`` rather than raised.  The body is only
    kept when the response is usable for anchor extraction: status in
    [200, 400) and an HTML content type.  With ``settings.strict_status`` a
    status outside that range is reported as an :class:`HttpStatusError`.
    """
    if client is None:
        with make_client() as own_client:
            return fetch_url(url, own_client)

    try:
        response = client.get(url)
    except _TRANSPORT_ERRORS as exc:
        return FetchResult(url=url, error=FetchError(url, exc))

    result = FetchResult(
        url=url,
        status_code=response.status_code,
        content_type=response.headers.get("content-type"),
    )
    if settings.strict_status and not 200 <= response.status_code < 400:
        result.error = HttpStatusError(url, response.status_code)
    if result.usable:
        result.html = response.text
    return result
