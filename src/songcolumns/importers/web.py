"""Importer for chord charts published as web pages.

Most chord sites render the chart inside a ``<pre>`` block with chords
space-aligned above the lyrics::

    <h1>Amazing Grace</h1>
    <pre>
    [Verse 1]
    G          C        G
    Amazing grace, how sweet the sound
    </pre>

The largest ``<pre>`` block is taken as the chart. The title comes from the
``og:title`` meta tag, the first ``<h1>``, the ``<title>`` element, or the
URL slug, in that order.
"""

import logging

import httpx
from bs4 import BeautifulSoup, Tag

from ..exceptions import FetchError, ParseError
from .base import SongImporter
from .utils import ChartFormat, chart_to_chordpro, detect_format

logger = logging.getLogger(__name__)

_FETCH_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


class WebImporter(SongImporter):
    """Importer for web pages that carry a chart in a ``<pre>`` block."""

    timeout = 15

    @classmethod
    def can_handle(cls, source: str) -> bool:
        return source.startswith(("http://", "https://"))

    def load(self, source: str) -> str:
        """GET the page with browser-like headers."""
        try:
            resp = httpx.get(
                source,
                headers=_FETCH_HEADERS,
                follow_redirects=True,
                timeout=self.timeout,
            )
        except httpx.RequestError as exc:
            raise FetchError(source, 0) from exc
        if resp.status_code != 200:
            raise FetchError(source, resp.status_code)
        logger.debug("Fetched %d bytes from %s", len(resp.text), source)
        return resp.text

    def convert(self, raw: str, source: str) -> str:
        soup = BeautifulSoup(raw, "html.parser")

        blocks = [pre.get_text() for pre in soup.find_all("pre")]
        blocks = [block for block in blocks if block.strip()]
        if not blocks:
            raise ParseError(source, "Could not find a <pre> chord chart")

        chart = max(blocks, key=len).replace("\xa0", " ")
        if detect_format(chart) is ChartFormat.CHORDPRO:
            return chart
        return chart_to_chordpro(chart, title=_page_title(soup, source))


def _page_title(soup: BeautifulSoup, url: str) -> str:
    meta = soup.find("meta", attrs={"property": "og:title"})
    if isinstance(meta, Tag) and meta.get("content"):
        return str(meta["content"]).strip()

    for tag_name in ("h1", "title"):
        tag = soup.find(tag_name)
        if tag:
            text = tag.get_text(strip=True)
            if text:
                return text

    return _title_from_url(url)


def _title_from_url(url: str) -> str:
    """Derive a song title from the URL slug as a last-resort fallback."""
    slug = url.split("?", 1)[0].rstrip("/").split("/")[-1]
    slug = slug.rsplit(".", 1)[0]
    return slug.replace("-", " ").replace("_", " ").title()
