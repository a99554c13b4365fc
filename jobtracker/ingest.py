import os, re
import logging
import httpx
from bs4 import BeautifulSoup

from .errors import UpstreamFetchError

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
# Bound on the text handed to the LLM; anything past it is dropped.
MAX_PAGE_CHARS = 15000
NON_CONTENT_TAGS = ["script", "style", "nav", "footer", "header", "aside", "iframe", "noscript"]

_WS_RX = re.compile(r"\s+")


async def fetch_page(url: str) -> str:
    """Fetch raw HTML for a posting URL, identifying as a desktop browser."""
    timeout = float(os.getenv("FETCH_TIMEOUT", "30"))
    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": BROWSER_USER_AGENT},
        ) as client:
            r = await client.get(url)
    except httpx.HTTPError as e:
        raise UpstreamFetchError(f"Failed to fetch URL: {e}") from e

    if not (200 <= r.status_code < 300):
        raise UpstreamFetchError(f"Failed to fetch URL: {r.status_code}")
    return r.text


def html_to_text(html: str, limit: int = MAX_PAGE_CHARS) -> str:
    """Strip non-content markup and return collapsed, truncated visible text."""
    soup = BeautifulSoup(html, "lxml")
    for el in soup(NON_CONTENT_TAGS):
        el.extract()
    root = soup.body or soup
    text = _WS_RX.sub(" ", root.get_text(" ")).strip()
    return text[:limit]


async def fetch_page_text(url: str) -> str:
    html = await fetch_page(url)
    text = html_to_text(html)
    logger.info(f"Fetched {url}: {len(html)} bytes of HTML, {len(text)} chars of text")
    return text
