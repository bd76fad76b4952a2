"""Best-effort page metadata (title, description, cover image).

Fetches the page with httpx, following redirects one checked hop at a time,
and parses meta tags with BeautifulSoup. Any failure yields an empty
``UrlMetadata``; a bookmark can always be saved without it.
"""

import ipaddress
import logging
from typing import Iterable, Optional
from urllib.parse import urljoin, urlsplit

import httpx
from bs4 import BeautifulSoup

from app.config import get_settings
from app.models.bookmark import UrlMetadata

logger = logging.getLogger(__name__)

# Singleton state
_extractor: Optional["MetadataExtractor"] = None

_BLOCKED_HOSTNAMES = {"localhost", "localhost.localdomain"}
MAX_REDIRECTS = 5

# (attribute, value) pairs tried in order; first non-empty content wins
TITLE_META = [("property", "og:title"), ("name", "twitter:title")]
DESCRIPTION_META = [
    ("property", "og:description"),
    ("name", "twitter:description"),
    ("name", "description"),
]
IMAGE_META = [
    ("property", "og:image"),
    ("property", "og:image:url"),
    ("property", "og:image:secure_url"),
    ("name", "twitter:image"),
    ("name", "twitter:image:src"),
]


class FetchBlockedError(ValueError):
    """URL must not be fetched (bad scheme, local or private address)."""


def validate_fetch_url(url: str) -> None:
    """Raise ``FetchBlockedError`` for URLs we refuse to fetch server-side.

    Only literal IP hosts are checked; hostnames are not resolved, so a public
    name that points at a private address is not caught here.
    """
    try:
        parts = urlsplit(url)
        host = (parts.hostname or "").strip().lower()
    except ValueError as e:
        raise FetchBlockedError(f"invalid url: {e}") from e
    if parts.scheme not in ("http", "https"):
        raise FetchBlockedError(f"unsupported scheme: {parts.scheme!r}")
    if not host:
        raise FetchBlockedError("missing host")
    if host in _BLOCKED_HOSTNAMES:
        raise FetchBlockedError(f"blocked host: {host}")
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return
    if (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_unspecified
        or ip.is_reserved
    ):
        raise FetchBlockedError(f"blocked address: {host}")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = " ".join(value.split())
    return value or None


def _first_meta(soup: BeautifulSoup, candidates: Iterable[tuple[str, str]]) -> Optional[str]:
    for attr, name in candidates:
        for tag in soup.find_all("meta", attrs={attr: name}):
            content = _clean(tag.get("content"))
            if content:
                return content
    return None


def _resolve_image(raw: Optional[str], base_url: str) -> Optional[str]:
    if not raw:
        return None
    resolved = urljoin(base_url, raw)
    if urlsplit(resolved).scheme not in ("http", "https"):
        return None
    return resolved


def parse_metadata(html: str, base_url: str) -> UrlMetadata:
    """Extract title, description and cover image from an HTML document.

    Relative image URLs are resolved against ``base_url`` (the final URL after
    redirects).
    """
    soup = BeautifulSoup(html, "html.parser")

    title = _first_meta(soup, TITLE_META)
    if not title and soup.title is not None:
        title = _clean(soup.title.get_text())
    if not title:
        h1 = soup.find("h1")
        title = _clean(h1.get_text()) if h1 is not None else None

    description = _first_meta(soup, DESCRIPTION_META)

    image = _first_meta(soup, IMAGE_META)
    if not image:
        link = soup.find("link", rel="image_src")
        image = _clean(link.get("href")) if link is not None else None

    return UrlMetadata(
        title=title,
        description=description,
        cover_url=_resolve_image(image, base_url),
    )


class MetadataExtractor:
    """Fetches a page and scrapes its metadata. ``extract`` never raises."""

    def __init__(
        self,
        *,
        timeout: float,
        max_bytes: int,
        user_agent: str,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.user_agent = user_agent
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    async def _read_body(self, response: httpx.Response) -> str:
        chunks: list[bytes] = []
        size = 0
        async for chunk in response.aiter_bytes():
            size += len(chunk)
            if size > self.max_bytes:
                raise ValueError(f"response larger than {self.max_bytes} bytes")
            chunks.append(chunk)

        encoding = response.encoding or "utf-8"
        return b"".join(chunks).decode(encoding, errors="replace")

    async def _fetch(self, url: str) -> tuple[str, str]:
        """Return ``(html, final_url)``; raises on any fetch problem.

        Redirects are followed one hop at a time so every target is checked
        before it is requested.
        """
        client = self._get_client()
        request = client.build_request("GET", url)

        for _ in range(MAX_REDIRECTS + 1):
            validate_fetch_url(str(request.url))
            response = await client.send(request, stream=True, follow_redirects=False)
            try:
                if response.next_request is None:
                    response.raise_for_status()
                    return await self._read_body(response), str(response.url)
                request = response.next_request
            finally:
                await response.aclose()

        raise ValueError(f"more than {MAX_REDIRECTS} redirects")

    async def extract(self, url: str) -> UrlMetadata:
        try:
            html, final_url = await self._fetch(url)
        except FetchBlockedError as e:
            logger.warning(f"Refusing to fetch metadata for {url}: {e}")
            return UrlMetadata()
        except httpx.HTTPError as e:
            logger.warning(f"Error fetching metadata for {url}: {e}")
            return UrlMetadata()
        except Exception as e:
            # e.g. httpx.InvalidURL or an oversized body
            logger.warning(f"Error extracting metadata for {url}: {e}")
            return UrlMetadata()

        if not html.strip():
            return UrlMetadata()

        try:
            return parse_metadata(html, final_url)
        except Exception as e:
            logger.warning(f"Error parsing metadata for {url}: {e}")
            return UrlMetadata()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None


# =====================================================================
# Singleton factory
# =====================================================================


def get_metadata_extractor() -> MetadataExtractor:
    """Get or create the singleton ``MetadataExtractor`` from settings."""
    global _extractor
    if _extractor is None:
        settings = get_settings()
        _extractor = MetadataExtractor(
            timeout=settings.metadata_fetch_timeout,
            max_bytes=settings.metadata_max_bytes,
            user_agent=settings.metadata_user_agent,
        )
    return _extractor


def reset_metadata_extractor() -> None:
    """Reset extractor for testing."""
    global _extractor
    _extractor = None


async def extract_metadata(url: str) -> UrlMetadata:
    """Scrape ``url`` with the shared extractor."""
    return await get_metadata_extractor().extract(url)
