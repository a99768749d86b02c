"""Page fetching for toolscout.

Provides URL normalization and a time-bounded fetch cache that wraps a
network fetch plus text extraction. Network failures degrade into a
placeholder document; only malformed URLs propagate.
"""

import asyncio
import logging
import re
import time
from typing import Callable, Dict, Optional
from urllib.parse import urlparse

import aiohttp

from services.shared.cache import TTLCache
from services.shared.errors import FailurePolicy, FetchError, InvalidURL
from services.shared.models import Document
from .extractor import extract

logger = logging.getLogger(__name__)

# Browser-like headers reduce anti-bot rejections
DEFAULT_HEADERS = {
    'User-Agent': ('Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
                   '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'),
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5'
}

DEFAULT_SCHEME = 'https://'
TIMEOUT_PLACEHOLDER = 'Failed to load content: Request timed out'

_SCHEME_RE = re.compile(r'^https?://', re.IGNORECASE)


def normalize_url(raw_url: str) -> str:
    """Trim, default the scheme to https and validate the result.

    Normalizing an already-normalized URL returns it unchanged.

    Raises:
        InvalidURL: if the URL has no usable host even after defaulting
    """
    if not isinstance(raw_url, str):
        raise InvalidURL(str(raw_url), "URL must be a string")

    url = raw_url.strip()
    if not url:
        raise InvalidURL(raw_url, "URL is empty")

    if not _SCHEME_RE.match(url):
        url = DEFAULT_SCHEME + url

    parsed = urlparse(url)
    try:
        host = parsed.hostname
        parsed.port
    except ValueError as e:
        raise InvalidURL(url, str(e)) from e

    if not host or any(ch.isspace() for ch in parsed.netloc):
        raise InvalidURL(url)

    return url


def fallback_title(url: str) -> str:
    """Host of ``url`` without a leading ``www.``; the URL itself if it has no host."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        host = None
    if not host:
        return url
    if host.startswith('www.'):
        host = host[4:]
    return host


class PageFetcher:
    """Fetches pages into ``Document`` profiles behind a one-hour cache."""

    failure_policy = FailurePolicy.DEGRADE_TO_PLACEHOLDER

    def __init__(self,
                 request_timeout: float = 15.0,
                 cache_ttl: float = 3600.0,
                 cache: Optional[TTLCache] = None,
                 session: Optional[aiohttp.ClientSession] = None,
                 headers: Optional[Dict[str, str]] = None,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize fetcher.

        Args:
            request_timeout: Per-request timeout in seconds, independent of the cache TTL
            cache_ttl: Document cache time-to-live in seconds
            cache: Optional pre-built cache (overrides ``cache_ttl`` and ``clock``)
            session: Optional shared aiohttp session; the fetcher never closes it
            headers: Request headers (defaults to a browser-like set)
            clock: Clock used by the cache
        """
        self.request_timeout = request_timeout
        self.cache = cache if cache is not None else TTLCache(cache_ttl, name="fetch_cache", clock=clock)
        self.headers = dict(headers or DEFAULT_HEADERS)
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        """Async context manager entry."""
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self):
        """Close the fetcher session if this fetcher created it."""
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(headers=self.headers)
            self._owns_session = True
        return self.session

    async def fetch_document(self, raw_url: str) -> Document:
        """Return the document for ``raw_url``, served from cache when fresh.

        Raises:
            InvalidURL: if the URL cannot be normalized
        """
        url = normalize_url(raw_url)
        return await self.cache.get_or_load(
            url,
            lambda: self._load(url),
            cacheable=lambda doc: not doc.degraded
        )

    async def _load(self, url: str) -> Document:
        try:
            html = await self._download(url)
        except asyncio.TimeoutError:
            logger.warning(f"Timeout fetching {url}, using placeholder document")
            return self._degraded(url, TIMEOUT_PLACEHOLDER)
        except (FetchError, aiohttp.ClientError) as e:
            logger.warning(f"Failed to fetch {url}: {e}, using placeholder document")
            return self._degraded(url, f"Failed to load content: {str(e) or type(e).__name__}")

        content = extract(html)
        return Document(
            title=content.title or fallback_title(url),
            description=content.description,
            text=content.text,
            url=url
        )

    async def _download(self, url: str) -> str:
        session = await self._get_session()
        timeout = aiohttp.ClientTimeout(total=self.request_timeout)

        logger.info(f"Fetching URL: {url}")
        async with session.get(url, headers=self.headers, timeout=timeout,
                               allow_redirects=True) as response:
            if response.status < 200 or response.status >= 300:
                raise FetchError(url, response.status)
            html = await response.text(errors='replace')

        logger.debug(f"Received HTML content ({len(html)} bytes) from {url}")
        return html

    def _degraded(self, url: str, placeholder: str) -> Document:
        return Document(
            title=fallback_title(url),
            description='',
            text=placeholder,
            url=url,
            degraded=True
        )

    def clear_cache(self) -> None:
        """Empty the document cache."""
        self.cache.clear()
