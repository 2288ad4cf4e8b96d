"""
Async HTTP client with per-host politeness queue and retries.

Built on httpx with:
- Per-host single-worker queue enforcing a fixed delay between requests
- Exponential backoff retry on transport errors
- Browser-like user-agent rotation
"""

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional
from urllib.parse import urlparse

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger(__name__)


# Listing host filters out non-browser clients
USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Safari/605.1.15",
]


@dataclass
class RateLimiter:
    """
    Single-worker queue for one host.

    Requests run one at a time, and each one starts at least ``min_delay``
    seconds after the previous one finished.
    """
    min_delay: float = 0.5
    last_finished: Optional[float] = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold the host's slot for the duration of one request."""
        async with self.lock:
            if self.last_finished is not None:
                elapsed = time.monotonic() - self.last_finished
                if elapsed < self.min_delay:
                    await asyncio.sleep(self.min_delay - elapsed)
            try:
                yield
            finally:
                self.last_finished = time.monotonic()


class HttpClient:
    """
    Async HTTP client with politeness delay and retries.

    Usage:
        async with HttpClient() as client:
            html = await client.get_text("https://example.com")
    """

    def __init__(
        self,
        min_delay: float = 0.5,
        timeout: float = 30.0,
        max_retries: int = 3,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            min_delay: Minimum pause between requests to the same host, seconds
            timeout: Request timeout in seconds
            max_retries: Maximum attempts for transport errors
            user_agent: Fixed user agent (rotates through USER_AGENTS if None)
            transport: Optional httpx transport (tests inject a mock here)
        """
        self.min_delay = min_delay
        self.timeout = timeout
        self.max_retries = max_retries
        self.user_agent = user_agent
        self.transport = transport

        self._client: Optional[httpx.AsyncClient] = None
        self._rate_limiters: dict[str, RateLimiter] = {}
        self._user_agent_index = 0

    async def __aenter__(self) -> "HttpClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={"Accept-Language": "en-US,en;q=0.9"},
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_rate_limiter(self, url: str) -> RateLimiter:
        """Get or create the queue for the URL's host."""
        host = urlparse(url).netloc
        if host not in self._rate_limiters:
            self._rate_limiters[host] = RateLimiter(min_delay=self.min_delay)
        return self._rate_limiters[host]

    def _get_user_agent(self) -> str:
        """Get configured user agent or the next one in rotation."""
        if self.user_agent:
            return self.user_agent
        ua = USER_AGENTS[self._user_agent_index % len(USER_AGENTS)]
        self._user_agent_index += 1
        return ua

    async def _do_request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Execute HTTP request, retrying transport errors."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        headers = kwargs.pop("headers", {})
        headers["User-Agent"] = self._get_user_agent()

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            reraise=True,
        ):
            with attempt:
                response = await self._client.request(method, url, headers=headers, **kwargs)
                response.raise_for_status()

        return response

    async def get(self, url: str, **kwargs) -> httpx.Response:
        """
        GET request through the host's politeness queue.

        Args:
            url: URL to fetch
            **kwargs: Additional httpx arguments

        Returns:
            httpx.Response object

        Raises:
            httpx.HTTPStatusError: Non-success status
            httpx.TransportError: Retries exhausted
        """
        limiter = self._get_rate_limiter(url)

        async with limiter.slot():
            logger.debug("http_get", url=url)
            return await self._do_request("GET", url, **kwargs)

    async def get_text(self, url: str, **kwargs) -> str:
        """GET request returning text content."""
        response = await self.get(url, **kwargs)
        return response.text
