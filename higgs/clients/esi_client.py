"""HTTP client for the EVE Swagger Interface (ESI).

Provides retrying GET operations with:
- A fixed per-fetch retry budget
- Free retries when the local process runs out of file descriptors
- Fixed backoff after non-success responses
- A throttled variant that feeds and honours the shared RateLimiter
"""

import asyncio
import errno
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..core.config import HiggsConfig, get_config
from ..core.errors import RetryLimitExceeded
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# Retry configuration
RETRY_LIMIT = 25
RATE_LIMIT_THRESHOLD = 10
RETRY_DELAY = 0.25  # Delay after a non-success status, in seconds
THROTTLE_POLL_DELAY = 0.5  # Poll interval while the rate signal is above threshold

# Connection pool (a single host, so the pool ceiling is the per-host ceiling)
MAX_CONNECTIONS = 10
MAX_KEEPALIVE_CONNECTIONS = 2

FD_EXHAUSTION_MESSAGE = "too many open files"


@dataclass
class FetchAttempt:
    """Retry budget for one logical fetch."""

    url: str
    remaining: int
    made: int = 0

    @property
    def can_retry(self) -> bool:
        return self.remaining > 1

    def consume(self) -> None:
        self.remaining -= 1
        self.made += 1

    def refund(self) -> None:
        self.remaining += 1


@dataclass
class FetchResult:
    """Successful outcome of a logical fetch."""

    url: str
    body: bytes
    status_code: int
    attempts_made: int
    attempts_remaining: int


def is_fd_exhaustion(exc: BaseException) -> bool:
    """Check whether a transport error was caused by running out of file descriptors."""
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, OSError) and current.errno == errno.EMFILE:
            return True
        if FD_EXHAUSTION_MESSAGE in str(current).lower():
            return True
        current = current.__cause__ or current.__context__
    return False


class ESIClient:
    """Retrying ESI client.

    ``get_esi`` is the throttled variant used for every ESI call during a
    crawl. ``get_with_retry`` shares the retry skeleton but ignores the rate
    signal and accepts any 2xx status.
    """

    def __init__(
        self,
        config: Optional[HiggsConfig] = None,
        rate_limiter: Optional[RateLimiter] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        retry_limit: Optional[int] = None,
        rate_limit_threshold: Optional[int] = None,
        retry_delay: float = RETRY_DELAY,
        throttle_poll_delay: float = THROTTLE_POLL_DELAY,
    ):
        """Initialize the ESI client.

        Args:
            config: Loader configuration. If None, loads from environment.
            rate_limiter: Shared rate signal. If None, the client owns one.
            http_client: Pre-built httpx client (tests pass one with a mock
                transport). If None, one is created from the configuration.
            retry_limit: Attempt budget per fetch. Defaults to config value.
            rate_limit_threshold: Rate signal level above which throttled
                fetches wait. Defaults to config value.
            retry_delay: Sleep after a non-success status.
            throttle_poll_delay: Poll interval while throttled.
        """
        self._config = config or get_config()
        self._rate_limiter = rate_limiter or RateLimiter()
        self._http = http_client
        self._owns_http = http_client is None
        self._retry_limit = retry_limit or self._config.retry_limit or RETRY_LIMIT
        self._threshold = (
            rate_limit_threshold
            if rate_limit_threshold is not None
            else self._config.rate_limit_threshold
        )
        self._retry_delay = retry_delay
        self._throttle_poll_delay = throttle_poll_delay
        self._debug = self._config.http_debug

        if self._config.insecure_skip_verify:
            logger.warning("TLS certificate verification is DISABLED for ESI requests")

    @property
    def rate_limiter(self) -> RateLimiter:
        """Get the shared rate signal."""
        return self._rate_limiter

    @property
    def retry_limit(self) -> int:
        """Get the per-fetch attempt budget."""
        return self._retry_limit

    @property
    def user_agent(self) -> str:
        """Get the outbound user agent."""
        return self._config.user_agent

    def esi_url(self, path: str, **params: Any) -> str:
        """Build a full ESI URL with the configured datasource.

        Args:
            path: API path (e.g., "/latest/universe/regions/")
            **params: Extra query parameters (e.g., page=2)

        Returns:
            Absolute URL string.
        """
        query = {"datasource": self._config.datasource}
        query.update({k: v for k, v in params.items() if v is not None})
        return str(httpx.URL(self._config.esi_url(path), params=query))

    def _build_http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(float(self._config.timeout_sec)),
            limits=httpx.Limits(
                max_connections=MAX_CONNECTIONS,
                max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            ),
            verify=not self._config.insecure_skip_verify,
            headers={"User-Agent": self._config.user_agent},
        )

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = self._build_http_client()
            self._owns_http = True
        return self._http

    async def start(self) -> None:
        """Open the HTTP client and start the rate signal decay task."""
        self._get_http()
        self._rate_limiter.start()

    async def close(self) -> None:
        """Stop the decay task and close the HTTP client if owned."""
        await self._rate_limiter.stop()
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "ESIClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _raw_get(self, url: str) -> tuple[bytes, int]:
        """Issue a single GET and return (body, status)."""
        if self._debug:
            logger.debug(f"GET {url}")

        response = await self._get_http().get(
            url, headers={"User-Agent": self._config.user_agent}
        )

        if self._debug:
            logger.debug(f"Response status: {response.status_code} for {url}")

        return response.content, response.status_code

    async def _wait_for_capacity(self) -> None:
        """Hold off while the rate signal is above the threshold."""
        while self._rate_limiter.value() > self._threshold:
            await asyncio.sleep(self._throttle_poll_delay)

    async def fetch(self, url: str, throttled: bool = True) -> FetchResult:
        """Perform one logical GET with retry.

        Args:
            url: Fully-formed URL.
            throttled: Participate in the shared rate signal and require
                exactly HTTP 200. When False any 2xx is a success.

        Returns:
            FetchResult with the body and the budget left.

        Raises:
            RetryLimitExceeded: When the attempt budget runs out.
        """
        if throttled and not self._rate_limiter.running:
            # The signal only decays while the task runs
            self._rate_limiter.start()

        attempt = FetchAttempt(url=url, remaining=self._retry_limit)
        last_error: Optional[BaseException] = None
        last_status: Optional[int] = None

        while attempt.can_retry:
            attempt.consume()

            if throttled:
                await self._wait_for_capacity()

            try:
                body, status = await self._raw_get(url)
            except (httpx.RequestError, OSError) as e:
                last_error = e
                if is_fd_exhaustion(e):
                    # Local resource pressure, not the server's fault
                    attempt.refund()
                    logger.debug(f"Out of file descriptors fetching {url}; retrying")
                else:
                    logger.debug(
                        f"Request error: {e} ({url}, {attempt.remaining - 1} attempts left)"
                    )
                continue

            ok = status == 200 if throttled else 200 <= status < 300
            if not ok:
                last_status = status
                last_error = None
                if throttled:
                    self._rate_limiter.increase()
                logger.debug(
                    f"Got {status} for {url}, retrying in {self._retry_delay}s "
                    f"({attempt.remaining - 1} attempts left)"
                )
                await asyncio.sleep(self._retry_delay)
                continue

            return FetchResult(
                url=url,
                body=body,
                status_code=status,
                attempts_made=attempt.made,
                attempts_remaining=attempt.remaining,
            )

        raise RetryLimitExceeded(
            url, attempts=attempt.made, last_error=last_error, last_status=last_status
        )

    async def get_esi(self, url: str) -> bytes:
        """Throttled GET against ESI; returns the response body."""
        result = await self.fetch(url, throttled=True)
        return result.body

    async def get_with_retry(self, url: str) -> bytes:
        """Unthrottled GET accepting any 2xx; returns the response body."""
        result = await self.fetch(url, throttled=False)
        return result.body
