from typing import Any, Dict, Optional

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

# Define common HTTP status codes that warrant a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0 Safari/537.36",
}


class FeedError(Exception):
    """Custom exception for upstream feed errors."""

    pass


class FeedHTTPError(FeedError):
    """Exception raised for non-2xx upstream responses."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class FeedDecodeError(FeedError):
    """Exception raised when a response body is not a JSON object."""

    pass


class _RetryableStatus(Exception):
    def __init__(self, response: httpx.Response):
        super().__init__(f"retryable status {response.status_code}")
        self.response = response


def build_http_client(
    timeout: float = 4.0, transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    """Shared async HTTP client for all upstream feeds."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers=DEFAULT_HEADERS,
        transport=transport,
    )


class BaseFeedClient:
    """Base class for clients of the upstream scoreboard provider."""

    name: str = "feed"

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = 4.0,
        max_attempts: int = 1,
        backoff_multiplier: float = 0.25,
    ):
        self.client = client
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_multiplier = backoff_multiplier

    async def _make_request(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """GETs ``url`` with retry on transport errors and retryable statuses."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_multiplier, max=2),
            retry=retry_if_exception_type((httpx.TransportError, _RetryableStatus)),
            reraise=False,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    logger.debug(f"[{self.name}] GET {url} params={params}")
                    response = await self.client.get(
                        url,
                        params=params,
                        timeout=self.timeout,
                    )
                    if response.status_code in RETRYABLE_STATUS_CODES:
                        logger.warning(
                            f"[{self.name}] Retryable status {response.status_code} from {url}"
                        )
                        raise _RetryableStatus(response)
        except RetryError as e:
            last = e.last_attempt.exception()
            if isinstance(last, _RetryableStatus):
                raise FeedHTTPError(
                    f"{self.name}: HTTP {last.response.status_code} for {url} after {self.max_attempts} attempt(s)",
                    last.response.status_code,
                ) from last
            raise FeedError(
                f"{self.name}: request to {url} failed after {self.max_attempts} attempt(s): {last!r}"
            ) from last
        except httpx.HTTPError as e:
            raise FeedError(f"{self.name}: request to {url} failed: {e!r}") from e

        if not response.is_success:
            raise FeedHTTPError(
                f"{self.name}: HTTP {response.status_code} for {url}",
                response.status_code,
            )
        logger.debug(f"[{self.name}] Request successful: {response.status_code} for {url}")
        return response

    async def _get_json(
        self, url: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        response = await self._make_request(url, params=params)
        try:
            payload = response.json()
        except ValueError as e:
            raise FeedDecodeError(f"{self.name}: invalid JSON from {url}") from e
        if not isinstance(payload, dict):
            raise FeedDecodeError(
                f"{self.name}: expected a JSON object from {url}, got {type(payload).__name__}"
            )
        return payload
