"""
Async HTTP Transport for Safex SDK.

Handles async JSON-over-HTTP communication with the local Safex service using
the httpx async client. Retry policy and error parsing are shared with the
blocking transport.
"""

import asyncio
import time
from collections.abc import Callable, Coroutine
from typing import Any

import httpx

from safex.exceptions import NetworkError, SafexError
from safex.logging import log_http_request, log_http_response
from safex.transport import RetryConfig, decode_json_body, parse_error_response


class AsyncHTTPTransport:
    """
    Async HTTP transport layer for the Safex service.

    Handles:
    - JSON POST requests against the service endpoints
    - Exponential backoff with jitter for retryable requests
    - Retry-After header respect for rate limiting
    - Typed errors for non-2xx statuses, network failures and bad bodies
    """

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        retry_config: RetryConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            base_url: Base URL of the service (e.g., "http://127.0.0.1:8080")
            timeout: Request timeout in seconds, None for no client-side limit
            retry_config: Configuration for retry behavior
            transport: Optional httpx async transport (e.g., httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def post(
        self,
        path: str,
        body: dict[str, Any],
        retry: bool = True,
    ) -> dict[str, Any]:
        """
        POST a JSON body and return the decoded JSON object.

        Args:
            path: API path (e.g., "/api/analyze-code")
            body: Request body
            retry: Whether retryable failures may be retried

        Returns:
            Parsed JSON response

        Raises:
            TransportError: On non-2xx status or network failure
            ProtocolError: On an empty or unparsable 2xx body
        """
        url = f"{self.base_url}{path}"

        async def make_request() -> httpx.Response:
            log_http_request("POST", url, body)
            return await self._client.post(path, json=body)

        return await self._execute_with_retry(make_request, url, retry)

    async def _execute_with_retry(
        self,
        request_fn: Callable[[], Coroutine[Any, Any, httpx.Response]],
        url: str,
        retry: bool,
    ) -> dict[str, Any]:
        """
        Execute a request, retrying retryable errors when allowed.

        Raises:
            SafexError: On non-retryable errors or after max retries
        """
        max_retries = self.retry_config.max_retries if retry else 0
        last_error: Exception | None = None

        for attempt in range(max_retries + 1):
            started = time.perf_counter()
            try:
                response = await request_fn()
            except httpx.RequestError as e:
                if attempt >= max_retries:
                    raise NetworkError(str(e) or type(e).__name__) from e

                last_error = e
                await asyncio.sleep(self.retry_config.backoff_time(attempt, None))
                continue

            elapsed_ms = (time.perf_counter() - started) * 1000

            if response.is_success:
                data = decode_json_body(response)
                log_http_response(response.status_code, url, data, elapsed_ms)
                return data

            log_http_response(response.status_code, url, None, elapsed_ms)
            error = parse_error_response(response)

            if attempt >= max_retries or not self.retry_config.should_retry(
                response.status_code, attempt
            ):
                raise error

            last_error = error
            retry_after = response.headers.get("Retry-After")
            await asyncio.sleep(self.retry_config.backoff_time(attempt, retry_after))

        if isinstance(last_error, SafexError):
            raise last_error
        raise NetworkError(str(last_error) if last_error else "Request failed")
