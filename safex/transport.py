"""
HTTP Transport for Safex SDK.

Handles JSON-over-HTTP communication with the local Safex service, automatic
retry logic for idempotent calls, and conversion of failures into the typed
exception hierarchy.
"""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from safex.exceptions import (
    NetworkError,
    NotFoundError,
    ProtocolError,
    RateLimitedError,
    RequestRejectedError,
    SafexError,
    ServerError,
    TransportError,
)
from safex.logging import log_http_request, log_http_response


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)

    def should_retry(self, status_code: int, attempt: int) -> bool:
        """
        Determine if a request should be retried.

        Args:
            status_code: HTTP status code
            attempt: Current attempt number (0-indexed)

        Returns:
            True if the request should be retried
        """
        if attempt >= self.max_retries:
            return False

        return status_code in self.retry_on

    def backoff_time(self, attempt: int, retry_after: str | None = None) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting Retry-After header
        if present.

        Args:
            attempt: Current attempt number (0-indexed)
            retry_after: Value of Retry-After header (if present)

        Returns:
            Time to wait in seconds
        """
        if retry_after and self.respect_retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass  # Fall through to exponential backoff

        base_wait = self.backoff_factor ** attempt

        jitter_range = base_wait * self.jitter
        wait_time = base_wait + random.uniform(-jitter_range, jitter_range)

        return min(wait_time, self.max_backoff)


def decode_json_body(response: httpx.Response) -> dict[str, Any]:
    """
    Decode a successful response body into a JSON object.

    Raises:
        ProtocolError: If the body is empty, not JSON, or not a JSON object
    """
    if not response.text.strip():
        raise ProtocolError("EMPTY_RESPONSE", "Empty response from server")

    try:
        data = response.json()
    except ValueError as e:
        raise ProtocolError(
            "INVALID_JSON", "Invalid response format from server"
        ) from e

    if not isinstance(data, dict):
        raise ProtocolError(
            "UNEXPECTED_SHAPE",
            f"Expected a JSON object, got {type(data).__name__}",
        )
    return data


def parse_error_response(response: httpx.Response) -> TransportError:
    """
    Parse a non-2xx response into a typed exception.

    The message comes from the body's "message" field when the body is a JSON
    object carrying one, else from the raw body text, else from the status.

    Args:
        response: HTTP response with a non-2xx status

    Returns:
        Appropriate TransportError subclass
    """
    payload: dict[str, Any] | None = None
    try:
        data = response.json()
        if isinstance(data, dict):
            payload = data
    except ValueError:
        pass

    status_code = response.status_code
    message = f"HTTP {status_code}"
    if payload and isinstance(payload.get("message"), str) and payload["message"]:
        message = payload["message"]
    elif response.text.strip():
        message = response.text.strip()

    if status_code == 404:
        return NotFoundError("NOT_FOUND", message, status_code, payload)
    elif status_code == 429:
        retry_after_str = response.headers.get("Retry-After", "60")
        try:
            retry_after = int(retry_after_str)
        except ValueError:
            retry_after = 60
        return RateLimitedError(
            "RATE_LIMITED", message, retry_after, status_code, payload
        )
    elif status_code >= 500:
        return ServerError("SERVER_ERROR", message, status_code, payload)
    else:
        return RequestRejectedError(
            f"HTTP_{status_code}", message, status_code, payload
        )


class HTTPTransport:
    """
    HTTP transport layer for the Safex service.

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
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize HTTP transport.

        Args:
            base_url: Base URL of the service (e.g., "http://127.0.0.1:8080")
            timeout: Request timeout in seconds, None for no client-side limit
            retry_config: Configuration for retry behavior
            transport: Optional httpx transport (e.g., httpx.MockTransport in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def post(
        self,
        path: str,
        body: dict[str, Any],
        retry: bool = True,
    ) -> dict[str, Any]:
        """
        POST a JSON body and return the decoded JSON object.

        Args:
            path: API path (e.g., "/api/ingest-repo")
            body: Request body
            retry: Whether retryable failures may be retried

        Returns:
            Parsed JSON response

        Raises:
            TransportError: On non-2xx status or network failure
            ProtocolError: On an empty or unparsable 2xx body
        """
        url = f"{self.base_url}{path}"

        def make_request() -> httpx.Response:
            log_http_request("POST", url, body)
            return self._client.post(path, json=body)

        return self._execute_with_retry(make_request, url, retry)

    def _execute_with_retry(
        self,
        request_fn: Callable[[], httpx.Response],
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
                response = request_fn()
            except httpx.RequestError as e:
                # Network errors are retryable
                if attempt >= max_retries:
                    raise NetworkError(str(e) or type(e).__name__) from e

                last_error = e
                time.sleep(self.retry_config.backoff_time(attempt, None))
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
            time.sleep(self.retry_config.backoff_time(attempt, retry_after))

        # Should not reach here, but just in case
        if isinstance(last_error, SafexError):
            raise last_error
        raise NetworkError(str(last_error) if last_error else "Request failed")
