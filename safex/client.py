"""
Safex SDK main client.

Provides the blocking interface to the Safex service: repository ingestion,
content browsing, static analysis, fuzz testing and report attestation.
"""

import os
from typing import Any

import httpx

from safex.clients import (
    AnalysisClient,
    AttestationClient,
    ContentsClient,
    FuzzingClient,
    IngestionClient,
)
from safex.exceptions import ConfigurationError
from safex.transport import HTTPTransport, RetryConfig

DEFAULT_BASE_URL = "http://127.0.0.1:8080"


def load_env_settings() -> dict[str, Any]:
    """
    Read client settings from environment variables.

    Environment variables:
        SAFEX_BASE_URL: Service base URL (optional, default: http://127.0.0.1:8080)
        SAFEX_TIMEOUT: Request timeout in seconds; unset or empty for none
        SAFEX_MAX_RETRIES: Retries for idempotent requests (optional, default: 3)

    Returns:
        Keyword arguments for a client constructor

    Raises:
        ConfigurationError: If a value cannot be parsed
    """
    base_url = os.environ.get("SAFEX_BASE_URL", DEFAULT_BASE_URL).strip()
    if not base_url.startswith(("http://", "https://")):
        raise ConfigurationError(
            f"Invalid SAFEX_BASE_URL: {base_url}. Must start with http:// or https://"
        )

    timeout: float | None = None
    timeout_str = os.environ.get("SAFEX_TIMEOUT", "").strip()
    if timeout_str:
        try:
            timeout = float(timeout_str)
        except ValueError:
            raise ConfigurationError(
                f"Invalid SAFEX_TIMEOUT: {timeout_str}. Must be a number of seconds"
            ) from None
        if timeout <= 0:
            raise ConfigurationError("SAFEX_TIMEOUT must be positive")

    retry_config = RetryConfig()
    retries_str = os.environ.get("SAFEX_MAX_RETRIES", "").strip()
    if retries_str:
        try:
            retry_config.max_retries = int(retries_str)
        except ValueError:
            raise ConfigurationError(
                f"Invalid SAFEX_MAX_RETRIES: {retries_str}. Must be an integer"
            ) from None
        if retry_config.max_retries < 0:
            raise ConfigurationError("SAFEX_MAX_RETRIES must not be negative")

    return {"base_url": base_url, "timeout": timeout, "retry_config": retry_config}


class SafexClient:
    """
    Main client for interacting with the Safex service.

    Aggregates all resource clients over one HTTP transport.

    Example:
        ```python
        from safex import SafexClient, RepositoryReference

        with SafexClient.from_env() as client:
            ref = RepositoryReference.from_url("https://github.com/acme/vault")
            result = client.ingestion.ingest(ref)
            if result.eligible:
                analysis = client.analysis.analyze(ref)
                outcome = client.fuzzing.run(ref, "withdraw", timeout_seconds=30)
        ```
    """

    DEFAULT_BASE_URL = DEFAULT_BASE_URL

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        retry_config: RetryConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the Safex client.

        Args:
            base_url: Service base URL (default: http://127.0.0.1:8080)
            timeout: Request timeout in seconds, None for no client-side limit
            retry_config: Configuration for retry behavior (optional)
            transport: Optional httpx transport, mainly for tests
        """
        self.base_url = base_url
        self.timeout = timeout

        self._transport = HTTPTransport(
            base_url=base_url,
            timeout=timeout,
            retry_config=retry_config,
            transport=transport,
        )

        self.ingestion = IngestionClient(self._transport)
        self.contents = ContentsClient(self._transport)
        self.analysis = AnalysisClient(self._transport)
        self.fuzzing = FuzzingClient(self._transport)
        self.attestation = AttestationClient(self._transport)

    @classmethod
    def from_env(cls, transport: httpx.BaseTransport | None = None) -> "SafexClient":
        """
        Create a client from environment variables (see load_env_settings).

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        return cls(transport=transport, **load_env_settings())

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    def close(self) -> None:
        """Close the client and release resources."""
        self._transport.close()

    def __enter__(self) -> "SafexClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
