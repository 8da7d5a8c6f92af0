"""
Safex SDK async client.

Provides the async interface to the Safex service. This is the client the
session orchestrator drives.
"""

from typing import Any

import httpx

from safex.async_clients import (
    AsyncAnalysisClient,
    AsyncAttestationClient,
    AsyncContentsClient,
    AsyncFuzzingClient,
    AsyncIngestionClient,
)
from safex.async_transport import AsyncHTTPTransport
from safex.client import DEFAULT_BASE_URL, load_env_settings
from safex.transport import RetryConfig


class AsyncSafexClient:
    """
    Async client for interacting with the Safex service.

    Example:
        ```python
        import asyncio
        from safex import AsyncSafexClient, RepositoryReference

        async def main():
            async with AsyncSafexClient() as client:
                ref = RepositoryReference.from_url("https://github.com/acme/vault")
                analysis, outcome = await asyncio.gather(
                    client.analysis.analyze(ref),
                    client.fuzzing.run(ref, "withdraw", timeout_seconds=30),
                )

        asyncio.run(main())
        ```
    """

    DEFAULT_BASE_URL = DEFAULT_BASE_URL

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        retry_config: RetryConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the async Safex client.

        Args:
            base_url: Service base URL (default: http://127.0.0.1:8080)
            timeout: Request timeout in seconds, None for no client-side limit
            retry_config: Configuration for retry behavior (optional)
            transport: Optional httpx async transport, mainly for tests
        """
        self.base_url = base_url
        self.timeout = timeout

        self._transport = AsyncHTTPTransport(
            base_url=base_url,
            timeout=timeout,
            retry_config=retry_config,
            transport=transport,
        )

        self.ingestion = AsyncIngestionClient(self._transport)
        self.contents = AsyncContentsClient(self._transport)
        self.analysis = AsyncAnalysisClient(self._transport)
        self.fuzzing = AsyncFuzzingClient(self._transport)
        self.attestation = AsyncAttestationClient(self._transport)

    @classmethod
    def from_env(
        cls, transport: httpx.AsyncBaseTransport | None = None
    ) -> "AsyncSafexClient":
        """
        Create an async client from environment variables.

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        return cls(transport=transport, **load_env_settings())

    @property
    def transport(self) -> AsyncHTTPTransport:
        """Get the underlying async HTTP transport (for advanced use cases)."""
        return self._transport

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._transport.close()

    async def __aenter__(self) -> "AsyncSafexClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
