"""Async ingestion gate resource client."""

from typing import TYPE_CHECKING

from safex.clients.ingestion import INGEST_PATH, parse_ingestion_response
from safex.types.repos import IngestionResult, RepositoryReference

if TYPE_CHECKING:
    from safex.async_transport import AsyncHTTPTransport


class AsyncIngestionClient:
    """Async client for the repository ingestion gate."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the async ingestion client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def ingest(self, ref: RepositoryReference | str) -> IngestionResult:
        """
        Submit a repository and classify it.

        Args:
            ref: Repository reference, or a URL to build one from

        Returns:
            IngestionResult; eligible=False is a classification, not an error
        """
        if isinstance(ref, str):
            ref = RepositoryReference.from_url(ref)

        response = await self.transport.post(INGEST_PATH, {"repo_url": ref.url})
        return parse_ingestion_response(response)
