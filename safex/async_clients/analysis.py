"""Async static analysis resource client."""

from typing import TYPE_CHECKING

from safex.clients.analysis import ANALYZE_PATH, parse_analysis_response
from safex.types.analysis import AnalysisResult
from safex.types.repos import RepositoryReference

if TYPE_CHECKING:
    from safex.async_transport import AsyncHTTPTransport


class AsyncAnalysisClient:
    """Async client for the static analysis service."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        self.transport = transport

    async def analyze(self, ref: RepositoryReference) -> AnalysisResult:
        """Scan a repository for security findings."""
        response = await self.transport.post(ANALYZE_PATH, {"repo_url": ref.url})
        return parse_analysis_response(response)
