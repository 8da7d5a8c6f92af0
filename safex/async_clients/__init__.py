"""Safex SDK async resource clients."""

from safex.async_clients.analysis import AsyncAnalysisClient
from safex.async_clients.attestation import AsyncAttestationClient
from safex.async_clients.contents import AsyncContentsClient
from safex.async_clients.fuzzing import AsyncFuzzingClient
from safex.async_clients.ingestion import AsyncIngestionClient

__all__ = [
    "AsyncIngestionClient",
    "AsyncContentsClient",
    "AsyncAnalysisClient",
    "AsyncFuzzingClient",
    "AsyncAttestationClient",
]
