"""Safex SDK resource clients."""

from safex.clients.analysis import AnalysisClient
from safex.clients.attestation import AttestationClient
from safex.clients.contents import ContentsClient
from safex.clients.fuzzing import FuzzingClient
from safex.clients.ingestion import IngestionClient

__all__ = [
    "IngestionClient",
    "ContentsClient",
    "AnalysisClient",
    "FuzzingClient",
    "AttestationClient",
]
