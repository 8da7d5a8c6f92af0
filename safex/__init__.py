"""Safex SDK - Python client and session workflow for the Safex audit service."""

from safex.async_client import AsyncSafexClient
from safex.client import SafexClient
from safex.exceptions import (
    ConfigurationError,
    GatingError,
    IntegrityError,
    NetworkError,
    NotFoundError,
    ProtocolError,
    RateLimitedError,
    RequestRejectedError,
    SafexError,
    ServerError,
    TransportError,
    ValidationError,
)
from safex.logging import configure_logging, get_logger
from safex.report import build_report
from safex.session import SessionOrchestrator
from safex.state import (
    Failed,
    Idle,
    OperationKind,
    PathState,
    Running,
    SessionStage,
    SessionState,
    Succeeded,
)
from safex.transport import HTTPTransport, RetryConfig
from safex.types import (
    AnalysisResult,
    AttestationRecord,
    AttestationResult,
    ContentEntry,
    ContentKind,
    ContentsResult,
    DirectoryListing,
    FileContent,
    Finding,
    FuzzOutcome,
    IngestionResult,
    RepositoryReference,
    RepositorySummary,
    Severity,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main Clients
    "SafexClient",
    "AsyncSafexClient",
    # Session
    "SessionOrchestrator",
    "SessionState",
    "SessionStage",
    "OperationKind",
    "PathState",
    "Idle",
    "Running",
    "Succeeded",
    "Failed",
    "build_report",
    # Types
    "RepositoryReference",
    "RepositorySummary",
    "IngestionResult",
    "ContentKind",
    "ContentEntry",
    "DirectoryListing",
    "FileContent",
    "ContentsResult",
    "Severity",
    "Finding",
    "AnalysisResult",
    "FuzzOutcome",
    "AttestationRecord",
    "AttestationResult",
    # Exceptions
    "SafexError",
    "ConfigurationError",
    "ValidationError",
    "GatingError",
    "TransportError",
    "NetworkError",
    "NotFoundError",
    "RateLimitedError",
    "RequestRejectedError",
    "ServerError",
    "ProtocolError",
    "IntegrityError",
    # Transport
    "HTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
