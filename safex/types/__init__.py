"""Safex SDK type definitions.

This module exports all data model types used by the SDK.
"""

from safex.types.analysis import AnalysisResult, Finding, Severity
from safex.types.attestation import (
    AttestationRecord,
    AttestationResult,
    compute_content_hash,
)
from safex.types.contents import (
    ContentEntry,
    ContentKind,
    ContentsResult,
    DirectoryListing,
    FileContent,
    parent_path,
)
from safex.types.fuzzing import (
    DEFAULT_TIMEOUT_SECONDS,
    MAX_TIMEOUT_SECONDS,
    MIN_TIMEOUT_SECONDS,
    FuzzOutcome,
)
from safex.types.repos import (
    IngestionResult,
    RepositoryOwner,
    RepositoryReference,
    RepositorySummary,
)

__all__ = [
    # Repository types
    "RepositoryReference",
    "RepositoryOwner",
    "RepositorySummary",
    "IngestionResult",
    # Content types
    "ContentKind",
    "ContentEntry",
    "DirectoryListing",
    "FileContent",
    "ContentsResult",
    "parent_path",
    # Analysis types
    "Severity",
    "Finding",
    "AnalysisResult",
    # Fuzzing types
    "FuzzOutcome",
    "MIN_TIMEOUT_SECONDS",
    "MAX_TIMEOUT_SECONDS",
    "DEFAULT_TIMEOUT_SECONDS",
    # Attestation types
    "AttestationRecord",
    "AttestationResult",
    "compute_content_hash",
]
