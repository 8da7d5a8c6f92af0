"""
Pytest fixtures for Safex SDK testing.

Provides common fixtures and factory helpers for testing applications that
use the Safex SDK.
"""

from collections.abc import Generator
from typing import Any

import pytest

from safex.testing.mock import MockAsyncSafexClient
from safex.types.analysis import AnalysisResult, Finding, Severity
from safex.types.contents import (
    ContentEntry,
    ContentKind,
    ContentsResult,
    DirectoryListing,
    FileContent,
)
from safex.types.fuzzing import FuzzOutcome
from safex.types.repos import (
    IngestionResult,
    RepositoryOwner,
    RepositoryReference,
    RepositorySummary,
)

VAULT_URL = "https://github.com/acme/vault"


# ============================================================================
# Mock Client Fixtures
# ============================================================================


@pytest.fixture
def mock_client() -> Generator[MockAsyncSafexClient, None, None]:
    """
    Provide a MockAsyncSafexClient for testing.

    Example:
        ```python
        def test_my_feature(mock_client):
            mock_client.analysis.configure_analyze(response=my_result)
            asyncio.run(SessionOrchestrator(mock_client).submit(url))
            assert mock_client.was_called("ingestion.ingest")
        ```
    """
    client = MockAsyncSafexClient()
    yield client
    client.reset()


@pytest.fixture
def mock_repo_url() -> str:
    """Provide a repository URL that parses."""
    return VAULT_URL


@pytest.fixture
def mock_client_with_vault(
    mock_client: MockAsyncSafexClient,
    sample_ingestion_result: IngestionResult,
    sample_root_listing: ContentsResult,
    sample_analysis_result: AnalysisResult,
    sample_fuzz_outcome: FuzzOutcome,
) -> MockAsyncSafexClient:
    """Provide a mock client answering for an eligible acme/vault program."""
    mock_client.ingestion.configure_ingest(response=sample_ingestion_result)
    mock_client.contents.configure_list("", response=sample_root_listing)
    mock_client.analysis.configure_analyze(response=sample_analysis_result)
    mock_client.fuzzing.configure_run(response=sample_fuzz_outcome)
    return mock_client


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_reference() -> RepositoryReference:
    """Provide the acme/vault reference."""
    return RepositoryReference(owner="acme", name="vault", url=VAULT_URL)


@pytest.fixture
def sample_ingestion_result() -> IngestionResult:
    """Provide an eligible ingestion result."""
    return IngestionResult(
        eligible=True,
        message="Repository ingested successfully",
        repo=create_mock_repository_summary(),
    )


@pytest.fixture
def sample_ineligible_result() -> IngestionResult:
    """Provide an ingestion result for a repository that is not a program."""
    return IngestionResult(
        eligible=False,
        message="Not an Anchor project",
        repo=create_mock_repository_summary(name="website", stargazers_count=3),
        reason="Not an Anchor project",
    )


@pytest.fixture
def sample_root_listing() -> ContentsResult:
    """Provide a root listing with one directory and one file."""
    return create_mock_listing(
        "",
        [
            create_mock_entry("programs", kind=ContentKind.DIR),
            create_mock_entry("Anchor.toml", size=312),
        ],
    )


@pytest.fixture
def sample_file_contents() -> ContentsResult:
    """Provide a file response with embedded text."""
    return ContentsResult(
        success=True,
        message="Contents retrieved",
        path="Anchor.toml",
        view=FileContent(
            name="Anchor.toml",
            path="Anchor.toml",
            size=27,
            content='[programs.devnet]\nvault = ""\n',
            html_url=f"{VAULT_URL}/blob/main/Anchor.toml",
        ),
    )


@pytest.fixture
def sample_finding() -> Finding:
    """Provide a high-severity finding."""
    return create_mock_finding()


@pytest.fixture
def sample_analysis_result(sample_finding: Finding) -> AnalysisResult:
    """Provide an analysis result with one finding."""
    return AnalysisResult(
        success=True,
        message="Analysis completed",
        findings=(sample_finding,),
    )


@pytest.fixture
def sample_fuzz_outcome() -> FuzzOutcome:
    """Provide a completed fuzz run that found an issue."""
    return FuzzOutcome(
        passed=False,
        message="Fuzz test found issues",
        instruction_name="withdraw",
        issues=("integer overflow at line 57",),
        elapsed_ms=4200,
    )


# ============================================================================
# Helper Functions
# ============================================================================


def create_mock_repository_summary(
    name: str = "vault",
    owner: str = "acme",
    **kwargs: Any,
) -> RepositorySummary:
    """
    Create a RepositorySummary with customizable fields.

    Args:
        name: Repository name
        owner: Owner login
        **kwargs: Additional fields to override

    Returns:
        RepositorySummary object
    """
    defaults = {
        "id": 1001,
        "full_name": f"{owner}/{name}",
        "description": None,
        "html_url": f"https://github.com/{owner}/{name}",
        "stargazers_count": 42,
        "forks_count": 0,
        "open_issues_count": 0,
        "owner": RepositoryOwner(login=owner),
        "language": "Rust",
    }
    defaults.update(kwargs)
    return RepositorySummary(name=name, **defaults)


def create_mock_entry(
    path: str,
    kind: ContentKind = ContentKind.FILE,
    **kwargs: Any,
) -> ContentEntry:
    """
    Create a ContentEntry; the name is the last path segment.

    Args:
        path: Entry path from the repository root
        kind: Entry kind
        **kwargs: Additional fields to override

    Returns:
        ContentEntry object
    """
    defaults: dict[str, Any] = {
        "size": 0 if kind is ContentKind.DIR else 100,
        "html_url": f"{VAULT_URL}/tree/main/{path}",
    }
    defaults.update(kwargs)
    return ContentEntry(name=path.rsplit("/", 1)[-1], path=path, kind=kind, **defaults)


def create_mock_listing(
    path: str,
    entries: list[ContentEntry] | None = None,
) -> ContentsResult:
    """Create a successful directory ContentsResult."""
    return ContentsResult(
        success=True,
        message="Contents retrieved",
        path=path,
        view=DirectoryListing(path=path, entries=tuple(entries or ())),
    )


def create_mock_finding(
    description: str = "Missing owner check",
    line: int = 57,
    severity: Severity = Severity.HIGH,
    suggested_fix: str = "Add has_one constraint",
) -> Finding:
    """Create a Finding with customizable fields."""
    return Finding(
        description=description,
        line=line,
        severity=severity,
        suggested_fix=suggested_fix,
    )


__all__ = [
    # Fixtures (exported for documentation, actual fixtures are auto-discovered)
    "mock_client",
    "mock_repo_url",
    "mock_client_with_vault",
    "sample_reference",
    "sample_ingestion_result",
    "sample_ineligible_result",
    "sample_root_listing",
    "sample_file_contents",
    "sample_finding",
    "sample_analysis_result",
    "sample_fuzz_outcome",
    # Helper functions
    "create_mock_repository_summary",
    "create_mock_entry",
    "create_mock_listing",
    "create_mock_finding",
]
