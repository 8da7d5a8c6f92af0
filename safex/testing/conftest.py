"""
Pytest plugin for Safex SDK testing fixtures.

This module re-exports all fixtures from fixtures.py so a test suite can
load them as a plugin.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["safex.testing.conftest"]

Or import the fixtures directly:

    from safex.testing.fixtures import mock_client, sample_reference
"""

# Re-export all fixtures for pytest auto-discovery
from safex.testing.fixtures import (
    mock_client,
    mock_client_with_vault,
    mock_repo_url,
    sample_analysis_result,
    sample_file_contents,
    sample_finding,
    sample_fuzz_outcome,
    sample_ingestion_result,
    sample_ineligible_result,
    sample_reference,
    sample_root_listing,
)

__all__ = [
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
]
