"""Safex SDK testing utilities.

Provides a mock client and fixtures for testing applications that use the Safex SDK.
"""

from safex.testing.fixtures import (
    create_mock_entry,
    create_mock_finding,
    create_mock_listing,
    create_mock_repository_summary,
)
from safex.testing.mock import MockAsyncSafexClient, MockCall, MockResponse

__all__ = [
    # Mock client
    "MockAsyncSafexClient",
    "MockCall",
    "MockResponse",
    # Helper functions
    "create_mock_repository_summary",
    "create_mock_entry",
    "create_mock_listing",
    "create_mock_finding",
]
