"""Shared fixtures for the Safex SDK test suite."""

from safex.testing.conftest import *  # noqa: F401,F403
