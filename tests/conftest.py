"""Shared pytest fixtures."""

from collections.abc import Generator

import pytest

from hacker_stories.fetch.metrics import FetchMetrics


@pytest.fixture(autouse=True)
def reset_fetch_metrics() -> Generator[None]:
    """Give every test a fresh metrics singleton."""
    FetchMetrics.reset()
    yield
    FetchMetrics.reset()
