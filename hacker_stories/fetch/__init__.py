"""Search fetch layer.

This module provides the async HTTP capability the controller consumes:
- One GET per search locator, parsed into a SearchPage
- Every failure surfaced as TransportFailure with a FetchErrorClass
- Metrics collection for observability
"""

from hacker_stories.fetch.client import StorySearchClient, create_http_client
from hacker_stories.fetch.errors import TransportFailure
from hacker_stories.fetch.metrics import FetchMetrics
from hacker_stories.fetch.models import FetchErrorClass, SearchPage


__all__ = [
    # Client
    "StorySearchClient",
    "create_http_client",
    # Models
    "FetchErrorClass",
    "SearchPage",
    "TransportFailure",
    # Metrics
    "FetchMetrics",
]
