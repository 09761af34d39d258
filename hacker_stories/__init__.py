"""Fetch-state and query-history engine for a searchable Hacker News story list."""

from hacker_stories.controller import Fetcher, StoriesController


__version__ = "0.1.0"

__all__ = ["Fetcher", "StoriesController", "__version__"]
