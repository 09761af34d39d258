"""Exceptions for the key-value store."""

from hacker_stories.errors import HackerStoriesError


class StoreError(HackerStoriesError):
    """Base exception for all key-value store errors."""


class StoreConnectionError(StoreError):
    """Raised when the database connection fails or is not established."""

    def __init__(self, message: str = "Database not connected") -> None:
        """Initialize the connection error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)
