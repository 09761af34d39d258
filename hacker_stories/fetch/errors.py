"""Exceptions for the search fetch layer."""

from hacker_stories.errors import HackerStoriesError
from hacker_stories.fetch.models import FetchErrorClass


class TransportFailure(HackerStoriesError):
    """Raised when a search request fails for any reason.

    Covers transport errors, non-2xx responses and bodies that cannot be
    parsed into a SearchPage. The controller maps it to a FetchFailure event.
    """

    def __init__(
        self,
        error_class: FetchErrorClass,
        message: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize the failure.

        Args:
            error_class: Classification of the failure.
            message: Human-readable message.
            status_code: HTTP status code if a response was received.
        """
        self.error_class = error_class
        self.status_code = status_code
        super().__init__(f"{error_class.value}: {message}")
