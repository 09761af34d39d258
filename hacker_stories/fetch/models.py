"""Data models for the search fetch layer."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from hacker_stories.fetch.constants import (
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_SERVER_ERROR_MAX,
    HTTP_STATUS_SERVER_ERROR_MIN,
    HTTP_STATUS_TOO_MANY_REQUESTS,
)
from hacker_stories.stories.models import Story


class FetchErrorClass(str, Enum):
    """Classification of fetch errors for metrics and reporting.

    - NETWORK_TIMEOUT: Request timed out
    - CONNECTION_ERROR: Could not establish connection
    - HTTP_4XX: 4xx client error (except 429)
    - HTTP_5XX: 5xx server error
    - RATE_LIMITED: 429 Too Many Requests
    - INVALID_RESPONSE: Body is not JSON or does not match the schema
    - UNKNOWN: Unclassified error
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    HTTP_4XX = "HTTP_4XX"
    HTTP_5XX = "HTTP_5XX"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_status_code(cls, status_code: int) -> "FetchErrorClass":
        """Classify a non-2xx HTTP status code.

        Args:
            status_code: HTTP status code.

        Returns:
            Matching error class.
        """
        if status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
            return cls.RATE_LIMITED
        if HTTP_STATUS_SERVER_ERROR_MIN <= status_code < HTTP_STATUS_SERVER_ERROR_MAX:
            return cls.HTTP_5XX
        if HTTP_STATUS_BAD_REQUEST <= status_code < HTTP_STATUS_SERVER_ERROR_MIN:
            return cls.HTTP_4XX
        return cls.UNKNOWN


class SearchPage(BaseModel):
    """One page of search results as returned by the API.

    Only ``hits`` and ``page`` drive the fetch state; the paging metadata is
    carried for callers that want to show it.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    hits: list[Story] = Field(default_factory=list)
    page: Annotated[int, Field(ge=0)] = 0
    nb_pages: int | None = Field(default=None, alias="nbPages")
    hits_per_page: int | None = Field(default=None, alias="hitsPerPage")
