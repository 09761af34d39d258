"""Data models for stories and the fetch state."""

from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Story(BaseModel):
    """A single search hit.

    Attributes:
        id: Unique identifier (API field ``objectID``).
        url: Link target; empty for text posts.
        title: Story title.
        author: Submitter name.
        comment_count: Number of comments (API field ``num_comments``).
        points: Score.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: Annotated[str, Field(min_length=1, alias="objectID")]
    url: str = ""
    title: str = ""
    author: str = ""
    comment_count: Annotated[int, Field(ge=0, alias="num_comments")] = 0
    points: int = 0

    @field_validator("url", "title", "author", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        """The API sends null for missing text fields."""
        return "" if v is None else v

    @field_validator("comment_count", "points", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        """The API sends null for missing counters."""
        return 0 if v is None else v


ResultSet = tuple[Story, ...]
"""Stories in arrival order."""


class FetchStatus(str, Enum):
    """Fetch lifecycle states.

    - IDLE: Nothing requested yet
    - LOADING: A request is in flight
    - LOADED: Last request succeeded
    - FAILED: Last request failed; previous results are kept
    """

    IDLE = "IDLE"
    LOADING = "LOADING"
    LOADED = "LOADED"
    FAILED = "FAILED"


class FetchState(BaseModel):
    """Accumulated results plus loading, error and pagination status."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    results: ResultSet = ()
    page: Annotated[int, Field(ge=0)] = 0
    is_loading: bool = False
    is_error: bool = False
    status: FetchStatus = FetchStatus.IDLE

    @property
    def is_settled(self) -> bool:
        """Check if the last request has completed."""
        return self.status in (FetchStatus.LOADED, FetchStatus.FAILED)

    def story_ids(self) -> list[str]:
        """Get the ids of the current results in order."""
        return [story.id for story in self.results]


class FetchInit(BaseModel):
    """A request is about to be issued."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class FetchSuccess(BaseModel):
    """A request settled with one page of stories."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    stories: ResultSet = ()
    page: Annotated[int, Field(ge=0)] = 0


class FetchFailure(BaseModel):
    """A request settled with an error."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    reason: str = ""


class RemoveStory(BaseModel):
    """The user dismissed a story."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    story_id: Annotated[str, Field(min_length=1)]


FetchEvent = FetchInit | FetchSuccess | FetchFailure | RemoveStory
