"""Stories, the fetch state and its state machine."""

from hacker_stories.stories.models import (
    FetchEvent,
    FetchFailure,
    FetchInit,
    FetchState,
    FetchStatus,
    FetchSuccess,
    RemoveStory,
    ResultSet,
    Story,
)
from hacker_stories.stories.state_machine import (
    FetchStateError,
    FetchStateMachine,
    UnknownEventError,
    apply_event,
)


__all__ = [
    "FetchEvent",
    "FetchFailure",
    "FetchInit",
    "FetchState",
    "FetchStateError",
    "FetchStateMachine",
    "FetchStatus",
    "FetchSuccess",
    "RemoveStory",
    "ResultSet",
    "Story",
    "UnknownEventError",
    "apply_event",
]
