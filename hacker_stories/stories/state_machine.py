"""Fetch lifecycle state machine implementation."""

import threading

import structlog

from hacker_stories.errors import HackerStoriesError
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


logger = structlog.get_logger()


class FetchStateError(HackerStoriesError):
    """Raised when an invalid fetch state transition is attempted."""

    def __init__(self, from_state: FetchStatus, to_state: FetchStatus) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid fetch state transition: {from_state.name} -> {to_state.name}"
        )


class UnknownEventError(HackerStoriesError):
    """Raised when an event the state machine does not handle is dispatched."""

    def __init__(self, event: object) -> None:
        """Initialize the error.

        Args:
            event: The unhandled event.
        """
        self.event = event
        super().__init__(f"Unknown fetch event: {type(event).__name__}")


# State transitions:
#     any -> LOADING: FetchInit
#     LOADING -> LOADED: FetchSuccess
#     LOADING -> FAILED: FetchFailure
#     RemoveStory keeps the current state
VALID_TRANSITIONS: dict[FetchStatus, set[FetchStatus]] = {
    FetchStatus.IDLE: {FetchStatus.LOADING},
    FetchStatus.LOADING: {
        FetchStatus.LOADING,
        FetchStatus.LOADED,
        FetchStatus.FAILED,
    },
    FetchStatus.LOADED: {FetchStatus.LOADING},
    FetchStatus.FAILED: {FetchStatus.LOADING},
}


def _check_transition(from_state: FetchStatus, to_state: FetchStatus) -> None:
    if to_state not in VALID_TRANSITIONS.get(from_state, set()):
        logger.error(
            "invariant_violation",
            component="stories",
            error_type="illegal_state_transition",
            from_state=from_state.name,
            to_state=to_state.name,
        )
        raise FetchStateError(from_state, to_state)


def _merge_results(current: ResultSet, incoming: ResultSet) -> ResultSet:
    """Append incoming stories, dropping ids that are already present."""
    seen = {story.id for story in current}
    merged: list[Story] = list(current)
    for story in incoming:
        if story.id in seen:
            logger.debug(
                "duplicate_story_dropped", component="stories", story_id=story.id
            )
            continue
        seen.add(story.id)
        merged.append(story)
    return tuple(merged)


def apply_event(
    state: FetchState,
    event: FetchEvent,
    strict: bool = True,
) -> FetchState:
    """Apply one event to a fetch state.

    Args:
        state: Current state; never modified.
        event: Event to apply.
        strict: Raise on unknown events. When False they are logged and the
            state is returned unchanged.

    Returns:
        The next state.

    Raises:
        FetchStateError: If a settlement arrives while no request is loading.
        UnknownEventError: If the event is not recognized and strict is True.
    """
    if isinstance(event, FetchInit):
        _check_transition(state.status, FetchStatus.LOADING)
        return state.model_copy(
            update={
                "is_loading": True,
                "is_error": False,
                "status": FetchStatus.LOADING,
            }
        )

    if isinstance(event, FetchSuccess):
        _check_transition(state.status, FetchStatus.LOADED)
        # Page 0 is a fresh search and replaces everything accumulated so far
        base: ResultSet = () if event.page == 0 else state.results
        return state.model_copy(
            update={
                "results": _merge_results(base, event.stories),
                "page": event.page,
                "is_loading": False,
                "is_error": False,
                "status": FetchStatus.LOADED,
            }
        )

    if isinstance(event, FetchFailure):
        _check_transition(state.status, FetchStatus.FAILED)
        return state.model_copy(
            update={
                "is_loading": False,
                "is_error": True,
                "status": FetchStatus.FAILED,
            }
        )

    if isinstance(event, RemoveStory):
        remaining = tuple(
            story for story in state.results if story.id != event.story_id
        )
        if len(remaining) == len(state.results):
            return state
        return state.model_copy(update={"results": remaining})

    if strict:
        logger.error(
            "invariant_violation",
            component="stories",
            error_type="unknown_event",
            event_type=type(event).__name__,
        )
        raise UnknownEventError(event)

    logger.warning(
        "unknown_event_ignored",
        component="stories",
        event_type=type(event).__name__,
    )
    return state


class FetchStateMachine:
    """State machine for the fetch lifecycle of one session.

    Holds the current FetchState and applies events atomically.
    Logs every status change and invariant violations.
    """

    def __init__(
        self,
        session_id: str,
        initial: FetchState | None = None,
        strict: bool = True,
    ) -> None:
        """Initialize the state machine in IDLE state.

        Args:
            session_id: Unique session identifier for logging.
            initial: Optional starting state.
            strict: Raise on unknown events instead of ignoring them.
        """
        self._session_id = session_id
        self._state = initial or FetchState()
        self._strict = strict
        self._lock = threading.Lock()
        self._log = logger.bind(session_id=session_id, component="stories")

    @property
    def state(self) -> FetchState:
        """Get the current state snapshot."""
        return self._state

    @property
    def status(self) -> FetchStatus:
        """Get the current lifecycle status."""
        return self._state.status

    @property
    def session_id(self) -> str:
        """Get the session ID."""
        return self._session_id

    def dispatch(self, event: FetchEvent) -> FetchState:
        """Apply an event and store the resulting state.

        Args:
            event: Event to apply.

        Returns:
            The new state.

        Raises:
            FetchStateError: If the transition is invalid.
            UnknownEventError: If the event is unknown and strict mode is on.
        """
        with self._lock:
            old_state = self._state
            new_state = apply_event(old_state, event, strict=self._strict)
            self._state = new_state

        if new_state.status != old_state.status:
            self._log.info(
                "fetch_state_transition",
                from_state=old_state.status.name,
                to_state=new_state.status.name,
                page=new_state.page,
                result_count=len(new_state.results),
            )
        return new_state

    def init(self) -> FetchState:
        """Dispatch FetchInit."""
        return self.dispatch(FetchInit())

    def succeed(self, stories: ResultSet, page: int) -> FetchState:
        """Dispatch FetchSuccess."""
        return self.dispatch(FetchSuccess(stories=tuple(stories), page=page))

    def fail(self, reason: str = "") -> FetchState:
        """Dispatch FetchFailure."""
        return self.dispatch(FetchFailure(reason=reason))

    def remove(self, story_id: str) -> FetchState:
        """Dispatch RemoveStory."""
        return self.dispatch(RemoveStory(story_id=story_id))

    def is_loading(self) -> bool:
        """Check if a request is in flight."""
        return self._state.status == FetchStatus.LOADING

    def is_failed(self) -> bool:
        """Check if the last request failed."""
        return self._state.status == FetchStatus.FAILED
