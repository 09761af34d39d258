"""Presentation-time sorting of the current results."""

from collections.abc import Callable, Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict

from hacker_stories.stories.models import ResultSet, Story


class SortKey(str, Enum):
    """Named sort orders.

    - NONE: Arrival order
    - TITLE: Ascending by title
    - AUTHOR: Ascending by author
    - COMMENTS: Descending by comment count
    - POINTS: Descending by points
    """

    NONE = "NONE"
    TITLE = "TITLE"
    AUTHOR = "AUTHOR"
    COMMENTS = "COMMENTS"
    POINTS = "POINTS"


class SortState(BaseModel):
    """Active sort key and direction."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    active_key: SortKey = SortKey.NONE
    reversed: bool = False


StoryField = Callable[[Story], str | int]
SortFunction = Callable[[Sequence[Story]], ResultSet]


def _ascending(field: StoryField) -> SortFunction:
    def sort(stories: Sequence[Story]) -> ResultSet:
        return tuple(sorted(stories, key=field))

    return sort


def _descending(field: StoryField) -> SortFunction:
    # Stable ascending sort reversed end-to-end, so ties come out in reverse
    # arrival order
    def sort(stories: Sequence[Story]) -> ResultSet:
        return tuple(reversed(sorted(stories, key=field)))

    return sort


SORTS: dict[SortKey, SortFunction] = {
    SortKey.NONE: tuple,
    SortKey.TITLE: _ascending(lambda story: story.title),
    SortKey.AUTHOR: _ascending(lambda story: story.author),
    SortKey.COMMENTS: _descending(lambda story: story.comment_count),
    SortKey.POINTS: _descending(lambda story: story.points),
}


def toggle_sort(current: SortState, key: SortKey) -> SortState:
    """Activate a sort key.

    Args:
        current: Current sort state.
        key: Key the user selected.

    Returns:
        The same key with its direction flipped, or the new key ascending in
        its base order.
    """
    if key == current.active_key:
        return current.model_copy(update={"reversed": not current.reversed})
    return SortState(active_key=key, reversed=False)


def apply_sort(results: Sequence[Story], state: SortState) -> ResultSet:
    """Return the results in the order selected by a sort state.

    When ``reversed`` is set, the base order is reversed end-to-end rather than
    re-sorted with an inverted comparator, so ties swap their relative order.

    Args:
        results: Stories in arrival order; never modified.
        state: Sort state to apply.

    Returns:
        A new tuple of stories.
    """
    ordered = SORTS[state.active_key](results)
    if state.reversed:
        return tuple(reversed(ordered))
    return ordered
