"""Sort engine for presenting results."""

from hacker_stories.sorting.sorter import (
    SORTS,
    SortKey,
    SortState,
    apply_sort,
    toggle_sort,
)


__all__ = [
    "SORTS",
    "SortKey",
    "SortState",
    "apply_sort",
    "toggle_sort",
]
