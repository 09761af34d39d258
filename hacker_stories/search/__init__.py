"""Search locators and the derived search history."""

from hacker_stories.search.constants import (
    DEFAULT_API_BASE,
    DEFAULT_SEARCH_TERM,
    HISTORY_LIMIT,
    SEARCH_TERM_KEY,
)
from hacker_stories.search.history import derive_search_history
from hacker_stories.search.url import (
    build_search_url,
    extract_search_term,
    parse_search_term,
)


__all__ = [
    "DEFAULT_API_BASE",
    "DEFAULT_SEARCH_TERM",
    "HISTORY_LIMIT",
    "SEARCH_TERM_KEY",
    "build_search_url",
    "derive_search_history",
    "extract_search_term",
    "parse_search_term",
]
