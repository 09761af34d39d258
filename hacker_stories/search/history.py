"""Search history derived from the issued request locators."""

from collections.abc import Sequence

from hacker_stories.search.constants import HISTORY_LIMIT
from hacker_stories.search.url import extract_search_term


def derive_search_history(
    locators: Sequence[str],
    limit: int = HISTORY_LIMIT,
) -> list[str]:
    """Derive the recent distinct search terms from the request history.

    Terms are de-duplicated in first-seen order. The latest search term is
    never part of the result; of the remaining terms, the last ``limit`` are
    returned, oldest first. Page advances of the same term collapse into one
    entry.

    Args:
        locators: Request locators in issue order.
        limit: Maximum number of terms to return.

    Returns:
        Up to ``limit`` past search terms.
    """
    if not locators or limit <= 0:
        return []

    terms = [extract_search_term(locator) for locator in locators]
    latest = terms[-1]

    distinct = list(dict.fromkeys(terms))
    previous = [term for term in distinct if term != latest]
    return previous[-limit:]
