"""Search locator building and parsing."""

from urllib.parse import quote, unquote

import structlog

from hacker_stories.search.constants import (
    API_SEARCH_PATH,
    COMPONENT_SEARCH,
    DEFAULT_API_BASE,
    PARAM_PAGE,
    PARAM_SEARCH,
)


logger = structlog.get_logger()


def build_search_url(
    term: str,
    page: int,
    api_base: str = DEFAULT_API_BASE,
) -> str:
    """Build the request locator for one page of a search.

    The term is percent-encoded so that characters such as ``&`` and ``=``
    cannot break the query string.

    Args:
        term: Search term. An empty term is allowed.
        page: Zero-based page number.
        api_base: Base URL of the search API.

    Returns:
        Locator of the form ``<base>/search?query=<term>&page=<page>``.

    Raises:
        ValueError: If page is negative.
    """
    if page < 0:
        msg = f"Page must be >= 0, got {page}"
        raise ValueError(msg)

    base = api_base.rstrip("/")
    encoded = quote(term, safe="")
    return f"{base}{API_SEARCH_PATH}?{PARAM_SEARCH}={encoded}&{PARAM_PAGE}={page}"


def parse_search_term(locator: str) -> str | None:
    """Parse the search term out of a locator.

    The term is the value of the ``query`` parameter, terminated by the next
    ``&`` or the end of the string.

    Args:
        locator: Request locator.

    Returns:
        Decoded search term, or None if the locator carries no query parameter.
    """
    _, sep, query_string = locator.rpartition("?")
    if not sep:
        return None

    prefix = f"{PARAM_SEARCH}="
    for part in query_string.split("&"):
        if part.startswith(prefix):
            return unquote(part[len(prefix) :])
    return None


def extract_search_term(locator: str) -> str:
    """Extract the search term from a locator, degrading on malformed input.

    Args:
        locator: Request locator.

    Returns:
        The decoded term, or a best-effort string (the text after the last
        ``?``, else the whole locator) when the locator does not parse.
    """
    term = parse_search_term(locator)
    if term is not None:
        return term

    fallback = locator.rpartition("?")[2]
    logger.debug(
        "malformed_locator",
        component=COMPONENT_SEARCH,
        locator=locator,
        fallback=fallback,
    )
    return fallback
