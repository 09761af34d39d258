"""Session controller: the surface a presentation layer calls into.

Ties together the locator builder, the request history, the fetch state
machine, the derived search history and the sort engine. One controller
instance owns one browsing session.
"""

import asyncio
import uuid
from collections.abc import Awaitable, Callable

import structlog

from hacker_stories.fetch.errors import TransportFailure
from hacker_stories.fetch.metrics import FetchMetrics
from hacker_stories.fetch.models import SearchPage
from hacker_stories.search.history import derive_search_history
from hacker_stories.search.url import build_search_url, extract_search_term
from hacker_stories.settings import AppSettings
from hacker_stories.sorting.sorter import SortKey, SortState, apply_sort, toggle_sort
from hacker_stories.stories.models import FetchState, ResultSet
from hacker_stories.stories.state_machine import FetchStateMachine
from hacker_stories.store.kv import KeyValueStore
from hacker_stories.store.persistent import PersistentValue


logger = structlog.get_logger()

Fetcher = Callable[[str], Awaitable[SearchPage]]
"""Async capability that fetches and parses one search locator."""


class StoriesController:
    """Searchable, pageable, sortable story list for one session.

    Every request is tagged with a sequence number that increases on each
    fetch, including repeated loads of the same locator. A settlement whose
    tag is no longer the latest is discarded, so a slow response can never
    overwrite the results of a newer search. A cancelled request that is
    still the latest settles as a failure before the cancellation propagates.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        store: KeyValueStore,
        settings: AppSettings | None = None,
        session_id: str | None = None,
    ) -> None:
        """Initialize the controller.

        Reads the remembered search term once and prepares the locator for
        its first page; nothing is fetched until load() is awaited.

        Args:
            fetcher: Async fetch-by-URL capability.
            store: Key-value store holding the last search term.
            settings: Application settings.
            session_id: Optional session identifier for logging.
        """
        self._settings = settings or AppSettings()
        self._fetcher = fetcher
        self._session_id = session_id or str(uuid.uuid4())
        self._search_term = PersistentValue(
            store,
            self._settings.search_term_key,
            self._settings.default_search_term,
        )
        self._urls: tuple[str, ...] = (self._url_for(self._search_term.value, 0),)
        self._request_seq = 0
        self._machine = FetchStateMachine(
            self._session_id, strict=self._settings.strict_events
        )
        self._sort_state = SortState()
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="controller", session_id=self._session_id)

    @property
    def session_id(self) -> str:
        """Get the session ID."""
        return self._session_id

    @property
    def state(self) -> FetchState:
        """Get a read-only snapshot of the fetch state."""
        return self._machine.state

    @property
    def search_term(self) -> str:
        """Get the current (remembered) search term."""
        return self._search_term.value

    @property
    def request_history(self) -> tuple[str, ...]:
        """Get every locator issued in this session, oldest first."""
        return self._urls

    @property
    def search_history(self) -> list[str]:
        """Get the recent distinct search terms, excluding the latest one."""
        return derive_search_history(self._urls, limit=self._settings.history_limit)

    @property
    def sort_state(self) -> SortState:
        """Get the active sort key and direction."""
        return self._sort_state

    @property
    def sorted_stories(self) -> ResultSet:
        """Get the current results in the selected sort order."""
        return apply_sort(self._machine.state.results, self._sort_state)

    @property
    def comment_total(self) -> int:
        """Get the number of comments across the current results."""
        return sum(story.comment_count for story in self._machine.state.results)

    def set_search_term(self, term: str) -> None:
        """Update the input search term without searching.

        Args:
            term: New search term; persisted if it changed.
        """
        if self._search_term.set(term):
            self._log.debug("search_term_persisted", term=term)

    async def load(self) -> FetchState:
        """Fetch the latest issued locator.

        Called once on start-up to show results for the remembered term.

        Returns:
            The fetch state after the request settles.
        """
        return await self._fetch_latest()

    async def search(self, term: str | None = None) -> FetchState:
        """Start a fresh search.

        Args:
            term: Term to search for; defaults to the current search term.

        Returns:
            The fetch state after the request settles.
        """
        if term is None:
            term = self._search_term.value
        self.set_search_term(term)
        return await self._issue(self._url_for(term, 0))

    async def search_from_history(self, term: str) -> FetchState:
        """Re-run a past search and make it the current term.

        Args:
            term: A term from search_history.

        Returns:
            The fetch state after the request settles.
        """
        return await self.search(term)

    async def next_page(self) -> FetchState:
        """Fetch the page after the current one for the latest issued term.

        The term comes from the last issued locator rather than the input
        term, so editing the input box does not change what is paged.

        Returns:
            The fetch state after the request settles.
        """
        term = extract_search_term(self._urls[-1])
        return await self._issue(self._url_for(term, self._machine.state.page + 1))

    def remove_item(self, story_id: str) -> FetchState:
        """Remove a story from the current results.

        Args:
            story_id: Id of the story to remove; unknown ids are ignored.

        Returns:
            The new fetch state.
        """
        return self._machine.remove(story_id)

    def set_sort_key(self, key: SortKey | str) -> SortState:
        """Activate a sort key, flipping direction if it is already active.

        Args:
            key: Sort key or its name.

        Returns:
            The new sort state.
        """
        self._sort_state = toggle_sort(self._sort_state, SortKey(key))
        self._log.debug(
            "sort_changed",
            sort_key=self._sort_state.active_key.value,
            reversed=self._sort_state.reversed,
        )
        return self._sort_state

    def _url_for(self, term: str, page: int) -> str:
        return build_search_url(term, page, api_base=self._settings.api_base)

    async def _issue(self, url: str) -> FetchState:
        self._urls = (*self._urls, url)
        return await self._fetch_latest()

    def _is_stale(self, token: int) -> bool:
        return token != self._request_seq

    async def _fetch_latest(self) -> FetchState:
        self._request_seq += 1
        token = self._request_seq
        url = self._urls[-1]
        log = self._log.bind(url=url, token=token)

        self._machine.init()
        try:
            page = await self._fetcher(url)
        except asyncio.CancelledError:
            if not self._is_stale(token):
                log.info("fetch_cancelled")
                self._machine.fail("cancelled")
            raise
        except TransportFailure as exc:
            reason = str(exc)
        except Exception as exc:
            # Injected fetchers may raise anything; it still settles the request
            log.exception("fetcher_error")
            reason = f"{type(exc).__name__}: {exc}"
        else:
            if self._is_stale(token):
                self._discard_stale(log, "success")
                return self._machine.state
            return self._machine.succeed(tuple(page.hits), page.page)

        if self._is_stale(token):
            self._discard_stale(log, "failure")
            return self._machine.state
        return self._machine.fail(reason)

    def _discard_stale(self, log: structlog.stdlib.BoundLogger, outcome: str) -> None:
        self._metrics.record_stale()
        log.info(
            "stale_response_discarded",
            outcome=outcome,
            latest_token=self._request_seq,
        )
