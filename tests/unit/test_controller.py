"""Unit tests for StoriesController."""

import asyncio

import pytest

from hacker_stories.controller import StoriesController
from hacker_stories.fetch.errors import TransportFailure
from hacker_stories.fetch.metrics import FetchMetrics
from hacker_stories.fetch.models import FetchErrorClass, SearchPage
from hacker_stories.search.url import build_search_url
from hacker_stories.settings import AppSettings
from hacker_stories.sorting.sorter import SortKey, SortState
from hacker_stories.stories.models import FetchStatus, Story
from hacker_stories.store.kv import InMemoryKeyValueStore
from tests.helpers.stories import make_story


class FakeFetcher:
    """Async fetcher serving canned pages keyed by (term, page)."""

    def __init__(self) -> None:
        self.pages: dict[tuple[str, int], list[Story]] = {}
        self.failures: dict[tuple[str, int], Exception] = {}
        self.calls: list[str] = []

    def add(self, term: str, page: int, *stories: Story) -> None:
        self.pages[(term, page)] = list(stories)

    def fail(self, term: str, page: int, error: Exception) -> None:
        self.failures[(term, page)] = error

    async def __call__(self, url: str) -> SearchPage:
        self.calls.append(url)
        for (term, page), error in self.failures.items():
            if url == build_search_url(term, page):
                raise error
        for (term, page), stories in self.pages.items():
            if url == build_search_url(term, page):
                return SearchPage(hits=stories, page=page)
        return SearchPage(hits=[], page=0)


@pytest.fixture
def fetcher() -> FakeFetcher:
    """Empty fake fetcher."""
    return FakeFetcher()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    """Empty in-memory store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def controller(
    fetcher: FakeFetcher, store: InMemoryKeyValueStore
) -> StoriesController:
    """Controller with default settings."""
    return StoriesController(fetcher, store, AppSettings(), session_id="test")


A = make_story("a", comment_count=3, points=4)
B = make_story("b", comment_count=2, points=9)
C = make_story("c", comment_count=5, points=1)


class TestInitialState:
    """Tests for a freshly built controller."""

    def test_defaults(self, controller: StoriesController) -> None:
        """Nothing is fetched before load()."""
        assert controller.session_id == "test"
        assert controller.search_term == "React"
        assert controller.state.status == FetchStatus.IDLE
        assert controller.request_history == (build_search_url("React", 0),)
        assert controller.search_history == []
        assert controller.sort_state == SortState()

    def test_remembered_term(self, fetcher: FakeFetcher) -> None:
        """The stored term replaces the default."""
        store = InMemoryKeyValueStore({"search": "Rust"})
        controller = StoriesController(fetcher, store, AppSettings())
        assert controller.search_term == "Rust"
        assert controller.request_history == (build_search_url("Rust", 0),)
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_load_fetches_initial_locator(
        self, controller: StoriesController, fetcher: FakeFetcher
    ) -> None:
        """load() fetches the remembered term's first page."""
        fetcher.add("React", 0, A, B)
        state = await controller.load()
        assert fetcher.calls == [build_search_url("React", 0)]
        assert state.results == (A, B)
        assert state.status == FetchStatus.LOADED
        assert len(controller.request_history) == 1


class TestSearchAndPaging:
    """Tests for search and next_page."""

    @pytest.mark.asyncio
    async def test_accumulate_then_remove(
        self, controller: StoriesController, fetcher: FakeFetcher
    ) -> None:
        """Page 0, page 1, then removing a story."""
        fetcher.add("react", 0, A, B)
        fetcher.add("react", 1, C)

        state = await controller.search("react")
        assert state.results == (A, B)
        assert state.page == 0

        state = await controller.next_page()
        assert state.results == (A, B, C)
        assert state.page == 1

        state = controller.remove_item("b")
        assert state.results == (A, C)
        assert controller.remove_item("b") == state

    @pytest.mark.asyncio
    async def test_fresh_search_replaces(
        self, controller: StoriesController, fetcher: FakeFetcher
    ) -> None:
        """A new search discards the previous term's pages."""
        fetcher.add("react", 0, A)
        fetcher.add("react", 1, B)
        fetcher.add("vue", 0, C)

        await controller.search("react")
        await controller.next_page()
        state = await controller.search("vue")
        assert state.results == (C,)
        assert state.page == 0

    @pytest.mark.asyncio
    async def test_search_without_term_uses_input(
        self, controller: StoriesController, fetcher: FakeFetcher
    ) -> None:
        """Submitting searches for the current input term."""
        controller.set_search_term("svelte")
        await controller.search()
        assert fetcher.calls == [build_search_url("svelte", 0)]

    @pytest.mark.asyncio
    async def test_next_page_follows_last_issued_term(
        self, controller: StoriesController, fetcher: FakeFetcher
    ) -> None:
        """Editing the input does not change which term is paged."""
        fetcher.add("react", 0, A)
        await controller.search("react")
        controller.set_search_term("half-typed")
        await controller.next_page()
        assert fetcher.calls[-1] == build_search_url("react", 1)

    @pytest.mark.asyncio
    async def test_request_history_grows(
        self, controller: StoriesController
    ) -> None:
        """Every search and page advance is recorded."""
        await controller.search("a")
        await controller.next_page()
        await controller.search("b")
        assert controller.request_history == (
            build_search_url("React", 0),
            build_search_url("a", 0),
            build_search_url("a", 1),
            build_search_url("b", 0),
        )

    @pytest.mark.asyncio
    async def test_search_history(self, controller: StoriesController) -> None:
        """History excludes the latest term and keeps five."""
        for term in ["a", "b", "c", "d", "e", "f", "g"]:
            await controller.search(term)
        assert controller.search_history == ["b", "c", "d", "e", "f"]

    @pytest.mark.asyncio
    async def test_search_from_history(
        self,
        controller: StoriesController,
        fetcher: FakeFetcher,
        store: InMemoryKeyValueStore,
    ) -> None:
        """Picking a past term searches it and makes it current."""
        fetcher.add("a", 0, A)
        await controller.search("a")
        await controller.search("b")
        state = await controller.search_from_history("a")
        assert state.results == (A,)
        assert controller.search_term == "a"
        assert store.get("search") == "a"
        assert controller.search_history == ["React", "b"]


class TestPersistence:
    """Tests for remembering the search term."""

    @pytest.mark.asyncio
    async def test_term_written_once_per_change(
        self, controller: StoriesController, store: InMemoryKeyValueStore
    ) -> None:
        """Repeating a search does not write again."""
        await controller.search("python")
        await controller.search("python")
        controller.set_search_term("python")
        assert store.writes == [("search", "python")]

    @pytest.mark.asyncio
    async def test_next_page_does_not_write(
        self, controller: StoriesController, store: InMemoryKeyValueStore
    ) -> None:
        """Paging never touches the store."""
        await controller.load()
        await controller.next_page()
        assert store.writes == []


class TestFailures:
    """Tests for failure handling."""

    @pytest.mark.asyncio
    async def test_transport_failure_keeps_results(
        self, controller: StoriesController, fetcher: FakeFetcher
    ) -> None:
        """A failed page keeps the last good results."""
        fetcher.add("react", 0, A, B)
        fetcher.fail(
            "react", 1, TransportFailure(FetchErrorClass.HTTP_5XX, "HTTP 503", 503)
        )
        await controller.search("react")
        state = await controller.next_page()
        assert state.is_error
        assert not state.is_loading
        assert state.status == FetchStatus.FAILED
        assert state.results == (A, B)
        assert state.page == 0

    @pytest.mark.asyncio
    async def test_retry_after_failure(
        self, controller: StoriesController, fetcher: FakeFetcher
    ) -> None:
        """Re-issuing the search recovers from a failure."""
        fetcher.fail("go", 0, TransportFailure(FetchErrorClass.UNKNOWN, "boom"))
        assert (await controller.search("go")).is_error

        del fetcher.failures[("go", 0)]
        fetcher.add("go", 0, C)
        state = await controller.search("go")
        assert not state.is_error
        assert state.results == (C,)

    @pytest.mark.asyncio
    async def test_unexpected_fetcher_error_is_failure(
        self, controller: StoriesController, fetcher: FakeFetcher
    ) -> None:
        """Any exception from the fetcher settles the request as failed."""
        fetcher.fail("x", 0, RuntimeError("socket closed"))
        state = await controller.search("x")
        assert state.is_error


class TestStaleResponses:
    """Tests for discarding superseded settlements."""

    @pytest.mark.asyncio
    async def test_slow_success_is_discarded(self, store: InMemoryKeyValueStore) -> None:
        """A response for an older search cannot overwrite a newer one."""
        gate = asyncio.Event()

        async def fetcher(url: str) -> SearchPage:
            if url == build_search_url("slow", 0):
                await gate.wait()
                return SearchPage(hits=[A], page=0)
            return SearchPage(hits=[B], page=0)

        controller = StoriesController(fetcher, store, AppSettings())
        slow = asyncio.create_task(controller.search("slow"))
        await asyncio.sleep(0)

        state = await controller.search("fast")
        assert state.results == (B,)

        gate.set()
        stale_state = await slow
        assert stale_state.results == (B,)
        assert controller.state.results == (B,)
        assert controller.state.status == FetchStatus.LOADED
        assert FetchMetrics.get_instance().stale_discarded_total == 1

    @pytest.mark.asyncio
    async def test_slow_failure_is_discarded(self, store: InMemoryKeyValueStore) -> None:
        """A late failure for an older search does not flag an error."""
        gate = asyncio.Event()

        async def fetcher(url: str) -> SearchPage:
            if url == build_search_url("slow", 0):
                await gate.wait()
                raise TransportFailure(FetchErrorClass.NETWORK_TIMEOUT, "timed out")
            return SearchPage(hits=[C], page=0)

        controller = StoriesController(fetcher, store, AppSettings())
        slow = asyncio.create_task(controller.search("slow"))
        await asyncio.sleep(0)
        await controller.search("fast")

        gate.set()
        await slow
        assert not controller.state.is_error
        assert controller.state.results == (C,)

    @pytest.mark.asyncio
    async def test_overlapping_loads_settle_once(
        self, store: InMemoryKeyValueStore
    ) -> None:
        """Two concurrent loads of the same locator keep only the newer result."""
        gate = asyncio.Event()
        calls: list[str] = []

        async def fetcher(url: str) -> SearchPage:
            calls.append(url)
            if len(calls) == 1:
                await gate.wait()
                return SearchPage(hits=[A], page=0)
            gate.set()
            return SearchPage(hits=[B], page=0)

        controller = StoriesController(fetcher, store, AppSettings())
        first, second = await asyncio.gather(controller.load(), controller.load())

        assert calls == [build_search_url("React", 0)] * 2
        assert second.results == (B,)
        assert first.results == (B,)
        assert controller.state.status == FetchStatus.LOADED
        assert controller.state.results == (B,)
        assert FetchMetrics.get_instance().stale_discarded_total == 1


class TestCancellation:
    """Tests for requests cancelled while in flight."""

    @pytest.mark.asyncio
    async def test_cancelled_latest_request_settles_as_failure(
        self, store: InMemoryKeyValueStore
    ) -> None:
        """Cancelling the latest request leaves no stuck loading flag."""
        gate = asyncio.Event()

        async def fetcher(url: str) -> SearchPage:
            if url == build_search_url("slow", 0):
                await gate.wait()
            return SearchPage(hits=[C], page=0)

        controller = StoriesController(fetcher, store, AppSettings())
        task = asyncio.create_task(controller.search("slow"))
        await asyncio.sleep(0)
        assert controller.state.is_loading

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not controller.state.is_loading
        assert controller.state.is_error
        assert controller.state.status == FetchStatus.FAILED

        state = await controller.search("fast")
        assert state.status == FetchStatus.LOADED
        assert state.results == (C,)

    @pytest.mark.asyncio
    async def test_cancelled_stale_request_leaves_state(
        self, store: InMemoryKeyValueStore
    ) -> None:
        """Cancelling a superseded request does not touch the newer results."""
        gate = asyncio.Event()

        async def fetcher(url: str) -> SearchPage:
            if url == build_search_url("slow", 0):
                await gate.wait()
            return SearchPage(hits=[B], page=0)

        controller = StoriesController(fetcher, store, AppSettings())
        slow = asyncio.create_task(controller.search("slow"))
        await asyncio.sleep(0)
        await controller.search("fast")

        slow.cancel()
        with pytest.raises(asyncio.CancelledError):
            await slow

        assert controller.state.status == FetchStatus.LOADED
        assert controller.state.results == (B,)


class TestSortingAndTotals:
    """Tests for presentation helpers."""

    @pytest.mark.asyncio
    async def test_sort_points_toggle(
        self, controller: StoriesController, fetcher: FakeFetcher
    ) -> None:
        """Sorting by points and toggling reverses the view only."""
        fetcher.add("react", 0, A, B, C)
        await controller.search("react")

        controller.set_sort_key(SortKey.POINTS)
        assert [s.points for s in controller.sorted_stories] == [9, 4, 1]

        controller.set_sort_key("POINTS")
        assert [s.points for s in controller.sorted_stories] == [1, 4, 9]
        assert controller.state.results == (A, B, C)

    def test_invalid_sort_key(self, controller: StoriesController) -> None:
        """Unknown sort key names are rejected."""
        with pytest.raises(ValueError):
            controller.set_sort_key("POPULARITY")

    @pytest.mark.asyncio
    async def test_comment_total(
        self, controller: StoriesController, fetcher: FakeFetcher
    ) -> None:
        """Comment total sums the current results."""
        fetcher.add("react", 0, A, B, C)
        await controller.search("react")
        assert controller.comment_total == 10
        controller.remove_item("c")
        assert controller.comment_total == 5

