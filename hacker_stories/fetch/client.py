"""Async HTTP client for the story search API."""

import time

import httpx
import structlog
from pydantic import ValidationError

from hacker_stories.fetch.constants import (
    COMPONENT_FETCH,
    DEFAULT_TIMEOUT_SECONDS,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
)
from hacker_stories.fetch.errors import TransportFailure
from hacker_stories.fetch.metrics import FetchMetrics
from hacker_stories.fetch.models import FetchErrorClass, SearchPage
from hacker_stories.settings import AppSettings


logger = structlog.get_logger()


def create_http_client(settings: AppSettings) -> httpx.AsyncClient:
    """Create the shared AsyncClient for a session.

    Args:
        settings: Application settings.

    Returns:
        Configured client; the caller owns and closes it.
    """
    return httpx.AsyncClient(
        timeout=settings.request_timeout_seconds,
        headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
        follow_redirects=True,
    )


class StorySearchClient:
    """Fetches and parses one page of search results per call.

    Instances are awaitable callables ``(url) -> SearchPage`` so they can be
    handed to the controller as its fetch capability. Every failure mode is
    raised as TransportFailure; no retries are attempted.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the client.

        Args:
            http_client: Shared async HTTP client.
            timeout_seconds: Per-request timeout.
        """
        self._client = http_client
        self._timeout = timeout_seconds
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component=COMPONENT_FETCH)

    async def __call__(self, url: str) -> SearchPage:
        return await self.fetch_page(url)

    async def fetch_page(self, url: str) -> SearchPage:
        """Fetch one page of search results.

        Args:
            url: Search locator.

        Returns:
            Parsed search page.

        Raises:
            TransportFailure: On transport errors, non-2xx responses or
                unparseable bodies.
        """
        log = self._log.bind(url=url)
        start_time_ns = time.perf_counter_ns()

        try:
            page = await self._request(url)
        except TransportFailure as exc:
            self._metrics.record_failure(exc.error_class)
            log.warning(
                "fetch_failed",
                error_class=exc.error_class.value,
                status_code=exc.status_code,
                error=str(exc),
            )
            raise

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_request(duration_ms, len(page.hits))
        log.info(
            "fetch_complete",
            page=page.page,
            hits=len(page.hits),
            duration_ms=round(duration_ms, 2),
        )
        return page

    async def _request(self, url: str) -> SearchPage:
        try:
            response = await self._client.get(url, timeout=self._timeout)
        except httpx.TimeoutException as exc:
            raise TransportFailure(
                FetchErrorClass.NETWORK_TIMEOUT, f"Request timed out: {exc}"
            ) from exc
        except httpx.TransportError as exc:
            raise TransportFailure(
                FetchErrorClass.CONNECTION_ERROR, f"Connection failed: {exc}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportFailure(FetchErrorClass.UNKNOWN, str(exc)) from exc

        status_code = response.status_code
        if not HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
            raise TransportFailure(
                FetchErrorClass.from_status_code(status_code),
                f"HTTP {status_code}",
                status_code=status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportFailure(
                FetchErrorClass.INVALID_RESPONSE,
                f"Response is not valid JSON: {exc}",
                status_code=status_code,
            ) from exc

        try:
            return SearchPage.model_validate(payload)
        except ValidationError as exc:
            raise TransportFailure(
                FetchErrorClass.INVALID_RESPONSE,
                f"Unexpected response shape: {exc.error_count()} errors",
                status_code=status_code,
            ) from exc
