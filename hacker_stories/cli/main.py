"""CLI commands for browsing stories from the terminal."""

import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import click

from hacker_stories.controller import StoriesController
from hacker_stories.fetch.client import StorySearchClient, create_http_client
from hacker_stories.observability.logging import (
    bind_session_context,
    clear_session_context,
    configure_logging,
    get_logger,
)
from hacker_stories.settings import AppSettings, get_settings
from hacker_stories.sorting.sorter import SortKey
from hacker_stories.stories.models import FetchState
from hacker_stories.store.kv import SqliteKeyValueStore


logger = get_logger(__name__)

MAX_PAGES = 50


@dataclass
class SearchOptions:
    """Options for the search command."""

    term: str | None
    pages: int
    sort_key: SortKey
    reverse: bool
    state_path: Path


def _apply_sort(controller: StoriesController, options: SearchOptions) -> None:
    if options.sort_key != controller.sort_state.active_key:
        controller.set_sort_key(options.sort_key)
    if options.reverse:
        controller.set_sort_key(options.sort_key)


def _echo_results(controller: StoriesController) -> None:
    state = controller.state
    click.echo(
        f"{len(state.results)} stories with {controller.comment_total} comments "
        f"(page {state.page})"
    )
    for story in controller.sorted_stories:
        click.echo(
            f"{story.points:>5}  {story.comment_count:>5}  "
            f"{story.title}  [{story.author}]  {story.url}"
        )

    history = controller.search_history
    if history:
        click.echo(f"Recent searches: {', '.join(history)}")
    if state.is_error:
        click.echo("Something went wrong...", err=True)


async def _run_search(options: SearchOptions, settings: AppSettings) -> FetchState:
    """Run one browsing session and print the results.

    Args:
        options: Parsed command options.
        settings: Application settings.

    Returns:
        The final fetch state.
    """
    async with create_http_client(settings) as http_client:
        with SqliteKeyValueStore(options.state_path) as store:
            controller = StoriesController(
                StorySearchClient(http_client, settings.request_timeout_seconds),
                store,
                settings,
            )
            bind_session_context(controller.session_id)
            try:
                if options.term is None:
                    state = await controller.load()
                else:
                    state = await controller.search(options.term)

                for _ in range(options.pages - 1):
                    if state.is_error:
                        break
                    state = await controller.next_page()

                _apply_sort(controller, options)
                _echo_results(controller)
                return state
            finally:
                clear_session_context()


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Search Hacker News stories."""


@cli.command()
@click.argument("term", required=False)
@click.option(
    "--pages",
    default=1,
    show_default=True,
    type=click.IntRange(1, MAX_PAGES),
    help="Number of result pages to load.",
)
@click.option(
    "--sort",
    "sort_key",
    default=SortKey.NONE.value,
    show_default=True,
    type=click.Choice([key.value for key in SortKey], case_sensitive=False),
    help="Sort order for the printed stories.",
)
@click.option("--reverse", is_flag=True, help="Reverse the sort order.")
@click.option(
    "--state",
    "state_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SQLite file remembering the last search term.",
)
@click.option("--json-logs", is_flag=True, help="Output logs in JSON format.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
def search(  # noqa: PLR0913
    term: str | None,
    pages: int,
    sort_key: str,
    reverse: bool,
    state_path: Path | None,
    json_logs: bool,
    verbose: bool,
) -> None:
    """Search for TERM, or repeat the last remembered search."""
    settings = get_settings()
    level = logging.getLevelNamesMapping().get(
        settings.log_level.upper(), logging.INFO
    )
    if verbose:
        level = logging.DEBUG
    configure_logging(level=level, json_format=json_logs or settings.json_logs)

    options = SearchOptions(
        term=term,
        pages=pages,
        sort_key=SortKey(sort_key.upper()),
        reverse=reverse,
        state_path=state_path or settings.state_path,
    )
    state = asyncio.run(_run_search(options, settings))
    logger.debug("search_command_done", component="cli", is_error=state.is_error)
    if state.is_error:
        sys.exit(1)


if __name__ == "__main__":
    cli()
