"""Base exception for the package.

Every error raised by hacker_stories derives from HackerStoriesError so that
a presentation layer can catch the whole family in one place.
"""


class HackerStoriesError(Exception):
    """Base exception for all hacker_stories errors."""
