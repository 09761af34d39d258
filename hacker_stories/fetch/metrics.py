"""Metrics collection for search fetches."""

from dataclasses import dataclass, field
from typing import ClassVar

from hacker_stories.fetch.models import FetchErrorClass


@dataclass
class FetchMetrics:
    """Metrics for search fetch operations.

    Singleton class that tracks request counts, failures, stale responses
    and received stories.
    """

    requests_total: int = 0
    failures_total: dict[str, int] = field(default_factory=dict)
    stale_discarded_total: int = 0
    stories_received_total: int = 0
    duration_ms_total: float = 0.0

    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(self, duration_ms: float, story_count: int) -> None:
        """Record a successful request.

        Args:
            duration_ms: Duration in milliseconds.
            story_count: Number of stories in the page.
        """
        self.requests_total += 1
        self.duration_ms_total += duration_ms
        self.stories_received_total += story_count

    def record_failure(self, error_class: FetchErrorClass) -> None:
        """Record a failed request.

        Args:
            error_class: Classification of the failure.
        """
        self.requests_total += 1
        key = error_class.value
        self.failures_total[key] = self.failures_total.get(key, 0) + 1

    def record_stale(self) -> None:
        """Record a settlement discarded because a newer request was issued."""
        self.stale_discarded_total += 1

    def to_dict(self) -> dict[str, int | float | dict[str, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "requests_total": self.requests_total,
            "failures_total": dict(self.failures_total),
            "stale_discarded_total": self.stale_discarded_total,
            "stories_received_total": self.stories_received_total,
            "duration_ms_total": self.duration_ms_total,
        }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average duration of successful requests.

        Returns:
            Average duration in milliseconds.
        """
        successes = self.requests_total - sum(self.failures_total.values())
        if successes <= 0:
            return 0.0
        return self.duration_ms_total / successes
