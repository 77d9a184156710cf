"""Interfaces of the data sources and sinks the coaching core depends on.

Concrete implementations are passed into the aggregator, ingestor and
feedback service; tests pass in-memory fakes.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence

from models.training import ActivityStats, HrZones, PowerZones, RawActivity, SampleStream


class ActivityStore(Protocol):
    """Persistence for activities and their zone summaries."""

    def get_recent_activities(
        self,
        athlete_id: str,
        days: int,
        now: Optional[datetime] = None
    ) -> List[RawActivity]:
        """Activities started within the last ``days`` days, newest first.

        Raises:
            ActivityFetchError: if the store cannot be read
        """
        ...

    def store_activities(self, athlete_id: str, activities: Sequence[RawActivity]) -> int:
        """Insert or update activities, returning how many were written."""
        ...

    def store_activity_streams(
        self,
        activity_id: str,
        streams: SampleStream,
        power_zones: Optional[PowerZones],
        hr_zones: Optional[HrZones]
    ) -> None:
        """Persist raw streams and the zone summaries derived from them."""
        ...

    def get_activity_stats(self, athlete_id: str, days: int, now: Optional[datetime] = None) -> ActivityStats:
        """Totals and averages for the last ``days`` days."""
        ...


class TelemetrySource(Protocol):
    """Rate-limited source of per-second activity samples."""

    def get_activity_streams(self, activity_id: str) -> SampleStream:
        """Samples for one activity.

        Raises:
            TelemetryFetchError: with the source's failure message
        """
        ...


class NarrativeGenerator(Protocol):
    """Turns a structured training bundle into coaching text. May fail."""

    def generate_feedback(self, training_data: Dict[str, Any]) -> str:
        ...
