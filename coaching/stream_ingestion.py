"""Stream ingestion: fetch activity samples, compute time in zones, persist both."""

from typing import Optional, Sequence

from config.settings import settings
from coaching.collaborators import ActivityStore, TelemetrySource
from coaching.exceptions import TelemetryFetchError
from coaching.training_zones import compute_time_in_hr_zones, compute_time_in_power_zones
from coaching.logger import get_logger

logger = get_logger(__name__)


class StreamIngestor:
    """
    Pulls sample streams for stored activities and attaches zone summaries.

    Power zones are computed whenever a power stream exists; heart-rate zones
    only when it does not.
    """

    def __init__(self, activity_store: ActivityStore, telemetry: TelemetrySource):
        """
        Initialize stream ingestor.

        Args:
            activity_store: Where streams and zone summaries are stored
            telemetry: Where streams are fetched from
        """
        self.activity_store = activity_store
        self.telemetry = telemetry

    def ingest_streams(
        self,
        activity_ids: Sequence[str],
        ftp: float,
        lthr: float,
        max_activities: Optional[int] = None
    ) -> int:
        """
        Fetch and store streams for a batch of activities.

        A failed fetch is logged and skipped so the rest of the batch still
        goes through.

        Args:
            activity_ids: Activities to ingest, in priority order
            ftp: Athlete FTP for power zones
            lthr: Athlete LTHR for heart-rate zones
            max_activities: Cap per call (defaults to settings.STREAM_INGEST_MAX_ACTIVITIES)

        Returns:
            Number of activities whose streams were stored
        """
        if max_activities is None:
            max_activities = settings.STREAM_INGEST_MAX_ACTIVITIES

        synced = 0
        for activity_id in list(activity_ids)[:max_activities]:
            try:
                streams = self.telemetry.get_activity_streams(activity_id)
            except TelemetryFetchError as e:
                logger.warning(f"Failed to fetch streams for activity {activity_id}: {e.reason}")
                continue

            power_zones = compute_time_in_power_zones(streams.watts, ftp) if streams.has_power else None
            hr_zones = (
                compute_time_in_hr_zones(streams.heartrate, lthr)
                if power_zones is None and streams.has_heartrate
                else None
            )

            self.activity_store.store_activity_streams(activity_id, streams, power_zones, hr_zones)
            synced += 1

        logger.info(f"Ingested streams for {synced} of {min(len(activity_ids), max_activities)} activities")
        return synced
