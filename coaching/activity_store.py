"""SQLAlchemy-backed activity store."""

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from config.settings import get_database_session
from models import Activity, ActivityStream, Athlete
from models.training import ActivityStats, HrZones, PowerZones, RawActivity, SampleStream
from coaching.activity_stats import summarize_activities
from coaching.exceptions import ActivityFetchError
from coaching.logger import get_logger

logger = get_logger(__name__)


def _to_naive_utc(value: datetime) -> datetime:
    """Database timestamps are naive UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class SqlActivityStore:
    """
    Activity store on top of the application database.

    Handles:
    - Reading recent activities with their streams and zone summaries
    - Upserting activity summaries
    - Storing streams and time in zones computed at ingestion
    """

    def __init__(self, session_factory: Callable[[], Session] = get_database_session):
        """
        Initialize activity store.

        Args:
            session_factory: Callable returning a new database session
        """
        self.session_factory = session_factory

    def get_recent_activities(
        self,
        athlete_id: str,
        days: int,
        now: Optional[datetime] = None
    ) -> List[RawActivity]:
        """
        Get activities started after ``now - days`` and no later than ``now``, newest first.

        Raises:
            ActivityFetchError: on database errors
        """
        now = _to_naive_utc(now or datetime.utcnow())
        after_date = now - timedelta(days=days)

        session = self.session_factory()
        try:
            rows = session.query(Activity).options(selectinload(Activity.streams)).filter(
                Activity.athlete_id == athlete_id,
                Activity.start_date > after_date,
                Activity.start_date <= now
            ).order_by(Activity.start_date.desc()).all()

            activities = [self._to_raw_activity(row) for row in rows]
            logger.info(f"Fetched {len(activities)} activities for athlete {athlete_id} since {after_date:%Y-%m-%d}")
            return activities

        except SQLAlchemyError as e:
            logger.error(f"Error fetching recent activities: {e}", exc_info=True)
            raise ActivityFetchError(athlete_id, str(e)) from e
        finally:
            session.close()

    def get_activity_stats(self, athlete_id: str, days: int, now: Optional[datetime] = None) -> ActivityStats:
        """Totals and averages over the last ``days`` days."""
        return summarize_activities(self.get_recent_activities(athlete_id, days, now=now))

    def store_activities(self, athlete_id: str, activities: Sequence[RawActivity]) -> int:
        """
        Insert or update activities for an athlete.

        Returns:
            Number of activities written
        """
        session = self.session_factory()
        try:
            if session.get(Athlete, athlete_id) is None:
                session.add(Athlete(id=athlete_id))

            stored = 0
            for raw in activities:
                activity = session.get(Activity, raw.id)
                if activity is None:
                    activity = Activity(id=raw.id)
                    session.add(activity)

                activity.athlete_id = athlete_id
                activity.name = raw.name
                activity.type = raw.type
                activity.start_date = _to_naive_utc(raw.start_date)
                activity.moving_time = raw.moving_time
                activity.distance = raw.distance
                activity.private_note = raw.private_note
                activity.average_power = raw.average_power
                activity.max_power = raw.max_power
                activity.average_heartrate = raw.average_heartrate
                activity.max_heartrate = raw.max_heartrate
                stored += 1

            session.commit()
            logger.info(f"Stored {stored} activities for athlete {athlete_id}")
            return stored

        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Error storing activities: {e}", exc_info=True)
            raise
        finally:
            session.close()

    def store_activity_streams(
        self,
        activity_id: str,
        streams: SampleStream,
        power_zones: Optional[PowerZones],
        hr_zones: Optional[HrZones]
    ) -> None:
        """Insert or replace the stream row of an activity."""
        session = self.session_factory()
        try:
            row = session.query(ActivityStream).filter_by(activity_id=activity_id).first()
            if row is None:
                row = ActivityStream(activity_id=activity_id)
                session.add(row)

            row.time_stream = streams.time
            row.watts_stream = streams.watts
            row.heartrate_stream = streams.heartrate
            row.distance_stream = streams.distance
            row.time_in_power_zones = power_zones.as_dict() if power_zones else None
            row.time_in_hr_zones = hr_zones.as_dict() if hr_zones else None

            session.commit()
            logger.debug(f"Stored streams for activity {activity_id}")

        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Error storing streams for activity {activity_id}: {e}", exc_info=True)
            raise
        finally:
            session.close()

    def get_athlete_thresholds(self, athlete_id: str) -> tuple:
        """(ftp, lthr) stored for an athlete, None where unset."""
        session = self.session_factory()
        try:
            athlete = session.get(Athlete, athlete_id)
            if athlete is None:
                return None, None
            return athlete.ftp, athlete.lthr
        finally:
            session.close()

    @staticmethod
    def _to_raw_activity(row: Activity) -> RawActivity:
        stream_row = row.streams
        streams = None
        power_zones = None
        hr_zones = None
        if stream_row is not None:
            streams = SampleStream(
                time=stream_row.time_stream,
                watts=stream_row.watts_stream,
                heartrate=stream_row.heartrate_stream,
                distance=stream_row.distance_stream,
            )
            if stream_row.time_in_power_zones:
                power_zones = PowerZones(**stream_row.time_in_power_zones)
            if stream_row.time_in_hr_zones:
                hr_zones = HrZones(**stream_row.time_in_hr_zones)

        return RawActivity(
            id=str(row.id),
            start_date=row.start_date,
            type=row.type or "Ride",
            moving_time=row.moving_time or 0,
            distance=row.distance or 0.0,
            name=row.name,
            private_note=row.private_note,
            average_power=row.average_power,
            max_power=row.max_power,
            average_heartrate=row.average_heartrate,
            max_heartrate=row.max_heartrate,
            power_zones=power_zones,
            hr_zones=hr_zones,
            streams=streams,
        )
