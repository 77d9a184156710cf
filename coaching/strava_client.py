"""Strava as a telemetry source: activity streams behind a request budget and retries."""

import time
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from stravalib.client import Client
from stravalib.exc import RateLimitExceeded

from config.settings import settings
from models.training import SampleStream
from coaching.exceptions import TelemetryFetchError
from coaching.logger import get_logger

logger = get_logger(__name__)

STREAM_TYPES = ["time", "watts", "heartrate", "distance"]

# Seconds to wait before each retry
RATE_LIMIT_BACKOFF = (60, 120)
ERROR_BACKOFF = (5, 10)


class RequestWindow:
    """Counts requests inside a fixed window that restarts once it has elapsed."""

    def __init__(self, length: timedelta, limit: int):
        self.length = length
        self.limit = limit
        self.used = 0
        self.started = datetime.utcnow()

    def roll(self, now: datetime) -> None:
        if now - self.started > self.length:
            self.used = 0
            self.started = now

    @property
    def exhausted(self) -> bool:
        return self.used >= self.limit

    def seconds_left(self, now: datetime) -> int:
        return max(int((self.started + self.length - now).total_seconds()), 0)


class StravaClient:
    """
    Fetches per-second streams for Strava activities.

    Requests are counted against Strava's 15-minute and daily budgets. When the
    short window is used up the client waits for it to reset; when the daily
    budget is used up it gives up. Failed requests are retried with backoff.
    """

    def __init__(self, access_token: Optional[str] = None, client: Optional[Client] = None):
        """
        Initialize Strava client.

        Args:
            access_token: OAuth access token of the athlete
            client: Preconfigured stravalib client (optional)
        """
        self.client = client or Client(access_token=access_token)
        self.short_window = RequestWindow(timedelta(minutes=15), settings.STRAVA_RATE_LIMIT_15MIN)
        self.daily_window = RequestWindow(timedelta(days=1), settings.STRAVA_RATE_LIMIT_DAILY)

    def _reserve_request(self):
        now = datetime.utcnow()
        self.short_window.roll(now)
        self.daily_window.roll(now)

        if self.daily_window.exhausted:
            logger.warning("Daily Strava request budget used up")
            raise RateLimitExceeded("Daily rate limit exceeded")

        if self.short_window.exhausted:
            wait_time = self.short_window.seconds_left(now) + 1
            logger.warning(f"15-minute request budget used up, waiting {wait_time}s")
            time.sleep(wait_time)
            self.short_window.roll(now + timedelta(seconds=wait_time))

        self.short_window.used += 1
        self.daily_window.used += 1

    def _call(self, func: Callable, *args, **kwargs):
        """Call the Strava API, retrying rate-limit and transient errors."""
        self._reserve_request()

        attempts = len(ERROR_BACKOFF) + 1
        for attempt in range(attempts):
            try:
                return func(*args, **kwargs)
            except RateLimitExceeded:
                if attempt >= len(RATE_LIMIT_BACKOFF):
                    logger.error("Strava rate limit still exceeded after retries")
                    raise
                wait_time = RATE_LIMIT_BACKOFF[attempt]
                logger.warning(f"Strava rate limit exceeded, retrying in {wait_time}s")
                time.sleep(wait_time)
            except Exception as e:
                if attempt >= len(ERROR_BACKOFF):
                    logger.error(f"Strava request failed after {attempts} attempts: {e}")
                    raise
                wait_time = ERROR_BACKOFF[attempt]
                logger.warning(f"Strava request failed: {e}, retrying in {wait_time}s")
                time.sleep(wait_time)

    def get_activity_streams(
        self,
        activity_id: str,
        types: Optional[Sequence[str]] = None,
        resolution: Optional[str] = None
    ) -> SampleStream:
        """
        Samples recorded during one activity.

        Args:
            activity_id: Strava activity id
            types: Stream types (defaults to time, watts, heartrate, distance)
            resolution: "low", "medium" or "high"; full resolution when omitted

        Returns:
            SampleStream; streams the activity did not record are None

        Raises:
            TelemetryFetchError: if Strava cannot return the streams
        """
        types = list(types or STREAM_TYPES)
        logger.info(f"Fetching {', '.join(types)} streams for activity {activity_id}")

        try:
            streams = self._call(
                self.client.get_activity_streams,
                int(activity_id),
                types=types,
                resolution=resolution
            )
        except Exception as e:
            raise TelemetryFetchError(activity_id, str(e)) from e

        return self._to_sample_stream(streams or {})

    @staticmethod
    def _to_sample_stream(streams: Dict) -> SampleStream:
        def values(stream_type: str) -> Optional[List]:
            stream = streams.get(stream_type)
            if stream is None or stream.data is None:
                return None
            return list(stream.data)

        return SampleStream(
            time=values("time"),
            watts=values("watts"),
            heartrate=values("heartrate"),
            distance=values("distance"),
        )

    @property
    def rate_limit_status(self) -> Dict[str, int]:
        """Requests used and allowed in the current windows."""
        return {
            "15min_used": self.short_window.used,
            "15min_limit": self.short_window.limit,
            "daily_used": self.daily_window.used,
            "daily_limit": self.daily_window.limit,
        }


def create_strava_client(access_token: Optional[str] = None) -> StravaClient:
    """Client for the given token, or for STRAVA_ACCESS_TOKEN from the environment."""
    return StravaClient(access_token=access_token or settings.require("STRAVA_ACCESS_TOKEN"))
