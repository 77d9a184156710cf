"""Activity stream model for storing time-series samples and time in zones."""

from sqlalchemy import Column, Integer, String, JSON, ForeignKey
from sqlalchemy.orm import relationship
from models.database.base import Base, TimestampMixin


class ActivityStream(Base, TimestampMixin):
    """
    Sample streams and derived zone summaries for one activity.

    Streams are stored as JSON arrays of equal length (one sample per
    second). Zone summaries are JSON objects such as {"z1": 600, "z2": 0, ...};
    power zones have seven buckets and heart-rate zones five.
    """

    __tablename__ = "activity_streams"

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    # One stream row per activity
    activity_id = Column(String(64), ForeignKey("activities.id"), nullable=False, unique=True)

    # Stream data (JSON arrays)
    time_stream = Column(JSON, nullable=True)
    watts_stream = Column(JSON, nullable=True)
    heartrate_stream = Column(JSON, nullable=True)
    distance_stream = Column(JSON, nullable=True)

    # Time in zones computed at ingestion
    time_in_power_zones = Column(JSON, nullable=True)
    time_in_hr_zones = Column(JSON, nullable=True)

    # Relationship
    activity = relationship("Activity", back_populates="streams")

    def __repr__(self) -> str:
        size = len(self.time_stream) if self.time_stream else 0
        return f"<ActivityStream(activity_id={self.activity_id}, size={size})>"
