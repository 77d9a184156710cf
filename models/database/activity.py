"""Activity model for storing activity summaries."""

from sqlalchemy import Column, Integer, String, Float, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from models.database.base import Base, TimestampMixin


class Activity(Base, TimestampMixin):
    """Recorded activity summary."""

    __tablename__ = "activities"

    # Primary key (source platform activity ID)
    id = Column(String(64), primary_key=True)

    # Foreign key to athlete
    athlete_id = Column(String(64), ForeignKey("athletes.id"), nullable=False)

    # Basic activity information
    name = Column(String(255), nullable=True)
    type = Column(String(50), nullable=True)  # Ride, VirtualRide, etc.
    distance = Column(Float, nullable=True)  # meters
    moving_time = Column(Integer, nullable=True)  # seconds
    total_elevation_gain = Column(Float, nullable=True)  # meters

    # Timing information
    start_date = Column(DateTime, nullable=False, index=True)

    # Heart rate metrics
    average_heartrate = Column(Float, nullable=True)
    max_heartrate = Column(Float, nullable=True)

    # Power metrics
    average_power = Column(Float, nullable=True)
    max_power = Column(Float, nullable=True)

    # Free-text notes
    description = Column(Text, nullable=True)
    private_note = Column(Text, nullable=True)

    # Relationships
    athlete = relationship("Athlete", back_populates="activities")
    streams = relationship(
        "ActivityStream",
        back_populates="activity",
        uselist=False,
        cascade="all, delete-orphan"
    )

    # Indexes for common queries
    __table_args__ = (
        Index("idx_athlete_date", "athlete_id", "start_date"),
    )

    def __repr__(self) -> str:
        return f"<Activity(id={self.id}, name='{self.name}', type='{self.type}', date='{self.start_date}')>"

    @property
    def distance_km(self) -> float:
        """Get distance in kilometers."""
        if not self.distance:
            return 0.0
        return self.distance / 1000.0

    @property
    def has_power(self) -> bool:
        return bool(self.average_power)

    @property
    def has_heartrate(self) -> bool:
        return bool(self.average_heartrate)
