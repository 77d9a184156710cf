"""Athlete model for storing profile and threshold information."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from models.database.base import Base, TimestampMixin


class Athlete(Base, TimestampMixin):
    """Athlete profile model."""

    __tablename__ = "athletes"

    # Primary key (application user id)
    id = Column(String(64), primary_key=True)

    # Profile information
    email = Column(String(255), nullable=True)
    name = Column(String(200), nullable=True)
    strava_athlete_id = Column(String(50), nullable=True, unique=True)

    # Performance thresholds
    ftp = Column(Integer, nullable=True)  # Functional Threshold Power (watts)
    lthr = Column(Integer, nullable=True)  # Lactate Threshold Heart Rate (bpm)

    # Relationships
    activities = relationship("Activity", back_populates="athlete", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Athlete(id={self.id}, name='{self.name}')>"

    @property
    def display_name(self) -> str:
        """Get athlete's display name."""
        return self.name or self.email or f"Athlete {self.id}"
