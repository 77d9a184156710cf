"""Database and domain models for Ride Coach."""

from models.database.base import Base
from models.database.athlete import Athlete
from models.database.activity import Activity
from models.database.activity_stream import ActivityStream

__all__ = [
    "Base",
    "Athlete",
    "Activity",
    "ActivityStream",
]
