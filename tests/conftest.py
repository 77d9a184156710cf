"""Shared fixtures: fixed reference day, record factories, fake collaborators and an in-memory database."""

from datetime import date, datetime, time, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import Base
from models.training import (
    ActivityInsight,
    RawActivity,
    TrainingAnalysis,
    TrainingPattern,
)
from coaching.activity_stats import summarize_activities

# A Saturday
TODAY = date(2024, 6, 15)


def days_ago(days: int, hour: int = 8) -> datetime:
    return datetime.combine(TODAY - timedelta(days=days), time(hour))


class FakeActivityStore:
    """In-memory activity store that records what it is given."""

    def __init__(self, activities=None, error=None):
        self.activities = list(activities or [])
        self.error = error
        self.requests = []
        self.stored_streams = {}

    def get_recent_activities(self, athlete_id, days, now=None):
        self.requests.append((athlete_id, days, now))
        if self.error is not None:
            raise self.error
        return list(self.activities)

    def store_activities(self, athlete_id, activities):
        self.activities.extend(activities)
        return len(activities)

    def store_activity_streams(self, activity_id, streams, power_zones, hr_zones):
        self.stored_streams[activity_id] = (streams, power_zones, hr_zones)

    def get_activity_stats(self, athlete_id, days, now=None):
        return summarize_activities(self.get_recent_activities(athlete_id, days, now))


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_insight():
    """Factory for insights dated relative to TODAY."""
    counter = {"n": 0}

    def _make(days=0, load=50, intensity="moderate", zones=None, hour=8):
        counter["n"] += 1
        return ActivityInsight(
            activity_id=f"insight-{counter['n']}",
            date=days_ago(days, hour),
            type="Ride",
            duration=60,
            distance=30.0,
            intensity=intensity,
            zones=zones,
            training_load=load,
        )

    return _make


@pytest.fixture
def make_activity():
    """Factory for raw activities dated relative to TODAY."""
    counter = {"n": 0}

    def _make(days=0, moving_time=3600, **fields):
        counter["n"] += 1
        fields.setdefault("id", f"activity-{counter['n']}")
        fields.setdefault("distance", 30000.0)
        return RawActivity(start_date=days_ago(days), moving_time=moving_time, **fields)

    return _make


@pytest.fixture
def make_analysis():
    """Factory for analyses with a chosen fitness state and pattern."""

    def _make(fitness=40, fatigue=40, form=None, recovery_needed=False, **pattern_fields):
        pattern = {
            "recent_load": 20.0,
            "load_trend": "stable",
            "recovery_needed": recovery_needed,
            "consistency_score": 80,
            "zone_focus": "mixed",
            "last_rest_day": 2,
        }
        pattern.update(pattern_fields)
        return TrainingAnalysis(
            activities=[],
            pattern=TrainingPattern(**pattern),
            fitness=fitness,
            fatigue=fatigue,
            form=fitness - fatigue if form is None else form,
            recommendations=[],
        )

    return _make


@pytest.fixture
def fake_store() -> FakeActivityStore:
    return FakeActivityStore()


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()
