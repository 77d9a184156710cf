"""Environment-driven settings and the shared database engine."""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

# Values in a local .env file fill in whatever the environment leaves unset
load_dotenv()

ROOT_DIR = Path(__file__).parent.parent
DATA_DIR = ROOT_DIR / "data"


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be an integer, got '{value}'") from None


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Runtime configuration for Ride Coach.

    Thresholds here are only fallbacks for athletes whose profile has no FTP
    or LTHR stored.
    """

    def __init__(self):
        self.APP_NAME: str = os.getenv("APP_NAME", "Ride Coach")
        self.DEBUG: bool = _env_bool("DEBUG", True)
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        self.DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'ride_coach.db'}")

        # Athlete threshold fallbacks
        self.DEFAULT_FTP: int = _env_int("DEFAULT_FTP", 250)  # watts
        self.DEFAULT_LTHR: int = _env_int("DEFAULT_LTHR", 170)  # bpm

        # Analysis window and ingestion batch size
        self.ANALYSIS_DAYS_BACK: int = _env_int("ANALYSIS_DAYS_BACK", 14)
        self.STREAM_INGEST_MAX_ACTIVITIES: int = _env_int("STREAM_INGEST_MAX_ACTIVITIES", 10)

        # Strava telemetry
        self.STRAVA_ACCESS_TOKEN: Optional[str] = os.getenv("STRAVA_ACCESS_TOKEN")
        self.STRAVA_RATE_LIMIT_15MIN: int = _env_int("STRAVA_RATE_LIMIT_15MIN", 100)
        self.STRAVA_RATE_LIMIT_DAILY: int = _env_int("STRAVA_RATE_LIMIT_DAILY", 1000)

    def require(self, key: str) -> str:
        """
        Value of a setting the caller cannot work without.

        Raises:
            ValueError: if neither the settings object nor the environment has it
        """
        value = getattr(self, key, None) or os.getenv(key)
        if not value:
            raise ValueError(f"'{key}' is not configured. Set it in the environment or in .env.")
        return str(value)


settings = Settings()

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_database_engine() -> Engine:
    """Engine for settings.DATABASE_URL, created on first use."""
    global _engine
    if _engine is None:
        connect_args = {}
        if settings.DATABASE_URL.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
            DATA_DIR.mkdir(exist_ok=True)
        _engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
    return _engine


def get_session_maker() -> sessionmaker:
    """Session factory bound to the shared engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_database_engine(), autoflush=False)
    return _session_factory


def get_database_session() -> Session:
    """New session; the caller closes it."""
    return get_session_maker()()


def validate_settings() -> bool:
    """
    Check that configured values are usable.

    Raises:
        ValueError: listing every problem found
    """
    problems = []
    if not settings.DATABASE_URL:
        problems.append("DATABASE_URL is not configured")
    for key in ("DEFAULT_FTP", "DEFAULT_LTHR", "ANALYSIS_DAYS_BACK", "STREAM_INGEST_MAX_ACTIVITIES"):
        if getattr(settings, key) <= 0:
            problems.append(f"{key} must be positive")

    if problems:
        listing = "\n".join(f"  - {problem}" for problem in problems)
        raise ValueError(f"Invalid configuration:\n{listing}")
    return True
