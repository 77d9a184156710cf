"""Create or inspect the Ride Coach database schema, and register athletes.

Examples:
    python scripts/init_db.py
    python scripts/init_db.py --check
    python scripts/init_db.py --athlete 42 --name "Sam" --ftp 265 --lthr 168
"""

import sys
from pathlib import Path
from typing import List, Optional

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from config.settings import settings, get_database_engine, get_database_session
from models import Athlete, Base
from coaching.logger import get_logger

logger = get_logger(__name__)


def missing_tables(engine: Engine) -> List[str]:
    """Tables the models define that the database does not have yet."""
    existing = set(inspect(engine).get_table_names())
    return sorted(set(Base.metadata.tables) - existing)


def init_database(drop_existing: bool = False) -> bool:
    """
    Create every table that does not exist yet.

    Args:
        drop_existing: Drop all tables first, deleting stored activities
    """
    logger.info(f"Initializing schema at {settings.DATABASE_URL}")
    try:
        engine = get_database_engine()
        if drop_existing:
            logger.warning("Dropping athletes, activities and streams")
            Base.metadata.drop_all(engine)

        created = missing_tables(engine)
        Base.metadata.create_all(engine)
        logger.info(f"Created tables: {', '.join(created) if created else 'none, schema already present'}")
        return True

    except SQLAlchemyError as e:
        logger.error(f"Schema creation failed: {e}", exc_info=True)
        return False


def check_database() -> bool:
    """Report whether the database is reachable and has the full schema."""
    try:
        missing = missing_tables(get_database_engine())
    except SQLAlchemyError as e:
        logger.error(f"Cannot reach database: {e}", exc_info=True)
        return False

    if missing:
        logger.warning(f"Missing tables: {', '.join(missing)}. Run scripts/init_db.py to create them.")
        return False

    logger.info(f"Schema complete ({len(Base.metadata.tables)} tables)")
    return True


def upsert_athlete(athlete_id: str, ftp: Optional[int], lthr: Optional[int], name: Optional[str] = None) -> bool:
    """Create an athlete or update the thresholds used for zone calculations."""
    session = get_database_session()
    try:
        athlete = session.get(Athlete, athlete_id)
        if athlete is None:
            athlete = Athlete(id=athlete_id)
            session.add(athlete)

        if ftp is not None:
            athlete.ftp = ftp
        if lthr is not None:
            athlete.lthr = lthr
        if name is not None:
            athlete.name = name

        session.commit()
        logger.info(f"Saved athlete {athlete.display_name} (FTP={athlete.ftp}, LTHR={athlete.lthr})")
        return True

    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to save athlete {athlete_id}: {e}", exc_info=True)
        return False
    finally:
        session.close()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Set up the Ride Coach database")
    parser.add_argument("--check", action="store_true", help="Only report whether the schema is complete")
    parser.add_argument("--drop", action="store_true", help="Drop all tables first (deletes stored data)")
    parser.add_argument("--athlete", help="Create or update this athlete after initializing")
    parser.add_argument("--name", help="Athlete display name")
    parser.add_argument("--ftp", type=int, help="Athlete FTP in watts")
    parser.add_argument("--lthr", type=int, help="Athlete lactate threshold heart rate")
    args = parser.parse_args()

    if args.check:
        sys.exit(0 if check_database() else 1)

    if args.drop and input("Drop all tables and stored activities? (yes/no): ").lower() != "yes":
        print("Aborted.")
        sys.exit(0)

    ok = init_database(drop_existing=args.drop)
    if ok and args.athlete:
        ok = upsert_athlete(args.athlete, args.ftp, args.lthr, args.name)
    sys.exit(0 if ok else 1)
