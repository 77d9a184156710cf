"""SQLAlchemy models backing the activity store."""
