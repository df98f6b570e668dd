"""SQLAlchemy repository implementations."""
