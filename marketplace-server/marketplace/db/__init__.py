"""ORM models and database helpers."""
