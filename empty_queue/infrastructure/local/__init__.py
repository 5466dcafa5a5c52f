"""SQLite storage (SQLAlchemy async + aiosqlite)."""
