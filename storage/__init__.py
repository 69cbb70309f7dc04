"""SQLite persistence for parent settings."""
