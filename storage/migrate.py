"""SQLite schema migrations and default rows for parent settings."""
from __future__ import annotations

import sqlite3
from typing import Iterable, Optional, Sequence

from config.settings import settings

from .sqlite import get_conn

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS parent_settings (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  pin TEXT NOT NULL DEFAULT '0000',
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
""",
    """
CREATE TABLE IF NOT EXISTS child_profile (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  age INTEGER,
  gender TEXT,
  created_at TEXT DEFAULT CURRENT_TIMESTAMP,
  updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
""",
    """
CREATE TABLE IF NOT EXISTS interests (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT UNIQUE NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS child_interests (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  interest_id INTEGER UNIQUE NOT NULL,
  selected INTEGER NOT NULL DEFAULT 0,
  FOREIGN KEY (interest_id) REFERENCES interests (id)
);
""",
    """
CREATE TABLE IF NOT EXISTS emergency_unlocks (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  timestamp TEXT DEFAULT CURRENT_TIMESTAMP
);
""",
]

INTEREST_CATALOGUE: Sequence[str] = (
    # STEM
    "Science", "Math", "Chemistry", "Physics", "Biology", "Astronomy", "Geology",
    "Technology", "Engineering", "Robotics", "Programming", "Electronics",
    # Arts
    "Art", "Drawing", "Painting", "Music", "Singing", "Dancing", "Theater",
    "Photography", "Creative Writing", "Poetry", "Crafts", "Sculpture",
    # Sports
    "Soccer", "Basketball", "Baseball", "Tennis", "Swimming", "Gymnastics",
    "Martial Arts", "Track and Field", "Cycling", "Skateboarding", "Yoga",
    # Nature
    "Animals", "Dogs", "Cats", "Birds", "Marine Life", "Dinosaurs",
    "Nature", "Gardening", "Environment", "Conservation", "Weather",
    # Culture
    "History", "Geography", "Languages", "Archaeology", "Anthropology",
    "World Cultures", "Travel", "Maps", "Flags", "Ancient Civilizations",
    # Stories
    "Reading", "Books", "Fantasy", "Adventure Stories", "Mystery",
    "Fairy Tales", "Comics", "Graphic Novels", "Mythology", "Legends",
    # Games
    "Board Games", "Card Games", "Puzzles", "Brain Teasers", "Chess",
    "Video Games", "Strategy Games", "Word Games", "Logic Puzzles",
    # Food
    "Cooking", "Baking", "Food Culture", "Nutrition", "Farming",
    # Transportation
    "Cars", "Trains", "Airplanes", "Ships", "Space Travel", "Motorcycles",
    # Community
    "Friendship", "Family", "Community Service", "Leadership",
    "Public Speaking", "Debate", "Social Issues",
)


def _seed(conn: sqlite3.Connection, default_pin: str) -> None:
    cur = conn.cursor()
    if cur.execute("SELECT COUNT(*) FROM parent_settings").fetchone()[0] == 0:
        cur.execute("INSERT INTO parent_settings (pin) VALUES (?)", (default_pin,))
    if cur.execute("SELECT COUNT(*) FROM child_profile").fetchone()[0] == 0:
        cur.execute("INSERT INTO child_profile (age, gender) VALUES (NULL, NULL)")
    if cur.execute("SELECT COUNT(*) FROM interests").fetchone()[0] == 0:
        cur.executemany("INSERT INTO interests (name) VALUES (?)", [(name,) for name in INTEREST_CATALOGUE])
        cur.execute("INSERT INTO child_interests (interest_id, selected) SELECT id, 0 FROM interests")


def migrate(db_path: Optional[str] = None, default_pin: Optional[str] = None) -> None:
    """Create tables and seed defaults; safe to run repeatedly."""

    with get_conn(db_path) as conn:
        cur = conn.cursor()
        for stmt in SCHEMA:
            cur.execute(stmt)
        _seed(conn, default_pin or settings.DEFAULT_PIN)


if __name__ == "__main__":
    migrate()
