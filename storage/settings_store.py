"""Parent-controlled settings: PIN, child profile, interests, emergency unlocks.

Every method is individually fallible. A database error is logged and turned
into a neutral value (empty profile, no interests, ``False``, ``0``) so the
conversation gate never crashes on settings.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from config.settings import settings

from .migrate import migrate
from .sqlite import get_conn

logger = logging.getLogger(__name__)


class InterestRow(BaseModel):
    id: int
    name: str
    selected: bool = False


class SettingsStore:
    def __init__(self, db_path: Optional[str] = None, *, default_pin: Optional[str] = None) -> None:
        self.db_path = db_path or settings.DB_PATH
        self.default_pin = default_pin or settings.DEFAULT_PIN

    def initialize(self) -> bool:
        try:
            migrate(self.db_path, self.default_pin)
        except sqlite3.Error as exc:
            logger.error("Settings migration failed path=%s: %s", self.db_path, exc)
            return False
        return True

    # PIN

    def verify_pin(self, pin: str) -> bool:
        try:
            with get_conn(self.db_path) as conn:
                row = conn.execute("SELECT pin FROM parent_settings ORDER BY id LIMIT 1").fetchone()
        except sqlite3.Error as exc:
            logger.error("Error verifying PIN: %s", exc)
            return False
        if row is None:
            return pin == self.default_pin
        return row["pin"] == pin

    def update_pin(self, new_pin: str) -> bool:
        try:
            with get_conn(self.db_path) as conn:
                conn.execute(
                    "UPDATE parent_settings SET pin = ?, updated_at = CURRENT_TIMESTAMP",
                    (new_pin,),
                )
        except sqlite3.Error as exc:
            logger.error("Error updating PIN: %s", exc)
            return False
        return True

    # Child profile

    def get_child_profile(self) -> Dict[str, Any]:
        try:
            with get_conn(self.db_path) as conn:
                row = conn.execute("SELECT age, gender FROM child_profile ORDER BY id LIMIT 1").fetchone()
        except sqlite3.Error as exc:
            logger.error("Error getting child profile: %s", exc)
            return {"age": None, "gender": None}
        if row is None:
            return {"age": None, "gender": None}
        return {"age": row["age"], "gender": row["gender"]}

    def update_child_profile(self, age: Optional[int], gender: Optional[str]) -> bool:
        gender = gender or None
        try:
            with get_conn(self.db_path) as conn:
                cur = conn.execute(
                    """UPDATE child_profile
                       SET age = ?, gender = ?, updated_at = CURRENT_TIMESTAMP
                       WHERE id = (SELECT MIN(id) FROM child_profile)""",
                    (age, gender),
                )
                if cur.rowcount == 0:
                    conn.execute("INSERT INTO child_profile (age, gender) VALUES (?, ?)", (age, gender))
        except sqlite3.Error as exc:
            logger.error("Error updating child profile: %s", exc)
            return False
        return True

    # Interests

    def get_all_interests(self) -> List[InterestRow]:
        try:
            with get_conn(self.db_path) as conn:
                rows = conn.execute(
                    """SELECT i.id, i.name, COALESCE(ci.selected, 0) AS selected
                       FROM interests i
                       LEFT JOIN child_interests ci ON i.id = ci.interest_id
                       ORDER BY i.name"""
                ).fetchall()
        except sqlite3.Error as exc:
            logger.error("Error getting interests: %s", exc)
            return []
        return [InterestRow(id=row["id"], name=row["name"], selected=bool(row["selected"])) for row in rows]

    def get_selected_interests(self) -> List[str]:
        try:
            with get_conn(self.db_path) as conn:
                rows = conn.execute(
                    """SELECT i.name
                       FROM interests i
                       JOIN child_interests ci ON i.id = ci.interest_id
                       WHERE ci.selected = 1
                       ORDER BY i.name"""
                ).fetchall()
        except sqlite3.Error as exc:
            logger.error("Error getting selected interests: %s", exc)
            return []
        return [row["name"] for row in rows]

    def update_interest(self, interest_id: int, selected: bool) -> bool:
        try:
            with get_conn(self.db_path) as conn:
                conn.execute(
                    """INSERT INTO child_interests (interest_id, selected) VALUES (?, ?)
                       ON CONFLICT(interest_id) DO UPDATE SET selected = excluded.selected""",
                    (interest_id, 1 if selected else 0),
                )
        except sqlite3.Error as exc:
            logger.error("Error updating interest %s: %s", interest_id, exc)
            return False
        return True

    # Emergency unlocks

    def log_emergency_unlock(self) -> bool:
        try:
            with get_conn(self.db_path) as conn:
                conn.execute("INSERT INTO emergency_unlocks (timestamp) VALUES (CURRENT_TIMESTAMP)")
        except sqlite3.Error as exc:
            logger.error("Error logging emergency unlock: %s", exc)
            return False
        return True

    def get_emergency_unlock_count(self) -> int:
        try:
            with get_conn(self.db_path) as conn:
                row = conn.execute("SELECT COUNT(*) AS count FROM emergency_unlocks").fetchone()
        except sqlite3.Error as exc:
            logger.error("Error getting emergency unlock count: %s", exc)
            return 0
        return int(row["count"]) if row is not None else 0


__all__ = ["InterestRow", "SettingsStore"]
