"""
preference_service.py — Per-user light/dark theme, persisted in user_settings.
Store failures are logged; callers always get a usable theme back.
"""

import logging
from datetime import datetime, timezone

from services.table_service import Table, TableError

logger = logging.getLogger(__name__)

THEMES = ("light", "dark")


class PreferenceService:
    def __init__(self, table: Table, default_theme: str = "light"):
        if default_theme not in THEMES:
            default_theme = "light"
        self.table = table
        self.default_theme = default_theme
        # user_id → last theme seen, so a store outage doesn't flip the UI back
        self._known: dict[str, str] = {}

    def _row(self, user_id: str) -> dict | None:
        rows = self.table.select(filters={"user_id": user_id})
        return rows[0] if rows else None

    def get_theme(self, user_id: str) -> str:
        try:
            row = self._row(user_id)
        except TableError as e:
            logger.error(f"Error fetching preferences: {e}")
            return self._known.get(user_id, self.default_theme)
        theme = row["theme"] if row and row.get("theme") in THEMES else self.default_theme
        self._known[user_id] = theme
        return theme

    def set_theme(self, user_id: str, theme: str) -> str:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme {theme!r}")
        data = {"theme": theme, "updated_at": datetime.now(timezone.utc).isoformat()}
        try:
            row = self._row(user_id)
            if row:
                self.table.update(row["id"], data)
            else:
                self.table.insert({"user_id": user_id, **data})
        except TableError as e:
            logger.error(f"Error saving preferences: {e}")
            return self._known.get(user_id, self.default_theme)
        self._known[user_id] = theme
        return theme

    def toggle_theme(self, user_id: str) -> str:
        current = self.get_theme(user_id)
        return self.set_theme(user_id, "dark" if current == "light" else "light")
