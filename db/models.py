from dataclasses import dataclass
from datetime import datetime


@dataclass
class SavedSearch:
    id: int | None
    query: str
    category: str | None
    condition: str | None
    note: str
    saved_at: datetime


SCHEMA = """
CREATE TABLE IF NOT EXISTS saved_searches (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    query TEXT NOT NULL,
    category TEXT,
    condition TEXT,
    note TEXT NOT NULL DEFAULT '',
    saved_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_saved_searches_saved_at ON saved_searches(saved_at);
"""
