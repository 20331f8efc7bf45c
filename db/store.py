import logging
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from config import settings
from db.models import SCHEMA, SavedSearch

log = logging.getLogger(__name__)


class Store:
    def __init__(self, db_path: Path | str | None = None, max_saved: int | None = None):
        path = db_path or settings.database_path
        self.db_path = Path(path) if isinstance(path, str) else path
        self.max_saved = max_saved or settings.max_saved_searches
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self.db_path)
        self._connection.row_factory = aiosqlite.Row
        await self._connection.executescript(SCHEMA)
        await self._connection.commit()

    async def close(self) -> None:
        if self._connection:
            await self._connection.close()
            self._connection = None

    @property
    def conn(self) -> aiosqlite.Connection:
        if not self._connection:
            raise RuntimeError("Database not connected")
        return self._connection

    # === Saved searches ===

    async def find_search(
        self, query: str, category: str | None = None, condition: str | None = None
    ) -> SavedSearch | None:
        cursor = await self.conn.execute(
            """
            SELECT * FROM saved_searches
            WHERE query = ? AND category IS ? AND condition IS ?
            """,
            (query, category, condition),
        )
        row = await cursor.fetchone()
        return self._row_to_search(row) if row else None

    async def save_search(
        self, query: str, category: str | None = None, condition: str | None = None
    ) -> SavedSearch:
        """Save a search, keeping only the most recent ``max_saved`` entries.

        Saving a search that already exists returns the existing entry unchanged.
        """
        existing = await self.find_search(query, category, condition)
        if existing:
            return existing

        now = datetime.now(timezone.utc)
        cursor = await self.conn.execute(
            """
            INSERT INTO saved_searches (query, category, condition, note, saved_at)
            VALUES (?, ?, ?, '', ?)
            """,
            (query, category, condition, now.isoformat()),
        )
        search_id = cursor.lastrowid
        await self._prune()
        await self.conn.commit()
        log.info(f"Saved search #{search_id}: {query!r}")
        return SavedSearch(
            id=search_id,
            query=query,
            category=category,
            condition=condition,
            note="",
            saved_at=now,
        )

    async def _prune(self) -> None:
        cursor = await self.conn.execute(
            """
            DELETE FROM saved_searches WHERE id NOT IN (
                SELECT id FROM saved_searches ORDER BY saved_at DESC, id DESC LIMIT ?
            )
            """,
            (self.max_saved,),
        )
        if cursor.rowcount:
            log.debug(f"Pruned {cursor.rowcount} old saved searches")

    async def get_search(self, search_id: int) -> SavedSearch | None:
        cursor = await self.conn.execute(
            "SELECT * FROM saved_searches WHERE id = ?", (search_id,)
        )
        row = await cursor.fetchone()
        return self._row_to_search(row) if row else None

    async def list_searches(self) -> list[SavedSearch]:
        cursor = await self.conn.execute(
            "SELECT * FROM saved_searches ORDER BY saved_at DESC, id DESC"
        )
        rows = await cursor.fetchall()
        return [self._row_to_search(row) for row in rows]

    async def delete_search(self, search_id: int) -> bool:
        cursor = await self.conn.execute(
            "DELETE FROM saved_searches WHERE id = ?", (search_id,)
        )
        await self.conn.commit()
        return cursor.rowcount > 0

    async def set_note(self, search_id: int, note: str) -> bool:
        cursor = await self.conn.execute(
            "UPDATE saved_searches SET note = ? WHERE id = ?", (note, search_id)
        )
        await self.conn.commit()
        return cursor.rowcount > 0

    def _row_to_search(self, row: aiosqlite.Row) -> SavedSearch:
        return SavedSearch(
            id=row["id"],
            query=row["query"],
            category=row["category"],
            condition=row["condition"],
            note=row["note"] or "",
            saved_at=datetime.fromisoformat(row["saved_at"]),
        )


store = Store()
