"""Download queue for prepared install jobs"""

import json
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
import logging

from .config import Config
from .job import InstallQueueResult

logger = logging.getLogger(__name__)


@dataclass
class Download:
    """A queued download"""
    id: str
    position: int
    item: InstallQueueResult
    queued_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def cave_id(self) -> str:
        return self.item.cave_id

    @property
    def is_finished(self) -> bool:
        return self.finished_at is not None


class DownloadQueue:
    """SQLite-backed queue of install jobs waiting to be downloaded"""

    def __init__(self, config: Config):
        self.config = config
        self.db_path = config.database_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _init_database(self):
        """Initialize database schema"""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS downloads (
                    id TEXT PRIMARY KEY,
                    cave_id TEXT,
                    game_id INTEGER,
                    position INTEGER NOT NULL,
                    data TEXT NOT NULL,
                    queued_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    finished_at TIMESTAMP
                )
            """)
            conn.commit()

    def queue(self, item: InstallQueueResult) -> Download:
        """Queue a prepared install job.

        Unfinished downloads for the same cave are discarded first: only the
        latest request for a cave is kept.
        """
        with sqlite3.connect(self.db_path) as conn:
            if item.cave_id:
                cursor = conn.execute(
                    "DELETE FROM downloads WHERE cave_id = ? AND finished_at IS NULL",
                    (item.cave_id,)
                )
                if cursor.rowcount > 0:
                    logger.info(f"Discarded {cursor.rowcount} pending download(s) for cave {item.cave_id}")

            row = conn.execute("SELECT MAX(position) FROM downloads").fetchone()
            position = (row[0] or 0) + 1

            conn.execute("""
                INSERT INTO downloads (id, cave_id, game_id, position, data)
                VALUES (?, ?, ?, ?, ?)
            """, (
                item.id,
                item.cave_id or None,
                item.game.id,
                position,
                json.dumps(item.to_dict()),
            ))
            conn.commit()

        logger.info(f"Queued download {item.id} at position {position}")
        return Download(id=item.id, position=position, item=item, queued_at=datetime.now())

    def list(self, include_finished: bool = False) -> List[Download]:
        """List downloads in queue order"""
        query = "SELECT id, position, data, queued_at, finished_at FROM downloads"
        if not include_finished:
            query += " WHERE finished_at IS NULL"
        query += " ORDER BY position"

        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(query).fetchall()

        return [
            Download(
                id=row[0],
                position=row[1],
                item=InstallQueueResult.from_dict(json.loads(row[2])),
                queued_at=datetime.fromisoformat(row[3]) if row[3] else None,
                finished_at=datetime.fromisoformat(row[4]) if row[4] else None,
            )
            for row in rows
        ]

    def mark_finished(self, download_id: str) -> bool:
        """Mark a download as finished"""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE downloads SET finished_at = ? WHERE id = ?",
                (datetime.now().isoformat(), download_id)
            )
            conn.commit()
            return cursor.rowcount > 0

    def discard(self, download_id: str) -> bool:
        """Remove a download from the queue"""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM downloads WHERE id = ?", (download_id,))
            conn.commit()
            removed = cursor.rowcount > 0

        if removed:
            logger.info(f"Discarded download {download_id}")
        return removed

    def clear_finished(self) -> int:
        """Remove finished downloads, returns how many were removed"""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM downloads WHERE finished_at IS NOT NULL")
            conn.commit()
            return cursor.rowcount
