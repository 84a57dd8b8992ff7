"""Cave and install location registry for cavectl.

Every method opens and closes its own connection, so no transaction ever
outlives a single lookup or write.
"""

import json
import sqlite3
from pathlib import Path
from typing import List, Optional, Dict, Any
import logging

from .cave import Cave, InstallLocation
from .config import Config


logger = logging.getLogger(__name__)


class Registry:
    """Manage caves, install locations and download keys with SQLite backend"""

    def __init__(self, config: Config):
        self.config = config
        self.db_path = config.database_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _init_database(self):
        """Initialize database schema"""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS install_locations (
                    id TEXT PRIMARY KEY,
                    path TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS caves (
                    id TEXT PRIMARY KEY,
                    install_location_id TEXT,
                    install_folder_name TEXT NOT NULL,
                    game_id INTEGER,
                    data TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS download_keys (
                    game_id INTEGER PRIMARY KEY,
                    key_id INTEGER NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_caves_location
                ON caves(install_location_id)
            """)

            conn.commit()

    # =========================================================================
    # Install locations
    # =========================================================================

    def add_install_location(self, location: InstallLocation) -> None:
        """Add or update an install location"""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                INSERT OR REPLACE INTO install_locations (id, path)
                VALUES (?, ?)
            """, (location.id, str(location.path)))
            conn.commit()

        logger.info(f"Added/updated install location: {location.id} -> {location.path}")

    def get_install_location(self, location_id: str) -> Optional[InstallLocation]:
        """Get install location by ID"""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT id, path FROM install_locations WHERE id = ?",
                (location_id,)
            ).fetchone()

        if row:
            return InstallLocation(id=row[0], path=Path(row[1]))
        return None

    def list_install_locations(self) -> List[InstallLocation]:
        """List all install locations"""
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(
                "SELECT id, path FROM install_locations ORDER BY created_at"
            ).fetchall()

        return [InstallLocation(id=row[0], path=Path(row[1])) for row in rows]

    def remove_install_location(self, location_id: str) -> bool:
        """Remove an install location. Refuses while caves still live there."""
        if self.list_caves(install_location_id=location_id):
            raise ValueError(f"Install location '{location_id}' still has caves")

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "DELETE FROM install_locations WHERE id = ?",
                (location_id,)
            )
            conn.commit()
            removed = cursor.rowcount > 0

        if removed:
            logger.info(f"Removed install location: {location_id}")
        return removed

    # =========================================================================
    # Caves
    # =========================================================================

    def save_cave(self, cave: Cave) -> None:
        """Add or update a cave"""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                INSERT OR REPLACE INTO caves
                    (id, install_location_id, install_folder_name, game_id, data, updated_at)
                VALUES (?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
            """, (
                cave.id,
                cave.install_location_id,
                cave.install_folder_name,
                cave.game_id,
                json.dumps(cave.to_dict()),
            ))
            conn.commit()

        logger.info(f"Saved cave: {cave.id} ({cave.install_folder_name})")

    def get_cave(self, cave_id: str) -> Optional[Cave]:
        """Get cave by ID"""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT data FROM caves WHERE id = ?",
                (cave_id,)
            ).fetchone()

        if row:
            return Cave.from_dict(json.loads(row[0]))
        return None

    def list_caves(
        self,
        install_location_id: Optional[str] = None,
        game_id: Optional[int] = None,
    ) -> List[Cave]:
        """List caves with optional filters"""
        query = "SELECT data FROM caves"
        clauses = []
        args: List[Any] = []
        if install_location_id is not None:
            clauses.append("install_location_id = ?")
            args.append(install_location_id)
        if game_id is not None:
            clauses.append("game_id = ?")
            args.append(game_id)
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY created_at DESC"

        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(query, args).fetchall()

        return [Cave.from_dict(json.loads(row[0])) for row in rows]

    def remove_cave(self, cave_id: str) -> bool:
        """Remove cave from registry (does not touch files)"""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM caves WHERE id = ?", (cave_id,))
            conn.commit()
            removed = cursor.rowcount > 0

        if removed:
            logger.info(f"Removed cave: {cave_id}")
        return removed

    # =========================================================================
    # Download keys
    # =========================================================================

    def add_download_key(self, game_id: int, key_id: int) -> None:
        """Record a download key granting access to a game"""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                INSERT OR REPLACE INTO download_keys (game_id, key_id)
                VALUES (?, ?)
            """, (game_id, key_id))
            conn.commit()

        logger.info(f"Added download key {key_id} for game {game_id}")

    def get_download_key(self, game_id: int) -> Optional[int]:
        """Get the download key ID for a game, if any"""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT key_id FROM download_keys WHERE game_id = ?",
                (game_id,)
            ).fetchone()
        return row[0] if row else None

    def list_download_keys(self) -> Dict[int, int]:
        """Map of game ID to download key ID"""
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(
                "SELECT game_id, key_id FROM download_keys ORDER BY game_id"
            ).fetchall()
        return {row[0]: row[1] for row in rows}
