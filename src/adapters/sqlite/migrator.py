"""
Forward-only schema migrations for the SQLite backend.

Each ``NNN_name.sql`` file in the migrations directory is applied once, in
filename order, and recorded in ``_migrations``. Anything after a
``-- Down`` marker is a rollback note and never executed.
"""

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"
DOWN_MARKER = "-- Down"


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str | Path = MIGRATIONS_DIR):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute(
            "CREATE TABLE IF NOT EXISTS _migrations ("
            " id INTEGER PRIMARY KEY AUTOINCREMENT,"
            " filename TEXT UNIQUE NOT NULL,"
            " applied_at DATETIME DEFAULT CURRENT_TIMESTAMP)"
        )
        return conn

    def available(self) -> list[str]:
        return sorted(p.name for p in self.migrations_dir.glob("*.sql"))

    def applied(self) -> list[str]:
        conn = self._connect()
        try:
            rows = conn.execute("SELECT filename FROM _migrations ORDER BY filename").fetchall()
        finally:
            conn.close()
        return [row[0] for row in rows]

    def pending(self) -> list[str]:
        done = set(self.applied())
        return [name for name in self.available() if name not in done]

    def run_migrations(self) -> list[str]:
        """Apply every pending migration and return the filenames applied."""
        to_apply = self.pending()
        conn = self._connect()
        try:
            for filename in to_apply:
                logger.info("Applying migration %s to %s", filename, self.db_path)
                self._apply(conn, filename)
        finally:
            conn.close()
        logger.debug("Schema at %s is current", self.db_path)
        return to_apply

    def _up_script(self, filename: str) -> str:
        content = (self.migrations_dir / filename).read_text()
        return content.split(DOWN_MARKER, 1)[0]

    def _apply(self, conn: sqlite3.Connection, filename: str) -> None:
        try:
            conn.executescript(self._up_script(filename))
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (filename,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {filename} failed: {e}") from e
