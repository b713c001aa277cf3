import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


@dataclass(frozen=True)
class MigrationStatus:
    applied: list[str]
    pending: list[str]


class SQLiteMigrator:
    """
    Applies numbered ``NNN_name.sql`` files in order, once each.

    Only the part above a ``-- Down`` marker is executed. Applied filenames
    are recorded in ``_migrations``.
    """

    def __init__(self, db_path: str, migrations_dir: str | Path = MIGRATIONS_DIR):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        # Readers keep a stable snapshot while the enroll writer commits
        conn.execute("PRAGMA journal_mode = WAL;")
        conn.execute(
            "CREATE TABLE IF NOT EXISTS _migrations ("
            "id INTEGER PRIMARY KEY AUTOINCREMENT, "
            "filename TEXT UNIQUE NOT NULL, "
            "applied_at DATETIME DEFAULT CURRENT_TIMESTAMP)"
        )
        return conn

    def available(self) -> list[str]:
        return sorted(p.name for p in self.migrations_dir.glob("*.sql"))

    def status(self) -> MigrationStatus:
        conn = self._connect()
        try:
            rows = conn.execute("SELECT filename FROM _migrations ORDER BY filename").fetchall()
        finally:
            conn.close()
        applied = [r[0] for r in rows]
        done = set(applied)
        return MigrationStatus(
            applied=applied, pending=[f for f in self.available() if f not in done]
        )

    def run_migrations(self) -> list[str]:
        """Apply every pending migration. Returns the filenames applied now."""
        pending = self.status().pending
        if not pending:
            logger.debug("Schema up to date at %s", self.db_path)
            return []

        conn = self._connect()
        try:
            for filename in pending:
                logger.info("Applying migration: %s", filename)
                self._apply(conn, filename)
        finally:
            conn.close()
        logger.info("Applied %d migration(s) to %s", len(pending), self.db_path)
        return pending

    def _up_script(self, filename: str) -> str:
        content = (self.migrations_dir / filename).read_text()
        return content.split("-- Down", 1)[0]

    def _apply(self, conn: sqlite3.Connection, filename: str) -> None:
        try:
            conn.executescript(self._up_script(filename))
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (filename,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {filename} failed: {e}") from e
