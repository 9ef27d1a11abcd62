"""Storage bootstrap for a tournament: one SQLite file, one connection.

Every connection is switched to WAL with foreign keys on and a bounded
busy wait, so the registry, the ledger and the id counters can share a
file with other processes.  Schema changes live in ``migrations/`` next
to this module; the number prefix of each file is the schema version it
produces, and the version reached so far is kept in ``user_version``.
"""

import sqlite3
from pathlib import Path

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


class Database:
    """Owns the connection to one tournament database file.

    The CLI calls ``initialize()`` once and passes ``conn`` to
    ``Tournament``; tests tend to use the context-manager form::

        with Database(tmp_path / "cup.db") as db:
            db.apply_migrations()
            tournament = Tournament.open(db)
    """

    def __init__(self, db_path: str | Path, busy_timeout_ms: int = 5000) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.busy_timeout_ms = busy_timeout_ms
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> sqlite3.Connection:
        """Open the file and apply the per-connection settings.

        Rows come back as ``sqlite3.Row``.  A writer that finds the
        file locked waits at most ``busy_timeout_ms`` before failing.
        """
        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode = WAL")
        self._conn.execute("PRAGMA foreign_keys = ON")
        # WAL commits survive a process crash at NORMAL
        self._conn.execute("PRAGMA synchronous = NORMAL")
        self._conn.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout_ms)}")
        return self._conn

    @property
    def conn(self) -> sqlite3.Connection:
        """The open connection; RuntimeError until ``connect()`` has run."""
        if self._conn is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._conn

    def close(self) -> None:
        """Close the connection if one is open."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def get_schema_version(self) -> int:
        """Number of the last migration applied to this file."""
        return self.conn.execute("PRAGMA user_version").fetchone()[0]

    def apply_migrations(self, migrations_dir: Path | None = None) -> int:
        """Bring the schema up to the newest migration.

        Runs each ``NNN_name.sql`` whose NNN is above the stored
        version, in order, recording NNN after each one.  A file whose
        script fails leaves the version at the last one that succeeded.

        Args:
            migrations_dir: Where to look for the ``.sql`` files.  The
                package's own ``migrations/`` when omitted.

        Returns:
            How many files were run (0 when already current).
        """
        migrations_dir = Path(migrations_dir) if migrations_dir else MIGRATIONS_DIR

        current = self.get_schema_version()
        applied = 0

        for migration_file in sorted(migrations_dir.glob("*.sql")):
            # 003_integer_counters.sql -> 3
            version = int(migration_file.name.split("_")[0])
            if version <= current:
                continue

            sql = migration_file.read_text(encoding="utf-8")
            self.conn.executescript(sql)
            self.conn.execute(f"PRAGMA user_version = {version}")
            applied += 1

        return applied

    def initialize(self) -> sqlite3.Connection:
        """``connect()`` followed by ``apply_migrations()``; returns ``conn``."""
        self.connect()
        self.apply_migrations()
        return self.conn
