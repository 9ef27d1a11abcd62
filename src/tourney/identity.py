"""Durable per-kind id allocation backed by the ``counters`` table.

Each entity kind (``team``, ``match``) has its own sequence.  Ids start
at 1, increase by one per allocation and are never reused, including
across restarts.  An allocated id whose insert later fails is simply
skipped.
"""

import sqlite3

from tourney.config import ENTITY_KINDS
from tourney.exceptions import InvalidInput

NEXT_ID = """
    INSERT INTO counters (kind, seq) VALUES (?, 1)
    ON CONFLICT(kind) DO UPDATE SET seq = seq + 1
"""


class IdAllocator:
    """Issues unique, monotonically increasing integer ids per kind."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def next_id(self, kind: str) -> int:
        """Allocate the next id for *kind*.

        The increment and the read-back share one transaction, so the
        write lock is held until the new value is committed.
        """
        if kind not in ENTITY_KINDS:
            raise InvalidInput(f"Unknown entity kind {kind!r}")
        with self.conn:
            self.conn.execute(NEXT_ID, (kind,))
            row = self.conn.execute(
                "SELECT seq FROM counters WHERE kind = ?", (kind,)
            ).fetchone()
        return row[0]

    def current(self, kind: str) -> int:
        """Return the last id issued for *kind*, or 0 if none yet."""
        row = self.conn.execute(
            "SELECT seq FROM counters WHERE kind = ?", (kind,)
        ).fetchone()
        return row[0] if row is not None else 0
