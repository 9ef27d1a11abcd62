"""Team Registry: data access layer for the ``teams`` table.

Statistic changes are applied as SQL deltas (``wins = wins + ?``), never
as a read-modify-write of a cached row, so concurrent increments on the
same team cannot lose updates.  Each public write runs inside
``with self.conn:`` for automatic commit on success / rollback on
exception.

``increment_team_stats`` is the statement-level form of
``update_stats``: it does not commit, so the result processor can place
it inside a larger transaction.
"""

import logging
import sqlite3
from dataclasses import astuple, dataclass
from datetime import datetime, timezone
from typing import Iterable, Mapping

from tourney.exceptions import InvalidInput, NotFound
from tourney.identity import IdAllocator
from tourney.models import Team, TeamRegistration
from tourney.validation import validate_input

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SQL constants
# ---------------------------------------------------------------------------

INSERT_TEAM = """
    INSERT INTO teams (
        team_id, player_one, player_two, created_at, updated_at
    ) VALUES (
        :team_id, :player_one, :player_two, :created_at, :created_at
    )
"""

INCREMENT_STATS = """
    UPDATE teams SET
        wins        = wins + :wins,
        losses      = losses + :losses,
        points_won  = points_won + :points_won,
        points_lost = points_lost + :points_lost,
        updated_at  = :updated_at
    WHERE team_id = :team_id
"""

# Largest value an SQLite INTEGER column holds.
SQLITE_MAX_INTEGER = 2**63 - 1

SET_SEED = """
    UPDATE teams SET seed_number = :seed_number, updated_at = :updated_at
    WHERE team_id = :team_id
"""


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class StatDelta:
    """Increments to apply to a team's counters.

    Each must be >= 0 and fit in an SQLite INTEGER.
    """

    wins: int = 0
    losses: int = 0
    points_won: int = 0
    points_lost: int = 0

    def __post_init__(self) -> None:
        if any(value < 0 for value in astuple(self)):
            raise InvalidInput(f"Statistic deltas must be non-negative: {self}")
        if any(value > SQLITE_MAX_INTEGER for value in astuple(self)):
            raise InvalidInput(f"Statistic deltas out of range: {self}")


def increment_team_stats(
    conn: sqlite3.Connection, team_id: int, delta: StatDelta, updated_at: str
) -> None:
    """Apply *delta* to one team without committing.

    Raises:
        InvalidInput: A counter would overflow the INTEGER column.
        NotFound: No team has *team_id*.
    """
    try:
        cursor = conn.execute(
            INCREMENT_STATS,
            {
                "team_id": team_id,
                "wins": delta.wins,
                "losses": delta.losses,
                "points_won": delta.points_won,
                "points_lost": delta.points_lost,
                "updated_at": updated_at,
            },
        )
    except sqlite3.IntegrityError as e:
        raise InvalidInput(
            f"Applying {delta} would push team {team_id} out of range: {e}",
            team_id=team_id,
        ) from e
    if cursor.rowcount == 0:
        raise NotFound(f"Team {team_id} does not exist", team_id=team_id)


# ---------------------------------------------------------------------------
# Repository class
# ---------------------------------------------------------------------------

class TeamRegistry:
    """Holds every Team record.

    Receives a raw ``sqlite3.Connection`` (not a Database instance) so
    tests can pass any connection.  Storage exceptions are NOT caught --
    they propagate to callers.
    """

    def __init__(self, conn: sqlite3.Connection, allocator: IdAllocator) -> None:
        self.conn = conn
        self.allocator = allocator

    def register(self, player_one: str, player_two: str) -> Team:
        """Validate the player names and insert a new team with zeroed stats.

        The id is allocated only after validation succeeds.

        Raises:
            InvalidInput: A name is empty, not purely alphabetic, or
                both names are the same (ignoring case).
        """
        names = validate_input(
            TeamRegistration,
            {"player_one": player_one, "player_two": player_two},
        )
        team_id = self.allocator.next_id("team")
        with self.conn:
            self.conn.execute(
                INSERT_TEAM,
                {
                    "team_id": team_id,
                    "player_one": names.player_one,
                    "player_two": names.player_two,
                    "created_at": utc_now(),
                },
            )
        logger.info(
            "Registered team %d (%s & %s)", team_id, names.player_one, names.player_two
        )
        return self.get(team_id)

    def list_all(self) -> list[Team]:
        """Return every team in insertion order."""
        rows = self.conn.execute("SELECT * FROM teams ORDER BY team_id").fetchall()
        return [Team.model_validate(dict(r)) for r in rows]

    def get(self, team_id: int) -> Team:
        row = self.conn.execute(
            "SELECT * FROM teams WHERE team_id = ?", (team_id,)
        ).fetchone()
        if row is None:
            raise NotFound(f"Team {team_id} does not exist", team_id=team_id)
        return Team.model_validate(dict(row))

    def missing(self, team_ids: Iterable[int]) -> list[int]:
        """Return the ids from *team_ids* that are not registered."""
        wanted = list(dict.fromkeys(team_ids))
        if not wanted:
            return []
        placeholders = ", ".join("?" for _ in wanted)
        rows = self.conn.execute(
            f"SELECT team_id FROM teams WHERE team_id IN ({placeholders})", wanted
        ).fetchall()
        found = {r[0] for r in rows}
        return [tid for tid in wanted if tid not in found]

    def update_stats(
        self,
        team_id: int,
        delta_wins: int = 0,
        delta_losses: int = 0,
        delta_points_won: int = 0,
        delta_points_lost: int = 0,
    ) -> Team:
        """Atomically add the given deltas to a team's counters.

        Raises:
            InvalidInput: A delta is negative or a counter would overflow.
            NotFound: No team has *team_id*.
        """
        delta = StatDelta(delta_wins, delta_losses, delta_points_won, delta_points_lost)
        with self.conn:
            increment_team_stats(self.conn, team_id, delta, utc_now())
        logger.debug("Applied %s to team %d", delta, team_id)
        return self.get(team_id)

    def set_seed(self, team_id: int, seed_number: int) -> None:
        """Overwrite a team's seed number."""
        self.set_seeds({team_id: seed_number})

    def set_seeds(self, assignments: Mapping[int, int]) -> None:
        """Overwrite several seeds in one transaction.

        Either every assignment is written or none is.

        Raises:
            InvalidInput: A seed number is below 1.
            NotFound: A team id is not registered.
        """
        bad = {tid: seed for tid, seed in assignments.items() if seed < 1}
        if bad:
            raise InvalidInput(f"Seed numbers must be >= 1: {bad}")
        updated_at = utc_now()
        with self.conn:
            for team_id, seed_number in assignments.items():
                cursor = self.conn.execute(
                    SET_SEED,
                    {
                        "team_id": team_id,
                        "seed_number": seed_number,
                        "updated_at": updated_at,
                    },
                )
                if cursor.rowcount == 0:
                    raise NotFound(f"Team {team_id} does not exist", team_id=team_id)
