"""Match Ledger: data access layer for the ``matches`` table.

A match is created open and decided exactly once.  The decide
statement is conditional on ``winner_id IS NULL``, so of two racing
recorders only one can succeed; the other gets ``AlreadyDecided``.

``decide_match`` and ``mark_applied`` are statement-level helpers that
do not commit; the result processor composes them with team updates
inside its own transactions.
"""

import logging
import sqlite3

from tourney.exceptions import AlreadyDecided, InvalidInput, NotFound, UnknownTeam
from tourney.identity import IdAllocator
from tourney.models import Match, MatchOutcome, MatchSchedule
from tourney.registry import TeamRegistry, utc_now
from tourney.validation import validate_input

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SQL constants
# ---------------------------------------------------------------------------

INSERT_MATCH = """
    INSERT INTO matches (match_id, team_one_id, team_two_id, created_at)
    VALUES (:match_id, :team_one_id, :team_two_id, :created_at)
"""

DECIDE_MATCH = """
    UPDATE matches SET
        winner_id   = :winner_id,
        points_won  = :points_won,
        points_lost = :points_lost,
        decided_at  = :decided_at
    WHERE match_id = :match_id
      AND winner_id IS NULL
      AND :winner_id IN (team_one_id, team_two_id)
"""

# One statement per side; the flag guard makes each side apply at most once.
MARK_APPLIED = {
    "winner": "UPDATE matches SET winner_applied = 1 "
              "WHERE match_id = ? AND winner_id IS NOT NULL AND winner_applied = 0",
    "loser": "UPDATE matches SET loser_applied = 1 "
             "WHERE match_id = ? AND winner_id IS NOT NULL AND loser_applied = 0",
}

SELECT_PENDING = """
    SELECT * FROM matches
    WHERE winner_id IS NOT NULL AND (winner_applied = 0 OR loser_applied = 0)
    ORDER BY match_id
"""


def fetch_match(conn: sqlite3.Connection, match_id: int) -> Match:
    row = conn.execute(
        "SELECT * FROM matches WHERE match_id = ?", (match_id,)
    ).fetchone()
    if row is None:
        raise NotFound(f"Match {match_id} does not exist", match_id=match_id)
    return Match.model_validate(dict(row))


def decide_match(
    conn: sqlite3.Connection, outcome: MatchOutcome, decided_at: str
) -> Match:
    """Record *outcome* on its match without committing.

    Raises:
        NotFound: The match does not exist.
        AlreadyDecided: The match already has a result.
        InvalidInput: The winner did not play in the match.
    """
    match = fetch_match(conn, outcome.match_id)
    if match.is_decided:
        raise AlreadyDecided(
            f"Match {match.match_id} was already decided "
            f"(winner: team {match.winner_id})",
            match_id=match.match_id,
        )
    if not match.involves(outcome.winner_id):
        raise InvalidInput(
            f"Team {outcome.winner_id} did not play match {match.match_id} "
            f"(teams {match.team_one_id} and {match.team_two_id})",
            team_id=outcome.winner_id,
            match_id=match.match_id,
        )

    cursor = conn.execute(
        DECIDE_MATCH,
        {
            "match_id": outcome.match_id,
            "winner_id": outcome.winner_id,
            "points_won": outcome.points_won,
            "points_lost": outcome.points_lost,
            "decided_at": decided_at,
        },
    )
    if cursor.rowcount != 1:
        # Decided by another writer between the read and the update.
        raise AlreadyDecided(
            f"Match {match.match_id} was already decided", match_id=match.match_id
        )
    return fetch_match(conn, outcome.match_id)


def mark_applied(conn: sqlite3.Connection, match_id: int, side: str) -> bool:
    """Set the intent flag for *side* without committing.

    Returns:
        True if the flag was newly set, False if it was already set.
    """
    cursor = conn.execute(MARK_APPLIED[side], (match_id,))
    return cursor.rowcount == 1


# ---------------------------------------------------------------------------
# Repository class
# ---------------------------------------------------------------------------

class MatchLedger:
    """Holds every Match record.

    Write methods use ``with self.conn:`` for automatic commit on
    success / rollback on exception.  Storage exceptions propagate.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        allocator: IdAllocator,
        registry: TeamRegistry,
    ) -> None:
        self.conn = conn
        self.allocator = allocator
        self.registry = registry

    def schedule(self, team_one_id: int, team_two_id: int) -> Match:
        """Create an open match between two registered teams.

        Raises:
            InvalidInput: The two ids are equal or not positive.
            UnknownTeam: Either team is not registered.
        """
        request = validate_input(
            MatchSchedule,
            {"team_one_id": team_one_id, "team_two_id": team_two_id},
        )
        missing = self.registry.missing([request.team_one_id, request.team_two_id])
        if missing:
            raise UnknownTeam(
                "Cannot schedule a match for unregistered team(s): "
                + ", ".join(str(tid) for tid in missing),
                team_id=missing[0],
            )

        match_id = self.allocator.next_id("match")
        with self.conn:
            self.conn.execute(
                INSERT_MATCH,
                {
                    "match_id": match_id,
                    "team_one_id": request.team_one_id,
                    "team_two_id": request.team_two_id,
                    "created_at": utc_now(),
                },
            )
        logger.info(
            "Scheduled match %d: team %d vs team %d",
            match_id, request.team_one_id, request.team_two_id,
        )
        return self.get(match_id)

    def list_all(self) -> list[Match]:
        """Return every match in creation order."""
        rows = self.conn.execute("SELECT * FROM matches ORDER BY match_id").fetchall()
        return [Match.model_validate(dict(r)) for r in rows]

    def get(self, match_id: int) -> Match:
        return fetch_match(self.conn, match_id)

    def list_pending(self) -> list[Match]:
        """Return decided matches whose team statistics are not fully applied."""
        rows = self.conn.execute(SELECT_PENDING).fetchall()
        return [Match.model_validate(dict(r)) for r in rows]

    def record_result(
        self, match_id: int, winner_id: int, points_won: int, points_lost: int
    ) -> Match:
        """Decide a match.  Team statistics are NOT touched here.

        Raises:
            NotFound: The match does not exist.
            InvalidInput: The winner did not play, or a score is negative or
                above MAX_MATCH_POINTS.
            AlreadyDecided: The match already has a result.
        """
        outcome = validate_input(
            MatchOutcome,
            {
                "match_id": match_id,
                "winner_id": winner_id,
                "points_won": points_won,
                "points_lost": points_lost,
            },
            match_id=match_id,
        )
        with self.conn:
            match = decide_match(self.conn, outcome, utc_now())
        logger.info(
            "Match %d decided: team %d beat team %d (%d-%d)",
            match.match_id, match.winner_id, match.loser_id,
            match.points_won, match.points_lost,
        )
        return match
