"""Tournament facade: the operations a CLI or API layer calls.

Wires the id allocator, registries, result processor and seeding engine
around one explicitly passed connection.  Nothing here is global; a
process builds one ``Database`` at startup and opens a ``Tournament``
on it.
"""

import logging
import sqlite3

from tourney.config import TournamentConfig
from tourney.db import Database
from tourney.identity import IdAllocator
from tourney.ledger import MatchLedger
from tourney.models import Match, Team
from tourney.registry import TeamRegistry
from tourney.results import MatchResult, ResultProcessor
from tourney.seeding import SeedingEngine

logger = logging.getLogger(__name__)


class Tournament:
    """Team registration, match scheduling, results and seeding."""

    def __init__(self, conn: sqlite3.Connection, *, atomic_results: bool = True) -> None:
        self.allocator = IdAllocator(conn)
        self.registry = TeamRegistry(conn, self.allocator)
        self.ledger = MatchLedger(conn, self.allocator, self.registry)
        self.results = ResultProcessor(self.ledger, self.registry, atomic=atomic_results)
        self.seeding = SeedingEngine(self.registry)

    @classmethod
    def open(cls, db: Database, config: TournamentConfig | None = None) -> "Tournament":
        """Build a tournament on an initialized database.

        Any result left partially applied by an earlier run is completed
        before the tournament is returned.
        """
        config = config or TournamentConfig()
        tournament = cls(db.conn, atomic_results=config.atomic_results)
        repaired = tournament.reconcile()
        if repaired:
            logger.warning(
                "Completed %d partially applied result(s) on startup: %s",
                len(repaired), repaired,
            )
        return tournament

    def register_team(self, player_one: str, player_two: str) -> Team:
        return self.registry.register(player_one, player_two)

    def schedule_match(self, team_one_id: int, team_two_id: int) -> Match:
        return self.ledger.schedule(team_one_id, team_two_id)

    def record_result(
        self, match_id: int, winner_id: int, points_won: int, points_lost: int
    ) -> MatchResult:
        return self.results.record(match_id, winner_id, points_won, points_lost)

    def recompute_seeding(self) -> list[Team]:
        return self.seeding.recompute()

    def reconcile(self) -> list[int]:
        return self.results.reconcile()

    def teams(self) -> list[Team]:
        return self.registry.list_all()

    def matches(self) -> list[Match]:
        return self.ledger.list_all()
