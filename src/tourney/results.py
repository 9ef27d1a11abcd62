"""Result Processor: applies a reported outcome to the ledger and both teams.

Recording a result is four steps: decide the match, identify the
loser, credit the winner, credit the loser.  Each team step sets the
match's intent flag for that side and applies the team's deltas in the
same transaction, so a step runs at most once no matter how often it is
retried.

Two modes:

* **atomic** (default) -- all steps share one transaction.  A failure
  leaves nothing written.
* **stepwise** -- the match is decided and committed first, then each
  team step commits separately.  Both team steps are attempted even if
  one fails; any failure is reported as ``PartialFailure`` and the
  missing steps are completed later by ``reconcile()``.

Scoring: the reported ``points_won`` / ``points_lost`` are credited to
both teams alike, alongside the winner's win and the loser's loss.
"""

import logging
import sqlite3
from dataclasses import dataclass

from tourney.exceptions import PartialFailure, TournamentError
from tourney.ledger import MatchLedger, decide_match, mark_applied
from tourney.models import Match, MatchOutcome, Team
from tourney.registry import StatDelta, TeamRegistry, increment_team_stats, utc_now
from tourney.validation import validate_input

logger = logging.getLogger(__name__)

SIDES = ("winner", "loser")


@dataclass
class MatchResult:
    """State of the match and both teams after a result was applied."""

    match: Match
    winner: Team
    loser: Team


def side_delta(match: Match, side: str) -> StatDelta:
    """Return the counter increments owed to *side* of a decided match."""
    return StatDelta(
        wins=1 if side == "winner" else 0,
        losses=1 if side == "loser" else 0,
        points_won=match.points_won or 0,
        points_lost=match.points_lost or 0,
    )


def side_team_id(match: Match, side: str) -> int:
    return match.winner_id if side == "winner" else match.loser_id


class ResultProcessor:
    """Keeps the Match Ledger and Team Registry consistent for each result."""

    def __init__(
        self,
        ledger: MatchLedger,
        registry: TeamRegistry,
        atomic: bool = True,
    ) -> None:
        if ledger.conn is not registry.conn:
            raise ValueError("ledger and registry must share one connection")
        self.ledger = ledger
        self.registry = registry
        self.atomic = atomic

    @property
    def conn(self) -> sqlite3.Connection:
        return self.ledger.conn

    def record(
        self, match_id: int, winner_id: int, points_won: int, points_lost: int
    ) -> MatchResult:
        """Record a match result and update both teams.

        Raises:
            NotFound: The match does not exist.
            InvalidInput: The winner did not play, or a score is negative or
                above MAX_MATCH_POINTS.
            AlreadyDecided: The match already has a result.
            PartialFailure: (stepwise mode only) the match was decided but
                at least one team update failed.
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

        if self.atomic:
            match = self._record_atomic(outcome)
        else:
            match = self._record_stepwise(outcome)

        logger.info(
            "Result recorded for match %d: team %d beat team %d (%d-%d)",
            match.match_id, match.winner_id, match.loser_id,
            match.points_won, match.points_lost,
        )
        return MatchResult(
            match=match,
            winner=self.registry.get(match.winner_id),
            loser=self.registry.get(match.loser_id),
        )

    def reconcile(self) -> list[int]:
        """Apply every missing team step of partially applied results.

        Safe to run repeatedly; steps already applied are skipped.

        Returns:
            Ids of the matches that were repaired.
        """
        repaired = []
        for match in self.ledger.list_pending():
            updated_at = utc_now()
            for side in SIDES:
                with self.conn:
                    applied = self._apply_side(match, side, updated_at)
                if applied:
                    logger.warning(
                        "Reconciled match %d: applied %s statistics to team %d",
                        match.match_id, side, side_team_id(match, side),
                    )
            repaired.append(match.match_id)
        return repaired

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _record_atomic(self, outcome: MatchOutcome) -> Match:
        updated_at = utc_now()
        with self.conn:
            match = decide_match(self.conn, outcome, updated_at)
            for side in SIDES:
                self._apply_side(match, side, updated_at)
        return self.ledger.get(match.match_id)

    def _record_stepwise(self, outcome: MatchOutcome) -> Match:
        updated_at = utc_now()
        with self.conn:
            match = decide_match(self.conn, outcome, updated_at)

        failures: dict[str, Exception] = {}
        for side in SIDES:
            try:
                with self.conn:
                    self._apply_side(match, side, updated_at)
            except (TournamentError, sqlite3.Error) as e:
                logger.error(
                    "Match %d: failed to apply %s statistics to team %d: %s",
                    match.match_id, side, side_team_id(match, side), e,
                )
                failures[side] = e

        if failures:
            raise PartialFailure(
                f"Match {match.match_id} is decided but the "
                f"{' and '.join(failures)} statistics were not applied; "
                "run reconciliation to complete it",
                match_id=match.match_id,
                failed_steps=list(failures),
            ) from next(iter(failures.values()))

        return self.ledger.get(match.match_id)

    def _apply_side(self, match: Match, side: str, updated_at: str) -> bool:
        """Flag *side* as applied and credit its team, without committing.

        Returns False (and changes nothing) if the side was already applied.
        """
        if not mark_applied(self.conn, match.match_id, side):
            return False
        increment_team_stats(
            self.conn, side_team_id(match, side), side_delta(match, side), updated_at
        )
        return True
