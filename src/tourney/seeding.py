"""Seeding Engine: recomputes every team's seed from current standings.

Teams with at least one win form the winners group, ordered by fewest
points conceded; teams without a win form the losers group, ordered by
most points scored.  Winners come first.  Sorting is stable, so ties
keep the registry's listing order.

Seeding is a full batch recomputation over whatever state exists when
it runs.  It is idempotent: with no new results, re-running yields the
same seeds.
"""

import logging
from typing import Iterable

from tourney.models import Team
from tourney.registry import TeamRegistry

logger = logging.getLogger(__name__)


def by_fewest_points_lost(team: Team) -> int:
    """Sort key for the winners group."""
    return team.points_lost


def by_most_points_won(team: Team) -> int:
    """Sort key for the losers group."""
    return -team.points_won


def rank(teams: Iterable[Team]) -> list[Team]:
    """Return copies of *teams* in seed order with ``seed_number`` set."""
    teams = list(teams)
    winners = sorted((t for t in teams if t.has_won), key=by_fewest_points_lost)
    losers = sorted((t for t in teams if not t.has_won), key=by_most_points_won)
    return [
        team.model_copy(update={"seed_number": position})
        for position, team in enumerate(winners + losers, start=1)
    ]


class SeedingEngine:
    """Assigns seeds 1..N to all registered teams."""

    def __init__(self, registry: TeamRegistry) -> None:
        self.registry = registry

    def recompute(self) -> list[Team]:
        """Re-rank every team and persist the new seeds.

        Returns:
            All teams in seed order.  Empty if no team is registered.
        """
        teams = self.registry.list_all()
        if not teams:
            logger.info("No teams registered; nothing to seed")
            return []

        seeded = rank(teams)
        self.registry.set_seeds({t.team_id: t.seed_number for t in seeded})

        winners = sum(1 for t in seeded if t.has_won)
        logger.info(
            "Seeded %d teams (%d with wins, %d without)",
            len(seeded), winners, len(seeded) - winners,
        )
        return seeded
