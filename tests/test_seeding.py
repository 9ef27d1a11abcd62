"""Tests for the Seeding Engine.

The pure ``rank`` function is tested on in-memory teams; the engine is
tested against a real database for persistence and idempotence.
"""

from datetime import datetime, timezone

import pytest

from tourney.models import Team
from tourney.seeding import (
    SeedingEngine,
    by_fewest_points_lost,
    by_most_points_won,
    rank,
)

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_team(team_id, **overrides) -> Team:
    data = {
        "team_id": team_id,
        "player_one": "Ann",
        "player_two": "Bob",
        "created_at": NOW,
        "updated_at": NOW,
    }
    data.update(overrides)
    return Team(**data)


def seeded_ids(teams):
    return [t.team_id for t in teams]


class TestSortKeys:
    def test_fewest_points_lost_first(self):
        teams = [make_team(1, points_lost=9), make_team(2, points_lost=3)]
        assert seeded_ids(sorted(teams, key=by_fewest_points_lost)) == [2, 1]

    def test_most_points_won_first(self):
        teams = [make_team(1, points_won=3), make_team(2, points_won=9)]
        assert seeded_ids(sorted(teams, key=by_most_points_won)) == [2, 1]


class TestRank:
    def test_winners_then_losers(self):
        a = make_team(1, wins=1, points_lost=2)
        b = make_team(2, wins=1, points_lost=5)
        c = make_team(3, wins=0, points_won=9)
        ranked = rank([c, b, a])
        assert seeded_ids(ranked) == [1, 2, 3]
        assert [t.seed_number for t in ranked] == [1, 2, 3]

    def test_loser_never_outranks_a_winner(self):
        winner = make_team(1, wins=1, points_lost=40)
        loser = make_team(2, wins=0, losses=1, points_won=40)
        assert seeded_ids(rank([loser, winner])) == [1, 2]

    def test_all_losers_by_points_won(self):
        teams = [
            make_team(1, points_won=4),
            make_team(2, points_won=10),
            make_team(3, points_won=7),
        ]
        assert seeded_ids(rank(teams)) == [2, 3, 1]

    def test_ties_keep_listing_order(self):
        teams = [
            make_team(5, points_won=6),
            make_team(2, points_won=8),
            make_team(9, points_won=6),
            make_team(1, points_won=6),
        ]
        assert seeded_ids(rank(teams)) == [2, 5, 9, 1]

    def test_winner_ties_keep_listing_order(self):
        teams = [
            make_team(3, wins=2, points_lost=5),
            make_team(1, wins=1, points_lost=5),
        ]
        assert seeded_ids(rank(teams)) == [3, 1]

    def test_win_count_does_not_order_winners(self):
        """Within the winners group only points conceded matter."""
        teams = [make_team(1, wins=3, points_lost=8), make_team(2, wins=1, points_lost=2)]
        assert seeded_ids(rank(teams)) == [2, 1]

    def test_empty(self):
        assert rank([]) == []

    def test_does_not_mutate_input(self):
        team = make_team(1)
        rank([team])
        assert team.seed_number is None

    def test_accepts_any_iterable(self):
        ranked = rank(make_team(i, points_won=i) for i in (1, 2))
        assert seeded_ids(ranked) == [2, 1]


class TestSeedingEngine:
    @pytest.fixture
    def engine(self, tournament):
        return SeedingEngine(tournament.registry)

    def test_no_teams_is_a_no_op(self, engine):
        assert engine.recompute() == []

    def test_persists_seeds(self, tournament, engine):
        a = tournament.register_team("Ann", "Bob").team_id
        b = tournament.register_team("Cy", "Di").team_id
        c = tournament.register_team("Ed", "Flo").team_id
        tournament.registry.update_stats(a, delta_wins=1, delta_points_lost=2)
        tournament.registry.update_stats(b, delta_wins=1, delta_points_lost=5)
        tournament.registry.update_stats(c, delta_losses=1, delta_points_won=9)

        seeded = engine.recompute()

        assert seeded_ids(seeded) == [a, b, c]
        stored = {t.team_id: t.seed_number for t in tournament.teams()}
        assert stored == {a: 1, b: 2, c: 3}

    def test_idempotent(self, tournament, engine):
        for p, q in [("Ann", "Bob"), ("Cy", "Di"), ("Ed", "Flo"), ("Gus", "Hal")]:
            tournament.register_team(p, q)
        m1 = tournament.schedule_match(1, 2)
        m2 = tournament.schedule_match(3, 4)
        tournament.record_result(m1.match_id, 2, 11, 6)
        tournament.record_result(m2.match_id, 3, 11, 3)

        first = engine.recompute()
        second = engine.recompute()

        assert [(t.team_id, t.seed_number) for t in first] == [
            (t.team_id, t.seed_number) for t in second
        ]
        assert seeded_ids(first) == [3, 2, 1, 4]

    def test_reseeding_after_new_results(self, tournament, engine):
        tournament.register_team("Ann", "Bob")
        tournament.register_team("Cy", "Di")
        assert seeded_ids(engine.recompute()) == [1, 2]

        match = tournament.schedule_match(1, 2)
        tournament.record_result(match.match_id, 2, 11, 9)
        assert seeded_ids(engine.recompute()) == [2, 1]
        assert tournament.registry.get(2).seed_number == 1
