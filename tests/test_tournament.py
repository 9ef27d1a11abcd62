"""Integration tests for the Tournament facade over a real database."""

import pytest

from tourney.config import TournamentConfig
from tourney.db import Database
from tourney.exceptions import InvalidInput, NotFound
from tourney.tournament import Tournament


class TestFullFlow:
    def test_register_schedule_record_seed(self, tournament):
        ann = tournament.register_team("Ann", "Bob")
        cy = tournament.register_team("Cy", "Di")
        ed = tournament.register_team("Ed", "Flo")

        m1 = tournament.schedule_match(ann.team_id, cy.team_id)
        m2 = tournament.schedule_match(cy.team_id, ed.team_id)
        tournament.record_result(m1.match_id, cy.team_id, 11, 8)
        tournament.record_result(m2.match_id, ed.team_id, 11, 2)

        seeded = tournament.recompute_seeding()

        # ed conceded 2, cy conceded 10 over two games; ann never won
        assert [t.team_id for t in seeded] == [ed.team_id, cy.team_id, ann.team_id]
        assert [t.seed_number for t in tournament.teams()] == [3, 2, 1]
        assert all(m.is_decided for m in tournament.matches())

    def test_schedule_with_self(self, tournament):
        team = tournament.register_team("Ann", "Bob")
        with pytest.raises(InvalidInput):
            tournament.schedule_match(team.team_id, team.team_id)

    def test_schedule_with_unknown_team(self, tournament):
        team = tournament.register_team("Ann", "Bob")
        with pytest.raises(NotFound):
            tournament.schedule_match(team.team_id, 77)

    def test_seeding_with_no_teams(self, tournament):
        assert tournament.recompute_seeding() == []


class TestOpen:
    def test_state_survives_reopen(self, tmp_path):
        db_path = tmp_path / "cup.db"
        with Database(db_path) as db:
            db.apply_migrations()
            t = Tournament.open(db)
            t.register_team("Ann", "Bob")
            t.register_team("Cy", "Di")
            match = t.schedule_match(1, 2)
            t.record_result(match.match_id, 1, 11, 3)

        with Database(db_path) as db:
            db.apply_migrations()
            t = Tournament.open(db)
            assert t.register_team("Ed", "Flo").team_id == 3
            assert t.schedule_match(2, 3).match_id == 2
            assert t.registry.get(1).wins == 1

    def test_config_selects_stepwise_mode(self, db):
        t = Tournament.open(db, TournamentConfig(atomic_results=False))
        assert t.results.atomic is False

    def test_default_is_atomic(self, db):
        assert Tournament.open(db).results.atomic is True
