"""Tests for the Match Ledger: scheduling, lookups and one-shot results."""

import pytest

from tourney.exceptions import (
    AlreadyDecided,
    InvalidInput,
    NotFound,
    UnknownTeam,
)


@pytest.fixture
def teams(tournament):
    """Three registered teams; returns their ids."""
    return [
        tournament.register_team("Ann", "Bob").team_id,
        tournament.register_team("Cy", "Di").team_id,
        tournament.register_team("Ed", "Flo").team_id,
    ]


@pytest.fixture
def ledger(tournament):
    return tournament.ledger


class TestSchedule:
    def test_creates_open_match(self, ledger, teams):
        match = ledger.schedule(teams[0], teams[1])
        assert match.match_id == 1
        assert match.team_ids == (teams[0], teams[1])
        assert match.winner_id is None
        assert match.points_won is None and match.points_lost is None
        assert match.is_decided is False

    def test_same_team_twice(self, ledger, teams):
        with pytest.raises(InvalidInput):
            ledger.schedule(teams[0], teams[0])

    def test_unknown_team(self, ledger, teams):
        with pytest.raises(UnknownTeam) as exc_info:
            ledger.schedule(teams[0], 99)
        assert exc_info.value.team_id == 99

    def test_unknown_team_is_invalid_input_and_not_found(self, ledger, teams):
        with pytest.raises(InvalidInput):
            ledger.schedule(98, teams[0])
        with pytest.raises(NotFound):
            ledger.schedule(98, teams[0])

    def test_rejected_schedule_consumes_no_id(self, ledger, teams):
        with pytest.raises(InvalidInput):
            ledger.schedule(teams[0], 99)
        assert ledger.schedule(teams[0], teams[1]).match_id == 1

    def test_match_ids_increase(self, ledger, teams):
        first = ledger.schedule(teams[0], teams[1])
        second = ledger.schedule(teams[1], teams[2])
        assert second.match_id > first.match_id


class TestReads:
    def test_get_unknown_match(self, ledger):
        with pytest.raises(NotFound) as exc_info:
            ledger.get(5)
        assert exc_info.value.match_id == 5

    def test_list_all(self, ledger, teams):
        ledger.schedule(teams[0], teams[1])
        ledger.schedule(teams[2], teams[0])
        assert [m.team_ids for m in ledger.list_all()] == [
            (teams[0], teams[1]),
            (teams[2], teams[0]),
        ]


class TestRecordResult:
    def test_sets_result_fields(self, ledger, teams):
        match = ledger.schedule(teams[0], teams[1])
        decided = ledger.record_result(match.match_id, teams[1], 11, 7)
        assert decided.winner_id == teams[1]
        assert decided.loser_id == teams[0]
        assert (decided.points_won, decided.points_lost) == (11, 7)
        assert decided.decided_at is not None

    def test_does_not_touch_teams(self, tournament, ledger, teams):
        """The ledger alone leaves the result pending for the team steps."""
        match = ledger.schedule(teams[0], teams[1])
        ledger.record_result(match.match_id, teams[0], 11, 4)
        assert tournament.registry.get(teams[0]).wins == 0
        assert [m.match_id for m in ledger.list_pending()] == [match.match_id]

    def test_unknown_match(self, ledger):
        with pytest.raises(NotFound):
            ledger.record_result(12, 1, 11, 4)

    def test_winner_not_in_match(self, ledger, teams):
        match = ledger.schedule(teams[0], teams[1])
        with pytest.raises(InvalidInput, match="did not play"):
            ledger.record_result(match.match_id, teams[2], 11, 4)
        assert ledger.get(match.match_id).is_decided is False

    def test_negative_points(self, ledger, teams):
        match = ledger.schedule(teams[0], teams[1])
        with pytest.raises(InvalidInput):
            ledger.record_result(match.match_id, teams[0], 11, -4)

    def test_second_result_rejected(self, ledger, teams):
        match = ledger.schedule(teams[0], teams[1])
        ledger.record_result(match.match_id, teams[0], 11, 4)
        with pytest.raises(AlreadyDecided):
            ledger.record_result(match.match_id, teams[1], 11, 9)
        stored = ledger.get(match.match_id)
        assert stored.winner_id == teams[0]
        assert (stored.points_won, stored.points_lost) == (11, 4)

    def test_already_decided_is_invalid_input(self, ledger, teams):
        match = ledger.schedule(teams[0], teams[1])
        ledger.record_result(match.match_id, teams[0], 11, 4)
        with pytest.raises(InvalidInput):
            ledger.record_result(match.match_id, teams[0], 11, 4)
