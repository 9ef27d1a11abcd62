"""Pydantic v2 models for match records.

Match mirrors a row of the ``matches`` table.  MatchSchedule and
MatchOutcome validate caller input for scheduling a match and for
reporting its result.
"""

import warnings
from datetime import datetime

from pydantic import BaseModel, Field, model_validator
from typing_extensions import Self

# Upper bound on the points either side can report for one match.
MAX_MATCH_POINTS = 10_000


class Match(BaseModel):
    """A contest between two teams, open until a result is recorded."""

    match_id: int = Field(gt=0)
    team_one_id: int = Field(gt=0)
    team_two_id: int = Field(gt=0)
    winner_id: int | None = None
    points_won: int | None = Field(default=None, ge=0, le=MAX_MATCH_POINTS)
    points_lost: int | None = Field(default=None, ge=0, le=MAX_MATCH_POINTS)
    winner_applied: bool = False
    loser_applied: bool = False
    created_at: datetime
    decided_at: datetime | None = None

    @model_validator(mode="after")
    def check_teams_different(self) -> Self:
        if self.team_one_id == self.team_two_id:
            raise ValueError(
                f"team_one_id and team_two_id are identical ({self.team_one_id})"
            )
        return self

    @model_validator(mode="after")
    def check_winner_participates(self) -> Self:
        if self.winner_id is not None and not self.involves(self.winner_id):
            raise ValueError(
                f"winner {self.winner_id} did not play match {self.match_id}"
            )
        return self

    @property
    def team_ids(self) -> tuple[int, int]:
        return (self.team_one_id, self.team_two_id)

    @property
    def is_decided(self) -> bool:
        return self.winner_id is not None

    @property
    def loser_id(self) -> int | None:
        """The team that is not the winner, or None while the match is open."""
        if self.winner_id is None:
            return None
        if self.winner_id == self.team_one_id:
            return self.team_two_id
        return self.team_one_id

    @property
    def stats_pending(self) -> bool:
        """Decided, but at least one side's team statistics not yet applied."""
        return self.is_decided and not (self.winner_applied and self.loser_applied)

    def involves(self, team_id: int) -> bool:
        return team_id in self.team_ids


class MatchSchedule(BaseModel):
    """Validation model for scheduling a match between two teams."""

    team_one_id: int = Field(gt=0)
    team_two_id: int = Field(gt=0)

    @model_validator(mode="after")
    def check_teams_different(self) -> Self:
        """A team cannot be scheduled against itself."""
        if self.team_one_id == self.team_two_id:
            raise ValueError(
                f"a match needs two different teams (got {self.team_one_id} twice)"
            )
        return self


class MatchOutcome(BaseModel):
    """Validation model for a reported match result.

    Whether ``winner_id`` actually played the match is checked against
    the stored match, not here.
    """

    match_id: int = Field(gt=0)
    winner_id: int = Field(gt=0)
    points_won: int = Field(ge=0, le=MAX_MATCH_POINTS)
    points_lost: int = Field(ge=0, le=MAX_MATCH_POINTS)

    @model_validator(mode="after")
    def check_score_plausible(self) -> Self:
        """Soft check: a winner usually scores more than it concedes."""
        if self.points_lost > self.points_won:
            warnings.warn(
                f"Winner {self.winner_id} conceded more points "
                f"({self.points_lost}) than it scored ({self.points_won}) "
                f"in match {self.match_id}",
                stacklevel=2,
            )
        return self
