"""Pydantic v2 models for team records.

Team mirrors a row of the ``teams`` table.  TeamRegistration validates
the two player names supplied when a team is registered.
"""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator
from typing_extensions import Self

# Letters only: no digits, whitespace or punctuation.
PLAYER_NAME_PATTERN = r"^[A-Za-z]+$"


class Team(BaseModel):
    """A registered pair of players and their accumulated statistics."""

    team_id: int = Field(gt=0)
    player_one: str = Field(min_length=1)
    player_two: str = Field(min_length=1)
    wins: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)
    points_won: int = Field(default=0, ge=0)
    points_lost: int = Field(default=0, ge=0)
    seed_number: int | None = Field(default=None, ge=1)
    created_at: datetime
    updated_at: datetime

    @property
    def matches_played(self) -> int:
        return self.wins + self.losses

    @property
    def has_won(self) -> bool:
        """True once the team has at least one recorded win."""
        return self.wins > 0


class TeamRegistration(BaseModel):
    """Validation model for a new team's player names."""

    player_one: str = Field(min_length=1, pattern=PLAYER_NAME_PATTERN)
    player_two: str = Field(min_length=1, pattern=PLAYER_NAME_PATTERN)

    @model_validator(mode="after")
    def check_players_distinct(self) -> Self:
        """The two players must be different people, ignoring case."""
        if self.player_one.casefold() == self.player_two.casefold():
            raise ValueError(
                f"player names must be distinct (got {self.player_one!r} "
                f"and {self.player_two!r})"
            )
        return self
