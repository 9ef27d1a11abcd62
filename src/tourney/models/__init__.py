"""Pydantic v2 models for tournament records and caller input.

Re-exports all model classes for convenient import::

    from tourney.models import Team, Match, TeamRegistration, ...
"""

from .match import Match, MatchOutcome, MatchSchedule
from .team import Team, TeamRegistration

__all__ = [
    "Team",
    "TeamRegistration",
    "Match",
    "MatchSchedule",
    "MatchOutcome",
]
