"""Custom exception hierarchy for the tournament engine.

Exception tree:
    TournamentError
    +-- InvalidInput        (malformed or semantically invalid caller input)
    |   +-- AlreadyDecided  (result already recorded for the match)
    +-- NotFound            (referenced team or match does not exist)
    |   +-- UnknownTeam     (also an InvalidInput: match names an unregistered team)
    +-- PartialFailure      (match decided, team statistics not fully applied)
"""

from typing import Optional


class TournamentError(Exception):
    """Base exception for all tournament engine errors."""

    def __init__(
        self,
        message: str,
        *,
        team_id: Optional[int] = None,
        match_id: Optional[int] = None,
    ):
        self.team_id = team_id
        self.match_id = match_id
        super().__init__(message)


class InvalidInput(TournamentError):
    """Caller input was rejected before any state changed.

    Recoverable by re-submitting corrected input.
    """

    pass


class AlreadyDecided(InvalidInput):
    """A result was submitted for a match that already has one.

    Results are recorded at most once; the stored result is left as is.
    """

    pass


class NotFound(TournamentError):
    """The referenced team or match id does not exist."""

    pass


class UnknownTeam(InvalidInput, NotFound):
    """A match was requested for a team id that is not registered.

    Both bad input and a missing reference, so callers catching either
    ``InvalidInput`` or ``NotFound`` see it.
    """

    pass


class PartialFailure(TournamentError):
    """The match is decided but one or more team updates failed.

    ``failed_steps`` names the sides (``"winner"``, ``"loser"``) whose
    statistics are still missing.  Run reconciliation to apply them;
    each side is applied at most once.
    """

    def __init__(
        self,
        message: str,
        *,
        match_id: Optional[int] = None,
        failed_steps: Optional[list[str]] = None,
    ):
        self.failed_steps = list(failed_steps or [])
        super().__init__(message, match_id=match_id)
