"""Tournament configuration with sensible defaults."""

from dataclasses import dataclass

ENTITY_KINDS = ("team", "match")


@dataclass
class TournamentConfig:
    """Configuration for a tournament store and its result processing."""

    # Persistent data storage
    data_dir: str = "data"
    db_path: str = "data/tournament.db"

    # Bounded wait (ms) for a locked database on each statement
    busy_timeout_ms: int = 5000

    # Record a result and both team updates in one transaction.
    # When False, the match is decided first and each team update is
    # committed separately; failures surface as PartialFailure and are
    # completed by reconciliation.
    atomic_results: bool = True

    # Log file name under {data_dir}/logs/
    log_file: str = "tourney.log"
