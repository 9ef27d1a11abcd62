"""CLI entry point for the tournament manager.

Provides ``main()`` as the entry point for the ``tourney`` console
script.  Each invocation opens the database, completes any partially
applied result left by an earlier run, runs one command and exits.

Usage::

    tourney add Ann Bob              # register a team
    tourney list                     # list teams with records and seeds
    tourney match 1 2                # schedule team 1 vs team 2
    tourney show-matches             # list matches
    tourney result 1 1 11 4          # match 1 won by team 1, 11-4
    tourney seed                     # recompute seeds
    tourney reconcile                # complete partially applied results
"""

import argparse
import logging
import sys

from tourney.config import TournamentConfig
from tourney.db import Database
from tourney.exceptions import PartialFailure, TournamentError
from tourney.logging_config import setup_logging
from tourney.models import Match, Team
from tourney.tournament import Tournament

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the tourney CLI."""
    parser = argparse.ArgumentParser(
        prog="tourney",
        description="A simple CLI program to run on-the-fly doubles tournaments",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default="data",
        help="Data directory for the database and logs (default: data)",
    )
    parser.add_argument(
        "--db-path",
        type=str,
        default=None,
        help="Database file (default: <data-dir>/tournament.db)",
    )
    parser.add_argument(
        "--stepwise",
        action="store_true",
        help="Commit the match result and each team update separately "
             "instead of in one transaction",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show INFO log messages on the console",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    add = commands.add_parser("add", aliases=["a"], help="add a team")
    add.add_argument("player_one")
    add.add_argument("player_two")
    add.set_defaults(handler=cmd_add)

    list_teams = commands.add_parser("list", aliases=["l"], help="list all the teams")
    list_teams.set_defaults(handler=cmd_list)

    show = commands.add_parser(
        "show-matches", aliases=["sm"], help="list all the matches"
    )
    show.set_defaults(handler=cmd_show_matches)

    match = commands.add_parser(
        "match", aliases=["m"], help="create a match between two teams"
    )
    match.add_argument("team_one_id", type=int)
    match.add_argument("team_two_id", type=int)
    match.set_defaults(handler=cmd_match)

    result = commands.add_parser(
        "result", aliases=["r"], help="record the result of a match"
    )
    result.add_argument("match_id", type=int)
    result.add_argument("winner_id", type=int)
    result.add_argument("points_won", type=int)
    result.add_argument("points_lost", type=int)
    result.set_defaults(handler=cmd_result)

    seed = commands.add_parser(
        "seed", aliases=["s"], help="seed the teams based on match results"
    )
    seed.set_defaults(handler=cmd_seed)

    reconcile = commands.add_parser(
        "reconcile", help="complete results whose team updates were interrupted"
    )
    reconcile.set_defaults(handler=cmd_reconcile)

    return parser


def config_from_args(args: argparse.Namespace) -> TournamentConfig:
    return TournamentConfig(
        data_dir=args.data_dir,
        db_path=args.db_path or f"{args.data_dir}/tournament.db",
        atomic_results=not args.stepwise,
    )


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_team(team: Team) -> str:
    seed = team.seed_number if team.seed_number is not None else "-"
    return (
        f"Team ID: {team.team_id}, Player One: {team.player_one}, "
        f"Player Two: {team.player_two}, Record: {team.wins}-{team.losses}, "
        f"Points: {team.points_won}/{team.points_lost}, Seed: {seed}"
    )


def format_match(match: Match) -> str:
    if match.is_decided:
        outcome = (
            f"Winner: {match.winner_id} ({match.points_won}-{match.points_lost})"
        )
        if match.stats_pending:
            outcome += " [stats pending]"
    else:
        outcome = "Winner: open"
    return (
        f"Match ID: {match.match_id}, Team One: {match.team_one_id}, "
        f"Team Two: {match.team_two_id}, {outcome}"
    )


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------

def cmd_add(tournament: Tournament, args: argparse.Namespace) -> None:
    team = tournament.register_team(args.player_one, args.player_two)
    print(
        f"Successfully added {team.player_one} and {team.player_two} "
        f"to team ID {team.team_id}"
    )


def cmd_list(tournament: Tournament, args: argparse.Namespace) -> None:
    teams = tournament.teams()
    if not teams:
        print("No teams registered")
    for team in teams:
        print(format_team(team))


def cmd_show_matches(tournament: Tournament, args: argparse.Namespace) -> None:
    matches = tournament.matches()
    if not matches:
        print("No matches scheduled")
    for match in matches:
        print(format_match(match))


def cmd_match(tournament: Tournament, args: argparse.Namespace) -> None:
    match = tournament.schedule_match(args.team_one_id, args.team_two_id)
    print(
        f"Created match {match.match_id} between Team {match.team_one_id} "
        f"and Team {match.team_two_id}"
    )


def cmd_result(tournament: Tournament, args: argparse.Namespace) -> None:
    result = tournament.record_result(
        args.match_id, args.winner_id, args.points_won, args.points_lost
    )
    print(
        f"Match {result.match.match_id} result recorded: Team {result.winner.team_id} "
        f"({result.winner.wins}-{result.winner.losses}) beat Team "
        f"{result.loser.team_id} ({result.loser.wins}-{result.loser.losses})"
    )


def cmd_seed(tournament: Tournament, args: argparse.Namespace) -> None:
    teams = tournament.recompute_seeding()
    if not teams:
        print("No teams to seed")
    for team in teams:
        print(f"Team ID: {team.team_id}, Team Seed: {team.seed_number}")


def cmd_reconcile(tournament: Tournament, args: argparse.Namespace) -> None:
    repaired = tournament.reconcile()
    print(f"Reconciled {len(repaired)} match(es)")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> int:
    """Open the tournament, run the selected command, return an exit code."""
    config = config_from_args(args)
    setup_logging(
        data_dir=config.data_dir,
        console_level=logging.INFO if args.verbose else logging.WARNING,
        log_file=config.log_file,
    )
    logger.debug("Running %s against %s", args.command, config.db_path)

    db = Database(config.db_path, busy_timeout_ms=config.busy_timeout_ms)
    db.initialize()
    try:
        tournament = Tournament.open(db, config)
        args.handler(tournament, args)
    except PartialFailure as e:
        logger.error("%s (incomplete: %s)", e, ", ".join(e.failed_steps))
        return EXIT_PARTIAL
    except TournamentError as e:
        logger.error("%s", e)
        return EXIT_ERROR
    finally:
        db.close()
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Entry point for the tourney console script."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return run(args)
    finally:
        logging.shutdown()


if __name__ == "__main__":
    sys.exit(main())
