"""
Command-line interface for the tournament scheduler.
"""

import argparse
import logging
import sys
import yaml
from pydantic import ValidationError

from .config import TournamentConfig, check_time_format, load_config
from .engine import generate_schedule
from .exceptions import SchedulerError
from .export import write_excel, write_json
from .ingest import load_teams, load_referees, load_schedule
from .matchups import get_matchup_summary
from .logging_config import setup_logging, get_logger
from .moves import apply_move
from .validation import validate_tournament

logger = get_logger(__name__)


def _print_violations(violations):
    if violations['errors']:
        print("ERRORS found in schedule:")
        for error in violations['errors']:
            print(f"  - {error}")
    else:
        print("No errors found in schedule!")

    if violations['warnings']:
        print("WARNINGS found in schedule:")
        for warning in violations['warnings']:
            print(f"  - {warning}")


def _load_config(args):
    print("Loading configuration...")
    config = load_config(args.config)

    updates = {}
    if getattr(args, 'teams', None):
        print(f"Loading teams from {args.teams}...")
        updates['teams'] = load_teams(args.teams)
    if getattr(args, 'referees', None):
        teams = updates.get('teams', config.teams)
        print(f"Loading referees from {args.referees}...")
        updates['referees'] = load_referees(args.referees, teams)
    if getattr(args, 'seed', None) is not None:
        updates['seed'] = args.seed

    if updates:
        # Re-validate so roster rules apply to the merged configuration
        data = config.model_dump()
        data.update({
            key: [item.model_dump() for item in value] if isinstance(value, list) else value
            for key, value in updates.items()
        })
        config = TournamentConfig.model_validate(data)

    print(f"Tournament: {config.tournament_name} ({len(config.teams)} teams, "
          f"{len(config.referees)} referees, {config.courts} court(s))")
    return config


def cmd_generate(args) -> int:
    config = _load_config(args)

    print("Generating schedule...")
    schedule = generate_schedule(config)
    print(f"Scheduled {len(schedule.games)} games")

    print("\nValidating schedule...")
    violations = validate_tournament(schedule, config)
    _print_violations(violations)

    if args.out:
        print(f"\nExporting schedule to {args.out}...")
        write_excel(schedule, config, args.out)
    if args.json:
        print(f"Writing schedule JSON to {args.json}...")
        write_json(schedule, args.json)

    print("\n" + "=" * 50)
    print("SCHEDULING COMPLETE")
    print("=" * 50)

    stats = schedule.get_summary_stats()
    print(f"Total games scheduled: {stats.get('total_games', 0)}")
    print(f"Total teams: {stats.get('total_teams', 0)}")

    summary = get_matchup_summary(schedule.matchups)
    if summary:
        print(f"Total matchups: {summary['total_matchups']} "
              f"({summary['avg_games_per_team']:.1f} per team)")
    if config.pools > 1:
        for pool in range(1, config.pools + 1):
            print(f"  Pool {pool}: {len(config.teams_in_pool(pool))} teams, "
                  f"{summary.get('pools', {}).get(pool, 0)} matchup(s)")
    time_range = stats.get('time_range', {})
    print(f"Time range: {time_range.get('start', 'N/A')} to {time_range.get('end', 'N/A')}")

    report = schedule.gap_report
    if report:
        print(f"Gap elimination: {report['passes']} pass(es), {report['games_moved']} game(s) moved, "
              f"{report['remaining_gaps']} gap(s) left, utilization {report['utilization']:.0%}")

    return 1 if violations['errors'] else 0


def cmd_validate(args) -> int:
    config = _load_config(args)

    print(f"Loading schedule from {args.schedule}...")
    schedule = load_schedule(args.schedule)
    print(f"Loaded {len(schedule.games)} games")

    violations = validate_tournament(schedule, config)
    _print_violations(violations)
    return 1 if violations['errors'] else 0


def cmd_move(args) -> int:
    config = _load_config(args)

    schedule = load_schedule(args.schedule)
    outcome = apply_move(
        schedule, args.game, args.court, args.time, config,
        auto_repair=not args.no_auto_repair,
    )

    if not outcome.result.is_valid and not outcome.repaired:
        print(f"Move rejected ({outcome.result.reason.value}):")
        print(f"  {outcome.result.message}")
        return 1

    if outcome.repaired:
        referee = config.get_referee(outcome.referee_id) if outcome.referee_id else None
        print(f"Referee reassigned: {referee.name if referee else 'none available'}")
    print(f"Game {args.game} moved to {args.time} court {args.court}")

    out_path = args.out or args.schedule
    write_json(outcome.schedule, out_path)
    print(f"Schedule written to {out_path}")
    return 0


def _time_arg(value: str) -> str:
    try:
        return check_time_format(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tournament-scheduler",
        description="Tournament Scheduler - round-robin games on a time slot x court grid"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        required=True,
        help="Path to YAML configuration file"
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    generate = subparsers.add_parser("generate", parents=[common], help="Generate a new schedule")
    generate.add_argument("--teams", help="CSV/Excel roster overriding the configured teams")
    generate.add_argument("--referees", help="CSV/Excel referee list overriding the configured referees")
    generate.add_argument("--seed", type=int, help="Random seed for a reproducible schedule")
    generate.add_argument("--out", help="Path to output Excel file")
    generate.add_argument("--json", help="Path to output JSON file")
    generate.set_defaults(func=cmd_generate)

    validate = subparsers.add_parser("validate", parents=[common], help="Validate a saved schedule")
    validate.add_argument("--schedule", required=True, help="Path to schedule JSON file")
    validate.set_defaults(func=cmd_validate)

    move = subparsers.add_parser("move", parents=[common], help="Move one game to another court and time")
    move.add_argument("--schedule", required=True, help="Path to schedule JSON file")
    move.add_argument("--game", required=True, help="Id of the game to move")
    move.add_argument("--court", required=True, type=int, help="Destination court")
    move.add_argument("--time", required=True, type=_time_arg, help="Destination time slot (HH:MM)")
    move.add_argument("--no-auto-repair", action="store_true",
                      help="Reject referee conflicts instead of reassigning the referee")
    move.add_argument("--out", help="Where to write the updated schedule (defaults to --schedule)")
    move.set_defaults(func=cmd_move)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        exit_code = args.func(args)
    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"ERROR: Invalid YAML configuration: {e}")
        sys.exit(1)
    except ValidationError as e:
        print(f"ERROR: Invalid configuration: {e}")
        sys.exit(1)
    except (SchedulerError, ValueError) as e:
        print(f"ERROR: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    logger.debug("Command %s finished with exit code %d", args.command, exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
