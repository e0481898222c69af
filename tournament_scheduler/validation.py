"""
Batch validation of a schedule.

All checks are read-only and return human-readable violation messages.
They never raise on a violation.
"""

from typing import List, Dict, Optional, Iterable

from .config import TournamentConfig
from .models import Game, Schedule
from .timeslots import is_during_breaks, order_time_slots


def _games_by_slot(games: Iterable[Game], day_start: Optional[str] = None) -> Dict[str, List[Game]]:
    games = list(games)
    grouped: Dict[str, List[Game]] = {slot: [] for slot in order_time_slots((g.time_slot for g in games), day_start)}
    for game in games:
        grouped[game.time_slot].append(game)
    return grouped


def _team_name(team_id: str, config: Optional[TournamentConfig]) -> str:
    if config is None:
        return team_id
    team = config.get_team(team_id)
    return team.name if team else team_id


def validate_schedule(games: Iterable[Game], config: Optional[TournamentConfig] = None) -> List[str]:
    """
    Check that no team and no court is double-booked in any slot.

    Args:
        games: Games to check
        config: Optional configuration, used for team names

    Returns:
        List[str]: Violation messages, empty when the schedule is consistent
    """
    errors = []
    day_start = config.start_time if config else None

    for time_slot, games_in_slot in _games_by_slot(games, day_start).items():
        teams_in_slot = set()
        courts_in_slot = set()

        for game in games_in_slot:
            for team_id in game.teams:
                if team_id in teams_in_slot:
                    errors.append(f"Team {_team_name(team_id, config)} plays multiple games at {time_slot}")
                teams_in_slot.add(team_id)

            if game.court in courts_in_slot:
                errors.append(f"Court {game.court} has multiple games at {time_slot}")
            courts_in_slot.add(game.court)

    return errors


def validate_referee_assignments(games: Iterable[Game], config: TournamentConfig) -> List[str]:
    """
    Check referee assignments slot by slot.

    Flags a referee working two games in one slot, a referee officiating
    their own team, and a referee working while their team plays anywhere
    in the same slot.

    Args:
        games: Games to check
        config: Tournament configuration

    Returns:
        List[str]: Violation messages
    """
    errors = []

    for time_slot, games_in_slot in _games_by_slot(games, config.start_time).items():
        referees_in_slot = set()
        teams_playing = {team for game in games_in_slot for team in game.teams}

        for game in games_in_slot:
            if game.referee_id is None:
                continue

            referee = config.get_referee(game.referee_id)
            referee_name = referee.name if referee else game.referee_id

            if game.referee_id in referees_in_slot:
                errors.append(f"Referee {referee_name} is assigned to multiple games at {time_slot}")
            referees_in_slot.add(game.referee_id)

            if referee is None or referee.team_id is None:
                continue

            team_name = config.team_name(referee.team_id)
            if game.involves(referee.team_id):
                errors.append(
                    f"Referee {referee_name} is affiliated with team {team_name} "
                    f"but assigned to their game at {time_slot}"
                )
            if referee.team_id in teams_playing:
                errors.append(
                    f"Referee {referee_name}'s team ({team_name}) is playing at {time_slot} "
                    f"- referee cannot work when their team plays"
                )

    return errors


def find_break_conflicts(games: Iterable[Game], config: TournamentConfig) -> List[str]:
    """Games whose slot overlaps a configured break."""
    errors = []
    for game in games:
        if is_during_breaks(game.time_slot, config.breaks, config.game_duration):
            errors.append(
                f"Game {game.game_id} ({config.team_name(game.team1_id)} vs "
                f"{config.team_name(game.team2_id)}) at {game.time_slot} overlaps a break"
            )
    return errors


def find_repeated_matchups(games: Iterable[Game], config: Optional[TournamentConfig] = None) -> List[str]:
    """Team pairs that meet more than once."""
    errors = []
    seen = set()
    for game in games:
        if game.pair in seen:
            errors.append(
                f"{_team_name(game.team1_id, config)} and {_team_name(game.team2_id, config)} "
                f"meet more than once"
            )
        seen.add(game.pair)
    return errors


def find_cross_pool_games(games: Iterable[Game], config: TournamentConfig) -> List[str]:
    """Games between teams of different pools when the tournament uses pools."""
    if config.pools <= 1:
        return []

    errors = []
    for game in games:
        team1 = config.get_team(game.team1_id)
        team2 = config.get_team(game.team2_id)
        if team1 and team2 and team1.pool != team2.pool:
            errors.append(
                f"{team1.name} (pool {team1.pool}) and {team2.name} (pool {team2.pool}) "
                f"are in different pools"
            )
    return errors


def count_gaps(schedule: Schedule, config: TournamentConfig) -> int:
    """Empty courts in the non-break slots from the start of the day to the last game."""
    used = schedule.used_time_slots()
    if not used:
        return 0

    day_start = schedule.day_start or config.start_time
    rows = order_time_slots(set(used) | set(schedule.time_slots), day_start)
    last = max(rows.index(time_slot) for time_slot in used)
    span = rows[:last + 1]

    gaps = 0
    for time_slot in span:
        if schedule.is_break_slot(time_slot, config):
            continue
        gaps += max(config.courts - len(schedule.games_in_slot(time_slot)), 0)
    return gaps


def validate_tournament(schedule: Schedule, config: TournamentConfig) -> Dict[str, List[str]]:
    """
    Validate a completed schedule for every rule.

    Args:
        schedule: Schedule to validate
        config: Tournament configuration

    Returns:
        Dict[str, List[str]]: Validation results
    """
    violations = {
        'errors': [],
        'warnings': []
    }

    if not schedule.games:
        violations['warnings'].append("No games scheduled")
        return violations

    violations['errors'].extend(validate_schedule(schedule.games, config))
    violations['errors'].extend(validate_referee_assignments(schedule.games, config))
    violations['errors'].extend(find_break_conflicts(schedule.games, config))
    violations['errors'].extend(find_repeated_matchups(schedule.games, config))
    violations['errors'].extend(find_cross_pool_games(schedule.games, config))

    if config.referees:
        missing = schedule.games_without_referee()
        if missing:
            violations['warnings'].append(f"Games without a referee: {len(missing)}")

    gaps = count_gaps(schedule, config)
    if gaps:
        violations['warnings'].append(f"Empty courts before the last game: {gaps}")

    return violations
