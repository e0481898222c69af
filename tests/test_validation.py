"""
Tests for the batch validators and the tournament report.
"""

from conftest import game, make_config
from tournament_scheduler.engine import generate_schedule
from tournament_scheduler.models import Schedule
from tournament_scheduler.validation import (
    count_gaps,
    find_break_conflicts,
    find_cross_pool_games,
    find_repeated_matchups,
    validate_referee_assignments,
    validate_schedule,
    validate_tournament,
)


def test_double_booking(config):
    """Test team and court double-booking messages."""
    games = [
        game("1", "a", "b", 1, "09:00"),
        game("2", "a", "c", 1, "09:00"),
    ]

    assert validate_schedule(games, config) == [
        "Team Alpha plays multiple games at 09:00",
        "Court 1 has multiple games at 09:00",
    ]
    # Without a config the ids are reported
    assert validate_schedule(games)[0] == "Team a plays multiple games at 09:00"


def test_referee_violations(referee_config):
    """Test every referee rule."""
    games = [
        game("1", "a", "b", 1, "09:00", referee="rA"),
        game("2", "c", "d", 2, "09:00", referee="rA"),
    ]

    errors = validate_referee_assignments(games, referee_config)

    assert len(errors) == 4
    assert "Referee Riley is affiliated with team Alpha but assigned to their game at 09:00" in errors
    assert "Referee Riley is assigned to multiple games at 09:00" in errors
    assert (
        "Referee Riley's team (Alpha) is playing at 09:00 - referee cannot work when their team plays"
        in errors
    )


def test_valid_schedule_has_no_violations(referee_config):
    """Test that validators return nothing for a consistent schedule."""
    games = [
        game("1", "a", "b", 1, "09:00", referee="r1"),
        game("2", "c", "d", 2, "09:00", referee="r2"),
        game("3", "e", "f", 1, "09:25", referee="rA"),
    ]

    assert validate_schedule(games, referee_config) == []
    assert validate_referee_assignments(games, referee_config) == []
    # Running twice gives the same answer
    assert validate_referee_assignments(games, referee_config) == []


def test_break_conflicts(break_config):
    """Test that games overlapping a break are reported."""
    games = [
        game("1", "a", "b", 1, "09:25"),
        game("2", "c", "d", 1, "09:50"),
    ]

    errors = find_break_conflicts(games, break_config)

    assert len(errors) == 1
    assert "09:50 overlaps a break" in errors[0]


def test_repeated_and_cross_pool_games():
    """Test repeated matchups and games across pools."""
    config = make_config(team_count=4, pools=2)
    games = [
        game("1", "a", "c", 1, "09:00"),
        game("2", "c", "a", 1, "09:25"),
        game("3", "a", "b", 1, "09:50"),
    ]

    assert find_repeated_matchups(games, config) == ["Charlie and Alpha meet more than once"]
    assert find_cross_pool_games(games, config) == [
        "Alpha (pool 1) and Bravo (pool 2) are in different pools"
    ]
    # Pools are not checked for a single pool tournament
    assert find_cross_pool_games(games, make_config(team_count=4)) == []


def test_count_gaps(config):
    """Test gap counting between the first and last used slot."""
    schedule = Schedule(
        games=[
            game("1", "a", "b", 1, "09:00"),
            game("2", "c", "d", 1, "09:50"),
        ],
        time_slots=["09:00", "09:25", "09:50", "10:15"],
    )

    assert count_gaps(schedule, config) == 4
    assert count_gaps(Schedule(), config) == 0


def test_validate_tournament_report(referee_config):
    """Test errors and warnings of the tournament report."""
    schedule = Schedule(
        games=[
            game("1", "a", "b", 1, "09:00", referee="r1"),
            game("2", "c", "d", 1, "09:00"),
        ],
        time_slots=["09:00", "09:25"],
    )

    violations = validate_tournament(schedule, referee_config)

    assert violations['errors'] == ["Court 1 has multiple games at 09:00"]
    assert "Games without a referee: 1" in violations['warnings']


def test_validate_empty_tournament(config):
    """Test the report for a schedule without games."""
    violations = validate_tournament(Schedule(), config)

    assert violations == {'errors': [], 'warnings': ["No games scheduled"]}


def test_generated_schedule_passes_report():
    """Test that a generated schedule has no errors."""
    config = make_config(
        team_count=6,
        courts=2,
        seed=3,
        breaks=[{"start_time": "10:00", "duration": 15}],
        referees=[{"id": "r1", "name": "Morgan"}, {"id": "r2", "name": "Casey"}],
    )
    schedule = generate_schedule(config)

    assert validate_tournament(schedule, config)['errors'] == []
