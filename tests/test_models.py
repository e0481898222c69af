"""
Tests for the schedule model: lookups, grid rows and pure edits.
"""

import pytest

from conftest import game
from tournament_scheduler.exceptions import UnknownGameError
from tournament_scheduler.models import Game, Schedule


def _schedule():
    return Schedule(
        games=[
            game("1", "a", "b", 1, "09:25", referee="r1"),
            game("2", "b", "d", 2, "09:00"),
            game("3", "a", "c", 1, "09:00", referee="r2"),
        ],
        time_slots=["09:00", "09:25", "09:50"],
    )


def test_game_requires_two_teams():
    """Test that a team cannot play itself."""
    with pytest.raises(ValueError):
        Game(game_id="1", team1_id="a", team2_id="a", court=1, time_slot="09:00")


def test_lookups():
    """Test game, slot, team and referee lookups."""
    schedule = _schedule()

    assert schedule.day_start == "09:00"
    assert schedule.get_game("2").teams == ("b", "d")
    assert schedule.game_at(1, "09:00").game_id == "3"
    assert schedule.game_at(2, "09:25") is None
    assert [g.game_id for g in schedule.games_in_slot("09:00")] == ["2", "3"]
    assert [g.game_id for g in schedule.get_team_schedule("a")] == ["3", "1"]
    assert [g.game_id for g in schedule.get_referee_schedule("r1")] == ["1"]
    assert [g.game_id for g in schedule.games_without_referee()] == ["2"]
    assert schedule.used_time_slots() == ["09:00", "09:25"]

    grouped = schedule.group_by_team()
    assert [g.game_id for g in grouped["b"]] == ["2", "1"]


def test_unknown_game():
    """Test that an unknown id raises a KeyError subclass."""
    schedule = _schedule()

    with pytest.raises(UnknownGameError):
        schedule.get_game("99")
    with pytest.raises(KeyError):
        schedule.remove_game("99")


def test_grid_rows_are_padded(config):
    """Test that the grid shows at least eight rows."""
    schedule = _schedule()

    assert schedule.grid_time_slots(config) == [
        "09:00", "09:25", "09:50", "10:15", "10:40", "11:05", "11:30", "11:55",
    ]


def test_grid_rows_include_breaks(break_config):
    """Test that break starts appear as grid rows."""
    schedule = _schedule()
    rows = schedule.grid_time_slots(break_config)

    assert rows[:3] == ["09:00", "09:25", "10:00"]
    assert len(rows) == 8
    assert schedule.is_break_slot("10:00", break_config)
    assert not schedule.is_break_slot("09:25", break_config)


def test_edits_return_new_schedules():
    """Test that every edit leaves the original schedule alone."""
    schedule = _schedule()

    updated = schedule.assign_referee("2", "r3")
    assert updated.get_game("2").referee_id == "r3"
    assert schedule.get_game("2").referee_id is None

    cleared = schedule.assign_referee("1", None)
    assert cleared.get_game("1").referee_id is None

    removed = schedule.remove_game("3")
    assert [g.game_id for g in removed.games] == ["1", "2"]
    assert len(schedule.games) == 3

    moved = schedule.replace_game(schedule.get_game("1").moved_to(2, "09:50"))
    assert moved.game_at(2, "09:50").game_id == "1"
    assert schedule.game_at(2, "09:50") is None


def test_remove_time_slot():
    """Test that removing a slot drops its games."""
    schedule = _schedule().remove_time_slot("09:00")

    assert [g.game_id for g in schedule.games] == ["1"]


def test_add_time_slot(config):
    """Test adding grid rows above and below a slot."""
    schedule = _schedule()

    below = schedule.add_time_slot("09:25", config.slot_step, "below")
    assert below.custom_slots == ["09:50"]
    assert below.day_start == "09:00"

    above = schedule.add_time_slot("09:00", config.slot_step, "above")
    assert above.custom_slots == ["08:35"]
    assert above.day_start == "08:35"
    assert above.grid_time_slots(config)[0] == "08:35"
    assert schedule.custom_slots == []

    with pytest.raises(ValueError, match="Invalid direction"):
        schedule.add_time_slot("09:00", 25, "sideways")


def test_available_referees(referee_config):
    """Test referees unaffiliated with either team."""
    ids = [ref.id for ref in Schedule.available_referees(game("1", "a", "b", 1, "09:00"), referee_config)]
    assert ids == ["r1", "r2"]


def test_dataframe_and_stats(config):
    """Test the tabular view and summary statistics."""
    schedule = _schedule()
    df = schedule.to_dataframe(config)

    assert list(df.columns) == ['Order', 'Time', 'Court', 'Team 1', 'Team 2', 'Pool', 'Referee', 'Game ID']
    assert list(df['Game ID']) == ["3", "2", "1"]
    assert df.iloc[0]['Team 1'] == "Alpha"

    stats = schedule.get_summary_stats()
    assert stats['total_games'] == 3
    assert stats['total_teams'] == 4
    assert stats['time_range'] == {'start': '09:00', 'end': '09:25'}
    assert stats['games_without_referee'] == 1

    assert Schedule().to_dataframe().empty
    assert Schedule().get_summary_stats() == {}
