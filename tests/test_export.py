"""
Tests for roster ingestion and schedule export.
"""

import pandas as pd
import pytest

from conftest import game
from tournament_scheduler.engine import generate_schedule
from tournament_scheduler.export import grid_dataframe, team_summary_dataframe, write_excel, write_json
from tournament_scheduler.ingest import load_referees, load_schedule, load_teams
from tournament_scheduler.models import Schedule


def test_load_teams_from_csv(tmp_path):
    """Test loading a roster with optional pool and color columns."""
    path = tmp_path / "teams.csv"
    pd.DataFrame({
        "Name": ["Aces", "Blockers", None],
        "Pool": [1, 2, None],
        "Color": ["#111111", None, None],
    }).to_csv(path, index=False)

    teams = load_teams(str(path))

    assert [t.id for t in teams] == ["team-1", "team-2"]
    assert [t.name for t in teams] == ["Aces", "Blockers"]
    assert [t.pool for t in teams] == [1, 2]
    assert teams[0].color == "#111111"
    assert teams[1].color is None


def test_load_teams_from_excel(tmp_path):
    """Test loading a roster from an Excel sheet."""
    path = tmp_path / "teams.xlsx"
    pd.DataFrame({"ID": ["x", "y"], "Name": ["Aces", "Blockers"]}).to_excel(path, index=False)

    teams = load_teams(str(path))

    assert [(t.id, t.name, t.pool) for t in teams] == [("x", "Aces", None), ("y", "Blockers", None)]


def test_load_teams_errors(tmp_path):
    """Test missing columns and unsupported formats."""
    path = tmp_path / "teams.csv"
    pd.DataFrame({"Team": ["Aces"]}).to_csv(path, index=False)

    with pytest.raises(ValueError, match="Missing required column: Name"):
        load_teams(str(path))

    with pytest.raises(ValueError, match="Unsupported roster format"):
        load_teams(str(tmp_path / "teams.txt"))


def test_load_referees(tmp_path):
    """Test resolving referee affiliations by team name."""
    teams_path = tmp_path / "teams.csv"
    pd.DataFrame({"Name": ["Aces", "Blockers"]}).to_csv(teams_path, index=False)
    teams = load_teams(str(teams_path))

    refs_path = tmp_path / "refs.csv"
    pd.DataFrame({"Name": ["Riley", "Morgan"], "Team": ["aces", None]}).to_csv(refs_path, index=False)

    referees = load_referees(str(refs_path), teams)

    assert [(r.id, r.name, r.team_id) for r in referees] == [
        ("ref-1", "Riley", "team-1"),
        ("ref-2", "Morgan", None),
    ]

    pd.DataFrame({"Name": ["Casey"], "Team": ["Nobody"]}).to_csv(refs_path, index=False)
    with pytest.raises(ValueError, match="unknown team"):
        load_referees(str(refs_path), teams)


def test_json_round_trip(tmp_path, referee_config):
    """Test that a written schedule loads back unchanged."""
    schedule = generate_schedule(referee_config)
    path = tmp_path / "schedule.json"

    write_json(schedule, str(path))
    loaded = load_schedule(str(path))

    assert loaded.games == schedule.games
    assert loaded.time_slots == schedule.time_slots
    assert loaded.day_start == schedule.day_start


def test_write_excel(tmp_path, referee_config):
    """Test that every sheet is written."""
    schedule = generate_schedule(referee_config)
    path = tmp_path / "schedule.xlsx"

    write_excel(schedule, referee_config, str(path))

    sheets = pd.read_excel(path, sheet_name=None)
    assert set(sheets) == {"Schedule", "Games", "Team Summary", "Referees"}
    assert len(sheets["Games"]) == 15
    assert len(sheets["Team Summary"]) == 6
    assert list(sheets["Referees"]["Referee"]) == ["Riley", "Morgan", "Casey"]

    grid = pd.read_excel(path, sheet_name="Schedule", header=2)
    assert list(grid.columns) == ["Time", "Court 1", "Court 2"]
    assert grid["Time"].iloc[0] == "09:00"


def test_write_excel_for_one_team(tmp_path, config):
    """Test the filtered export."""
    schedule = generate_schedule(config)
    path = tmp_path / "alpha.xlsx"

    write_excel(schedule, config, str(path), team_id="a")

    title = pd.read_excel(path, sheet_name="Schedule", header=None, nrows=2)
    assert title.iloc[0, 0] == "Test Cup"
    assert title.iloc[1, 0] == "Schedule for: Alpha"


def test_grid_marks_breaks_and_filters(break_config):
    """Test break rows and the per-team filter of the grid."""
    schedule = Schedule(
        games=[
            game("1", "a", "b", 1, "09:00"),
            game("2", "c", "d", 2, "09:00"),
            game("3", "a", "c", 1, "09:25"),
        ],
        time_slots=["09:00", "09:25"],
    )

    grid = grid_dataframe(schedule, break_config).set_index("Time")
    assert grid.loc["09:00", "Court 1"] == "Alpha vs Bravo"
    assert grid.loc["09:25", "Court 2"] == ""
    assert grid.loc["10:00", "Court 1"] == "BREAK"
    assert len(grid) == 8

    charlie = grid_dataframe(schedule, break_config, team_id="c").set_index("Time")
    assert charlie.loc["09:00", "Court 1"] == ""
    assert charlie.loc["09:00", "Court 2"] == "Charlie vs Delta"


def test_team_summary(config):
    """Test per-team statistics."""
    schedule = Schedule(
        games=[
            game("1", "a", "b", 1, "09:00"),
            game("2", "a", "c", 2, "09:25"),
            game("3", "a", "d", 2, "10:40"),
        ],
        time_slots=["09:00"],
    )

    summary = team_summary_dataframe(schedule, config).set_index("Team")

    assert summary.loc["Alpha", "Games"] == 3
    assert summary.loc["Alpha", "First Game"] == "09:00"
    assert summary.loc["Alpha", "Last Game"] == "10:40"
    assert summary.loc["Alpha", "Back-to-Back"] == 1
    assert summary.loc["Alpha", "Courts Used"] == "1, 2"
    assert summary.loc["Delta", "Games"] == 1
