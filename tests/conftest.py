"""
Shared fixtures for the tournament scheduler tests.
"""

import pytest
from pathlib import Path
import sys

# Add the package to the path
sys.path.append(str(Path(__file__).parent.parent))

from tournament_scheduler.config import TournamentConfig
from tournament_scheduler.models import Game


TEAM_NAMES = ["Alpha", "Bravo", "Charlie", "Delta", "Echo", "Foxtrot", "Golf", "Hotel"]


def make_teams(count, pools=1):
    """Teams a, b, c, ... spread round-robin over the pools."""
    teams = []
    for index in range(count):
        team = {"id": chr(ord("a") + index), "name": TEAM_NAMES[index]}
        if pools > 1:
            team["pool"] = index % pools + 1
        teams.append(team)
    return teams


def make_config(team_count=4, **overrides):
    data = {
        "tournament_name": "Test Cup",
        "teams": make_teams(team_count, overrides.get("pools", 1)),
        "courts": 2,
        "start_time": "09:00",
        "game_duration": 20,
        "break_between_games": 5,
        "seed": 7,
    }
    data.update(overrides)
    return TournamentConfig(**data)


def game(game_id, team1, team2, court, time_slot, referee=None):
    return Game(
        game_id=game_id,
        team1_id=team1,
        team2_id=team2,
        court=court,
        time_slot=time_slot,
        referee_id=referee,
    )


@pytest.fixture
def config():
    """Four teams on two courts, no referees."""
    return make_config()


@pytest.fixture
def referee_config():
    """Six teams on two courts with one affiliated and two neutral referees."""
    return make_config(
        team_count=6,
        referees=[
            {"id": "rA", "name": "Riley", "team_id": "a"},
            {"id": "r1", "name": "Morgan"},
            {"id": "r2", "name": "Casey"},
        ],
    )


@pytest.fixture
def break_config():
    """Four teams with a 15 minute break at 10:00."""
    return make_config(breaks=[{"start_time": "10:00", "duration": 15}])
