"""
Tournament Scheduler - round-robin scheduling on a time slot x court grid with referees.
"""

__version__ = "0.1.0"

from .config import TournamentConfig, Team, Referee, TournamentBreak, ScoringWeights, load_config
from .models import Game, Matchup, Schedule
from .engine import SchedulingEngine, generate_schedule
from .moves import MoveValidator, MoveResult, MoveReason, apply_move, validate_move
from .validation import validate_tournament
from .export import write_excel, write_json

__all__ = [
    "TournamentConfig",
    "Team",
    "Referee",
    "TournamentBreak",
    "ScoringWeights",
    "load_config",
    "Game",
    "Matchup",
    "Schedule",
    "SchedulingEngine",
    "generate_schedule",
    "MoveValidator",
    "MoveResult",
    "MoveReason",
    "apply_move",
    "validate_move",
    "validate_tournament",
    "write_excel",
    "write_json",
]
