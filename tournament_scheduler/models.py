"""
Data models for the tournament scheduler.
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional, Dict, Any, Tuple
import pandas as pd

from .config import TournamentConfig, Referee
from .exceptions import UnknownGameError
from .timeslots import add_minutes, is_during_breaks, order_time_slots, time_to_minutes


MIN_GRID_ROWS = 8


@dataclass(frozen=True)
class Matchup:
    """An unordered pair of teams that meet once."""
    team1_id: str
    team2_id: str
    pool: Optional[int] = None

    @property
    def teams(self) -> Tuple[str, str]:
        """Get both teams in this matchup."""
        return (self.team1_id, self.team2_id)

    @property
    def pair(self) -> frozenset:
        return frozenset(self.teams)


@dataclass(frozen=True)
class Game:
    """
    A game placed on the (time slot, court) grid.

    Games are immutable; edits produce a new Game with dataclasses.replace.
    """
    game_id: str
    team1_id: str
    team2_id: str
    court: int
    time_slot: str
    pool: Optional[int] = None
    referee_id: Optional[str] = None

    def __post_init__(self):
        if self.team1_id == self.team2_id:
            raise ValueError(f"Game {self.game_id} has the same team on both sides")

    @property
    def teams(self) -> Tuple[str, str]:
        return (self.team1_id, self.team2_id)

    @property
    def pair(self) -> frozenset:
        return frozenset(self.teams)

    def involves(self, team_id: Optional[str]) -> bool:
        return team_id is not None and team_id in self.teams

    def shares_team_with(self, other: "Game") -> bool:
        return bool(self.pair & other.pair)

    def moved_to(self, court: int, time_slot: str) -> "Game":
        return replace(self, court=court, time_slot=time_slot)

    def with_referee(self, referee_id: Optional[str]) -> "Game":
        return replace(self, referee_id=referee_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'game_id': self.game_id,
            'team1_id': self.team1_id,
            'team2_id': self.team2_id,
            'court': self.court,
            'time_slot': self.time_slot,
            'pool': self.pool,
            'referee_id': self.referee_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Game":
        return cls(
            game_id=str(data['game_id']),
            team1_id=str(data['team1_id']),
            team2_id=str(data['team2_id']),
            court=int(data['court']),
            time_slot=data['time_slot'],
            pool=data.get('pool'),
            referee_id=data.get('referee_id'),
        )


@dataclass
class TeamState:
    """Per-team placement history kept by the assigner during one run."""
    team_id: str
    last_slot: Optional[str] = None
    consecutive_games: int = 0
    court_history: Dict[int, List[str]] = field(default_factory=dict)

    def is_back_to_back(self, time_slot: str, window: int) -> bool:
        """Whether a game at time_slot would start within window minutes of the last one."""
        if self.last_slot is None:
            return False
        return abs(time_to_minutes(time_slot) - time_to_minutes(self.last_slot)) <= window

    def games_on_court(self, court: int) -> int:
        return len(self.court_history.get(court, []))

    def update_after_game(self, time_slot: str, court: int, window: int):
        """Update team state after placing a game."""
        if self.is_back_to_back(time_slot, window):
            self.consecutive_games += 1
        else:
            self.consecutive_games = 1
        self.last_slot = time_slot
        self.court_history.setdefault(court, []).append(time_slot)


@dataclass
class Schedule:
    """
    A complete schedule.

    Edit helpers never modify this instance; they return a new Schedule
    sharing the unchanged Game records.
    """
    games: List[Game] = field(default_factory=list)
    time_slots: List[str] = field(default_factory=list)
    matchups: List[Matchup] = field(default_factory=list)
    day_start: Optional[str] = None
    custom_slots: List[str] = field(default_factory=list)
    violations: Dict[str, List[str]] = field(default_factory=dict)
    gap_report: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.day_start is None and self.time_slots:
            self.day_start = self.time_slots[0]

    # Lookups

    def get_game(self, game_id: str) -> Game:
        for game in self.games:
            if game.game_id == game_id:
                return game
        raise UnknownGameError(game_id)

    def games_in_slot(self, time_slot: str) -> List[Game]:
        return [game for game in self.games if game.time_slot == time_slot]

    def game_at(self, court: int, time_slot: str) -> Optional[Game]:
        for game in self.games:
            if game.court == court and game.time_slot == time_slot:
                return game
        return None

    def get_team_schedule(self, team_id: str) -> List[Game]:
        """Get all games for a specific team, in playing order."""
        return self._chronological([g for g in self.games if g.involves(team_id)])

    def get_referee_schedule(self, referee_id: str) -> List[Game]:
        """Get all games officiated by a referee, in playing order."""
        return self._chronological([g for g in self.games if g.referee_id == referee_id])

    def games_without_referee(self) -> List[Game]:
        return self._chronological([g for g in self.games if g.referee_id is None])

    def group_by_team(self) -> Dict[str, List[Game]]:
        """Map each team id to the games it plays."""
        grouped: Dict[str, List[Game]] = {}
        for game in self._chronological(self.games):
            for team_id in game.teams:
                grouped.setdefault(team_id, []).append(game)
        return grouped

    def used_time_slots(self) -> List[str]:
        """Slots holding at least one game, in playing order."""
        return order_time_slots((g.time_slot for g in self.games), self.day_start)

    def grid_time_slots(self, config: TournamentConfig) -> List[str]:
        """
        Rows of the display grid.

        Every slot with a game, every break start and every slot added by
        hand, padded with following slots to at least MIN_GRID_ROWS rows.
        """
        rows = set(g.time_slot for g in self.games)
        rows.update(brk.start_time for brk in config.breaks)
        rows.update(self.custom_slots)
        day_start = self.day_start or config.start_time
        ordered = order_time_slots(rows, day_start)

        if not ordered:
            ordered = [config.start_time]

        while len(ordered) < MIN_GRID_ROWS:
            next_slot = add_minutes(ordered[-1], config.slot_step)
            if next_slot in ordered:
                break
            ordered.append(next_slot)

        return ordered

    def is_break_slot(self, time_slot: str, config: TournamentConfig) -> bool:
        return is_during_breaks(time_slot, config.breaks, config.game_duration)

    @staticmethod
    def available_referees(game: Game, config: TournamentConfig) -> List[Referee]:
        """Referees not affiliated with either team of the game."""
        return [ref for ref in config.referees if not game.involves(ref.team_id)]

    # Pure transitions

    def _with_games(self, games: List[Game], **changes) -> "Schedule":
        return replace(self, games=games, **changes)

    def replace_game(self, updated: Game) -> "Schedule":
        self.get_game(updated.game_id)
        return self._with_games(
            [updated if g.game_id == updated.game_id else g for g in self.games]
        )

    def remove_game(self, game_id: str) -> "Schedule":
        self.get_game(game_id)
        return self._with_games([g for g in self.games if g.game_id != game_id])

    def assign_referee(self, game_id: str, referee_id: Optional[str]) -> "Schedule":
        """Set or clear the referee of one game."""
        return self.replace_game(self.get_game(game_id).with_referee(referee_id))

    def remove_time_slot(self, time_slot: str) -> "Schedule":
        """Drop a slot from the grid together with every game in it."""
        return self._with_games(
            [g for g in self.games if g.time_slot != time_slot],
            custom_slots=[s for s in self.custom_slots if s != time_slot],
        )

    def add_time_slot(self, reference: str, step: int, direction: str = "below") -> "Schedule":
        """
        Add an empty grid row one step above or below a reference slot.

        Args:
            reference: Existing slot to position against
            step: Minutes between slots
            direction: "above" or "below"
        """
        if direction not in ("above", "below"):
            raise ValueError(f"Invalid direction: {direction}. Use 'above' or 'below'.")

        new_slot = add_minutes(reference, -step if direction == "above" else step)
        changes: Dict[str, Any] = {'custom_slots': self.custom_slots + [new_slot]}
        if direction == "above" and reference == self.day_start:
            changes['day_start'] = new_slot
        return replace(self, **changes)

    # Reporting

    def _chronological(self, games: List[Game]) -> List[Game]:
        order = {slot: i for i, slot in enumerate(order_time_slots((g.time_slot for g in games), self.day_start))}
        return sorted(games, key=lambda g: (order[g.time_slot], g.court))

    def to_dataframe(self, config: Optional[TournamentConfig] = None) -> pd.DataFrame:
        """Convert schedule to pandas DataFrame."""
        if not self.games:
            return pd.DataFrame()

        def team_name(team_id):
            return config.team_name(team_id) if config else team_id

        def referee_name(referee_id):
            if referee_id is None:
                return None
            if config:
                referee = config.get_referee(referee_id)
                return referee.name if referee else referee_id
            return referee_id

        data = []
        for order, game in enumerate(self._chronological(self.games)):
            data.append({
                'Order': order + 1,
                'Time': game.time_slot,
                'Court': game.court,
                'Team 1': team_name(game.team1_id),
                'Team 2': team_name(game.team2_id),
                'Pool': game.pool,
                'Referee': referee_name(game.referee_id),
                'Game ID': game.game_id,
            })

        return pd.DataFrame(data)

    def get_summary_stats(self) -> Dict[str, Any]:
        """Get summary statistics for the schedule."""
        if not self.games:
            return {}

        df = self.to_dataframe()
        used = self.used_time_slots()

        stats = {
            'total_games': len(self.games),
            'total_teams': len(self.group_by_team()),
            'time_range': {
                'start': used[0],
                'end': used[-1],
            },
            'court_distribution': df['Court'].value_counts().sort_index().to_dict(),
            'games_without_referee': int(df['Referee'].isna().sum()),
        }
        if df['Pool'].notna().any():
            stats['pool_games'] = df['Pool'].value_counts().sort_index().to_dict()

        return stats

    def to_dict(self) -> Dict[str, Any]:
        return {
            'games': [g.to_dict() for g in self.games],
            'time_slots': list(self.time_slots),
            'day_start': self.day_start,
            'custom_slots': list(self.custom_slots),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schedule":
        return cls(
            games=[Game.from_dict(g) for g in data.get('games', [])],
            time_slots=list(data.get('time_slots', [])),
            day_start=data.get('day_start'),
            custom_slots=list(data.get('custom_slots', [])),
        )
