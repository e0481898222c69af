"""
Configuration management for the tournament scheduler.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import time


TEAM_COLORS = [
    "#ef4444",
    "#f97316",
    "#eab308",
    "#22c55e",
    "#06b6d4",
    "#3b82f6",
    "#8b5cf6",
    "#ec4899",
    "#f43f5e",
    "#84cc16",
]


def check_time_format(v: str) -> str:
    try:
        parsed = time.fromisoformat(v)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid time format: {v}. Use HH:MM format.")
    if len(v) != 5 or parsed.second or parsed.microsecond:
        raise ValueError(f"Invalid time format: {v}. Use HH:MM format.")
    return v


class Team(BaseModel):
    """A team entered in the tournament."""
    id: str
    name: str
    pool: Optional[int] = Field(default=None, ge=1, description="Pool number, None for a single pool")
    color: Optional[str] = Field(default=None, description="Display color, assigned from the palette if omitted")

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Team name must not be empty")
        return v


class Referee(BaseModel):
    """A referee, optionally affiliated with one team."""
    id: str
    name: str
    team_id: Optional[str] = Field(default=None, description="Team this referee may not officiate")


class TournamentBreak(BaseModel):
    """A break during which no game may be played."""
    id: Optional[str] = None
    start_time: str
    duration: int = Field(ge=1, description="Break length in minutes")

    @field_validator('start_time')
    @classmethod
    def validate_time_format(cls, v):
        return check_time_format(v)


class ScoringWeights(BaseModel):
    """Weights used to score a candidate (slot, court) for a matchup."""
    base: float = Field(default=100.0, description="Score of a cell with no penalties")
    back_to_back_penalty: float = Field(default=30.0, ge=0.0, description="Per team whose last game is within the window")
    back_to_back_window: int = Field(default=30, ge=0, description="Minutes between starts that count as back-to-back")
    streak_penalty: float = Field(default=50.0, ge=0.0, description="Per team already on a streak")
    streak_threshold: int = Field(default=2, ge=1, description="Consecutive games that make a streak")
    court_repeat_penalty: float = Field(default=5.0, ge=0.0, description="Per prior game either team played on the court")


class TournamentConfig(BaseModel):
    """Main configuration for a tournament."""
    tournament_name: str = Field(default="Tournament")
    teams: List[Team] = Field(default_factory=list)
    referees: List[Referee] = Field(default_factory=list)

    courts: int = Field(default=1, ge=1, description="Number of courts")
    pools: int = Field(default=1, ge=1, description="Number of pools")

    start_time: str = Field(default="09:00", description="First slot of the day")
    game_duration: int = Field(default=20, ge=1, description="Game length in minutes")
    break_between_games: int = Field(default=5, ge=0, description="Changeover between slots in minutes")
    breaks: List[TournamentBreak] = Field(default_factory=list)

    # Engine tuning
    horizon: int = Field(default=30, ge=1, description="Slots generated before on-demand extension")
    max_gap_passes: int = Field(default=100, ge=0, description="Cap on gap elimination passes")
    weights: ScoringWeights = Field(default_factory=ScoringWeights)

    # Random seed for reproducibility, None draws a fresh one per run
    seed: Optional[int] = None

    @field_validator('start_time')
    @classmethod
    def validate_time_format(cls, v):
        return check_time_format(v)

    @model_validator(mode='after')
    def validate_roster(self):
        team_ids = set()
        names = set()
        for team in self.teams:
            if team.id in team_ids:
                raise ValueError(f"Duplicate team id: {team.id}")
            team_ids.add(team.id)
            key = team.name.lower()
            if key in names:
                raise ValueError(f"Duplicate team name: {team.name}")
            names.add(key)

            if self.pools > 1:
                if team.pool is None or team.pool > self.pools:
                    raise ValueError(
                        f"Team {team.name} must be in a pool between 1 and {self.pools}"
                    )

        for index, team in enumerate(self.teams):
            if team.color is None:
                team.color = TEAM_COLORS[index % len(TEAM_COLORS)]

        referee_ids = set()
        for referee in self.referees:
            if referee.id in referee_ids:
                raise ValueError(f"Duplicate referee id: {referee.id}")
            referee_ids.add(referee.id)
            if referee.team_id is not None and referee.team_id not in team_ids:
                raise ValueError(
                    f"Referee {referee.name} is affiliated with unknown team: {referee.team_id}"
                )

        for index, brk in enumerate(self.breaks):
            if brk.id is None:
                brk.id = f"break-{index + 1}"

        return self

    @property
    def slot_step(self) -> int:
        """Minutes between the starts of two consecutive slots."""
        return self.game_duration + self.break_between_games

    def get_team(self, team_id: str) -> Optional[Team]:
        """Get a team by id."""
        for team in self.teams:
            if team.id == team_id:
                return team
        return None

    def get_referee(self, referee_id: str) -> Optional[Referee]:
        """Get a referee by id."""
        for referee in self.referees:
            if referee.id == referee_id:
                return referee
        return None

    def team_name(self, team_id: Optional[str]) -> str:
        team = self.get_team(team_id) if team_id else None
        return team.name if team else "Unknown Team"

    def teams_in_pool(self, pool: int) -> List[Team]:
        """Get the teams of one pool, in roster order."""
        return [team for team in self.teams if team.pool == pool]


def load_config(config_path: str) -> TournamentConfig:
    """Load configuration from YAML file."""
    import yaml

    with open(config_path, 'r') as f:
        config_data = yaml.safe_load(f) or {}

    return TournamentConfig(**config_data)


def save_config(config: TournamentConfig, config_path: str) -> None:
    """Save configuration to YAML file."""
    import yaml

    with open(config_path, 'w') as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, indent=2, sort_keys=False)
