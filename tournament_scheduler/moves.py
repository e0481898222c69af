"""
Interactive move and swap validation.

A move takes one game to a destination (court, time slot). If another game
occupies that cell the two games swap places. The validator decides whether
the move keeps the schedule consistent and, when it does not, returns a
reason code with enough detail to explain the conflict.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import TournamentConfig
from .models import Game, Schedule
from .timeslots import is_during_breaks

logger = logging.getLogger(__name__)


class MoveReason(str, Enum):
    """Why a move was rejected."""
    TEAM_CONFLICT = "team_conflict"
    SWAP_DESTINATION_CONFLICT = "swap_destination_conflict"
    SWAP_COURT_OCCUPIED = "swap_court_occupied"
    REF_TEAM_CONFLICT = "ref_team_conflict"
    REF_BUSY = "ref_busy"
    REF_TEAM_PLAYING = "ref_team_playing"
    SWAP_REF_CONFLICT_A = "swap_ref_conflict_a"
    SWAP_REF_CONFLICT_B = "swap_ref_conflict_b"
    UNKNOWN = "unknown"


# Failures that a new referee can fix without rejecting the move
REPAIRABLE_REASONS = frozenset({MoveReason.REF_TEAM_CONFLICT, MoveReason.REF_BUSY})


@dataclass(frozen=True)
class MoveResult:
    """Outcome of validating one move."""
    is_valid: bool
    reason: Optional[MoveReason] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def valid(cls) -> "MoveResult":
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, reason: MoveReason, **details) -> "MoveResult":
        return cls(is_valid=False, reason=reason, details=details)

    @property
    def is_repairable(self) -> bool:
        return not self.is_valid and self.reason in REPAIRABLE_REASONS

    @property
    def message(self) -> str:
        if self.is_valid:
            return "Move is valid."
        return describe_move_error(self.reason or MoveReason.UNKNOWN, self.details)


@dataclass
class MoveOutcome:
    """Result of applying a move: the verdict and the schedule to keep."""
    result: MoveResult
    schedule: Schedule
    changed: bool = False
    repaired: bool = False
    referee_id: Optional[str] = None


class MoveValidator:
    """Validates single-game moves and swaps against a live schedule."""

    def __init__(self, config: TournamentConfig):
        self.config = config

    def _name(self, team_id: str) -> str:
        return self.config.team_name(team_id)

    def _label(self, game: Game) -> str:
        return f"{self._name(game.team1_id)} vs {self._name(game.team2_id)}"

    def validate(self, game: Game, court: int, time_slot: str, games: List[Game]) -> MoveResult:
        """
        Validate moving game to (court, time_slot).

        Args:
            game: Game being moved, as it currently stands
            court: Destination court
            time_slot: Destination slot
            games: Every game of the live schedule

        Returns:
            MoveResult: valid, or the first rule the move breaks
        """
        grid_result = self._validate_grid(game, court, time_slot)
        if not grid_result.is_valid:
            return grid_result

        # Rule 1: the moving teams must be free at the destination
        for other in games:
            if other.game_id == game.game_id or other.time_slot != time_slot:
                continue
            if not other.shares_team_with(game):
                continue

            conflicting_team = game.team1_id if other.involves(game.team1_id) else game.team2_id
            return MoveResult.invalid(
                MoveReason.TEAM_CONFLICT,
                conflicting_team=self._name(conflicting_team),
                conflict_game=self._label(other),
                conflict_court=other.court,
                moving_game=self._label(game),
                destination_time=time_slot,
                destination_court=court,
            )

        # Rule 2: an occupied destination turns the move into a swap
        occupant = next(
            (g for g in games
             if g.game_id != game.game_id and g.court == court and g.time_slot == time_slot),
            None,
        )
        if occupant is not None:
            swap_result = self.validate_swap(game, occupant, games)
            if not swap_result.is_valid:
                return swap_result

        # Referees already working a slot must not see their own team arrive
        if time_slot != game.time_slot:
            leaving = {game.game_id} | ({occupant.game_id} if occupant is not None else set())
            arrivals = [(game, time_slot)]
            if occupant is not None:
                arrivals.append((occupant, game.time_slot))
            for arriving, slot in arrivals:
                bystander_result = self.validate_bystander_referees(arriving, slot, games, leaving)
                if not bystander_result.is_valid:
                    return bystander_result

        # Rule 3: the moving game's referee must still be able to work
        if game.referee_id:
            referee_result = self.validate_referee(game, time_slot, games)
            if not referee_result.is_valid:
                return referee_result

        return MoveResult.valid()

    def _validate_grid(self, game: Game, court: int, time_slot: str) -> MoveResult:
        if not 1 <= court <= self.config.courts:
            return MoveResult.invalid(
                MoveReason.UNKNOWN,
                rule="court_out_of_range",
                moving_game=self._label(game),
                destination_court=court,
                courts=self.config.courts,
            )
        if is_during_breaks(time_slot, self.config.breaks, self.config.game_duration):
            return MoveResult.invalid(
                MoveReason.UNKNOWN,
                rule="break_conflict",
                moving_game=self._label(game),
                destination_time=time_slot,
            )
        return MoveResult.valid()

    def validate_swap(self, game_a: Game, game_b: Game, games: List[Game]) -> MoveResult:
        """
        Validate exchanging the positions of game_a (the mover) and game_b.
        """
        labels = {'game_a': self._label(game_a), 'game_b': self._label(game_b)}
        others = [g for g in games if g.game_id not in (game_a.game_id, game_b.game_id)]

        # game_b's teams must be free at game_a's slot
        for other in others:
            if other.time_slot != game_a.time_slot or not other.shares_team_with(game_b):
                continue

            conflicting_team = game_b.team1_id if other.involves(game_b.team1_id) else game_b.team2_id
            return MoveResult.invalid(
                MoveReason.SWAP_DESTINATION_CONFLICT,
                conflicting_team=self._name(conflicting_team),
                conflict_game=self._label(other),
                conflict_time=game_a.time_slot,
                conflict_court=other.court,
                **labels,
            )

        # game_a's cell must not hold a third game
        for other in others:
            if other.court == game_a.court and other.time_slot == game_a.time_slot:
                return MoveResult.invalid(
                    MoveReason.SWAP_COURT_OCCUPIED,
                    occupied_court=game_a.court,
                    occupied_time=game_a.time_slot,
                    occupying_game=self._label(other),
                    **labels,
                )

        for moving, destination, reason in (
            (game_a, game_b.time_slot, MoveReason.SWAP_REF_CONFLICT_A),
            (game_b, game_a.time_slot, MoveReason.SWAP_REF_CONFLICT_B),
        ):
            if not moving.referee_id:
                continue
            referee_result = self.validate_referee(moving, destination, games)
            if not referee_result.is_valid:
                details = dict(referee_result.details)
                details['referee_reason'] = referee_result.reason.value
                details.update(labels)
                return MoveResult.invalid(reason, **details)

        return MoveResult.valid()

    def validate_referee(self, game: Game, time_slot: str, games: List[Game]) -> MoveResult:
        """Check that game's referee could officiate it at time_slot."""
        referee = self.config.get_referee(game.referee_id) if game.referee_id else None
        if referee is None:
            return MoveResult.valid()

        if game.involves(referee.team_id):
            return MoveResult.invalid(
                MoveReason.REF_TEAM_CONFLICT,
                referee_name=referee.name,
                referee_team=self._name(referee.team_id),
                game=self._label(game),
                time_slot=time_slot,
            )

        for other in games:
            if other.game_id != game.game_id and other.referee_id == referee.id and other.time_slot == time_slot:
                return MoveResult.invalid(
                    MoveReason.REF_BUSY,
                    referee_name=referee.name,
                    game=self._label(game),
                    time_slot=time_slot,
                    busy_game=self._label(other),
                    busy_court=other.court,
                )

        if referee.team_id is not None:
            for other in games:
                if other.game_id != game.game_id and other.time_slot == time_slot and other.involves(referee.team_id):
                    return MoveResult.invalid(
                        MoveReason.REF_TEAM_PLAYING,
                        referee_name=referee.name,
                        referee_team=self._name(referee.team_id),
                        game=self._label(game),
                        time_slot=time_slot,
                        referee_team_game=self._label(other),
                        referee_team_court=other.court,
                    )

        return MoveResult.valid()

    def validate_bystander_referees(self, game: Game, time_slot: str, games: List[Game],
                                    leaving=frozenset()) -> MoveResult:
        """Check the referees of the other games at time_slot against game's teams."""
        for other in games:
            if other.game_id in leaving or other.time_slot != time_slot or not other.referee_id:
                continue
            referee = self.config.get_referee(other.referee_id)
            if referee is None or not game.involves(referee.team_id):
                continue
            return MoveResult.invalid(
                MoveReason.REF_TEAM_PLAYING,
                referee_name=referee.name,
                referee_team=self._name(referee.team_id),
                game=self._label(game),
                time_slot=time_slot,
                officiated_game=self._label(other),
                officiated_court=other.court,
            )
        return MoveResult.valid()

    def find_replacement_referee(self, game: Game, time_slot: str, games: List[Game]) -> Optional[str]:
        """
        First referee unaffiliated with either team, free at time_slot and
        whose team is not playing at time_slot.

        Unlike batch assignment this does not avoid back-to-back slots.
        """
        in_slot = [g for g in games if g.time_slot == time_slot and g.game_id != game.game_id]
        busy = {g.referee_id for g in in_slot if g.referee_id}
        playing = {team for g in in_slot for team in g.teams}
        for referee in self.config.referees:
            if game.involves(referee.team_id) or referee.id in busy:
                continue
            if referee.team_id is not None and referee.team_id in playing:
                continue
            return referee.id
        return None


def validate_move(schedule: Schedule, game_id: str, court: int, time_slot: str,
                  config: TournamentConfig) -> MoveResult:
    """
    Validate moving one game of a schedule.

    Raises:
        UnknownGameError: If game_id is not in the schedule
    """
    game = schedule.get_game(game_id)
    return MoveValidator(config).validate(game, court, time_slot, schedule.games)


def apply_move(schedule: Schedule, game_id: str, court: int, time_slot: str,
               config: TournamentConfig, auto_repair: bool = True) -> MoveOutcome:
    """
    Validate a move and, if accepted, build the schedule after it.

    An occupant of the destination cell is swapped to the mover's origin.
    When the only problem is the mover's referee (affiliated or busy),
    auto_repair is on and both teams are configured, a replacement referee
    is assigned instead of rejecting the move. The given schedule is never modified.

    Args:
        schedule: Live schedule
        game_id: Game to move
        court: Destination court
        time_slot: Destination slot
        config: Tournament configuration
        auto_repair: Reassign the referee on referee-only conflicts

    Returns:
        MoveOutcome: Verdict plus the schedule the caller should keep
    """
    game = schedule.get_game(game_id)

    if game.court == court and game.time_slot == time_slot:
        return MoveOutcome(result=MoveResult.valid(), schedule=schedule)

    validator = MoveValidator(config)
    result = validator.validate(game, court, time_slot, schedule.games)

    referee_id = game.referee_id
    repaired = False
    if not result.is_valid:
        known_teams = all(config.get_team(team_id) is not None for team_id in game.teams)
        if not (auto_repair and result.is_repairable and known_teams):
            logger.info("Rejected move of game %s to %s court %d: %s",
                        game_id, time_slot, court, result.reason.value)
            return MoveOutcome(result=result, schedule=schedule)

        referee_id = validator.find_replacement_referee(game, time_slot, schedule.games)
        repaired = True
        logger.info("Reassigned referee of game %s to %s after %s",
                    game_id, referee_id, result.reason.value)

    occupant = schedule.game_at(court, time_slot)
    updated = []
    for g in schedule.games:
        if g.game_id == game.game_id:
            g = g.moved_to(court, time_slot).with_referee(referee_id)
        elif occupant is not None and g.game_id == occupant.game_id:
            g = g.moved_to(game.court, game.time_slot)
        updated.append(g)

    new_schedule = Schedule(
        games=updated,
        time_slots=list(schedule.time_slots),
        matchups=list(schedule.matchups),
        day_start=schedule.day_start,
        custom_slots=list(schedule.custom_slots),
    )
    return MoveOutcome(
        result=result,
        schedule=new_schedule,
        changed=True,
        repaired=repaired,
        referee_id=referee_id if repaired else None,
    )


def describe_move_error(reason: MoveReason, details: Dict[str, Any]) -> str:
    """Human-readable explanation of a rejected move."""
    d = details
    if reason == MoveReason.TEAM_CONFLICT:
        return (
            f"Team conflict: cannot move \"{d['moving_game']}\" to {d['destination_time']} "
            f"court {d['destination_court']}. {d['conflicting_team']} is already playing "
            f"\"{d['conflict_game']}\" on court {d['conflict_court']} at {d['destination_time']}. "
            f"No team can play multiple games simultaneously."
        )
    if reason == MoveReason.SWAP_DESTINATION_CONFLICT:
        return (
            f"Swap conflict: cannot swap \"{d['game_a']}\" with \"{d['game_b']}\". "
            f"If \"{d['game_b']}\" moves to {d['conflict_time']}, {d['conflicting_team']} would "
            f"conflict with \"{d['conflict_game']}\" on court {d['conflict_court']}."
        )
    if reason == MoveReason.SWAP_COURT_OCCUPIED:
        return (
            f"Swap blocked: cannot swap \"{d['game_a']}\" with \"{d['game_b']}\". "
            f"Court {d['occupied_court']} at {d['occupied_time']} is already occupied by "
            f"\"{d['occupying_game']}\"."
        )
    if reason in (MoveReason.SWAP_REF_CONFLICT_A, MoveReason.SWAP_REF_CONFLICT_B):
        which = "first" if reason == MoveReason.SWAP_REF_CONFLICT_A else "second"
        text = (
            f"Referee swap conflict: cannot swap \"{d['game_a']}\" with \"{d['game_b']}\". "
            f"The {which} game's referee ({d['referee_name']}) would have a conflict at the new time slot."
        )
        if d.get('busy_game'):
            text += f" They would be officiating \"{d['busy_game']}\" on court {d['busy_court']}."
        elif d.get('referee_team'):
            text += f" Their team ({d['referee_team']}) would be playing at the new time slot."
        return text
    if reason == MoveReason.REF_TEAM_CONFLICT:
        return (
            f"Referee team conflict: cannot move \"{d['game']}\" to {d['time_slot']}. "
            f"Referee {d['referee_name']} is affiliated with {d['referee_team']}, which is playing in this game."
        )
    if reason == MoveReason.REF_BUSY:
        return (
            f"Referee busy: cannot move \"{d['game']}\" to {d['time_slot']}. "
            f"Referee {d['referee_name']} is already officiating \"{d['busy_game']}\" "
            f"on court {d['busy_court']} at {d['time_slot']}."
        )
    if reason == MoveReason.REF_TEAM_PLAYING and d.get('officiated_game'):
        return (
            f"Referee team playing: cannot move \"{d['game']}\" to {d['time_slot']}. "
            f"Referee {d['referee_name']} is officiating \"{d['officiated_game']}\" on court "
            f"{d['officiated_court']} at {d['time_slot']} and their team ({d['referee_team']}) "
            f"would be playing in this game."
        )
    if reason == MoveReason.REF_TEAM_PLAYING:
        return (
            f"Referee team playing: cannot move \"{d['game']}\" to {d['time_slot']}. "
            f"Referee {d['referee_name']}'s team ({d['referee_team']}) is playing "
            f"\"{d['referee_team_game']}\" on court {d['referee_team_court']} at {d['time_slot']}."
        )
    if d.get('rule') == 'court_out_of_range':
        return (
            f"Invalid move: court {d['destination_court']} does not exist "
            f"(the tournament has {d['courts']} court(s))."
        )
    if d.get('rule') == 'break_conflict':
        return f"Invalid move: {d['destination_time']} falls inside a tournament break."
    return "Invalid move: this move would violate tournament rules."
