"""
Exceptions raised by the tournament scheduler.

Rule violations are never raised; they are returned as violation lists or
MoveResult values. These exceptions cover the cases where the engine
cannot produce an answer at all.
"""


class SchedulerError(Exception):
    """Base class for scheduler errors."""


class ScheduleCapacityError(SchedulerError):
    """The time slot sequence cannot be extended any further within one day."""


class UnknownGameError(SchedulerError, KeyError):
    """A game id was not found in the schedule."""

    def __init__(self, game_id: str):
        super().__init__(game_id)
        self.game_id = game_id

    def __str__(self) -> str:
        return f"Unknown game: {self.game_id}"
