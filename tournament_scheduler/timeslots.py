"""
Time slot arithmetic and the slot sequence used by the scheduling engine.

Slots are "HH:MM" strings on a single day. Minutes-of-day arithmetic wraps
at 24:00, so chronological order is measured from the first slot of the
day rather than by string order.
"""

import logging
from typing import Iterable, Iterator, List, Optional

from .config import TournamentBreak, TournamentConfig
from .exceptions import ScheduleCapacityError

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(time_slot: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    hours, minutes = time_slot.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM", wrapping at 24:00."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def add_minutes(time_slot: str, minutes: int) -> str:
    return minutes_to_time(time_to_minutes(time_slot) + minutes)


def is_during_break(time_slot: str, tournament_break: TournamentBreak, game_duration: int) -> bool:
    """
    Check whether a game starting at time_slot collides with a break.

    A game occupies [start, start + game_duration). It collides when it
    starts inside the break, ends inside the break, or spans the whole break.
    """
    slot_start = time_to_minutes(time_slot)
    break_start = time_to_minutes(tournament_break.start_time)
    break_end = break_start + tournament_break.duration
    game_end = slot_start + game_duration

    return (
        (break_start <= slot_start < break_end)
        or (break_start < game_end <= break_end)
        or (slot_start <= break_start and game_end >= break_end)
    )


def is_during_breaks(time_slot: str, breaks: Iterable[TournamentBreak], game_duration: int) -> bool:
    return any(is_during_break(time_slot, brk, game_duration) for brk in breaks)


def order_time_slots(time_slots: Iterable[str], day_start: Optional[str] = None) -> List[str]:
    """
    Order distinct time slots chronologically.

    With a day_start, slots are ordered by minutes elapsed since day_start,
    so a sequence that wraps past midnight stays in playing order. Without
    one, slots are ordered by clock time.
    """
    distinct = set(time_slots)
    if day_start is None:
        return sorted(distinct, key=time_to_minutes)

    anchor = time_to_minutes(day_start)
    return sorted(distinct, key=lambda s: (time_to_minutes(s) - anchor) % MINUTES_PER_DAY)


class TimeSlotSequencer:
    """
    Ordered sequence of candidate time slots.

    Starts at the configured start time and steps by game duration plus the
    break between games. The sequence can be extended one slot at a time.
    """

    def __init__(self, start_time: str, step: int, horizon: int = 30):
        if step < 1:
            raise ValueError("Slot step must be at least one minute")
        self.step = step
        self._slots: List[str] = []
        self._seen = set()

        current = start_time
        for _ in range(horizon):
            if current in self._seen:
                # The day is full; stop at the first wrap-around repeat
                break
            self._append(current)
            current = add_minutes(current, step)

    @classmethod
    def from_config(cls, config: TournamentConfig) -> "TimeSlotSequencer":
        return cls(config.start_time, config.slot_step, config.horizon)

    def _append(self, time_slot: str) -> None:
        self._slots.append(time_slot)
        self._seen.add(time_slot)

    @property
    def slots(self) -> List[str]:
        return list(self._slots)

    @property
    def last(self) -> str:
        return self._slots[-1]

    def next_after(self, time_slot: str) -> str:
        """Compute the slot that follows time_slot."""
        return add_minutes(time_slot, self.step)

    def extend(self) -> str:
        """
        Append one slot after the last known slot.

        Returns:
            str: The new slot

        Raises:
            ScheduleCapacityError: If the new slot wraps onto an existing one
        """
        next_slot = self.next_after(self.last)
        if next_slot in self._seen:
            raise ScheduleCapacityError(
                f"Cannot extend schedule past {self.last}: {next_slot} is already in use"
            )
        self._append(next_slot)
        logger.info("Extended time slots to %s (%d slots)", next_slot, len(self._slots))
        return next_slot

    def playable(self, breaks: Iterable[TournamentBreak], game_duration: int) -> List[str]:
        """Slots in which a game may be placed."""
        breaks = list(breaks)
        return [s for s in self._slots if not is_during_breaks(s, breaks, game_duration)]

    def index(self, time_slot: str) -> int:
        return self._slots.index(time_slot)

    def __contains__(self, time_slot: str) -> bool:
        return time_slot in self._seen

    def __iter__(self) -> Iterator[str]:
        return iter(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __getitem__(self, index: int) -> str:
        return self._slots[index]
