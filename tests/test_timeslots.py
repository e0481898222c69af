"""
Tests for time slot arithmetic and the slot sequencer.
"""

import pytest

from tournament_scheduler.config import TournamentBreak
from tournament_scheduler.exceptions import ScheduleCapacityError
from tournament_scheduler.timeslots import (
    TimeSlotSequencer, add_minutes, is_during_break, minutes_to_time, order_time_slots, time_to_minutes
)


def test_time_arithmetic_wraps_at_midnight():
    """Test minutes-of-day conversion and wrap-around."""
    assert time_to_minutes("09:25") == 565
    assert minutes_to_time(565) == "09:25"
    assert add_minutes("23:50", 25) == "00:15"
    assert add_minutes("00:10", -25) == "23:45"


def test_break_overlap():
    """Test the break overlap rule for 20 minute games and a 10:00-10:15 break."""
    brk = TournamentBreak(start_time="10:00", duration=15)

    # Game ends exactly when the break starts
    assert not is_during_break("09:40", brk, 20)
    # Game runs into the break
    assert is_during_break("09:45", brk, 20)
    assert is_during_break("09:50", brk, 20)
    # Game starts inside the break
    assert is_during_break("10:00", brk, 20)
    assert is_during_break("10:10", brk, 20)
    # Game starts when the break ends
    assert not is_during_break("10:15", brk, 20)


def test_game_spanning_whole_break():
    """Test that a game covering the whole break collides with it."""
    brk = TournamentBreak(start_time="10:05", duration=5)
    assert is_during_break("10:00", brk, 20)


def test_sequencer_base_slots():
    """Test the base sequence from the start time."""
    sequencer = TimeSlotSequencer("09:00", 25, horizon=4)

    assert sequencer.slots == ["09:00", "09:25", "09:50", "10:15"]
    assert len(sequencer) == 4
    assert sequencer[1] == "09:25"
    assert "09:50" in sequencer
    assert sequencer.next_after("10:15") == "10:40"


def test_sequencer_extend():
    """Test on-demand extension by one step."""
    sequencer = TimeSlotSequencer("09:00", 25, horizon=2)

    assert sequencer.extend() == "09:50"
    assert sequencer.last == "09:50"
    assert sequencer.slots == ["09:00", "09:25", "09:50"]


def test_sequencer_playable_skips_breaks():
    """Test that break slots are kept in the sequence but not playable."""
    sequencer = TimeSlotSequencer("09:00", 25, horizon=4)
    breaks = [TournamentBreak(start_time="10:00", duration=15)]

    assert sequencer.playable(breaks, 20) == ["09:00", "09:25", "10:15"]
    assert "09:50" in sequencer


def test_sequencer_stops_when_day_is_full():
    """Test that the sequence stops at the first repeat and cannot extend further."""
    sequencer = TimeSlotSequencer("23:00", 60, horizon=30)

    assert len(sequencer) == 24
    assert sequencer.slots[1] == "00:00"

    with pytest.raises(ScheduleCapacityError):
        sequencer.extend()


def test_sequencer_rejects_zero_step():
    """Test that a zero step is rejected."""
    with pytest.raises(ValueError):
        TimeSlotSequencer("09:00", 0)


def test_order_time_slots():
    """Test chronological ordering with and without a day start."""
    slots = ["00:15", "23:50", "23:25", "23:50"]

    assert order_time_slots(slots) == ["00:15", "23:25", "23:50"]
    assert order_time_slots(slots, day_start="23:25") == ["23:25", "23:50", "00:15"]
