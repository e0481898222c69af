"""
Gap elimination pass: relocate games into empty (slot, court) cells.
"""

import logging
from typing import List, Dict, Any, Iterable, Optional, Set

from ..models import Game

logger = logging.getLogger(__name__)


class GapEliminator:
    """
    Fills empty cells by moving games between slots.

    Only court and time slot change; referees are left as they are and must
    be recomputed afterwards. The cells considered are the playable slots
    from the start of the day up to the last slot holding a game; the span
    is recomputed after every pass, so slots emptied at the end of the day
    stop counting as gaps.
    """

    def __init__(self, courts: int, playable_slots: Iterable[str], max_passes: int = 100):
        self.courts = courts
        self.playable_slots = list(playable_slots)
        self.max_passes = max_passes

        self.passes = 0
        self.gaps_filled = 0
        self.compaction_moves = 0
        self.remaining_gaps = 0
        self.active_slots: List[str] = []

        self._games: Dict[str, Game] = {}
        self._order: Dict[str, int] = {}
        self._by_slot: Dict[str, List[str]] = {}

    def run(self, games: List[Game]) -> List[Game]:
        """
        Eliminate gaps.

        Args:
            games: Games to compact

        Returns:
            List[Game]: New game list in the same order, relocated where possible
        """
        self._load(games)
        self._refresh()
        logger.info("Gap elimination starting: %d slots x %d courts, %d games, %d gaps",
                    len(self.active_slots), self.courts, len(games), self.remaining_gaps)

        while self.passes < self.max_passes and self.remaining_gaps > 0:
            self.passes += 1
            gaps_found, moved = self._fill_pass(self.active_slots)
            self.gaps_filled += moved
            self._refresh()

            logger.debug("Pass %d: found %d gaps, moved %d games, remaining gaps: %d",
                         self.passes, gaps_found, moved, self.remaining_gaps)

            if moved == 0:
                break

        if self.remaining_gaps > 0:
            self.compaction_moves = self._compaction_push(self.active_slots)
            self._refresh()

        logger.info("Gap elimination finished after %d pass(es): %d moves, %d compaction moves, %d gaps left",
                    self.passes, self.gaps_filled, self.compaction_moves, self.remaining_gaps)

        return [self._games[game.game_id] for game in games]

    def report(self) -> Dict[str, Any]:
        capacity = len(self.active_slots) * self.courts
        placed = sum(len(self._by_slot.get(slot, [])) for slot in self.active_slots)
        return {
            'passes': self.passes,
            'gaps_filled': self.gaps_filled,
            'compaction_moves': self.compaction_moves,
            'games_moved': self.gaps_filled + self.compaction_moves,
            'remaining_gaps': self.remaining_gaps,
            'utilization': (placed / capacity) if capacity else 0.0,
        }

    def _load(self, games: List[Game]):
        self._games = {game.game_id: game for game in games}
        self._order = {game.game_id: index for index, game in enumerate(games)}
        self._by_slot = {}
        for game in games:
            self._by_slot.setdefault(game.time_slot, []).append(game.game_id)

    def _last_used_index(self) -> Optional[int]:
        last_used = None
        for index, slot in enumerate(self.playable_slots):
            if self._by_slot.get(slot):
                last_used = index
        return last_used

    def _refresh(self):
        """Recompute the active span and the gaps in it from the current games."""
        last_used = self._last_used_index()
        self.active_slots = [] if last_used is None else self.playable_slots[:last_used + 1]
        self.remaining_gaps = self._count_gaps(self.active_slots)

    def _slot_games(self, time_slot: str) -> List[Game]:
        return [self._games[game_id] for game_id in self._by_slot.get(time_slot, [])]

    def _count_gaps(self, slots: List[str]) -> int:
        return sum(max(self.courts - len(self._by_slot.get(slot, [])), 0) for slot in slots)

    def _move(self, game: Game, court: int, time_slot: str):
        self._by_slot[game.time_slot].remove(game.game_id)
        target = self._by_slot.setdefault(time_slot, [])
        target.append(game.game_id)
        target.sort(key=self._order.__getitem__)
        self._games[game.game_id] = game.moved_to(court, time_slot)
        logger.debug("Moved game %s from %s to %s court %d",
                     game.game_id, game.time_slot, time_slot, court)

    def _find_candidate(self, slots: List[str], target: str, busy_teams: Set[str]) -> Optional[Game]:
        """First game in another slot whose teams are both free in the target slot."""
        for source in slots:
            if source == target:
                continue
            for game in self._slot_games(source):
                if not busy_teams & game.pair:
                    return game
        return None

    def _fill_pass(self, slots: List[str]):
        gaps_found = 0
        moved = 0

        for index, time_slot in enumerate(slots):
            # Cells after the last game are no longer gaps
            if index > self._last_used_index():
                break

            in_slot = self._slot_games(time_slot)
            occupied = {game.court for game in in_slot}
            busy_teams = {team for game in in_slot for team in game.teams}

            for court in range(1, self.courts + 1):
                if court in occupied:
                    continue
                gaps_found += 1

                candidate = self._find_candidate(slots, time_slot, busy_teams)
                if candidate is None:
                    logger.debug("No legal game found for %s court %d", time_slot, court)
                    continue

                self._move(candidate, court, time_slot)
                busy_teams.update(candidate.teams)
                occupied.add(court)
                moved += 1

        return gaps_found, moved

    def _compaction_push(self, slots: List[str]) -> int:
        """Pull games from later slots into the empty courts of earlier ones."""
        moves = 0

        for index, target in enumerate(slots):
            in_target = self._slot_games(target)
            if len(in_target) >= self.courts:
                continue

            occupied = {game.court for game in in_target}
            busy_teams = {team for game in in_target for team in game.teams}

            for source in slots[index + 1:]:
                for game in self._slot_games(source):
                    if busy_teams & game.pair:
                        continue

                    court = next(c for c in range(1, self.courts + 1) if c not in occupied)
                    self._move(game, court, target)
                    busy_teams.update(game.teams)
                    occupied.add(court)
                    moves += 1

                    if len(occupied) >= self.courts:
                        break

                if len(occupied) >= self.courts:
                    break

        return moves


def eliminate_gaps(games: List[Game], courts: int, playable_slots: Iterable[str],
                   max_passes: int = 100) -> List[Game]:
    """
    Convenience function to run gap elimination.

    Args:
        games: Games to compact
        courts: Number of courts
        playable_slots: Slots outside every break, in playing order
        max_passes: Cap on main loop passes

    Returns:
        List[Game]: Relocated games
    """
    return GapEliminator(courts, playable_slots, max_passes).run(games)
