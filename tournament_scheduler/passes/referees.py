"""
Referee assignment pass.
"""

import logging
from typing import List, Dict, Optional, Set

from ..config import TournamentConfig, Referee
from ..models import Game
from ..timeslots import order_time_slots

logger = logging.getLogger(__name__)


class RefereeAssigner:
    """
    Recomputes every referee assignment from scratch.

    Slots are processed in playing order and games within a slot in their
    existing order. A referee is eligible for a game when they are not
    affiliated with either team, their own team is not playing anywhere in
    the slot, they are not already officiating in the slot, and they did not
    officiate in the previous slot that holds games.
    """

    def __init__(self, config: TournamentConfig):
        self.config = config
        self.unassigned = 0

    def assign(self, games: List[Game], day_start: Optional[str] = None) -> List[Game]:
        """
        Assign referees to games.

        Args:
            games: Games to officiate; their current referees are discarded
            day_start: First slot of the day, used to order slots

        Returns:
            List[Game]: New game list in the same order
        """
        day_start = day_start or self.config.start_time
        slots = order_time_slots((game.time_slot for game in games), day_start)

        by_slot: Dict[str, List[Game]] = {}
        for game in games:
            by_slot.setdefault(game.time_slot, []).append(game)

        last_assignment: Dict[str, str] = {}
        assigned: Dict[str, Game] = {}
        self.unassigned = 0

        for index, time_slot in enumerate(slots):
            previous = slots[index - 1] if index > 0 else None
            in_slot = by_slot[time_slot]
            playing = {team for game in in_slot for team in game.teams}
            busy: Set[str] = set()

            for game in in_slot:
                referee = None
                if self.config.get_team(game.team1_id) and self.config.get_team(game.team2_id):
                    referee = self._find_referee(game, busy, playing, previous, last_assignment)

                if referee is None:
                    self.unassigned += 1
                    assigned[game.game_id] = game.with_referee(None)
                    logger.debug("No available referee for game %s at %s", game.game_id, time_slot)
                    continue

                busy.add(referee.id)
                last_assignment[referee.id] = time_slot
                assigned[game.game_id] = game.with_referee(referee.id)
                logger.debug("Assigned referee %s to game %s at %s", referee.name, game.game_id, time_slot)

        if self.unassigned:
            logger.info("%d game(s) left without a referee", self.unassigned)

        return [assigned[game.game_id] for game in games]

    def _find_referee(self, game: Game, busy: Set[str], playing: Set[str],
                      previous: Optional[str], last_assignment: Dict[str, str]) -> Optional[Referee]:
        for referee in self.config.referees:
            if game.involves(referee.team_id):
                continue
            if referee.team_id is not None and referee.team_id in playing:
                continue
            if referee.id in busy:
                continue
            if previous is not None and last_assignment.get(referee.id) == previous:
                continue
            return referee
        return None


def assign_referees(games: List[Game], config: TournamentConfig,
                    day_start: Optional[str] = None) -> List[Game]:
    """Convenience function to run referee assignment."""
    return RefereeAssigner(config).assign(games, day_start)
