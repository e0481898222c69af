"""
Core scheduling engine using greedy assignment with post-processing passes.
"""

import logging
import random
from collections import defaultdict
from typing import List, Dict, Optional, Set, Tuple

from .config import TournamentConfig, ScoringWeights
from .matchups import generate_matchups, shuffle_matchups, remove_duplicate_games
from .models import Game, Matchup, Schedule, TeamState
from .passes import GapEliminator, RefereeAssigner
from .timeslots import TimeSlotSequencer, is_during_breaks
from .validation import validate_schedule, validate_referee_assignments

logger = logging.getLogger(__name__)


class SlotScorer:
    """Scores a candidate (slot, court) for a matchup. Higher is better."""

    def __init__(self, weights: ScoringWeights):
        self.weights = weights

    def score(self, matchup: Matchup, time_slot: str, court: int,
              team_states: Dict[str, TeamState]) -> float:
        """
        Calculate score for a slot-court-matchup combination.

        Starts from the base score and subtracts, for each team:
        a back-to-back penalty if its last game started within the window,
        a streak penalty if it is already on a streak, and a court repeat
        penalty per game it has played on this court.
        """
        w = self.weights
        score = w.base

        for team_id in matchup.teams:
            state = team_states[team_id]
            if state.is_back_to_back(time_slot, w.back_to_back_window):
                score -= w.back_to_back_penalty
            if state.consecutive_games >= w.streak_threshold:
                score -= w.streak_penalty
            score -= state.games_on_court(court) * w.court_repeat_penalty

        return score


class GreedyAssigner:
    """
    Places matchups on the (slot, court) grid one at a time.

    All trackers belong to one instance and one generation run.
    """

    def __init__(self, config: TournamentConfig, sequencer: TimeSlotSequencer,
                 scorer: Optional[SlotScorer] = None):
        self.config = config
        self.sequencer = sequencer
        self.scorer = scorer or SlotScorer(config.weights)

        self.team_states: Dict[str, TeamState] = {
            team.id: TeamState(team_id=team.id) for team in config.teams
        }
        self.busy_teams: Dict[str, Set[str]] = defaultdict(set)
        self.busy_courts: Dict[str, Set[int]] = defaultdict(set)
        self.busy_referees: Dict[str, Set[str]] = defaultdict(set)
        self.games: List[Game] = []
        self.extensions = 0

    def assign(self, matchups: List[Matchup]) -> List[Game]:
        """
        Assign every matchup to a slot and court.

        Args:
            matchups: Matchups in the order they should be placed

        Returns:
            List[Game]: One game per matchup
        """
        cursor = 0

        for matchup in matchups:
            for team_id in matchup.teams:
                self.team_states.setdefault(team_id, TeamState(team_id=team_id))

            best_slot, best_court, score = self._select_best_cell(matchup, cursor)

            if best_slot is not None:
                self._place(matchup, best_slot, best_court)
                logger.debug("Placed %s vs %s at %s court %d (score: %.1f)",
                             matchup.team1_id, matchup.team2_id, best_slot, best_court, score)
            else:
                new_slot = self._extend_horizon()
                self._place(matchup, new_slot, 1)
                logger.debug("No legal cell for %s vs %s, placed at new slot %s",
                             matchup.team1_id, matchup.team2_id, new_slot)

            cursor = (cursor + 1) % len(self.sequencer)

        return list(self.games)

    def _select_best_cell(self, matchup: Matchup, cursor: int) -> Tuple[Optional[str], Optional[int], float]:
        """Scan slots from the cursor and courts in order; first strictly best cell wins."""
        best_slot = None
        best_court = None
        best_score = 0.0

        slot_count = len(self.sequencer)
        for offset in range(slot_count):
            time_slot = self.sequencer[(cursor + offset) % slot_count]

            if self._is_break(time_slot):
                continue

            busy = self.busy_teams[time_slot]
            if matchup.team1_id in busy or matchup.team2_id in busy:
                continue

            for court in range(1, self.config.courts + 1):
                if court in self.busy_courts[time_slot]:
                    continue

                score = self.scorer.score(matchup, time_slot, court, self.team_states)
                if best_slot is None or score > best_score:
                    best_slot, best_court, best_score = time_slot, court, score

        return best_slot, best_court, best_score

    def _extend_horizon(self) -> str:
        """Add slots until one lies outside every break."""
        new_slot = self.sequencer.extend()
        self.extensions += 1
        while self._is_break(new_slot):
            new_slot = self.sequencer.extend()
            self.extensions += 1
        return new_slot

    def _is_break(self, time_slot: str) -> bool:
        return is_during_breaks(time_slot, self.config.breaks, self.config.game_duration)

    def _provisional_referee(self, matchup: Matchup, time_slot: str) -> Optional[str]:
        """First referee unaffiliated with either team and free in the slot."""
        for referee in self.config.referees:
            if referee.team_id is not None and referee.team_id in matchup.teams:
                continue
            if referee.id in self.busy_referees[time_slot]:
                continue
            return referee.id
        return None

    def _place(self, matchup: Matchup, time_slot: str, court: int) -> Game:
        referee_id = self._provisional_referee(matchup, time_slot)
        game = Game(
            game_id=str(len(self.games) + 1),
            team1_id=matchup.team1_id,
            team2_id=matchup.team2_id,
            court=court,
            time_slot=time_slot,
            pool=matchup.pool,
            referee_id=referee_id,
        )
        self.games.append(game)

        self.busy_teams[time_slot].update(matchup.teams)
        self.busy_courts[time_slot].add(court)
        if referee_id is not None:
            self.busy_referees[time_slot].add(referee_id)

        window = self.config.weights.back_to_back_window
        for team_id in matchup.teams:
            self.team_states[team_id].update_after_game(time_slot, court, window)

        return game


class SchedulingEngine:
    """Runs the full generation pipeline for one tournament."""

    def __init__(self, config: TournamentConfig, rng: Optional[random.Random] = None):
        self.config = config
        self.rng = rng if rng is not None else random.Random(config.seed)

    def schedule(self) -> Schedule:
        """
        Main scheduling function.

        Matchups are generated and shuffled, placed greedily, de-duplicated,
        compacted and given referees. The batch validators run last; their
        findings are logged and stored on the schedule, never raised.

        Returns:
            Schedule: Complete schedule
        """
        config = self.config

        matchups = generate_matchups(config.teams, config.pools)
        logger.info("Generated %d matchups for %d teams in %d pool(s)",
                    len(matchups), len(config.teams), config.pools)

        sequencer = TimeSlotSequencer.from_config(config)
        assigner = GreedyAssigner(config, sequencer)
        games = assigner.assign(shuffle_matchups(matchups, self.rng))
        if assigner.extensions:
            logger.info("Horizon extended by %d slot(s)", assigner.extensions)

        games = remove_duplicate_games(games)

        eliminator = GapEliminator(
            courts=config.courts,
            playable_slots=sequencer.playable(config.breaks, config.game_duration),
            max_passes=config.max_gap_passes,
        )
        games = eliminator.run(games)

        games = RefereeAssigner(config).assign(games, day_start=config.start_time)

        violations = {
            'schedule': validate_schedule(games, config),
            'referees': validate_referee_assignments(games, config),
        }
        for kind, messages in violations.items():
            for message in messages:
                logger.warning("%s violation: %s", kind, message)

        logger.info("Scheduled %d games over %d slot(s)", len(games),
                    len(set(g.time_slot for g in games)))

        return Schedule(
            games=games,
            time_slots=sequencer.slots,
            matchups=matchups,
            day_start=config.start_time,
            violations=violations,
            gap_report=eliminator.report(),
        )


def generate_schedule(config: TournamentConfig, rng: Optional[random.Random] = None) -> Schedule:
    """
    Convenience function to run the scheduler.

    Args:
        config: Tournament configuration
        rng: Optional random source; defaults to one seeded from config.seed

    Returns:
        Schedule: Complete schedule
    """
    engine = SchedulingEngine(config, rng)
    return engine.schedule()
