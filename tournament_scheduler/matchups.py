"""
Matchup generation for round-robin pools.
"""

import random
from typing import List, Dict, Optional, Sequence

from .config import Team
from .models import Matchup, Game


def generate_round_robin(teams: Sequence[Team], pool: Optional[int] = None) -> List[Matchup]:
    """
    Generate one matchup for every unordered pair of teams.

    Pairs are emitted in input order: (0, 1), (0, 2), ... (1, 2), ...

    Args:
        teams: Teams that all play each other
        pool: Pool number stamped on every matchup

    Returns:
        List[Matchup]: List of matchups
    """
    matchups = []
    for i, team1 in enumerate(teams):
        for team2 in teams[i + 1:]:
            matchups.append(Matchup(team1_id=team1.id, team2_id=team2.id, pool=pool))
    return matchups


def generate_matchups(teams: Sequence[Team], pools: int) -> List[Matchup]:
    """
    Generate the unique matchups of a tournament.

    With a single pool every team meets every other team once and matchups
    carry no pool. With several pools teams only meet teams of their own
    pool, pool by pool in ascending order.

    Args:
        teams: Teams in roster order
        pools: Number of pools

    Returns:
        List[Matchup]: Matchups in deterministic order
    """
    if pools <= 1:
        return generate_round_robin(teams)

    all_matchups = []
    for pool in range(1, pools + 1):
        pool_teams = [team for team in teams if team.pool == pool]
        all_matchups.extend(generate_round_robin(pool_teams, pool))
    return all_matchups


def shuffle_matchups(matchups: Sequence[Matchup], rng: random.Random) -> List[Matchup]:
    """Return a shuffled copy of the matchups."""
    shuffled = list(matchups)
    rng.shuffle(shuffled)
    return shuffled


def remove_duplicate_games(games: Sequence[Game]) -> List[Game]:
    """Keep only the first game of every unordered team pair."""
    unique_games = []
    seen = set()
    for game in games:
        if game.pair in seen:
            continue
        seen.add(game.pair)
        unique_games.append(game)
    return unique_games


def get_matchup_summary(matchups: Sequence[Matchup]) -> Dict:
    """
    Get summary statistics for matchups.

    Args:
        matchups: List of matchups

    Returns:
        Dict: Summary statistics
    """
    if not matchups:
        return {}

    pool_counts = {}
    team_game_counts = {}

    for matchup in matchups:
        pool_counts[matchup.pool] = pool_counts.get(matchup.pool, 0) + 1
        for team_id in matchup.teams:
            team_game_counts[team_id] = team_game_counts.get(team_id, 0) + 1

    return {
        'total_matchups': len(matchups),
        'pools': pool_counts,
        'teams': len(team_game_counts),
        'avg_games_per_team': sum(team_game_counts.values()) / len(team_game_counts),
    }
