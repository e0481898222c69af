"""
Data ingestion for the tournament scheduler.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .config import Team, Referee
from .models import Schedule

logger = logging.getLogger(__name__)


def _read_table(path: str) -> pd.DataFrame:
    suffix = Path(path).suffix.lower()
    if suffix == '.csv':
        return pd.read_csv(path)
    if suffix in ('.xlsx', '.xls'):
        return pd.read_excel(path)
    raise ValueError(f"Unsupported roster format: {suffix}. Use .csv or .xlsx")


def _cell(row, column: str) -> Optional[str]:
    if column not in row or pd.isna(row[column]):
        return None
    value = str(row[column]).strip()
    return value or None


def load_teams(path: str) -> List[Team]:
    """
    Load teams from a CSV or Excel roster.

    Columns: Name (required), ID, Pool and Color (optional). Missing ids
    become "team-<row number>".

    Args:
        path: Path to roster file

    Returns:
        List[Team]: Teams in file order
    """
    df = _read_table(path)

    if 'Name' not in df.columns:
        raise ValueError(f"Missing required column: Name. Found columns: {list(df.columns)}")

    teams = []
    for index, row in df.iterrows():
        name = _cell(row, 'Name')
        if name is None:
            logger.warning("Skipping roster row %d without a team name", index + 1)
            continue

        pool = _cell(row, 'Pool')
        teams.append(Team(
            id=_cell(row, 'ID') or f"team-{index + 1}",
            name=name,
            pool=int(float(pool)) if pool is not None else None,
            color=_cell(row, 'Color'),
        ))

    return teams


def load_referees(path: str, teams: List[Team]) -> List[Referee]:
    """
    Load referees from a CSV or Excel file.

    Columns: Name (required), ID and Team (optional). Team holds the name of
    the affiliated team and is matched case-insensitively.

    Args:
        path: Path to referee file
        teams: Configured teams, used to resolve affiliations

    Returns:
        List[Referee]: Referees in file order
    """
    df = _read_table(path)

    if 'Name' not in df.columns:
        raise ValueError(f"Missing required column: Name. Found columns: {list(df.columns)}")

    team_ids = {team.name.lower(): team.id for team in teams}

    referees = []
    for index, row in df.iterrows():
        name = _cell(row, 'Name')
        if name is None:
            logger.warning("Skipping referee row %d without a name", index + 1)
            continue

        team_name = _cell(row, 'Team')
        team_id = None
        if team_name is not None:
            team_id = team_ids.get(team_name.lower())
            if team_id is None:
                raise ValueError(f"Referee {name} is affiliated with unknown team: {team_name}")

        referees.append(Referee(
            id=_cell(row, 'ID') or f"ref-{index + 1}",
            name=name,
            team_id=team_id,
        ))

    return referees


def load_schedule(path: str) -> Schedule:
    """Load a schedule written by export.write_json."""
    with open(path, 'r') as f:
        data = json.load(f)
    return Schedule.from_dict(data)
