"""
Export functionality for writing schedules to Excel and JSON.
"""

import json
import logging
from typing import Dict, List, Optional

import pandas as pd

from .config import TournamentConfig
from .models import Game, Schedule
from .timeslots import time_to_minutes

logger = logging.getLogger(__name__)


def write_excel(schedule: Schedule, config: TournamentConfig, output_path: str,
                team_id: Optional[str] = None, referee_id: Optional[str] = None) -> None:
    """
    Write schedule to Excel file with summary sheets.

    Args:
        schedule: Schedule to export
        config: Tournament configuration
        output_path: Path to output Excel file
        team_id: Restrict the grid to one team's games
        referee_id: Restrict the grid to one referee's games
    """
    logger.info("Writing schedule to %s", output_path)

    with pd.ExcelWriter(output_path, engine='xlsxwriter') as writer:
        _write_grid(schedule, config, writer, team_id, referee_id)
        _write_games(schedule, config, writer)
        _write_team_summary(schedule, config, writer)
        _write_referee_summary(schedule, config, writer)

    logger.info("Schedule exported successfully to %s", output_path)


def write_json(schedule: Schedule, output_path: str) -> None:
    """Write the games and slot sequence of a schedule as JSON."""
    with open(output_path, 'w') as f:
        json.dump(schedule.to_dict(), f, indent=2)


def _filter_label(config: TournamentConfig, team_id: Optional[str], referee_id: Optional[str]) -> str:
    if team_id is not None:
        return f"Schedule for: {config.team_name(team_id)}"
    if referee_id is not None:
        referee = config.get_referee(referee_id)
        return f"Referee: {referee.name if referee else 'Unknown Referee'}"
    return "Full Schedule"


def _cell_text(game: Game, config: TournamentConfig) -> str:
    text = f"{config.team_name(game.team1_id)} vs {config.team_name(game.team2_id)}"
    if game.referee_id:
        referee = config.get_referee(game.referee_id)
        text += f" (Ref: {referee.name if referee else game.referee_id})"
    return text


def grid_dataframe(schedule: Schedule, config: TournamentConfig,
                   team_id: Optional[str] = None, referee_id: Optional[str] = None) -> pd.DataFrame:
    """
    Build the (time slot x court) grid shown to players.

    Break slots without games appear as a single BREAK row.
    """
    games = schedule.games
    if team_id is not None:
        games = [g for g in games if g.involves(team_id)]
    if referee_id is not None:
        games = [g for g in games if g.referee_id == referee_id]

    cells: Dict[tuple, Game] = {(g.time_slot, g.court): g for g in games}
    court_columns = [f"Court {court}" for court in range(1, config.courts + 1)]

    rows = []
    for time_slot in schedule.grid_time_slots(config):
        has_games = bool(schedule.games_in_slot(time_slot))
        row = {'Time': time_slot}
        if schedule.is_break_slot(time_slot, config) and not has_games:
            for column in court_columns:
                row[column] = "BREAK"
        else:
            for court, column in enumerate(court_columns, start=1):
                game = cells.get((time_slot, court))
                row[column] = _cell_text(game, config) if game else ""
        rows.append(row)

    return pd.DataFrame(rows, columns=['Time'] + court_columns)


def _write_grid(schedule: Schedule, config: TournamentConfig, writer,
                team_id: Optional[str], referee_id: Optional[str]) -> None:
    """Write the main schedule grid sheet."""
    sheet_name = 'Schedule'
    df = grid_dataframe(schedule, config, team_id, referee_id)
    df.to_excel(writer, sheet_name=sheet_name, index=False, startrow=2)

    worksheet = writer.sheets[sheet_name]
    workbook = writer.book

    title_format = workbook.add_format({'bold': True, 'font_size': 14})
    worksheet.write(0, 0, config.tournament_name, title_format)
    worksheet.write(1, 0, _filter_label(config, team_id, referee_id))

    _format_header(worksheet, workbook, df, header_row=2)
    worksheet.set_column(0, 0, 8)
    worksheet.set_column(1, len(df.columns), 32)


def _write_games(schedule: Schedule, config: TournamentConfig, writer) -> None:
    """Write the flat game list."""
    df = schedule.to_dataframe(config)
    if df.empty:
        logger.warning("No games to export")
        return

    df.to_excel(writer, sheet_name='Games', index=False)
    _format_header(writer.sheets['Games'], writer.book, df)


def team_summary_dataframe(schedule: Schedule, config: TournamentConfig) -> pd.DataFrame:
    """Per-team statistics: games, first and last slot, back-to-backs, courts."""
    window = config.weights.back_to_back_window
    grouped = schedule.group_by_team()

    team_data = []
    for team in config.teams:
        games = grouped.get(team.id, [])
        back_to_back = 0
        for earlier, later in zip(games, games[1:]):
            if abs(time_to_minutes(later.time_slot) - time_to_minutes(earlier.time_slot)) <= window:
                back_to_back += 1

        team_data.append({
            'Team': team.name,
            'Pool': team.pool,
            'Color': team.color,
            'Games': len(games),
            'First Game': games[0].time_slot if games else '',
            'Last Game': games[-1].time_slot if games else '',
            'Back-to-Back': back_to_back,
            'Courts Used': ", ".join(str(c) for c in sorted({g.court for g in games})),
        })

    return pd.DataFrame(team_data)


def _write_team_summary(schedule: Schedule, config: TournamentConfig, writer) -> None:
    """Write team summary statistics."""
    df = team_summary_dataframe(schedule, config)
    if df.empty:
        return
    df.to_excel(writer, sheet_name='Team Summary', index=False)
    _format_header(writer.sheets['Team Summary'], writer.book, df)


def _write_referee_summary(schedule: Schedule, config: TournamentConfig, writer) -> None:
    """Write one row per referee with the slots they work."""
    referee_data = []
    for referee in config.referees:
        games: List[Game] = schedule.get_referee_schedule(referee.id)
        referee_data.append({
            'Referee': referee.name,
            'Team': config.team_name(referee.team_id) if referee.team_id else '',
            'Games': len(games),
            'Slots': ", ".join(f"{g.time_slot} (Court {g.court})" for g in games),
        })

    df = pd.DataFrame(referee_data, columns=['Referee', 'Team', 'Games', 'Slots'])
    df.to_excel(writer, sheet_name='Referees', index=False)
    _format_header(writer.sheets['Referees'], writer.book, df)


def _format_header(worksheet, workbook, df: pd.DataFrame, header_row: int = 0) -> None:
    """Apply header formatting and column widths."""
    header_format = workbook.add_format({
        'bold': True,
        'text_wrap': True,
        'valign': 'top',
        'fg_color': '#D7E4BC',
        'border': 1
    })

    for col_num, value in enumerate(df.columns.values):
        worksheet.write(header_row, col_num, value, header_format)
        width = max(len(str(value)), *(len(str(v)) for v in df[value].tolist())) if len(df) else len(str(value))
        worksheet.set_column(col_num, col_num, min(max(width + 2, 8), 40))
