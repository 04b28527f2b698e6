"""
All-time season history parser

This module implements the SeasonHistoryParser class for the all-time sheet:
a "Team" column followed by one column per season (a block of unknown
width ending at a separator column) whose last four columns are the totals,
optionally followed by a "Champions League" section below the table.
"""

import logging
from typing import Any, Dict, Optional

from .base_parser import BaseParser
from ..core.ingestion import Grid
from ..core.table_assembler import AssemblyOptions, Table, assemble
from ..core.table_detector import (
    discover_by_marker,
    discover_by_separators,
    find_anchor_column,
    find_anchor_row
)
from ..constants import CHAMPIONS_LEAGUE_MARKER, SEASON_TOTALS_COLUMNS, TEAM_COLUMN_CANDIDATES, TEAM_LABEL
from ..exceptions import RequiredColumnNotFound

# Configure logging
logger = logging.getLogger(__name__)


class SeasonHistoryParser(BaseParser):
    """
    Parser for the all-time season history sheet

    Tables: "seasons" (team, season columns and totals) and, when the sheet
    has one, "champions_league". Views: season keys and totals keys.
    """

    shape = 'seasons'

    def __init__(self, totals_columns: int = SEASON_TOTALS_COLUMNS, source_format: str = 'auto'):
        """
        Initialize season history parser

        Args:
            totals_columns: Number of trailing totals columns of the season block
            source_format: Source format passed to ingestion
        """
        super().__init__(source_format)
        self.totals_columns = totals_columns

    def seasons_table(self, grid: Grid) -> Table:
        """
        Assemble the season table using separator-column detection

        Raises:
            RequiredColumnNotFound: If no header row holds a Team cell
            SectionTooSmall: If the block right of Team has fewer than four columns
        """
        header_row = find_anchor_row(grid, TEAM_LABEL, candidates=TEAM_COLUMN_CANDIDATES)
        if header_row < 0:
            raise RequiredColumnNotFound(TEAM_LABEL, 'seasons')
        team_col = find_anchor_column(grid.row(header_row), TEAM_LABEL, TEAM_COLUMN_CANDIDATES)

        block, trailing = discover_by_separators(
            grid,
            header_row=header_row,
            anchor=grid.row(header_row)[team_col],
            trailing=self.totals_columns,
            stop_markers=[CHAMPIONS_LEAGUE_MARKER],
            label='seasons'
        )

        season_cols = list(block.column_range(grid.width))
        total_cols = list(trailing.column_range(grid.width))
        options = AssemblyOptions(
            columns=list(range(team_col + 1)) + season_cols + total_cols,
            cut_trailing=False,
            strategy='separator'
        )
        rows = block._replace(col_start=0, col_end=None)
        table = assemble(grid, rows, options=options)

        index_to_key = {index: key for key, index in table.metadata['columns'].items()}
        table.metadata['season_columns'] = [index_to_key[c] for c in season_cols if c in index_to_key]
        table.metadata['total_columns'] = [index_to_key[c] for c in total_cols if c in index_to_key]
        return table

    def champions_table(self, grid: Grid, start: int = 0) -> Optional[Table]:
        """Assemble the optional "Champions League" section below `start` (ends at the first blank row), or None"""
        sections = discover_by_marker(grid, CHAMPIONS_LEAGUE_MARKER, start=start, required=False,
                                      label='champions_league')
        if not sections or sections[0].header_row < 0:
            return None

        options = AssemblyOptions(primary_key=None, strategy='marker')
        return assemble(grid, sections[0], options=options)

    def build_tables(self, grid: Grid) -> Dict[str, Table]:
        seasons = self.seasons_table(grid)
        tables = {'seasons': seasons}
        champions = self.champions_table(grid, seasons.metadata['section'][1])
        if champions is not None:
            tables['champions_league'] = champions
        return tables

    def build_views(self, tables: Dict[str, Table]) -> Dict[str, Any]:
        seasons = tables['seasons']
        return {
            'team_key': seasons.metadata.get('primary_key'),
            'season_keys': seasons.metadata['season_columns'],
            'total_keys': seasons.metadata['total_columns'],
        }
