"""
Division standings parser

This module implements the StandingsParser class for general and weekly
division standings sheets. Both are exported with column labels as the
header; the general mode hides the raw statistic columns, the weekly mode
keeps columns only up to the first "TO".
"""

import logging
from typing import Any, Dict

from .base_parser import BaseParser
from ..core.column_processor import canonicalize
from ..core.ingestion import Grid
from ..core.sorting import default_sort
from ..core.table_assembler import AssemblyOptions, Table, assemble
from ..constants import HIDE_GENERAL_COLUMNS, HIDE_GENERAL_PREFIXES, RANK_LABEL

# Configure logging
logger = logging.getLogger(__name__)

GENERAL = 'general'
WEEKLY = 'weekly'
MODES = (GENERAL, WEEKLY)


class StandingsParser(BaseParser):
    """
    Parser for general and weekly division standings

    Produces one table, "standings", and a "ranked" view sorted by Rank
    ascending when the sheet has a Rank column.
    """

    def __init__(self, mode: str = GENERAL, source_format: str = 'auto'):
        """
        Initialize standings parser

        Args:
            mode: 'general' or 'weekly'
            source_format: Source format passed to ingestion
        """
        if mode not in MODES:
            raise ValueError(f"Unknown standings mode: {mode}")
        super().__init__(source_format)
        self.mode = mode
        self.shape = 'standings' if mode == GENERAL else 'weekly'

    def build_options(self, team_key: str) -> AssemblyOptions:
        """
        Assembly options of the current mode

        Args:
            team_key: Header key of the team column

        Returns:
            AssemblyOptions with the column rules of the mode
        """
        options = AssemblyOptions(
            primary_key=team_key,
            primary_candidates=(),
            drop_dash_columns=True,
            strategy=f"labels:{self.mode}"
        )
        if self.mode == GENERAL:
            options.hidden_headers = tuple(HIDE_GENERAL_COLUMNS)
            options.hidden_prefixes = tuple(HIDE_GENERAL_PREFIXES)
        else:
            options.stop_after = 'TO'
        return options

    def build_tables(self, grid: Grid) -> Dict[str, Table]:
        source, boundary = self.header_section(grid, label=self.shape)
        keys = canonicalize(source.row(boundary.header_row))
        team_key = self.require_team_key([k for k in keys if k])

        table = assemble(source, boundary, options=self.build_options(team_key))
        logger.debug(f"{self.mode} standings columns: {list(table.headers)}")
        return {'standings': table}

    def build_views(self, tables: Dict[str, Table]) -> Dict[str, Any]:
        table = tables['standings']
        return {
            'team_key': table.metadata.get('primary_key'),
            'ranked': default_sort(table),
            'has_rank': table.find_key(RANK_LABEL) is not None,
        }
