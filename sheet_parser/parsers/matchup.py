"""
League matchup parser

This module implements the MatchupParser class for league matchup sheets,
which hold two stacked tables:
- "MATCHUP LIVE RESULTS": one row per team, opponents on consecutive rows
- "STANDINGS BEFORE MATCHUP / TOTAL STATISTICS": a fixed 16-column block
"""

import logging
from typing import Any, Dict, Optional

from .base_parser import BaseParser
from ..core.column_processor import canonicalize
from ..core.comparator import compare_entities, detect_stat_keys, pair_records
from ..core.data_cleaner import has_rank_values
from ..core.ingestion import Grid
from ..core.table_assembler import AssemblyOptions, Table, assemble
from ..core.table_detector import (
    SectionBoundary,
    discover_by_anchor,
    discover_by_marker,
    find_anchor_column,
    find_marker_row
)
from ..constants import (
    MATCHUP_TITLE_MARKER,
    RANK_PROBE_ROWS,
    STANDINGS_BEFORE_HEADERS,
    STANDINGS_BEFORE_MAX_ROWS,
    STANDINGS_TITLE_MARKER,
    STANDINGS_TOTALS_MARKER,
    TEAM_LABEL
)
from ..exceptions import SectionTooSmall

# Configure logging
logger = logging.getLogger(__name__)


class MatchupParser(BaseParser):
    """
    Parser for league matchup sheets

    Tables: "matchup" (always) and "standings" (when the standings marker
    row exists). Views: team key, stat keys, matchup pairs and the W/L/T
    record of each pair.
    """

    shape = 'matchup'

    def matchup_from_title(self, grid: Grid, title_row: int) -> Table:
        """
        Assemble the matchup table below its title row

        The header is the next row holding a "Team" cell; a column of
        integers right before Team is included as Rank.

        Args:
            grid: Ingested grid
            title_row: Index of the "matchup live results" row

        Returns:
            Matchup table
        """
        boundary = discover_by_anchor(
            grid,
            TEAM_LABEL,
            start=title_row + 1,
            stop_markers=[STANDINGS_TITLE_MARKER],
            stop_at_blank=True,
            label='matchup'
        )[0]

        team_col = find_anchor_column(grid.row(boundary.header_row), TEAM_LABEL)
        rows = [grid.row(i) for i in range(boundary.start, boundary.end)]
        first = team_col
        if team_col > 0 and has_rank_values(rows, team_col - 1, RANK_PROBE_ROWS):
            first = team_col - 1

        options = AssemblyOptions(
            columns=range(first, grid.width),
            leading_rank=True,
            stop_markers=[STANDINGS_TITLE_MARKER],
            strategy='marker+anchor'
        )
        return assemble(grid, boundary, options=options)

    def matchup_from_labels(self, grid: Grid) -> Table:
        """Assemble the matchup table from the label row, ending at the standings marker"""
        source, boundary = self.header_section(grid, [STANDINGS_TOTALS_MARKER], label='matchup')
        keys = canonicalize(source.row(boundary.header_row))
        team_key = self.require_team_key([k for k in keys if k], 'matchup')

        options = AssemblyOptions(primary_key=team_key, primary_candidates=(), strategy='labels')
        return assemble(source, boundary, options=options)

    def standings_before(self, grid: Grid) -> Optional[Table]:
        """
        Assemble the fixed-layout standings block

        Data starts after one header row below the marker, holds at most 12
        rows and ends at the first row with an empty rank or team.

        Args:
            grid: Ingested grid

        Returns:
            Standings table, or None when the sheet has no standings marker

        Raises:
            SectionTooSmall: If the sheet has fewer than 16 columns
        """
        sections = discover_by_marker(
            grid,
            STANDINGS_TOTALS_MARKER,
            stop_at_blank=False,
            required=False,
            label='standings'
        )
        if not sections:
            logger.warning("Standings marker row not found; sheet has no standings block")
            return None

        need = len(STANDINGS_BEFORE_HEADERS)
        if grid.width < need:
            raise SectionTooSmall(grid.width, need, 'standings before matchup')

        section = sections[0]
        options = AssemblyOptions(
            primary_key=TEAM_LABEL,
            primary_candidates=(),
            required_keys=('#',),
            headers=STANDINGS_BEFORE_HEADERS,
            columns=range(need),
            max_rows=STANDINGS_BEFORE_MAX_ROWS,
            stop_on_missing_key=True,
            cut_trailing=False,
            trim_noise=False,
            strategy='marker'
        )
        return assemble(grid, SectionBoundary(section.start, section.end, -1, label='standings'),
                        options=options)

    def build_tables(self, grid: Grid) -> Dict[str, Table]:
        title_row = find_marker_row(grid, MATCHUP_TITLE_MARKER)
        if title_row >= 0:
            matchup = self.matchup_from_title(grid, title_row)
        else:
            matchup = self.matchup_from_labels(grid)

        tables = {'matchup': matchup}
        standings = self.standings_before(grid)
        if standings is not None:
            tables['standings'] = standings
        return tables

    def build_views(self, tables: Dict[str, Table]) -> Dict[str, Any]:
        matchup = tables['matchup']
        team_key = matchup.metadata.get('primary_key')
        stat_keys = detect_stat_keys(matchup.headers, team_key)
        pairs = pair_records(matchup.records)
        results = [compare_entities(a, b, stat_keys) for a, b in pairs]
        return {
            'team_key': team_key,
            'stat_keys': stat_keys,
            'pairs': pairs,
            'results': results,
        }
