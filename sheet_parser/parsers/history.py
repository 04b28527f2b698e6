"""
Season rankings (history) parser

This module implements the HistoryParser class for season ranking sheets
exported as CSV. The header row is the first row whose column B is "Team";
statistics appear twice under identical labels, first as totals and then as
rankings (GP, GP_2, ...). The variant is chosen per parse.
"""

import logging
from typing import Any, Dict, List

from .base_parser import BaseParser
from ..core.comparator import is_lower_better
from ..core.ingestion import Grid
from ..core.sorting import category_extremes, podiums, sort_by_rank
from ..core.table_assembler import AssemblyOptions, Table, assemble
from ..core.table_detector import discover_by_anchor
from ..constants import (
    HISTORY_BASE_COLUMNS,
    HISTORY_LEAGUE_RANK_COLUMN,
    HISTORY_RANK_COLUMN,
    HISTORY_TEAM_COLUMN_INDEX,
    HISTORY_VARIANTS,
    LEAGUE_LABEL,
    TEAM_LABEL
)

# Configure logging
logger = logging.getLogger(__name__)


class HistoryParser(BaseParser):
    """
    Parser for season ranking sheets

    Table: "standings" (every team row). Views, for the selected variant:
    resolved keys, full standings ordered by Category Standing, league
    podiums and per-category best/worst sets.
    """

    shape = 'history'

    def __init__(self, variant: str = 'totals', source_format: str = 'auto'):
        """
        Initialize history parser

        Args:
            variant: 'totals' (first header set) or 'rankings' (second header set)
            source_format: Source format passed to ingestion
        """
        if variant not in HISTORY_VARIANTS:
            raise ValueError(f"Unknown history variant: {variant}")
        super().__init__(source_format)
        self.variant = variant

    @property
    def variant_number(self) -> int:
        return HISTORY_VARIANTS[self.variant]

    def build_tables(self, grid: Grid) -> Dict[str, Table]:
        boundary = discover_by_anchor(
            grid,
            TEAM_LABEL,
            column=HISTORY_TEAM_COLUMN_INDEX,
            stop_at_blank=False,
            label='history'
        )[0]

        options = AssemblyOptions(
            primary_key=TEAM_LABEL,
            primary_candidates=(),
            required_keys=(LEAGUE_LABEL,),
            strategy='anchor'
        )
        return {'standings': assemble(grid, boundary, options=options)}

    def is_higher_better(self, base_label: str) -> bool:
        """Polarity of a category for the selected variant; rankings are always lower-is-better"""
        if self.variant == 'rankings':
            return False
        return not is_lower_better(base_label)

    def has_second_set(self, table: Table) -> bool:
        """Check whether any record has a value in the second header set"""
        labels = [HISTORY_RANK_COLUMN, HISTORY_LEAGUE_RANK_COLUMN] + HISTORY_BASE_COLUMNS
        return any(table.has_values(f"{label}_2") for label in labels if f"{label}_2" in table.headers)

    def category_highlights(self, table: Table, keys: Dict[str, str]) -> Dict[str, Dict[str, set]]:
        """
        Best and worst teams per category

        Args:
            table: Standings table
            keys: Resolved key per base label

        Returns:
            Dictionary of resolved key -> {"top": set, "bottom": set}
        """
        highlights = {}
        for base_label in HISTORY_BASE_COLUMNS:
            key = keys[base_label]
            top, bottom = category_extremes(
                table.records,
                key,
                TEAM_LABEL,
                higher_is_better=self.is_higher_better(base_label)
            )
            highlights[key] = {'top': top, 'bottom': bottom}
        return highlights

    def build_views(self, tables: Dict[str, Table]) -> Dict[str, Any]:
        table = tables['standings']
        variant = self.variant_number

        second_set = self.has_second_set(table)
        if self.variant == 'rankings' and not second_set:
            logger.warning("Second header set not detected; rankings fall back to the first set")

        rank_key = table.resolve_key(HISTORY_RANK_COLUMN, variant)
        league_rank_key = table.resolve_key(HISTORY_LEAGUE_RANK_COLUMN, variant)
        keys = table.resolve_keys(HISTORY_BASE_COLUMNS, variant)

        league_podiums: List = []
        if table.has_values(LEAGUE_LABEL) and table.has_values(league_rank_key):
            league_podiums = podiums(table.records, LEAGUE_LABEL, league_rank_key)

        return {
            'variant': self.variant,
            'has_second_set': second_set,
            'rank_key': rank_key,
            'league_rank_key': league_rank_key,
            'columns': [keys[label] for label in HISTORY_BASE_COLUMNS],
            'full_standings': sort_by_rank(table.records, rank_key),
            'podiums': league_podiums,
            'highlights': self.category_highlights(table, keys),
        }
