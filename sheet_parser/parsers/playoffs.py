"""
Playouts and playoffs parser

This module implements the PlayoffParser class for the playouts and playoffs
sheets: one row per team, opponents on consecutive rows, optionally spanning
several leagues distinguished by a "League" column.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from .base_parser import BaseParser
from ..core.column_processor import canonicalize
from ..core.comparator import compare_entities, detect_stat_keys, pair_records
from ..core.ingestion import Grid
from ..core.table_assembler import AssemblyOptions, Table, assemble
from ..core.value_normalizer import normalize_text
from ..constants import BYE_TEAM, DEFAULT_PLAYOFF_ROUND, LEAGUE_LABEL, PLAYOFF_ROUNDS
from ..utils.league_helpers import same_league

# Configure logging
logger = logging.getLogger(__name__)

PLAYOUTS = 'playouts'
PLAYOFFS = 'playoffs'
KINDS = (PLAYOUTS, PLAYOFFS)


def detect_round(labels: Sequence[str]) -> str:
    """
    Detect the playoff round from header labels

    Args:
        labels: Column labels (merged title cells included)

    Returns:
        Round title, "PLAYOFFS" when no round phrase is present
    """
    joined = normalize_text(' '.join(labels))
    for phrase, title in PLAYOFF_ROUNDS:
        if phrase in joined:
            return title
    return DEFAULT_PLAYOFF_ROUND


class PlayoffParser(BaseParser):
    """
    Parser for playouts and playoffs sheets

    Table: "teams" (rows of the selected league, empty and bye teams
    removed). Views: round title, team key, stat keys, pairs and the W/L/T
    record of each pair.
    """

    def __init__(self, kind: str = PLAYOFFS, league: Optional[str] = None,
                 source_format: str = 'auto'):
        """
        Initialize playoff parser

        Args:
            kind: 'playouts' or 'playoffs'
            league: League to keep (all leagues when None)
            source_format: Source format passed to ingestion
        """
        if kind not in KINDS:
            raise ValueError(f"Unknown playoff kind: {kind}")
        super().__init__(source_format)
        self.kind = kind
        self.shape = kind
        self.league = league

    def keep_record(self, record, team_key: str, league_key: Optional[str]) -> bool:
        """Check whether a record belongs to the selected league and is a real team"""
        team = normalize_text(record.get(team_key))
        if not team or team == BYE_TEAM:
            return False
        if self.league and league_key:
            return same_league(record.get(league_key), self.league)
        return True

    def build_tables(self, grid: Grid) -> Dict[str, Table]:
        source, boundary = self.header_section(grid, label=self.kind)
        header_cells = source.row(boundary.header_row)
        keys = canonicalize(header_cells)
        team_key = self.require_team_key([k for k in keys if k], self.kind)

        options = AssemblyOptions(primary_key=team_key, primary_candidates=(), strategy='labels')
        table = assemble(source, boundary, options=options)

        league_key = table.find_key(LEAGUE_LABEL)
        records = [r for r in table.records if self.keep_record(r, team_key, league_key)]
        removed = len(table) - len(records)
        if removed:
            logger.debug(f"Filtered {removed} {self.kind} rows (bye, other leagues)")

        metadata = dict(table.metadata)
        metadata['filtered_rows'] = removed
        metadata['round'] = detect_round(header_cells)
        return {'teams': Table(table.headers, records, metadata)}

    def build_views(self, tables: Dict[str, Table]) -> Dict[str, Any]:
        table = tables['teams']
        team_key = table.metadata.get('primary_key')
        pairs = pair_records(table.records)
        stat_keys = detect_stat_keys(table.headers, team_key)
        return {
            'round': table.metadata.get('round', DEFAULT_PLAYOFF_ROUND),
            'team_key': team_key,
            'stat_keys': stat_keys,
            'pairs': pairs,
            'results': [compare_entities(a, b, stat_keys) for a, b in pairs],
        }
