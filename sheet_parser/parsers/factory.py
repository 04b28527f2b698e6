"""
Parser lookup by sheet shape name

Maps the shape names used on the command line to configured parser instances.
"""

from typing import Optional

from .base_parser import BaseParser
from .history import HistoryParser
from .matchup import MatchupParser
from .playoffs import PlayoffParser
from .seasons import SeasonHistoryParser
from .standings import StandingsParser
from .teams import TeamsParser

SHAPES = ['standings', 'weekly', 'matchup', 'history', 'playouts', 'playoffs', 'teams', 'seasons']


def create_parser(shape: str, league: Optional[str] = None, variant: str = 'totals',
                  source_format: str = 'auto') -> BaseParser:
    """
    Create the parser for a sheet shape

    Args:
        shape: One of SHAPES
        league: League filter (playouts/playoffs only)
        variant: 'totals' or 'rankings' (history only)
        source_format: Source format passed to ingestion

    Returns:
        Configured parser

    Raises:
        ValueError: If the shape is unknown
    """
    if shape == 'standings':
        return StandingsParser('general', source_format)
    if shape == 'weekly':
        return StandingsParser('weekly', source_format)
    if shape == 'matchup':
        return MatchupParser(source_format)
    if shape == 'history':
        return HistoryParser(variant, source_format)
    if shape in ('playouts', 'playoffs'):
        return PlayoffParser(shape, league, source_format)
    if shape == 'teams':
        return TeamsParser(source_format)
    if shape == 'seasons':
        return SeasonHistoryParser(source_format=source_format)
    raise ValueError(f"Unknown sheet shape: {shape} (expected one of {', '.join(SHAPES)})")
