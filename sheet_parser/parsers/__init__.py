"""
Parser implementations for spreadsheet shapes

Contains:
- BaseParser: Abstract base class with shared logic
- StandingsParser: General and weekly division standings
- MatchupParser: League matchup sheet (live results + standings before matchup)
- HistoryParser: Season rankings with totals/rankings header sets
- PlayoffParser: Playouts and playoffs pairs
- TeamsParser: Team directory
- SeasonHistoryParser: All-time season history
"""

from .base_parser import BaseParser, ParsedSheet, find_team_key
from .standings import StandingsParser
from .matchup import MatchupParser
from .history import HistoryParser
from .playoffs import PlayoffParser, detect_round
from .teams import TeamsParser, TeamDirectory, TeamEntry, get_first
from .seasons import SeasonHistoryParser
from .factory import SHAPES, create_parser

__all__ = [
    'BaseParser',
    'ParsedSheet',
    'find_team_key',
    'StandingsParser',
    'MatchupParser',
    'HistoryParser',
    'PlayoffParser',
    'detect_round',
    'TeamsParser',
    'TeamDirectory',
    'TeamEntry',
    'get_first',
    'SeasonHistoryParser',
    'SHAPES',
    'create_parser'
]
