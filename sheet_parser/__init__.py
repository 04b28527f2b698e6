"""
Sheet Parser - extraction and normalization engine for hand-kept spreadsheet exports

This package turns raw spreadsheet exports (CSV or GViz JSON) without a
stable schema into typed, addressable, de-duplicated tables:
- Grid ingestion, value classification and header canonicalization
- Section discovery by marker rows, header anchors and separator columns
- Stable multi-rule sorting and category head-to-head scoring
- Parsers for the standings, matchup, history, playoffs, teams and seasons sheets

Main exports:
    ingest, classify, canonicalize, find_sections, assemble, sort_by, compare_entities
    Table, Grid
    StandingsParser, MatchupParser, HistoryParser, PlayoffParser, TeamsParser, SeasonHistoryParser
"""

from .core.ingestion import Grid, ingest
from .core.value_normalizer import classify
from .core.column_processor import canonicalize
from .core.table_detector import find_sections
from .core.table_assembler import AssemblyOptions, Table, assemble
from .core.sorting import sort_by
from .core.comparator import StatKey, compare_entities
from .parsers import (
    StandingsParser,
    MatchupParser,
    HistoryParser,
    PlayoffParser,
    TeamsParser,
    SeasonHistoryParser,
    create_parser
)
from .exceptions import (
    SheetParserError,
    SourceDecodeError,
    ParseError,
    RequiredColumnNotFound,
    RequiredMarkerNotFound,
    SectionTooSmall,
    FetchError
)

__version__ = "1.0.0"
__all__ = [
    'Grid',
    'ingest',
    'classify',
    'canonicalize',
    'find_sections',
    'AssemblyOptions',
    'Table',
    'assemble',
    'sort_by',
    'StatKey',
    'compare_entities',
    'StandingsParser',
    'MatchupParser',
    'HistoryParser',
    'PlayoffParser',
    'TeamsParser',
    'SeasonHistoryParser',
    'create_parser',
    'SheetParserError',
    'SourceDecodeError',
    'ParseError',
    'RequiredColumnNotFound',
    'RequiredMarkerNotFound',
    'SectionTooSmall',
    'FetchError'
]
