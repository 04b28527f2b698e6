"""
Core functionality for spreadsheet parsing

Contains modules for:
- Grid ingestion from CSV and GViz exports (ingestion.py)
- Cell value classification (value_normalizer.py)
- Header canonicalization and deduplication (column_processor.py)
- Section and block detection (table_detector.py)
- Column and row cleaning rules (data_cleaner.py)
- Table assembly (table_assembler.py)
- Sorting and ranking (sorting.py)
- Category head-to-head comparison (comparator.py)
- Retrieval of sheet exports (fetcher.py)
"""

from .ingestion import Grid, ingest, parse_delimited, extract_gviz_payload, grid_from_gviz
from .value_normalizer import TypedValue, classify, clean_cell, normalize_text, to_number
from .column_processor import (
    canonicalize,
    canonicalize_header,
    dedupe_headers,
    convert_to_snake_case
)
from .table_detector import (
    SectionBoundary,
    find_sections,
    discover_by_marker,
    discover_by_anchor,
    discover_by_separators,
    detect_separator_columns
)
from .table_assembler import AssemblyOptions, Table, assemble
from .sorting import compare_values, sort_by, sort_table, default_sort
from .comparator import StatKey, CategoryRecord, compare_entities, compare_stat, detect_stat_keys
from .fetcher import SheetFetcher, LatestRequestGuard, gviz_url, csv_url

__all__ = [
    'Grid',
    'ingest',
    'parse_delimited',
    'extract_gviz_payload',
    'grid_from_gviz',
    'TypedValue',
    'classify',
    'clean_cell',
    'normalize_text',
    'to_number',
    'canonicalize',
    'canonicalize_header',
    'dedupe_headers',
    'convert_to_snake_case',
    'SectionBoundary',
    'find_sections',
    'discover_by_marker',
    'discover_by_anchor',
    'discover_by_separators',
    'detect_separator_columns',
    'AssemblyOptions',
    'Table',
    'assemble',
    'compare_values',
    'sort_by',
    'sort_table',
    'default_sort',
    'StatKey',
    'CategoryRecord',
    'compare_entities',
    'compare_stat',
    'detect_stat_keys',
    'SheetFetcher',
    'LatestRequestGuard',
    'gviz_url',
    'csv_url'
]
