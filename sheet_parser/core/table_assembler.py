"""
Table assembly from discovered grid sections

This module builds typed, addressable tables from a header row and a section
boundary:
- Zipping the canonical header keys with every data row of the section
- Skipping rows without a primary key (or without any required column)
- Cutting columns after a stop header and capping the number of rows
- Resolving ambiguous repeated headers once per table (GP vs GP_2)
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .column_processor import canonicalize, convert_to_snake_case, find_header, unique_key, variant_key
from .data_cleaner import (
    cell_at,
    drop_all_dash_columns,
    has_rank_values,
    hide_columns,
    last_meaningful_column,
    trim_noise_columns
)
from .ingestion import Grid
from .table_detector import SectionBoundary, row_matches_marker
from .value_normalizer import clean_cell, classify, normalize_text
from ..constants import MAX_ROWS, RANK_LABEL, RANK_PROBE_ROWS, TEAM_LABEL, TEAM_COLUMN_CANDIDATES
from ..exceptions import RequiredColumnNotFound

# Configure logging
logger = logging.getLogger(__name__)


class Table:
    """
    One logical table: ordered header keys and read-only records

    Records map header key -> raw cell string. ``metadata`` describes how the
    table was assembled (header row, source column of each key, section,
    skipped rows, dropped columns, strategy).
    """

    def __init__(self, headers: Sequence[str], records: Sequence[Mapping[str, str]],
                 metadata: Optional[Dict] = None):
        self._headers = tuple(headers)
        self._records = tuple(
            r if isinstance(r, MappingProxyType) else MappingProxyType(dict(r)) for r in records
        )
        self.metadata = dict(metadata or {})
        self._resolved = {}

    @property
    def headers(self) -> tuple:
        return self._headers

    @property
    def records(self) -> tuple:
        return self._records

    @property
    def is_empty(self) -> bool:
        return not self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Mapping[str, str]]:
        return iter(self._records)

    def __getitem__(self, index) -> Mapping[str, str]:
        return self._records[index]

    def __repr__(self) -> str:
        return f"Table({len(self._headers)} columns x {len(self._records)} records)"

    def column(self, key: str) -> List[str]:
        """Values of one column in record order ("" where missing)"""
        return [r.get(key, '') for r in self._records]

    def has_values(self, key: str) -> bool:
        """Check whether any record has a non-empty value under a key"""
        return any(clean_cell(r.get(key)) for r in self._records)

    def find_key(self, label: str, candidates: Optional[Sequence[str]] = None) -> Optional[str]:
        """Header key matching a label by normalized name, or None"""
        index = find_header(self._headers, label, candidates)
        return self._headers[index] if index >= 0 else None

    def resolve_key(self, base_label: str, variant: int = 1) -> str:
        """
        Resolve the header key of one variant of a repeated label

        The variant-suffixed key is used when any record has a value under
        it; otherwise the base key. Decided once per (table, label, variant)
        and applied to every record.

        Args:
            base_label: Label as written in the sheet, e.g. "GP"
            variant: Occurrence number, 1 for the bare label

        Returns:
            Header key to read for this variant
        """
        cache_key = (base_label, variant)
        if cache_key not in self._resolved:
            key = variant_key(base_label, variant)
            resolved = key if key in self._headers and self.has_values(key) else base_label
            self._resolved[cache_key] = resolved
            logger.debug(f"Resolved {base_label!r} variant {variant} -> {resolved!r}")
        return self._resolved[cache_key]

    def resolve_keys(self, base_labels: Sequence[str], variant: int = 1) -> Dict[str, str]:
        """Resolve several labels for one variant"""
        return {label: self.resolve_key(label, variant) for label in base_labels}

    @property
    def resolved_keys(self) -> Dict:
        """Key resolutions decided so far, keyed by (label, variant)"""
        return dict(self._resolved)

    def value(self, record: Mapping[str, str], base_label: str, variant: int = 1) -> str:
        """Raw value of a record under the resolved key of a label variant"""
        return record.get(self.resolve_key(base_label, variant), '')

    def to_dataframe(self, snake_case: bool = False, typed: bool = False) -> pd.DataFrame:
        """
        Convert the table to a DataFrame

        Args:
            snake_case: Convert column names to snake_case
            typed: Convert numeric cells to floats and empty cells to None

        Returns:
            DataFrame with one row per record
        """
        rows = []
        for record in self._records:
            if typed:
                row = {}
                for key in self._headers:
                    value = classify(record.get(key, ''))
                    if value.is_numeric:
                        row[key] = value.numeric
                    elif value.is_empty:
                        row[key] = None
                    else:
                        row[key] = clean_cell(record.get(key))
                rows.append(row)
            else:
                rows.append({key: record.get(key, '') for key in self._headers})

        df = pd.DataFrame(rows, columns=list(self._headers))
        if snake_case:
            df.columns = [convert_to_snake_case(c) for c in df.columns]
        return df


@dataclass
class AssemblyOptions:
    """
    Options controlling table assembly

    Attributes:
        primary_key: Label of the column that must be non-empty (None disables the rule)
        primary_candidates: Alternative spellings of the primary key label
        required_keys: Further labels that must all be non-empty for a row to be kept
        stop_after: Canonical header after whose first occurrence no columns are included
        max_rows: Row cap for fixed-size tables
        columns: Explicit column indices to consider
        headers: Positional header labels used instead of the grid header row
        stop_markers: Marker phrase sets that end the table
        stop_on_missing_key: End the table at the first row without a primary or required key
        leading_rank: Include an integer column right before the primary key as "Rank"
        cut_trailing: Cut columns after the last column having a header or data
        trim_noise: Drop columns whose header and sampled data are all blank/dash
        drop_dash_columns: Also drop labelled columns holding only blank/dash data
        hidden_headers: Normalized header names to hide
        hidden_prefixes: Normalized header prefixes to hide
        strategy: Discovery strategy name recorded in the metadata
        extra: Additional metadata entries
    """
    primary_key: Optional[str] = TEAM_LABEL
    primary_candidates: Sequence[str] = tuple(TEAM_COLUMN_CANDIDATES)
    required_keys: Sequence[str] = ()
    stop_after: Optional[str] = None
    max_rows: Optional[int] = None
    columns: Optional[Sequence[int]] = None
    headers: Optional[Sequence[str]] = None
    stop_markers: Sequence = ()
    stop_on_missing_key: bool = False
    leading_rank: bool = False
    cut_trailing: bool = True
    trim_noise: bool = True
    drop_dash_columns: bool = False
    hidden_headers: Sequence[str] = ()
    hidden_prefixes: Sequence[str] = ()
    strategy: str = ''
    extra: Dict = field(default_factory=dict)


def _select_columns(keys: List[str], rows: List[Sequence],
                    columns: List[int], options: AssemblyOptions) -> Tuple[List[int], List[int]]:
    """Apply the column rules in order; returns (kept, dropped)"""
    dropped = []

    if options.cut_trailing and columns:
        last = last_meaningful_column(keys, rows)
        dropped.extend(c for c in columns if c > last)
        columns = [c for c in columns if c <= last]

    if options.trim_noise:
        columns, noise = trim_noise_columns(keys, rows, columns)
        dropped.extend(noise)

    if options.drop_dash_columns:
        columns, dashes = drop_all_dash_columns(keys, rows, columns)
        dropped.extend(dashes)

    if options.hidden_headers or options.hidden_prefixes:
        visible = hide_columns(keys, columns, options.hidden_headers, options.hidden_prefixes)
        dropped.extend(c for c in columns if c not in visible)
        columns = visible

    if options.stop_after:
        wanted = normalize_text(options.stop_after)
        for position, c in enumerate(columns):
            if normalize_text(keys[c]) == wanted:
                dropped.extend(columns[position + 1:])
                columns = columns[:position + 1]
                break

    return columns, sorted(dropped)


def assemble(grid: Grid, boundary: SectionBoundary, header_row_index: Optional[int] = None,
             options: Optional[AssemblyOptions] = None) -> Table:
    """
    Build a table from a header row and a section of data rows

    Args:
        grid: Source grid
        boundary: Data row range (and optional column range) of the section
        header_row_index: Header row index (default: the boundary's header row)
        options: Assembly options

    Returns:
        Table of records in grid order

    Raises:
        RequiredColumnNotFound: If the primary key or a required column is absent
        ValueError: If neither a header row nor positional headers are available
    """
    options = options or AssemblyOptions()
    if header_row_index is None:
        header_row_index = boundary.header_row

    if options.headers is not None:
        header_cells = list(options.headers)
    elif 0 <= header_row_index < len(grid):
        header_cells = list(grid.row(header_row_index))
    else:
        raise ValueError("assemble needs a header row index or positional headers")

    width = max(grid.width, len(header_cells))
    header_cells += [''] * (width - len(header_cells))
    keys = canonicalize(header_cells)

    columns = list(boundary.column_range(width))
    if options.columns is not None:
        allowed = set(options.columns)
        columns = [c for c in columns if c in allowed]

    end = min(boundary.end, len(grid), boundary.start + MAX_ROWS)
    row_indices = list(range(max(0, boundary.start), end))
    rows = [grid.row(i) for i in row_indices]

    primary_index = -1
    if options.primary_key:
        visible_keys = [keys[c] if c in columns else '' for c in range(width)]
        primary_index = find_header(visible_keys, options.primary_key, options.primary_candidates)
        if primary_index < 0:
            raise RequiredColumnNotFound(options.primary_key, options.strategy or None)

    rank_index = -1
    if options.leading_rank and primary_index > 0:
        candidate = primary_index - 1
        if candidate in columns and has_rank_values(rows, candidate, RANK_PROBE_ROWS):
            rank_index = candidate
            if RANK_LABEL not in keys:
                keys[candidate] = RANK_LABEL
        elif candidate in columns and not keys[candidate]:
            columns.remove(candidate)

    columns, dropped = _select_columns(keys, rows, columns, options)

    # Blank header with data is addressed by position
    for c in columns:
        if not keys[c]:
            keys[c] = unique_key(f"col_{c}", keys)

    required = []
    for label in options.required_keys:
        index = find_header([keys[c] if c in columns else '' for c in range(width)], label)
        if index < 0:
            raise RequiredColumnNotFound(label, options.strategy or None)
        required.append(index)

    records = []
    skipped = []
    for i, row in zip(row_indices, rows):
        if not any(clean_cell(c) for c in row):
            continue
        if options.stop_markers and any(row_matches_marker(row, m) for m in options.stop_markers):
            break

        if primary_index >= 0 and not clean_cell(cell_at(row, primary_index)):
            if options.stop_on_missing_key:
                break
            skipped.append(i)
            continue
        if any(not clean_cell(cell_at(row, c)) for c in required):
            if options.stop_on_missing_key:
                break
            skipped.append(i)
            continue

        records.append({keys[c]: clean_cell(cell_at(row, c)) for c in columns})
        if options.max_rows is not None and len(records) >= options.max_rows:
            break

    if skipped:
        logger.debug(f"Skipped {len(skipped)} rows without a key: {skipped}")

    metadata = {
        'header_row': header_row_index if options.headers is None else -1,
        'columns': {keys[c]: c for c in columns},
        'section': (boundary.start, boundary.end),
        'skipped_rows': skipped,
        'dropped_columns': dropped,
        'strategy': options.strategy,
    }
    if primary_index >= 0:
        metadata['primary_key'] = keys[primary_index]
    if rank_index >= 0:
        metadata['rank_column'] = rank_index
    if boundary.label:
        metadata['label'] = boundary.label
    metadata.update(options.extra)

    return Table([keys[c] for c in columns], records, metadata)
