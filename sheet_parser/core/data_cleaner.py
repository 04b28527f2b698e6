"""
Data cleaning utilities for spreadsheet grids

This module provides functions for cleaning grid columns and rows including:
- Detecting dash placeholders and blank rows
- Cutting trailing columns with neither header nor data
- Dropping noise columns (blank header and all-blank data)
- Hiding columns by normalized header name or prefix
- Probing a rank column left of the team column
"""

import logging
import re
from typing import Iterable, List, Sequence, Tuple

from .value_normalizer import clean_cell, normalize_text, is_placeholder

# Configure logging
logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r'^\d+$')


def is_blank_row(row: Sequence) -> bool:
    """Check whether every cell of a row is empty"""
    return not row or not any(clean_cell(c) for c in row)


def cell_at(row: Sequence, index: int) -> str:
    """Raw cell of a row, "" beyond its length"""
    if 0 <= index < len(row):
        value = row[index]
        return '' if value is None else str(value)
    return ''


def last_meaningful_column(headers: Sequence[str], rows: Sequence[Sequence]) -> int:
    """
    Find the last column having a header or any data

    Args:
        headers: Header cells
        rows: Data rows

    Returns:
        Index of the last meaningful column, -1 when there is none
    """
    width = max([len(headers)] + [len(r) for r in rows] + [0])
    for last in range(width - 1, -1, -1):
        if clean_cell(cell_at(headers, last)):
            return last
        if any(clean_cell(cell_at(r, last)) for r in rows):
            return last
    return -1


def is_noise_column(header: str, rows: Sequence[Sequence], index: int) -> bool:
    """
    Check the column-trimming rule for one column

    A column is noise when its header is blank/dash and every sampled data
    cell is blank/dash. Sparsely populated columns are kept.
    """
    if not is_placeholder(header):
        return False
    return all(is_placeholder(cell_at(r, index)) for r in rows)


def trim_noise_columns(headers: Sequence[str], rows: Sequence[Sequence],
                       columns: Iterable[int]) -> Tuple[List[int], List[int]]:
    """
    Drop noise columns from a column selection

    Args:
        headers: Header cells of the whole row
        rows: Sampled data rows
        columns: Candidate column indices

    Returns:
        Tuple of (kept column indices, dropped column indices)
    """
    kept = []
    dropped = []
    for index in columns:
        if is_noise_column(cell_at(headers, index), rows, index):
            dropped.append(index)
        else:
            kept.append(index)

    if dropped:
        logger.debug(f"Dropped {len(dropped)} noise columns: {dropped}")
    return kept, dropped


def drop_all_dash_columns(headers: Sequence[str], rows: Sequence[Sequence],
                          columns: Iterable[int]) -> Tuple[List[int], List[int]]:
    """
    Drop columns with a blank/dash header or with only blank/dash data

    Stricter than trim_noise_columns: used by standings exports where a
    labelled but entirely empty column is also noise.
    """
    kept = []
    dropped = []
    for index in columns:
        header = cell_at(headers, index)
        if is_placeholder(header) or all(is_placeholder(cell_at(r, index)) for r in rows):
            dropped.append(index)
        else:
            kept.append(index)
    return kept, dropped


def hide_columns(headers: Sequence[str], columns: Iterable[int],
                 hidden: Iterable[str] = (), prefixes: Iterable[str] = ()) -> List[int]:
    """
    Remove columns whose normalized header is hidden or starts with a hidden prefix

    Args:
        headers: Header cells
        columns: Candidate column indices
        hidden: Normalized header names to hide
        prefixes: Normalized header prefixes to hide

    Returns:
        Remaining column indices
    """
    hidden = set(hidden)
    prefixes = list(prefixes)
    kept = []
    for index in columns:
        name = normalize_text(cell_at(headers, index))
        if name in hidden or any(name.startswith(p) for p in prefixes):
            continue
        kept.append(index)
    return kept


def has_rank_values(rows: Sequence[Sequence], index: int, probe: int) -> bool:
    """
    Check whether a column holds integer ranks

    Looks at the first `probe` rows for an integer cell.

    Args:
        rows: Data rows following the header
        index: Column index to probe
        probe: Number of rows to look at

    Returns:
        True if any probed cell is an integer
    """
    if index < 0:
        return False
    return any(_INTEGER_RE.match(clean_cell(cell_at(row, index))) for row in rows[:probe])
