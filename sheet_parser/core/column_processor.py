"""
Column processing utilities for spreadsheet headers

This module provides functions for:
- Cleaning raw header text (full-width percent, dashes, whitespace)
- Renaming verbose merged-header phrases to short canonical names
- Deduplicating repeated labels with numeric suffixes (GP, GP_2, ...)
- Resolving variant keys and converting column names to snake_case
"""

import re
from typing import Collection, List, Optional, Sequence, Tuple

from .value_normalizer import clean_cell, normalize_text
from ..constants import (
    BAD_HEADERS,
    HEADER_RENAME_RULES,
    HEADER_EXACT_RENAMES,
    SNAKE_CASE_REPLACEMENTS
)

_VARIANT_RE = re.compile(r'^(.*\S)_(\d+)$')


def clean_header(raw) -> str:
    """
    Clean raw header text

    Normalizes full-width percent signs, en/em dashes and runs of whitespace
    coming from merged header cells.

    Args:
        raw: Raw header cell

    Returns:
        Cleaned header text
    """
    text = clean_cell(raw)
    text = text.replace('–', '-').replace('—', '-')
    return re.sub(r'\s+', ' ', text).strip()


def apply_header_renames(header: str) -> str:
    """
    Rename verbose merged-header phrases to short canonical names

    Phrase rules require every phrase to be present; exact renames match the
    whole normalized header.

    Args:
        header: Cleaned header text

    Returns:
        Canonical header name (the input when no rule applies)
    """
    normalized = normalize_text(header)
    if not normalized:
        return header

    for phrases, canonical in HEADER_RENAME_RULES:
        if all(phrase in normalized for phrase in phrases):
            return canonical

    return HEADER_EXACT_RENAMES.get(normalized, header)


def canonicalize_header(raw) -> str:
    """Clean one header cell and apply the rename rules; blank headers stay blank"""
    header = clean_header(raw)
    if header in BAD_HEADERS or not header.strip('- '):
        return ''
    return apply_header_renames(header)


def unique_key(base: str, used: Collection[str], start: int = 2) -> str:
    """First of base, base_{start}, base_{start+1}, ... not already in used"""
    if base not in used:
        return base
    count = start
    while f"{base}_{count}" in used:
        count += 1
    return f"{base}_{count}"


def dedupe_headers(labels: Sequence[str]) -> List[str]:
    """
    Assign unique keys to repeated labels

    The first occurrence keeps the bare label, each later occurrence gets
    "_N" for its 1-indexed occurrence count (GP, GP_2, GP_3). A key already
    taken by a literal label moves on to the next free suffix. Blank labels
    stay blank and are not counted.

    Args:
        labels: Canonical labels in column order

    Returns:
        Unique header keys in the same order
    """
    seen = {}
    used = set()
    keys = []

    for label in labels:
        if not label:
            keys.append('')
            continue

        count = seen.get(label, 0) + 1
        key = label if count == 1 else f"{label}_{count}"
        while key in used:
            count += 1
            key = f"{label}_{count}"
        seen[label] = count
        used.add(key)
        keys.append(key)

    return keys


def canonicalize(header_row: Sequence) -> List[str]:
    """
    Canonicalize and deduplicate one header row

    Position-stable: the same row always yields the same keys in the same order.

    Args:
        header_row: Raw header cells

    Returns:
        List of header keys, "" for blank headers
    """
    return dedupe_headers([canonicalize_header(cell) for cell in header_row])


def variant_key(base_label: str, variant: int) -> str:
    """Header key of the N-th occurrence of a label (variant 1 is the bare label)"""
    if variant <= 1:
        return base_label
    return f"{base_label}_{variant}"


def split_header_key(key: str) -> Tuple[str, int]:
    """
    Split a header key into its base label and occurrence number

    Args:
        key: Header key such as "GP_2"

    Returns:
        Tuple of (base label, occurrence), e.g. ("GP", 2); ("GP", 1) for "GP"
    """
    match = _VARIANT_RE.match(key)
    if match and int(match.group(2)) >= 2:
        return match.group(1), int(match.group(2))
    return key, 1


def find_header(headers: Sequence[str], label: str, candidates: Optional[Sequence[str]] = None) -> int:
    """
    Find the column index of a header by normalized name

    Args:
        headers: Header keys
        label: Label to look for
        candidates: Alternative spellings accepted as well

    Returns:
        Column index or -1
    """
    wanted = {normalize_text(label)}
    wanted.update(normalize_text(c) for c in candidates or [])
    for i, header in enumerate(headers):
        if normalize_text(header) in wanted:
            return i
    return -1


def convert_to_snake_case(column_name: str) -> str:
    """
    Convert column names to full snake_case with special character replacement

    Args:
        column_name: Column name to convert

    Returns:
        Column name in snake_case
    """
    col = str(column_name)

    # Replace special characters with descriptive words
    col = col.replace('%', '_pct')
    col = col.replace('+', '_plus_')
    col = col.replace('/', '_per_')
    col = col.replace('#', '_num_')
    col = col.replace('&', '_and_')
    col = re.sub(r'[\s()\-.]+', '_', col)

    # Remove multiple underscores and underscores at beginning and end
    col = re.sub(r'_+', '_', col).strip('_')
    col = col.lower()

    # Apply special replacements for readability
    for old, new in SNAKE_CASE_REPLACEMENTS.items():
        col = col.replace(old, new)

    return col
