"""
Sorting and ranking of table records

This module provides a stable comparator over raw cell values with the
ordering rules used by every ranking display:
- Empty cells always sort last, in both directions
- Numbers sort before text, in both directions
- A genuine zero sorts before a dash-derived zero
- Text compares case-insensitively with natural number ordering ("A2" < "A10")
"""

import logging
import re
from functools import cmp_to_key
from typing import Dict, List, Mapping, NamedTuple, Sequence, Set, Tuple

from .table_assembler import Table
from .value_normalizer import classify, clean_cell, to_number
from ..constants import CATEGORY_HIGHLIGHT_SIZE, PODIUM_SIZE, RANK_LABEL

# Configure logging
logger = logging.getLogger(__name__)

ASC = 'asc'
DESC = 'desc'
DIRECTIONS = (ASC, DESC)

_DIGITS_RE = re.compile(r'(\d+)')


class Podium(NamedTuple):
    """Top records of one group, e.g. one league"""
    group: str
    total: int
    top: List[Mapping[str, str]]


def natural_key(text: str) -> Tuple:
    """
    Sort key comparing digit runs by value

    Args:
        text: Normalized text

    Returns:
        Tuple usable for ordering ("a2" < "a10")
    """
    parts = []
    for chunk in _DIGITS_RE.split(text):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((0, int(chunk), chunk))
        else:
            parts.append((1, 0, chunk))
    return tuple(parts)


def _sign(direction: str) -> int:
    if direction not in DIRECTIONS:
        raise ValueError(f"Unknown sort direction: {direction}")
    return 1 if direction == ASC else -1


def compare_values(a, b, direction: str = ASC) -> int:
    """
    Compare two raw cell values

    Args:
        a: First raw value
        b: Second raw value
        direction: 'asc' or 'desc'

    Returns:
        Negative if a sorts first, positive if b sorts first, 0 if tied
    """
    sign = _sign(direction)
    va = classify(a)
    vb = classify(b)

    if va.is_empty or vb.is_empty:
        return int(va.is_empty) - int(vb.is_empty)

    if va.is_numeric and vb.is_numeric:
        if va.numeric != vb.numeric:
            return sign if va.numeric > vb.numeric else -sign
        # Real zero ahead of a dashed zero, whatever the direction
        if va.numeric == 0 and va.dashed != vb.dashed:
            return 1 if va.dashed else -1
        return 0

    if va.is_numeric != vb.is_numeric:
        return -1 if va.is_numeric else 1

    ka = natural_key(va.text)
    kb = natural_key(vb.text)
    if ka == kb:
        return 0
    return sign if ka > kb else -sign


def sort_records(records: Sequence[Mapping[str, str]], key: str,
                 direction: str = ASC) -> List[Mapping[str, str]]:
    """
    Stable sort of records by the raw value under one key

    Args:
        records: Records to sort
        key: Header key to sort by (missing values count as empty)
        direction: 'asc' or 'desc'

    Returns:
        New list of records
    """
    _sign(direction)
    return sorted(records, key=cmp_to_key(
        lambda x, y: compare_values(x.get(key, ''), y.get(key, ''), direction)
    ))


def sort_by(table, key: str, direction: str = ASC) -> List[Mapping[str, str]]:
    """
    Stable sort of a table's records by one column

    Args:
        table: Table to sort
        key: Header key to sort by
        direction: 'asc' or 'desc'

    Returns:
        Ordered list of records
    """
    if key not in table.headers:
        logger.warning(f"Sort key {key!r} not in table headers; keeping original order")
    return sort_records(table.records, key, direction)


def sort_table(table, key: str, direction: str = ASC):
    """Sorted copy of a table, recording the sort in its metadata"""
    metadata = dict(table.metadata)
    metadata['sort'] = (key, direction)
    return Table(table.headers, sort_by(table, key, direction), metadata)


def default_sort(table):
    """Sorted copy of a table by Rank ascending, or the table itself without a Rank column"""
    key = table.find_key(RANK_LABEL)
    if key is None:
        return table
    return sort_table(table, key, ASC)


def category_extremes(records: Sequence[Mapping[str, str]], key: str, label_key: str,
                      higher_is_better: bool = True,
                      size: int = CATEGORY_HIGHLIGHT_SIZE) -> Tuple[Set[str], Set[str]]:
    """
    Labels of the best and worst records in one category

    Records without a label or without a numeric value are ignored.

    Args:
        records: Records to rank
        key: Header key of the category value
        label_key: Header key identifying a record, e.g. "Team"
        higher_is_better: Polarity of the category
        size: Number of records in each set

    Returns:
        Tuple of (best labels, worst labels)
    """
    scored = []
    for record in records:
        label = clean_cell(record.get(label_key))
        value = to_number(record.get(key, ''))
        if label and value is not None:
            scored.append((label, value))

    if not scored:
        return set(), set()

    scored.sort(key=lambda item: -item[1] if higher_is_better else item[1])
    top = {label for label, _ in scored[:size]}
    bottom = {label for label, _ in scored[-size:]}
    return top, bottom


def podiums(records: Sequence[Mapping[str, str]], group_key: str, rank_key: str,
            size: int = PODIUM_SIZE) -> List[Podium]:
    """
    Top records per group ordered by a rank column

    Groups are ordered naturally ("League 2" before "League 10"); records
    without a numeric rank come last within their group.

    Args:
        records: Records to group
        group_key: Header key of the grouping column, e.g. "League"
        rank_key: Header key of the rank column
        size: Records per podium

    Returns:
        List of podiums, one per non-empty group
    """
    groups: Dict[str, List[Mapping[str, str]]] = {}
    for record in records:
        group = clean_cell(record.get(group_key))
        if group:
            groups.setdefault(group, []).append(record)

    result = []
    for group in sorted(groups, key=lambda g: natural_key(g.lower())):
        members = groups[group]
        ranked = sorted(members, key=lambda r: _rank_or_last(r.get(rank_key, '')))
        result.append(Podium(group, len(members), ranked[:size]))
    return result


def _rank_or_last(value) -> float:
    number = to_number(value)
    return number if number is not None else float('inf')


def sort_by_rank(records: Sequence[Mapping[str, str]], rank_key: str) -> List[Mapping[str, str]]:
    """Stable sort by a numeric rank column, records without a rank last"""
    return sorted(records, key=lambda r: _rank_or_last(r.get(rank_key, '')))
