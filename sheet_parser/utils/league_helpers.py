"""
League helpers for grouping and ordering teams

This module provides functions for deriving a division from a league code
("A1", "B2", "Γ3"), ordering league codes naturally (A2 before A10) and
matching league names the way the sheets write them.
"""

import re
from typing import Tuple

from ..constants import DIVISION_ORDER, UNKNOWN_DIVISION
from ..core.value_normalizer import clean_cell, normalize_text

_LEAGUE_NUMBER_RE = re.compile(r'(\d+)')


def division_from_league(league) -> str:
    """
    Extract the division letter from a league code

    Latin "G" is accepted as a stand-in for Greek "Γ".

    Args:
        league: League code such as "A1", "B2", "Γ3" or "G3"

    Returns:
        "A", "B", "Γ" or "Unknown"
    """
    code = clean_cell(league).upper()
    if not code:
        return UNKNOWN_DIVISION
    if code.startswith('A'):
        return 'A'
    if code.startswith('B'):
        return 'B'
    if code.startswith('Γ') or code.startswith('G'):
        return 'Γ'
    return UNKNOWN_DIVISION


def league_number(league) -> int:
    """First number in a league code, 9999 when there is none"""
    match = _LEAGUE_NUMBER_RE.search(clean_cell(league))
    return int(match.group(1)) if match else 9999


def league_sort_key(league) -> Tuple[int, int, str]:
    """
    Sort key ordering leagues by division, then number, then code

    Args:
        league: League code

    Returns:
        Tuple of (division order, league number, upper-cased code)
    """
    code = clean_cell(league).upper()
    division = division_from_league(code)
    return DIVISION_ORDER.get(division, 9), league_number(code), code


def same_league(a, b) -> bool:
    """Case- and whitespace-insensitive league comparison"""
    return normalize_text(a) == normalize_text(b)
