"""
Category head-to-head comparison

This module scores two opposing records statistic by statistic:
- Numeric values compare by polarity (higher is better, except turnovers)
- Non-numeric values compare as normalized text, an empty value losing to
  any non-empty one
- Win/loss/tie counts always add up to the number of statistics compared
"""

import logging
from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

from .value_normalizer import classify, normalize_text
from ..constants import (
    CANON_ORDER,
    LOWER_IS_BETTER_PHRASES,
    LOWER_IS_BETTER_STATS,
    MIN_CANON_PRESENT,
    STAT_SKIP_EXACT,
    STAT_SKIP_PHRASES
)

# Configure logging
logger = logging.getLogger(__name__)

WIN = 1
LOSS = -1
TIE = 0


class StatKey(NamedTuple):
    """Statistic identifier with its polarity"""
    name: str
    higher_is_better: bool = True


class CategoryRecord(NamedTuple):
    """Aggregate head-to-head result from the first entity's perspective"""
    wins: int
    losses: int
    ties: int
    outcomes: Dict[str, int]

    @property
    def total(self) -> int:
        return self.wins + self.losses + self.ties

    def as_dict(self) -> Dict[str, int]:
        return {'wins': self.wins, 'losses': self.losses, 'ties': self.ties}


def is_lower_better(name: str) -> bool:
    """Check whether a statistic is one where a lower value wins"""
    key = normalize_text(name)
    return key in LOWER_IS_BETTER_STATS or any(p in key for p in LOWER_IS_BETTER_PHRASES)


def stat_key(name: Union[str, StatKey]) -> StatKey:
    """Registry lookup: the StatKey of a statistic name"""
    if isinstance(name, StatKey):
        return name
    return StatKey(name, not is_lower_better(name))


def compare_stat(a, b, stat: Union[str, StatKey]) -> int:
    """
    Compare one statistic of two records

    Args:
        a: Raw value of the first entity
        b: Raw value of the second entity
        stat: Statistic name or StatKey

    Returns:
        1 if a wins, -1 if a loses, 0 on a tie
    """
    stat = stat_key(stat)
    va = classify(a)
    vb = classify(b)

    if va.is_numeric and vb.is_numeric:
        if va.numeric == vb.numeric:
            return TIE
        a_higher = va.numeric > vb.numeric
        return WIN if a_higher == stat.higher_is_better else LOSS

    ta = va.text if not va.is_numeric else normalize_text(a)
    tb = vb.text if not vb.is_numeric else normalize_text(b)
    if not ta and not tb:
        return TIE
    if not ta:
        return LOSS
    if not tb:
        return WIN
    if ta == tb:
        return TIE
    return WIN if ta > tb else LOSS


def compare_entities(a: Mapping[str, str], b: Mapping[str, str],
                     stats: Sequence[Union[str, StatKey]]) -> CategoryRecord:
    """
    Score two records over a set of statistics

    Args:
        a: Record of the first entity
        b: Record of the opposing entity
        stats: Statistic names (header keys) or StatKeys

    Returns:
        CategoryRecord from a's perspective; wins + losses + ties == len(stats)
    """
    wins = losses = ties = 0
    outcomes = {}
    for stat in stats:
        stat = stat_key(stat)
        outcome = compare_stat(a.get(stat.name, ''), b.get(stat.name, ''), stat)
        outcomes[stat.name] = outcome
        if outcome == WIN:
            wins += 1
        elif outcome == LOSS:
            losses += 1
        else:
            ties += 1
    return CategoryRecord(wins, losses, ties, outcomes)


def pair_records(records: Sequence[Mapping[str, str]]) -> List[Tuple[Mapping[str, str], Mapping[str, str]]]:
    """Pair consecutive records (0-1, 2-3, ...); an odd trailing record is left out"""
    return [(records[i], records[i + 1]) for i in range(0, len(records) - 1, 2)]


def is_stat_header(key: str, team_key: Optional[str] = None) -> bool:
    """Check whether a header key can be a category statistic"""
    if not key or key == team_key:
        return False
    name = normalize_text(key)
    if name in STAT_SKIP_EXACT:
        return False
    return not any(phrase in name for phrase in STAT_SKIP_PHRASES)


def detect_stat_keys(headers: Sequence[str], team_key: Optional[str] = None) -> List[StatKey]:
    """
    Detect the category statistics of a matchup table

    Identity, result and rank columns are skipped. When enough canonical
    categories are present they are returned in canonical order, otherwise
    the remaining headers in table order.

    Args:
        headers: Header keys of the table
        team_key: Header key of the team column

    Returns:
        List of StatKeys
    """
    detected = [h for h in headers if is_stat_header(h, team_key)]
    canonical = [name for name in CANON_ORDER if name in detected]
    names = canonical if len(canonical) >= MIN_CANON_PRESENT else detected
    logger.debug(f"Detected stat keys: {names}")
    return [stat_key(name) for name in names]
