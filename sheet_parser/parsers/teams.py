"""
Team directory parser

This module implements the TeamsParser class for the team directory sheet
(one row per team with manager, league, rankings and category statistics)
and the TeamDirectory views built on it: grouping by division and league,
league rosters and lookup by name.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .base_parser import BaseParser
from ..core.ingestion import Grid
from ..core.sorting import natural_key
from ..core.table_assembler import AssemblyOptions, Table, assemble
from ..core.value_normalizer import clean_cell, normalize_text, to_number
from ..constants import DIVISION_ORDER, MAX_KEY_VARIANT, TEAM_LABEL, TEAM_STAT_SOURCES, UNASSIGNED_LEAGUE
from ..utils.league_helpers import division_from_league, league_sort_key, same_league

# Configure logging
logger = logging.getLogger(__name__)


def get_first(record: Mapping[str, str], base_key: str, max_variant: int = MAX_KEY_VARIANT) -> str:
    """
    First non-empty value over a key and its numbered variants

    Args:
        record: Record to read
        base_key: Bare header key, e.g. "Champions League"
        max_variant: Highest variant tried (base_key_2 ... base_key_N)

    Returns:
        Stripped value, "" when every variant is empty
    """
    value = clean_cell(record.get(base_key))
    if value:
        return value
    for n in range(2, max_variant + 1):
        value = clean_cell(record.get(f"{base_key}_{n}"))
        if value:
            return value
    return ''


@dataclass
class TeamEntry:
    """One team of the directory"""
    team: str
    manager: str
    league: str
    division: str
    league_ranking: str
    general_standing: str
    gp: Optional[float]
    points_total: str
    stats: Dict[str, str]
    raw: Mapping[str, str] = field(repr=False)

    @property
    def league_rank(self) -> Optional[float]:
        return to_number(self.league_ranking)


def team_entry(record: Mapping[str, str], team_key: str = TEAM_LABEL) -> Optional[TeamEntry]:
    """
    Build a team entry from a directory record

    Args:
        record: Directory record
        team_key: Header key of the team column

    Returns:
        TeamEntry, or None when the record has no team name
    """
    team = clean_cell(record.get(team_key))
    if not team:
        return None

    league = clean_cell(record.get('League')) or UNASSIGNED_LEAGUE
    stats = {}
    for name, sources in TEAM_STAT_SOURCES.items():
        stats[name] = next((clean_cell(record.get(s)) for s in sources if clean_cell(record.get(s))), '')

    return TeamEntry(
        team=team,
        manager=clean_cell(record.get('Manager')),
        league=league,
        division=division_from_league(league),
        league_ranking=clean_cell(record.get('League Ranking')),
        general_standing=clean_cell(record.get('General Standing')),
        gp=to_number(record.get('GP', '')),
        points_total=clean_cell(record.get('Total')),
        stats=stats,
        raw=record
    )


def _ranking_order(entry: TeamEntry):
    rank = entry.league_rank
    return (rank is None, rank if rank is not None else 0.0, natural_key(entry.team.lower()))


class TeamDirectory:
    """
    Views over the team directory

    Teams are grouped by division and league; within a league they are
    ordered by league ranking, teams without a ranking last by name.
    """

    def __init__(self, entries: List[TeamEntry]):
        self.entries = list(entries)

    def __len__(self) -> int:
        return len(self.entries)

    def by_division(self) -> Dict[str, Dict[str, List[TeamEntry]]]:
        """
        Group teams by division, then league

        Returns:
            Dictionary division -> league -> ordered teams; leagues in natural order
        """
        grouped: Dict[str, Dict[str, List[TeamEntry]]] = {}
        for entry in self.entries:
            grouped.setdefault(entry.division, {}).setdefault(entry.league, []).append(entry)

        result = {}
        for division in sorted(grouped, key=lambda d: DIVISION_ORDER.get(d, 9)):
            leagues = grouped[division]
            result[division] = {
                league: sorted(leagues[league], key=_ranking_order)
                for league in sorted(leagues, key=league_sort_key)
            }
        return result

    def league_teams(self, league: str) -> List[TeamEntry]:
        """Teams of one league sorted by name (case-insensitive)"""
        members = [e for e in self.entries if same_league(e.league, league)]
        return sorted(members, key=lambda e: e.team.lower())

    def find(self, name: str) -> Optional[TeamEntry]:
        """Team by case-insensitive name, or None"""
        wanted = normalize_text(name)
        for entry in self.entries:
            if normalize_text(entry.team) == wanted:
                return entry
        return None


class TeamsParser(BaseParser):
    """
    Parser for the team directory sheet

    Table: "teams". Views: the TeamDirectory and its division grouping.
    """

    shape = 'teams'

    def build_tables(self, grid: Grid) -> Dict[str, Table]:
        source, boundary = self.header_section(grid, label='teams')
        options = AssemblyOptions(primary_key=TEAM_LABEL, strategy='labels')
        return {'teams': assemble(source, boundary, options=options)}

    def build_views(self, tables: Dict[str, Table]) -> Dict[str, Any]:
        table = tables['teams']
        team_key = table.metadata.get('primary_key', TEAM_LABEL)
        entries = [team_entry(r, team_key) for r in table]
        directory = TeamDirectory([e for e in entries if e is not None])
        logger.debug(f"Team directory: {len(directory)} teams")
        return {
            'directory': directory,
            'divisions': directory.by_division(),
        }
