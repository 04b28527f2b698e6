"""
Base parser abstract class for spreadsheet shapes

This module provides an abstract base class that implements shared logic
for all sheet shapes: loading a grid, locating the header section of sheets
exported with column labels, resolving the team column and saving tables.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..core.ingestion import Grid, ingest
from ..core.table_assembler import Table
from ..core.table_detector import SectionBoundary, discover_by_anchor, find_section_end
from ..core.value_normalizer import normalize_text
from ..constants import TEAM_COLUMN_CANDIDATES, TEAM_LABEL
from ..exceptions import RequiredColumnNotFound

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class ParsedSheet:
    """
    Result of parsing one sheet

    Attributes:
        shape: Shape name of the parser that produced it
        tables: Named tables in discovery order
        views: Shape-specific derived views (pairs, podiums, stat keys, ...)
    """
    shape: str
    tables: Dict[str, Table]
    views: Dict[str, Any] = field(default_factory=dict)

    @property
    def names(self) -> List[str]:
        return list(self.tables)

    def table(self, name: Optional[str] = None) -> Table:
        """
        Get a table by name (default: the first table)

        Raises:
            KeyError: If the sheet has no table of that name
        """
        if name is None:
            if not self.tables:
                raise KeyError(f"{self.shape} sheet has no tables")
            return next(iter(self.tables.values()))
        if name not in self.tables:
            raise KeyError(f"{self.shape} sheet has no table {name!r} (available: {', '.join(self.tables)})")
        return self.tables[name]


def find_team_key(headers: Sequence[str]) -> Optional[str]:
    """
    Resolve the team column of a table

    Tries the known spellings, then a header ending in " team" (merged title
    plus "Team"), then falls back to the first non-blank header.

    Args:
        headers: Header keys

    Returns:
        Header key of the team column, None for a table without headers
    """
    normalized = [normalize_text(h) for h in headers]
    for candidate in TEAM_COLUMN_CANDIDATES:
        if candidate in normalized:
            return headers[normalized.index(candidate)]
    for header, name in zip(headers, normalized):
        if name.endswith(' team'):
            return header
    for header in headers:
        if header:
            return header
    return None


class BaseParser(ABC):
    """
    Abstract base class for sheet parsers

    Subclasses build their named tables from a grid and may derive views
    from them; parse() ties ingestion, table building and views together.
    """

    shape = ''

    def __init__(self, source_format: str = 'auto'):
        """
        Initialize base parser

        Args:
            source_format: Source format passed to ingestion ('auto', 'csv' or 'gviz')
        """
        self.source_format = source_format

    @abstractmethod
    def build_tables(self, grid: Grid) -> Dict[str, Table]:
        """
        Build the named tables of the sheet (must be implemented by subclass)

        Args:
            grid: Ingested grid

        Returns:
            Dictionary of table name -> Table
        """

    def build_views(self, tables: Dict[str, Table]) -> Dict[str, Any]:
        """
        Derive shape-specific views from the tables

        Args:
            tables: Tables built by build_tables()

        Returns:
            Dictionary of view name -> value
        """
        return {}

    def load_grid(self, source: Union[Grid, str, bytes, Mapping]) -> Grid:
        """Ingest a source unless it already is a grid"""
        if isinstance(source, Grid):
            return source
        return ingest(source, self.source_format)

    def parse(self, source: Union[Grid, str, bytes, Mapping]) -> ParsedSheet:
        """
        Parse one sheet export

        Args:
            source: Grid, export text (CSV or GViz) or decoded GViz object

        Returns:
            ParsedSheet with named tables and derived views

        Raises:
            SheetParserError: If the source cannot be decoded or a structural
                              precondition of the shape fails
        """
        grid = self.load_grid(source)
        tables = self.build_tables(grid)
        views = self.build_views(tables)

        summary = ', '.join(f"{name}={len(table)}" for name, table in tables.items())
        logger.info(f"Parsed {self.shape} sheet: {summary or 'no tables'}")
        return ParsedSheet(self.shape, tables, views)

    def header_section(self, grid: Grid, stop_markers: Sequence = (),
                       label: str = '') -> Tuple[Grid, SectionBoundary]:
        """
        Locate the header row and data rows of a sheet exported with column labels

        GViz exports carry the header as column labels: the label row becomes
        row 0 and the data runs to the end (or a stop marker). Without labels
        the header is the first row holding a "Team" cell.

        Args:
            grid: Ingested grid
            stop_markers: Marker phrase sets that end the data
            label: Section label for diagnostics

        Returns:
            Tuple of (grid to assemble from, section boundary)

        Raises:
            RequiredColumnNotFound: If there are no labels and no "Team" header row
        """
        if any(grid.labels):
            labelled = grid.with_label_row()
            end = find_section_end(labelled, 1, stop_markers, stop_at_blank=False)
            return labelled, SectionBoundary(1, end, 0, label=label)

        sections = discover_by_anchor(
            grid,
            TEAM_LABEL,
            candidates=TEAM_COLUMN_CANDIDATES,
            stop_markers=stop_markers,
            stop_at_blank=False,
            label=label
        )
        return grid, sections[0]

    def require_team_key(self, headers: Sequence[str], context: str = '') -> str:
        """Team column key of a header row, raising when the row has no headers"""
        key = find_team_key(headers)
        if key is None:
            raise RequiredColumnNotFound(TEAM_LABEL, context or self.shape)
        return key

    def save_to_csv(self, table: Table, output_path: str, snake_case: bool = False) -> None:
        """
        Save a table to a CSV file

        Args:
            table: Table to save
            output_path: Output file path
            snake_case: Convert column names to snake_case
        """
        df = table.to_dataframe(snake_case=snake_case)
        df.to_csv(output_path, index=False, encoding='utf-8')
        logger.info(f"Saved {df.shape[0]} rows x {df.shape[1]} columns to {output_path}")
