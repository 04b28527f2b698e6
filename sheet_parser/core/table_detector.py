"""
Section and block detection for spreadsheet grids

This module provides functionality for locating logical sub-tables within one
grid using three interchangeable strategies:
- Marker rows: free-text rows such as "Standings Before Matchup / Total Statistics"
- Header-name anchors: the row holding a cell named e.g. "Team"
- Separator columns: columns blank in the overwhelming majority of sampled
  rows, delimiting variable-width column blocks

Missing anchors and required markers are reported as errors, never as an
empty section list.
"""

import logging
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

from .ingestion import Grid
from .value_normalizer import clean_cell, normalize_text, is_placeholder
from ..constants import (
    TEAM_LABEL,
    MAX_BLANK_RUN,
    MAX_ROWS,
    SEPARATOR_BLANK_THRESHOLD,
    SEPARATOR_SAMPLE_ROWS
)
from ..exceptions import RequiredColumnNotFound, RequiredMarkerNotFound, SectionTooSmall

# Configure logging
logger = logging.getLogger(__name__)

STRATEGY_MARKER = 'marker'
STRATEGY_ANCHOR = 'anchor'
STRATEGY_SEPARATOR = 'separator'
STRATEGIES = (STRATEGY_MARKER, STRATEGY_ANCHOR, STRATEGY_SEPARATOR)


class SectionBoundary(NamedTuple):
    """
    Half-open row range [start, end) of one section, a view over the grid

    header_row is -1 when the section has no header row in the grid;
    col_end of None means "up to the grid width".
    """
    start: int
    end: int
    header_row: int = -1
    col_start: int = 0
    col_end: Optional[int] = None
    label: str = ''

    @property
    def row_count(self) -> int:
        return max(0, self.end - self.start)

    def column_range(self, width: int) -> range:
        end = width if self.col_end is None else min(self.col_end, width)
        return range(self.col_start, end)


def _phrases(phrases) -> Tuple[str, ...]:
    if isinstance(phrases, str):
        phrases = (phrases,)
    return tuple(normalize_text(p) for p in phrases if normalize_text(p))


def row_matches_marker(row: Sequence, phrases) -> bool:
    """
    Check whether a row is a marker row

    The row's cells are concatenated and normalized; every phrase must be
    contained in the result.

    Args:
        row: Row cells
        phrases: One phrase or a sequence of phrases that must all be present

    Returns:
        True if the row contains all phrases
    """
    wanted = _phrases(phrases)
    if not wanted:
        return False
    text = normalize_text(' '.join(clean_cell(c) for c in row))
    return all(p in text for p in wanted)


def find_marker_rows(grid: Grid, phrases, start: int = 0) -> List[int]:
    """Indices of all marker rows at or after `start`"""
    return [i for i in range(max(0, start), len(grid)) if row_matches_marker(grid[i], phrases)]


def find_marker_row(grid: Grid, phrases, start: int = 0) -> int:
    """Index of the first marker row at or after `start`, -1 if none"""
    for i in range(max(0, start), len(grid)):
        if row_matches_marker(grid[i], phrases):
            return i
    return -1


def find_anchor_column(row: Sequence, anchor: str = TEAM_LABEL,
                       candidates: Optional[Iterable[str]] = None,
                       column: Optional[int] = None) -> int:
    """
    Find the cell canonically equal to an anchor label

    Args:
        row: Row cells
        anchor: Anchor label (compared normalized)
        candidates: Alternative spellings of the anchor
        column: When given, only this column index is checked

    Returns:
        Column index of the anchor or -1
    """
    wanted = {normalize_text(anchor)}
    wanted.update(normalize_text(c) for c in candidates or [])

    if column is not None:
        value = row[column] if 0 <= column < len(row) else ''
        return column if normalize_text(value) in wanted else -1

    for j, value in enumerate(row):
        if normalize_text(value) in wanted:
            return j
    return -1


def find_anchor_row(grid: Grid, anchor: str = TEAM_LABEL, start: int = 0,
                    candidates: Optional[Iterable[str]] = None,
                    column: Optional[int] = None) -> int:
    """Index of the first row holding the anchor label at or after `start`, -1 if none"""
    for i in range(max(0, start), len(grid)):
        if find_anchor_column(grid[i], anchor, candidates, column) >= 0:
            return i
    return -1


def next_non_blank_row(grid: Grid, start: int) -> int:
    """Index of the first non-blank row at or after `start`, -1 if none"""
    for i in range(max(0, start), len(grid)):
        if not grid.is_blank_row(i):
            return i
    return -1


def find_section_end(grid: Grid, start: int, stop_markers: Iterable = (),
                     stop_at_blank: bool = True, max_blank_run: int = MAX_BLANK_RUN) -> int:
    """
    Find the exclusive end row of a section starting at `start`

    The section ends at the next stop-marker row, at the next blank row
    (when stop_at_blank), or at the first row of a run of `max_blank_run`
    consecutive blank rows.

    Args:
        grid: Grid to scan
        start: First data row
        stop_markers: Marker phrase sets that end the section
        stop_at_blank: End at the first blank row
        max_blank_run: Blank rows in a row that end the section otherwise

    Returns:
        Exclusive end row index
    """
    stop_markers = [m for m in stop_markers if _phrases(m)]
    limit = min(len(grid), max(0, start) + MAX_ROWS)
    blank_run = 0

    for i in range(max(0, start), limit):
        row = grid[i]
        if any(row_matches_marker(row, m) for m in stop_markers):
            return i - blank_run

        if grid.is_blank_row(i):
            if stop_at_blank:
                return i
            blank_run += 1
            if blank_run >= max_blank_run:
                return i - blank_run + 1
            continue

        blank_run = 0

    return limit - blank_run


def discover_by_marker(grid: Grid, phrases, start: int = 0, stop_markers: Iterable = (),
                       stop_at_blank: bool = True, all_matches: bool = False,
                       required: bool = True, label: str = '') -> List[SectionBoundary]:
    """
    Locate sections introduced by marker rows

    The header row is the first non-blank row after the marker and data
    starts at the first non-blank row after the header.

    Args:
        grid: Grid to scan
        phrases: Marker phrase(s) that must all be present in the row
        start: Row to start scanning from
        stop_markers: Additional marker phrase sets that end a section
        stop_at_blank: End a section at the first blank row
        all_matches: Return one section per marker row instead of the first only
        required: Raise when no marker row exists
        label: Section label for diagnostics

    Returns:
        List of section boundaries

    Raises:
        RequiredMarkerNotFound: If required and no marker row matches
    """
    matches = find_marker_rows(grid, phrases, start)
    if not matches:
        if required:
            raise RequiredMarkerNotFound(_phrases(phrases), label or None)
        return []

    if not all_matches:
        matches = matches[:1]

    stops = [phrases] + list(stop_markers)
    sections = []
    for marker_row in matches:
        header_row = next_non_blank_row(grid, marker_row + 1)
        if header_row < 0 or any(row_matches_marker(grid[header_row], m) for m in stops):
            sections.append(SectionBoundary(marker_row + 1, marker_row + 1, -1, label=label))
            continue

        data_start = next_non_blank_row(grid, header_row + 1)
        if data_start < 0:
            data_start = len(grid)
        end = find_section_end(grid, data_start, stops, stop_at_blank)
        sections.append(SectionBoundary(data_start, end, header_row, label=label))

    logger.debug(f"Marker sections {_phrases(phrases)}: {sections}")
    return sections


def discover_by_anchor(grid: Grid, anchor: str = TEAM_LABEL, start: int = 0,
                       candidates: Optional[Iterable[str]] = None, column: Optional[int] = None,
                       stop_markers: Iterable = (), stop_at_blank: bool = True,
                       all_matches: bool = False, label: str = '') -> List[SectionBoundary]:
    """
    Locate sections whose header row holds an anchor label

    Args:
        grid: Grid to scan
        anchor: Anchor label, commonly "Team"
        start: Row to start scanning from
        candidates: Alternative spellings of the anchor
        column: Restrict the anchor to one column index
        stop_markers: Marker phrase sets that end a section
        stop_at_blank: End a section at the first blank row (else after a run of blank rows)
        all_matches: Return a section for every anchor row
        label: Section label for diagnostics

    Returns:
        List of section boundaries

    Raises:
        RequiredColumnNotFound: If no row holds the anchor label
    """
    header_row = find_anchor_row(grid, anchor, start, candidates, column)
    if header_row < 0:
        raise RequiredColumnNotFound(anchor, label or None)

    sections = []
    while header_row >= 0:
        end = find_section_end(grid, header_row + 1, stop_markers, stop_at_blank)
        sections.append(SectionBoundary(header_row + 1, end, header_row, label=label))
        if not all_matches:
            break
        header_row = find_anchor_row(grid, anchor, max(end, header_row + 1), candidates, column)

    logger.debug(f"Anchor sections {anchor!r}: {sections}")
    return sections


def detect_separator_columns(grid: Grid, start_row: int = 0, end_row: Optional[int] = None,
                             sample_size: int = SEPARATOR_SAMPLE_ROWS,
                             threshold: float = SEPARATOR_BLANK_THRESHOLD) -> List[int]:
    """
    Detect separator columns by sampling data rows

    A column is a separator when the fraction of sampled rows with a blank
    (or dash) cell in it reaches the threshold.

    Args:
        grid: Grid to sample
        start_row: First sampled row
        end_row: Exclusive end of the sampled range (default: grid end)
        sample_size: Maximum number of sampled rows
        threshold: Blank fraction that flags a separator

    Returns:
        Sorted list of separator column indices
    """
    end_row = len(grid) if end_row is None else min(end_row, len(grid))
    sample = [grid.row(i) for i in range(max(0, start_row), min(end_row, start_row + sample_size))]
    if not sample:
        return []

    separators = []
    for col in range(grid.width):
        blank = sum(1 for row in sample if is_placeholder(row[col]))
        if blank / len(sample) >= threshold:
            separators.append(col)

    logger.debug(f"Separator columns over {len(sample)} sampled rows: {separators}")
    return separators


def column_blocks(separators: Iterable[int], width: int, start_col: int = 0) -> List[Tuple[int, int]]:
    """
    Split the columns from `start_col` into runs between separators

    Returns:
        List of half-open (start, end) column ranges
    """
    separators = set(separators)
    blocks = []
    block_start = None
    for col in range(max(0, start_col), width):
        if col in separators:
            if block_start is not None:
                blocks.append((block_start, col))
                block_start = None
        elif block_start is None:
            block_start = col
    if block_start is not None:
        blocks.append((block_start, width))
    return blocks


def split_trailing(block: Tuple[int, int], count: int,
                   context: Optional[str] = None) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """
    Split a block into a leading variable-width part and `count` trailing columns

    Args:
        block: Half-open (start, end) column range
        count: Number of trailing columns known a priori
        context: Description for the error message

    Returns:
        Tuple of (leading range, trailing range)

    Raises:
        SectionTooSmall: If the block has fewer than `count` columns
    """
    start, end = block
    width = end - start
    if width < count:
        raise SectionTooSmall(width, count, context)
    return (start, end - count), (end - count, end)


def discover_by_separators(grid: Grid, header_row: Optional[int] = None, anchor: str = TEAM_LABEL,
                           trailing: int = 0, stop_markers: Iterable = (),
                           sample_size: int = SEPARATOR_SAMPLE_ROWS,
                           threshold: float = SEPARATOR_BLANK_THRESHOLD,
                           label: str = '') -> List[SectionBoundary]:
    """
    Locate column blocks right of an anchor column using separator detection

    The header row is found by the anchor label unless given. Data rows run
    until a stop marker or a long run of blank rows. When `trailing` is set, the first block is
    split into a variable-width part and `trailing` fixed columns taken from
    its tail, returned as two sections labelled "<label>:block" and
    "<label>:trailing".

    Args:
        grid: Grid to scan
        header_row: Header row index (found by anchor when None)
        anchor: Anchor label of the fixed column left of the blocks
        trailing: Number of fixed trailing columns of the first block
        stop_markers: Marker phrase sets that end the data rows
        sample_size: Rows sampled for separator detection
        threshold: Blank fraction that flags a separator
        label: Section label prefix

    Returns:
        List of section boundaries restricted to column ranges

    Raises:
        RequiredColumnNotFound: If the anchor column cannot be located
        SectionTooSmall: If the first block has fewer than `trailing` columns
    """
    if header_row is None:
        header_row = find_anchor_row(grid, anchor)
    if header_row < 0 or header_row >= len(grid):
        raise RequiredColumnNotFound(anchor, label or None)

    anchor_col = find_anchor_column(grid[header_row], anchor)
    if anchor_col < 0:
        raise RequiredColumnNotFound(anchor, label or None)

    start = header_row + 1
    end = find_section_end(grid, start, stop_markers, stop_at_blank=False)
    separators = [c for c in detect_separator_columns(grid, start, end, sample_size, threshold)
                  if c > anchor_col]

    blocks = column_blocks(separators, grid.width, anchor_col + 1)
    if not blocks:
        if trailing:
            raise SectionTooSmall(0, trailing, label or None)
        return []

    prefix = label or 'block'
    if not trailing:
        return [SectionBoundary(start, end, header_row, b[0], b[1], f"{prefix}:{n}")
                for n, b in enumerate(blocks)]

    lead, tail = split_trailing(blocks[0], trailing, label or None)
    sections = [
        SectionBoundary(start, end, header_row, lead[0], lead[1], f"{prefix}:block"),
        SectionBoundary(start, end, header_row, tail[0], tail[1], f"{prefix}:trailing"),
    ]
    logger.debug(f"Separator sections right of column {anchor_col}: {sections}")
    return sections


def find_sections(grid: Grid, strategy: str, **options) -> List[SectionBoundary]:
    """
    Locate sections of a grid with the given strategy

    Args:
        grid: Grid to scan
        strategy: 'marker', 'anchor' or 'separator'
        **options: Strategy options (see discover_by_marker, discover_by_anchor,
                   discover_by_separators)

    Returns:
        List of section boundaries

    Raises:
        RequiredColumnNotFound, RequiredMarkerNotFound, SectionTooSmall:
            When the structural precondition of the strategy fails
    """
    if strategy == STRATEGY_MARKER:
        phrases = options.pop('phrases')
        return discover_by_marker(grid, phrases, **options)
    if strategy == STRATEGY_ANCHOR:
        return discover_by_anchor(grid, **options)
    if strategy == STRATEGY_SEPARATOR:
        return discover_by_separators(grid, **options)
    raise ValueError(f"Unknown section strategy: {strategy}")
