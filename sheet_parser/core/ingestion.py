"""
Grid ingestion for spreadsheet exports

This module converts the two supported export encodings into one canonical
in-memory grid:
- Delimited text (CSV export) read with the csv module
- GViz JSON table object ({"table": {"cols": [...], "rows": [{"c": [...]}]}}),
  optionally wrapped in the google.visualization response envelope

Both paths strip trailing rows that are entirely empty.
"""

import csv
import io
import json
import logging
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from ..constants import MAX_COLUMNS
from ..exceptions import SourceDecodeError
from .value_normalizer import clean_cell, normalize_text

# Configure logging
logger = logging.getLogger(__name__)

SOURCE_FORMATS = ('auto', 'csv', 'gviz')

_GVIZ_ENVELOPE_HINTS = ('google.visualization', '/*O_o*/')


class Grid:
    """
    Immutable rows x cells view of one spreadsheet export

    Rows are tuples of raw cell strings; a row shorter than the longest row
    reads as empty beyond its length. ``labels`` holds the column label hints
    of a GViz export (empty for delimited text).
    """

    __slots__ = ('_rows', '_labels', '_width')

    def __init__(self, rows: Sequence[Sequence[str]], labels: Optional[Sequence[str]] = None):
        self._rows = tuple(tuple('' if c is None else str(c) for c in row) for row in rows)
        self._labels = tuple(clean_cell(label) for label in (labels or ()))
        self._width = max([len(row) for row in self._rows] + [len(self._labels)] + [0])

    @property
    def rows(self) -> Tuple[Tuple[str, ...], ...]:
        return self._rows

    @property
    def labels(self) -> Tuple[str, ...]:
        return self._labels

    @property
    def width(self) -> int:
        return self._width

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Tuple[str, ...]]:
        return iter(self._rows)

    def __getitem__(self, index):
        return self._rows[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self._rows == other._rows and self._labels == other._labels

    def __hash__(self) -> int:
        return hash((self._rows, self._labels))

    def __repr__(self) -> str:
        return f"Grid({len(self._rows)} rows x {self._width} columns)"

    def cell(self, row_index: int, col_index: int) -> str:
        """Raw cell at a position, "" outside the populated area"""
        if row_index < 0 or row_index >= len(self._rows) or col_index < 0:
            return ''
        row = self._rows[row_index]
        return row[col_index] if col_index < len(row) else ''

    def row(self, row_index: int) -> Tuple[str, ...]:
        """Row padded to the grid width"""
        row = self._rows[row_index]
        return row + ('',) * (self._width - len(row))

    def row_text(self, row_index: int) -> str:
        """Cells of a row joined and normalized for marker matching"""
        return normalize_text(' '.join(self._rows[row_index]))

    def is_blank_row(self, row_index: int) -> bool:
        return not any(clean_cell(c) for c in self._rows[row_index])

    def with_label_row(self) -> 'Grid':
        """
        Grid with the column labels prepended as row 0

        Used by sheet shapes whose header is the GViz label row.
        """
        return Grid((self._labels,) + self._rows, self._labels)


def _strip_trailing_blank_rows(rows: List[List[str]]) -> List[List[str]]:
    end = len(rows)
    while end > 0 and not any(clean_cell(c) for c in rows[end - 1]):
        end -= 1
    return rows[:end]


def parse_delimited(text: str, delimiter: str = ',') -> List[List[str]]:
    """
    Split delimited text into rows of raw cells

    Quoted fields may hold the separator, newlines and "" escaped quotes.

    Args:
        text: Delimited text
        delimiter: Field separator character (default: ",")

    Returns:
        List of rows, each a list of raw cell strings

    Raises:
        SourceDecodeError: If the text is not well-formed delimited text
    """
    reader = csv.reader(io.StringIO(text, newline=''), delimiter=delimiter, strict=True)
    try:
        return [row for row in reader]
    except csv.Error as e:
        raise SourceDecodeError(f"source not decodable: line {reader.line_num}: {e}") from e


def extract_gviz_payload(text: str) -> dict:
    """
    Extract the JSON object from a GViz response

    The response wraps the object in a JavaScript call; the object spans
    from the first "{" to the last "}".

    Args:
        text: Raw response text

    Returns:
        Decoded payload dictionary

    Raises:
        SourceDecodeError: If no JSON object boundary is found or it does not decode
    """
    start = text.find('{')
    end = text.rfind('}')
    if start < 0 or end < start:
        raise SourceDecodeError("source not decodable: GViz JSON not found")

    try:
        payload = json.loads(text[start:end + 1])
    except ValueError as e:
        raise SourceDecodeError(f"source not decodable: {e}") from e

    if not isinstance(payload, dict):
        raise SourceDecodeError("source not decodable: GViz payload is not an object")
    check_gviz_status(payload)
    return payload


def check_gviz_status(payload: Mapping) -> None:
    """Raise SourceDecodeError carrying the messages of an error response"""
    if payload.get('status') == 'error':
        messages = [err.get('message', '') for err in payload.get('errors') or [] if isinstance(err, dict)]
        raise SourceDecodeError("source not decodable: GViz error " + '; '.join(m for m in messages if m))


def gviz_cell_value(cell) -> str:
    """Formatted value of a GViz cell, else its raw value, else "" """
    if not isinstance(cell, Mapping):
        return ''
    if cell.get('f') is not None:
        return str(cell['f'])
    if cell.get('v') is not None:
        return str(cell['v'])
    return ''


def grid_from_gviz(payload: Mapping) -> Grid:
    """
    Build a grid from a decoded GViz payload

    Accepts either the full response object ({"table": {...}}) or the table
    object itself.

    Args:
        payload: Decoded GViz object

    Returns:
        Grid with one row per GViz row and the column labels as hints

    Raises:
        SourceDecodeError: If the object has no cols/rows lists
    """
    table = payload.get('table', payload)
    if not isinstance(table, Mapping):
        raise SourceDecodeError("source not decodable: GViz table is not an object")

    cols = table.get('cols') or []
    rows = table.get('rows') or []
    if not isinstance(cols, list) or not isinstance(rows, list):
        raise SourceDecodeError("source not decodable: GViz cols/rows are not lists")
    if 'cols' not in table and 'rows' not in table:
        raise SourceDecodeError("source not decodable: GViz table has no cols or rows")

    labels = [clean_cell(c.get('label')) if isinstance(c, Mapping) else '' for c in cols]
    grid_rows = []
    for r in rows:
        cells = r.get('c') if isinstance(r, Mapping) else None
        grid_rows.append([gviz_cell_value(c) for c in (cells or [])][:MAX_COLUMNS])

    grid_rows = _strip_trailing_blank_rows(grid_rows)
    logger.debug(f"GViz grid: {len(grid_rows)} rows, {len(labels)} labelled columns")
    return Grid(grid_rows, labels[:MAX_COLUMNS])


def grid_from_delimited(text: str, delimiter: str = ',') -> Grid:
    """Build a grid from delimited text"""
    rows = _strip_trailing_blank_rows([row[:MAX_COLUMNS] for row in parse_delimited(text, delimiter)])
    logger.debug(f"Delimited grid: {len(rows)} rows")
    return Grid(rows)


def _looks_like_gviz(text: str) -> bool:
    stripped = text.lstrip()
    return stripped.startswith('{') or any(hint in text[:256] for hint in _GVIZ_ENVELOPE_HINTS)


def _try_gviz_object(text: str) -> Optional[dict]:
    start = text.find('{')
    end = text.rfind('}')
    if start < 0 or end < start:
        return None
    try:
        payload = json.loads(text[start:end + 1])
    except ValueError as e:
        logger.debug(f"No GViz JSON object ({e}), reading as delimited text")
        return None
    return payload if isinstance(payload, dict) else None


def ingest(source: Union[str, bytes, Mapping], source_format: str = 'auto', delimiter: str = ',') -> Grid:
    """
    Convert a spreadsheet export into a canonical grid

    Args:
        source: Delimited text, a GViz response text, or a decoded GViz object
        source_format: 'auto' (detect), 'csv' or 'gviz'
        delimiter: Field separator for delimited text

    Returns:
        Grid of raw cell strings with trailing blank rows removed

    Raises:
        SourceDecodeError: If the source is neither a GViz table nor delimited text
    """
    if source_format not in SOURCE_FORMATS:
        raise ValueError(f"Unknown source format: {source_format}")

    if isinstance(source, Mapping):
        return grid_from_gviz(source)

    if isinstance(source, bytes):
        try:
            source = source.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise SourceDecodeError(f"source not decodable: {e}") from e

    if not isinstance(source, str):
        raise SourceDecodeError(f"source not decodable: unsupported type {type(source).__name__}")

    text = source.lstrip('\ufeff')
    if not text.strip():
        raise SourceDecodeError("source not decodable: empty input")

    if source_format == 'gviz':
        return grid_from_gviz(extract_gviz_payload(text))

    if source_format == 'auto' and _looks_like_gviz(text):
        payload = _try_gviz_object(text)
        if payload is not None:
            check_gviz_status(payload)
            try:
                return grid_from_gviz(payload)
            except SourceDecodeError as e:
                logger.debug(f"Not a GViz table ({e}), reading as delimited text")

    return grid_from_delimited(text, delimiter)
