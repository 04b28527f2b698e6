"""
Cell value normalization for hand-kept spreadsheet exports

This module provides pure functions that classify a raw cell string into a
typed value (empty, numeric or text), handling:
- Dash placeholders ("—", "-", "–")
- Percent suffixes ("54.3%" -> 0.543)
- Thousands separators and comma decimals ("1,234", "54,3%")
- Currency-like symbols
"""

import re
from decimal import Decimal
from typing import NamedTuple, Optional

from ..constants import EMPTY_PLACEHOLDERS, DASH_GLYPHS, CURRENCY_SYMBOLS

EMPTY = 'empty'
NUMERIC = 'numeric'
TEXT = 'text'

_NUMBER_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)$')
_THOUSANDS_RE = re.compile(r'^[+-]?[1-9]\d{0,2}(,\d{3})+(\.\d+)?$')
_WHITESPACE_RE = re.compile(r'\s+')
# Unicode minus and en/em dashes written in front of a number
_LEADING_DASH_RE = re.compile(r'^[−–—](?=[\d.])')


class TypedValue(NamedTuple):
    """Classified cell value"""
    kind: str
    numeric: Optional[float]
    text: str
    dashed: bool = False

    @property
    def is_empty(self) -> bool:
        return self.kind == EMPTY

    @property
    def is_numeric(self) -> bool:
        return self.kind == NUMERIC


def clean_cell(value) -> str:
    """
    Convert a raw cell to a stripped string

    None becomes "", carriage returns are dropped and non-breaking
    spaces become regular spaces.

    Args:
        value: Raw cell value (any type)

    Returns:
        Stripped string
    """
    if value is None:
        return ''
    text = str(value).replace('\r', '').replace('\u00a0', ' ')
    return text.replace('\uff05', '%').strip()


def normalize_text(value) -> str:
    """Lower-case a cell and collapse internal whitespace to single spaces"""
    return _WHITESPACE_RE.sub(' ', clean_cell(value).lower())


def is_placeholder(value) -> bool:
    """Check whether a cell is empty or a dash placeholder"""
    return clean_cell(value) in EMPTY_PLACEHOLDERS


def display_value(value) -> str:
    """Cell text for display, with "—" standing in for empty cells"""
    text = clean_cell(value)
    return text if text else '—'


def _parse_decimal(value) -> Optional[Decimal]:
    """
    Parse a cell as an exact decimal without the percent rule

    Strips %, thousands separators and currency symbols; a single comma is
    read as the decimal separator when no "." is present and the text is not
    a thousands-grouped integer.

    Args:
        value: Raw cell value

    Returns:
        Parsed Decimal or None when the cell is not numeric
    """
    text = _LEADING_DASH_RE.sub('-', clean_cell(value))
    if not text:
        return None

    for symbol in CURRENCY_SYMBOLS:
        text = text.replace(symbol, '')
    text = text.replace(' ', '')
    if text.endswith('%'):
        text = text[:-1]
    if not text:
        return None

    if _THOUSANDS_RE.match(text):
        text = text.replace(',', '')
    elif ',' in text and '.' not in text and text.count(',') == 1:
        text = text.replace(',', '.')

    if not _NUMBER_RE.match(text):
        return None
    return Decimal(text)


def parse_number(value) -> Optional[float]:
    """Parse a cell as a float without the percent rule, or None"""
    number = _parse_decimal(value)
    return float(number) if number is not None else None


def classify(raw) -> TypedValue:
    """
    Classify a raw cell string into a typed value

    - Empty and dash placeholders classify as empty
    - Numbers (with percent, thousands, comma-decimal and currency handling)
      classify as numeric; a trailing % divides by 100 only when the
      magnitude is greater than 1
    - Anything else is text, lower-cased with whitespace collapsed

    Args:
        raw: Raw cell value

    Returns:
        TypedValue describing the cell
    """
    text = clean_cell(raw)
    if text in EMPTY_PLACEHOLDERS:
        return TypedValue(EMPTY, None, '')

    number = _parse_decimal(text)
    if number is None:
        return TypedValue(TEXT, None, normalize_text(text))

    if text.endswith('%') and abs(number) > 1:
        number = number / 100

    # "-0" style cells are placeholders that happen to parse as zero
    dashed = number == 0 and text.startswith(DASH_GLYPHS)
    return TypedValue(NUMERIC, float(number) or 0.0, normalize_text(text), dashed)


def to_number(raw) -> Optional[float]:
    """Numeric value of a cell after classification, or None"""
    value = classify(raw)
    return value.numeric if value.is_numeric else None
