"""
Utility functions for sheet parsing

Contains modules for:
- League and division helpers (league_helpers.py)
- File operations (file_helpers.py)
"""

from .league_helpers import (
    division_from_league,
    league_number,
    league_sort_key,
    same_league
)
from .file_helpers import (
    normalize_name,
    ensure_directory_exists,
    get_output_path
)

__all__ = [
    'division_from_league',
    'league_number',
    'league_sort_key',
    'same_league',
    'normalize_name',
    'ensure_directory_exists',
    'get_output_path'
]
