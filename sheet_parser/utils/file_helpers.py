"""
File operation utilities for sheet exports

This module provides functions for:
- Normalizing sheet/table names for filenames
- Creating directories
- Generating output file paths
"""

import logging
import os
import re

# Configure logging
logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """
    Normalize a name for a filesystem-safe filename

    Removes punctuation and replaces spaces and dashes with underscores.

    Args:
        name: Name to normalize

    Returns:
        Normalized lowercase name with underscores
    """
    clean_name = re.sub(r'[^\w\s-]', '', name.strip())
    clean_name = re.sub(r'[\s-]+', '_', clean_name)
    return clean_name.lower()


def ensure_directory_exists(directory_path: str) -> None:
    """
    Create directory if it doesn't exist

    Args:
        directory_path: Path to directory
    """
    if directory_path and not os.path.exists(directory_path):
        os.makedirs(directory_path)
        logger.info(f"Created directory: {directory_path}")


def get_output_path(shape: str, table_name: str, output_dir: str = None,
                    suffix: str = "") -> str:
    """
    Generate output file path for one exported table

    Args:
        shape: Sheet shape name (e.g. "history")
        table_name: Table name within the sheet (e.g. "standings")
        output_dir: Output directory (default: current directory)
        suffix: Suffix to add to filename (e.g. "_rankings")

    Returns:
        Complete output file path
    """
    filename = f"{normalize_name(shape)}_{normalize_name(table_name)}{suffix}.csv"

    if output_dir:
        ensure_directory_exists(output_dir)
        return os.path.join(output_dir, filename)
    return filename
