"""
Deduplication Module for the Alumni Directory Crawler
Filters site-chrome "names" and suppresses records already written.

Dedup Strategy:
    - Name is the only identity key
    - Seed set is loaded once from the existing output file at start
    - Every accepted record adds its name to the set for the rest of the run

Functions:
    - normalize_name: Comparison key for names
    - is_valid_alumni_name: Denylist + length filter for extracted names
    - load_existing_names: Read the Name column of an existing output CSV
    - SeenNames: The run's dedup set
"""

import re
from pathlib import Path
from typing import Iterable, Optional, Set, Union

import pandas as pd
from loguru import logger

from alumni_crawler.models import NAME_HEADER, NOT_AVAILABLE

# Text that the card-name selector picks up from page chrome instead of people
NAME_DENYLIST = [
    'Stanford',
    'University',
    'Alumni Directory',
    '(link is external)',
    'Maps & Directions',
    'Terms of Use',
    'Emergency Info',
    'Copyright',
    'Privacy',
    'Trademarks',
]

MAX_NAME_LENGTH = 200


def normalize_name(name: str) -> str:
    """
    Normalize name for comparison (lowercase, remove extra whitespace).

    Args:
        name: Name string to normalize

    Returns:
        Normalized name string
    """
    if name is None or pd.isna(name):
        return ""
    return re.sub(r'\s+', ' ', str(name).strip().lower())


def is_valid_alumni_name(name: Optional[str]) -> bool:
    """
    Check that an extracted name looks like a person and not site chrome.

    Args:
        name: Raw extracted name

    Returns:
        False for empty/N/A names, denylisted substrings, or overlong text
    """
    if not name or not str(name).strip():
        return False

    name = str(name).strip()
    if name == NOT_AVAILABLE:
        return False
    if len(name) >= MAX_NAME_LENGTH:
        return False
    return not any(blocked in name for blocked in NAME_DENYLIST)


def load_existing_names(file_path: Union[str, Path]) -> Set[str]:
    """
    Load the names already present in an output CSV.

    Args:
        file_path: Path to the crawler output file

    Returns:
        Set of raw names (empty if the file is missing, empty, or has no Name column)
    """
    path = Path(file_path)

    if not path.exists() or path.stat().st_size == 0:
        logger.info(f"No existing output at {path}, starting with empty name set")
        return set()

    try:
        df = pd.read_csv(path, usecols=lambda col: col == NAME_HEADER, dtype=str)
    except pd.errors.EmptyDataError:
        return set()

    if NAME_HEADER not in df.columns:
        logger.warning(f"Existing output {path} has no '{NAME_HEADER}' column")
        return set()

    names = {str(n).strip() for n in df[NAME_HEADER].dropna() if str(n).strip()}
    logger.info(f"Loaded {len(names)} existing names from {path}")
    return names


class SeenNames:
    """
    Names already written, in this run or a previous one.

    Membership is by normalized name so "Jane  Doe" and "jane doe" collide.
    """

    def __init__(self, names: Optional[Iterable[str]] = None):
        self._keys: Set[str] = set()
        for name in names or []:
            self.add(name)

    @classmethod
    def from_csv(cls, file_path: Union[str, Path]) -> 'SeenNames':
        """Seed the set from an existing output file."""
        return cls(load_existing_names(file_path))

    def add(self, name: str) -> None:
        key = normalize_name(name)
        if key:
            self._keys.add(key)

    def __contains__(self, name: str) -> bool:
        return normalize_name(name) in self._keys

    def __len__(self) -> int:
        return len(self._keys)
