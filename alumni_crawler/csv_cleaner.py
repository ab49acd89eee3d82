"""
Re-filter an existing output CSV.

Older runs (or a changed denylist) can leave site-chrome "names" and
repeated names in the file. Cleaning drops both and rewrites the file in
place.
"""

from pathlib import Path
from typing import Tuple, Union

import pandas as pd
from loguru import logger

from alumni_crawler.deduplication import is_valid_alumni_name, normalize_name
from alumni_crawler.models import NAME_HEADER


def clean_csv(csv_path: Union[str, Path]) -> Tuple[int, int]:
    """
    Drop invalid and duplicate names from an output file.

    The first occurrence of each name is kept.

    Args:
        csv_path: Output CSV to rewrite

    Returns:
        (rows kept, rows removed)

    Raises:
        FileNotFoundError: The CSV does not exist
        ValueError: The CSV has no Name column
    """
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"CSV not found: {path}")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    if NAME_HEADER not in df.columns:
        raise ValueError(f"{path} has no '{NAME_HEADER}' column")

    original = len(df)

    valid = df[NAME_HEADER].apply(is_valid_alumni_name).astype(bool)
    for name in df.loc[~valid, NAME_HEADER]:
        logger.debug(f"Removing invalid name: {name}")
    df = df[valid]

    duplicated = df[NAME_HEADER].map(normalize_name).duplicated(keep='first')
    for name in df.loc[duplicated, NAME_HEADER]:
        logger.debug(f"Removing duplicate name: {name}")
    df = df[~duplicated]

    df.to_csv(path, index=False)

    kept, removed = len(df), original - len(df)
    logger.success(f"Cleaned {path}: kept {kept}, removed {removed}")
    return kept, removed
