"""
Statistics Module for the Alumni Directory Crawler
Summarizes how well each field was populated in the output CSV.

Functions:
    - calculate_field_coverage: Per-column populated counts and percentages
    - get_email_breakdown: Institutional vs personal email coverage
    - get_flag_breakdown: Yes counts for the two support flags
    - summarize_output: Main orchestrator over an output file
"""

from pathlib import Path
from typing import Any, Dict, Union

import pandas as pd
from loguru import logger

from alumni_crawler.models import CSV_HEADERS, NOT_AVAILABLE


def _populated(series: pd.Series) -> pd.Series:
    values = series.fillna(NOT_AVAILABLE).astype(str).str.strip()
    return (values != '') & (values != NOT_AVAILABLE)


def calculate_field_coverage(records_df: pd.DataFrame) -> Dict[str, Dict[str, Any]]:
    """
    Count rows with a real value (not "N/A", not blank) per column.

    Args:
        records_df: DataFrame read from the output CSV

    Returns:
        Dictionary mapping column to count and percentage
        Example: {'Location': {'count': 120, 'percentage': 40.0}, ...}
    """
    if records_df.empty:
        return {}

    total = len(records_df)
    coverage = {}
    for column in records_df.columns:
        count = int(_populated(records_df[column]).sum())
        coverage[column] = {
            'count': count,
            'percentage': round((count / total) * 100, 1),
        }

    logger.debug(f"Field coverage calculated for {len(coverage)} columns")
    return coverage


def get_email_breakdown(records_df: pd.DataFrame) -> Dict[str, Any]:
    """
    Institutional vs personal email coverage.

    Returns:
        Example: {'stanford_email': 80, 'personal_email': 35, 'any_email': 95, 'any_email_pct': 31.7}
    """
    if records_df.empty:
        return {'stanford_email': 0, 'personal_email': 0, 'any_email': 0, 'any_email_pct': 0.0}

    total = len(records_df)
    empty = pd.Series(False, index=records_df.index)
    stanford = _populated(records_df['Stanford Email']) if 'Stanford Email' in records_df.columns else empty
    personal = _populated(records_df['Personal Email']) if 'Personal Email' in records_df.columns else empty
    any_email = stanford | personal

    return {
        'stanford_email': int(stanford.sum()),
        'personal_email': int(personal.sum()),
        'any_email': int(any_email.sum()),
        'any_email_pct': round((any_email.sum() / total) * 100, 1),
    }


def get_flag_breakdown(records_df: pd.DataFrame) -> Dict[str, int]:
    """Number of "Yes" values per flag column."""
    result = {}
    for column in ('Career Support', 'Professional Contact'):
        if column in records_df.columns:
            result[column] = int((records_df[column].astype(str).str.strip() == 'Yes').sum())
        else:
            result[column] = 0
    return result


def summarize_output(csv_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Main orchestrator: read an output CSV and calculate all statistics.

    Args:
        csv_path: Crawler output file

    Returns:
        Dictionary with total_records, field_coverage, email_breakdown, flags.
        A missing or empty file gives total_records 0.
    """
    path = Path(csv_path)
    if not path.exists() or path.stat().st_size == 0:
        logger.warning(f"No output to summarize at {path}")
        return {'total_records': 0, 'field_coverage': {}, 'email_breakdown': get_email_breakdown(pd.DataFrame()),
                'flags': {'Career Support': 0, 'Professional Contact': 0}}

    try:
        records_df = pd.read_csv(path, dtype=str)
    except pd.errors.EmptyDataError:
        records_df = pd.DataFrame(columns=CSV_HEADERS)

    stats = {
        'total_records': len(records_df),
        'field_coverage': calculate_field_coverage(records_df),
        'email_breakdown': get_email_breakdown(records_df),
        'flags': get_flag_breakdown(records_df),
    }

    logger.info(f"Statistics calculation complete: {stats['total_records']} records in {path}")
    return stats


def log_summary(stats: Dict[str, Any]) -> None:
    """Write a statistics dict to the log, one line per column."""
    logger.info(f"Total records: {stats.get('total_records', 0)}")
    for column, data in stats.get('field_coverage', {}).items():
        logger.info(f"  {column:<22} {data['count']:>6} ({data['percentage']}%)")

    emails = stats.get('email_breakdown', {})
    logger.info(f"Stanford emails: {emails.get('stanford_email', 0)}, "
                f"personal emails: {emails.get('personal_email', 0)}, "
                f"any email: {emails.get('any_email', 0)} ({emails.get('any_email_pct', 0)}%)")

    for flag, count in stats.get('flags', {}).items():
        logger.info(f"{flag}: {count}")
