"""
Excel Output Module for the Alumni Directory Crawler
Converts the crawl CSV into a formatted workbook.

Sheet Structure:
    1. Alumni - Every record with all columns
    2. With Email - Records that have at least one email
    3. Field Coverage - Populated counts per column

Formatting Features:
    - Styled, frozen header row
    - Auto-fit column widths
    - Data filters on headers
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import pandas as pd
from loguru import logger
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows
from openpyxl.worksheet.worksheet import Worksheet

from alumni_crawler.models import NOT_AVAILABLE
from alumni_crawler.statistics import calculate_field_coverage

COLORS = {
    'header': '8C1515',      # Cardinal red
    'header_text': 'FFFFFF',
}


def apply_header_formatting(ws: Worksheet) -> None:
    """
    Apply formatting to header row (row 1).

    Args:
        ws: Worksheet to format
    """
    header_fill = PatternFill(start_color=COLORS['header'], end_color=COLORS['header'], fill_type='solid')
    header_font = Font(bold=True, color=COLORS['header_text'], size=11)
    header_alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)

    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = header_alignment


def auto_fit_columns(ws: Worksheet, max_width: int = 60) -> None:
    """
    Auto-fit column widths based on content.

    Args:
        ws: Worksheet to adjust
        max_width: Maximum column width
    """
    for column in ws.columns:
        column_letter = get_column_letter(column[0].column)
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        ws.column_dimensions[column_letter].width = min(max_length + 2, max_width)


def apply_data_filters(ws: Worksheet) -> None:
    if ws.max_row > 1:
        ws.auto_filter.ref = ws.dimensions


def freeze_header_row(ws: Worksheet) -> None:
    ws.freeze_panes = 'A2'


def add_records_sheet(wb: Workbook, records_df: pd.DataFrame, title: str) -> Worksheet:
    """
    Add a sheet holding ``records_df`` with the standard header formatting.

    Args:
        wb: Workbook to add sheet to
        records_df: Rows to write
        title: Sheet name
    """
    ws = wb.create_sheet(title=title)

    if records_df.empty:
        ws.append(["No records found"])
        logger.warning(f"No records for {title} sheet")
        return ws

    for row in dataframe_to_rows(records_df, index=False, header=True):
        ws.append(row)

    apply_header_formatting(ws)
    freeze_header_row(ws)
    auto_fit_columns(ws)
    apply_data_filters(ws)

    logger.info(f"Added {title} sheet: {len(records_df)} records")
    return ws


def add_coverage_sheet(wb: Workbook, coverage: Dict[str, Dict[str, Any]]) -> Worksheet:
    """
    Add the field coverage sheet.

    Args:
        wb: Workbook to add sheet to
        coverage: Output of calculate_field_coverage()
    """
    ws = wb.create_sheet(title="Field Coverage")
    ws.append(['Field', 'Populated', 'Percentage'])
    for column, data in coverage.items():
        ws.append([column, data.get('count', 0), f"{data.get('percentage', 0)}%"])

    apply_header_formatting(ws)
    freeze_header_row(ws)
    auto_fit_columns(ws)
    return ws


def _has_email(records_df: pd.DataFrame) -> pd.Series:
    mask = pd.Series(False, index=records_df.index)
    for column in ('Stanford Email', 'Personal Email'):
        if column in records_df.columns:
            mask |= records_df[column].fillna(NOT_AVAILABLE) != NOT_AVAILABLE
    return mask


def export_to_excel(csv_path: Union[str, Path], output_path: Optional[Union[str, Path]] = None) -> Path:
    """
    Create the Excel workbook for an output CSV.

    Args:
        csv_path: Crawler output CSV
        output_path: Workbook path (default: the CSV path with .xlsx)

    Returns:
        Path of the saved workbook

    Raises:
        FileNotFoundError: The CSV does not exist
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV not found: {csv_path}")

    output_path = Path(output_path) if output_path else csv_path.with_suffix('.xlsx')
    logger.info(f"Creating Excel workbook: {output_path}")

    records_df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)

    wb = Workbook()
    if 'Sheet' in wb.sheetnames:
        wb.remove(wb['Sheet'])

    add_records_sheet(wb, records_df, "Alumni")
    add_records_sheet(wb, records_df[_has_email(records_df)] if not records_df.empty else records_df,
                      "With Email")
    add_coverage_sheet(wb, calculate_field_coverage(records_df))

    wb.save(output_path)
    logger.success(f"Excel workbook created successfully: {output_path}")
    return output_path
