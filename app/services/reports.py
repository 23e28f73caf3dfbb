# app/services/reports.py
from __future__ import annotations

import io
import re
from datetime import datetime
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from app.schemas.ranking import PowerIndexResult
from app.services.ranking.categories import CategoryTable
from app.services.ranking.formatter import to_report_table

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

NUMBER_FORMAT = "0.00"
_THIN = Side(style="thin")
_BORDER = Border(top=_THIN, left=_THIN, bottom=_THIN, right=_THIN)
_HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFD3D3D3")
_FIXED_WIDTHS = [8, 30, 25, 15]  # Rank, Team Name, Manager, Power Index
_STAT_WIDTH = 12


def report_filename(league_name: str, week: int, year: int) -> str:
    safe = re.sub(r"\W+", "_", league_name or "League")
    return f"Yahoo_MLB_{safe}_Week_{week}_{year}_Report.xlsx"


def build_weekly_report(
    league_name: str,
    week: int,
    year: int,
    results: Sequence[PowerIndexResult],
    table: CategoryTable,
) -> bytes:
    """
    Weekly power index workbook: merged title row, grey header row, one row
    per ranked team with its stat columns. Returns the .xlsx bytes.
    """
    report = to_report_table(results, table)
    headers = report["headers"]
    ncols = len(headers)

    wb = Workbook()
    wb.properties.creator = "Yahoo Fantasy Dashboard"
    wb.properties.lastModifiedBy = "Yahoo Fantasy Dashboard"
    wb.properties.created = datetime.now()
    ws = wb.active
    # sheet titles are capped at 31 chars by Excel
    ws.title = f"Week {week} Power Index"[:31]

    # title
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=ncols)
    title = ws.cell(row=1, column=1, value=f"{league_name} - Week {week}, {year} Power Index Report")
    title.font = Font(size=16, bold=True)
    title.alignment = Alignment(horizontal="center")

    # header
    for col, header in enumerate(headers, start=1):
        cell = ws.cell(row=2, column=col, value=header)
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center")
        cell.fill = _HEADER_FILL
        cell.border = _BORDER

    # rows
    for r_idx, row in enumerate(report["rows"], start=3):
        for col, value in enumerate(row, start=1):
            cell = ws.cell(row=r_idx, column=col, value=value)
            cell.border = _BORDER
            if col in (1, 4):
                cell.alignment = Alignment(horizontal="center")
            if col >= 4 and isinstance(value, float):
                cell.number_format = NUMBER_FORMAT

    for col in range(1, ncols + 1):
        width = _FIXED_WIDTHS[col - 1] if col <= len(_FIXED_WIDTHS) else _STAT_WIDTH
        ws.column_dimensions[get_column_letter(col)].width = width

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
