"""
Excel exporter for reconciliations.

Renders a ``RehydratedReconciliation`` into a single-sheet workbook and
returns its bytes.  Numbers are written as numbers (Decimal cells), so the
workbook can be summed and filtered; only header and totals labels are
text.  Column widths are fitted to the longest value in each column.
"""

from __future__ import annotations

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from haulage_kernel.domain.vouchers import VoucherKind
from haulage_kernel.logging_config import get_logger
from haulage_engines.grouping import NO_PLATE
from haulage_modules.conciliation.formatting import (
    TableRow,
    columns_for,
    format_table_rows,
    rows_by_material_type,
)
from haulage_modules.conciliation.models import RehydratedReconciliation
from haulage_modules.export._common import (
    PLATE_SUMMARY_HEADER,
    TITLES,
    header_lines,
    material_section_title,
    material_type_lines,
    plate_summary_rows,
    totals_lines,
)

logger = get_logger("modules.export.excel")

_HEADER_FONT = Font(bold=True, color="FFFFFF")
_HEADER_FILL = PatternFill("solid", fgColor="233B64")
_BOLD = Font(bold=True)
_MONEY_FORMAT = "#,##0.00"
_MAX_WIDTH = 50


def _write_table_header(ws: Worksheet, row: int, headers: list[str]) -> int:
    for col, header in enumerate(headers, start=1):
        cell = ws.cell(row=row, column=col, value=header)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = Alignment(horizontal="center")
    return row + 1


def _write_rows(ws: Worksheet, row: int, kind: VoucherKind, rows: list[TableRow]) -> int:
    row = _write_table_header(ws, row, [h for h, _ in columns_for(kind)])
    for table_row in rows:
        for col, value in enumerate(table_row.cells(), start=1):
            if isinstance(value, bool):
                value = "Sí" if value else "No"
            cell = ws.cell(row=row, column=col, value=value)
            if col == len(columns_for(kind)):
                cell.number_format = _MONEY_FORMAT
        row += 1
    return row


def _write_label_values(ws: Worksheet, row: int, lines: list[tuple[str, str]]) -> int:
    for label, value in lines:
        ws.cell(row=row, column=1, value=label).font = _BOLD
        ws.cell(row=row, column=2, value=value)
        row += 1
    return row


def _fit_columns(ws: Worksheet) -> None:
    widths: dict[int, int] = {}
    for cells in ws.iter_rows():
        for cell in cells:
            if cell.value is None:
                continue
            widths[cell.column] = max(widths.get(cell.column, 0), len(str(cell.value)))
    for col, width in widths.items():
        ws.column_dimensions[get_column_letter(col)].width = min(width + 2, _MAX_WIDTH)


def build_excel(
    view: RehydratedReconciliation,
    sentinel_plate: str = NO_PLATE,
) -> bytes:
    """Render the reconciliation workbook and return the .xlsx bytes."""
    stored = view.reconciliation
    kind = stored.kind

    wb = Workbook()
    ws = wb.active
    ws.title = stored.folio

    ws.cell(row=1, column=1, value=TITLES[kind]).font = Font(bold=True, size=14)
    row = _write_label_values(ws, 3, header_lines(view)) + 1

    rows = format_table_rows(view.plate_groups, sentinel_plate)
    if kind is VoucherKind.MATERIAL:
        for material_type, section in rows_by_material_type(rows).items():
            ws.cell(row=row, column=1, value=material_section_title(material_type)).font = _BOLD
            row = _write_rows(ws, row + 1, kind, section)
            row = _write_label_values(ws, row, material_type_lines(view.totals, material_type)) + 1
    else:
        row = _write_rows(ws, row, kind, rows) + 1

    ws.cell(row=row, column=1, value="Resumen por placas").font = _BOLD
    row = _write_table_header(ws, row + 1, PLATE_SUMMARY_HEADER)
    for summary in plate_summary_rows(view.plate_groups, sentinel_plate):
        for col, value in enumerate(summary, start=1):
            cell = ws.cell(row=row, column=col, value=value)
            if col == len(summary):
                cell.number_format = _MONEY_FORMAT
        row += 1

    _write_label_values(ws, row + 1, totals_lines(view.totals))
    _fit_columns(ws)

    buf = BytesIO()
    wb.save(buf)
    logger.info(
        "excel_exported",
        extra={"folio": stored.folio, "kind": kind.value, "rows": len(rows)},
    )
    return buf.getvalue()
