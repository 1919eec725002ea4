"""
PDF exporter for reconciliations.

Renders a ``RehydratedReconciliation`` onto landscape letter pages with
reportlab and returns the document bytes.  Detail tables repeat their
header row when they spill onto a new page.
"""

from __future__ import annotations

from datetime import date
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

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
    fmt_money,
    fmt_quantity,
    header_lines,
    material_section_title,
    material_type_lines,
    plate_summary_rows,
    totals_lines,
)

logger = get_logger("modules.export.pdf")

_MARGIN = 12 * mm

_GRID_STYLE = TableStyle([
    ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 8),
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#233b64")),
    ("FONTSIZE", (0, 1), (-1, -1), 7),
    ("ALIGN", (-1, 1), (-1, -1), "RIGHT"),
    ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#d8e2f0")),
    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.whitesmoke, colors.HexColor("#f7f9fc")]),
    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
])

_LABEL_STYLE = TableStyle([
    ("FONT", (0, 0), (0, -1), "Helvetica-Bold", 9),
    ("FONTSIZE", (1, 0), (1, -1), 9),
    ("ALIGN", (1, 0), (1, -1), "RIGHT"),
    ("LEFTPADDING", (0, 0), (-1, -1), 2),
])


def _cell(value) -> str:
    if isinstance(value, date):
        return value.isoformat()
    if value is None:
        return ""
    return fmt_quantity(value)


def _detail_table(kind: VoucherKind, rows: list[TableRow]) -> Table:
    data = [[header for header, _ in columns_for(kind)]]
    for row in rows:
        cells = row.cells()
        data.append([_cell(v) for v in cells[:-1]] + [fmt_money(cells[-1])])
    table = Table(data, repeatRows=1)
    table.setStyle(_GRID_STYLE)
    return table


def _label_table(lines: list[tuple[str, str]]) -> Table:
    table = Table([list(line) for line in lines], hAlign="LEFT")
    table.setStyle(_LABEL_STYLE)
    return table


def build_pdf(
    view: RehydratedReconciliation,
    sentinel_plate: str = NO_PLATE,
) -> bytes:
    """Render the reconciliation document and return the PDF bytes."""
    stored = view.reconciliation
    kind = stored.kind

    styles = getSampleStyleSheet()
    title_style = styles["Heading2"]
    section_style = ParagraphStyle("Section", parent=styles["Heading4"], spaceBefore=6, spaceAfter=4)

    story = [
        Paragraph(TITLES[kind], title_style),
        _label_table(header_lines(view)),
        Spacer(1, 4 * mm),
    ]

    rows = format_table_rows(view.plate_groups, sentinel_plate)
    if kind is VoucherKind.MATERIAL:
        for material_type, section in rows_by_material_type(rows).items():
            story.append(Paragraph(material_section_title(material_type), section_style))
            story.append(_detail_table(kind, section))
            story.append(_label_table(material_type_lines(view.totals, material_type)))
    else:
        story.append(_detail_table(kind, rows))

    summary = [PLATE_SUMMARY_HEADER]
    for plate, vouchers, trips, subtotal in plate_summary_rows(view.plate_groups, sentinel_plate):
        summary.append([plate, str(vouchers), str(trips), fmt_money(subtotal)])
    summary_table = Table(summary, repeatRows=1, hAlign="LEFT")
    summary_table.setStyle(_GRID_STYLE)

    story.extend([
        Paragraph("Resumen por placas", section_style),
        summary_table,
        Spacer(1, 4 * mm),
        _label_table(totals_lines(view.totals)),
    ])

    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=landscape(letter),
        leftMargin=_MARGIN,
        rightMargin=_MARGIN,
        topMargin=_MARGIN,
        bottomMargin=_MARGIN,
        title=f"{TITLES[kind]} {stored.folio}",
    )
    doc.build(story)
    logger.info(
        "pdf_exported",
        extra={"folio": stored.folio, "kind": kind.value, "rows": len(rows)},
    )
    return buf.getvalue()
