"""
Shared document layout for the Excel and PDF exporters.

Both formats print the same blocks: a header, the detail table (split per
material type for material), a per-plate summary and the totals.  The
blocks are built here as plain label/value lists so the two renderers only
differ in how they draw them.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import assert_never

from haulage_kernel.domain.vouchers import MaterialType, VoucherKind
from haulage_kernel.domain.weeks import format_week_range
from haulage_engines.accumulators import round2
from haulage_engines.grouping import NO_PLATE, PlateGroup, sorted_groups
from haulage_engines.totals import Totals, calculate_unit_prices
from haulage_modules.conciliation.formatting import MATERIAL_TYPE_LABELS
from haulage_modules.conciliation.models import RehydratedReconciliation

TITLES = {
    VoucherKind.RENTAL: "Conciliación de renta de equipo",
    VoucherKind.MATERIAL: "Conciliación de acarreo de material",
}

PLATE_SUMMARY_HEADER = ["Placas", "Vales", "Viajes", "Subtotal"]


def fmt_money(value: Decimal | None) -> str:
    if value is None:
        return "-"
    return f"${round2(value):,.2f}"


def fmt_quantity(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Sí" if value else "No"
    if isinstance(value, Decimal):
        return f"{round2(value):,.2f}"
    return str(value)


def header_lines(view: RehydratedReconciliation) -> list[tuple[str, str]]:
    stored = view.reconciliation
    draft = stored.draft
    week = draft.week
    return [
        ("Folio", stored.folio),
        ("Semana", f"{week.number} / {week.year} ({format_week_range(week)})"),
        ("Obra", str(draft.worksite_id)),
        ("Sindicato", "" if draft.union_id is None else str(draft.union_id)),
        ("Generada", stored.created_at.strftime("%Y-%m-%d %H:%M")),
    ]


def totals_lines(totals: Totals) -> list[tuple[str, str]]:
    lines = [
        ("Subtotal", fmt_money(totals.subtotal)),
        ("IVA", fmt_money(totals.vat)),
    ]
    if totals.withholding is not None:
        lines.append(("Retención", fmt_money(totals.withholding)))
    lines.append(("Total", fmt_money(totals.total)))

    if totals.kind is VoucherKind.RENTAL:
        prices = calculate_unit_prices(totals)
        lines.extend([
            ("Días", fmt_quantity(totals.total_days)),
            ("Horas", fmt_quantity(totals.total_hours)),
            ("Viajes", str(totals.total_trips)),
            ("Precio por turno", fmt_money(prices.per_shift)),
            ("Precio por hora", fmt_money(prices.per_hour)),
        ])
    else:
        lines.append(("Viajes", str(totals.total_trips)))
    return lines


def material_type_lines(totals: Totals, material_type: MaterialType) -> list[tuple[str, str]]:
    """Quantity summary for one material type section."""
    tally = totals.material
    match material_type:
        case MaterialType.AGGREGATE_1:
            bucket = tally.type1
        case MaterialType.AGGREGATE_2:
            bucket = tally.type2
        case MaterialType.CUT_PRODUCT:
            bucket = tally.type3
        case _:
            assert_never(material_type)
    lines = [
        ("Viajes", str(bucket.trips)),
        ("Volumen m3", fmt_quantity(bucket.volume_m3)),
    ]
    if material_type.tracks_weight:
        lines.append(("Toneladas", fmt_quantity(bucket.tons)))
    return lines


def material_section_title(material_type: MaterialType) -> str:
    return MATERIAL_TYPE_LABELS[material_type]


def plate_summary_rows(
    groups: Mapping[str, PlateGroup],
    sentinel_plate: str = NO_PLATE,
) -> list[list]:
    return [
        [g.plate, g.voucher_count, g.tally.trips, round2(g.subtotal)]
        for g in sorted_groups(groups, sentinel_plate)
    ]
