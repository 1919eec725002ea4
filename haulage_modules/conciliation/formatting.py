"""
Preview and document table rows.

Flattens plate groups into one row per line detail, in plate order (the
sentinel plate last), then voucher order, then line order.  Both document
exporters and the on-screen preview render these rows, so the two voucher
kinds are shaped in exactly one place.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import assert_never

from haulage_kernel.domain.vouchers import (
    MaterialLineDetail,
    MaterialType,
    RentalLineDetail,
    VoucherKind,
)
from haulage_engines.grouping import NO_PLATE, PlateGroup, sorted_groups

MATERIAL_TYPE_LABELS: dict[MaterialType, str] = {
    MaterialType.AGGREGATE_1: "Material tipo 1",
    MaterialType.AGGREGATE_2: "Material tipo 2",
    MaterialType.CUT_PRODUCT: "Producto de corte",
}

RENTAL_COLUMNS: tuple[tuple[str, str], ...] = (
    ("Placas", "plate"),
    ("Folio", "folio"),
    ("Fecha", "creation_date"),
    ("Operador", "operator_name"),
    ("Material", "material"),
    ("Capacidad m3", "capacity_m3"),
    ("Viajes", "trips"),
    ("Días", "total_days"),
    ("Horas", "total_hours"),
    ("Renta por día", "is_daily_rental"),
    ("Importe", "cost"),
)

MATERIAL_COLUMNS: tuple[tuple[str, str], ...] = (
    ("Placas", "plate"),
    ("Folio", "folio"),
    ("Fecha", "creation_date"),
    ("Material", "material"),
    ("Banco", "quarry"),
    ("Folio banco", "quarry_folio"),
    ("Capacidad m3", "capacity_m3"),
    ("Distancia km", "distance_km"),
    ("Viajes", "trips"),
    ("Volumen real m3", "real_volume_m3"),
    ("Toneladas", "weight_tons"),
    ("Volumen pedido m3", "requested_volume_m3"),
    ("Importe", "cost"),
)


@dataclass(frozen=True)
class TableRow:
    """One line detail, with the voucher and plate it belongs to."""

    kind: VoucherKind
    plate: str
    folio: str
    creation_date: date
    material: str
    trips: int
    cost: Decimal
    operator_name: str | None = None
    capacity_m3: Decimal | None = None
    # rental
    total_days: Decimal | None = None
    total_hours: Decimal | None = None
    is_daily_rental: bool | None = None
    # material
    material_type: MaterialType | None = None
    quarry: str | None = None
    quarry_folio: str | None = None
    distance_km: Decimal | None = None
    real_volume_m3: Decimal | None = None
    weight_tons: Decimal | None = None
    requested_volume_m3: Decimal | None = None

    def cells(self) -> list:
        """Values in the column order of this row's kind."""
        return [getattr(self, attr) for _, attr in columns_for(self.kind)]


def columns_for(kind: VoucherKind) -> tuple[tuple[str, str], ...]:
    kind = VoucherKind(kind)
    match kind:
        case VoucherKind.RENTAL:
            return RENTAL_COLUMNS
        case VoucherKind.MATERIAL:
            return MATERIAL_COLUMNS
        case _:
            assert_never(kind)


def _rental_row(plate, voucher, detail: RentalLineDetail) -> TableRow:
    return TableRow(
        kind=VoucherKind.RENTAL,
        plate=plate,
        folio=voucher.folio,
        creation_date=voucher.creation_date,
        operator_name=voucher.operator_name,
        material=detail.material,
        capacity_m3=detail.capacity_m3,
        trips=detail.number_of_trips,
        total_days=detail.total_days,
        total_hours=detail.total_hours,
        is_daily_rental=detail.is_daily_rental,
        cost=detail.computed_cost,
    )


def _material_row(plate, voucher, detail: MaterialLineDetail) -> TableRow:
    weight = detail.weight_tons if detail.material_type.tracks_weight else None
    return TableRow(
        kind=VoucherKind.MATERIAL,
        plate=plate,
        folio=voucher.folio,
        creation_date=voucher.creation_date,
        operator_name=voucher.operator_name,
        material=detail.material,
        material_type=detail.material_type,
        quarry=detail.quarry,
        quarry_folio=detail.quarry_folio,
        capacity_m3=detail.capacity_m3,
        distance_km=detail.distance_km,
        trips=1,
        real_volume_m3=detail.real_volume_m3,
        weight_tons=weight,
        requested_volume_m3=detail.requested_volume_m3,
        cost=detail.computed_cost,
    )


def format_table_rows(
    groups: Mapping[str, PlateGroup],
    sentinel_plate: str = NO_PLATE,
) -> list[TableRow]:
    """Flatten plate groups into display rows, one per line detail."""
    rows: list[TableRow] = []
    for group in sorted_groups(groups, sentinel_plate):
        for voucher in group.vouchers:
            for detail in voucher.line_details:
                if isinstance(detail, RentalLineDetail):
                    rows.append(_rental_row(group.plate, voucher, detail))
                else:
                    rows.append(_material_row(group.plate, voucher, detail))
    return rows


def rows_by_material_type(rows: list[TableRow]) -> dict[MaterialType, list[TableRow]]:
    """Material rows split per type; types without rows are omitted."""
    sections: dict[MaterialType, list[TableRow]] = {}
    for material_type in MaterialType:
        section = [r for r in rows if r.material_type is material_type]
        if section:
            sections[material_type] = section
    return sections
