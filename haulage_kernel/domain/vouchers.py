"""
Voucher value objects.

Responsibility:
    Frozen representations of verified vouchers ("vales") and their line
    details, as delivered by the voucher source.  These are the only inputs
    the reconciliation engines accept.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.  Created upstream by the
    verification workflow; consumed read-only by ``haulage_engines``.

Invariants enforced:
    - Quantities and money are ``Decimal`` (ints/strings are coerced; floats
      go through ``str`` so no binary noise leaks in).
    - ``MaterialType`` is a closed enum; unknown type ids are rejected at
      construction.
    - ``computed_cost`` may be ``None`` here.  Absence is a data-quality
      finding reported by the eligibility validator, not a construction error.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Union

_ZERO = Decimal("0")


def to_decimal(value: Any, name: str = "value") -> Decimal:
    """Coerce a numeric input to Decimal (``None`` becomes zero)."""
    if value is None:
        return _ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid {name}: {value!r}") from e


def _optional_decimal(value: Any, name: str) -> Decimal | None:
    if value is None:
        return None
    return to_decimal(value, name)


def _whole_count(value: Any, name: str) -> int:
    """Coerce a count to int, rejecting fractional values."""
    count = to_decimal(value, name)
    if count != count.to_integral_value():
        raise ValueError(f"{name} must be a whole number, got {value!r}")
    return int(count)


class VoucherKind(str, Enum):
    """The two kinds of voucher that can be reconciled."""

    RENTAL = "rental"  # equipment rental, billed by day or hour
    MATERIAL = "material"  # material haul, billed per load


class MaterialType(int, Enum):
    """Material category; decides which physical quantity is authoritative."""

    AGGREGATE_1 = 1  # quarried material, real volume + weight
    AGGREGATE_2 = 2  # quarried material, real volume + weight
    CUT_PRODUCT = 3  # cut product, requested volume only

    @property
    def tracks_weight(self) -> bool:
        return self is not MaterialType.CUT_PRODUCT


@dataclass(frozen=True)
class WorksiteRef:
    """Worksite ("obra") and owning company referenced by a voucher."""

    id: int
    name: str = ""
    company_id: int | None = None
    cost_center: str | None = None


@dataclass(frozen=True)
class RentalLineDetail:
    """A single rental line: equipment time on site."""

    material: str
    number_of_trips: int = 0
    total_days: Decimal = _ZERO
    total_hours: Decimal = _ZERO
    computed_cost: Decimal | None = None
    is_daily_rental: bool = False
    capacity_m3: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "number_of_trips", _whole_count(self.number_of_trips, "number_of_trips")
        )
        object.__setattr__(self, "total_days", to_decimal(self.total_days, "total_days"))
        object.__setattr__(self, "total_hours", to_decimal(self.total_hours, "total_hours"))
        object.__setattr__(
            self, "computed_cost", _optional_decimal(self.computed_cost, "computed_cost")
        )
        object.__setattr__(
            self, "capacity_m3", _optional_decimal(self.capacity_m3, "capacity_m3")
        )
        if self.number_of_trips < 0:
            raise ValueError("number_of_trips must be non-negative")


@dataclass(frozen=True)
class MaterialLineDetail:
    """A single material line: one load hauled from a quarry."""

    material: str
    material_type: MaterialType
    real_volume_m3: Decimal = _ZERO
    requested_volume_m3: Decimal = _ZERO
    weight_tons: Decimal = _ZERO
    computed_cost: Decimal | None = None
    capacity_m3: Decimal | None = None
    distance_km: Decimal | None = None
    quarry: str | None = None
    quarry_folio: str | None = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "material_type", MaterialType(self.material_type))
        except ValueError as e:
            raise ValueError(f"Unknown material type: {self.material_type!r}") from e
        object.__setattr__(
            self, "real_volume_m3", to_decimal(self.real_volume_m3, "real_volume_m3")
        )
        object.__setattr__(
            self,
            "requested_volume_m3",
            to_decimal(self.requested_volume_m3, "requested_volume_m3"),
        )
        object.__setattr__(self, "weight_tons", to_decimal(self.weight_tons, "weight_tons"))
        object.__setattr__(
            self, "computed_cost", _optional_decimal(self.computed_cost, "computed_cost")
        )
        object.__setattr__(
            self, "capacity_m3", _optional_decimal(self.capacity_m3, "capacity_m3")
        )
        object.__setattr__(
            self, "distance_km", _optional_decimal(self.distance_km, "distance_km")
        )


LineDetail = Union[RentalLineDetail, MaterialLineDetail]

_DETAIL_TYPE_BY_KIND: dict[VoucherKind, type] = {
    VoucherKind.RENTAL: RentalLineDetail,
    VoucherKind.MATERIAL: MaterialLineDetail,
}


@dataclass(frozen=True)
class Voucher:
    """
    A verified voucher.

    Contract:
        Belongs to exactly one vehicle (``vehicle_plate`` may be ``None``;
        the grouping engine then files it under the sentinel plate) and to
        exactly one ``VoucherKind``.  ``line_details`` hold only details of
        that kind.

    Guarantees:
        - Immutable; ``line_details`` is always a tuple.
    """

    id: int
    folio: str
    kind: VoucherKind
    creation_date: date
    line_details: tuple[LineDetail, ...] = ()
    vehicle_plate: str | None = None
    worksite: WorksiteRef | None = None
    operator_name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", VoucherKind(self.kind))
        details = tuple(self.line_details or ())
        expected = _DETAIL_TYPE_BY_KIND[self.kind]
        for detail in details:
            if not isinstance(detail, expected):
                raise TypeError(
                    f"Voucher {self.folio} is {self.kind.value} but has a "
                    f"{type(detail).__name__} line detail"
                )
        object.__setattr__(self, "line_details", details)

    @property
    def line_cost(self) -> Decimal:
        """Sum of the computed costs present on this voucher."""
        return sum(
            (d.computed_cost for d in self.line_details if d.computed_cost is not None),
            _ZERO,
        )
