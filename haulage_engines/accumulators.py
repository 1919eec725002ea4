"""
Category accumulators - the per-kind running sums of a plate group.

Each voucher kind tracks different physical quantities:

    rental    days, hours, trips (explicit ``number_of_trips`` per line)
    material  per material type: volume, tons (types 1-2 only), trips
              (one trip per line detail, since every load is one trip)

The trip asymmetry between kinds is deliberate and must not be unified.

Accumulators are frozen value objects.  They are never mutated: the
``CategoryAccumulator`` strategies fold a line detail into a tally and
return a new tally, merge two tallies, and round a tally for display.
Rounding happens once, at the boundary; trip counts are exact integers
and are never rounded.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol, TypeVar, Union, assert_never

from haulage_kernel.domain.vouchers import (
    MaterialLineDetail,
    MaterialType,
    RentalLineDetail,
    VoucherKind,
)

_ZERO = Decimal("0")
_TWO_PLACES = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    """Round to exactly two decimal places, half up."""
    return value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


# ============================================================================
# Tallies
# ============================================================================


@dataclass(frozen=True)
class RentalTally:
    """Running sums for rental vouchers."""

    days: Decimal = _ZERO
    hours: Decimal = _ZERO
    trips: int = 0

    def __add__(self, other: RentalTally) -> RentalTally:
        return RentalTally(
            days=self.days + other.days,
            hours=self.hours + other.hours,
            trips=self.trips + other.trips,
        )

    def rounded(self) -> RentalTally:
        return RentalTally(days=round2(self.days), hours=round2(self.hours), trips=self.trips)


@dataclass(frozen=True)
class AggregateTally:
    """Running sums for a quarried-material type (real volume and weight)."""

    volume_m3: Decimal = _ZERO
    tons: Decimal = _ZERO
    trips: int = 0

    def add_load(self, volume_m3: Decimal, tons: Decimal) -> AggregateTally:
        return AggregateTally(
            volume_m3=self.volume_m3 + volume_m3,
            tons=self.tons + tons,
            trips=self.trips + 1,
        )

    def __add__(self, other: AggregateTally) -> AggregateTally:
        return AggregateTally(
            volume_m3=self.volume_m3 + other.volume_m3,
            tons=self.tons + other.tons,
            trips=self.trips + other.trips,
        )

    def rounded(self) -> AggregateTally:
        return AggregateTally(
            volume_m3=round2(self.volume_m3), tons=round2(self.tons), trips=self.trips
        )


@dataclass(frozen=True)
class CutProductTally:
    """Running sums for cut product (requested volume, no weight)."""

    volume_m3: Decimal = _ZERO
    trips: int = 0

    def add_load(self, volume_m3: Decimal) -> CutProductTally:
        return CutProductTally(volume_m3=self.volume_m3 + volume_m3, trips=self.trips + 1)

    def __add__(self, other: CutProductTally) -> CutProductTally:
        return CutProductTally(
            volume_m3=self.volume_m3 + other.volume_m3,
            trips=self.trips + other.trips,
        )

    def rounded(self) -> CutProductTally:
        return CutProductTally(volume_m3=round2(self.volume_m3), trips=self.trips)


@dataclass(frozen=True)
class MaterialTally:
    """Running sums for material vouchers, one bucket per material type."""

    type1: AggregateTally = AggregateTally()
    type2: AggregateTally = AggregateTally()
    type3: CutProductTally = CutProductTally()

    def __add__(self, other: MaterialTally) -> MaterialTally:
        return MaterialTally(
            type1=self.type1 + other.type1,
            type2=self.type2 + other.type2,
            type3=self.type3 + other.type3,
        )

    def rounded(self) -> MaterialTally:
        return MaterialTally(
            type1=self.type1.rounded(),
            type2=self.type2.rounded(),
            type3=self.type3.rounded(),
        )

    @property
    def trips(self) -> int:
        return self.type1.trips + self.type2.trips + self.type3.trips

    def present_types(self) -> tuple[MaterialType, ...]:
        """Material types with at least one load, in type order."""
        present = []
        if self.type1.trips:
            present.append(MaterialType.AGGREGATE_1)
        if self.type2.trips:
            present.append(MaterialType.AGGREGATE_2)
        if self.type3.trips:
            present.append(MaterialType.CUT_PRODUCT)
        return tuple(present)


Tally = Union[RentalTally, MaterialTally]
T = TypeVar("T", RentalTally, MaterialTally)


# ============================================================================
# Strategies
# ============================================================================


class CategoryAccumulator(Protocol[T]):
    """Strategy that knows how one voucher kind accumulates its quantities.

    Contract:
        - ``empty()`` returns the zero tally.
        - ``fold(tally, detail)`` returns a new tally including ``detail``.
        - ``merge(left, right)`` is associative with ``empty()`` as identity.
        - ``rounded(tally)`` rounds quantities to 2 places, trips untouched.
    """

    kind: VoucherKind

    def empty(self) -> T: ...

    def fold(self, tally: T, detail) -> T: ...

    def merge(self, left: T, right: T) -> T: ...

    def rounded(self, tally: T) -> T: ...


class RentalAccumulator:
    """Folds rental line details: days, hours and explicit trip counts."""

    kind = VoucherKind.RENTAL

    def empty(self) -> RentalTally:
        return RentalTally()

    def fold(self, tally: RentalTally, detail: RentalLineDetail) -> RentalTally:
        return RentalTally(
            days=tally.days + detail.total_days,
            hours=tally.hours + detail.total_hours,
            trips=tally.trips + detail.number_of_trips,
        )

    def merge(self, left: RentalTally, right: RentalTally) -> RentalTally:
        return left + right

    def rounded(self, tally: RentalTally) -> RentalTally:
        return tally.rounded()


class MaterialAccumulator:
    """Folds material line details into the bucket of their material type."""

    kind = VoucherKind.MATERIAL

    def empty(self) -> MaterialTally:
        return MaterialTally()

    def fold(self, tally: MaterialTally, detail: MaterialLineDetail) -> MaterialTally:
        material_type = detail.material_type
        match material_type:
            case MaterialType.AGGREGATE_1:
                return replace(
                    tally,
                    type1=tally.type1.add_load(detail.real_volume_m3, detail.weight_tons),
                )
            case MaterialType.AGGREGATE_2:
                return replace(
                    tally,
                    type2=tally.type2.add_load(detail.real_volume_m3, detail.weight_tons),
                )
            case MaterialType.CUT_PRODUCT:
                return replace(
                    tally,
                    type3=tally.type3.add_load(detail.requested_volume_m3),
                )
            case _:
                assert_never(material_type)

    def merge(self, left: MaterialTally, right: MaterialTally) -> MaterialTally:
        return left + right

    def rounded(self, tally: MaterialTally) -> MaterialTally:
        return tally.rounded()


RENTAL_ACCUMULATOR = RentalAccumulator()
MATERIAL_ACCUMULATOR = MaterialAccumulator()


def accumulator_for(kind: VoucherKind) -> RentalAccumulator | MaterialAccumulator:
    """Return the accumulator strategy for a voucher kind."""
    kind = VoucherKind(kind)
    match kind:
        case VoucherKind.RENTAL:
            return RENTAL_ACCUMULATOR
        case VoucherKind.MATERIAL:
            return MATERIAL_ACCUMULATOR
        case _:
            assert_never(kind)
