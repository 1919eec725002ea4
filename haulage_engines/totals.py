"""
Totals Calculator - reduce plate groups into the statement's financial figures.

Pure functions with deterministic behavior. No I/O.

The grand subtotal is the full-precision sum of every group's subtotal; the
kind's ``TaxPolicy`` turns it into VAT, optional withholding and total.
Kind-specific quantities (rental days/hours/trips, material volume/tons/
trips per type) are merged across groups and rounded once at the boundary.

Usage:
    from haulage_engines.grouping import group_by_plate
    from haulage_engines.totals import calculate_totals

    groups = group_by_plate(vouchers)
    totals = calculate_totals(groups, VoucherKind.MATERIAL)
    print(totals.subtotal, totals.vat, totals.withholding, totals.total)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from haulage_kernel.domain.vouchers import VoucherKind
from haulage_kernel.exceptions import MixedVoucherKindsError
from haulage_engines.accumulators import (
    MaterialTally,
    RentalTally,
    Tally,
    accumulator_for,
    round2,
)
from haulage_engines.grouping import PlateGroup, merged_tally
from haulage_engines.tax_policy import TaxPolicy
from haulage_engines.tracer import traced_engine

_ZERO = Decimal("0")


@dataclass(frozen=True)
class Totals:
    """
    Grand aggregate across all plate groups of a reconciliation.

    Guarantees:
        - Monetary fields carry exactly two decimal places.
        - ``withholding`` is None when the tax policy has no withholding
          (always the case for rental under the default policy).
        - ``tally`` quantities are rounded; trip counts are exact integers.
    """

    kind: VoucherKind
    subtotal: Decimal
    vat: Decimal
    total: Decimal
    tally: Tally
    withholding: Decimal | None = None

    # Rental views

    @property
    def total_days(self) -> Decimal:
        return self._rental().days

    @property
    def total_hours(self) -> Decimal:
        return self._rental().hours

    @property
    def total_trips(self) -> int:
        return self.tally.trips

    # Material view

    @property
    def material(self) -> MaterialTally:
        if not isinstance(self.tally, MaterialTally):
            raise TypeError("Rental totals have no material breakdown")
        return self.tally

    def _rental(self) -> RentalTally:
        if not isinstance(self.tally, RentalTally):
            raise TypeError("Material totals have no days/hours")
        return self.tally


@dataclass(frozen=True)
class UnitPrices:
    """Average rental prices derived from a statement's totals."""

    per_shift: Decimal
    per_hour: Decimal


@traced_engine("totals", "1.0", fingerprint_fields=("kind",))
def calculate_totals(
    groups: Mapping[str, PlateGroup],
    kind: VoucherKind,
    policy: TaxPolicy | None = None,
) -> Totals:
    """
    Calculate the statement totals for a set of plate groups.

    Pure function - no side effects, no I/O, deterministic output.

    Args:
        groups: Output of ``group_by_plate``
        kind: Voucher kind of every group
        policy: Tax policy; defaults to ``TaxPolicy.for_kind(kind)``

    Returns:
        Totals with rounded monetary figures and rounded quantities

    Raises:
        MixedVoucherKindsError: if a group's kind differs from ``kind``
    """
    kind = VoucherKind(kind)
    if policy is None:
        policy = TaxPolicy.for_kind(kind)

    for group in groups.values():
        if group.kind is not kind:
            raise MixedVoucherKindsError((kind.value, group.kind.value))

    subtotal = sum((g.subtotal for g in groups.values()), _ZERO)
    tally = merged_tally(groups.values(), kind)
    breakdown = policy.apply(subtotal)

    return Totals(
        kind=kind,
        subtotal=breakdown.subtotal,
        vat=breakdown.vat,
        withholding=breakdown.withholding,
        total=breakdown.total,
        tally=accumulator_for(kind).rounded(tally),
    )


def calculate_unit_prices(totals: Totals) -> UnitPrices:
    """
    Average price per shift (day) and per hour for a rental statement.

    A divisor of zero yields a zero price rather than an error.

    Raises:
        TypeError: for material totals
    """
    days = totals.total_days
    hours = totals.total_hours
    per_shift = round2(totals.subtotal / days) if days else round2(_ZERO)
    per_hour = round2(totals.subtotal / hours) if hours else round2(_ZERO)
    return UnitPrices(per_shift=per_shift, per_hour=per_hour)
