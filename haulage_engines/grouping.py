"""
Grouping Engine - partition vouchers into per-vehicle plate groups.

Pure functions with deterministic behavior. No I/O.

A plate group is the primary billing line of a reconciliation: every voucher
hauled or worked by one vehicle, with the group's subtotal (sum of every
line detail's computed cost) and the kind-specific tally built by the
kind's ``CategoryAccumulator``.

Ordering: plates appear in the order first encountered in the input.  The
engine guarantees nothing beyond stability for a fixed input order; callers
that need a deterministic presentation order sort the keys
(``sorted_groups``).

Usage:
    from haulage_engines.grouping import group_by_plate

    groups = group_by_plate(vouchers)
    for plate, group in groups.items():
        print(plate, group.subtotal, group.voucher_count)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from functools import reduce
from typing import Generic

from haulage_kernel.domain.vouchers import Voucher, VoucherKind
from haulage_kernel.exceptions import MissingCostError, MixedVoucherKindsError
from haulage_engines.accumulators import (
    CategoryAccumulator,
    MaterialTally,
    RentalTally,
    T,
    accumulator_for,
)
from haulage_engines.tracer import traced_engine

NO_PLATE = "NO PLATE"

_ZERO = Decimal("0")


@dataclass(frozen=True)
class PlateGroup(Generic[T]):
    """
    Vouchers of one vehicle plus their running sums.

    Derived view: rebuilt on every aggregation call, never persisted.

    Attributes:
        plate: Vehicle plate (or the sentinel for vouchers without one)
        kind: Voucher kind shared by every voucher in the group
        tally: RentalTally or MaterialTally at full precision
        vouchers: Member vouchers, each listed once, in input order
        subtotal: Sum of computed costs at full precision
    """

    plate: str
    kind: VoucherKind
    tally: T
    vouchers: tuple[Voucher, ...] = ()
    subtotal: Decimal = _ZERO

    @property
    def voucher_count(self) -> int:
        return len(self.vouchers)

    @property
    def line_count(self) -> int:
        return sum(len(v.line_details) for v in self.vouchers)

    @property
    def rental(self) -> RentalTally:
        if not isinstance(self.tally, RentalTally):
            raise TypeError(f"Plate group {self.plate} is {self.kind.value}, not rental")
        return self.tally

    @property
    def material(self) -> MaterialTally:
        if not isinstance(self.tally, MaterialTally):
            raise TypeError(f"Plate group {self.plate} is {self.kind.value}, not material")
        return self.tally


def resolve_plate(plate: str | None, sentinel: str = NO_PLATE) -> str:
    """
    Plate key for a voucher.

    Missing or empty plates map to ``sentinel``; any other plate is used
    verbatim, so plates differing only in whitespace stay separate groups.
    """
    return plate or sentinel


def fold_voucher(
    group: PlateGroup,
    voucher: Voucher,
    accumulator: CategoryAccumulator,
) -> PlateGroup:
    """
    Return a new group that includes ``voucher``.

    Every line detail updates the tally and the subtotal; the voucher joins
    the member list once, however many line details it has.

    Raises:
        MixedVoucherKindsError: voucher kind differs from the group's kind
        MissingCostError: a line detail has no computed cost
    """
    if voucher.kind is not group.kind:
        raise MixedVoucherKindsError((group.kind.value, voucher.kind.value))

    subtotal = group.subtotal
    for detail in voucher.line_details:
        if detail.computed_cost is None:
            raise MissingCostError((voucher.id,))
        subtotal += detail.computed_cost

    tally = reduce(accumulator.fold, voucher.line_details, group.tally)
    return PlateGroup(
        plate=group.plate,
        kind=group.kind,
        tally=tally,
        vouchers=group.vouchers + (voucher,),
        subtotal=subtotal,
    )


@traced_engine("grouping", "1.0", fingerprint_fields=("kind", "sentinel_plate"))
def group_by_plate(
    vouchers: Sequence[Voucher],
    kind: VoucherKind | None = None,
    sentinel_plate: str = NO_PLATE,
) -> dict[str, PlateGroup]:
    """
    Partition vouchers into plate groups.

    Pure function - the input vouchers are not modified and every call
    returns fresh groups.

    Args:
        vouchers: Vouchers of a single kind
        kind: Expected kind; inferred from the first voucher when omitted
        sentinel_plate: Group key for vouchers without a plate

    Returns:
        Insertion-ordered dict of plate -> PlateGroup (empty for no vouchers)

    Raises:
        MixedVoucherKindsError: if a voucher's kind differs from ``kind``
        MissingCostError: if a line detail has no computed cost
    """
    if not vouchers:
        return {}

    kind = VoucherKind(kind) if kind is not None else vouchers[0].kind
    accumulator = accumulator_for(kind)

    groups: dict[str, PlateGroup] = {}
    for voucher in vouchers:
        plate = resolve_plate(voucher.vehicle_plate, sentinel_plate)
        group = groups.get(plate)
        if group is None:
            group = PlateGroup(plate=plate, kind=kind, tally=accumulator.empty())
        groups[plate] = fold_voucher(group, voucher, accumulator)

    return groups


def sorted_groups(
    groups: Mapping[str, PlateGroup],
    sentinel_plate: str = NO_PLATE,
) -> list[PlateGroup]:
    """Groups ordered by plate, with the sentinel group last."""
    return sorted(
        groups.values(),
        key=lambda g: (g.plate == sentinel_plate, g.plate),
    )


def merged_tally(groups: Iterable[PlateGroup], kind: VoucherKind):
    """Full-precision tally across groups of one kind."""
    accumulator = accumulator_for(kind)
    return reduce(
        accumulator.merge,
        (g.tally for g in groups),
        accumulator.empty(),
    )
