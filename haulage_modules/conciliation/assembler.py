"""
Reconciliation Assembler (``haulage_modules.conciliation.assembler``).

Responsibility
--------------
Two pure contracts around the engines:

* ``prepare_record`` maps an eligible voucher set, its totals and the
  user's filter selection into a ``ReconciliationDraft`` ready for the sink.
* ``rehydrate`` regroups a stored reconciliation's vouchers so its
  documents can be printed again, showing the persisted totals.

Architecture position
---------------------
**Modules layer** -- pure glue.  Calls ``haulage_engines``; never touches
the database or the clock.  The caller stores the draft.

Invariants enforced
-------------------
* Eligibility runs first; a rejected voucher set never becomes a draft.
* Regenerated documents show the stored subtotal, VAT, withholding and
  total, never figures recomputed from the (possibly since edited)
  vouchers.  Only quantity tallies are rebuilt.

Failure modes
-------------
* ``EmptyVoucherSetError`` / ``MissingDetailsError`` / ``MissingCostError``
  / ``MixedVoucherKindsError`` from the eligibility check.
* ``MissingWeekOrSiteError`` when the selection lacks a week or worksite.
"""

from __future__ import annotations

from collections.abc import Sequence

from haulage_kernel.domain.vouchers import Voucher, VoucherKind
from haulage_kernel.exceptions import MissingWeekOrSiteError, MixedVoucherKindsError
from haulage_engines.accumulators import accumulator_for
from haulage_engines.eligibility import validate_eligibility
from haulage_engines.grouping import NO_PLATE, group_by_plate, merged_tally
from haulage_engines.totals import Totals
from haulage_modules.conciliation.models import (
    FilterSelection,
    ReconciliationDraft,
    ReconciliationStatus,
    RehydratedReconciliation,
    StoredReconciliation,
)


def prepare_record(
    vouchers: Sequence[Voucher],
    totals: Totals,
    selection: FilterSelection,
    union_id: int | None,
    requester_id: int,
) -> ReconciliationDraft:
    """
    Build the persistable draft for a reconciliation.

    Args:
        vouchers: The eligible voucher set the totals were computed from
        totals: Output of ``calculate_totals`` for those vouchers
        selection: Week, worksite and (for administrators) union
        union_id: The requester's own union; used when the selection has none
        requester_id: User generating the reconciliation

    Returns:
        ReconciliationDraft with status ``generated``

    Raises:
        ReconciliationError subclass when the vouchers or selection are not
        eligible.
    """
    validate_eligibility(vouchers).raise_for_failure()

    missing = selection.missing_fields()
    if missing:
        raise MissingWeekOrSiteError(missing)

    kind = vouchers[0].kind
    if totals.kind is not kind:
        raise MixedVoucherKindsError((kind.value, totals.kind.value))

    worksite = vouchers[0].worksite
    company_id = worksite.company_id if worksite is not None else None

    if kind is VoucherKind.RENTAL:
        total_days, total_hours = totals.total_days, totals.total_hours
    else:
        total_days = total_hours = None

    return ReconciliationDraft(
        kind=kind,
        worksite_id=selection.worksite_id,
        union_id=selection.union_id if selection.union_id is not None else union_id,
        company_id=company_id,
        week=selection.week,
        subtotal=totals.subtotal,
        vat=totals.vat,
        withholding=totals.withholding,
        total=totals.total,
        total_days=total_days,
        total_hours=total_hours,
        generated_by=requester_id,
        status=ReconciliationStatus.GENERATED,
    )


def rehydrate(
    stored: StoredReconciliation,
    stored_vouchers: Sequence[Voucher],
    sentinel_plate: str = NO_PLATE,
) -> RehydratedReconciliation:
    """Regroup a stored reconciliation's vouchers for document regeneration."""
    validate_eligibility(stored_vouchers).raise_for_failure()

    groups = group_by_plate(
        stored_vouchers, kind=stored.kind, sentinel_plate=sentinel_plate
    )
    draft = stored.draft
    totals = Totals(
        kind=draft.kind,
        subtotal=draft.subtotal,
        vat=draft.vat,
        withholding=draft.withholding,
        total=draft.total,
        tally=accumulator_for(draft.kind).rounded(
            merged_tally(groups.values(), draft.kind)
        ),
    )
    return RehydratedReconciliation(
        reconciliation=stored,
        plate_groups=groups,
        totals=totals,
    )
