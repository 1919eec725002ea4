"""
Typed Exception Hierarchy for voucher reconciliation.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A reconciliation is a billing statement. When the voucher set behind it is
not trustworthy the caller must know exactly why, without parsing message
strings:

    try:
        draft = prepare_record(vouchers, totals, selection, union_id, actor)
    except MissingCostError as e:
        notify_user(f"{len(e.voucher_ids)} voucher(s) have no computed cost")
    except ReconciliationError as e:
        api_response(code=e.code, message=str(e))

Every exception carries:
  1. A class-level ``code`` (machine-readable, stable across releases)
  2. Structured attributes (voucher ids, missing fields) instead of
     information only present in the message

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    HaulageError (base)
    |
    +-- ReconciliationError
    |   +-- EmptyVoucherSetError
    |   +-- MissingDetailsError
    |   +-- MissingCostError
    |   +-- MissingWeekOrSiteError
    |   +-- MixedVoucherKindsError
    |
    +-- PersistenceError
        +-- ReconciliationNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                | When Raised                               | Audience
--------------------|-------------------------------------------|-----------------
EmptySet            | No vouchers for the selected filters      | user (change filters)
MissingDetails      | Voucher without line details for its kind | support
MissingCost         | Line detail with absent or zero cost      | blocking, pricing
MissingWeekOrSite   | Filter selection lacks week or worksite   | user
MixedKinds          | Rental and material vouchers in one set   | support
NOT_FOUND           | Stored reconciliation id does not exist   | caller

The reconciliation codes are the same strings used by
``haulage_engines.eligibility.RejectionReason`` so that a structured
validation result and a raised exception report identical codes.
"""


class HaulageError(Exception):
    """
    Base exception for all haulage back-office errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "HAULAGE_ERROR"


# Reconciliation eligibility


class ReconciliationError(HaulageError):
    """Base exception for voucher sets that cannot be reconciled."""

    code: str = "RECONCILIATION_ERROR"


class EmptyVoucherSetError(ReconciliationError):
    """No vouchers were supplied for the reconciliation."""

    code: str = "EmptySet"

    def __init__(self, message: str | None = None):
        super().__init__(
            message or "No verified vouchers are available for this selection"
        )


class MissingDetailsError(ReconciliationError):
    """One or more vouchers have no line details for their kind."""

    code: str = "MissingDetails"

    def __init__(self, voucher_ids: tuple, message: str | None = None):
        self.voucher_ids = tuple(voucher_ids)
        super().__init__(
            message
            or f"{len(self.voucher_ids)} voucher(s) without line details"
        )


class MissingCostError(ReconciliationError):
    """
    One or more line details have no computed cost.

    Never defaulted to zero: that would understate billing.
    """

    code: str = "MissingCost"

    def __init__(self, voucher_ids: tuple, message: str | None = None):
        self.voucher_ids = tuple(voucher_ids)
        super().__init__(
            message
            or f"{len(self.voucher_ids)} voucher(s) without computed cost"
        )


class MissingWeekOrSiteError(ReconciliationError):
    """The filter selection lacks a resolved week or worksite."""

    code: str = "MissingWeekOrSite"

    def __init__(self, missing_fields: tuple[str, ...]):
        self.missing_fields = tuple(missing_fields)
        super().__init__(
            f"Filter selection is incomplete: missing {', '.join(self.missing_fields)}"
        )


class MixedVoucherKindsError(ReconciliationError):
    """Rental and material vouchers were supplied in the same set."""

    code: str = "MixedKinds"

    def __init__(self, kinds: tuple[str, ...], message: str | None = None):
        self.kinds = tuple(kinds)
        super().__init__(
            message
            or f"Voucher set mixes kinds: {', '.join(self.kinds)}"
        )


# Persistence


class PersistenceError(HaulageError):
    """Base exception for reconciliation storage errors."""

    code: str = "PERSISTENCE_ERROR"


class ReconciliationNotFoundError(PersistenceError):
    """Stored reconciliation with the given id was not found."""

    code: str = "NOT_FOUND"

    def __init__(self, reconciliation_id):
        self.reconciliation_id = reconciliation_id
        super().__init__(f"Reconciliation not found: {reconciliation_id}")
