"""
Eligibility Validator - decide whether a voucher set may be reconciled.

Pure predicate with no I/O.  Must run before grouping: a failed result is a
hard stop and partial totals are never computed from the rejected set.

Checks, in order (the first failing check is reported):
    1. EmptySet        -- no vouchers at all
    2. MissingDetails  -- a voucher has no line details for its kind
    3. MissingCost     -- a line detail has no computed cost, or exactly zero
    4. MixedKinds      -- rental and material vouchers in the same set

Usage:
    from haulage_engines.eligibility import validate_eligibility

    result = validate_eligibility(vouchers)
    if not result:
        return {"valid": False, "reason": result.reason.value}
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from haulage_kernel.domain.vouchers import Voucher
from haulage_kernel.exceptions import (
    EmptyVoucherSetError,
    MissingCostError,
    MissingDetailsError,
    MissingWeekOrSiteError,
    MixedVoucherKindsError,
    ReconciliationError,
)
from haulage_engines.tracer import traced_engine

_ZERO = Decimal("0")


class RejectionReason(str, Enum):
    """Why a voucher set (or filter selection) cannot be reconciled."""

    EMPTY_SET = "EmptySet"
    MISSING_DETAILS = "MissingDetails"
    MISSING_COST = "MissingCost"
    MISSING_WEEK_OR_SITE = "MissingWeekOrSite"
    MIXED_KINDS = "MixedKinds"


@dataclass(frozen=True)
class EligibilityResult:
    """
    Outcome of an eligibility check.

    Contract:
        ``is_valid`` is True only when ``reason`` is None.  ``offenders``
        holds the offending voucher ids for detail-level failures, the kind
        names for MixedKinds and the missing field names for
        MissingWeekOrSite.

    Guarantees:
        - Immutable; ``bool(result) == result.is_valid``.
        - ``raise_for_failure()`` maps a failure to the typed exception
          carrying the same code.
    """

    is_valid: bool
    reason: RejectionReason | None = None
    message: str = ""
    offenders: tuple = ()

    @classmethod
    def success(cls) -> EligibilityResult:
        return cls(is_valid=True)

    @classmethod
    def failure(
        cls,
        reason: RejectionReason,
        message: str,
        offenders: tuple = (),
    ) -> EligibilityResult:
        return cls(
            is_valid=False,
            reason=reason,
            message=message,
            offenders=tuple(offenders),
        )

    def __bool__(self) -> bool:
        return self.is_valid

    def to_dict(self) -> dict:
        """Wire shape: ``{"valid": True}`` or ``{"valid": False, "reason": ...}``."""
        if self.is_valid:
            return {"valid": True}
        return {
            "valid": False,
            "reason": self.reason.value,
            "message": self.message,
        }

    def as_error(self) -> ReconciliationError | None:
        """The typed exception equivalent to this result (None when valid)."""
        if self.is_valid:
            return None
        match self.reason:
            case RejectionReason.EMPTY_SET:
                return EmptyVoucherSetError(self.message)
            case RejectionReason.MISSING_DETAILS:
                return MissingDetailsError(self.offenders, self.message)
            case RejectionReason.MISSING_COST:
                return MissingCostError(self.offenders, self.message)
            case RejectionReason.MISSING_WEEK_OR_SITE:
                return MissingWeekOrSiteError(self.offenders)
            case RejectionReason.MIXED_KINDS:
                return MixedVoucherKindsError(self.offenders, self.message)
            case _:
                raise ValueError(f"Unknown rejection reason: {self.reason}")

    def raise_for_failure(self) -> None:
        """Raise the matching ReconciliationError if the check failed."""
        error = self.as_error()
        if error is not None:
            raise error


def is_missing_cost(cost: Decimal | None) -> bool:
    """A cost is missing when absent or exactly zero."""
    return cost is None or cost == _ZERO


@traced_engine("eligibility", "1.0")
def validate_eligibility(vouchers: Sequence[Voucher] | None) -> EligibilityResult:
    """
    Validate that a voucher set is eligible for reconciliation.

    Pure function - no side effects, no I/O, deterministic output.

    Args:
        vouchers: The complete voucher set for the period (may be None).

    Returns:
        EligibilityResult; on failure ``reason`` names the first failing check.
    """
    if not vouchers:
        return EligibilityResult.failure(
            RejectionReason.EMPTY_SET,
            "No verified vouchers are available for this selection",
        )

    without_details = tuple(v.id for v in vouchers if not v.line_details)
    if without_details:
        return EligibilityResult.failure(
            RejectionReason.MISSING_DETAILS,
            f"{len(without_details)} voucher(s) without line details",
            without_details,
        )

    without_cost = tuple(
        v.id
        for v in vouchers
        if any(is_missing_cost(d.computed_cost) for d in v.line_details)
    )
    if without_cost:
        return EligibilityResult.failure(
            RejectionReason.MISSING_COST,
            f"{len(without_cost)} voucher(s) without computed cost",
            without_cost,
        )

    kinds = sorted({v.kind.value for v in vouchers})
    if len(kinds) > 1:
        return EligibilityResult.failure(
            RejectionReason.MIXED_KINDS,
            f"Voucher set mixes kinds: {', '.join(kinds)}",
            tuple(kinds),
        )

    return EligibilityResult.success()
