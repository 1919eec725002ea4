"""
Tax policies for reconciliation statements.

Two policies exist today:

    rental    VAT only:             total = subtotal + VAT
    material  VAT and withholding:  total = subtotal + VAT - withholding

Rates are parameters, not constants buried in the totals calculation, so a
contract or union with a different withholding arrangement is a new policy
value rather than a code change.

Rounding: the subtotal is summed at full precision and rounded once.  VAT
and withholding are computed on that rounded subtotal, and the total is the
rounded combination of the three rounded figures, so the statement balances
exactly as printed.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from haulage_kernel.domain.vouchers import VoucherKind
from haulage_engines.accumulators import round2

DEFAULT_VAT_RATE = Decimal("0.16")
DEFAULT_MATERIAL_WITHHOLDING_RATE = Decimal("0.04")


@dataclass(frozen=True)
class TaxBreakdown:
    """Rounded monetary figures for a statement."""

    subtotal: Decimal
    vat: Decimal
    withholding: Decimal | None
    total: Decimal


@dataclass(frozen=True)
class TaxPolicy:
    """
    Tax policy applied to a reconciliation subtotal.

    Contract:
        ``withholding_rate is None`` means the policy has no withholding at
        all (the breakdown's ``withholding`` is None, not zero).

    Guarantees:
        - Rates are Decimals in [0, 1], validated at construction.
        - ``apply`` is pure and deterministic.
    """

    name: str
    vat_rate: Decimal = DEFAULT_VAT_RATE
    withholding_rate: Decimal | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.vat_rate, Decimal):
            object.__setattr__(self, "vat_rate", Decimal(str(self.vat_rate)))
        if self.withholding_rate is not None and not isinstance(
            self.withholding_rate, Decimal
        ):
            object.__setattr__(
                self, "withholding_rate", Decimal(str(self.withholding_rate))
            )
        if not (Decimal("0") <= self.vat_rate <= Decimal("1")):
            raise ValueError("vat_rate must be between 0 and 1")
        if self.withholding_rate is not None and not (
            Decimal("0") <= self.withholding_rate <= Decimal("1")
        ):
            raise ValueError("withholding_rate must be between 0 and 1")

    @property
    def applies_withholding(self) -> bool:
        return self.withholding_rate is not None

    def apply(self, subtotal: Decimal) -> TaxBreakdown:
        """Compute VAT, withholding and total for a full-precision subtotal."""
        rounded_subtotal = round2(subtotal)
        vat = round2(rounded_subtotal * self.vat_rate)
        if self.withholding_rate is None:
            return TaxBreakdown(
                subtotal=rounded_subtotal,
                vat=vat,
                withholding=None,
                total=round2(rounded_subtotal + vat),
            )
        withholding = round2(rounded_subtotal * self.withholding_rate)
        return TaxBreakdown(
            subtotal=rounded_subtotal,
            vat=vat,
            withholding=withholding,
            total=round2(rounded_subtotal + vat - withholding),
        )

    @classmethod
    def for_kind(
        cls,
        kind: VoucherKind,
        vat_rate: Decimal = DEFAULT_VAT_RATE,
        material_withholding_rate: Decimal | None = DEFAULT_MATERIAL_WITHHOLDING_RATE,
        rental_withholding_rate: Decimal | None = None,
    ) -> TaxPolicy:
        """Policy for a voucher kind with the given (or default) rates."""
        kind = VoucherKind(kind)
        if kind is VoucherKind.RENTAL:
            return cls(
                name="vat_only" if rental_withholding_rate is None else "rental_vat_with_withholding",
                vat_rate=vat_rate,
                withholding_rate=rental_withholding_rate,
            )
        return cls(
            name="vat_with_withholding" if material_withholding_rate is not None else "material_vat_only",
            vat_rate=vat_rate,
            withholding_rate=material_withholding_rate,
        )


VAT_ONLY = TaxPolicy(name="vat_only")
VAT_WITH_WITHHOLDING = TaxPolicy(
    name="vat_with_withholding",
    withholding_rate=DEFAULT_MATERIAL_WITHHOLDING_RATE,
)
