"""
Module: haulage_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    reconciliation engines.  This is the canonical import surface for
    ``haulage_modules``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import haulage_kernel (domain values, exceptions, logging).
    MUST NOT import haulage_modules.

Invariants enforced:
    - Purity: engines never read the clock or the database.
    - Decimal-only arithmetic for money and quantities.
    - Determinism: identical inputs always produce identical outputs.

Data flow:
    validate_eligibility -> group_by_plate -> calculate_totals
"""

from haulage_engines.accumulators import (
    AggregateTally,
    CategoryAccumulator,
    CutProductTally,
    MaterialAccumulator,
    MaterialTally,
    RentalAccumulator,
    RentalTally,
    accumulator_for,
    round2,
)
from haulage_engines.eligibility import (
    EligibilityResult,
    RejectionReason,
    validate_eligibility,
)
from haulage_engines.grouping import (
    NO_PLATE,
    PlateGroup,
    group_by_plate,
    resolve_plate,
    sorted_groups,
)
from haulage_engines.tax_policy import (
    VAT_ONLY,
    VAT_WITH_WITHHOLDING,
    TaxBreakdown,
    TaxPolicy,
)
from haulage_engines.totals import (
    Totals,
    UnitPrices,
    calculate_totals,
    calculate_unit_prices,
)

__all__ = [
    "AggregateTally",
    "CategoryAccumulator",
    "CutProductTally",
    "MaterialAccumulator",
    "MaterialTally",
    "RentalAccumulator",
    "RentalTally",
    "accumulator_for",
    "round2",
    "EligibilityResult",
    "RejectionReason",
    "validate_eligibility",
    "NO_PLATE",
    "PlateGroup",
    "group_by_plate",
    "resolve_plate",
    "sorted_groups",
    "VAT_ONLY",
    "VAT_WITH_WITHHOLDING",
    "TaxBreakdown",
    "TaxPolicy",
    "Totals",
    "UnitPrices",
    "calculate_totals",
    "calculate_unit_prices",
]
