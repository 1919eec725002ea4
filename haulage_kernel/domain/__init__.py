"""
Pure domain layer.

Immutable voucher value objects, work-week bucketing and the injectable
clock.  No dependencies on the ORM, the database or I/O.
"""

from haulage_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from haulage_kernel.domain.vouchers import (
    LineDetail,
    MaterialLineDetail,
    MaterialType,
    RentalLineDetail,
    Voucher,
    VoucherKind,
    WorksiteRef,
    to_decimal,
)
from haulage_kernel.domain.weeks import (
    WorkWeek,
    format_week_range,
    week_of,
    weeks_with_vouchers,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "LineDetail",
    "MaterialLineDetail",
    "MaterialType",
    "RentalLineDetail",
    "Voucher",
    "VoucherKind",
    "WorksiteRef",
    "to_decimal",
    "WorkWeek",
    "format_week_range",
    "week_of",
    "weeks_with_vouchers",
]
