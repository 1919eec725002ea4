"""
Conciliation module: turn a week of verified vouchers into a stored,
billable reconciliation and regenerate its proof documents later.
"""

from haulage_modules.conciliation.assembler import prepare_record, rehydrate
from haulage_modules.conciliation.config import ConciliationConfig
from haulage_modules.conciliation.formatting import TableRow, format_table_rows
from haulage_modules.conciliation.models import (
    FilterSelection,
    GenerationResult,
    ReconciliationDraft,
    ReconciliationStatus,
    RehydratedReconciliation,
    StoredReconciliation,
)
from haulage_modules.conciliation.service import ConciliationService, VoucherSource
from haulage_modules.conciliation.sink import ReconciliationRepository

__all__ = [
    "prepare_record",
    "rehydrate",
    "ConciliationConfig",
    "TableRow",
    "format_table_rows",
    "FilterSelection",
    "GenerationResult",
    "ReconciliationDraft",
    "ReconciliationStatus",
    "RehydratedReconciliation",
    "StoredReconciliation",
    "ConciliationService",
    "VoucherSource",
    "ReconciliationRepository",
]
