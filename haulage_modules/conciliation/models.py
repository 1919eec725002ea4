"""
Conciliation Domain Models (``haulage_modules.conciliation.models``).

Responsibility
--------------
Frozen value objects for the nouns of the conciliation workflow: the
filter selection a user submits, the draft record the assembler builds, the
stored reconciliation the sink hands back, the rehydrated view used to
regenerate documents, and the structured result of a generation request.

Architecture position
---------------------
**Modules layer** -- pure data definitions.  No I/O, no database.  These
objects flow *into* ``ConciliationService`` and the document exporters and
*out of* ``ReconciliationRepository`` as immutable snapshots.

Invariants enforced
-------------------
* All monetary fields use ``Decimal`` (never ``float``).
* All dataclasses are ``frozen=True``.
* ``ReconciliationDraft`` rejects day/hour totals on material drafts.

Failure modes
-------------
* ``ValueError`` raised in ``__post_init__`` when a material draft carries
  day/hour totals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from haulage_kernel.domain.vouchers import VoucherKind
from haulage_kernel.domain.weeks import WorkWeek
from haulage_engines.grouping import PlateGroup
from haulage_engines.totals import Totals


class ReconciliationStatus(str, Enum):
    """Lifecycle states of a stored reconciliation."""

    GENERATED = "generated"


@dataclass(frozen=True)
class FilterSelection:
    """
    What the user picked on the conciliation screen.

    ``union_id`` is only set when an administrator chooses the union; for
    union users it comes from their profile and is passed separately.
    """

    week: WorkWeek | None
    worksite_id: int | None
    union_id: int | None = None

    def missing_fields(self) -> tuple[str, ...]:
        missing = []
        if self.week is None:
            missing.append("week")
        if self.worksite_id is None:
            missing.append("worksite_id")
        return tuple(missing)


@dataclass(frozen=True)
class ReconciliationDraft:
    """
    Persistable reconciliation payload, before the sink assigns a folio.

    Contract:
        Built only by ``assembler.prepare_record`` from an eligible voucher
        set.  Never mutated; the sink copies it into storage verbatim.
    """

    kind: VoucherKind
    worksite_id: int
    week: WorkWeek
    subtotal: Decimal
    vat: Decimal
    total: Decimal
    generated_by: int
    union_id: int | None = None
    company_id: int | None = None
    withholding: Decimal | None = None
    total_days: Decimal | None = None
    total_hours: Decimal | None = None
    status: ReconciliationStatus = ReconciliationStatus.GENERATED

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", VoucherKind(self.kind))
        if self.kind is VoucherKind.MATERIAL and (
            self.total_days is not None or self.total_hours is not None
        ):
            raise ValueError("Material reconciliations carry no day/hour totals")


@dataclass(frozen=True)
class StoredReconciliation:
    """A reconciliation as read back from storage."""

    id: UUID
    folio: str
    created_at: datetime
    draft: ReconciliationDraft
    voucher_ids: tuple[int, ...] = ()

    @property
    def kind(self) -> VoucherKind:
        return self.draft.kind

    @property
    def week(self) -> WorkWeek:
        return self.draft.week

    @property
    def status(self) -> ReconciliationStatus:
        return self.draft.status


@dataclass(frozen=True)
class RehydratedReconciliation:
    """
    Everything a document formatter needs to (re)print a reconciliation.

    ``totals`` monetary figures are the persisted ones; only the category
    tallies are rebuilt from the regrouped vouchers.
    """

    reconciliation: StoredReconciliation
    plate_groups: dict[str, PlateGroup]
    totals: Totals


@dataclass(frozen=True)
class GenerationResult:
    """
    Outcome of ``ConciliationService.generate``/``regenerate``.

    On rejection ``code`` is the stable error code (``EmptySet``,
    ``MissingCost``, ...) and ``message`` is user-facing text.
    """

    success: bool
    code: str | None = None
    message: str = ""
    reconciliation: StoredReconciliation | None = None
    plate_groups: dict[str, PlateGroup] = field(default_factory=dict)
    totals: Totals | None = None

    @classmethod
    def generated(
        cls,
        view: RehydratedReconciliation,
        message: str | None = None,
    ) -> GenerationResult:
        return cls(
            success=True,
            reconciliation=view.reconciliation,
            plate_groups=view.plate_groups,
            totals=view.totals,
            message=message or f"Reconciliation {view.reconciliation.folio} generated",
        )

    @classmethod
    def rejected(cls, code: str, message: str) -> GenerationResult:
        return cls(success=False, code=code, message=message)

    @property
    def folio(self) -> str | None:
        return self.reconciliation.folio if self.reconciliation else None
