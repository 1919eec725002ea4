"""
Conciliation Module Service (``haulage_modules.conciliation.service``).

Responsibility
--------------
Orchestrates reconciliation generation and regeneration: fetches vouchers
from the voucher source, delegates pure computation to ``haulage_engines``
and the assembler, and stores the result through the repository.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``ConciliationService`` is the sole public
entry point for the conciliation workflow.

Invariants enforced
-------------------
* Each public method owns the transaction boundary (``commit`` on success,
  ``rollback`` on rejection or exception).
* Eligibility is checked before any grouping; a rejected set never produces
  totals or rows.
* Tax rates and the sentinel plate come from ``ConciliationConfig``; without
  an injected one the active YAML set (``haulage_config``) is used.

Failure modes
-------------
* ``ReconciliationError`` / ``ReconciliationNotFoundError``  ->
  ``GenerationResult`` with ``success == False`` and the error ``code``;
  session rolled back.
* Unexpected exception  -> session rolled back, exception re-raised.

Usage::

    service = ConciliationService(session, voucher_source, clock=clock)
    result = service.generate(
        VoucherKind.MATERIAL,
        FilterSelection(week=week_of(today), worksite_id=12),
        requester_id=7,
        union_id=3,
    )
    if not result.success:
        show_error(result.code, result.message)
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Protocol, runtime_checkable
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

import haulage_config
from haulage_kernel.domain.clock import Clock, SystemClock
from haulage_kernel.domain.vouchers import Voucher, VoucherKind
from haulage_kernel.domain.weeks import WorkWeek, weeks_with_vouchers
from haulage_kernel.exceptions import (
    MissingWeekOrSiteError,
    ReconciliationError,
    ReconciliationNotFoundError,
)
from haulage_kernel.logging_config import LogContext, get_logger
from haulage_engines.eligibility import validate_eligibility
from haulage_engines.grouping import group_by_plate
from haulage_engines.totals import calculate_totals
from haulage_modules.conciliation.assembler import prepare_record, rehydrate
from haulage_modules.conciliation.config import ConciliationConfig
from haulage_modules.conciliation.models import (
    FilterSelection,
    GenerationResult,
    ReconciliationStatus,
    RehydratedReconciliation,
    StoredReconciliation,
)
from haulage_modules.conciliation.sink import ReconciliationRepository

logger = get_logger("modules.conciliation.service")


@runtime_checkable
class VoucherSource(Protocol):
    """Where verified vouchers come from."""

    def fetch(
        self,
        kind: VoucherKind,
        selection: FilterSelection,
        union_id: int | None,
    ) -> Sequence[Voucher]:
        """The complete verified voucher set for a week and worksite."""
        ...

    def fetch_by_ids(self, voucher_ids: Sequence[int]) -> Sequence[Voucher]:
        ...

    def creation_dates(
        self,
        kind: VoucherKind,
        worksite_id: int,
        union_id: int | None,
    ) -> Sequence[date]:
        ...


class ConciliationService:
    """
    Generates and regenerates reconciliations.

    Contract
    --------
    * ``generate`` and ``regenerate`` return ``GenerationResult``; callers
      inspect ``result.success``.
    * Read helpers (``available_weeks``, ``existing``) have no side effects.

    Guarantees
    ----------
    * Session is committed only on success; otherwise rolled back.
    * Clock is injectable for deterministic testing.
    """

    def __init__(
        self,
        session: Session,
        voucher_source: VoucherSource,
        clock: Clock | None = None,
        config: ConciliationConfig | None = None,
    ):
        self._session = session
        self._source = voucher_source
        self._clock = clock or SystemClock()
        self._config = config or haulage_config.get_active_config()
        self._repository = ReconciliationRepository(
            session, config=self._config, clock=self._clock
        )

    # =========================================================================
    # Generation
    # =========================================================================

    def generate(
        self,
        kind: VoucherKind,
        selection: FilterSelection,
        requester_id: int,
        union_id: int | None = None,
    ) -> GenerationResult:
        """
        Generate and store a reconciliation for the selected week and worksite.

        Preconditions:
            - ``selection`` names a week and a worksite.
        Postconditions:
            - On success: one reconciliation row plus one linkage row per
              voucher, session committed.
            - On rejection: nothing stored, result carries the error code.
        Raises:
            Exception: re-raised after rollback for unexpected failures.
        """
        kind = VoucherKind(kind)
        with LogContext.bind(
            correlation_id=uuid4(),
            actor_id=requester_id,
            worksite_id=selection.worksite_id,
        ):
            logger.info("conciliation_generate_started", extra={
                "kind": kind.value,
                "week": selection.week.key if selection.week else None,
                "union_id": selection.union_id if selection.union_id is not None else union_id,
            })
            try:
                missing = selection.missing_fields()
                if missing:
                    raise MissingWeekOrSiteError(missing)

                vouchers = self._source.fetch(kind, selection, union_id)
                validate_eligibility(vouchers).raise_for_failure()

                groups = group_by_plate(
                    vouchers,
                    kind=kind,
                    sentinel_plate=self._config.sentinel_plate,
                )
                totals = calculate_totals(
                    groups, kind=kind, policy=self._config.tax_policy(kind)
                )
                draft = prepare_record(
                    vouchers, totals, selection, union_id, requester_id
                )
                stored = self._repository.store(draft, [v.id for v in vouchers])
                self._session.commit()

            except ReconciliationError as e:
                self._session.rollback()
                logger.warning("conciliation_generate_rejected", extra={
                    "kind": kind.value,
                    "code": e.code,
                    "reason": str(e),
                })
                return GenerationResult.rejected(e.code, str(e))
            except Exception:
                self._session.rollback()
                raise

            logger.info("conciliation_generate_committed", extra={
                "reconciliation_id": str(stored.id),
                "folio": stored.folio,
                "plate_groups": len(groups),
                "voucher_count": len(vouchers),
                "subtotal": str(totals.subtotal),
                "total": str(totals.total),
            })
            return GenerationResult.generated(
                RehydratedReconciliation(
                    reconciliation=stored,
                    plate_groups=groups,
                    totals=totals,
                )
            )

    def regenerate(self, reconciliation_id: UUID) -> GenerationResult:
        """
        Rebuild the document view of a stored reconciliation.

        Totals are the stored ones; vouchers are regrouped only to rebuild
        the per-plate breakdown.
        """
        with LogContext.bind(
            correlation_id=uuid4(),
            reconciliation_id=reconciliation_id,
        ):
            try:
                stored = self._repository.load(reconciliation_id)
                vouchers = self._source.fetch_by_ids(stored.voucher_ids)
                view = rehydrate(
                    stored, vouchers, sentinel_plate=self._config.sentinel_plate
                )
                self._session.commit()
            except (ReconciliationError, ReconciliationNotFoundError) as e:
                self._session.rollback()
                logger.warning("conciliation_regenerate_rejected", extra={
                    "code": e.code,
                    "reason": str(e),
                })
                return GenerationResult.rejected(e.code, str(e))
            except Exception:
                self._session.rollback()
                raise

            logger.info("conciliation_regenerated", extra={
                "folio": stored.folio,
                "plate_groups": len(view.plate_groups),
                "voucher_count": len(vouchers),
            })
            return GenerationResult.generated(
                view, message=f"Reconciliation {stored.folio} regenerated"
            )

    # =========================================================================
    # Queries
    # =========================================================================

    def available_weeks(
        self,
        kind: VoucherKind,
        worksite_id: int,
        union_id: int | None = None,
    ) -> list[tuple[WorkWeek, int]]:
        """Weeks with verified vouchers and their counts, newest first."""
        dates = self._source.creation_dates(VoucherKind(kind), worksite_id, union_id)
        return weeks_with_vouchers(dates)

    def existing(
        self,
        kind: VoucherKind,
        selection: FilterSelection,
        union_id: int | None = None,
    ) -> list[StoredReconciliation]:
        """
        Reconciliations already generated for the selection.

        The union is resolved as in ``generate``: the selected union, else
        ``union_id``; with neither, every union's reconciliations are listed.
        """
        if selection.missing_fields():
            return []
        union = selection.union_id if selection.union_id is not None else union_id
        return self._repository.find(
            kind, selection.worksite_id, selection.week, union_id=union
        )

    def history(
        self,
        kind: VoucherKind | None = None,
        worksite_id: int | None = None,
        union_id: int | None = None,
        status: ReconciliationStatus | None = None,
    ) -> list[StoredReconciliation]:
        """Generated reconciliations across all weeks, newest first."""
        return self._repository.history(
            kind=kind, worksite_id=worksite_id, union_id=union_id, status=status
        )
