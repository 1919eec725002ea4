"""
Reconciliation Sink (``haulage_modules.conciliation.sink``).

Responsibility
--------------
Persist a ``ReconciliationDraft`` with its voucher linkage and read stored
reconciliations back as frozen ``StoredReconciliation`` snapshots.

Architecture position
---------------------
**Modules layer** -- persistence adapter over the ORM in ``orm.py``.  Does
not own the transaction: it flushes, the caller commits or rolls back.

Invariants enforced
-------------------
* The reconciliation row and its linkage rows are written in one flush.
* Folios are sequential per kind (``REN-0001``, ``MAT-0001``, ...).
* ``created_at`` comes from the injected clock, never the database clock.

Failure modes
-------------
* ``ReconciliationNotFoundError`` from ``load`` for an unknown id.
* Concurrent writers may race on the same folio; the unique constraint on
  ``folio`` turns that into an ``IntegrityError`` for the caller to retry.
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

import haulage_config
from haulage_kernel.domain.clock import Clock, SystemClock
from haulage_kernel.domain.vouchers import VoucherKind
from haulage_kernel.domain.weeks import WorkWeek
from haulage_kernel.exceptions import ReconciliationNotFoundError
from haulage_kernel.logging_config import get_logger
from haulage_modules.conciliation.config import ConciliationConfig
from haulage_modules.conciliation.models import (
    ReconciliationDraft,
    ReconciliationStatus,
    StoredReconciliation,
)
from haulage_modules.conciliation.orm import ReconciliationModel

logger = get_logger("modules.conciliation.sink")


class ReconciliationRepository:
    """
    Stores and loads reconciliations.

    Contract
    --------
    * ``store`` returns the stored snapshot, including the assigned folio.
    * ``load`` and ``find`` never return ORM objects.
    """

    def __init__(
        self,
        session: Session,
        config: ConciliationConfig | None = None,
        clock: Clock | None = None,
    ):
        self._session = session
        self._config = config or haulage_config.get_active_config()
        self._clock = clock or SystemClock()

    def next_folio(self, kind: VoucherKind) -> str:
        """Folio the next stored reconciliation of ``kind`` will receive."""
        kind = VoucherKind(kind)
        count = self._session.scalar(
            select(func.count())
            .select_from(ReconciliationModel)
            .where(ReconciliationModel.kind == kind.value)
        )
        return self._config.format_folio(kind, (count or 0) + 1)

    def store(
        self,
        draft: ReconciliationDraft,
        voucher_ids: Sequence[int],
    ) -> StoredReconciliation:
        """Persist ``draft`` and link it to ``voucher_ids``."""
        folio = self.next_folio(draft.kind)
        model = ReconciliationModel.from_dto(
            draft,
            folio=folio,
            voucher_ids=voucher_ids,
            created_at=self._clock.now(),
        )
        self._session.add(model)
        self._session.flush()

        logger.info(
            "reconciliation_stored",
            extra={
                "reconciliation_id": str(model.id),
                "folio": folio,
                "kind": draft.kind.value,
                "voucher_count": len(model.vouchers),
                "total": str(draft.total),
            },
        )
        return model.to_dto()

    def load(self, reconciliation_id: UUID) -> StoredReconciliation:
        """Load a stored reconciliation with its linked voucher ids."""
        model = self._session.get(ReconciliationModel, reconciliation_id)
        if model is None:
            raise ReconciliationNotFoundError(reconciliation_id)
        return model.to_dto()

    def find(
        self,
        kind: VoucherKind,
        worksite_id: int,
        week: WorkWeek,
        union_id: int | None = None,
    ) -> list[StoredReconciliation]:
        """
        Reconciliations already generated for a worksite and week, oldest first.

        With ``union_id`` only that union's reconciliations are returned.
        """
        stmt = select(ReconciliationModel).where(
            ReconciliationModel.kind == VoucherKind(kind).value,
            ReconciliationModel.worksite_id == worksite_id,
            ReconciliationModel.week_year == week.year,
            ReconciliationModel.week_number == week.number,
        )
        if union_id is not None:
            stmt = stmt.where(ReconciliationModel.union_id == union_id)
        rows = self._session.scalars(stmt.order_by(ReconciliationModel.folio))
        return [row.to_dto() for row in rows]

    def history(
        self,
        kind: VoucherKind | None = None,
        worksite_id: int | None = None,
        union_id: int | None = None,
        status: ReconciliationStatus | None = None,
    ) -> list[StoredReconciliation]:
        """Stored reconciliations across weeks, newest first; unset filters match all."""
        stmt = select(ReconciliationModel)
        if kind is not None:
            stmt = stmt.where(ReconciliationModel.kind == VoucherKind(kind).value)
        if worksite_id is not None:
            stmt = stmt.where(ReconciliationModel.worksite_id == worksite_id)
        if union_id is not None:
            stmt = stmt.where(ReconciliationModel.union_id == union_id)
        if status is not None:
            stmt = stmt.where(
                ReconciliationModel.status == ReconciliationStatus(status).value
            )
        rows = self._session.scalars(
            stmt.order_by(
                ReconciliationModel.created_at.desc(),
                ReconciliationModel.folio.desc(),
            )
        )
        return [row.to_dto() for row in rows]
