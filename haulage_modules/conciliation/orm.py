"""
Conciliation ORM Models (``haulage_modules.conciliation.orm``).

Responsibility
--------------
SQLAlchemy persistence models for stored reconciliations and their voucher
linkage.  Maps the frozen dataclasses from ``models.py`` to database tables.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``haulage_kernel.db.base``
and sibling ``models.py``.  MUST NOT be imported by ``haulage_engines``.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from haulage_kernel.db.base import Base, TrackedBase
from haulage_engines.accumulators import round2


def _round_optional(value: Decimal | None) -> Decimal | None:
    return round2(value) if value is not None else None


# ---------------------------------------------------------------------------
# 1. ReconciliationModel
# ---------------------------------------------------------------------------


class ReconciliationModel(TrackedBase):
    """
    ORM model for a generated reconciliation.

    Maps to ``StoredReconciliation``.  Linked voucher ids are stored in the
    child table via the ``vouchers`` relationship.

    Guarantees:
        - folio is unique (uq_reconciliations_folio).
        - Monetary fields use Decimal (Numeric(38,9) via type_annotation_map).
        - kind and status stored as string enum values.
    """

    __tablename__ = "reconciliations"

    __table_args__ = (
        UniqueConstraint("folio", name="uq_reconciliations_folio"),
        Index("idx_reconciliations_kind", "kind"),
        Index("idx_reconciliations_worksite_week", "worksite_id", "week_year", "week_number"),
    )

    folio: Mapped[str] = mapped_column(String(30), nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    worksite_id: Mapped[int] = mapped_column(nullable=False)
    union_id: Mapped[int | None] = mapped_column(nullable=True)
    company_id: Mapped[int | None] = mapped_column(nullable=True)
    week_year: Mapped[int] = mapped_column(nullable=False)
    week_number: Mapped[int] = mapped_column(nullable=False)
    week_start: Mapped[date] = mapped_column(Date, nullable=False)
    week_end: Mapped[date] = mapped_column(Date, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(nullable=False)
    vat: Mapped[Decimal] = mapped_column(nullable=False)
    withholding: Mapped[Decimal | None] = mapped_column(nullable=True)
    total: Mapped[Decimal] = mapped_column(nullable=False)
    total_days: Mapped[Decimal | None] = mapped_column(nullable=True)
    total_hours: Mapped[Decimal | None] = mapped_column(nullable=True)
    generated_by: Mapped[int] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="generated")

    vouchers: Mapped[list["ReconciliationVoucherModel"]] = relationship(
        back_populates="reconciliation",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ReconciliationVoucherModel.voucher_id",
    )

    def to_dto(self):
        """Convert ORM model to frozen dataclass."""
        from haulage_kernel.domain.weeks import WorkWeek
        from haulage_modules.conciliation.models import (
            ReconciliationDraft,
            ReconciliationStatus,
            StoredReconciliation,
        )

        draft = ReconciliationDraft(
            kind=self.kind,
            worksite_id=self.worksite_id,
            union_id=self.union_id,
            company_id=self.company_id,
            week=WorkWeek(
                year=self.week_year,
                number=self.week_number,
                start=self.week_start,
                end=self.week_end,
            ),
            subtotal=round2(self.subtotal),
            vat=round2(self.vat),
            withholding=_round_optional(self.withholding),
            total=round2(self.total),
            total_days=_round_optional(self.total_days),
            total_hours=_round_optional(self.total_hours),
            generated_by=self.generated_by,
            status=ReconciliationStatus(self.status),
        )
        return StoredReconciliation(
            id=self.id,
            folio=self.folio,
            created_at=self.created_at,
            draft=draft,
            voucher_ids=tuple(v.voucher_id for v in self.vouchers),
        )

    @classmethod
    def from_dto(cls, draft, folio: str, voucher_ids=(), **kwargs) -> "ReconciliationModel":
        """Create ORM model from a draft plus the sink-assigned folio."""
        model = cls(
            folio=folio,
            kind=draft.kind.value,
            worksite_id=draft.worksite_id,
            union_id=draft.union_id,
            company_id=draft.company_id,
            week_year=draft.week.year,
            week_number=draft.week.number,
            week_start=draft.week.start,
            week_end=draft.week.end,
            subtotal=draft.subtotal,
            vat=draft.vat,
            withholding=draft.withholding,
            total=draft.total,
            total_days=draft.total_days,
            total_hours=draft.total_hours,
            generated_by=draft.generated_by,
            status=draft.status.value,
            **kwargs,
        )
        model.vouchers = [
            ReconciliationVoucherModel(voucher_id=voucher_id)
            for voucher_id in sorted(set(voucher_ids))
        ]
        return model

    def __repr__(self) -> str:
        return f"<ReconciliationModel {self.folio}: {self.kind} {self.total}>"


# ---------------------------------------------------------------------------
# 2. ReconciliationVoucherModel
# ---------------------------------------------------------------------------


class ReconciliationVoucherModel(Base):
    """
    Linkage row between a reconciliation and one of its vouchers.

    Guarantees:
        - (reconciliation_id, voucher_id) is unique.
    """

    __tablename__ = "reconciliation_vouchers"

    __table_args__ = (
        UniqueConstraint(
            "reconciliation_id",
            "voucher_id",
            name="uq_reconciliation_vouchers_pair",
        ),
        Index("idx_reconciliation_vouchers_voucher_id", "voucher_id"),
    )

    reconciliation_id: Mapped[UUID] = mapped_column(
        ForeignKey("reconciliations.id"), nullable=False
    )
    voucher_id: Mapped[int] = mapped_column(nullable=False)

    reconciliation: Mapped["ReconciliationModel"] = relationship(
        back_populates="vouchers",
    )

    def __repr__(self) -> str:
        return f"<ReconciliationVoucherModel {self.reconciliation_id}:{self.voucher_id}>"
