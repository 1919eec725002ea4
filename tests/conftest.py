"""
Pytest fixtures for the reconciliation test suite.

Provides:
- Structured-logging setup and capture
- In-memory SQLite sessions with the reconciliation tables created
- Voucher factories for both kinds and a fake voucher source
- Rehydrated reconciliation views for the document exporters
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from haulage_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from haulage_kernel.domain.clock import DeterministicClock
from haulage_kernel.domain.vouchers import (
    MaterialLineDetail,
    MaterialType,
    RentalLineDetail,
    Voucher,
    VoucherKind,
    WorksiteRef,
)
from haulage_kernel.domain.weeks import WorkWeek, week_of
from haulage_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from haulage_engines.grouping import group_by_plate
from haulage_engines.totals import calculate_totals
from haulage_modules.conciliation.assembler import prepare_record, rehydrate
from haulage_modules.conciliation.models import FilterSelection, StoredReconciliation

# Monday 3 Feb 2025 .. Saturday 8 Feb 2025
TEST_WEEK_DAY = date(2025, 2, 5)
TEST_WORKSITE = WorksiteRef(id=12, name="Torre Norte", company_id=4, cost_center="CC-12")
TEST_REQUESTER_ID = 7
TEST_UNION_ID = 3


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture haulage_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service):
            service.generate(...)
            logs = captured_logs()
            assert any(r["message"] == "conciliation_generate_committed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("haulage_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """Fresh in-memory SQLite database per test."""
    init_engine_from_url("sqlite://")
    create_tables()
    s = get_session()
    yield s
    s.close()
    drop_tables()
    reset_engine()


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock()


# =============================================================================
# Voucher factories
# =============================================================================


@pytest.fixture
def test_week() -> WorkWeek:
    return week_of(TEST_WEEK_DAY)


@pytest.fixture
def rental_voucher():
    """
    Factory for rental vouchers.

    Each detail is a dict of ``RentalLineDetail`` fields; defaults give one
    day of a dump truck at 1000.
    """
    counter = {"next": 1}

    def _make(
        plate: str | None = "ABC-123",
        details: list[dict] | None = None,
        voucher_id: int | None = None,
        creation_date: date = TEST_WEEK_DAY,
        worksite: WorksiteRef | None = TEST_WORKSITE,
    ) -> Voucher:
        if voucher_id is None:
            voucher_id = counter["next"]
        counter["next"] = max(counter["next"], voucher_id) + 1
        if details is None:
            details = [{}]
        line_details = tuple(
            RentalLineDetail(
                **{
                    "material": "Camión volteo",
                    "total_days": Decimal("1"),
                    "computed_cost": Decimal("1000"),
                    **d,
                }
            )
            for d in details
        )
        return Voucher(
            id=voucher_id,
            folio=f"R-{voucher_id:05d}",
            kind=VoucherKind.RENTAL,
            creation_date=creation_date,
            line_details=line_details,
            vehicle_plate=plate,
            worksite=worksite,
            operator_name="Juan Pérez",
        )

    return _make


@pytest.fixture
def material_voucher():
    """
    Factory for material vouchers.

    Each detail is a dict of ``MaterialLineDetail`` fields; defaults give a
    type-1 load of 10 m3 / 15 t at 500.
    """
    counter = {"next": 1000}

    def _make(
        plate: str | None = "XYZ-987",
        details: list[dict] | None = None,
        voucher_id: int | None = None,
        creation_date: date = TEST_WEEK_DAY,
        worksite: WorksiteRef | None = TEST_WORKSITE,
    ) -> Voucher:
        if voucher_id is None:
            voucher_id = counter["next"]
        counter["next"] = max(counter["next"], voucher_id) + 1
        if details is None:
            details = [{}]
        line_details = tuple(
            MaterialLineDetail(
                **{
                    "material": "Grava 3/4",
                    "material_type": MaterialType.AGGREGATE_1,
                    "real_volume_m3": Decimal("10"),
                    "requested_volume_m3": Decimal("12"),
                    "weight_tons": Decimal("15"),
                    "computed_cost": Decimal("500"),
                    "quarry": "Banco El Cerro",
                    "quarry_folio": "BC-1",
                    **d,
                }
            )
            for d in details
        )
        return Voucher(
            id=voucher_id,
            folio=f"M-{voucher_id:05d}",
            kind=VoucherKind.MATERIAL,
            creation_date=creation_date,
            line_details=line_details,
            vehicle_plate=plate,
            worksite=worksite,
        )

    return _make


class FakeVoucherSource:
    """In-memory voucher source keyed by voucher id."""

    def __init__(self, vouchers=()):
        self.vouchers = {v.id: v for v in vouchers}

    def add(self, *vouchers):
        for v in vouchers:
            self.vouchers[v.id] = v

    def replace(self, voucher):
        self.vouchers[voucher.id] = voucher

    def fetch(self, kind, selection, union_id):
        return [
            v
            for v in self.vouchers.values()
            if v.kind is kind
            and selection.week.contains(v.creation_date)
            and v.worksite is not None
            and v.worksite.id == selection.worksite_id
        ]

    def fetch_by_ids(self, voucher_ids):
        return [self.vouchers[i] for i in voucher_ids if i in self.vouchers]

    def creation_dates(self, kind, worksite_id, union_id):
        return [
            v.creation_date
            for v in self.vouchers.values()
            if v.kind is kind and v.worksite is not None and v.worksite.id == worksite_id
        ]


@pytest.fixture
def voucher_source() -> FakeVoucherSource:
    return FakeVoucherSource()


# =============================================================================
# Document fixtures
# =============================================================================


@pytest.fixture
def make_view(test_week):
    """Build a rehydrated reconciliation from a voucher list without a database."""

    def _make(vouchers, folio="REN-0001"):
        totals = calculate_totals(group_by_plate(vouchers), vouchers[0].kind)
        draft = prepare_record(
            vouchers,
            totals,
            FilterSelection(week=test_week, worksite_id=TEST_WORKSITE.id),
            TEST_UNION_ID,
            TEST_REQUESTER_ID,
        )
        stored = StoredReconciliation(
            id=uuid4(),
            folio=folio,
            created_at=datetime(2025, 2, 10, 9, 30, tzinfo=timezone.utc),
            draft=draft,
            voucher_ids=tuple(v.id for v in vouchers),
        )
        return rehydrate(stored, vouchers)

    return _make
