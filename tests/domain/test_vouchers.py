"""Tests for voucher value objects."""

from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

import pytest

from haulage_kernel.domain.vouchers import (
    MaterialLineDetail,
    MaterialType,
    RentalLineDetail,
    Voucher,
    VoucherKind,
    to_decimal,
)


class TestCoercion:
    def test_to_decimal(self):
        assert to_decimal(None) == Decimal("0")
        assert to_decimal(3) == Decimal("3")
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal("12.50") == Decimal("12.50")

    def test_invalid_decimal(self):
        with pytest.raises(ValueError):
            to_decimal("twelve", "cost")

    def test_rental_detail_coerces(self):
        detail = RentalLineDetail(material="Grúa", total_days="2", total_hours=16, computed_cost="1500.5")

        assert detail.total_days == Decimal("2")
        assert detail.computed_cost == Decimal("1500.5")
        assert detail.number_of_trips == 0

    def test_absent_cost_stays_none(self):
        detail = RentalLineDetail(material="Grúa")

        assert detail.computed_cost is None

    def test_negative_trips_rejected(self):
        with pytest.raises(ValueError):
            RentalLineDetail(material="Grúa", number_of_trips=-1)

    @pytest.mark.parametrize("trips", [Decimal("2.5"), 0.5, "1.2"])
    def test_fractional_trips_rejected(self, trips):
        with pytest.raises(ValueError, match="whole number"):
            RentalLineDetail(material="Grúa", number_of_trips=trips)

    def test_integral_trips_accepted(self):
        assert RentalLineDetail(material="Grúa", number_of_trips=Decimal("3.0")).number_of_trips == 3
        assert RentalLineDetail(material="Grúa", number_of_trips="4").number_of_trips == 4

    def test_material_type_from_int(self):
        detail = MaterialLineDetail(material="Tepetate", material_type=3)

        assert detail.material_type is MaterialType.CUT_PRODUCT
        assert not detail.material_type.tracks_weight


class TestVoucher:
    def test_line_details_become_tuple(self):
        voucher = Voucher(
            id=1,
            folio="R-1",
            kind="rental",
            creation_date=date(2025, 2, 5),
            line_details=[RentalLineDetail(material="Grúa", computed_cost=10)],
        )

        assert voucher.kind is VoucherKind.RENTAL
        assert isinstance(voucher.line_details, tuple)
        assert voucher.line_cost == Decimal("10")

    def test_wrong_detail_kind_rejected(self):
        with pytest.raises(TypeError):
            Voucher(
                id=1,
                folio="M-1",
                kind=VoucherKind.MATERIAL,
                creation_date=date(2025, 2, 5),
                line_details=[RentalLineDetail(material="Grúa")],
            )

    def test_immutable(self, rental_voucher):
        voucher = rental_voucher()

        with pytest.raises(FrozenInstanceError):
            voucher.vehicle_plate = "OTHER"
