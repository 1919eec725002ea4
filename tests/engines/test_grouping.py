"""
Tests for the Grouping Engine.

Covers:
- Rental and material accumulation per plate
- Voucher membership (once per voucher, not per line)
- Sentinel plate for vouchers without a vehicle
- Trip counting asymmetry between the two kinds
- Purity and ordering
"""

from decimal import Decimal

import pytest

from haulage_kernel.domain.vouchers import MaterialType, VoucherKind
from haulage_kernel.exceptions import MissingCostError, MixedVoucherKindsError
from haulage_engines.grouping import (
    NO_PLATE,
    group_by_plate,
    resolve_plate,
    sorted_groups,
)


class TestRentalGrouping:
    """Rental vouchers sum days, hours, trips and cost per plate."""

    def test_two_vouchers_same_plate(self, rental_voucher):
        vouchers = [rental_voucher(plate="ABC-123"), rental_voucher(plate="ABC-123")]

        groups = group_by_plate(vouchers)

        assert list(groups) == ["ABC-123"]
        group = groups["ABC-123"]
        assert group.rental.days == Decimal("2")
        assert group.subtotal == Decimal("2000")
        assert group.voucher_count == 2

    def test_multi_line_voucher_listed_once(self, rental_voucher):
        voucher = rental_voucher(
            details=[
                {"total_days": 1, "total_hours": 8, "computed_cost": 1000},
                {"total_days": 0, "total_hours": 4, "computed_cost": 500},
            ]
        )

        group = group_by_plate([voucher])["ABC-123"]

        assert group.voucher_count == 1
        assert group.line_count == 2
        assert group.rental.hours == Decimal("12")
        assert group.subtotal == Decimal("1500")

    def test_rental_trips_use_explicit_count(self, rental_voucher):
        """Rental lines log their own trip count; one line may be many trips."""
        voucher = rental_voucher(
            details=[{"number_of_trips": 3}, {"number_of_trips": 2}]
        )

        group = group_by_plate([voucher])["ABC-123"]

        assert group.rental.trips == 5


class TestMaterialGrouping:
    """Material vouchers dispatch each line on its material type."""

    def test_two_type1_lines(self, material_voucher):
        voucher = material_voucher(plate="XYZ-987", details=[{}, {}])

        group = group_by_plate([voucher])["XYZ-987"]

        assert group.material.type1.trips == 2
        assert group.material.type1.volume_m3 == Decimal("20")
        assert group.material.type1.tons == Decimal("30")
        assert group.subtotal == Decimal("1000")

    def test_material_trips_are_one_per_line(self, material_voucher):
        """A material line is one load, whatever else it says."""
        voucher = material_voucher(details=[{}, {}, {}])

        group = group_by_plate([voucher])["XYZ-987"]

        assert group.material.trips == 3
        assert group.voucher_count == 1

    def test_types_accumulate_separately(self, material_voucher):
        voucher = material_voucher(
            details=[
                {"material_type": MaterialType.AGGREGATE_1},
                {"material_type": MaterialType.AGGREGATE_2, "real_volume_m3": 7, "weight_tons": 9},
                {"material_type": MaterialType.CUT_PRODUCT, "requested_volume_m3": 6},
            ]
        )

        tally = group_by_plate([voucher])["XYZ-987"].material

        assert (tally.type1.trips, tally.type2.trips, tally.type3.trips) == (1, 1, 1)
        assert tally.type2.volume_m3 == Decimal("7")
        assert tally.type2.tons == Decimal("9")

    def test_cut_product_uses_requested_volume(self, material_voucher):
        voucher = material_voucher(
            details=[
                {
                    "material_type": 3,
                    "real_volume_m3": Decimal("99"),
                    "requested_volume_m3": Decimal("6.5"),
                    "weight_tons": Decimal("40"),
                }
            ]
        )

        tally = group_by_plate([voucher])["XYZ-987"].material

        assert tally.type3.volume_m3 == Decimal("6.5")
        assert not hasattr(tally.type3, "tons")
        assert tally.present_types() == (MaterialType.CUT_PRODUCT,)

    def test_cost_added_regardless_of_type(self, material_voucher):
        voucher = material_voucher(
            details=[
                {"material_type": 1, "computed_cost": 100},
                {"material_type": 2, "computed_cost": 200},
                {"material_type": 3, "computed_cost": 300},
            ]
        )

        assert group_by_plate([voucher])["XYZ-987"].subtotal == Decimal("600")


class TestPlates:
    """Plate resolution and ordering."""

    def test_missing_plate_goes_to_sentinel(self, rental_voucher):
        groups = group_by_plate([rental_voucher(plate=None), rental_voucher(plate="")])

        assert list(groups) == [NO_PLATE]
        assert groups[NO_PLATE].voucher_count == 2

    def test_custom_sentinel(self, rental_voucher):
        groups = group_by_plate([rental_voucher(plate=None)], sentinel_plate="SIN PLACAS")

        assert list(groups) == ["SIN PLACAS"]

    def test_insertion_order_is_first_seen(self, rental_voucher):
        vouchers = [
            rental_voucher(plate="ZZZ-1"),
            rental_voucher(plate="AAA-1"),
            rental_voucher(plate="ZZZ-1"),
        ]

        assert list(group_by_plate(vouchers)) == ["ZZZ-1", "AAA-1"]

    def test_sorted_groups_puts_sentinel_last(self, rental_voucher):
        groups = group_by_plate([
            rental_voucher(plate=None),
            rental_voucher(plate="ZZZ-1"),
            rental_voucher(plate="AAA-1"),
        ])

        assert [g.plate for g in sorted_groups(groups)] == ["AAA-1", "ZZZ-1", NO_PLATE]

    def test_resolve_plate_keeps_plate_verbatim(self):
        assert resolve_plate(" ABC-1") == " ABC-1"
        assert resolve_plate("") == NO_PLATE
        assert resolve_plate(None) == NO_PLATE

    def test_whitespace_variants_are_separate_groups(self, rental_voucher):
        groups = group_by_plate([rental_voucher(plate="ABC-1"), rental_voucher(plate=" ABC-1")])

        assert list(groups) == ["ABC-1", " ABC-1"]


class TestPurityAndErrors:
    """The engine never mutates input and never defaults a cost."""

    def test_empty_input(self):
        assert group_by_plate([]) == {}

    def test_repeated_calls_are_equal_but_fresh(self, rental_voucher):
        vouchers = [rental_voucher(), rental_voucher(plate="DEF-1")]

        first = group_by_plate(vouchers)
        second = group_by_plate(vouchers)

        assert first == second
        assert first["ABC-123"] is not second["ABC-123"]

    def test_wrong_kind_raises(self, rental_voucher, material_voucher):
        with pytest.raises(MixedVoucherKindsError):
            group_by_plate([rental_voucher(), material_voucher()])

    def test_explicit_kind_mismatch_raises(self, rental_voucher):
        with pytest.raises(MixedVoucherKindsError):
            group_by_plate([rental_voucher()], kind=VoucherKind.MATERIAL)

    def test_absent_cost_raises(self, rental_voucher):
        voucher = rental_voucher(voucher_id=5, details=[{"computed_cost": None}])

        with pytest.raises(MissingCostError) as exc_info:
            group_by_plate([voucher])

        assert exc_info.value.voucher_ids == (5,)
