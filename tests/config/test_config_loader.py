"""Tests for configuration loading and ConciliationConfig validation."""

from decimal import Decimal

import pytest
import yaml

from haulage_config import get_active_config
from haulage_config.loader import compute_checksum, parse_config
from haulage_kernel.domain.vouchers import VoucherKind
from haulage_modules.conciliation.config import ConciliationConfig


class TestActiveConfig:
    def test_packaged_defaults(self):
        config = get_active_config()

        assert config == ConciliationConfig()
        assert config.vat_rate == Decimal("0.16")
        assert config.material_withholding_rate == Decimal("0.04")
        assert config.rental_withholding_rate is None

    def test_custom_file(self, tmp_path):
        path = tmp_path / "union.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "name": "union",
                    "taxes": {"vat_rate": "0.08", "rental_withholding_rate": "0.04"},
                    "grouping": {"sentinel_plate": "SIN PLACA"},
                    "folios": {"width": 6},
                }
            )
        )

        config = get_active_config(path)

        assert config.vat_rate == Decimal("0.08")
        assert config.material_withholding_rate == Decimal("0.04")
        assert config.rental_withholding_rate == Decimal("0.04")
        assert config.sentinel_plate == "SIN PLACA"
        assert config.format_folio(VoucherKind.MATERIAL, 12) == "MAT-000012"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")

    def test_load_logged(self, captured_logs):
        get_active_config()

        loaded = [r for r in captured_logs() if r["message"] == "config_loaded"]
        assert loaded[0]["config_name"] == "default"
        assert len(loaded[0]["checksum"]) == 64


class TestParseConfig:
    def test_empty_uses_defaults(self):
        assert parse_config({}) == ConciliationConfig()

    def test_unknown_section(self):
        with pytest.raises(ValueError, match="tax"):
            parse_config({"tax": {"vat_rate": "0.16"}})

    def test_withholding_can_be_disabled(self):
        config = parse_config({"taxes": {"material_withholding_rate": None}})

        assert config.tax_policy(VoucherKind.MATERIAL).withholding_rate is None

    def test_checksum_stable(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})


class TestConciliationConfig:
    @pytest.mark.parametrize("rate", ["-0.01", "1.5"])
    def test_rate_out_of_range(self, rate):
        with pytest.raises(ValueError):
            ConciliationConfig(vat_rate=Decimal(rate))

    def test_vat_required(self):
        with pytest.raises(ValueError):
            ConciliationConfig(vat_rate=None)

    def test_blank_sentinel(self):
        with pytest.raises(ValueError):
            ConciliationConfig(sentinel_plate="  ")

    def test_prefixes_must_differ(self):
        with pytest.raises(ValueError):
            ConciliationConfig(rental_folio_prefix="X", material_folio_prefix="X")

    def test_float_rates_parsed_exactly(self):
        assert ConciliationConfig(vat_rate=0.16).vat_rate == Decimal("0.16")

    def test_policies(self):
        config = ConciliationConfig()

        assert config.tax_policy(VoucherKind.RENTAL).withholding_rate is None
        assert config.tax_policy(VoucherKind.MATERIAL).withholding_rate == Decimal("0.04")
        assert config.format_folio(VoucherKind.RENTAL, 1) == "REN-0001"
