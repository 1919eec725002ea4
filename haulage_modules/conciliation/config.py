"""
Conciliation Configuration Schema (``haulage_modules.conciliation.config``).

Responsibility
--------------
Declarative configuration for the conciliation module: tax rates per
voucher kind, the sentinel plate for vouchers without a vehicle, and the
folio numbering scheme.  Defaults match local practice (16% VAT, 4%
withholding on material, none on rental).

Architecture position
---------------------
**Modules layer** -- configuration schema only.  Loaded at runtime via
``haulage_config.get_active_config()``; no component reads config files or
environment variables directly.

Invariants enforced
-------------------
* Rates are ``Decimal`` in [0, 1].
* Folio prefixes are non-empty and distinct per kind.

Failure modes
-------------
* ``ValueError`` at construction if any constraint is violated.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from haulage_kernel.domain.vouchers import VoucherKind
from haulage_kernel.logging_config import get_logger
from haulage_engines.grouping import NO_PLATE
from haulage_engines.tax_policy import (
    DEFAULT_MATERIAL_WITHHOLDING_RATE,
    DEFAULT_VAT_RATE,
    TaxPolicy,
)

logger = get_logger("modules.conciliation.config")


def _as_rate(value, name: str) -> Decimal | None:
    if value is None:
        return None
    rate = value if isinstance(value, Decimal) else Decimal(str(value))
    if not (Decimal("0") <= rate <= Decimal("1")):
        raise ValueError(f"{name} must be between 0 and 1, got {rate}")
    return rate


@dataclass(frozen=True)
class ConciliationConfig:
    """
    Configuration schema for the conciliation module.

    Override at instantiation or through a YAML configuration set:

        config = ConciliationConfig(material_withholding_rate=Decimal("0.06"))
    """

    vat_rate: Decimal = DEFAULT_VAT_RATE
    material_withholding_rate: Decimal | None = DEFAULT_MATERIAL_WITHHOLDING_RATE
    rental_withholding_rate: Decimal | None = None
    sentinel_plate: str = NO_PLATE
    rental_folio_prefix: str = "REN"
    material_folio_prefix: str = "MAT"
    folio_width: int = 4

    def __post_init__(self):
        object.__setattr__(self, "vat_rate", _as_rate(self.vat_rate, "vat_rate"))
        if self.vat_rate is None:
            raise ValueError("vat_rate is required")
        object.__setattr__(
            self,
            "material_withholding_rate",
            _as_rate(self.material_withholding_rate, "material_withholding_rate"),
        )
        object.__setattr__(
            self,
            "rental_withholding_rate",
            _as_rate(self.rental_withholding_rate, "rental_withholding_rate"),
        )
        if not self.sentinel_plate or not self.sentinel_plate.strip():
            raise ValueError("sentinel_plate cannot be empty")
        if not self.rental_folio_prefix or not self.material_folio_prefix:
            raise ValueError("folio prefixes cannot be empty")
        if self.rental_folio_prefix == self.material_folio_prefix:
            raise ValueError("folio prefixes must differ per kind")
        if self.folio_width < 1:
            raise ValueError("folio_width must be at least 1")
        logger.debug(
            "conciliation_config_initialized",
            extra={
                "vat_rate": str(self.vat_rate),
                "material_withholding_rate": str(self.material_withholding_rate),
                "rental_withholding_rate": str(self.rental_withholding_rate),
                "sentinel_plate": self.sentinel_plate,
            },
        )

    def tax_policy(self, kind: VoucherKind) -> TaxPolicy:
        """Tax policy for ``kind`` under the configured rates."""
        return TaxPolicy.for_kind(
            kind,
            vat_rate=self.vat_rate,
            material_withholding_rate=self.material_withholding_rate,
            rental_withholding_rate=self.rental_withholding_rate,
        )

    def folio_prefix(self, kind: VoucherKind) -> str:
        if VoucherKind(kind) is VoucherKind.RENTAL:
            return self.rental_folio_prefix
        return self.material_folio_prefix

    def format_folio(self, kind: VoucherKind, sequence: int) -> str:
        """``REN-0001`` style folio for the ``sequence``-th reconciliation of a kind."""
        return f"{self.folio_prefix(kind)}-{sequence:0{self.folio_width}d}"
