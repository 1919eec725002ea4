"""
Configuration Loader (``haulage_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into a frozen
``ConciliationConfig``.  The single public entry point for runtime config is
``haulage_config.get_active_config()``.

Invariants enforced
-------------------
* Rates are read as strings and parsed to ``Decimal`` (never ``float``).
* Unknown top-level sections are rejected so typos do not silently fall
  back to defaults.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``ValueError`` from ``ConciliationConfig``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from haulage_modules.conciliation.config import ConciliationConfig

_KNOWN_SECTIONS = frozenset({"name", "version", "taxes", "grouping", "folios"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _rate(value: Any) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


def parse_config(data: dict[str, Any]) -> ConciliationConfig:
    """Parse a ``ConciliationConfig`` from a configuration set dict."""
    unknown = set(data) - _KNOWN_SECTIONS
    if unknown:
        raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")

    defaults = ConciliationConfig()
    taxes = data.get("taxes") or {}
    grouping = data.get("grouping") or {}
    folios = data.get("folios") or {}

    return ConciliationConfig(
        vat_rate=_rate(taxes.get("vat_rate", defaults.vat_rate)),
        material_withholding_rate=_rate(
            taxes.get("material_withholding_rate", defaults.material_withholding_rate)
        ),
        rental_withholding_rate=_rate(
            taxes.get("rental_withholding_rate", defaults.rental_withholding_rate)
        ),
        sentinel_plate=grouping.get("sentinel_plate", defaults.sentinel_plate),
        rental_folio_prefix=folios.get("rental_prefix", defaults.rental_folio_prefix),
        material_folio_prefix=folios.get("material_prefix", defaults.material_folio_prefix),
        folio_width=int(folios.get("width", defaults.folio_width)),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a configuration set, for change detection."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
