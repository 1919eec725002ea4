"""
Configuration package (``haulage_config``).

Runtime code obtains its settings through ``get_active_config()`` only; no
other component reads configuration files or environment variables.
"""

from __future__ import annotations

from pathlib import Path

from haulage_kernel.logging_config import get_logger
from haulage_config.loader import compute_checksum, load_yaml_file, parse_config
from haulage_modules.conciliation.config import ConciliationConfig

logger = get_logger("config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(path: Path | str | None = None) -> ConciliationConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: YAML configuration set.  Defaults to the packaged
            ``sets/default.yaml``.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the configuration is invalid.
    """
    config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH
    data = load_yaml_file(config_path)
    config = parse_config(data)
    logger.info(
        "config_loaded",
        extra={
            "path": str(config_path),
            "config_name": data.get("name"),
            "checksum": compute_checksum(data),
        },
    )
    return config


__all__ = ["ConciliationConfig", "get_active_config"]
