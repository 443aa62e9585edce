"""YAML configuration for listing exports."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_HEADER_ROW_INDEX = 1
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR"})


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


@dataclass(frozen=True)
class ListingConfig:
    inventory_path: Path | None = None
    template_path: Path | None = None
    output_path: Path | None = None
    report_path: Path | None = None
    header_row_index: int = DEFAULT_HEADER_ROW_INDEX
    skip_listed: bool = True
    log_level: str = "INFO"


def _optional_path(data: dict[str, Any], key: str) -> Path | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{key} must be a non-empty string")
    return Path(value)


def parse_config(data: Any) -> ListingConfig:
    """Validate a decoded YAML mapping and apply defaults."""

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    header_row_index = data.get("header_row_index", DEFAULT_HEADER_ROW_INDEX)
    # bool is an int subclass; reject it explicitly
    if isinstance(header_row_index, bool) or not isinstance(header_row_index, int) or header_row_index < 0:
        raise ConfigError("header_row_index must be a non-negative integer")

    skip_listed = data.get("skip_listed", True)
    if not isinstance(skip_listed, bool):
        raise ConfigError("skip_listed must be true or false")

    log_level = str(data.get("log_level", "INFO")).upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {sorted(_LOG_LEVELS)}")

    return ListingConfig(
        inventory_path=_optional_path(data, "inventory_path"),
        template_path=_optional_path(data, "template_path"),
        output_path=_optional_path(data, "output_path"),
        report_path=_optional_path(data, "report_path"),
        header_row_index=header_row_index,
        skip_listed=skip_listed,
        log_level=log_level,
    )


def load_config(path: Path) -> ListingConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    return parse_config(data)
