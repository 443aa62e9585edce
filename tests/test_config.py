"""Tests for YAML configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from card_listing.config import ConfigError, ListingConfig, load_config, parse_config


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_load_config_applies_defaults(tmp_path: Path) -> None:
    config = load_config(_write(tmp_path / "listing.yml", "inventory_path: inv.tsv\n"))
    assert config == ListingConfig(inventory_path=Path("inv.tsv"))
    assert config.header_row_index == 1
    assert config.skip_listed is True
    assert config.log_level == "INFO"


def test_load_config_reads_all_keys(tmp_path: Path) -> None:
    config = load_config(
        _write(
            tmp_path / "listing.yml",
            (
                "inventory_path: data/inventory.tsv\n"
                "template_path: data/template.csv\n"
                "output_path: out/upload.csv\n"
                "report_path: out/report.json\n"
                "header_row_index: 0\n"
                "skip_listed: false\n"
                "log_level: debug\n"
            ),
        )
    )
    assert config.template_path == Path("data/template.csv")
    assert config.report_path == Path("out/report.json")
    assert config.header_row_index == 0
    assert config.skip_listed is False
    assert config.log_level == "DEBUG"


def test_load_config_empty_file_is_all_defaults(tmp_path: Path) -> None:
    assert load_config(_write(tmp_path / "empty.yml", "")) == ListingConfig()


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(tmp_path / "nope.yml")


def test_load_config_invalid_yaml(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(_write(tmp_path / "bad.yml", "inventory_path: [unclosed\n"))


@pytest.mark.parametrize(
    ("data", "message"),
    [
        (["not", "a", "mapping"], "config root must be a mapping"),
        ({"header_row_index": -1}, "header_row_index"),
        ({"header_row_index": True}, "header_row_index"),
        ({"header_row_index": "1"}, "header_row_index"),
        ({"skip_listed": "yes"}, "skip_listed"),
        ({"log_level": "LOUD"}, "log_level"),
        ({"inventory_path": 3}, "inventory_path"),
    ],
)
def test_parse_config_rejects_invalid_values(data: object, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        parse_config(data)
