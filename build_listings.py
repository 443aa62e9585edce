"""Command-line runner for marketplace listing exports.

This script loads the inventory TSV and the listing-template CSV, appends an
"Add" row for every inventory card not already in the template, writes the
resulting CSV, and optionally writes a JSON report alongside it.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from card_listing import ListingSession, SourceLoadError, read_source
from card_listing.config import ConfigError, ListingConfig, load_config
from card_listing.logging_setup import log_summary, setup_logging
from card_listing.models import DataIssue
from card_listing.reconcile import partition_listed

DEFAULT_INVENTORY = Path("full_card_inventory.tsv")
DEFAULT_OUTPUT = Path("output/listing_upload.csv")

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def _issue_to_dict(issue: DataIssue) -> dict[str, str | None]:
    """Serialize a `DataIssue` into a JSON-friendly dictionary."""

    return {
        "code": issue.code,
        "field": issue.field,
        "message": issue.message,
    }


def load_session(
    *,
    inventory_path: Path,
    template_path: Path | None,
    header_row_index: int,
) -> ListingSession:
    """Read both source files into a fresh session.

    Raises `SourceLoadError` when either file cannot be read.
    """

    session = ListingSession()
    session.load_inventory(read_source(inventory_path), source=str(inventory_path))
    if template_path is not None:
        session.load_template(read_source(template_path), header_index=header_row_index)
    return session


def build_report(
    session: ListingSession,
    *,
    inventory_path: Path,
    template_path: Path | None,
    header_row_index: int,
    skip_listed: bool,
) -> dict[str, Any]:
    """Build the export report payload for a loaded session."""

    cards = list(session.cards)
    reconciliation = session.reconcile()
    listed, unlisted = partition_listed(cards, session.template)
    exported = unlisted if skip_listed else cards

    return {
        "metadata": {
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "inventory_path": str(inventory_path),
            "template_path": None if template_path is None else str(template_path),
            "header_row_index": header_row_index,
            "skip_listed": skip_listed,
            "identity_key_rule": (
                "Records sharing season, set, player, card number and features "
                "share one identity key and are treated as the same listing."
            ),
        },
        "summary": {
            "inventory_row_count": len(cards),
            "template_row_count": len(session.template.rows),
            "already_listed_count": len(listed),
            "exported_row_count": len(exported),
            "duplicate_key_count": len(reconciliation["duplicate_keys"]),
        },
        "reconciliation": reconciliation,
        "data_quality_issues": {
            "file_issues": [_issue_to_dict(issue) for issue in session.file_issues],
        },
    }


def write_report(report: dict[str, Any], *, output_path: Path) -> None:
    """Write report JSON to disk."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(report, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def write_output(text: str, *, output_path: Path) -> None:
    """Write the serialized listing CSV to disk."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text + "\n" if text else "", encoding="utf-8")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    """Parse CLI arguments for listing export."""

    parser = argparse.ArgumentParser(description="Build a marketplace bulk-upload CSV from a card inventory.")
    parser.add_argument("--config", type=Path, default=None, help="Optional YAML config file")
    parser.add_argument("--inventory", type=Path, default=None, help="Path to inventory TSV")
    parser.add_argument("--template", type=Path, default=None, help="Path to listing template CSV")
    parser.add_argument("--output", type=Path, default=None, help="Output CSV path")
    parser.add_argument("--report", type=Path, default=None, help="Optional JSON report path")
    parser.add_argument("--header-row", type=int, default=None, help="0-based header row index in the template")
    parser.add_argument(
        "--include-listed",
        action="store_true",
        help="Also export cards already present in the template",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _merge_args(config: ListingConfig, args: argparse.Namespace) -> ListingConfig:
    """Overlay command-line values on top of config values."""

    overrides: dict[str, Any] = {}
    if args.inventory is not None:
        overrides["inventory_path"] = args.inventory
    if args.template is not None:
        overrides["template_path"] = args.template
    if args.output is not None:
        overrides["output_path"] = args.output
    if args.report is not None:
        overrides["report_path"] = args.report
    if args.header_row is not None:
        overrides["header_row_index"] = args.header_row
    if args.include_listed:
        overrides["skip_listed"] = False
    if args.debug:
        overrides["log_level"] = "DEBUG"
    return replace(config, **overrides)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for command-line execution."""

    args = _parse_args(argv)
    logger = setup_logging("DEBUG" if args.debug else "INFO")

    try:
        config = load_config(args.config) if args.config is not None else ListingConfig()
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FAILURE

    config = _merge_args(config, args)
    setup_logging(config.log_level)

    inventory_path = config.inventory_path or DEFAULT_INVENTORY
    output_path = config.output_path or DEFAULT_OUTPUT
    if config.header_row_index < 0:
        logger.error("header row index must be non-negative")
        return EXIT_FAILURE

    try:
        session = load_session(
            inventory_path=inventory_path,
            template_path=config.template_path,
            header_row_index=config.header_row_index,
        )
    except SourceLoadError as e:
        logger.error(f"load: {e}")
        return EXIT_FAILURE

    text = session.export_csv(session.cards, skip_listed=config.skip_listed)
    write_output(text, output_path=output_path)
    logger.info(f"Wrote listing upload file: {output_path}")

    report = build_report(
        session,
        inventory_path=inventory_path,
        template_path=config.template_path,
        header_row_index=config.header_row_index,
        skip_listed=config.skip_listed,
    )
    if config.report_path is not None:
        write_report(report, output_path=config.report_path)
        logger.info(f"Wrote export report: {config.report_path}")

    summary = report["summary"]
    log_summary(
        f"inventory={summary['inventory_row_count']} "
        f"already_listed={summary['already_listed_count']} "
        f"exported={summary['exported_row_count']} "
        f"duplicate_keys={summary['duplicate_key_count']}"
    )
    return EXIT_SUCCESS


if __name__ == "__main__":
    raise SystemExit(main())
