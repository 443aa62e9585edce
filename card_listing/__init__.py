"""Public API exports for inventory parsing, normalization and listing export."""

from .filters import CardFilter, apply_filters, facet_values
from .mapper import build_listing_row, build_listing_rows
from .models import DataIssue, ListingTemplate, NormalizedCard, ParseResult
from .normalize import normalize_record, normalize_records
from .parser import (
    SourceLoadError,
    decode_rows,
    load_inventory,
    load_template,
    parse_csv,
    parse_tsv,
    read_source,
)
from .reconcile import ReconciliationSummary, detect_duplicate_keys, reconcile_cards
from .serializer import serialize_rows, serialize_template
from .session import ListingSession

__all__ = [
    "CardFilter",
    "DataIssue",
    "ListingSession",
    "ListingTemplate",
    "NormalizedCard",
    "ParseResult",
    "ReconciliationSummary",
    "SourceLoadError",
    "apply_filters",
    "build_listing_row",
    "build_listing_rows",
    "decode_rows",
    "detect_duplicate_keys",
    "facet_values",
    "load_inventory",
    "load_template",
    "normalize_record",
    "normalize_records",
    "parse_csv",
    "parse_tsv",
    "read_source",
    "reconcile_cards",
    "serialize_rows",
    "serialize_template",
]
