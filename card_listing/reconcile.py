"""Reconciliation of normalized inventory against rows already in a listing template."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import Literal, TypedDict, TypeAlias

from .mapper import TARGET_SLOTS, find_column, truncate_title
from .models import ListingTemplate, NormalizedCard

ReconciliationKey: TypeAlias = Literal["identity", "title"]
KeyFn: TypeAlias = Callable[[NormalizedCard], str | None]

_CUSTOM_LABEL_CANDIDATES = dict(TARGET_SLOTS)["custom_label"]
_TITLE_CANDIDATES = dict(TARGET_SLOTS)["title"]


class DuplicateKeyInfo(TypedDict):
    """Inventory rows that collapsed onto one reconciliation key."""

    key: str
    row_count: int
    source_rows: list[int]


class ReconciliationSummary(TypedDict):
    """Structured reconciliation output for one keying strategy."""

    already_listed: list[str]
    not_listed: list[str]
    duplicate_keys: list[DuplicateKeyInfo]


def key_by_identity(card: NormalizedCard) -> str | None:
    """Key selector that uses the derived identity key."""

    return card.identity_key or None


def key_by_title(card: NormalizedCard) -> str | None:
    """Key selector that uses the case-folded listing title as written to templates."""

    normalized = truncate_title(card.title).strip().casefold()
    return normalized or None


def resolve_key_fn(key: ReconciliationKey | KeyFn) -> KeyFn:
    """Resolve a strategy name or pass through a custom callable."""

    if callable(key):
        return key
    if key == "identity":
        return key_by_identity
    if key == "title":
        return key_by_title
    raise ValueError(f"Unsupported reconciliation key: {key}")


def listed_keys(template: ListingTemplate, *, key: ReconciliationKey = "identity") -> set[str]:
    """Collect keys of items already present in a template's data rows.

    The identity strategy reads the custom-label column, the title strategy
    reads the title column. A template without that column lists nothing.
    """

    if key not in ("identity", "title"):
        raise ValueError(f"Unsupported reconciliation key: {key}")
    candidates = _TITLE_CANDIDATES if key == "title" else _CUSTOM_LABEL_CANDIDATES
    column = find_column(template.header, candidates)
    if column is None:
        return set()

    keys: set[str] = set()
    for row in template.rows:
        if column >= len(row):
            continue
        value = row[column].strip()
        if key == "title":
            value = value.casefold()
        if value:
            keys.add(value)
    return keys


def detect_duplicate_keys(
    cards: list[NormalizedCard],
    *,
    key: ReconciliationKey | KeyFn = "identity",
) -> list[DuplicateKeyInfo]:
    """Return keys shared by more than one inventory record.

    Records agreeing on season, set, player, number and features share an
    identity key by construction; this exposes where that happened.
    """

    key_fn = resolve_key_fn(key)
    rows_by_key: defaultdict[str, list[int]] = defaultdict(list)
    for card in cards:
        item_key = key_fn(card)
        if not item_key:
            continue
        rows_by_key[item_key].append(card.source_row)

    duplicates: list[DuplicateKeyInfo] = []
    for item_key in sorted(rows_by_key):
        source_rows = rows_by_key[item_key]
        if len(source_rows) <= 1:
            continue
        duplicates.append({"key": item_key, "row_count": len(source_rows), "source_rows": source_rows})
    return duplicates


def partition_listed(
    cards: list[NormalizedCard],
    template: ListingTemplate,
    *,
    key: ReconciliationKey = "identity",
) -> tuple[list[NormalizedCard], list[NormalizedCard]]:
    """Split cards into (already listed, not yet listed), preserving input order."""

    key_fn = resolve_key_fn(key)
    existing = listed_keys(template, key=key)
    listed: list[NormalizedCard] = []
    unlisted: list[NormalizedCard] = []
    for card in cards:
        if key_fn(card) in existing:
            listed.append(card)
        else:
            unlisted.append(card)
    return listed, unlisted


def reconcile_cards(
    cards: list[NormalizedCard],
    template: ListingTemplate,
    *,
    key: ReconciliationKey = "identity",
) -> ReconciliationSummary:
    """Reconcile inventory cards against a template and return a key summary."""

    key_fn = resolve_key_fn(key)
    existing = listed_keys(template, key=key)
    inventory_keys = {item_key for item_key in (key_fn(card) for card in cards) if item_key}

    return {
        "already_listed": sorted(inventory_keys & existing),
        "not_listed": sorted(inventory_keys - existing),
        "duplicate_keys": detect_duplicate_keys(cards, key=key),
    }
