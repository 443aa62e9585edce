"""Field resolution and derived-attribute heuristics for inventory records.

The year, serial, autograph and numbered rules below are deliberately
approximate. They match the way sellers usually type card descriptions and
are kept as small pure functions so each rule can be tested on its own.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Sequence

from .models import NormalizedCard, TabularRecord

IDENTITY_KEY_MAX_LENGTH = 96
TITLE_SEPARATOR = " "
FALLBACK_TITLE = "Card"

# Ordered source header names per semantic field; first non-empty match wins.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "identity": ("id", "card id", "inventory id", "sku", "custom label", "customlabel"),
    "title": ("title", "listing title", "*title"),
    "card_name": ("card name", "card_name", "cardname", "card title", "name"),
    "player": ("player name", "player", "player/athlete", "athlete", "plyer name"),
    "team": ("team", "team name", "club"),
    "league": ("league", "leauge", "competition"),
    "season": ("season", "seasons"),
    "card_set": ("card set", "set", "set name", "card_set"),
    "card_number": ("card number", "card #", "card no", "card no.", "number", "#"),
    "brand": ("brand", "manufacturer", "maker"),
    "condition": ("condition", "cond", "card condition"),
    "features": ("features", "feature", "fetures", "parallel", "insert/parallel", "variety"),
    "image_url": ("image url", "image", "img", "picurl", "image link", "photo url"),
    "sport": ("sport", "sports"),
}

_YEAR_RE = re.compile(r"\b(19\d{2}|20\d{2})\b")
_SERIAL_RE = re.compile(r"/\s*(\d{1,4})\b")
_AUTOGRAPH_RE = re.compile(r"\b(auto|autograph|signed)\b", re.IGNORECASE)
_NUMBERED_FRACTION_RE = re.compile(r"/\s*\d+")
_NUMBERED_EXPLICIT_RE = re.compile(r"\d+\s*/\s*\d+")
_NUMBERED_WORD_RE = re.compile(r"\b(numbered|serial)\b", re.IGNORECASE)
_QUOTES_RE = re.compile(r"[\"'`‘’“”]")
_NON_WORD_RE = re.compile(r"[\W_]+")
_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(value: str | None) -> str:
    """Trim a value and collapse internal whitespace runs to single spaces."""

    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value).strip()


def _fold_header(name: str) -> str:
    return name.strip().casefold()


def fold_record(record: TabularRecord) -> dict[str, str]:
    """Index a record by case-folded, trimmed header name.

    When two headers fold to the same name the first non-empty value is kept.
    """

    folded: dict[str, str] = {}
    for key, value in record.items():
        name = _fold_header(key)
        if folded.get(name):
            continue
        folded[name] = clean_text(value)
    return folded


def resolve_field(record: TabularRecord, field: str, *, folded: dict[str, str] | None = None) -> str:
    """Return the first non-empty value among the aliases of a semantic field.

    Unknown fields and records with no matching column resolve to `""`.
    """

    lookup = fold_record(record) if folded is None else folded
    for alias in FIELD_ALIASES.get(field, ()):
        value = lookup.get(_fold_header(alias))
        if value:
            return value
    return ""


def infer_year(*texts: str) -> str:
    """Return the first 19xx/20xx token, scanning texts in order.

    No range validation beyond the century prefix is attempted.
    """

    for text in texts:
        if not text:
            continue
        match = _YEAR_RE.search(text)
        if match:
            return match.group(1)
    return ""


def infer_serial(*texts: str) -> str | None:
    """Return the print-run number that follows a slash, e.g. `/99` -> `"99"`.

    For `12/99` only the denominator is returned; the copy number is dropped.
    """

    for text in texts:
        if not text:
            continue
        match = _SERIAL_RE.search(text)
        if match:
            return match.group(1)
    return None


def is_autograph(*texts: str) -> bool:
    """Return True when the text mentions an autograph as a whole word."""

    combined = " ".join(text for text in texts if text)
    return bool(_AUTOGRAPH_RE.search(combined))


def is_numbered(features: str) -> bool:
    """Return True when features text looks serial-numbered.

    Accepts `/25`, `12/25`, or the words "numbered" and "serial".
    """

    if not features:
        return False
    return bool(
        _NUMBERED_FRACTION_RE.search(features)
        or _NUMBERED_EXPLICIT_RE.search(features)
        or _NUMBERED_WORD_RE.search(features)
    )


def slugify_identity(*parts: str, max_length: int = IDENTITY_KEY_MAX_LENGTH) -> str:
    """Collapse text parts into a lower-case, hyphen-separated key.

    Accents are folded away (`Pelé` -> `pele`); letters from other scripts are kept.
    """

    joined = " ".join(part for part in parts if part).lower()
    joined = _QUOTES_RE.sub("", joined)
    decomposed = unicodedata.normalize("NFKD", joined)
    joined = "".join(char for char in decomposed if not unicodedata.combining(char))
    slug = _NON_WORD_RE.sub("-", joined).strip("-")
    return slug[:max_length].rstrip("-")


def make_identity_key(
    *,
    explicit_id: str = "",
    season: str = "",
    card_set: str = "",
    player: str = "",
    card_number: str = "",
    features: str = "",
) -> str:
    """Return the reconciliation key for a card.

    An explicit identifier wins. Otherwise the key is synthesized from
    season, set, player, number and features, so two records that agree on
    all five collapse to the same key. That collapse is intended: they are
    treated as the same listing.
    """

    if explicit_id:
        return explicit_id
    return slugify_identity(season, card_set, player, card_number, features)


def make_display_title(
    *,
    explicit_title: str = "",
    year: str = "",
    card_set: str = "",
    player: str = "",
    features: str = "",
    card_number: str = "",
) -> str:
    """Return a human-facing title for the card."""

    if explicit_title:
        return explicit_title

    parts: list[str] = []
    if year and not card_set.startswith(year):
        parts.append(year)
    parts.extend([card_set, player, features])
    if card_number:
        parts.append(f"#{card_number.lstrip('#')}")

    title = clean_text(TITLE_SEPARATOR.join(part for part in parts if part))
    return title or FALLBACK_TITLE


def normalize_record(record: TabularRecord, *, source_row: int = 0) -> NormalizedCard:
    """Resolve semantic fields for one decoded record and derive computed attributes."""

    folded = fold_record(record)
    values = {field: resolve_field(record, field, folded=folded) for field in FIELD_ALIASES}

    card_name = values["card_name"]
    features = values["features"]
    card_set = values["card_set"]
    year = infer_year(card_name, card_set)

    return NormalizedCard(
        identity_key=make_identity_key(
            explicit_id=values["identity"],
            season=values["season"],
            card_set=card_set,
            player=values["player"],
            card_number=values["card_number"],
            features=features,
        ),
        title=make_display_title(
            explicit_title=values["title"] or card_name,
            year=year,
            card_set=card_set,
            player=values["player"],
            features=features,
            card_number=values["card_number"],
        ),
        card_name=card_name,
        player=values["player"],
        team=values["team"],
        league=values["league"],
        season=values["season"],
        year=year,
        card_set=card_set,
        card_number=values["card_number"],
        brand=values["brand"],
        condition=values["condition"],
        features=features,
        image_url=values["image_url"],
        sport=values["sport"],
        is_autograph=is_autograph(features, card_name),
        serial=infer_serial(features, card_name),
        source_row=source_row,
        raw=dict(record),
    )


def normalize_records(
    records: list[TabularRecord],
    *,
    first_row: int = 2,
    source_rows: Sequence[int] | None = None,
) -> list[NormalizedCard]:
    """Normalize decoded records in order.

    `source_rows` gives the physical line of each record. Without it, lines
    are counted up from `first_row`; inventory files carry their header on
    line 1.
    """

    if source_rows is None:
        source_rows = range(first_row, first_row + len(records))
    return [normalize_record(record, source_row=line) for line, record in zip(source_rows, records)]
