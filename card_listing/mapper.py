"""Map normalized cards into the column layout of a marketplace listing template.

The template header is owned by the marketplace's bulk-upload tool and
changes shape over time. Every slot is therefore looked up by header name and
silently skipped when its column is absent.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from html import escape

from .models import GeneratedRow, NormalizedCard
from .normalize import clean_text

logger = logging.getLogger(__name__)

ACTION_ADD = "Add"
# Pre-approved trading-card category and "near mint or better" condition.
DEFAULT_CATEGORY_ID = "47140"
DEFAULT_CONDITION_ID = "4000"

TITLE_MAX_LENGTH = 80
ELLIPSIS = "…"

DESCRIPTION_CLOSING = (
    "<p>Ships next business day. Securely packed (sleeve + top loader + team bag).</p>"
    "<p>Card shown is the exact card you will receive.</p>"
)

TARGET_SLOTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("action", ("*Action", "Action")),
    ("custom_label", ("CustomLabel", "Custom Label", "SKU")),
    ("category", ("*Category", "Category")),
    ("title", ("*Title", "Title")),
    ("image_url", ("PicURL", "Picture URL", "Item Photo URL")),
    ("player", ("C:Player/Athlete", "C:Player")),
    ("team", ("C:Team",)),
    ("league", ("C:League",)),
    ("parallel", ("C:Parallel/Variety", "C:Parallel")),
    ("card_number", ("C:Card Number",)),
    ("condition", ("*ConditionID", "ConditionID", "Condition ID")),
    ("autographed", ("C:Autographed",)),
    ("year", ("C:Year Manufactured", "C:Year")),
    ("season", ("C:Season",)),
    ("manufacturer", ("C:Manufacturer",)),
    ("set_short", ("C:Set",)),
    ("card_name", ("C:Card Name",)),
    ("sport", ("C:Sport",)),
    ("features", ("C:Features",)),
    ("description", ("*Description", "Description")),
)

DEFAULT_LISTING_HEADER: tuple[str, ...] = (
    "*Action(SiteID=US|Country=US|Currency=USD|Version=1193)",
    *(candidates[0] for slot, candidates in TARGET_SLOTS if slot != "action"),
)

_PARAMS_SUFFIX_RE = re.compile(r"\(.*\)\s*$")
_LEADING_YEAR_RE = re.compile(r"^(19\d{2}|20\d{2})\s+")
_LEAGUE_CODE_RE = re.compile(r"[A-Z]{2,5}")


def _soft_header(name: str) -> str:
    """Reduce a header to a loose form: no `*`, no `(...)` block, single spaces."""

    reduced = _PARAMS_SUFFIX_RE.sub("", name.strip()).lstrip("*")
    return clean_text(reduced).casefold()


def find_column(header: Sequence[str], candidates: Sequence[str]) -> int | None:
    """Return the index of the first header column matching any candidate.

    Exact case-insensitive matches are preferred over soft matches. When a
    header repeats a column, every slot writes to its first occurrence.
    """

    exact = [cell.strip().casefold() for cell in header]
    for candidate in candidates:
        wanted = candidate.strip().casefold()
        if wanted in exact:
            return exact.index(wanted)

    soft = [_soft_header(cell) for cell in header]
    for candidate in candidates:
        wanted = _soft_header(candidate)
        if wanted and wanted in soft:
            return soft.index(wanted)
    return None


def truncate_title(title: str, limit: int = TITLE_MAX_LENGTH) -> str:
    """Cut a title to `limit` characters, ending in one ellipsis when shortened."""

    if len(title) <= limit:
        return title
    return title[: limit - 1] + ELLIPSIS


def short_set_name(card_set: str) -> str:
    """Shorten a set name for the set item specific.

    Best effort: drops a leading year and one trailing all-caps league code,
    then keeps at most two words. "2024 Topps Finest MLS" -> "Topps Finest".
    Sets with longer distinctive names will be over-trimmed.
    """

    words = _LEADING_YEAR_RE.sub("", clean_text(card_set)).split()
    if len(words) > 1 and _LEAGUE_CODE_RE.fullmatch(words[-1]):
        words = words[:-1]
    return " ".join(words[:2])


def build_description(card: NormalizedCard) -> str:
    """Render the HTML description block for a card.

    Every interpolated value is HTML-escaped.
    """

    attributes = (
        ("Player", card.player),
        ("Team", card.team),
        ("League", card.league),
        ("Sport", card.sport),
        ("Season", card.season),
        ("Year", card.year),
        ("Set", card.card_set),
        ("Card Number", card.card_number),
        ("Insert / Parallel", card.features),
        ("Manufacturer", card.brand),
        ("Condition", card.condition),
    )
    lines = [f"<p><b>{label}:</b> {escape(value)}</p>" for label, value in attributes if value]
    if card.is_autograph:
        lines.append("<p><b>Autographed:</b> Yes</p>")
    if card.serial:
        lines.append(f"<p><b>Serial Numbered:</b> /{escape(card.serial)}</p>")
    lines.append("<hr>")
    lines.append(DESCRIPTION_CLOSING)
    return "".join(lines)


def slot_values(card: NormalizedCard) -> dict[str, str]:
    """Return the value written into each target slot for a card."""

    return {
        "action": ACTION_ADD,
        "custom_label": card.identity_key,
        "category": DEFAULT_CATEGORY_ID,
        "title": truncate_title(card.title),
        "image_url": card.image_url,
        "player": card.player,
        "team": card.team,
        "league": card.league,
        "parallel": card.features,
        "card_number": card.card_number,
        "condition": DEFAULT_CONDITION_ID,
        "autographed": "Yes" if card.is_autograph else "No",
        "year": card.year,
        "season": card.season,
        "manufacturer": card.brand,
        "set_short": short_set_name(card.card_set),
        "card_name": card.card_name or card.title,
        "sport": card.sport,
        "features": card.features,
        "description": build_description(card),
    }


def build_listing_row(card: NormalizedCard, header: Sequence[str]) -> GeneratedRow:
    """Build one "Add" row positioned by the template header.

    The row always has exactly `len(header)` cells; slots without a column
    are skipped.
    """

    row: GeneratedRow = [""] * len(header)
    values = slot_values(card)
    for slot, candidates in TARGET_SLOTS:
        column = find_column(header, candidates)
        if column is None:
            logger.debug("Template has no column for slot %s; skipped", slot)
            continue
        row[column] = values[slot]
    return row


def build_listing_rows(cards: Sequence[NormalizedCard], header: Sequence[str]) -> list[GeneratedRow]:
    """Build listing rows for several cards against the same header."""

    return [build_listing_row(card, header) for card in cards]
