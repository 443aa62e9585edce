"""Filter predicates applied to the normalized record set."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from .models import NormalizedCard
from .normalize import is_numbered

FacetField: TypeAlias = Literal["card_set", "team", "league"]


@dataclass(frozen=True, slots=True)
class CardFilter:
    """Criteria for narrowing the record set. Empty criteria match everything."""

    query: str = ""
    card_set: str = ""
    team: str = ""
    league: str = ""
    auto_only: bool = False
    numbered_only: bool = False

    def matches(self, card: NormalizedCard) -> bool:
        """Return whether a card satisfies every active criterion."""

        if self.card_set and card.card_set != self.card_set:
            return False
        if self.team and card.team != self.team:
            return False
        if self.league and card.league != self.league:
            return False
        if self.auto_only and not card.is_autograph:
            return False
        if self.numbered_only and not is_numbered(card.features):
            return False
        return _matches_query(card, self.query)


def _matches_query(card: NormalizedCard, query: str) -> bool:
    """Case-insensitive substring search over raw values and the display title."""

    needle = query.strip().casefold()
    if not needle:
        return True
    haystack = [card.title, *card.raw.values()]
    return any(needle in value.casefold() for value in haystack)


def apply_filters(cards: list[NormalizedCard], card_filter: CardFilter) -> list[NormalizedCard]:
    """Return cards matching the filter, preserving input order."""

    return [card for card in cards if card_filter.matches(card)]


def facet_values(cards: list[NormalizedCard], field: FacetField) -> list[str]:
    """Return sorted distinct non-empty values of a facet field, for filter choices."""

    return sorted({getattr(card, field) for card in cards if getattr(card, field)})
