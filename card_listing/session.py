"""Application session holding the loaded record set, template and selection.

The session is the single writer of its state: loads replace the record set
or template wholesale, and exports read them without mutating anything.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .filters import CardFilter, apply_filters
from .mapper import DEFAULT_LISTING_HEADER, build_listing_rows
from .models import DataIssue, ListingTemplate, NormalizedCard, ParseResult
from .parser import load_inventory, load_template
from .reconcile import ReconciliationKey, ReconciliationSummary, partition_listed, reconcile_cards
from .serializer import serialize_template

logger = logging.getLogger(__name__)


class ListingSession:
    """In-memory snapshot of one inventory load and one listing template."""

    def __init__(self) -> None:
        self._inventory = ParseResult(source="", header=[], cards=[])
        self._template = ListingTemplate()
        self._selection: set[str] = set()

    @property
    def cards(self) -> tuple[NormalizedCard, ...]:
        """Return the current normalized record set."""

        return tuple(self._inventory.cards)

    @property
    def template(self) -> ListingTemplate:
        return self._template

    @property
    def file_issues(self) -> tuple[DataIssue, ...]:
        return tuple(self._inventory.file_issues)

    @property
    def selection(self) -> frozenset[str]:
        return frozenset(self._selection)

    def load_inventory(self, text: str, *, source: str = "<memory>") -> ParseResult:
        """Replace the record set with a fresh load; the selection is cleared."""

        self._inventory = load_inventory(text, source=source)
        self._selection = set()
        return self._inventory

    def load_template(self, text: str, *, header_index: int = 1) -> ListingTemplate:
        """Replace the listing template."""

        self._template = load_template(text, header_index=header_index)
        logger.info(
            "Loaded template with %d columns and %d existing rows",
            self._template.width,
            len(self._template.rows),
        )
        return self._template

    def select(self, keys: Iterable[str]) -> int:
        """Add identity keys of loaded cards to the selection; unknown keys are ignored."""

        known = {card.identity_key for card in self._inventory.cards}
        added = {key for key in keys if key in known}
        self._selection |= added
        return len(added)

    def deselect(self, keys: Iterable[str]) -> None:
        self._selection -= set(keys)

    def clear_selection(self) -> None:
        self._selection = set()

    def selected_cards(self) -> list[NormalizedCard]:
        """Return selected cards in record-set order."""

        return [card for card in self._inventory.cards if card.identity_key in self._selection]

    def filtered(self, card_filter: CardFilter) -> list[NormalizedCard]:
        return apply_filters(self._inventory.cards, card_filter)

    def reconcile(self, *, key: ReconciliationKey = "identity") -> ReconciliationSummary:
        return reconcile_cards(self._inventory.cards, self._template, key=key)

    def _export_template(self) -> ListingTemplate:
        """Return the loaded template, or a default header when none was loaded."""

        if self._template.header:
            return self._template
        logger.info("No listing template loaded; using the default listing header")
        return ListingTemplate(header=DEFAULT_LISTING_HEADER)

    def export_csv(
        self,
        cards: Sequence[NormalizedCard] | None = None,
        *,
        skip_listed: bool = True,
    ) -> str:
        """Append "Add" rows for the given cards (default: the selection) and serialize.

        Cards already present in the template are skipped unless
        `skip_listed` is False. The session template itself is not modified.
        """

        chosen = list(self.selected_cards() if cards is None else cards)
        template = self._export_template()
        if skip_listed:
            listed, chosen = partition_listed(chosen, template)
            if listed:
                logger.info("Skipped %d cards already present in the template", len(listed))

        rows = build_listing_rows(chosen, template.header)
        logger.info("Generated %d listing rows", len(rows))
        return serialize_template(template.with_rows(rows))
