"""Core typed models shared by the parser, normalizer and mapper modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

RawRow: TypeAlias = list[str]
TabularRecord: TypeAlias = dict[str, str]
GeneratedRow: TypeAlias = list[str]


@dataclass(frozen=True, slots=True)
class DataIssue:
    """Structured data-quality issue emitted while loading source text."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True, slots=True)
class NormalizedCard:
    """Canonical representation of one inventory record after normalization."""

    identity_key: str
    title: str
    card_name: str = ""
    player: str = ""
    team: str = ""
    league: str = ""
    season: str = ""
    year: str = ""
    card_set: str = ""
    card_number: str = ""
    brand: str = ""
    condition: str = ""
    features: str = ""
    image_url: str = ""
    sport: str = ""
    is_autograph: bool = False
    serial: str | None = None
    source_row: int = 0
    raw: TabularRecord = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def is_serial_numbered(self) -> bool:
        """Return whether a print-run serial was derived for the card."""

        return self.serial is not None


@dataclass(frozen=True, slots=True)
class ListingTemplate:
    """Externally authored listing CSV: preface rows, header and data rows.

    Rows before the header are kept verbatim. Data rows are aligned to the
    header positionally and padded or truncated on serialization.
    """

    header: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()
    preface: tuple[tuple[str, ...], ...] = ()

    @property
    def width(self) -> int:
        """Return the number of columns declared by the header."""

        return len(self.header)

    def padded_rows(self) -> list[RawRow]:
        """Return data rows padded or truncated to the header length."""

        width = self.width
        padded: list[RawRow] = []
        for row in self.rows:
            cells = list(row[:width])
            if len(cells) < width:
                cells.extend([""] * (width - len(cells)))
            padded.append(cells)
        return padded

    def with_rows(self, extra_rows: list[GeneratedRow]) -> ListingTemplate:
        """Return a new template with `extra_rows` appended after existing rows."""

        return ListingTemplate(
            header=self.header,
            rows=(*self.rows, *(tuple(row) for row in extra_rows)),
            preface=self.preface,
        )


@dataclass(slots=True)
class ParseResult:
    """Normalized output for one inventory load."""

    source: str
    header: list[str]
    cards: list[NormalizedCard]
    file_issues: list[DataIssue] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        """Return the number of normalized, non-skipped records."""

        return len(self.cards)

    @property
    def has_issues(self) -> bool:
        """Return whether the load recorded one or more file-level issues."""

        return bool(self.file_issues)
