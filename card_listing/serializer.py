"""CSV re-encoding for listing templates and generated rows."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import ListingTemplate

_NEEDS_QUOTING = (",", '"', "\n", "\r")


def quote_cell(value: str) -> str:
    """Quote a cell only when it contains a comma, a quote or a line break."""

    if any(token in value for token in _NEEDS_QUOTING):
        return '"' + value.replace('"', '""') + '"'
    return value


def serialize_row(row: Sequence[str]) -> str:
    """Encode one row of cells as a comma-joined line.

    A row made of one empty cell is written as `""`; a bare empty line at the
    end of the text would otherwise parse back as no row at all.
    """

    if len(row) == 1 and row[0] == "":
        return '""'
    return ",".join(quote_cell(cell) for cell in row)


def serialize_rows(rows: Iterable[Sequence[str]]) -> str:
    """Encode rows as CSV text joined by single newlines, without a trailing newline."""

    return "\n".join(serialize_row(row) for row in rows)


def serialize_template(template: ListingTemplate) -> str:
    """Encode a template: preface rows verbatim, then the header, then padded data rows."""

    rows: list[Sequence[str]] = [*template.preface]
    if template.header:
        rows.append(template.header)
    rows.extend(template.padded_rows())
    return serialize_rows(rows)
