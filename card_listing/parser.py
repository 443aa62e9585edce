"""Delimited-text parsing and header-driven decoding for inventory and template files."""

from __future__ import annotations

import logging
from pathlib import Path

from .models import DataIssue, ListingTemplate, ParseResult, RawRow, TabularRecord
from .normalize import normalize_records

logger = logging.getLogger(__name__)

_QUOTE = '"'


class SourceLoadError(Exception):
    """Raised when a source file cannot be read from disk."""


def _numbered_tsv_lines(text: str) -> list[tuple[int, RawRow]]:
    """Split tab-separated text into `(physical line number, cells)` pairs, skipping blank lines."""

    lines = text.replace("\r", "").split("\n")
    return [(number, line.split("\t")) for number, line in enumerate(lines, start=1) if line.strip() != ""]


def parse_tsv(text: str) -> list[RawRow]:
    """Split tab-separated text into rows of cells.

    There is no quoting in this grammar. Carriage returns are removed and
    blank lines are dropped before splitting on tabs.
    """

    return [cells for _, cells in _numbered_tsv_lines(text)]


def parse_csv(text: str) -> list[RawRow]:
    """Parse comma-separated text with double-quote escaping into rows of cells.

    The parser is fail-soft: an unterminated quote consumes the rest of the
    input, which is emitted as the final cell instead of raising.
    """

    rows: list[RawRow] = []
    row: RawRow = []
    cell: list[str] = []
    in_quotes = False
    pending = False
    index = 0
    length = len(text)

    while index < length:
        char = text[index]
        if in_quotes:
            if char == _QUOTE:
                if index + 1 < length and text[index + 1] == _QUOTE:
                    cell.append(_QUOTE)
                    index += 1
                else:
                    in_quotes = False
            else:
                cell.append(char)
        elif char == _QUOTE:
            in_quotes = True
            pending = True
        elif char == ",":
            row.append("".join(cell))
            cell = []
            pending = True
        elif char == "\n":
            row.append("".join(cell))
            rows.append(row)
            row, cell = [], []
            pending = False
        elif char != "\r":
            cell.append(char)
            pending = True
        index += 1

    if pending:
        row.append("".join(cell))
        rows.append(row)
    return rows


def _header_keys(cells: RawRow) -> list[str]:
    """Build record keys from header cells, synthesizing names for blanks and repeats.

    A synthesized name that is already taken gets the position appended again,
    so every column keeps its own key.
    """

    keys: list[str] = []
    seen: set[str] = set()
    for position, cell in enumerate(cells):
        key = f"col_{position}" if cell.strip() == "" else cell
        while key in seen:
            key = f"{key}_{position}"
        seen.add(key)
        keys.append(key)
    return keys


def _is_blank_row(row: RawRow) -> bool:
    """Return True when every cell in the row is empty or whitespace."""

    return all(cell.strip() == "" for cell in row)


def decode_rows(rows: list[RawRow], *, header_index: int = 0) -> tuple[list[str], list[TabularRecord]]:
    """Pair the header row with each following row to build field-keyed records.

    Header keys keep their literal text, including stray whitespace. Cells
    beyond the header are dropped and missing cells default to an empty
    string, so ragged rows never raise.
    """

    if header_index < 0 or header_index >= len(rows):
        return [], []

    header = _header_keys(rows[header_index])
    records: list[TabularRecord] = []
    for row in rows[header_index + 1 :]:
        if _is_blank_row(row):
            continue
        record = {key: (row[position].strip() if position < len(row) else "") for position, key in enumerate(header)}
        records.append(record)
    return header, records


def decode_source_bytes(data: bytes) -> tuple[str, list[DataIssue]]:
    """Decode a UTF-8 byte stream, recovering undecodable input to empty text."""

    try:
        return data.decode("utf-8-sig"), []
    except UnicodeDecodeError as exc:
        logger.warning("Source bytes are not valid UTF-8: %s", exc)
        return "", [DataIssue(code="unreadable_bytes", message=f"Source is not valid UTF-8: {exc.reason}")]


def read_source(path: str | Path) -> str:
    """Read a source file as text.

    This is the only place in the package that touches the filesystem for
    input. Any failure is reported as one `SourceLoadError`.
    """

    source_path = Path(path)
    try:
        data = source_path.read_bytes()
    except FileNotFoundError as exc:
        raise SourceLoadError(f"Source file not found: {source_path}") from exc
    except OSError as exc:
        raise SourceLoadError(f"Unable to read source file {source_path}: {exc.strerror or exc}") from exc

    text, issues = decode_source_bytes(data)
    for issue in issues:
        logger.warning("%s: %s", source_path, issue.message)
    return text


def load_inventory(text: str, *, source: str = "<memory>") -> ParseResult:
    """Parse and normalize tab-separated inventory text.

    An empty header is recovered to an empty record set with an issue rather
    than raising.
    """

    numbered = _numbered_tsv_lines(text.lstrip("\ufeff"))
    rows = [cells for _, cells in numbered]
    header, records = decode_rows(rows, header_index=0)
    file_issues: list[DataIssue] = []

    if not header:
        logger.warning("Inventory %s has no header row; nothing loaded", source)
        file_issues.append(DataIssue(code="empty_header", message="Inventory has no header row"))
        return ParseResult(source=source, header=[], cards=[], file_issues=file_issues)

    record_lines: list[int] = []
    for line_number, row in numbered[1:]:
        if _is_blank_row(row):
            continue
        record_lines.append(line_number)
        if len(row) > len(header):
            file_issues.append(
                DataIssue(
                    code="row_has_extra_columns",
                    message=f"Row {line_number} has more columns than the header",
                )
            )

    cards = normalize_records(records, source_rows=record_lines)
    logger.info("Loaded %d inventory records from %s", len(cards), source)
    return ParseResult(source=source, header=header, cards=cards, file_issues=file_issues)


def load_template(text: str, *, header_index: int = 1) -> ListingTemplate:
    """Parse listing-template CSV text into preface rows, header and data rows.

    The header index is supplied by the caller; templates commonly carry one
    instructions row above the header.
    """

    rows = parse_csv(text.lstrip("\ufeff"))
    if header_index < 0 or header_index >= len(rows):
        logger.warning("Template has no row at header index %d; using an empty template", header_index)
        return ListingTemplate()

    return ListingTemplate(
        header=tuple(rows[header_index]),
        rows=tuple(tuple(row) for row in rows[header_index + 1 :]),
        preface=tuple(tuple(row) for row in rows[:header_index]),
    )
