"""Usage CSV parsing and row validation.

Turns the raw text of a CI usage export into validated UsageRow values.

Key invariants:
  - Header names are trimmed before matching; matching is case-sensitive.
  - Missing required columns fail the whole file before any row is read.
  - Structural problems (bad quoting, wrong field counts, undecodable bytes)
    fail the whole file with every distinct message collected.
  - Row problems never fail the file: the row is skipped or its numeric
    value coerced, and a RowIssue is recorded.
  - Numeric parsing reads a leading decimal number ("12.5min" -> 12.5) and
    never interprets locale group separators.
  - quantity is never negative: a negative value is handled like an
    unparsable one. Negative net_amount values (credits) are kept.
"""
from __future__ import annotations

import csv
import io
import math
import re
from datetime import datetime
from typing import Any

import structlog

from actions_usage_analyzer.core.errors import EmptyInputError, ParseError, SchemaError
from actions_usage_analyzer.core.models import ParsedUsage, RowIssue, UsageRow

logger = structlog.get_logger(__name__)

WORKFLOW_NAME_COLUMN = "workflow_name"
QUANTITY_COLUMN = "quantity"
NET_AMOUNT_COLUMN = "net_amount"
REPOSITORY_COLUMN = "repository"
USAGE_AT_COLUMN = "usage_at"

REQUIRED_COLUMNS: tuple[str, ...] = (WORKFLOW_NAME_COLUMN, QUANTITY_COLUMN, NET_AMOUNT_COLUMN)
OPTIONAL_COLUMNS: tuple[str, ...] = (REPOSITORY_COLUMN, USAGE_AT_COLUMN)

# Exports write a literal "null" for workflow-less usage (e.g. Codespaces)
NULL_WORKFLOW_NAME = "null"

_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


# ---------------------------------------------------------------------------
# Scalar parsing
# ---------------------------------------------------------------------------


def parse_number(value: str | None) -> float | None:
    """Parse the leading decimal number of a string.

    Args:
        value: Raw cell text.

    Returns:
        The parsed float, or None when no finite leading number exists.
    """
    if value is None:
        return None
    match = _NUMBER_PREFIX.match(value.strip())
    if match is None:
        return None
    number = float(match.group(0))
    return number if math.isfinite(number) else None


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 date or date-time string.

    A trailing "Z" is accepted as UTC. Returns None for blank or
    unparsable input.
    """
    text = (value or "").strip()
    if not text:
        return None
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# File parsing
# ---------------------------------------------------------------------------


def parse_usage_csv(content: bytes | str, *, strict_numbers: bool = False) -> ParsedUsage:
    """Parse and validate a usage CSV export.

    Args:
        content: File content as UTF-8 bytes (BOM tolerated) or text.
        strict_numbers: Reject rows with unparsable quantity/net_amount
            instead of coercing the value to 0.

    Returns:
        ParsedUsage with validated rows in source order and row issues.

    Raises:
        SchemaError: A required column is missing from the header.
        ParseError: The CSV is structurally malformed.
        EmptyInputError: The file has no header, no data rows, or no
            row survived validation.
    """
    text = _decode(content)
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)

    try:
        header = _next_non_blank(reader)
    except csv.Error as exc:
        raise ParseError([_describe_csv_error(exc, reader.line_num)]) from exc
    if header is None:
        raise EmptyInputError()

    columns = tuple(cell.strip() for cell in header)
    missing = [column for column in REQUIRED_COLUMNS if column not in columns]
    if missing:
        raise SchemaError(missing, [column for column in columns if column])

    raw_rows, messages = _read_raw_rows(reader, columns)
    if messages:
        raise ParseError(messages)
    if not raw_rows:
        raise EmptyInputError()

    rows: list[UsageRow] = []
    issues: list[RowIssue] = []
    for row_number, raw_row in raw_rows:
        row = _validate_row(raw_row, row_number, strict_numbers=strict_numbers, issues=issues)
        if row is not None:
            rows.append(row)

    skipped = len(raw_rows) - len(rows)
    if not rows:
        raise EmptyInputError(
            f"The CSV file has no usable rows: all {len(raw_rows)} data rows were skipped"
        )

    logger.debug(
        "usage_csv_rows_validated",
        data_row_count=len(raw_rows),
        valid_row_count=len(rows),
        skipped_row_count=skipped,
        issue_count=len(issues),
        strict_numbers=strict_numbers,
    )

    return ParsedUsage(
        rows=tuple(rows),
        issues=tuple(issues),
        columns=columns,
        data_row_count=len(raw_rows),
        skipped_row_count=skipped,
    )


def _decode(content: bytes | str) -> str:
    if isinstance(content, str):
        return content.removeprefix("\ufeff")
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError([f"File is not valid UTF-8 text: {exc.reason} at byte {exc.start}"]) from exc


def _is_blank(cells: list[str]) -> bool:
    return not cells or (len(cells) == 1 and not cells[0].strip())


def _next_non_blank(reader: Any) -> list[str] | None:
    for cells in reader:
        if not _is_blank(cells):
            return cells
    return None


def _read_raw_rows(
    reader: Any,
    columns: tuple[str, ...],
) -> tuple[list[tuple[int, dict[str, str]]], list[str]]:
    """Read data rows as column mappings, collecting structural errors."""
    expected = len(columns)
    raw_rows: list[tuple[int, dict[str, str]]] = []
    messages: list[str] = []

    try:
        for cells in reader:
            if _is_blank(cells):
                continue
            if len(cells) > expected:
                messages.append(f"Too many fields: expected {expected} fields but parsed {len(cells)}")
                continue
            if len(cells) < expected:
                messages.append(f"Too few fields: expected {expected} fields but parsed {len(cells)}")
                continue
            raw_rows.append((reader.line_num, dict(zip(columns, cells))))
    except csv.Error as exc:
        # The tokenizer cannot resynchronise after a quoting error
        messages.append(_describe_csv_error(exc, reader.line_num))

    return raw_rows, messages


def _describe_csv_error(exc: csv.Error, line_num: int) -> str:
    return f"Malformed CSV near line {line_num}: {exc}"


# ---------------------------------------------------------------------------
# Row validation
# ---------------------------------------------------------------------------


def _validate_row(
    raw_row: dict[str, str],
    row_number: int,
    *,
    strict_numbers: bool,
    issues: list[RowIssue],
) -> UsageRow | None:
    raw_name = raw_row.get(WORKFLOW_NAME_COLUMN)
    name = (raw_name or "").strip()
    if not name or name == NULL_WORKFLOW_NAME:
        issues.append(
            RowIssue(
                row_number=row_number,
                column=WORKFLOW_NAME_COLUMN,
                message="Row has no workflow name and was skipped.",
                value=raw_name,
            )
        )
        return None

    quantity = _coerce_number(raw_row, QUANTITY_COLUMN, row_number, strict_numbers, issues, non_negative=True)
    net_amount = _coerce_number(raw_row, NET_AMOUNT_COLUMN, row_number, strict_numbers, issues)
    if quantity is None or net_amount is None:
        return None

    usage_at = None
    raw_usage_at = raw_row.get(USAGE_AT_COLUMN)
    if raw_usage_at is not None and raw_usage_at.strip():
        usage_at = parse_timestamp(raw_usage_at)
        if usage_at is None:
            issues.append(
                RowIssue(
                    row_number=row_number,
                    column=USAGE_AT_COLUMN,
                    message="Unparsable usage timestamp; row kept without a date.",
                    value=raw_usage_at,
                )
            )

    repository = (raw_row.get(REPOSITORY_COLUMN) or "").strip() or None

    return UsageRow(
        workflow_name=name,
        quantity=quantity,
        net_amount=net_amount,
        repository=repository,
        usage_at=usage_at,
        row_number=row_number,
    )


def _coerce_number(
    raw_row: dict[str, str],
    column: str,
    row_number: int,
    strict_numbers: bool,
    issues: list[RowIssue],
    *,
    non_negative: bool = False,
) -> float | None:
    raw_value = raw_row.get(column)
    number = parse_number(raw_value)
    if number is not None and not (non_negative and number < 0):
        return number

    problem = "Negative" if number is not None else "Unparsable"
    if strict_numbers:
        issues.append(
            RowIssue(
                row_number=row_number,
                column=column,
                message=f"{problem} {column}; row skipped.",
                value=raw_value,
            )
        )
        return None

    issues.append(
        RowIssue(
            row_number=row_number,
            column=column,
            message=f"{problem} {column}; treated as 0.",
            value=raw_value,
        )
    )
    return 0.0


__all__ = [
    "OPTIONAL_COLUMNS",
    "REQUIRED_COLUMNS",
    "parse_number",
    "parse_timestamp",
    "parse_usage_csv",
]
