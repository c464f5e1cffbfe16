"""Sorting and pagination of workflow records for tabular display.

All functions return new tuples; the analysed record set is never reordered.
"""
from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from actions_usage_analyzer.core.models import WorkflowRecord

SORT_FIELDS: dict[str, Callable[[WorkflowRecord], Any]] = {
    "name": lambda record: record.name.casefold(),
    "total_minutes": lambda record: record.total_minutes,
    "total_cost": lambda record: record.total_cost,
    "run_count": lambda record: record.run_count,
    "average_minutes": lambda record: record.average_minutes,
}
SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class Page:
    """One page of workflow records.

    Attributes:
        items: Records on this page.
        page: 1-based page number actually served.
        per_page: Page size.
        total_items: Records across all pages.
        total_pages: Number of pages (0 when there are no records).
    """

    items: tuple[WorkflowRecord, ...]
    page: int
    per_page: int
    total_items: int
    total_pages: int


def sort_records(
    records: Sequence[WorkflowRecord],
    field: str = "total_minutes",
    direction: str = "desc",
) -> tuple[WorkflowRecord, ...]:
    """Return a sorted copy of the records.

    Args:
        records: Records to sort.
        field: name | total_minutes | total_cost | run_count | average_minutes.
        direction: asc | desc.

    Raises:
        ValueError: If field or direction is not supported.
    """
    key = SORT_FIELDS.get(field)
    if key is None:
        raise ValueError(f"Unsupported sort field '{field}'. Allowed: {', '.join(SORT_FIELDS)}")
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Unsupported sort direction '{direction}'. Allowed: asc, desc")
    return tuple(sorted(records, key=key, reverse=direction == "desc"))


def paginate(records: Sequence[WorkflowRecord], page: int = 1, per_page: int = 10) -> Page:
    """Slice one page out of the records.

    Out-of-range page numbers are clamped to the first or last page.

    Raises:
        ValueError: If per_page is less than 1.
    """
    if per_page < 1:
        raise ValueError("per_page must be at least 1")

    total_items = len(records)
    total_pages = math.ceil(total_items / per_page)
    page = min(max(page, 1), max(total_pages, 1))
    start = (page - 1) * per_page

    return Page(
        items=tuple(records[start : start + per_page]),
        page=page,
        per_page=per_page,
        total_items=total_items,
        total_pages=total_pages,
    )


def top_workflows(records: Sequence[WorkflowRecord], count: int = 10) -> tuple[WorkflowRecord, ...]:
    """Return the first count records (the heaviest consumers of a sorted set)."""
    return tuple(records[: max(count, 0)])


__all__ = ["Page", "SORT_DIRECTIONS", "SORT_FIELDS", "paginate", "sort_records", "top_workflows"]
