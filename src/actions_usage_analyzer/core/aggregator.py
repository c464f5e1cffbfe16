"""Per-workflow aggregation of validated usage rows.

Key invariants:
  - Records are keyed by the exact trimmed workflow name (case-sensitive).
  - total_minutes and total_cost are plain sums; nothing is rounded here.
  - Output is sorted by total_minutes descending; ties keep the order in
    which workflows were first seen.
  - Rows without a timestamp always survive date filtering.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime
from typing import Any

import structlog

from actions_usage_analyzer.core.models import (
    UNKNOWN_REPOSITORY,
    DateRange,
    UsageRow,
    WorkflowRecord,
    as_utc_naive,
)

logger = structlog.get_logger(__name__)

# "owner/repo/.github/workflows/ci.yml" -> "owner/repo"
_REPOSITORY_PATTERN = re.compile(r"^([^/]+/[^/]+)/")


def infer_repository(workflow_name: str) -> str:
    """Infer the repository from an "owner/repo/..." workflow name.

    Args:
        workflow_name: Trimmed workflow name.

    Returns:
        The "owner/repo" prefix, or "unknown" when the name has no such prefix.
    """
    match = _REPOSITORY_PATTERN.match(workflow_name)
    return match.group(1) if match else UNKNOWN_REPOSITORY


def filter_by_date_range(rows: Iterable[UsageRow], date_range: DateRange | None) -> list[UsageRow]:
    """Drop rows whose usage timestamp falls outside the date range.

    Rows with no timestamp are kept. A None range keeps every row.
    """
    if date_range is None:
        return list(rows)
    return [row for row in rows if row.usage_at is None or date_range.contains(row.usage_at)]


def aggregate_workflows(
    rows: Iterable[UsageRow],
    *,
    date_range: DateRange | None = None,
) -> tuple[WorkflowRecord, ...]:
    """Group validated rows into per-workflow records.

    Args:
        rows: Validated usage rows in source order.
        date_range: Optional inclusive window applied before grouping.

    Returns:
        WorkflowRecords sorted by total minutes descending.
    """
    selected = filter_by_date_range(rows, date_range)

    # dicts keep insertion order, which is the tie-break order for sorting
    groups: dict[str, dict[str, Any]] = {}
    for row in selected:
        group = groups.get(row.workflow_name)
        if group is None:
            group = {
                "name": row.workflow_name,
                "total_minutes": 0.0,
                "total_cost": 0.0,
                "run_count": 0,
                "repository": row.repository or infer_repository(row.workflow_name),
                "observed_at": None,
            }
            groups[row.workflow_name] = group
        group["total_minutes"] += row.quantity
        group["total_cost"] += row.net_amount
        group["run_count"] += 1
        group["observed_at"] = _latest(group["observed_at"], row.usage_at)

    records = sorted(
        (WorkflowRecord(**group) for group in groups.values()),
        key=lambda record: record.total_minutes,
        reverse=True,
    )

    logger.debug(
        "workflow_rows_grouped",
        input_row_count=len(selected),
        workflow_count=len(records),
        date_filtered=date_range is not None,
    )

    return tuple(records)


def records_as_rows(records: Iterable[WorkflowRecord]) -> list[UsageRow]:
    """Express each record as one synthetic usage row.

    Aggregating the result again reproduces the same per-workflow totals.
    """
    return [
        UsageRow(
            workflow_name=record.name,
            quantity=record.total_minutes,
            net_amount=record.total_cost,
            repository=record.repository,
            usage_at=record.observed_at,
        )
        for record in records
    ]


def _latest(current: datetime | None, candidate: datetime | None) -> datetime | None:
    if candidate is None:
        return current
    if current is None:
        return candidate
    # Exports may mix naive and aware timestamps
    return candidate if as_utc_naive(candidate) > as_utc_naive(current) else current


__all__ = [
    "aggregate_workflows",
    "filter_by_date_range",
    "infer_repository",
    "records_as_rows",
]
