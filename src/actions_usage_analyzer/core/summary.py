"""Summary statistics and optimization suggestions for workflow records.

Everything here is recomputed from the record set on each call; nothing is
cached or updated in place.

Suggestion rules (in emission order):
  1. One suggestion listing every workflow whose cost exceeds
     high_cost_multiplier x the mean workflow cost.
  2. One suggestion per repository whose share of total cost exceeds
     repository_share_threshold_pct, in repository first-seen order.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from actions_usage_analyzer.core.formatting import round_half_up
from actions_usage_analyzer.core.models import (
    UNKNOWN_REPOSITORY,
    RepositoryRollup,
    SummaryStatistics,
    WorkflowRecord,
)

logger = structlog.get_logger(__name__)

DEFAULT_HIGH_COST_MULTIPLIER = 2.0
DEFAULT_REPOSITORY_SHARE_THRESHOLD_PCT = 30.0


def repository_rollups(records: Sequence[WorkflowRecord]) -> tuple[RepositoryRollup, ...]:
    """Roll workflow records up by repository.

    Args:
        records: Workflow records (any order).

    Returns:
        One rollup per repository in first-encountered order. Cost share is 0
        for every repository when the grand total cost is 0.
    """
    total_cost = sum(record.total_cost for record in records)

    totals: dict[str, dict[str, Any]] = {}
    for record in records:
        repository = record.repository or UNKNOWN_REPOSITORY
        entry = totals.setdefault(
            repository,
            {"workflow_count": 0, "run_count": 0, "total_minutes": 0.0, "total_cost": 0.0},
        )
        entry["workflow_count"] += 1
        entry["run_count"] += record.run_count
        entry["total_minutes"] += record.total_minutes
        entry["total_cost"] += record.total_cost

    return tuple(
        RepositoryRollup(
            repository=repository,
            cost_share_of_total=(entry["total_cost"] / total_cost * 100) if total_cost else 0.0,
            **entry,
        )
        for repository, entry in totals.items()
    )


def optimization_suggestions(
    records: Sequence[WorkflowRecord],
    *,
    rollups: Sequence[RepositoryRollup] | None = None,
    high_cost_multiplier: float = DEFAULT_HIGH_COST_MULTIPLIER,
    repository_share_threshold_pct: float = DEFAULT_REPOSITORY_SHARE_THRESHOLD_PCT,
) -> tuple[str, ...]:
    """Derive human-readable cost optimization suggestions.

    Args:
        records: Workflow records sorted as they will be displayed.
        rollups: Precomputed repository rollups (computed when omitted).
        high_cost_multiplier: Multiple of the mean cost above which a
            workflow counts as high-cost.
        repository_share_threshold_pct: Cost share above which a repository
            gets its own suggestion.

    Returns:
        Suggestions in rule order; empty for an empty record set.
    """
    if not records:
        return ()

    suggestions: list[str] = []

    mean_cost = sum(record.total_cost for record in records) / len(records)
    high_cost = [
        record.name for record in records if record.total_cost > mean_cost * high_cost_multiplier
    ]
    if high_cost:
        suggestions.append(
            f"Consider optimizing these high-cost workflows: {', '.join(high_cost)}"
        )

    if rollups is None:
        rollups = repository_rollups(records)
    for rollup in rollups:
        if rollup.cost_share_of_total > repository_share_threshold_pct:
            share = int(round_half_up(rollup.cost_share_of_total))
            suggestions.append(
                f'Repository "{rollup.repository}" consumes {share}% of total costs. '
                "Consider reviewing its CI/CD patterns."
            )

    return tuple(suggestions)


def summarize(
    records: Sequence[WorkflowRecord],
    *,
    high_cost_multiplier: float = DEFAULT_HIGH_COST_MULTIPLIER,
    repository_share_threshold_pct: float = DEFAULT_REPOSITORY_SHARE_THRESHOLD_PCT,
) -> SummaryStatistics:
    """Compute summary statistics for a workflow record set.

    The top consumer is the first record, so records must already be sorted
    by total minutes descending (as aggregate_workflows returns them).

    Args:
        records: Workflow records sorted by total minutes descending.
        high_cost_multiplier: Passed through to optimization_suggestions.
        repository_share_threshold_pct: Passed through to optimization_suggestions.

    Returns:
        SummaryStatistics; the all-zero rest state for an empty record set.
    """
    if not records:
        return SummaryStatistics()

    total_minutes = sum(record.total_minutes for record in records)
    total_cost = sum(record.total_cost for record in records)
    top_record = records[0]
    top_share = (top_record.total_minutes / total_minutes * 100) if total_minutes else 0.0

    rollups = repository_rollups(records)
    # max() keeps the first maximal element, so ties go to the first-seen repository
    top_repository = max(rollups, key=lambda rollup: rollup.total_cost).repository

    summary = SummaryStatistics(
        workflow_count=len(records),
        total_minutes=total_minutes,
        total_cost=total_cost,
        top_consumer_name=top_record.name,
        top_consumer_share_percentage=top_share,
        top_repository=top_repository,
        optimization_suggestions=optimization_suggestions(
            records,
            rollups=rollups,
            high_cost_multiplier=high_cost_multiplier,
            repository_share_threshold_pct=repository_share_threshold_pct,
        ),
    )

    logger.debug(
        "usage_summary_computed",
        workflow_count=summary.workflow_count,
        total_minutes=total_minutes,
        total_cost=total_cost,
        top_repository=top_repository,
        suggestion_count=len(summary.optimization_suggestions),
    )

    return summary


__all__ = ["optimization_suggestions", "repository_rollups", "summarize"]
