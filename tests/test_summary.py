"""Tests for summary statistics, repository rollups, and suggestions."""
from __future__ import annotations

import pytest

from actions_usage_analyzer.core.models import SummaryStatistics, WorkflowRecord
from actions_usage_analyzer.core.summary import optimization_suggestions, repository_rollups, summarize


def _make_record(
    name: str,
    minutes: float = 10.0,
    cost: float = 1.0,
    runs: int = 1,
    repository: str = "unknown",
) -> WorkflowRecord:
    return WorkflowRecord(
        name=name,
        total_minutes=minutes,
        total_cost=cost,
        run_count=runs,
        repository=repository,
    )


class TestSummarize:
    """Tests for summarize()."""

    def test_empty_records_give_rest_state(self) -> None:
        summary = summarize([])

        assert summary == SummaryStatistics()
        assert summary.workflow_count == 0
        assert summary.top_consumer_name == ""
        assert summary.top_repository is None
        assert summary.optimization_suggestions == ()

    def test_single_workflow_is_full_share(self) -> None:
        summary = summarize([_make_record("build", minutes=15.0, cost=2.0, runs=2)])

        assert summary.workflow_count == 1
        assert summary.total_minutes == 15.0
        assert summary.total_cost == 2.0
        assert summary.top_consumer_name == "build"
        assert summary.top_consumer_share_percentage == 100.0

    def test_top_consumer_is_first_record(self) -> None:
        records = [_make_record("heavy", minutes=75), _make_record("light", minutes=25)]

        summary = summarize(records)

        assert summary.top_consumer_name == "heavy"
        assert summary.top_consumer_share_percentage == pytest.approx(75.0)

    def test_zero_total_minutes_gives_zero_share(self) -> None:
        summary = summarize([_make_record("idle", minutes=0, cost=0)])

        assert summary.top_consumer_share_percentage == 0.0
        assert summary.optimization_suggestions == ()

    def test_top_repository_has_highest_cost(self) -> None:
        records = [
            _make_record("a", minutes=50, cost=1, repository="acme/api"),
            _make_record("b", minutes=40, cost=3, repository="acme/web"),
            _make_record("c", minutes=30, cost=1.5, repository="acme/api"),
        ]

        assert summarize(records).top_repository == "acme/web"

    def test_top_repository_tie_goes_to_first_seen(self) -> None:
        records = [
            _make_record("a", minutes=50, cost=2, repository="acme/web"),
            _make_record("b", minutes=40, cost=2, repository="acme/api"),
        ]

        assert summarize(records).top_repository == "acme/web"


class TestRepositoryRollups:
    """Tests for repository_rollups()."""

    def test_rollups_keep_first_seen_order(self) -> None:
        records = [
            _make_record("a", cost=1, runs=3, repository="acme/web"),
            _make_record("b", cost=2, runs=1, repository="acme/api"),
            _make_record("c", cost=1, runs=2, repository="acme/web"),
        ]

        rollups = repository_rollups(records)

        assert [rollup.repository for rollup in rollups] == ["acme/web", "acme/api"]
        web = rollups[0]
        assert web.workflow_count == 2
        assert web.run_count == 5
        assert web.total_minutes == 20.0
        assert web.cost_share_of_total == pytest.approx(50.0)

    def test_shares_sum_to_one_hundred(self) -> None:
        records = [
            _make_record("a", cost=0.33, repository="r/one"),
            _make_record("b", cost=0.41, repository="r/two"),
            _make_record("c", cost=1.07, repository="r/three"),
        ]

        total = sum(rollup.cost_share_of_total for rollup in repository_rollups(records))

        assert total == pytest.approx(100.0)

    def test_zero_total_cost_gives_zero_shares(self) -> None:
        records = [
            _make_record("a", cost=1.5, repository="r/one"),
            _make_record("b", cost=-1.5, repository="r/two"),
        ]

        assert [rollup.cost_share_of_total for rollup in repository_rollups(records)] == [0.0, 0.0]


class TestOptimizationSuggestions:
    """Tests for optimization_suggestions()."""

    def test_no_suggestions_for_empty_records(self) -> None:
        assert optimization_suggestions([]) == ()

    def test_high_cost_workflows_are_listed(self) -> None:
        records = [
            _make_record("wf-a", cost=10, repository="r/a"),
            _make_record("wf-b", cost=1, repository="r/b"),
            _make_record("wf-c", cost=1, repository="r/c"),
            _make_record("wf-d", cost=1, repository="r/d"),
            _make_record("wf-e", cost=1, repository="r/e"),
        ]

        suggestions = optimization_suggestions(records)

        assert suggestions[0] == "Consider optimizing these high-cost workflows: wf-a"

    def test_repository_share_suggestion_uses_rounded_percentage(self) -> None:
        records = [
            _make_record("api", cost=35, repository="acme/api"),
            _make_record("web", cost=25, repository="acme/web"),
            _make_record("docs", cost=20, repository="acme/docs"),
            _make_record("ops", cost=20, repository="acme/ops"),
        ]

        assert optimization_suggestions(records) == (
            'Repository "acme/api" consumes 35% of total costs. Consider reviewing its CI/CD patterns.',
        )

    def test_share_at_threshold_is_not_flagged(self) -> None:
        records = [
            _make_record("a", cost=30, repository="r/a"),
            _make_record("b", cost=25, repository="r/b"),
            _make_record("c", cost=25, repository="r/c"),
            _make_record("d", cost=20, repository="r/d"),
        ]

        assert optimization_suggestions(records) == ()

    def test_repository_suggestions_follow_first_seen_order(self) -> None:
        records = [
            _make_record("b", minutes=30, cost=40, repository="r/b"),
            _make_record("a", minutes=20, cost=45, repository="r/a"),
            _make_record("c", minutes=10, cost=15, repository="r/c"),
        ]

        suggestions = optimization_suggestions(records)

        assert suggestions == (
            'Repository "r/b" consumes 40% of total costs. Consider reviewing its CI/CD patterns.',
            'Repository "r/a" consumes 45% of total costs. Consider reviewing its CI/CD patterns.',
        )

    def test_custom_thresholds(self) -> None:
        records = [
            _make_record("a", cost=3, repository="r/a"),
            _make_record("b", cost=1, repository="r/b"),
        ]

        suggestions = optimization_suggestions(
            records,
            high_cost_multiplier=1.2,
            repository_share_threshold_pct=80.0,
        )

        assert suggestions == ("Consider optimizing these high-cost workflows: a",)

    def test_summary_carries_suggestions(self) -> None:
        records = [_make_record("only", minutes=5, cost=5, repository="acme/api")]

        summary = summarize(records)

        assert summary.optimization_suggestions == (
            'Repository "acme/api" consumes 100% of total costs. Consider reviewing its CI/CD patterns.',
        )
