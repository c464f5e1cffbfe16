"""Tests for workflow table sorting and pagination."""
from __future__ import annotations

import pytest

from actions_usage_analyzer.core.models import WorkflowRecord
from actions_usage_analyzer.core.table import paginate, sort_records, top_workflows


def _make_record(name: str, minutes: float = 1.0, cost: float = 0.0, runs: int = 1) -> WorkflowRecord:
    return WorkflowRecord(name=name, total_minutes=minutes, total_cost=cost, run_count=runs)


def _make_records(count: int) -> tuple[WorkflowRecord, ...]:
    return tuple(_make_record(f"wf-{index:02d}", minutes=count - index) for index in range(count))


class TestSortRecords:
    """Tests for sort_records()."""

    def test_sorts_by_name_case_insensitively(self) -> None:
        records = [_make_record("deploy"), _make_record("Build"), _make_record("audit")]

        result = sort_records(records, "name", "asc")

        assert [record.name for record in result] == ["audit", "Build", "deploy"]

    def test_sorts_by_cost_descending(self) -> None:
        records = [_make_record("a", cost=1), _make_record("b", cost=3), _make_record("c", cost=2)]

        result = sort_records(records, "total_cost", "desc")

        assert [record.name for record in result] == ["b", "c", "a"]

    def test_sorts_by_average_minutes(self) -> None:
        records = [_make_record("a", minutes=10, runs=5), _make_record("b", minutes=9, runs=1)]

        result = sort_records(records, "average_minutes", "desc")

        assert [record.name for record in result] == ["b", "a"]

    def test_input_order_is_untouched(self) -> None:
        records = [_make_record("b"), _make_record("a")]

        sort_records(records, "name", "asc")

        assert [record.name for record in records] == ["b", "a"]

    def test_unknown_field_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unsupported sort field"):
            sort_records([], "repository")

    def test_unknown_direction_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unsupported sort direction"):
            sort_records([], "name", "up")


class TestPaginate:
    """Tests for paginate()."""

    def test_slices_requested_page(self) -> None:
        page = paginate(_make_records(25), page=2, per_page=10)

        assert page.page == 2
        assert page.total_items == 25
        assert page.total_pages == 3
        assert [record.name for record in page.items] == [f"wf-{index:02d}" for index in range(10, 20)]

    def test_last_page_is_partial(self) -> None:
        page = paginate(_make_records(25), page=3, per_page=10)

        assert len(page.items) == 5

    @pytest.mark.parametrize(("requested", "served"), [(0, 1), (-4, 1), (99, 3)])
    def test_out_of_range_pages_are_clamped(self, requested: int, served: int) -> None:
        assert paginate(_make_records(25), page=requested, per_page=10).page == served

    def test_empty_records(self) -> None:
        page = paginate((), page=3, per_page=10)

        assert page.items == ()
        assert page.page == 1
        assert page.total_pages == 0

    def test_per_page_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="per_page"):
            paginate(_make_records(3), per_page=0)


class TestTopWorkflows:
    """Tests for top_workflows()."""

    def test_returns_first_records(self) -> None:
        records = _make_records(15)

        top = top_workflows(records)

        assert len(top) == 10
        assert top[0].name == "wf-00"

    def test_fewer_records_than_count(self) -> None:
        assert len(top_workflows(_make_records(3), 10)) == 3
