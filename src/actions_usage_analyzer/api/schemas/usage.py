"""Pydantic response schemas for the usage analysis API.

Response models are built from the core dataclasses via the from_* class
methods; the API layer never exposes the dataclasses directly.
"""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from actions_usage_analyzer.core.formatting import format_currency, format_number, round_half_up
from actions_usage_analyzer.core.models import (
    RepositoryRollup,
    RowIssue,
    SummaryStatistics,
    WorkflowRecord,
)
from actions_usage_analyzer.core.table import Page


# ---------------------------------------------------------------------------
# Workflow schemas
# ---------------------------------------------------------------------------


class WorkflowRecordResponse(BaseModel):
    """Usage totals for a single workflow.

    Attributes:
        name: Workflow name.
        repository: Explicit or inferred repository ("unknown" when neither).
        total_minutes: Exact sum of run minutes.
        rounded_minutes: total_minutes rounded half-up for display.
        total_cost: Sum of run costs in USD.
        total_cost_display: total_cost formatted as USD.
        run_count: Number of usage rows merged into this workflow.
        average_minutes: total_minutes / run_count.
        observed_at: Latest usage timestamp seen for the workflow.
    """

    name: str
    repository: str
    total_minutes: float
    rounded_minutes: int
    total_cost: float
    total_cost_display: str
    run_count: int = Field(..., ge=1)
    average_minutes: float
    observed_at: datetime | None = None

    @classmethod
    def from_record(cls, record: WorkflowRecord) -> WorkflowRecordResponse:
        return cls(
            name=record.name,
            repository=record.repository,
            total_minutes=record.total_minutes,
            rounded_minutes=record.rounded_minutes,
            total_cost=record.total_cost,
            total_cost_display=format_currency(record.total_cost),
            run_count=record.run_count,
            average_minutes=record.average_minutes,
            observed_at=record.observed_at,
        )


class WorkflowPageResponse(BaseModel):
    """One sorted page of workflow records."""

    items: list[WorkflowRecordResponse]
    page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1)
    total_items: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    sort_by: str
    direction: str

    @classmethod
    def from_page(cls, page: Page, *, sort_by: str, direction: str) -> WorkflowPageResponse:
        return cls(
            items=[WorkflowRecordResponse.from_record(record) for record in page.items],
            page=page.page,
            per_page=page.per_page,
            total_items=page.total_items,
            total_pages=page.total_pages,
            sort_by=sort_by,
            direction=direction,
        )


# ---------------------------------------------------------------------------
# Summary schemas
# ---------------------------------------------------------------------------


class RepositoryRollupResponse(BaseModel):
    """Usage totals for one repository."""

    repository: str
    workflow_count: int
    run_count: int
    total_minutes: float
    total_cost: float
    cost_share_of_total: float = Field(..., description="Percentage of total cost (0-100)")

    model_config = {"from_attributes": True}


class SummaryResponse(BaseModel):
    """Summary statistics for an analysed usage export.

    Attributes:
        workflow_count: Distinct workflows.
        total_minutes: Minutes across all workflows.
        total_minutes_display: total_minutes rounded and thousands-grouped.
        total_cost: Cost across all workflows in USD.
        total_cost_display: total_cost formatted as USD.
        top_consumer_name: Workflow with the most minutes ("" when empty).
        top_consumer_share_percentage: Top workflow's share of total minutes.
        top_repository: Repository with the highest cost.
        optimization_suggestions: Ordered human-readable suggestions.
    """

    workflow_count: int
    total_minutes: float
    total_minutes_display: str
    total_cost: float
    total_cost_display: str
    top_consumer_name: str
    top_consumer_share_percentage: float
    top_repository: str | None = None
    optimization_suggestions: list[str] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: SummaryStatistics) -> SummaryResponse:
        return cls(
            workflow_count=summary.workflow_count,
            total_minutes=summary.total_minutes,
            total_minutes_display=format_number(round_half_up(summary.total_minutes)),
            total_cost=summary.total_cost,
            total_cost_display=format_currency(summary.total_cost),
            top_consumer_name=summary.top_consumer_name,
            top_consumer_share_percentage=summary.top_consumer_share_percentage,
            top_repository=summary.top_repository,
            optimization_suggestions=list(summary.optimization_suggestions),
        )


class RowIssueResponse(BaseModel):
    """A non-fatal problem found in one CSV row."""

    row_number: int = Field(..., ge=1)
    column: str | None = None
    message: str
    value: str | None = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_issue(cls, issue: RowIssue) -> RowIssueResponse:
        return cls.model_validate(issue)


class UsageAnalysisResponse(BaseModel):
    """Full response of the usage analysis endpoint.

    Attributes:
        summary: Summary statistics and optimization suggestions.
        workflows: Requested page of the sorted workflow table.
        top_workflows: Heaviest workflows by minutes.
        repositories: Per-repository rollups in first-seen order.
        row_issues: Row-level issues (capped; see row_issue_count).
        row_issue_count: Total number of row issues found.
        source_row_count: Non-blank data rows in the upload.
        skipped_row_count: Rows dropped by row validation.
    """

    summary: SummaryResponse
    workflows: WorkflowPageResponse
    top_workflows: list[WorkflowRecordResponse]
    repositories: list[RepositoryRollupResponse]
    row_issues: list[RowIssueResponse] = Field(default_factory=list)
    row_issue_count: int = 0
    source_row_count: int = 0
    skipped_row_count: int = 0


class AnalysisErrorDetail(BaseModel):
    """Structured detail of an analysis or date range error.

    Attributes:
        error: schema_error | parse_error | empty_input | invalid_date_range.
        message: Human-readable message for direct display.
        missing_columns: Required columns absent (schema_error only).
        found_columns: Header columns present (schema_error only).
        messages: De-duplicated parser messages (parse_error only).
    """

    error: str
    message: str
    missing_columns: list[str] | None = None
    found_columns: list[str] | None = None
    messages: list[str] | None = None


class AnalysisErrorResponse(BaseModel):
    """HTTP 422 body returned when a usage export cannot be analysed.

    Mirrors the HTTPException envelope, which nests the payload under detail.
    """

    detail: AnalysisErrorDetail


def build_repository_responses(rollups: tuple[RepositoryRollup, ...]) -> list[RepositoryRollupResponse]:
    """Convert repository rollups to response models."""
    return [RepositoryRollupResponse.model_validate(rollup) for rollup in rollups]
