"""FastAPI router for the usage analysis API.

Routes are thin: validate the upload and query parameters, call
UsageAnalysisService, and shape the typed Pydantic response. No analysis
logic belongs here.

Endpoints:
  POST /api/v1/usage/analyze
        Multipart CSV upload (field "file").
        Query params: start, end, strict, sort_by, direction, page, per_page
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from actions_usage_analyzer.api.schemas.usage import (
    AnalysisErrorResponse,
    RowIssueResponse,
    SummaryResponse,
    UsageAnalysisResponse,
    WorkflowPageResponse,
    WorkflowRecordResponse,
    build_repository_responses,
)
from actions_usage_analyzer.core.errors import UsageAnalysisError
from actions_usage_analyzer.core.models import DateRange
from actions_usage_analyzer.core.services.analysis_service import UsageAnalysisService
from actions_usage_analyzer.core.table import paginate, sort_records, top_workflows
from actions_usage_analyzer.settings import Settings, get_settings

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/usage", tags=["usage-analysis"])

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}

SortField = Literal["name", "total_minutes", "total_cost", "run_count", "average_minutes"]
SortDirection = Literal["asc", "desc"]


# ---------------------------------------------------------------------------
# Dependency factories
# ---------------------------------------------------------------------------


def _get_analysis_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> UsageAnalysisService:
    """Build UsageAnalysisService from the current settings."""
    return UsageAnalysisService(settings=settings)


def get_csv_upload(file: UploadFile = File(...)) -> UploadFile:
    """Accept the upload only if its filename or MIME type says CSV."""
    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").split(";")[0].strip().lower()

    if not filename.endswith(".csv") and content_type not in CSV_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please upload a CSV file.",
        )
    return file


def _build_date_range(start: datetime | None, end: datetime | None) -> DateRange | None:
    if start is None and end is None:
        return None
    if start is None or end is None:
        raise HTTPException(
            status_code=422,
            detail={"error": "invalid_date_range", "message": "Both start and end are required to filter by date."},
        )
    try:
        return DateRange(start=start, end=end)
    except ValueError as exc:
        raise HTTPException(
            status_code=422,
            detail={"error": "invalid_date_range", "message": str(exc)},
        ) from exc


async def _read_upload(file: UploadFile, max_bytes: int) -> bytes:
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"CSV upload exceeds the {max_bytes} byte limit.",
        )
    return content


# ---------------------------------------------------------------------------
# Analysis endpoint
# ---------------------------------------------------------------------------


@router.post(
    "/analyze",
    response_model=UsageAnalysisResponse,
    responses={
        422: {"model": AnalysisErrorResponse, "description": "The upload or date range cannot be analysed"},
    },
    summary="Analyse a CI usage CSV export per workflow and repository",
)
async def analyze_usage(
    file: Annotated[UploadFile, Depends(get_csv_upload)],
    settings: Annotated[Settings, Depends(get_settings)],
    service: Annotated[UsageAnalysisService, Depends(_get_analysis_service)],
    start: Annotated[datetime | None, Query(description="Only include usage at or after this time")] = None,
    end: Annotated[datetime | None, Query(description="Only include usage at or before this time")] = None,
    strict: Annotated[
        bool | None,
        Query(description="Reject rows with unparsable numbers instead of treating them as 0"),
    ] = None,
    sort_by: Annotated[SortField, Query(description="Workflow table sort column")] = "total_minutes",
    direction: Annotated[SortDirection, Query(description="Workflow table sort direction")] = "desc",
    page: Annotated[int, Query(ge=1, description="Workflow table page (1-based)")] = 1,
    per_page: Annotated[int | None, Query(ge=1, le=500, description="Workflow table page size")] = None,
) -> UsageAnalysisResponse:
    """Analyse one uploaded usage export.

    Rows are grouped per workflow and sorted by minutes. The response carries
    summary statistics, optimization suggestions, repository rollups, one
    page of the workflow table, and the row-level issues found while parsing.
    Schema, parse, and empty-file errors return HTTP 422 with a structured body.
    """
    date_range = _build_date_range(start, end)

    try:
        content = await _read_upload(file, settings.max_upload_bytes)
    finally:
        await file.close()

    try:
        result = await service.analyze_async(content, date_range=date_range, strict_numbers=strict)
    except UsageAnalysisError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.to_dict(),
        ) from exc

    table_page = paginate(
        sort_records(result.records, sort_by, direction),
        page=page,
        per_page=per_page or settings.default_page_size,
    )

    logger.info(
        "usage_analysis_served",
        filename=file.filename,
        workflow_count=result.summary.workflow_count,
        page=table_page.page,
        sort_by=sort_by,
        direction=direction,
    )

    return UsageAnalysisResponse(
        summary=SummaryResponse.from_summary(result.summary),
        workflows=WorkflowPageResponse.from_page(table_page, sort_by=sort_by, direction=direction),
        top_workflows=[
            WorkflowRecordResponse.from_record(record)
            for record in top_workflows(result.records, settings.top_workflows_count)
        ],
        repositories=build_repository_responses(result.repositories),
        row_issues=[
            RowIssueResponse.from_issue(issue)
            for issue in result.issues[: settings.max_reported_issues]
        ],
        row_issue_count=len(result.issues),
        source_row_count=result.source_row_count,
        skipped_row_count=result.skipped_row_count,
    )
