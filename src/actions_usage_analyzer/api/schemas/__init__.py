"""Pydantic schemas for the Actions Usage Analyzer API."""
from __future__ import annotations

from actions_usage_analyzer.api.schemas.usage import (
    AnalysisErrorDetail,
    AnalysisErrorResponse,
    RepositoryRollupResponse,
    RowIssueResponse,
    SummaryResponse,
    UsageAnalysisResponse,
    WorkflowPageResponse,
    WorkflowRecordResponse,
    build_repository_responses,
)

__all__ = [
    "AnalysisErrorDetail",
    "AnalysisErrorResponse",
    "RepositoryRollupResponse",
    "RowIssueResponse",
    "SummaryResponse",
    "UsageAnalysisResponse",
    "WorkflowPageResponse",
    "WorkflowRecordResponse",
    "build_repository_responses",
]
