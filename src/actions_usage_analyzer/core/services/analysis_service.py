"""Usage analysis service for the Actions Usage Analyzer.

Implements UsageAnalysisService, which chains parsing, aggregation, and
summarisation for one uploaded usage export, and AnalysisTracker, a
caller-owned holder for the latest analysis that discards superseded runs.

Key invariants:
  - The pipeline is a pure function of (content, date range, strictness).
  - A fatal error aborts before aggregation; no partial records are returned.
  - Only the most recently started run may replace the tracked result.
  - A failed run never clears the previous successful result.
"""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from actions_usage_analyzer.core.aggregator import aggregate_workflows
from actions_usage_analyzer.core.errors import UsageAnalysisError
from actions_usage_analyzer.core.models import AnalysisResult, DateRange
from actions_usage_analyzer.core.parser import parse_usage_csv
from actions_usage_analyzer.core.summary import repository_rollups, summarize
from actions_usage_analyzer.settings import Settings

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# UsageAnalysisService
# ---------------------------------------------------------------------------


class UsageAnalysisService:
    """Runs the usage CSV analysis pipeline.

    Holds no per-upload state, so one instance can serve any number of
    concurrent callers.

    Args:
        settings: Service configuration (strictness and suggestion thresholds).
    """

    def __init__(self, settings: Settings) -> None:
        """Initialise UsageAnalysisService with its configuration."""
        self._settings = settings

    def analyze(
        self,
        content: bytes | str,
        *,
        date_range: DateRange | None = None,
        strict_numbers: bool | None = None,
    ) -> AnalysisResult:
        """Parse, aggregate, and summarise one usage export.

        Args:
            content: Raw CSV content (UTF-8 bytes or text).
            date_range: Optional inclusive usage window applied before grouping.
            strict_numbers: Override for settings.strict_numeric_parsing.

        Returns:
            AnalysisResult with sorted workflow records and their summary.

        Raises:
            SchemaError: Required columns are missing.
            ParseError: The CSV is structurally malformed.
            EmptyInputError: The CSV has no usable rows.
        """
        strict = self._settings.strict_numeric_parsing if strict_numbers is None else strict_numbers

        try:
            parsed = parse_usage_csv(content, strict_numbers=strict)
        except UsageAnalysisError as exc:
            logger.warning("usage_analysis_rejected", error_kind=exc.kind, detail=str(exc))
            raise

        logger.info(
            "usage_csv_parsed",
            data_row_count=parsed.data_row_count,
            valid_row_count=len(parsed.rows),
            skipped_row_count=parsed.skipped_row_count,
            issue_count=len(parsed.issues),
            strict_numbers=strict,
        )

        records = aggregate_workflows(parsed.rows, date_range=date_range)
        logger.info(
            "workflows_aggregated",
            workflow_count=len(records),
            date_range_start=date_range.start.isoformat() if date_range else None,
            date_range_end=date_range.end.isoformat() if date_range else None,
        )

        summary = summarize(
            records,
            high_cost_multiplier=self._settings.high_cost_multiplier,
            repository_share_threshold_pct=self._settings.repository_share_threshold_pct,
        )

        logger.info(
            "usage_analysis_completed",
            workflow_count=summary.workflow_count,
            total_minutes=summary.total_minutes,
            total_cost=summary.total_cost,
            top_consumer_name=summary.top_consumer_name,
            suggestion_count=len(summary.optimization_suggestions),
        )

        return AnalysisResult(
            records=records,
            summary=summary,
            repositories=repository_rollups(records),
            issues=parsed.issues,
            source_row_count=parsed.data_row_count,
            skipped_row_count=parsed.skipped_row_count,
        )

    async def analyze_async(
        self,
        content: bytes | str,
        *,
        date_range: DateRange | None = None,
        strict_numbers: bool | None = None,
    ) -> AnalysisResult:
        """Run analyze() in a worker thread so the event loop stays responsive."""
        return await asyncio.to_thread(
            self.analyze,
            content,
            date_range=date_range,
            strict_numbers=strict_numbers,
        )


# ---------------------------------------------------------------------------
# AnalysisTracker
# ---------------------------------------------------------------------------


class AnalysisTracker:
    """Tracks the latest analysis for an interactive caller.

    Each run takes a generation token from begin(). Only the holder of the
    newest token may publish a result or an error; results of superseded
    runs are discarded. Intended to be owned by one caller (e.g. one UI
    session) on a single event loop.
    """

    def __init__(self) -> None:
        self._generation = 0
        self._current: AnalysisResult | None = None
        self._last_error: UsageAnalysisError | None = None

    @property
    def current(self) -> AnalysisResult | None:
        """The last successfully applied analysis, if any."""
        return self._current

    @property
    def last_error(self) -> UsageAnalysisError | None:
        """The error of the latest run, cleared by the next success."""
        return self._last_error

    def begin(self) -> int:
        """Start a run, superseding any run still in flight."""
        self._generation += 1
        return self._generation

    def is_current(self, token: int) -> bool:
        """Return True when token belongs to the newest run."""
        return token == self._generation

    def complete(self, token: int, result: AnalysisResult) -> bool:
        """Apply a finished run's result unless the run was superseded.

        Returns:
            True if the result was applied, False if it was discarded.
        """
        if not self.is_current(token):
            logger.info("stale_analysis_discarded", token=token, current_token=self._generation)
            return False
        self._current = result
        self._last_error = None
        return True

    def fail(self, token: int, error: UsageAnalysisError) -> bool:
        """Record a failed run's error, leaving the previous result in place.

        Returns:
            True if the error was recorded, False if the run was superseded.
        """
        if not self.is_current(token):
            logger.info("stale_analysis_error_discarded", token=token, current_token=self._generation)
            return False
        self._last_error = error
        return True

    async def run(self, analysis: Callable[[], Awaitable[AnalysisResult]]) -> AnalysisResult | None:
        """Run an analysis under a fresh token and publish its outcome.

        Args:
            analysis: Zero-argument factory returning the analysis awaitable.

        Returns:
            The result if it was applied, None if it failed or was superseded.
        """
        token = self.begin()
        try:
            result = await analysis()
        except UsageAnalysisError as exc:
            self.fail(token, exc)
            return None
        return result if self.complete(token, result) else None


__all__ = ["AnalysisTracker", "UsageAnalysisService"]
