"""Value objects for the usage analysis pipeline.

All objects are frozen dataclasses: a WorkflowRecord set is immutable once
produced, and summary statistics are always recomputed from it rather than
updated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from actions_usage_analyzer.core.formatting import round_half_up

UNKNOWN_REPOSITORY = "unknown"


# ---------------------------------------------------------------------------
# Parser output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UsageRow:
    """A single validated usage row.

    Only produced by the parser after the header check passes.

    Attributes:
        workflow_name: Trimmed workflow name (never empty or "null").
        quantity: Minutes consumed by the run (never negative).
        net_amount: Cost of the run (negative for credits).
        repository: Explicit repository column value, or None when absent.
        usage_at: Parsed usage timestamp, or None when absent or unparsable.
        row_number: Physical CSV line number (header is line 1).
    """

    workflow_name: str
    quantity: float
    net_amount: float
    repository: str | None = None
    usage_at: datetime | None = None
    row_number: int = 0


@dataclass(frozen=True)
class RowIssue:
    """A non-fatal diagnostic for one CSV row.

    Attributes:
        row_number: Physical CSV line number.
        column: Column the issue relates to (None for whole-row issues).
        message: Human-readable description.
        value: Offending raw value, if any.
    """

    row_number: int
    column: str | None
    message: str
    value: str | None = None


@dataclass(frozen=True)
class ParsedUsage:
    """Result of parsing one usage CSV.

    Attributes:
        rows: Validated rows in source order.
        issues: Row-level diagnostics (skipped rows, coerced values).
        columns: Trimmed header columns.
        data_row_count: Non-blank data rows read after the header.
        skipped_row_count: Data rows rejected by row validation.
    """

    rows: tuple[UsageRow, ...]
    issues: tuple[RowIssue, ...] = ()
    columns: tuple[str, ...] = ()
    data_row_count: int = 0
    skipped_row_count: int = 0


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WorkflowRecord:
    """Per-workflow usage totals.

    total_minutes keeps full precision; rounded_minutes is the display value.

    Attributes:
        name: Workflow name, unique within a result set.
        total_minutes: Sum of run minutes.
        total_cost: Sum of run costs.
        run_count: Number of rows merged into this record (>= 1).
        repository: Explicit or inferred repository, "unknown" when neither.
        observed_at: Latest usage timestamp among contributing rows.
    """

    name: str
    total_minutes: float
    total_cost: float
    run_count: int
    repository: str = UNKNOWN_REPOSITORY
    observed_at: datetime | None = None

    @property
    def average_minutes(self) -> float:
        """Average minutes per run, computed on the unrounded total."""
        return self.total_minutes / self.run_count

    @property
    def rounded_minutes(self) -> int:
        """Total minutes rounded half-up for display."""
        return int(round_half_up(self.total_minutes))


@dataclass(frozen=True)
class RepositoryRollup:
    """Usage totals for one repository.

    Attributes:
        repository: Repository identifier.
        workflow_count: Workflow records attributed to the repository.
        run_count: Sum of the records' run counts.
        total_minutes: Sum of the records' minutes.
        total_cost: Sum of the records' costs.
        cost_share_of_total: Percentage of the grand total cost (0-100).
    """

    repository: str
    workflow_count: int
    run_count: int
    total_minutes: float
    total_cost: float
    cost_share_of_total: float


@dataclass(frozen=True)
class SummaryStatistics:
    """Summary of one analysed record set.

    An empty record set yields the all-zero rest state.
    """

    workflow_count: int = 0
    total_minutes: float = 0.0
    total_cost: float = 0.0
    top_consumer_name: str = ""
    top_consumer_share_percentage: float = 0.0
    top_repository: str | None = None
    optimization_suggestions: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DateRange:
    """Inclusive usage timestamp window.

    Raises:
        ValueError: If start is after end.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if as_utc_naive(self.start) > as_utc_naive(self.end):
            raise ValueError(
                f"Date range start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    def contains(self, moment: datetime) -> bool:
        """Return True when moment falls within [start, end]."""
        value = as_utc_naive(moment)
        return as_utc_naive(self.start) <= value <= as_utc_naive(self.end)


@dataclass(frozen=True)
class AnalysisResult:
    """Everything derived from one uploaded usage file.

    Attributes:
        records: Workflow records sorted by total minutes descending.
        summary: Summary statistics for the records.
        repositories: Repository rollups in first-encounter order.
        issues: Row-level diagnostics from parsing.
        source_row_count: Non-blank data rows in the file.
        skipped_row_count: Rows rejected by row validation.
    """

    records: tuple[WorkflowRecord, ...]
    summary: SummaryStatistics
    repositories: tuple[RepositoryRollup, ...] = ()
    issues: tuple[RowIssue, ...] = ()
    source_row_count: int = 0
    skipped_row_count: int = 0


def as_utc_naive(moment: datetime) -> datetime:
    """Normalize a datetime to naive UTC so aware and naive values compare."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)
