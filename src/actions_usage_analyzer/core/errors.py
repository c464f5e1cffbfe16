"""Fatal error taxonomy for usage CSV analysis.

Each error aborts the whole file before aggregation and carries enough
detail for direct display to the user. Row-level problems are not errors;
they are reported as RowIssue values next to the validated rows.
"""
from __future__ import annotations

from typing import Any, Iterable


class UsageAnalysisError(ValueError):
    """Base class for fatal usage analysis errors."""

    kind: str = "analysis_error"

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for an API error payload."""
        return {"error": self.kind, "message": str(self)}


class SchemaError(UsageAnalysisError):
    """Raised when required CSV columns are missing from the header.

    Attributes:
        missing_columns: Required columns absent from the header.
        found_columns: Trimmed header columns that were present.
    """

    kind = "schema_error"

    def __init__(self, missing_columns: Iterable[str], found_columns: Iterable[str]) -> None:
        self.missing_columns = tuple(missing_columns)
        self.found_columns = tuple(found_columns)
        found = ", ".join(self.found_columns) if self.found_columns else "(none)"
        super().__init__(
            f"CSV is missing required columns: {', '.join(self.missing_columns)}. "
            f"Found columns: {found}"
        )

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["missing_columns"] = list(self.missing_columns)
        payload["found_columns"] = list(self.found_columns)
        return payload


class ParseError(UsageAnalysisError):
    """Raised when the CSV text is structurally malformed.

    Messages are de-duplicated while keeping first-seen order.
    """

    kind = "parse_error"

    def __init__(self, messages: Iterable[str]) -> None:
        self.messages = tuple(dict.fromkeys(messages))
        super().__init__(f"Error parsing CSV: {', '.join(self.messages)}")

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["messages"] = list(self.messages)
        return payload


class EmptyInputError(UsageAnalysisError):
    """Raised when the CSV has no usable data rows."""

    kind = "empty_input"

    def __init__(self, message: str = "The CSV file appears to be empty") -> None:
        super().__init__(message)


__all__ = ["EmptyInputError", "ParseError", "SchemaError", "UsageAnalysisError"]
