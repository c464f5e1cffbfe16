"""Business logic services for the Actions Usage Analyzer."""
from __future__ import annotations

from actions_usage_analyzer.core.services.analysis_service import AnalysisTracker, UsageAnalysisService

__all__ = ["AnalysisTracker", "UsageAnalysisService"]
