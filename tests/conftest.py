"""Shared test fixtures for actions-usage-analyzer tests."""

import sys
from pathlib import Path

# Ensure the src/ layout is importable without installing the package.
_SRC_PATH = Path(__file__).parent.parent / "src"
if str(_SRC_PATH) not in sys.path:
    sys.path.insert(0, str(_SRC_PATH))

from datetime import datetime, timezone

import pytest

from actions_usage_analyzer.core.models import UsageRow
from actions_usage_analyzer.settings import Settings


@pytest.fixture
def settings() -> Settings:
    """Provide test settings with safe defaults."""
    return Settings(
        strict_numeric_parsing=False,
        high_cost_multiplier=2.0,
        repository_share_threshold_pct=30.0,
        top_workflows_count=10,
        default_page_size=10,
        max_reported_issues=100,
        max_upload_bytes=1024 * 1024,
    )


@pytest.fixture
def now() -> datetime:
    """Provide a consistent reference time."""
    return datetime(2026, 2, 26, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def usage_csv() -> str:
    """A small usage export covering several workflows and repositories."""
    return (
        "usage_at,workflow_name,repository,quantity,net_amount\n"
        "2026-02-01,acme/api/.github/workflows/ci.yml,acme/api,120,0.96\n"
        "2026-02-02,acme/api/.github/workflows/ci.yml,acme/api,80,0.64\n"
        "2026-02-03,acme/web/.github/workflows/deploy.yml,acme/web,30,0.24\n"
        "2026-02-04,nightly,,50,0.40\n"
        "2026-02-05,null,,999,9.99\n"
    )


@pytest.fixture
def build_rows() -> list[UsageRow]:
    """Two runs of the same workflow."""
    return [
        UsageRow(workflow_name="build", quantity=10.0, net_amount=1.5, row_number=2),
        UsageRow(workflow_name="build", quantity=5.0, net_amount=0.5, row_number=3),
    ]

