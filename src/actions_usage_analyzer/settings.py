"""Service settings for the Actions Usage Analyzer."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the Actions Usage Analyzer service.

    Covers CSV parsing strictness, optimization suggestion thresholds,
    table defaults, upload limits, and logging output.
    """

    service_name: str = "actions-usage-analyzer"
    version: str = "0.1.0"

    # Parsing: False keeps rows with unparsable numbers (coerced to 0),
    # True rejects them as row issues
    strict_numeric_parsing: bool = False

    # Optimization suggestion thresholds
    high_cost_multiplier: float = 2.0  # Workflow cost above 2x the mean cost is flagged
    repository_share_threshold_pct: float = 30.0  # Repository above 30% of total cost is flagged

    # Table defaults
    top_workflows_count: int = 10
    default_page_size: int = 10
    max_reported_issues: int = 100  # Row issues returned per response; the full count is always reported

    # Upload limits
    max_upload_bytes: int = 20 * 1024 * 1024

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(env_prefix="ACTIONS_ANALYZER_")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build and cache settings from the environment."""
    return Settings()
