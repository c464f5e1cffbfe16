"""Route modules for the Actions Usage Analyzer API."""
from actions_usage_analyzer.api.routes.usage import router

__all__ = ["router"]
