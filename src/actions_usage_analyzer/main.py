"""Actions Usage Analyzer service entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI

from actions_usage_analyzer.observability import configure_logging
from actions_usage_analyzer.settings import get_settings

settings = get_settings()
configure_logging(settings)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    logger.info(
        "actions-usage-analyzer starting",
        service=settings.service_name,
        strict_numeric_parsing=settings.strict_numeric_parsing,
        max_upload_bytes=settings.max_upload_bytes,
    )
    yield
    logger.info("actions-usage-analyzer shutting down")


app = FastAPI(
    title="Actions Usage Analyzer",
    version=settings.version,
    lifespan=lifespan,
)


@app.get("/api/v1/health", tags=["health"])
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok", "service": settings.service_name}


from actions_usage_analyzer.api.routes import router  # noqa: E402

app.include_router(router, prefix="/api/v1")
