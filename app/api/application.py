"""FastAPI application factory for the weekly report service.

This module defines API application composition and ties the weekly
scheduler to the application lifespan.
"""

import contextlib
import logging
from typing import AsyncIterator

from fastapi import FastAPI

from app.adapters import AccessTokenProviderPort
from app.config import AppSettings
from app.jobs import JobOrchestratorPort, WeeklyReportScheduler

from .routers import api_create_health_router, api_create_report_router

logger = logging.getLogger(__name__)


def create_api_application(
    settings: AppSettings,
    report_orchestrator: JobOrchestratorPort,
    token_provider: AccessTokenProviderPort,
    scheduler: WeeklyReportScheduler | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        report_orchestrator: Job orchestrator for report trigger execution.
        token_provider: IAM token cache inspected by health checks.
        scheduler: Optional weekly scheduler started for the application lifespan.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when required dependencies are missing.
    """

    if report_orchestrator is None:
        raise ValueError("report_orchestrator must not be None")
    if token_provider is None:
        raise ValueError("token_provider must not be None")

    @contextlib.asynccontextmanager
    async def api_lifespan(_application: FastAPI) -> AsyncIterator[None]:
        if scheduler is not None:
            logger.info("Starting weekly report scheduler")
            scheduler.scheduler_start()
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.scheduler_stop()
                logger.info("Weekly report scheduler stopped")

    application = FastAPI(title="Feedback Report", lifespan=api_lifespan)

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return a minimal service identification payload.

        Returns:
            dict[str, str]: Service name, status and environment.

        Raises:
            RuntimeError: Raised if route handler cannot produce a response.
        """

        return {
            "service": "feedback-report",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(token_provider=token_provider, scheduler=scheduler))
    application.include_router(api_create_report_router(report_orchestrator=report_orchestrator))

    return application
