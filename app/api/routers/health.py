"""Health endpoint router composition for app, credential and scheduler state."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.adapters import AccessTokenProviderPort
from app.jobs import WeeklyReportScheduler


def api_create_health_router(
    token_provider: AccessTokenProviderPort,
    scheduler: WeeklyReportScheduler | None = None,
) -> APIRouter:
    """Create health-check router.

    Args:
        token_provider: IAM token cache whose state is reported.
        scheduler: Optional weekly scheduler whose state is reported.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when token_provider is invalid.
    """

    if token_provider is None:
        raise ValueError("token_provider must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application, token cache and scheduler state.

        The IAM token state is informational; `absent` and `stale` tokens are
        refreshed on the next summarization call.

        Returns:
            JSONResponse: Health payload, 503 when an enabled scheduler thread died.

        Raises:
            RuntimeError: Raised if state inspection fails.
        """

        scheduler_state = "disabled"
        next_run_at = None
        if scheduler is not None:
            scheduler_state = "running" if scheduler.scheduler_is_running() else "stopped"
            next_fire_time = scheduler.scheduler_next_fire_time()
            next_run_at = next_fire_time.isoformat() if next_fire_time is not None else None

        payload = {
            "status": "degraded" if scheduler_state == "stopped" else "ok",
            "app": "up",
            "iam_token": token_provider.adapter_token_state(),
            "scheduler": scheduler_state,
            "next_run_at": next_run_at,
        }
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE if scheduler_state == "stopped" else status.HTTP_200_OK
        return JSONResponse(content=payload, status_code=status_code)

    return router
