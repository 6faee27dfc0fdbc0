"""Report API router composition for manual trigger and last-run diagnostics."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.jobs import JobExecutionResult, JobOrchestratorPort, ReportRunAlreadyActiveError


def api_create_report_router(report_orchestrator: JobOrchestratorPort) -> APIRouter:
    """Create report router with trigger and last-run endpoints.

    Args:
        report_orchestrator: Job orchestrator for report trigger execution.

    Returns:
        APIRouter: Router exposing report APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if report_orchestrator is None:
        raise ValueError("report_orchestrator must not be None")

    router = APIRouter(prefix="/report", tags=["report"])

    @router.post("/run")
    def api_report_run_trigger() -> JSONResponse:
        """Run the weekly report once, synchronously.

        Returns:
            JSONResponse: Trigger result payload, 409 when a run is already active.

        Raises:
            RuntimeError: Raised when execution fails unexpectedly.
        """

        try:
            execution_result = report_orchestrator.job_execute(job_name="weekly_report")
        except ReportRunAlreadyActiveError:
            payload = {
                "status": "error",
                "message": "run already active",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_409_CONFLICT)

        payload = {
            "job_name": execution_result.job_name,
            "status": execution_result.status,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/runs/last")
    def api_report_last_run() -> JSONResponse:
        """Return the most recent run with its stage timeline.

        Returns:
            JSONResponse: Last run payload or 404 when no run completed yet.

        Raises:
            RuntimeError: Raised when result serialization fails.
        """

        execution_result = report_orchestrator.job_last_result()
        if execution_result is None:
            payload = {
                "status": "error",
                "message": "no report run recorded",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_404_NOT_FOUND)

        return JSONResponse(
            content=api_serialize_execution_result(execution_result),
            status_code=status.HTTP_200_OK,
        )

    return router


def api_serialize_execution_result(execution_result: JobExecutionResult) -> dict[str, object]:
    """Serialize one execution result for API responses.

    Args:
        execution_result: Job execution result.

    Returns:
        dict[str, object]: JSON-safe payload. Tracebacks are omitted.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    diagnostics: list[dict[str, object]] = []
    for event in execution_result.diagnostics:
        serialized_event = dict(event)
        details = serialized_event.get("details")
        if isinstance(details, dict):
            serialized_event["details"] = {key: value for key, value in details.items() if key != "traceback"}
        diagnostics.append(serialized_event)

    return {
        "job_name": execution_result.job_name,
        "status": execution_result.status,
        "diagnostics": diagnostics,
    }
