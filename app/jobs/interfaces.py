"""Typed interfaces for job-layer orchestration responsibilities."""

from dataclasses import dataclass, field
from typing import Protocol


class ReportRunAlreadyActiveError(RuntimeError):
    """Raised when a report run is triggered while another run is in flight."""


@dataclass(frozen=True)
class JobExecutionResult:
    """Result contract for one workflow execution.

    Attributes:
        job_name: Job identifier.
        status: Final execution state (`success` or `failed`).
        diagnostics: Structured stage timeline captured during the run.
    """

    job_name: str
    status: str
    diagnostics: list[dict[str, object]] = field(default_factory=list)


class JobOrchestratorPort(Protocol):
    """Port definition for orchestrating scheduled report jobs."""

    def job_supported_names(self) -> tuple[str, ...]:
        """Return the set of workflow names this orchestrator can execute.

        Returns:
            tuple[str, ...]: Deterministic list of supported job names.

        Raises:
            RuntimeError: Raised when supported job metadata is unavailable.
        """

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute one named workflow in the job layer.

        Args:
            job_name: Workflow name.

        Returns:
            JobExecutionResult: Final execution status payload.

        Raises:
            ReportRunAlreadyActiveError: Raised when another run is in flight.
        """

    def job_last_result(self) -> JobExecutionResult | None:
        """Return the result of the most recent completed run, if any."""
