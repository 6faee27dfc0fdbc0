"""Job layer package for workflow orchestration boundaries."""

from .interfaces import JobExecutionResult, JobOrchestratorPort, ReportRunAlreadyActiveError
from .report_orchestrator import (
	FEEDBACK_SEPARATOR,
	WeeklyReportConfig,
	WeeklyReportOrchestrator,
	job_build_feedback_document,
)
from .scheduler import WeeklyReportScheduler, job_schedule_next_fire_time

__all__ = [
	"FEEDBACK_SEPARATOR",
	"JobExecutionResult",
	"JobOrchestratorPort",
	"ReportRunAlreadyActiveError",
	"WeeklyReportConfig",
	"WeeklyReportOrchestrator",
	"WeeklyReportScheduler",
	"job_build_feedback_document",
	"job_schedule_next_fire_time",
]
