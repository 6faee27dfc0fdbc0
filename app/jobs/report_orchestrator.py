"""Job-layer weekly feedback report orchestrator."""

from __future__ import annotations

import logging
import threading
import traceback
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Sequence

from app.adapters import (
    FeedbackSourcePort,
    MailerPort,
    SummarizerPort,
    adapter_classify_error,
)
from app.domain import EmailDetail, FeedbackItem, domain_build_stage_event

from .interfaces import JobExecutionResult, JobOrchestratorPort, ReportRunAlreadyActiveError

logger = logging.getLogger(__name__)

FEEDBACK_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class WeeklyReportConfig:
    """Configuration values for weekly report execution.

    Attributes:
        email_detail: Static recipients, sender and subject.
        window_days: Length of the feedback window ending at run time.
    """

    email_detail: EmailDetail
    window_days: int = 7


def job_build_feedback_document(feedback_items: Sequence[FeedbackItem]) -> str:
    """Concatenate feedback texts in source order, each followed by a blank line.

    Args:
        feedback_items: Feedback records in source order.

    Returns:
        str: Document passed to the summarizer. The trailing separator is kept.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return "".join(f"{feedback_item.text}{FEEDBACK_SEPARATOR}" for feedback_item in feedback_items)


class WeeklyReportOrchestrator(JobOrchestratorPort):
    """Sequence fetch, summarize and send for one weekly report run."""

    _WEEKLY_REPORT_JOB_NAME = "weekly_report"

    def __init__(
        self,
        feedback_source: FeedbackSourcePort,
        summarizer: SummarizerPort,
        mailer: MailerPort,
        config: WeeklyReportConfig,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize weekly report orchestrator dependencies.

        Args:
            feedback_source: Adapter for feedback retrieval.
            summarizer: Adapter for LLM summarization.
            mailer: Adapter for email delivery.
            config: Report execution configuration.
            clock: Optional provider of offset-aware current UTC time.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if feedback_source is None:
            raise ValueError("feedback_source must not be None")
        if summarizer is None:
            raise ValueError("summarizer must not be None")
        if mailer is None:
            raise ValueError("mailer must not be None")
        if not config.email_detail.to:
            raise ValueError("config.email_detail.to must not be empty")
        if not config.email_detail.sender.strip():
            raise ValueError("config.email_detail.sender must not be blank")
        if config.window_days < 1:
            raise ValueError("config.window_days must be >= 1")

        self._feedback_source = feedback_source
        self._summarizer = summarizer
        self._mailer = mailer
        self._config = config
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._run_lock = threading.Lock()
        self._last_result: JobExecutionResult | None = None

    def job_supported_names(self) -> tuple[str, ...]:
        """Return supported job names.

        Returns:
            tuple[str, ...]: Supported job names.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return (self._WEEKLY_REPORT_JOB_NAME,)

    def job_is_running(self) -> bool:
        """Return whether a report run is currently in flight."""

        return self._run_lock.locked()

    def job_last_result(self) -> JobExecutionResult | None:
        """Return the most recent run result kept in memory."""

        return self._last_result

    def job_run_weekly_report(self) -> JobExecutionResult:
        """Run the weekly report once.

        Returns:
            JobExecutionResult: Final execution status payload.

        Raises:
            ReportRunAlreadyActiveError: Raised when another run is in flight.
        """

        return self.job_execute(job_name=self._WEEKLY_REPORT_JOB_NAME)

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute the weekly report workflow unless another run is in flight.

        Args:
            job_name: Name of job to execute.

        Returns:
            JobExecutionResult: Final execution status payload.

        Raises:
            ValueError: Raised when job name is unsupported.
            ReportRunAlreadyActiveError: Raised when another run is in flight.
        """

        normalized_job_name = job_name.strip()
        if normalized_job_name != self._WEEKLY_REPORT_JOB_NAME:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        if not self._run_lock.acquire(blocking=False):
            raise ReportRunAlreadyActiveError("weekly report run already active")
        try:
            execution_result = self._job_run_pipeline(normalized_job_name)
            self._last_result = execution_result
            return execution_result
        finally:
            self._run_lock.release()

    def _job_run_pipeline(self, normalized_job_name: str) -> JobExecutionResult:
        """Run fetch, summarize and send with a single failure catch point.

        Args:
            normalized_job_name: Validated job name.

        Returns:
            JobExecutionResult: `success` or `failed` result with stage timeline.

        Raises:
            RuntimeError: This helper does not raise runtime errors for classified failures.
        """

        window_end = self._clock()
        window_start = window_end - timedelta(days=self._config.window_days)
        timeline: list[dict[str, object]] = [
            domain_build_stage_event(
                stage="run",
                status="started",
                details={"window_start": window_start.isoformat(), "window_end": window_end.isoformat()},
            )
        ]

        try:
            timeline.append(domain_build_stage_event(stage="fetch", status="started"))
            feedback_items = self._feedback_source.adapter_fetch_feedback(window_start, window_end)
            timeline.append(
                domain_build_stage_event(
                    stage="fetch",
                    status="completed",
                    details={"feedback_count": len(feedback_items)},
                )
            )

            if not feedback_items:
                logger.info("No feedback between %s and %s, report skipped", window_start, window_end)
                timeline.append(
                    domain_build_stage_event(
                        stage="run",
                        status="success",
                        details={"email_sent": False, "skip_reason": "no_feedback_in_window"},
                    )
                )
                return JobExecutionResult(job_name=normalized_job_name, status="success", diagnostics=timeline)

            feedback_document = job_build_feedback_document(feedback_items)

            timeline.append(domain_build_stage_event(stage="summarize", status="started"))
            summary_text = self._summarizer.adapter_summarize(feedback_document)
            timeline.append(
                domain_build_stage_event(
                    stage="summarize",
                    status="completed",
                    details={"document_length": len(feedback_document), "summary_length": len(summary_text)},
                )
            )

            email_detail = self._config.email_detail
            timeline.append(domain_build_stage_event(stage="send", status="started"))
            self._mailer.adapter_send_mail(
                to=email_detail.to,
                sender=email_detail.sender,
                subject=email_detail.subject,
                text_body=summary_text,
                html_body=summary_text,
            )
            timeline.append(
                domain_build_stage_event(
                    stage="send",
                    status="completed",
                    details={"recipient_count": len(email_detail.to)},
                )
            )
            logger.info("Email sent")

            timeline.append(domain_build_stage_event(stage="run", status="success", details={"email_sent": True}))
            return JobExecutionResult(job_name=normalized_job_name, status="success", diagnostics=timeline)
        except Exception as error:
            classified = adapter_classify_error(error)
            logger.error(
                "Weekly report run failed: error_type=%s kind=%s status_code=%s remote_message=%s message=%s",
                type(error).__name__,
                classified.kind.value,
                classified.status_code,
                classified.remote_message,
                classified.message,
                exc_info=error,
            )
            timeline.append(
                domain_build_stage_event(
                    stage="run",
                    status="failed",
                    details={
                        "error_type": type(error).__name__,
                        **classified.classified_log_context(),
                        "traceback": traceback.format_exc(),
                    },
                )
            )
            return JobExecutionResult(job_name=normalized_job_name, status="failed", diagnostics=timeline)
