"""Weekly trigger for the report job with no-overlap guarantees."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .interfaces import JobOrchestratorPort, ReportRunAlreadyActiveError

logger = logging.getLogger(__name__)


def job_schedule_next_fire_time(
    now: datetime,
    weekday: int = 5,
    hour: int = 0,
    minute: int = 0,
    schedule_timezone: str = "UTC",
) -> datetime:
    """Return the next weekly fire time strictly after `now`.

    Defaults match cron `0 0 * * 6` (Saturday midnight).

    Args:
        now: Offset-aware reference time.
        weekday: Fire weekday, Monday is 0 and Sunday is 6.
        hour: Fire hour in the schedule timezone.
        minute: Fire minute in the schedule timezone.
        schedule_timezone: IANA timezone name the schedule is defined in.

    Returns:
        datetime: Offset-aware UTC fire time.

    Raises:
        ValueError: Raised when schedule fields are out of range or `now` is naive.
    """

    if not 0 <= weekday <= 6:
        raise ValueError("weekday must be within [0, 6]")
    if not 0 <= hour <= 23:
        raise ValueError("hour must be within [0, 23]")
    if not 0 <= minute <= 59:
        raise ValueError("minute must be within [0, 59]")
    if now.tzinfo is None or now.utcoffset() is None:
        raise ValueError("now must be offset-aware")

    try:
        schedule_zone = ZoneInfo(schedule_timezone)
    except (ZoneInfoNotFoundError, ValueError) as error:
        raise ValueError(f"unknown schedule_timezone={schedule_timezone}") from error
    local_now = now.astimezone(schedule_zone)
    days_ahead = (weekday - local_now.weekday()) % 7
    candidate_date = local_now.date() + timedelta(days=days_ahead)
    candidate = datetime(
        candidate_date.year,
        candidate_date.month,
        candidate_date.day,
        hour,
        minute,
        tzinfo=schedule_zone,
    )
    if candidate <= local_now:
        candidate_date = candidate_date + timedelta(days=7)
        candidate = datetime(
            candidate_date.year,
            candidate_date.month,
            candidate_date.day,
            hour,
            minute,
            tzinfo=schedule_zone,
        )
    return candidate.astimezone(timezone.utc)


class WeeklyReportScheduler:
    """Fire the report job once per week on a background thread.

    A trigger that fires while a run is still in flight is skipped, so runs
    never overlap.
    """

    _JOB_NAME = "weekly_report"

    def __init__(
        self,
        orchestrator: JobOrchestratorPort,
        weekday: int = 5,
        hour: int = 0,
        minute: int = 0,
        schedule_timezone: str = "UTC",
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize weekly scheduler.

        Args:
            orchestrator: Report job orchestrator.
            weekday: Fire weekday, Monday is 0.
            hour: Fire hour.
            minute: Fire minute.
            schedule_timezone: IANA timezone name.
            clock: Optional provider of offset-aware current UTC time.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when the orchestrator is missing or schedule fields are invalid.
        """

        if orchestrator is None:
            raise ValueError("orchestrator must not be None")
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        # Validates schedule fields and timezone name eagerly.
        job_schedule_next_fire_time(self._clock(), weekday, hour, minute, schedule_timezone)

        self._orchestrator = orchestrator
        self._weekday = weekday
        self._hour = hour
        self._minute = minute
        self._schedule_timezone = schedule_timezone
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._next_fire_time: datetime | None = None

    def scheduler_next_fire_time(self) -> datetime | None:
        """Return the next planned fire time while the scheduler runs."""

        return self._next_fire_time

    def scheduler_is_running(self) -> bool:
        """Return whether the background thread is alive."""

        return self._thread is not None and self._thread.is_alive()

    def scheduler_trigger(self) -> str:
        """Fire one trigger now.

        Returns:
            str: Run status, `skipped` when another run is in flight, or `failed`
                when the trigger itself raised.

        Raises:
            RuntimeError: This method does not raise, so the scheduler loop survives failed runs.
        """

        try:
            execution_result = self._orchestrator.job_execute(job_name=self._JOB_NAME)
        except ReportRunAlreadyActiveError:
            logger.warning("Weekly report trigger skipped: previous run still active")
            return "skipped"
        except Exception:
            logger.exception("Weekly report trigger failed outside the report run")
            return "failed"
        logger.info("Weekly report trigger finished with status=%s", execution_result.status)
        return execution_result.status

    def scheduler_run_forever(self) -> None:
        """Block and fire the job on every weekly fire time until stopped.

        Returns:
            None: Returns after `scheduler_stop` is called.

        Raises:
            RuntimeError: This method does not raise for run failures.
        """

        while not self._stop_event.is_set():
            self._next_fire_time = job_schedule_next_fire_time(
                self._clock(),
                self._weekday,
                self._hour,
                self._minute,
                self._schedule_timezone,
            )
            logger.info("Next weekly report run at %s", self._next_fire_time.isoformat())
            wait_seconds = max(0.0, (self._next_fire_time - self._clock()).total_seconds())
            if self._stop_event.wait(timeout=wait_seconds):
                break
            self.scheduler_trigger()
        self._next_fire_time = None

    def scheduler_start(self) -> None:
        """Start the background scheduler thread if it is not running."""

        if self.scheduler_is_running():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.scheduler_run_forever,
            name="weekly-report-scheduler",
            daemon=True,
        )
        self._thread.start()

    def scheduler_stop(self, timeout_seconds: float | None = 5.0) -> None:
        """Signal the scheduler to stop and wait for the thread to exit.

        Args:
            timeout_seconds: Maximum join wait. An in-flight run is not interrupted.

        Returns:
            None: Stops as side effect.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout_seconds)
            self._thread = None
