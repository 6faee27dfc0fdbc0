"""Run timeline events recorded by the report orchestrator."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .timestamps import domain_format_utc_timestamp


def domain_build_stage_event(
    stage: str,
    status: str,
    details: dict[str, Any] | None = None,
    occurred_at: datetime | None = None,
) -> dict[str, object]:
    """Build one JSON-safe stage event for a report run timeline.

    Args:
        stage: Pipeline stage (`run`, `fetch`, `summarize` or `send`).
        status: Stage status marker such as `started`, `completed` or `failed`.
        details: Optional structured details object.
        occurred_at: Optional event time, defaults to current UTC time.

    Returns:
        dict[str, object]: Stage event with millisecond UTC `at_utc` timestamp.

    Raises:
        ValueError: Raised when stage or status is blank.
    """

    if not stage.strip():
        raise ValueError("stage must not be blank")
    if not status.strip():
        raise ValueError("status must not be blank")

    stage_event: dict[str, object] = {
        "stage": stage,
        "status": status,
        "at_utc": domain_format_utc_timestamp(occurred_at or datetime.now(timezone.utc)),
    }
    if details:
        stage_event["details"] = details
    return stage_event
