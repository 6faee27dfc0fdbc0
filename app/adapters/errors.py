"""Project-native classified exceptions for external boundary failures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Failure kinds applied uniformly at every external boundary."""

    REMOTE_REJECTED = "remote_rejected"
    REMOTE_UNREACHABLE = "remote_unreachable"
    LOCAL_FAILURE = "local_failure"


@dataclass(frozen=True)
class ClassifiedError:
    """Normalized description of one external boundary failure.

    Attributes:
        kind: Failure kind.
        message: Human-readable diagnostic message.
        status_code: Remote status code when a response arrived.
        remote_message: Structured error message carried by the remote response.
        cause: Original raw exception, when any.
    """

    kind: ErrorKind
    message: str
    status_code: int | None = None
    remote_message: str | None = None
    cause: BaseException | None = None

    def classified_log_context(self) -> dict[str, object]:
        """Return structured context suitable for log records and diagnostics.

        Returns:
            dict[str, object]: Kind, message, status code and remote message.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {
            "error_kind": self.kind.value,
            "error_message": self.message,
            "status_code": self.status_code,
            "remote_message": self.remote_message,
            "cause_type": type(self.cause).__name__ if self.cause is not None else None,
        }


class ReportAdapterError(Exception):
    """Base exception for classified boundary failures.

    Attributes:
        classified: Classification of the failure.
    """

    def __init__(self, message: str, classified: ClassifiedError):
        super().__init__(message)
        self.classified = classified

    @property
    def kind(self) -> ErrorKind:
        """Return the failure kind carried by this error."""

        return self.classified.kind


class SigningError(ReportAdapterError):
    """Service-account assertion could not be built or signed."""


class TokenExchangeError(ReportAdapterError):
    """Signed assertion could not be exchanged for an access token."""


class FeedbackFetchError(ReportAdapterError):
    """Feedback records could not be fetched from the feedback API."""


class SummarizationError(ReportAdapterError):
    """Completion endpoint did not produce a usable summary."""


class MailDeliveryError(ReportAdapterError):
    """Report email could not be delivered."""
