"""Classification of raw transport and protocol failures into error kinds."""

from __future__ import annotations

import smtplib
import socket
from typing import Any

import httpx

from .errors import ClassifiedError, ErrorKind, ReportAdapterError

_UNREACHABLE_HTTPX_ERRORS = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
    httpx.ProxyError,
)


def adapter_classify_error(raw_error: BaseException, target: str | None = None) -> ClassifiedError:
    """Map one raw failure to a classified error.

    Kinds are checked in priority order: a received non-success response is
    `REMOTE_REJECTED`, an attempted request without response is
    `REMOTE_UNREACHABLE`, anything else is `LOCAL_FAILURE`.

    Args:
        raw_error: Raised exception to classify.
        target: Optional endpoint label included in the message.

    Returns:
        ClassifiedError: Normalized classification with original cause attached.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if isinstance(raw_error, ReportAdapterError):
        return raw_error.classified

    target_label = target or "remote endpoint"

    if isinstance(raw_error, httpx.HTTPStatusError):
        status_code = raw_error.response.status_code
        remote_message = adapter_extract_remote_message(raw_error.response)
        return ClassifiedError(
            kind=ErrorKind.REMOTE_REJECTED,
            message=(
                f"Failed to get data from {target_label} because server returned "
                f"a status code {status_code} with message {remote_message or 'n/a'}"
            ),
            status_code=status_code,
            remote_message=remote_message,
            cause=raw_error,
        )

    if isinstance(raw_error, smtplib.SMTPResponseException):
        remote_message = _adapter_decode_smtp_message(raw_error.smtp_error)
        return ClassifiedError(
            kind=ErrorKind.REMOTE_REJECTED,
            message=(
                f"Failed to deliver to {target_label} because server returned "
                f"a status code {raw_error.smtp_code} with message {remote_message or 'n/a'}"
            ),
            status_code=int(raw_error.smtp_code),
            remote_message=remote_message,
            cause=raw_error,
        )

    if isinstance(raw_error, smtplib.SMTPRecipientsRefused) and raw_error.recipients:
        refused_address, (smtp_code, smtp_error) = next(iter(raw_error.recipients.items()))
        remote_message = _adapter_decode_smtp_message(smtp_error)
        return ClassifiedError(
            kind=ErrorKind.REMOTE_REJECTED,
            message=(
                f"Failed to deliver to {target_label} because server refused recipient {refused_address} "
                f"with status code {smtp_code} and message {remote_message or 'n/a'}"
            ),
            status_code=int(smtp_code),
            remote_message=remote_message,
            cause=raw_error,
        )

    if isinstance(raw_error, _UNREACHABLE_HTTPX_ERRORS) or isinstance(
        raw_error, (smtplib.SMTPServerDisconnected, TimeoutError, ConnectionError, socket.gaierror)
    ):
        return ClassifiedError(
            kind=ErrorKind.REMOTE_UNREACHABLE,
            message=f"Failed to get data from {target_label} because server is not responding",
            cause=raw_error,
        )

    return ClassifiedError(
        kind=ErrorKind.LOCAL_FAILURE,
        message=f"Unknown error with message {raw_error}",
        cause=raw_error,
    )


def adapter_extract_remote_message(response: httpx.Response) -> str | None:
    """Extract structured error message from a JSON error body.

    Supports `{"message": ...}` and `{"error": {"message": ...}}` shapes.

    Args:
        response: Received HTTP response.

    Returns:
        str | None: Remote message when present, else None.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    try:
        payload: Any = response.json()
    except ValueError:
        return None

    if not isinstance(payload, dict):
        return None

    message = payload.get("message")
    if isinstance(message, str) and message.strip():
        return message.strip()

    nested_error = payload.get("error")
    if isinstance(nested_error, dict):
        nested_message = nested_error.get("message")
        if isinstance(nested_message, str) and nested_message.strip():
            return nested_message.strip()
    return None


def _adapter_decode_smtp_message(smtp_error: bytes | str) -> str | None:
    if isinstance(smtp_error, bytes):
        smtp_error = smtp_error.decode("utf-8", errors="replace")
    normalized_message = smtp_error.strip()
    return normalized_message or None
