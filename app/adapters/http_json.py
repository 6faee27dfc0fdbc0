"""Shared JSON-over-HTTP request helper with classified failure mapping."""

from __future__ import annotations

from typing import Any, Final

import httpx

from .error_classifier import adapter_classify_error
from .errors import ClassifiedError, ErrorKind, ReportAdapterError

ADAPTER_USER_AGENT: Final[str] = "feedback-report/1.0 (Python/httpx)"


def adapter_build_http_client(timeout_seconds: float) -> httpx.Client:
    """Create an `httpx.Client` with bounded timeout and default headers.

    Args:
        timeout_seconds: Total per-request timeout bound.

    Returns:
        httpx.Client: Configured client instance.

    Raises:
        ValueError: Raised when timeout is not positive.
    """

    if timeout_seconds <= 0:
        raise ValueError("timeout_seconds must be > 0")
    return httpx.Client(
        timeout=httpx.Timeout(timeout_seconds),
        headers={"User-Agent": ADAPTER_USER_AGENT},
    )


def adapter_request_json(
    client: httpx.Client,
    method: str,
    url: str,
    error_type: type[ReportAdapterError],
    target: str,
    **request_options: Any,
) -> tuple[int, Any]:
    """Execute one HTTP request and decode the JSON response body.

    Args:
        client: HTTP client used for the request.
        method: HTTP method.
        url: Endpoint URL.
        error_type: Boundary error type raised on failure.
        target: Endpoint label used in diagnostic messages.
        **request_options: Extra `httpx.Client.request` keyword arguments.

    Returns:
        tuple[int, Any]: Response status code and decoded JSON payload.

    Raises:
        ReportAdapterError: Raised as `error_type` for any URL, transport, HTTP or decoding failure.
    """

    try:
        response = client.request(method, url, **request_options)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as error:
        classified = adapter_classify_error(error, target=target)
        raise error_type(classified.message, classified) from error

    try:
        return response.status_code, response.json()
    except ValueError as error:
        raise adapter_contract_error(
            error_type=error_type,
            target=target,
            status_code=response.status_code,
            detail="response body is not valid JSON",
            cause=error,
        ) from error


def adapter_contract_error(
    error_type: type[ReportAdapterError],
    target: str,
    status_code: int,
    detail: str,
    cause: BaseException | None = None,
) -> ReportAdapterError:
    """Build a boundary error for a success response that breaks its contract.

    Args:
        error_type: Boundary error type to build.
        target: Endpoint label.
        status_code: Received HTTP status code.
        detail: Contract violation description.
        cause: Optional underlying exception.

    Returns:
        ReportAdapterError: Error classified as `REMOTE_REJECTED`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    message = f"Unexpected response from {target} with status code {status_code}: {detail}"
    return error_type(
        message,
        ClassifiedError(
            kind=ErrorKind.REMOTE_REJECTED,
            message=message,
            status_code=status_code,
            remote_message=None,
            cause=cause,
        ),
    )
