"""Regression tests for boundary error classification."""

from __future__ import annotations

import smtplib

import httpx

from app.adapters import ClassifiedError, ErrorKind, FeedbackFetchError, adapter_classify_error
from app.adapters.error_classifier import adapter_extract_remote_message


def _build_request() -> httpx.Request:
    return httpx.Request("GET", "https://feedback.example.test/feedbacks")


def test_adapters_classify_non_success_response_as_remote_rejected_with_status() -> None:
    """Classify non-2xx responses as rejected and carry status and body message.

    Returns:
        None: Assertions validate classification.

    Raises:
        AssertionError: Raised when kind, status or message are not carried.
    """

    request = _build_request()
    response = httpx.Response(403, json={"message": "forbidden app"}, request=request)
    error = httpx.HTTPStatusError("403 Forbidden", request=request, response=response)

    classified = adapter_classify_error(error, target="feedback API")

    assert classified.kind is ErrorKind.REMOTE_REJECTED
    assert classified.status_code == 403
    assert classified.remote_message == "forbidden app"
    assert "403" in classified.message
    assert "forbidden app" in classified.message
    assert classified.cause is error


def test_adapters_classify_nested_error_message_shape() -> None:
    """Extract `error.message` when the body nests the message.

    Returns:
        None: Assertions validate nested message extraction.

    Raises:
        AssertionError: Raised when nested message is not extracted.
    """

    response = httpx.Response(500, json={"error": {"message": "model overloaded"}}, request=_build_request())

    assert adapter_extract_remote_message(response) == "model overloaded"


def test_adapters_classify_non_json_body_has_no_remote_message() -> None:
    """Return no remote message for non-JSON error bodies.

    Returns:
        None: Assertions validate fallback.

    Raises:
        AssertionError: Raised when a message is invented.
    """

    request = _build_request()
    response = httpx.Response(502, text="<html>Bad Gateway</html>", request=request)
    error = httpx.HTTPStatusError("502", request=request, response=response)

    classified = adapter_classify_error(error)

    assert classified.kind is ErrorKind.REMOTE_REJECTED
    assert classified.status_code == 502
    assert classified.remote_message is None


def test_adapters_classify_timeout_and_network_errors_as_remote_unreachable() -> None:
    """Classify sent requests without response as unreachable.

    Returns:
        None: Assertions validate classification.

    Raises:
        AssertionError: Raised when transport errors are misclassified.
    """

    request = _build_request()
    raw_errors = [
        httpx.ConnectTimeout("timed out", request=request),
        httpx.ReadTimeout("timed out", request=request),
        httpx.ConnectError("connection refused", request=request),
        httpx.RemoteProtocolError("server disconnected", request=request),
        TimeoutError("socket timed out"),
        ConnectionRefusedError("refused"),
        smtplib.SMTPServerDisconnected("closed"),
    ]

    for raw_error in raw_errors:
        classified = adapter_classify_error(raw_error)
        assert classified.kind is ErrorKind.REMOTE_UNREACHABLE, type(raw_error).__name__
        assert classified.status_code is None


def test_adapters_classify_errors_before_request_as_local_failure() -> None:
    """Classify failures without an attempted request as local.

    Returns:
        None: Assertions validate classification.

    Raises:
        AssertionError: Raised when local errors are misclassified.
    """

    for raw_error in (ValueError("bad input"), KeyError("id"), httpx.UnsupportedProtocol("ftp")):
        classified = adapter_classify_error(raw_error)
        assert classified.kind is ErrorKind.LOCAL_FAILURE, type(raw_error).__name__


def test_adapters_classify_smtp_response_as_remote_rejected() -> None:
    """Classify SMTP reply errors as rejected with SMTP code.

    Returns:
        None: Assertions validate classification.

    Raises:
        AssertionError: Raised when SMTP code is not carried.
    """

    classified = adapter_classify_error(smtplib.SMTPAuthenticationError(535, b"5.7.8 authentication failed"))

    assert classified.kind is ErrorKind.REMOTE_REJECTED
    assert classified.status_code == 535
    assert classified.remote_message == "5.7.8 authentication failed"


def test_adapters_classify_returns_existing_classification_for_wrapped_errors() -> None:
    """Keep the classification of already wrapped boundary errors.

    Returns:
        None: Assertions validate pass-through.

    Raises:
        AssertionError: Raised when classification is replaced.
    """

    classified = ClassifiedError(kind=ErrorKind.REMOTE_UNREACHABLE, message="feedback API is not responding")
    wrapped_error = FeedbackFetchError(classified.message, classified)

    assert adapter_classify_error(wrapped_error) is classified
    assert wrapped_error.kind is ErrorKind.REMOTE_UNREACHABLE


def test_adapters_classify_smtp_refused_recipients_as_remote_rejected() -> None:
    """Classify refused recipients as rejected with the first refusal code.

    Returns:
        None: Assertions validate classification.

    Raises:
        AssertionError: Raised when refused recipients are treated as local failures.
    """

    raw_error = smtplib.SMTPRecipientsRefused({"team@example.test": (550, b"5.1.1 mailbox unavailable")})

    classified = adapter_classify_error(raw_error, target="smtp://smtp.example.test:465")

    assert classified.kind is ErrorKind.REMOTE_REJECTED
    assert classified.status_code == 550
    assert classified.remote_message == "5.1.1 mailbox unavailable"
    assert "team@example.test" in classified.message
    assert classified.cause is raw_error
