"""Tests for completion summarizer request shape and response handling."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from app.adapters import (
    ClassifiedError,
    CompletionSummarizer,
    ErrorKind,
    SummarizationError,
    TokenExchangeError,
)
from app.adapters.summarizer import CONTENT_FILTER_STATUS
from app.domain import AccessToken

_COMPLETION_URL = "https://llm.example.test/foundationModels/v1/completion"


class _TokenProviderStub:
    """Access token provider stub."""

    def adapter_get_valid_token(self) -> AccessToken:
        return AccessToken(value="iam-token", expires_at=datetime(2026, 10, 17, 12, tzinfo=timezone.utc))

    def adapter_token_state(self, now: datetime | None = None) -> str:
        _ = now
        return "valid"


class _FailingTokenProviderStub(_TokenProviderStub):
    """Access token provider stub whose refresh always fails."""

    def adapter_get_valid_token(self) -> AccessToken:
        classified = ClassifiedError(kind=ErrorKind.REMOTE_UNREACHABLE, message="issuer is not responding")
        raise TokenExchangeError(classified.message, classified)


def _completion_payload(text: str, status: str = "ALTERNATIVE_STATUS_FINAL") -> dict[str, object]:
    return {
        "result": {
            "alternatives": [
                {"message": {"role": "assistant", "text": text}, "status": status},
                {"message": {"role": "assistant", "text": "second"}, "status": status},
            ],
            "usage": {"inputTextTokens": "10", "completionTokens": "5", "totalTokens": "15"},
            "modelVersion": "rc",
        }
    }


def _build_summarizer(handler, token_provider=None) -> CompletionSummarizer:
    return CompletionSummarizer(
        folder_id="folder-1",
        model="yandexgpt-32k/rc",
        instruction="Summarize the feedback.",
        token_provider=token_provider or _TokenProviderStub(),
        completion_url=_COMPLETION_URL,
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def test_adapters_summarizer_sends_completion_request_and_returns_first_alternative() -> None:
    """Send model URI, options, messages and headers and return best candidate.

    Returns:
        None: Assertions validate request and returned summary.

    Raises:
        AssertionError: Raised when request or result is incorrect.
    """

    captured_requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        captured_requests.append(request)
        return httpx.Response(200, json=_completion_payload("Users like it."))

    summary_text = _build_summarizer(_handler).adapter_summarize("good\n\nbad\n\n")

    request = captured_requests[0]
    body = json.loads(request.content)
    assert summary_text == "Users like it."
    assert request.method == "POST"
    assert request.headers["Authorization"] == "Bearer iam-token"
    assert request.headers["x-folder-id"] == "folder-1"
    assert body["modelUri"] == "gpt://folder-1/yandexgpt-32k/rc"
    assert body["completionOptions"] == {"stream": False, "temperature": 0.1, "maxTokens": "32000"}
    assert body["messages"] == [
        {"role": "system", "text": "Summarize the feedback."},
        {"role": "user", "text": "good\n\nbad\n\n"},
    ]


def test_adapters_summarizer_content_filter_is_rejected_with_received_status() -> None:
    """Treat content-filtered best candidate as remote rejection.

    Returns:
        None: Assertions validate classification.

    Raises:
        AssertionError: Raised when filtered output is returned.
    """

    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_completion_payload("", status=CONTENT_FILTER_STATUS))

    with pytest.raises(SummarizationError) as error_info:
        _build_summarizer(_handler).adapter_summarize("text\n\n")

    assert error_info.value.kind is ErrorKind.REMOTE_REJECTED
    assert error_info.value.classified.status_code == 200
    assert "sensitive content" in str(error_info.value)


def test_adapters_summarizer_maps_nested_error_message() -> None:
    """Carry nested `error.message` from rejected completion responses.

    Returns:
        None: Assertions validate classification.

    Raises:
        AssertionError: Raised when remote message is lost.
    """

    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": {"grpcCode": 13, "message": "internal model error"}})

    with pytest.raises(SummarizationError) as error_info:
        _build_summarizer(_handler).adapter_summarize("text\n\n")

    assert error_info.value.kind is ErrorKind.REMOTE_REJECTED
    assert error_info.value.classified.status_code == 500
    assert error_info.value.classified.remote_message == "internal model error"


def test_adapters_summarizer_token_failure_prevents_completion_call() -> None:
    """Propagate token failure without calling the completion endpoint.

    Returns:
        None: Assertions validate propagation and absence of calls.

    Raises:
        AssertionError: Raised when completion endpoint is called.
    """

    captured_requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        captured_requests.append(request)
        return httpx.Response(200, json=_completion_payload("unused"))

    with pytest.raises(TokenExchangeError):
        _build_summarizer(_handler, token_provider=_FailingTokenProviderStub()).adapter_summarize("text\n\n")

    assert captured_requests == []


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"result": {"alternatives": []}},
        {"result": {"alternatives": [{"status": "ALTERNATIVE_STATUS_FINAL"}]}},
    ],
)
def test_adapters_summarizer_rejects_missing_alternative_text(payload: dict[str, object]) -> None:
    """Raise remote-rejected error when no summary text is present.

    Args:
        payload: Malformed completion payload.

    Returns:
        None: Assertions validate contract error.

    Raises:
        AssertionError: Raised when malformed payload is accepted.
    """

    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    with pytest.raises(SummarizationError) as error_info:
        _build_summarizer(_handler).adapter_summarize("text\n\n")

    assert error_info.value.kind is ErrorKind.REMOTE_REJECTED
