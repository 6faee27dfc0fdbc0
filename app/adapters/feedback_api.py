"""Internal feedback API adapter for weekly feedback retrieval."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from app.domain import FeedbackItem, domain_format_utc_timestamp, domain_parse_utc_timestamp

from .errors import FeedbackFetchError
from .http_json import adapter_build_http_client, adapter_contract_error, adapter_request_json
from .interfaces import BearerTokenProviderPort, FeedbackSourcePort

logger = logging.getLogger(__name__)


class FeedbackApiClient(FeedbackSourcePort):
    """Fetch feedback records from `<base_url>/feedbacks` with a bearer credential."""

    def __init__(
        self,
        base_url: str,
        token_provider: BearerTokenProviderPort,
        request_timeout_seconds: float = 10.0,
        http_client: httpx.Client | None = None,
    ):
        """Initialize feedback API client.

        Args:
            base_url: Feedback API base URL.
            token_provider: Internal bearer credential provider.
            request_timeout_seconds: Request timeout in seconds.
            http_client: Optional preconfigured HTTP client.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        if not base_url.strip():
            raise ValueError("base_url must not be blank")
        if token_provider is None:
            raise ValueError("token_provider must not be None")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._feedback_url = f"{base_url.strip().rstrip('/')}/feedbacks"
        self._token_provider = token_provider
        self._request_timeout_seconds = request_timeout_seconds
        self._http_client = http_client or adapter_build_http_client(request_timeout_seconds)

    def adapter_fetch_feedback(self, window_start: datetime, window_end: datetime) -> list[FeedbackItem]:
        """Fetch feedback records for the window in source order.

        Args:
            window_start: Window start.
            window_end: Window end.

        Returns:
            list[FeedbackItem]: Parsed feedback records.

        Raises:
            FeedbackFetchError: Raised on transport, HTTP or payload failure.
            SigningError: Raised when the bearer credential cannot be minted.
            ValueError: Raised when the window is inverted.
        """

        if window_end < window_start:
            raise ValueError("window_end must not precede window_start")

        bearer_token = self._token_provider.adapter_get_bearer_token()
        status_code, payload = adapter_request_json(
            self._http_client,
            "GET",
            self._feedback_url,
            error_type=FeedbackFetchError,
            target=self._feedback_url,
            params={
                "from": domain_format_utc_timestamp(window_start),
                "to": domain_format_utc_timestamp(window_end),
            },
            headers={"Authorization": f"Bearer {bearer_token}"},
            timeout=self._request_timeout_seconds,
        )

        if not isinstance(payload, list):
            raise adapter_contract_error(
                error_type=FeedbackFetchError,
                target=self._feedback_url,
                status_code=status_code,
                detail="response body is not a JSON list",
            )

        feedback_items = [
            self._adapter_parse_feedback_record(record=record, index=index, status_code=status_code)
            for index, record in enumerate(payload)
        ]
        logger.info("Fetched %d feedback records", len(feedback_items))
        return feedback_items

    def _adapter_parse_feedback_record(self, record: Any, index: int, status_code: int) -> FeedbackItem:
        """Parse one upstream feedback record.

        Args:
            record: Decoded JSON record.
            index: Record position, used in diagnostics.
            status_code: HTTP status of the response.

        Returns:
            FeedbackItem: Parsed record.

        Raises:
            FeedbackFetchError: Raised when the record breaks the payload contract.
        """

        try:
            if not isinstance(record, dict):
                raise ValueError("record is not a JSON object")
            text = record.get("text")
            if not isinstance(text, str):
                raise ValueError("text must be a string")
            return FeedbackItem(
                id=int(record["id"]),
                text=text,
                date=domain_parse_utc_timestamp(record.get("date")),
                filename=str(record.get("filename") or ""),
                path=str(record.get("pathOfFile") or record.get("path") or ""),
            )
        except (KeyError, TypeError, ValueError) as error:
            raise adapter_contract_error(
                error_type=FeedbackFetchError,
                target=self._feedback_url,
                status_code=status_code,
                detail=f"feedback record {index} is invalid: {error}",
                cause=error,
            ) from error
