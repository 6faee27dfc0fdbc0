"""LLM completion adapter producing the weekly feedback summary."""

from __future__ import annotations

import logging
from typing import Any, Final

import httpx

from .errors import SummarizationError
from .http_json import adapter_build_http_client, adapter_contract_error, adapter_request_json
from .interfaces import AccessTokenProviderPort, SummarizerPort

logger = logging.getLogger(__name__)

LLM_COMPLETION_URL: Final[str] = "https://llm.api.cloud.yandex.net/foundationModels/v1/completion"
CONTENT_FILTER_STATUS: Final[str] = "ALTERNATIVE_STATUS_CONTENT_FILTER"


class CompletionSummarizer(SummarizerPort):
    """Summarize text through a foundation-model completion endpoint."""

    def __init__(
        self,
        folder_id: str,
        model: str,
        instruction: str,
        token_provider: AccessTokenProviderPort,
        completion_url: str = LLM_COMPLETION_URL,
        temperature: float = 0.1,
        max_tokens: int = 32000,
        request_timeout_seconds: float = 60.0,
        http_client: httpx.Client | None = None,
    ):
        """Initialize completion summarizer.

        Args:
            folder_id: Cloud folder identifier scoping the model and billing.
            model: Model name inside the folder, for example `yandexgpt-32k/rc`.
            instruction: System instruction sent with every request.
            token_provider: IAM access token provider.
            completion_url: Completion endpoint URL.
            temperature: Sampling temperature.
            max_tokens: Completion token budget.
            request_timeout_seconds: Request timeout in seconds.
            http_client: Optional preconfigured HTTP client.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        if not folder_id.strip():
            raise ValueError("folder_id must not be blank")
        if not model.strip():
            raise ValueError("model must not be blank")
        if not instruction.strip():
            raise ValueError("instruction must not be blank")
        if token_provider is None:
            raise ValueError("token_provider must not be None")
        if not completion_url.strip():
            raise ValueError("completion_url must not be blank")
        if not 0.0 <= temperature <= 1.0:
            raise ValueError("temperature must be within [0.0, 1.0]")
        if max_tokens < 1:
            raise ValueError("max_tokens must be >= 1")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._folder_id = folder_id.strip()
        self._model = model.strip()
        self._instruction = instruction
        self._token_provider = token_provider
        self._completion_url = completion_url.strip()
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._request_timeout_seconds = request_timeout_seconds
        self._http_client = http_client or adapter_build_http_client(request_timeout_seconds)

    def adapter_model_uri(self) -> str:
        """Return model URI in `gpt://<folder>/<model>` form."""

        return f"gpt://{self._folder_id}/{self._model}"

    def adapter_build_request_body(self, text: str) -> dict[str, Any]:
        """Build completion request body for one document.

        Args:
            text: User document to summarize.

        Returns:
            dict[str, Any]: JSON request body.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {
            "modelUri": self.adapter_model_uri(),
            "completionOptions": {
                "stream": False,
                "temperature": self._temperature,
                "maxTokens": str(self._max_tokens),
            },
            "messages": [
                {"role": "system", "text": self._instruction},
                {"role": "user", "text": text},
            ],
        }

    def adapter_summarize(self, text: str) -> str:
        """Request a summary for the document and return the best candidate text.

        Args:
            text: Document to summarize.

        Returns:
            str: Summary text of the first alternative.

        Raises:
            SummarizationError: Raised on transport or HTTP failure, content filtering or payload violations.
            SigningError: Raised when the IAM token refresh cannot sign an assertion.
            TokenExchangeError: Raised when the IAM token cannot be obtained.
        """

        access_token = self._token_provider.adapter_get_valid_token()
        status_code, payload = adapter_request_json(
            self._http_client,
            "POST",
            self._completion_url,
            error_type=SummarizationError,
            target=self._completion_url,
            json=self.adapter_build_request_body(text),
            headers={
                "Authorization": f"Bearer {access_token.value}",
                "Content-Type": "application/json",
                "x-folder-id": self._folder_id,
            },
            timeout=self._request_timeout_seconds,
        )

        best_alternative = self._adapter_extract_best_alternative(payload=payload, status_code=status_code)
        alternative_status = str(best_alternative.get("status") or "").strip()
        if alternative_status == CONTENT_FILTER_STATUS:
            raise adapter_contract_error(
                error_type=SummarizationError,
                target=self._completion_url,
                status_code=status_code,
                detail=(
                    "generation was stopped due to the discovery of potentially sensitive content "
                    "in the prompt or generated response"
                ),
            )

        message = best_alternative.get("message")
        summary_text = message.get("text") if isinstance(message, dict) else None
        if not isinstance(summary_text, str):
            raise adapter_contract_error(
                error_type=SummarizationError,
                target=self._completion_url,
                status_code=status_code,
                detail="best alternative has no message text",
            )

        logger.info("Summary received, status=%s, length=%d", alternative_status or "unknown", len(summary_text))
        return summary_text

    def _adapter_extract_best_alternative(self, payload: Any, status_code: int) -> dict[str, Any]:
        """Return the first completion alternative from the response payload.

        Args:
            payload: Decoded JSON response.
            status_code: HTTP status of the response.

        Returns:
            dict[str, Any]: First alternative object.

        Raises:
            SummarizationError: Raised when the payload has no alternatives.
        """

        result = payload.get("result") if isinstance(payload, dict) else None
        alternatives = result.get("alternatives") if isinstance(result, dict) else None
        if not isinstance(alternatives, list) or not alternatives or not isinstance(alternatives[0], dict):
            raise adapter_contract_error(
                error_type=SummarizationError,
                target=self._completion_url,
                status_code=status_code,
                detail="response has no completion alternatives",
            )
        return alternatives[0]
