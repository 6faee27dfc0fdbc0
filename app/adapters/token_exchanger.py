"""IAM token exchange adapter for signed service-account assertions."""

from __future__ import annotations

import logging
from typing import Final

import httpx

from app.domain import AccessToken, domain_parse_utc_timestamp

from .assertion_signer import IAM_TOKEN_URL
from .errors import TokenExchangeError
from .http_json import adapter_build_http_client, adapter_contract_error, adapter_request_json
from .interfaces import TokenExchangerPort

logger = logging.getLogger(__name__)


class IamTokenExchanger(TokenExchangerPort):
    """Exchange signed assertions for IAM tokens over HTTP."""

    _DEFAULT_TIMEOUT_SECONDS: Final[float] = 10.0

    def __init__(
        self,
        token_url: str = IAM_TOKEN_URL,
        request_timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.Client | None = None,
    ):
        """Initialize IAM token exchanger.

        Args:
            token_url: Token issuance endpoint.
            request_timeout_seconds: Request timeout in seconds.
            http_client: Optional preconfigured HTTP client.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when URL is blank or timeout is not positive.
        """

        if not token_url.strip():
            raise ValueError("token_url must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._token_url = token_url.strip()
        self._request_timeout_seconds = request_timeout_seconds
        self._http_client = http_client or adapter_build_http_client(request_timeout_seconds)

    def adapter_exchange_assertion(self, signed_assertion: str) -> AccessToken:
        """Exchange one signed assertion for an access token.

        Args:
            signed_assertion: Compact signed assertion.

        Returns:
            AccessToken: Issued token value and expiry.

        Raises:
            TokenExchangeError: Raised on transport, HTTP or payload failure.
        """

        status_code, payload = adapter_request_json(
            self._http_client,
            "POST",
            self._token_url,
            error_type=TokenExchangeError,
            target=self._token_url,
            json={"jwt": signed_assertion},
            headers={"Content-Type": "application/json"},
            timeout=self._request_timeout_seconds,
        )

        if not isinstance(payload, dict):
            raise adapter_contract_error(
                error_type=TokenExchangeError,
                target=self._token_url,
                status_code=status_code,
                detail="response body is not a JSON object",
            )

        token_value = payload.get("iamToken")
        if not isinstance(token_value, str) or not token_value.strip():
            raise adapter_contract_error(
                error_type=TokenExchangeError,
                target=self._token_url,
                status_code=status_code,
                detail="response is missing iamToken",
            )

        try:
            expires_at = domain_parse_utc_timestamp(payload.get("expiresAt"))
        except ValueError as error:
            raise adapter_contract_error(
                error_type=TokenExchangeError,
                target=self._token_url,
                status_code=status_code,
                detail="response has missing or invalid expiresAt",
                cause=error,
            ) from error

        logger.info("IAM token issued, expires_at=%s", expires_at.isoformat())
        return AccessToken(value=token_value, expires_at=expires_at)
