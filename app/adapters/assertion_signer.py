"""Service-account assertion signing for the IAM token exchange."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Final

import jwt

from app.domain import ServiceAssertion

from .errors import ClassifiedError, ErrorKind, SigningError
from .interfaces import AssertionSignerPort

IAM_TOKEN_URL: Final[str] = "https://iam.api.cloud.yandex.net/iam/v1/tokens"
ASSERTION_LIFETIME: Final[timedelta] = timedelta(hours=1)
ASSERTION_ALGORITHM: Final[str] = "PS256"


def adapter_build_service_assertion(service_account_id: str, now: datetime, audience: str) -> ServiceAssertion:
    """Build the claim set for one service-account assertion.

    Args:
        service_account_id: Service account identifier used as issuer.
        now: Offset-aware UTC issue timestamp.
        audience: Token issuer URL.

    Returns:
        ServiceAssertion: Claim set expiring one hour after `now`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    issued_at = now.replace(microsecond=0)
    return ServiceAssertion(
        audience=audience,
        issuer=service_account_id,
        issued_at=issued_at,
        expires_at=issued_at + ASSERTION_LIFETIME,
    )


def adapter_sign_service_account_assertion(
    service_account_id: str,
    key_id: str,
    private_key: str,
    now: datetime,
    audience: str = IAM_TOKEN_URL,
) -> str:
    """Build and sign one compact service-account assertion.

    Args:
        service_account_id: Service account identifier.
        key_id: Identifier of the authorized key, sent as `kid` header.
        private_key: PEM-encoded RSA private key.
        now: Offset-aware UTC issue timestamp.
        audience: Token issuer URL.

    Returns:
        str: Compact PS256 JWS.

    Raises:
        SigningError: Raised when the key is malformed or signing fails.
    """

    assertion = adapter_build_service_assertion(service_account_id=service_account_id, now=now, audience=audience)
    try:
        return jwt.encode(
            assertion.assertion_claims(),
            private_key,
            algorithm=ASSERTION_ALGORITHM,
            headers={"kid": key_id},
        )
    except (jwt.PyJWTError, ValueError, TypeError, AttributeError) as error:
        message = f"Failed to sign service account assertion: {type(error).__name__}"
        raise SigningError(
            message,
            ClassifiedError(kind=ErrorKind.LOCAL_FAILURE, message=message, cause=error),
        ) from error


class ServiceAccountAssertionSigner(AssertionSignerPort):
    """Assertion signer bound to one service account key."""

    def __init__(self, service_account_id: str, key_id: str, private_key: str, audience: str = IAM_TOKEN_URL):
        """Initialize signer with service account key material.

        Args:
            service_account_id: Service account identifier.
            key_id: Authorized key identifier.
            private_key: PEM-encoded RSA private key.
            audience: Token issuer URL.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when identifiers or key are blank.
        """

        if not service_account_id.strip():
            raise ValueError("service_account_id must not be blank")
        if not key_id.strip():
            raise ValueError("key_id must not be blank")
        if not private_key.strip():
            raise ValueError("private_key must not be blank")
        if not audience.strip():
            raise ValueError("audience must not be blank")

        self._service_account_id = service_account_id.strip()
        self._key_id = key_id.strip()
        self._private_key = private_key
        self._audience = audience.strip()

    def adapter_sign_assertion(self, now: datetime) -> str:
        """Sign one assertion issued at `now`.

        Args:
            now: Offset-aware UTC issue timestamp.

        Returns:
            str: Compact signed assertion.

        Raises:
            SigningError: Raised when signing fails.
        """

        return adapter_sign_service_account_assertion(
            service_account_id=self._service_account_id,
            key_id=self._key_id,
            private_key=self._private_key,
            now=now,
            audience=self._audience,
        )
