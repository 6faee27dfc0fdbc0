"""Short-lived shared-secret bearer credentials for the internal feedback API."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Final

import jwt

from .errors import ClassifiedError, ErrorKind, SigningError
from .interfaces import BearerTokenProviderPort

INTERNAL_TOKEN_ALGORITHM: Final[str] = "HS256"
INTERNAL_TOKEN_APP_CLAIM: Final[str] = "feedback_report"


class InternalJwtTokenProvider(BearerTokenProviderPort):
    """Mint one HS256 JWT per call, signed with the shared internal secret.

    The credential path is independent of the IAM token cache, so feedback
    fetches never wait on or consume the cached IAM token.
    """

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = 60,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize internal token provider.

        Args:
            secret: Shared HMAC secret.
            ttl_seconds: Token lifetime in seconds.
            clock: Optional provider of offset-aware current UTC time.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when secret is blank or TTL is not positive.
        """

        if not secret.strip():
            raise ValueError("secret must not be blank")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")

        self._secret = secret
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def adapter_get_bearer_token(self) -> str:
        """Mint one internal bearer credential.

        Returns:
            str: Compact HS256 JWT with `app`, `iat` and `exp` claims.

        Raises:
            SigningError: Raised when signing fails.
        """

        issued_at = self._clock().replace(microsecond=0)
        claims = {
            "app": INTERNAL_TOKEN_APP_CLAIM,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._ttl).timestamp()),
        }
        try:
            return jwt.encode(claims, self._secret, algorithm=INTERNAL_TOKEN_ALGORITHM)
        except (jwt.PyJWTError, ValueError, TypeError) as error:
            message = f"Failed to sign internal feedback token: {type(error).__name__}"
            raise SigningError(
                message,
                ClassifiedError(kind=ErrorKind.LOCAL_FAILURE, message=message, cause=error),
            ) from error
