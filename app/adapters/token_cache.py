"""In-memory IAM token cache with single-flight refresh."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Final

from app.domain import AccessToken

from .interfaces import AccessTokenProviderPort, AssertionSignerPort, TokenExchangerPort

logger = logging.getLogger(__name__)

# Equal to the assertion lifetime; kept literal, see DESIGN.md open questions.
TOKEN_SAFETY_MARGIN: Final[timedelta] = timedelta(hours=1)


class IamTokenCache(AccessTokenProviderPort):
    """Hold at most one access token and refresh it when near expiry.

    The stale check and the refresh run under one lock, so concurrent callers
    that observe a stale cache trigger exactly one exchange and share its
    result.
    """

    def __init__(
        self,
        signer: AssertionSignerPort,
        exchanger: TokenExchangerPort,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize token cache dependencies.

        Args:
            signer: Service-account assertion signer.
            exchanger: Assertion-to-token exchanger.
            clock: Optional provider of offset-aware current UTC time.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if signer is None:
            raise ValueError("signer must not be None")
        if exchanger is None:
            raise ValueError("exchanger must not be None")

        self._signer = signer
        self._exchanger = exchanger
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._current: AccessToken | None = None
        self._refresh_lock = threading.Lock()

    def adapter_get_valid_token(self) -> AccessToken:
        """Return the cached token, refreshing it first when absent or stale.

        Returns:
            AccessToken: Cached token valid beyond now plus the safety margin, or the freshly
                issued token, which is logged as a warning when it already falls inside the margin.

        Raises:
            SigningError: Raised when the refresh assertion cannot be signed.
            TokenExchangeError: Raised when the refresh exchange fails.
        """

        with self._refresh_lock:
            now = self._clock()
            if self._token_is_usable(self._current, now):
                return self._current

            logger.info("IAM token %s, requesting a new one", "absent" if self._current is None else "stale")
            signed_assertion = self._signer.adapter_sign_assertion(now)
            self._current = self._exchanger.adapter_exchange_assertion(signed_assertion)
            if not self._token_is_usable(self._current, now):
                logger.warning(
                    "Issued IAM token expires at %s, inside the %s safety margin; next call will refresh again",
                    self._current.expires_at.isoformat(),
                    TOKEN_SAFETY_MARGIN,
                )
            return self._current

    def adapter_token_state(self, now: datetime | None = None) -> str:
        """Return cache state label for diagnostics.

        Args:
            now: Optional evaluation time, defaults to the cache clock.

        Returns:
            str: `absent`, `valid` or `stale`.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        current = self._current
        if current is None:
            return "absent"
        evaluated_at = now or self._clock()
        return "valid" if self._token_is_usable(current, evaluated_at) else "stale"

    @staticmethod
    def _token_is_usable(token: AccessToken | None, now: datetime) -> bool:
        if token is None:
            return False
        remaining = token.expires_at - (now + TOKEN_SAFETY_MARGIN)
        return remaining > timedelta(0)
