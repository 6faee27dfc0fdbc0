"""Regression tests for IAM token cache expiry math and single-flight refresh."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from app.adapters import ClassifiedError, ErrorKind, IamTokenCache, TokenExchangeError
from app.domain import AccessToken

_NOW = datetime(2026, 10, 17, 0, 0, tzinfo=timezone.utc)


class _Clock:
    """Mutable clock test double."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class _SignerStub:
    """Signer stub counting sign calls."""

    def __init__(self):
        self.sign_calls: list[datetime] = []

    def adapter_sign_assertion(self, now: datetime) -> str:
        """Return deterministic assertion.

        Args:
            now: Issue timestamp.

        Returns:
            str: Fake compact assertion.

        Raises:
            RuntimeError: This stub does not raise runtime errors.
        """

        self.sign_calls.append(now)
        return f"assertion-{len(self.sign_calls)}"


class _ExchangerStub:
    """Exchanger stub issuing tokens with a fixed lifetime."""

    def __init__(self, clock: _Clock, lifetime: timedelta = timedelta(hours=12), release: threading.Event | None = None):
        self._clock = clock
        self._lifetime = lifetime
        self._release = release
        self.exchange_calls: list[str] = []

    def adapter_exchange_assertion(self, signed_assertion: str) -> AccessToken:
        """Return token expiring after the configured lifetime.

        Args:
            signed_assertion: Signed assertion.

        Returns:
            AccessToken: Issued token.

        Raises:
            RuntimeError: This stub does not raise runtime errors.
        """

        if self._release is not None:
            self._release.wait(timeout=5)
        self.exchange_calls.append(signed_assertion)
        return AccessToken(
            value=f"token-{len(self.exchange_calls)}",
            expires_at=self._clock() + self._lifetime,
        )


class _FailingExchangerStub:
    """Exchanger stub that always reports an unreachable issuer."""

    def adapter_exchange_assertion(self, signed_assertion: str) -> AccessToken:
        _ = signed_assertion
        classified = ClassifiedError(kind=ErrorKind.REMOTE_UNREACHABLE, message="issuer is not responding")
        raise TokenExchangeError(classified.message, classified)


def test_adapters_token_cache_reuses_valid_token_without_new_exchange() -> None:
    """Return cached token on repeated calls while it is valid.

    Returns:
        None: Assertions validate idempotent cache hits.

    Raises:
        AssertionError: Raised when a cache hit triggers an exchange.
    """

    clock = _Clock(_NOW)
    signer = _SignerStub()
    exchanger = _ExchangerStub(clock=clock)
    cache = IamTokenCache(signer=signer, exchanger=exchanger, clock=clock)

    first_token = cache.adapter_get_valid_token()
    clock.now = _NOW + timedelta(hours=5)
    second_token = cache.adapter_get_valid_token()

    assert first_token is second_token
    assert len(exchanger.exchange_calls) == 1
    assert signer.sign_calls == [_NOW]
    assert cache.adapter_token_state() == "valid"


def test_adapters_token_cache_refreshes_when_margin_reaches_expiry() -> None:
    """Refresh once `now + margin` reaches the cached expiry.

    Returns:
        None: Assertions validate boundary behavior.

    Raises:
        AssertionError: Raised when expiry math is incorrect.
    """

    clock = _Clock(_NOW)
    exchanger = _ExchangerStub(clock=clock)
    cache = IamTokenCache(signer=_SignerStub(), exchanger=exchanger, clock=clock)
    first_token = cache.adapter_get_valid_token()

    clock.now = first_token.expires_at - timedelta(hours=1, seconds=1)
    assert cache.adapter_get_valid_token() is first_token

    clock.now = first_token.expires_at - timedelta(hours=1)
    assert cache.adapter_token_state() == "stale"
    refreshed_token = cache.adapter_get_valid_token()

    assert refreshed_token is not first_token
    assert refreshed_token.value == "token-2"
    assert refreshed_token.expires_at > clock.now + timedelta(hours=1)


def test_adapters_token_cache_warns_and_refreshes_when_issued_token_is_inside_margin(caplog) -> None:
    """Warn about short-lived issued tokens and refresh them on every call.

    Args:
        caplog: Pytest log capture fixture.

    Returns:
        None: Assertions validate warning and repeated exchange.

    Raises:
        AssertionError: Raised when short-lived tokens are cached silently.
    """

    clock = _Clock(_NOW)
    exchanger = _ExchangerStub(clock=clock, lifetime=timedelta(hours=1))
    cache = IamTokenCache(signer=_SignerStub(), exchanger=exchanger, clock=clock)

    with caplog.at_level(logging.WARNING, logger="app.adapters.token_cache"):
        cache.adapter_get_valid_token()
        cache.adapter_get_valid_token()

    assert len(exchanger.exchange_calls) == 2
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 2
    assert "safety margin" in warnings[0].getMessage()


def test_adapters_token_cache_propagates_exchange_failure_and_keeps_state_absent() -> None:
    """Propagate classified exchange failures unchanged.

    Returns:
        None: Assertions validate propagation.

    Raises:
        AssertionError: Raised when failure is swallowed or reclassified.
    """

    cache = IamTokenCache(signer=_SignerStub(), exchanger=_FailingExchangerStub(), clock=_Clock(_NOW))

    with pytest.raises(TokenExchangeError) as error_info:
        cache.adapter_get_valid_token()

    assert error_info.value.kind is ErrorKind.REMOTE_UNREACHABLE
    assert cache.adapter_token_state() == "absent"


def test_adapters_token_cache_concurrent_stale_callers_share_one_exchange() -> None:
    """Collapse concurrent refreshes into one exchange call.

    Returns:
        None: Assertions validate single-flight refresh.

    Raises:
        AssertionError: Raised when more than one exchange is issued.
    """

    clock = _Clock(_NOW)
    release = threading.Event()
    exchanger = _ExchangerStub(clock=clock, release=release)
    cache = IamTokenCache(signer=_SignerStub(), exchanger=exchanger, clock=clock)
    received_tokens: list[AccessToken] = []
    received_lock = threading.Lock()

    def _worker() -> None:
        token = cache.adapter_get_valid_token()
        with received_lock:
            received_tokens.append(token)

    workers = [threading.Thread(target=_worker) for _ in range(8)]
    for worker in workers:
        worker.start()
    time.sleep(0.05)
    release.set()
    for worker in workers:
        worker.join(timeout=5)

    assert len(exchanger.exchange_calls) == 1
    assert len(received_tokens) == 8
    assert all(token is received_tokens[0] for token in received_tokens)
