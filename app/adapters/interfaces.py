"""Typed interfaces for adapter-layer responsibilities."""

from datetime import datetime
from typing import Protocol, Sequence

from app.domain import AccessToken, FeedbackItem


class AssertionSignerPort(Protocol):
    """Port definition for building signed service-account assertions."""

    def adapter_sign_assertion(self, now: datetime) -> str:
        """Build and sign one assertion issued at `now`.

        Args:
            now: Offset-aware UTC issue timestamp.

        Returns:
            str: Compact signed assertion.

        Raises:
            SigningError: Raised when key material is malformed or signing fails.
        """


class TokenExchangerPort(Protocol):
    """Port definition for exchanging signed assertions for access tokens."""

    def adapter_exchange_assertion(self, signed_assertion: str) -> AccessToken:
        """Exchange one signed assertion for a short-lived access token.

        Args:
            signed_assertion: Compact signed assertion.

        Returns:
            AccessToken: Issued token with expiry.

        Raises:
            TokenExchangeError: Raised on any transport, HTTP or payload failure.
        """


class AccessTokenProviderPort(Protocol):
    """Port definition for obtaining a currently valid access token."""

    def adapter_get_valid_token(self) -> AccessToken:
        """Return a token that stays valid beyond the safety margin.

        Returns:
            AccessToken: Cached or freshly issued token.

        Raises:
            SigningError: Raised when a refresh cannot sign an assertion.
            TokenExchangeError: Raised when a refresh exchange fails.
        """

    def adapter_token_state(self, now: datetime | None = None) -> str:
        """Return cache state label (`absent`, `valid` or `stale`)."""


class BearerTokenProviderPort(Protocol):
    """Port definition for minting internal bearer credentials."""

    def adapter_get_bearer_token(self) -> str:
        """Return one bearer credential for internal API calls.

        Returns:
            str: Bearer credential value.

        Raises:
            SigningError: Raised when the credential cannot be signed.
        """


class FeedbackSourcePort(Protocol):
    """Port definition for fetching feedback records for a time window."""

    def adapter_fetch_feedback(self, window_start: datetime, window_end: datetime) -> list[FeedbackItem]:
        """Fetch feedback records created inside the window.

        Args:
            window_start: Inclusive window start.
            window_end: Window end.

        Returns:
            list[FeedbackItem]: Records in source order.

        Raises:
            FeedbackFetchError: Raised on transport, HTTP or payload failure.
        """


class SummarizerPort(Protocol):
    """Port definition for summarizing a text document."""

    def adapter_summarize(self, text: str) -> str:
        """Return summary text for the given document.

        Args:
            text: Document to summarize.

        Returns:
            str: Summary text.

        Raises:
            SummarizationError: Raised when no usable summary is produced.
            TokenExchangeError: Raised when the access token cannot be obtained.
        """


class MailerPort(Protocol):
    """Port definition for delivering one email."""

    def adapter_send_mail(
        self,
        to: Sequence[str],
        sender: str,
        subject: str,
        text_body: str,
        html_body: str,
    ) -> None:
        """Deliver one email with plain-text and HTML bodies.

        Args:
            to: Recipient addresses.
            sender: Sender address.
            subject: Subject line.
            text_body: Plain-text body.
            html_body: HTML body.

        Returns:
            None: Delivery has no return payload.

        Raises:
            MailDeliveryError: Raised when delivery fails.
        """
