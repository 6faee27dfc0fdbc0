"""Typed domain models shared across runtime layers.

This module provides immutable data contracts exchanged between the credential
lifecycle, the feedback and summarization adapters, and the report job.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ServiceAssertion:
    """Claim set of one service-account assertion presented to the token issuer.

    Attributes:
        audience: Token issuer URL the assertion is addressed to.
        issuer: Service account identifier.
        issued_at: Offset-aware UTC issue timestamp.
        expires_at: Offset-aware UTC expiry timestamp.
    """

    audience: str
    issuer: str
    issued_at: datetime
    expires_at: datetime

    def assertion_claims(self) -> dict[str, object]:
        """Return JWT registered claims for this assertion.

        Returns:
            dict[str, object]: Claims with epoch-second `iat` and `exp` values.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {
            "aud": self.audience,
            "iss": self.issuer,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }


@dataclass(frozen=True)
class AccessToken:
    """Short-lived bearer credential issued by the identity provider.

    Attributes:
        value: Opaque bearer token value.
        expires_at: Offset-aware UTC expiry timestamp.
    """

    value: str
    expires_at: datetime

    def __repr__(self) -> str:
        return f"AccessToken(value='***', expires_at={self.expires_at.isoformat()!r})"


@dataclass(frozen=True)
class FeedbackItem:
    """One customer feedback record received from the feedback API.

    Attributes:
        id: Upstream feedback identifier.
        text: Free-form feedback text.
        date: Offset-aware UTC feedback timestamp.
        filename: Attachment file name reported by upstream.
        path: Attachment storage path reported by upstream.
    """

    id: int
    text: str
    date: datetime
    filename: str
    path: str


@dataclass(frozen=True)
class EmailDetail:
    """Static delivery envelope for the weekly report email.

    Attributes:
        to: Recipient addresses.
        sender: Sender address.
        subject: Email subject line.
    """

    to: tuple[str, ...]
    sender: str
    subject: str
