"""Shared timestamp parsing helpers for upstream API payloads.

Remote APIs return ISO-8601 strings with a `Z` suffix and, for the IAM token
endpoint, nanosecond fractions. These helpers normalize such values into
offset-aware UTC datetimes.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

_DOMAIN_FRACTION_PATTERN = re.compile(r"\.(\d+)")


def domain_parse_utc_timestamp(value: str) -> datetime:
    """Parse one ISO-8601 timestamp into an offset-aware UTC datetime.

    Args:
        value: Timestamp text, optionally `Z`-suffixed, with any fraction length.

    Returns:
        datetime: Offset-aware UTC timestamp. Naive input is assumed to be UTC.

    Raises:
        ValueError: Raised when value is blank or not an ISO-8601 timestamp.
    """

    if not isinstance(value, str) or not value.strip():
        raise ValueError("timestamp must be a non-empty string")

    normalized_value = value.strip()
    if normalized_value.endswith(("Z", "z")):
        normalized_value = f"{normalized_value[:-1]}+00:00"
    normalized_value = _DOMAIN_FRACTION_PATTERN.sub(_domain_truncate_fraction, normalized_value, count=1)

    try:
        parsed_value = datetime.fromisoformat(normalized_value)
    except ValueError as error:
        raise ValueError(f"timestamp must be a valid ISO-8601 value: {value}") from error

    if parsed_value.tzinfo is None or parsed_value.utcoffset() is None:
        return parsed_value.replace(tzinfo=timezone.utc)
    return parsed_value.astimezone(timezone.utc)


def domain_format_utc_timestamp(value: datetime) -> str:
    """Format one datetime as UTC ISO-8601 with millisecond precision and `Z` suffix.

    Args:
        value: Datetime to format. Naive input is assumed to be UTC.

    Returns:
        str: Timestamp such as `2026-10-10T00:00:00.000Z`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _domain_truncate_fraction(match: re.Match[str]) -> str:
    # fromisoformat accepts at most six fractional digits on older interpreters
    digits = match.group(1)[:6]
    return f".{digits.ljust(6, '0')}"
