"""Extraction of quota telemetry from response headers."""

from __future__ import annotations

from collections.abc import Mapping

from sellerkit.models.http import RateLimitInfo

LIMIT_HEADER = "X-RateLimit-Limit"
REMAINING_HEADER = "X-RateLimit-Remaining"
RESET_HEADER = "X-RateLimit-Reset"
RETRY_HEADER = "X-RateLimit-Retry"


class RateLimitTracker:
    """Reads the ``X-RateLimit-*`` headers into a :class:`RateLimitInfo`.

    Missing or non-numeric values normalize to ``0``.
    """

    def extract(self, headers: Mapping[str, str]) -> RateLimitInfo:
        lowered = {name.lower(): value for name, value in headers.items()}
        return RateLimitInfo(
            limit=self._read(lowered, LIMIT_HEADER),
            remaining=self._read(lowered, REMAINING_HEADER),
            reset=self._read(lowered, RESET_HEADER),
            retry=self._read(lowered, RETRY_HEADER),
        )

    @staticmethod
    def _read(headers: Mapping[str, str], name: str) -> int:
        return parse_int(headers.get(name.lower()))


def parse_int(value: str | None) -> int:
    """Parse a header value as an integer, truncating decimals, 0 on failure."""
    if value is None:
        return 0
    # Repeated headers arrive comma-joined; the first value wins.
    text = value.split(",", 1)[0].strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        return 0
