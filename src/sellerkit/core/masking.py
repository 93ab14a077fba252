"""Redaction of sensitive header values before they reach observers or logs."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

REDACTED = "***masked***"

SENSITIVE_HEADERS: frozenset[str] = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "api-key",
        "x-api-key",
    }
)


class HeaderMasker:
    """Replaces the values of sensitive headers with :data:`REDACTED`.

    Matching is case-insensitive; key casing and every other header pass
    through untouched.
    """

    def __init__(self, sensitive: Iterable[str] = SENSITIVE_HEADERS) -> None:
        self._sensitive = frozenset(name.lower() for name in sensitive)

    def is_sensitive(self, name: str) -> bool:
        return name.lower() in self._sensitive

    def mask(self, headers: Mapping[str, Any]) -> dict[str, Any]:
        return {
            name: REDACTED if self.is_sensitive(name) else value
            for name, value in headers.items()
        }


_default_masker = HeaderMasker()


def mask_headers(headers: Mapping[str, Any]) -> dict[str, Any]:
    """Mask *headers* with the default sensitive-name set."""
    return _default_masker.mask(headers)
