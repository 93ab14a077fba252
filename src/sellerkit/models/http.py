"""Per-call request/response models for the HTTP gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sellerkit.models.enums import HttpMethod


@dataclass(frozen=True)
class RequestDescriptor:
    """A single outgoing call, built once and never modified.

    Attributes:
        correlation_id: Opaque token linking the call's observer events.
        method: The requested method (``MULTIPART`` is sent as ``POST``).
        url: Absolute URL without the query string.
        headers: Headers actually sent, with their original casing.
        params: Query parameters, JSON body or multipart fields.
    """

    correlation_id: str
    method: HttpMethod
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: Any = None


@dataclass(frozen=True)
class RateLimitInfo:
    """Quota figures reported by the remote API. Absent values are 0."""

    limit: int = 0
    remaining: int = 0
    reset: int = 0
    retry: int = 0


@dataclass(frozen=True)
class ResponseOutcome:
    """Everything known about one finished call.

    ``status_code`` is ``None`` when the call failed before any response
    arrived (timeout, DNS, refused connection).  ``parsed_body`` holds the
    decoded JSON value, or the raw text when the body is not JSON.
    """

    status_code: int | None = None
    reason_phrase: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    raw_body: str | None = None
    parsed_body: Any = None
    rate_limit: RateLimitInfo = field(default_factory=RateLimitInfo)
    request: RequestDescriptor | None = None
    duration_ms: int = 0

    @classmethod
    def empty(cls, request: RequestDescriptor | None = None) -> ResponseOutcome:
        return cls(request=request)

    @property
    def received(self) -> bool:
        """Whether a response (of any status) was received."""
        return self.status_code is not None

    @property
    def is_success(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    def header(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive response header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default
