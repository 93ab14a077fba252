"""Observer event snapshots emitted by the gateway.

Headers in every event have already been passed through the header
masker; sensitive values never reach observers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from sellerkit.models.enums import HttpMethod


@dataclass(frozen=True)
class RequestEvent:
    correlation_id: str
    method: HttpMethod
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: Any = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class ResponseEvent:
    correlation_id: str
    method: HttpMethod
    url: str
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    raw: str | None = None
    duration_ms: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class ErrorEvent:
    """A failed call, or a call answered with an error status.

    Attributes:
        status: HTTP status, or ``None`` when no response was received.
        raw: Response body text, or ``None`` when no response was received.
        exception_class: Qualified name of the underlying exception class.
        message: The underlying exception message.
    """

    correlation_id: str
    method: HttpMethod
    url: str
    status: int | None
    exception_class: str
    message: str
    headers: dict[str, str] = field(default_factory=dict)
    raw: str | None = None
    duration_ms: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


ObservabilityEvent = RequestEvent | ResponseEvent | ErrorEvent
