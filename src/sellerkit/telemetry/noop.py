"""No-op telemetry provider, the zero-overhead default."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sellerkit.telemetry.base import SpanKind, TelemetryProvider


class NoopTelemetryProvider(TelemetryProvider):
    """Discards every span and metric.

    Used by :class:`~sellerkit.core.gateway.HttpGateway` and
    :class:`~sellerkit.dto.DtoCodec` when no provider is passed.
    """

    @property
    def name(self) -> str:
        return "noop"

    def start_span(self, kind: SpanKind, name: str, **kwargs: Any) -> str:
        return ""

    def end_span(self, span_id: str, **kwargs: Any) -> None:
        return None

    def set_attribute(self, span_id: str, key: str, value: Any) -> None:
        return None

    def record_metric(self, name: str, value: float, **kwargs: Any) -> None:
        return None

    @contextmanager
    def span(self, kind: SpanKind, name: str, **kwargs: Any) -> Generator[str, None, None]:
        yield ""
