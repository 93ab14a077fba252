"""In-memory telemetry provider for test assertions."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from sellerkit.telemetry.base import Span, SpanKind, TelemetryProvider


@dataclass(frozen=True)
class RecordedMetric:
    name: str
    value: float
    unit: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)


class MockTelemetryProvider(TelemetryProvider):
    """Keeps finished spans and metrics in memory.

    Example::

        telemetry = MockTelemetryProvider()
        gateway = HttpGateway(config, telemetry=telemetry)
        gateway.request("GET", "/ping")
        span = telemetry.get_spans(SpanKind.HTTP_REQUEST)[0]
        assert span.attributes["http.status_code"] == 200

    Safe to share between threads; each list is only appended to under the
    provider's lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: dict[str, Span] = {}
        self._finished: list[Span] = []
        self._metrics: list[RecordedMetric] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def spans(self) -> list[Span]:
        with self._lock:
            return list(self._finished)

    @property
    def metrics(self) -> list[RecordedMetric]:
        with self._lock:
            return list(self._metrics)

    def get_spans(self, kind: SpanKind) -> list[Span]:
        return [s for s in self.spans if s.kind == kind]

    def get_active_spans(self) -> list[Span]:
        with self._lock:
            return list(self._active.values())

    def metric_values(self, name: str) -> list[float]:
        return [m.value for m in self.metrics if m.name == name]

    def start_span(
        self,
        kind: SpanKind,
        name: str,
        *,
        parent_id: str | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> str:
        span = Span(kind=kind, name=name, parent_id=parent_id, attributes=dict(attributes or {}))
        with self._lock:
            self._active[span.id] = span
        return span.id

    def end_span(
        self,
        span_id: str,
        *,
        status: str = "ok",
        error_message: str | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> None:
        with self._lock:
            span = self._active.pop(span_id, None)
            if span is None:
                return
            span.attributes.update(attributes or {})
            span.status = status
            span.error_message = error_message
            span.end_time = datetime.now(UTC)
            self._finished.append(span)

    def set_attribute(self, span_id: str, key: str, value: Any) -> None:
        with self._lock:
            if span_id in self._active:
                self._active[span_id].attributes[key] = value

    def record_metric(
        self,
        name: str,
        value: float,
        *,
        unit: str = "",
        attributes: dict[str, Any] | None = None,
    ) -> None:
        metric = RecordedMetric(
            name=name, value=value, unit=unit, attributes=dict(attributes or {})
        )
        with self._lock:
            self._metrics.append(metric)

    def reset(self) -> None:
        with self._lock:
            self._active.clear()
            self._finished.clear()
            self._metrics.clear()
