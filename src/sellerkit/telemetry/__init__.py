"""Telemetry provider system for SellerKit."""

from sellerkit.telemetry.base import Attr, Span, SpanKind, TelemetryProvider
from sellerkit.telemetry.mock import MockTelemetryProvider, RecordedMetric
from sellerkit.telemetry.noop import NoopTelemetryProvider

__all__ = [
    "Attr",
    "MockTelemetryProvider",
    "NoopTelemetryProvider",
    "RecordedMetric",
    "Span",
    "SpanKind",
    "TelemetryProvider",
]
