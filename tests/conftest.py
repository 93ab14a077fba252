"""Shared test fixtures and helpers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

import httpx
import pytest
from pydantic import SecretStr

from sellerkit import Dto, GatewayConfig, HttpGateway, dto_field
from sellerkit.telemetry import TelemetryProvider

BASE_URL = "https://api.example.com"
API_KEY = "secret-key"

Reply = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.BaseTransport):
    """Captures requests and answers them with queued replies.

    The last reply is reused once the queue is down to one entry.
    """

    def __init__(self, *replies: Reply) -> None:
        self._replies = list(replies)
        self.requests: list[httpx.Request] = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        reply = self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        return reply(request)


def reply_json(
    status: int = 200,
    body: Any = None,
    headers: dict[str, str] | None = None,
) -> Reply:
    def _reply(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=body, headers=headers, request=request)

    return _reply


def reply_text(
    status: int = 200,
    text: str = "",
    headers: dict[str, str] | None = None,
) -> Reply:
    def _reply(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text=text, headers=headers, request=request)

    return _reply


def reply_timeout() -> Reply:
    def _reply(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    return _reply


def reply_connect_error() -> Reply:
    def _reply(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Name or service not known", request=request)

    return _reply


def make_config(**overrides: Any) -> GatewayConfig:
    values: dict[str, Any] = {"base_url": BASE_URL, "api_key": SecretStr(API_KEY)}
    values.update(overrides)
    return GatewayConfig(**values)


def make_gateway(
    *replies: Reply,
    config: GatewayConfig | None = None,
    telemetry: TelemetryProvider | None = None,
) -> tuple[HttpGateway, RecordingTransport]:
    transport = RecordingTransport(*(replies or (reply_json(200, {}),)))
    client = httpx.Client(transport=transport, follow_redirects=True)
    gateway = HttpGateway(config or make_config(), client=client, telemetry=telemetry)
    return gateway, transport


# -- Sample DTOs ------------------------------------------------------------


class SupplyStatus(StrEnum):
    OPEN = "open"
    CLOSED = "closed"


class Tag(StrEnum):
    NEW = "NEW"
    SALE = "SALE"


@dataclass(frozen=True, kw_only=True)
class Warehouse(Dto):
    id: int = 0
    name: str = ""


@dataclass(frozen=True, kw_only=True)
class Supply(Dto):
    id: str = ""
    name: str = ""
    done: bool = False
    status: SupplyStatus | None = None
    created_at: datetime | None = dto_field(alias="createdAt", default=None)
    warehouse: Warehouse | None = None
    order_ids: list[int] = dto_field(alias="orderIds", default_factory=list)


@dataclass(frozen=True, kw_only=True)
class Item(Dto):
    id: int = 0
    name: str = ""
    tag: Tag | None = None


@pytest.fixture
def config() -> GatewayConfig:
    return make_config()
