"""Typed endpoint wrapper over HttpGateway.

Demonstrates how an API operation is wrapped as an Endpoint method that
decodes its response into an immutable DTO. Shows:
- GatewayConfig and HttpGateway setup (with an in-memory transport)
- Request/response/error observers with masked headers
- Tolerant vs strict DTO decoding and the extra-field bag
- Last-call accessors: status code and rate-limit quota

Run with:
    uv run python examples/supplies_endpoint.py
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

import httpx

from sellerkit import (
    Dto,
    Endpoint,
    ErrorEvent,
    GatewayConfig,
    HttpGateway,
    RequestEvent,
    ResponseEvent,
    UnknownFieldError,
    dto_field,
)

logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")


class SupplyStatus(StrEnum):
    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True, kw_only=True)
class Supply(Dto):
    id: str = ""
    name: str = ""
    done: bool = False
    status: SupplyStatus | None = None
    created_at: datetime | None = dto_field(alias="createdAt", default=None)


class Supplies(Endpoint):
    def get_supply(self, supply_id: str, strict: bool = False) -> Supply:
        body = self.get_request(f"/api/v3/supplies/{supply_id}")
        return self.decode(Supply, body, strict=strict)

    def delete_supply(self, supply_id: str) -> None:
        self.delete_request(f"/api/v3/supplies/{supply_id}")


def fake_api(request: httpx.Request) -> httpx.Response:
    """Stand-in for the remote marketplace API."""
    headers = {"X-RateLimit-Limit": "300", "X-RateLimit-Remaining": "299"}
    if request.method == "DELETE":
        return httpx.Response(409, json={"code": "IncorrectSupplyState"}, headers=headers)
    return httpx.Response(
        200,
        json={
            "id": "WB-GI-1234567",
            "name": "Morning batch",
            "done": "0",
            "status": "open",
            "createdAt": "2024-01-15T10:00:00Z",
            "cargoType": 1,
        },
        headers=headers,
    )


def main() -> None:
    config = GatewayConfig(
        base_url="https://marketplace-api.example.com",
        api_key="my-api-token",
        timeout=10,
    )
    client = httpx.Client(transport=httpx.MockTransport(fake_api))

    with HttpGateway(config, client=client) as gateway:
        gateway.on_request(
            lambda e: print(f"-> {e.method} {e.url} auth={e.headers['Authorization']}")
            if isinstance(e, RequestEvent)
            else None
        )
        gateway.on_response(
            lambda e: print(f"<- {e.status} in {e.duration_ms}ms")
            if isinstance(e, ResponseEvent)
            else None
        )
        gateway.on_error(
            lambda e: print(f"!! {e.status} {e.raw}") if isinstance(e, ErrorEvent) else None
        )

        supplies = Supplies(gateway)

        # =====================================================
        # Part 1: Tolerant decoding
        # =====================================================
        print("=== Tolerant decode ===\n")
        supply = supplies.get_supply("WB-GI-1234567")
        print(f"  {supply}")
        print(f"  unknown cargoType kept: {supply.extra('cargoType')}")
        print(f"  status={supplies.response_code()} quota={supplies.rate_limit()}")
        print(f"  re-encoded: {supply.to_dict()}")

        # =====================================================
        # Part 2: Strict decoding
        # =====================================================
        print("\n=== Strict decode ===\n")
        try:
            supplies.get_supply("WB-GI-1234567", strict=True)
        except UnknownFieldError as exc:
            print(f"  rejected: {exc}")

        # =====================================================
        # Part 3: Error responses are returned, not raised
        # =====================================================
        print("\n=== Error response ===\n")
        supplies.delete_supply("WB-GI-1234567")
        print(f"  status={supplies.response_code()} body={gateway.response}")


if __name__ == "__main__":
    main()
