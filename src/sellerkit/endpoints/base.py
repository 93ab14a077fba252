"""Shared plumbing for endpoint wrappers.

Concrete endpoints subclass :class:`Endpoint` and implement one method per
API operation, each building its parameters and calling one of the verb
helpers::

    class Supplies(Endpoint):
        def get_supply(self, supply_id: str) -> Supply:
            return self.decode(Supply, self.get_request(f"/api/v3/supplies/{supply_id}"))
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from sellerkit.core.gateway import HttpGateway
from sellerkit.models.enums import HttpMethod
from sellerkit.models.http import RateLimitInfo

T = TypeVar("T")


class Endpoint:
    """Group of API operations sharing one :class:`HttpGateway`."""

    def __init__(self, gateway: HttpGateway) -> None:
        self._gateway = gateway

    @property
    def gateway(self) -> HttpGateway:
        return self._gateway

    def get_request(
        self, path: str, params: Any = None, headers: Mapping[str, str] | None = None
    ) -> Any:
        return self._gateway.request(HttpMethod.GET, path, params, headers)

    def post_request(
        self, path: str, params: Any = None, headers: Mapping[str, str] | None = None
    ) -> Any:
        return self._gateway.request(HttpMethod.POST, path, params, headers)

    def put_request(
        self, path: str, params: Any = None, headers: Mapping[str, str] | None = None
    ) -> Any:
        return self._gateway.request(HttpMethod.PUT, path, params, headers)

    def patch_request(
        self, path: str, params: Any = None, headers: Mapping[str, str] | None = None
    ) -> Any:
        return self._gateway.request(HttpMethod.PATCH, path, params, headers)

    def delete_request(
        self, path: str, params: Any = None, headers: Mapping[str, str] | None = None
    ) -> Any:
        return self._gateway.request(HttpMethod.DELETE, path, params, headers)

    def multipart_request(
        self, path: str, params: Any = None, headers: Mapping[str, str] | None = None
    ) -> Any:
        return self._gateway.request(HttpMethod.MULTIPART, path, params, headers)

    def response_code(self) -> int | None:
        """Status of the last call made through the gateway from this thread."""
        return self._gateway.response_code

    def rate_limit(self) -> RateLimitInfo:
        return self._gateway.rate_limit

    @staticmethod
    def decode(dto_type: type[T], body: Any, strict: bool = False) -> T:
        """Decode a response body into *dto_type* (a :class:`~sellerkit.dto.Dto`)."""
        return dto_type.from_response(body, strict=strict)  # type: ignore[attr-defined]
