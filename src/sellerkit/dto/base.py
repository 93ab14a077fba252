"""Base class for typed API payload records."""

from __future__ import annotations

import types
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Self

from sellerkit.dto.codec import default_codec
from sellerkit.dto.schema import DtoSchema, schema_of


@dataclass(frozen=True)
class Dto:
    """Immutable record mirroring an API payload.

    Subclasses are frozen dataclasses; declared fields define the schema::

        @dataclass(frozen=True, kw_only=True)
        class Supply(Dto):
            id: str = ""
            name: str = ""
            done: bool = False
            created_at: datetime | None = dto_field(alias="createdAt", default=None)

        supply = Supply.from_response(gateway.request("GET", "/api/v3/supplies/WB-1"))

    Keys not declared by the subclass are kept in an extra bag when decoding
    tolerantly and are available through :meth:`extra`.
    """

    _extra: dict[str, Any] = field(default_factory=dict, init=False, repr=False, compare=False)

    @classmethod
    def schema(cls) -> DtoSchema:
        return schema_of(cls)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], strict: bool = False) -> Self:
        return default_codec.decode(cls, data, strict=strict)

    @classmethod
    def from_object(cls, obj: Any, strict: bool = False) -> Self:
        return default_codec.from_object(cls, obj, strict=strict)

    @classmethod
    def from_response(cls, body: Any, strict: bool = False) -> Self:
        return default_codec.from_response(cls, body, strict=strict)

    def to_dict(self, include_extra: bool = True) -> dict[str, Any]:
        return default_codec.encode(self, include_extra=include_extra)

    def extra(self, key: str, default: Any = None) -> Any:
        """Value of an undeclared payload key, or *default*."""
        return self._extra.get(key, default)

    @property
    def extra_fields(self) -> Mapping[str, Any]:
        return types.MappingProxyType(self._extra)
