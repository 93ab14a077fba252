"""Decoding of raw JSON structures into DTOs and encoding them back."""

from __future__ import annotations

import dataclasses
import json
import logging
from collections.abc import Mapping
from datetime import date, datetime, time
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel

from sellerkit.core.errors import MalformedPayloadError, UnknownFieldError
from sellerkit.dto.coercion import TypeCoercionEngine
from sellerkit.dto.schema import schema_of
from sellerkit.telemetry.base import Attr, SpanKind, TelemetryProvider
from sellerkit.telemetry.noop import NoopTelemetryProvider

logger = logging.getLogger("sellerkit.dto")

T = TypeVar("T")

_SCALARS = (str, int, float, bool, bytes, Enum, datetime, date, time)


class DtoCodec:
    """Schema-driven marshaller between decoded JSON and dataclass DTOs.

    Tolerant decoding (the default) collects unknown keys in the instance's
    extra bag; strict decoding rejects them with :class:`UnknownFieldError`.
    Strictness applies to the top-level DTO only; nested DTOs are always
    decoded tolerantly.  Enum and date/time validity is enforced in both
    modes.  Aliased fields are matched by their wire key only.
    """

    def __init__(
        self,
        *,
        coercion: TypeCoercionEngine | None = None,
        telemetry: TelemetryProvider | None = None,
    ) -> None:
        self._coercion = coercion or TypeCoercionEngine(decode_nested=self._decode_nested)
        self._telemetry = telemetry or NoopTelemetryProvider()

    # -------------------------------------------------------------------------
    # Decoding
    # -------------------------------------------------------------------------

    def decode(self, dto_type: type[T], data: Mapping[str, Any], *, strict: bool = False) -> T:
        with self._telemetry.span(
            SpanKind.DTO_DECODE,
            dto_type.__qualname__,
            attributes={Attr.DTO_TYPE: dto_type.__qualname__, Attr.DTO_STRICT: strict},
        ) as span_id:
            instance = self._decode(dto_type, data, strict)
            schema = schema_of(dto_type)
            if schema.extra_attr is not None:
                self._telemetry.set_attribute(
                    span_id, Attr.DTO_EXTRA_COUNT, len(getattr(instance, schema.extra_attr))
                )
        return instance

    def from_response(self, dto_type: type[T], body: Any, *, strict: bool = False) -> T:
        """Decode a response body given as JSON text, bytes, or a decoded mapping."""
        if isinstance(body, bytes | bytearray):
            try:
                body = body.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MalformedPayloadError("Response body is not valid UTF-8") from exc
        if isinstance(body, str):
            try:
                body = json.loads(body)
            except ValueError as exc:
                raise MalformedPayloadError("Response JSON must decode to an object") from exc
        if not isinstance(body, Mapping):
            raise MalformedPayloadError(
                f"Response must decode to an object, got {type(body).__name__}"
            )
        return self.decode(dto_type, body, strict=strict)

    def from_object(self, dto_type: type[T], obj: Any, *, strict: bool = False) -> T:
        """Decode any object graph by first normalizing it to mappings and lists."""
        data = self.to_canonical(obj)
        if not isinstance(data, Mapping):
            raise MalformedPayloadError(
                f"{type(obj).__name__} does not normalize to a mapping"
            )
        return self.decode(dto_type, data, strict=strict)

    def _decode(self, dto_type: type[T], data: Mapping[str, Any], strict: bool) -> T:
        if not isinstance(data, Mapping):
            raise MalformedPayloadError(
                f"{dto_type.__qualname__} expects a mapping, got {type(data).__name__}"
            )
        schema = schema_of(dto_type)
        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}

        for key, value in data.items():
            spec = schema.lookup(str(key))
            if spec is None:
                if strict:
                    raise UnknownFieldError(str(key), dto_type)
                extra[str(key)] = value
                continue
            values[spec.name] = self._coercion.coerce_field(spec, value)

        for spec in schema.fields.values():
            if spec.name not in values and not spec.has_default:
                values[spec.name] = None

        instance = dto_type(**values)
        if extra:
            if schema.extra_attr is not None:
                object.__setattr__(instance, schema.extra_attr, extra)
                logger.debug(
                    "%s: kept %d unknown field(s) in extra: %s",
                    dto_type.__qualname__,
                    len(extra),
                    ", ".join(extra),
                )
            else:
                logger.debug(
                    "%s has no extra bag; dropped unknown field(s): %s",
                    dto_type.__qualname__,
                    ", ".join(extra),
                )
        return instance

    def _decode_nested(self, dto_type: type, data: Mapping[str, Any]) -> Any:
        if dataclasses.is_dataclass(dto_type):
            return self._decode(dto_type, data, False)
        return dto_type.from_dict(data)  # type: ignore[attr-defined]

    # -------------------------------------------------------------------------
    # Encoding
    # -------------------------------------------------------------------------

    def encode(self, instance: Any, *, include_extra: bool = True) -> dict[str, Any]:
        """Encode a DTO to a JSON-ready dict keyed by wire keys.

        With *include_extra*, unknown fields collected during tolerant
        decoding are merged back in at the top level.
        """
        schema = schema_of(type(instance))
        out: dict[str, Any] = {
            spec.key: self.normalize(getattr(instance, spec.name), include_extra=include_extra)
            for spec in schema.fields.values()
        }
        if include_extra and schema.extra_attr is not None:
            for key, value in getattr(instance, schema.extra_attr).items():
                if key not in out:
                    out[key] = self.normalize(value, include_extra=include_extra)
        return out

    def normalize(self, value: Any, *, include_extra: bool = True) -> Any:
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, datetime | date | time):
            return value.isoformat()
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return self.encode(value, include_extra=include_extra)
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        if isinstance(value, Mapping):
            return {k: self.normalize(v, include_extra=include_extra) for k, v in value.items()}
        if isinstance(value, list | tuple):
            return [self.normalize(v, include_extra=include_extra) for v in value]
        return value

    def to_canonical(self, value: Any) -> Any:
        """Normalize an arbitrary object graph to mappings, lists and scalars.

        Dataclasses are encoded (wire keys, extra bag included), pydantic
        models dumped, and other objects reduced to their public attributes.
        Getters are never called.
        """
        if value is None or isinstance(value, _SCALARS):
            return value
        if isinstance(value, Mapping):
            return {k: self.to_canonical(v) for k, v in value.items()}
        if isinstance(value, list | tuple):
            return [self.to_canonical(v) for v in value]
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return self.encode(value)
        if isinstance(value, BaseModel):
            return self.to_canonical(value.model_dump())
        if hasattr(value, "__dict__"):
            return {
                k: self.to_canonical(v) for k, v in vars(value).items() if not k.startswith("_")
            }
        return value


default_codec = DtoCodec()
