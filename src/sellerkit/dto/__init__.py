"""Typed DTOs and the codec that fills them from decoded JSON."""

from sellerkit.dto.base import Dto
from sellerkit.dto.codec import DtoCodec, default_codec
from sellerkit.dto.coercion import TypeCoercionEngine
from sellerkit.dto.schema import DtoSchema, FieldKind, FieldSpec, dto_field, schema_of

__all__ = [
    "Dto",
    "DtoCodec",
    "DtoSchema",
    "FieldKind",
    "FieldSpec",
    "TypeCoercionEngine",
    "default_codec",
    "dto_field",
    "schema_of",
]
