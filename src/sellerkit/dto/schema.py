"""Per-type schema descriptors for DTO decoding and encoding.

A :class:`DtoSchema` is derived once from a dataclass's declared fields and
type hints, then cached.  Decoding and encoding consume the descriptor and
never inspect the class again.
"""

from __future__ import annotations

import dataclasses
import functools
import types
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum, StrEnum, unique
from typing import Any

EXTRA_ATTR = "_extra"


@unique
class FieldKind(StrEnum):
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STR = "str"
    LIST = "list"
    ENUM = "enum"
    DATETIME = "datetime"
    DATE = "date"
    DTO = "dto"
    ANY = "any"


@dataclass(frozen=True)
class FieldSpec:
    """One declared DTO field.

    Attributes:
        name: Python attribute name.
        key: Key used in the wire payload (the alias, or ``name``).
        annotation: The resolved type hint.
        kind: Coercion rule selected for the annotation.
        target: Rule argument: the enum or DTO class, or the list item
            annotation (``None`` for a bare ``list``).
        converter: Optional callable replacing the coercion rule.
        has_default: Whether the dataclass declares a default.
    """

    name: str
    key: str
    annotation: Any
    kind: FieldKind
    target: Any = None
    converter: Callable[[Any], Any] | None = None
    has_default: bool = False


@dataclass(frozen=True)
class DtoSchema:
    dto_type: type
    fields: Mapping[str, FieldSpec]
    extra_attr: str | None = None

    @functools.cached_property
    def _by_key(self) -> Mapping[str, FieldSpec]:
        return types.MappingProxyType({spec.key: spec for spec in self.fields.values()})

    def lookup(self, key: str) -> FieldSpec | None:
        """Find the field declared for a payload key.

        Aliased fields answer to their alias only, so decoding and encoding
        use the same keys.
        """
        return self._by_key.get(key)


def dto_field(
    *,
    alias: str | None = None,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
    converter: Callable[[Any], Any] | None = None,
) -> Any:
    """Declare a DTO field with a wire-key alias and/or custom converter.

    Example::

        @dataclass(frozen=True, kw_only=True)
        class Advert(Dto):
            advert_id: int = dto_field(alias="advertId", default=0)
    """
    metadata: dict[str, Any] = {}
    if alias is not None:
        metadata["alias"] = alias
    if converter is not None:
        metadata["converter"] = converter
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata=metadata,
    )


def is_dto_type(tp: Any) -> bool:
    """A class the codec can decode into: a dataclass or anything with ``from_dict``."""
    if not isinstance(tp, type):
        return False
    return dataclasses.is_dataclass(tp) or callable(getattr(tp, "from_dict", None))


def classify(annotation: Any) -> tuple[FieldKind, Any]:
    """Map a type hint to its coercion rule and rule argument."""
    origin = typing.get_origin(annotation)

    if origin is typing.Annotated:
        return classify(typing.get_args(annotation)[0])

    if origin is typing.Union or origin is types.UnionType:
        members = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(members) == 1:
            return classify(members[0])
        return FieldKind.ANY, None

    if origin is list:
        args = typing.get_args(annotation)
        return FieldKind.LIST, (args[0] if args else None)
    if annotation is list:
        return FieldKind.LIST, None

    if not isinstance(annotation, type):
        return FieldKind.ANY, None

    # bool before int, datetime before date: both are subclasses.
    if issubclass(annotation, bool):
        return FieldKind.BOOL, None
    if issubclass(annotation, Enum):
        return FieldKind.ENUM, annotation
    if issubclass(annotation, int):
        return FieldKind.INT, None
    if issubclass(annotation, float):
        return FieldKind.FLOAT, None
    if issubclass(annotation, str):
        return FieldKind.STR, None
    if issubclass(annotation, datetime):
        return FieldKind.DATETIME, None
    if issubclass(annotation, date):
        return FieldKind.DATE, None
    if is_dto_type(annotation):
        return FieldKind.DTO, annotation
    return FieldKind.ANY, None


@functools.cache
def schema_of(dto_type: type) -> DtoSchema:
    """Build (once) and return the schema descriptor of a dataclass DTO."""
    if not (isinstance(dto_type, type) and dataclasses.is_dataclass(dto_type)):
        raise TypeError(f"{dto_type!r} is not a dataclass DTO type")

    hints = typing.get_type_hints(dto_type)
    specs: dict[str, FieldSpec] = {}
    extra_attr: str | None = None
    for f in dataclasses.fields(dto_type):
        if f.name == EXTRA_ATTR:
            extra_attr = f.name
            continue
        if not f.init or f.name.startswith("_"):
            continue
        annotation = hints.get(f.name, Any)
        kind, target = classify(annotation)
        specs[f.name] = FieldSpec(
            name=f.name,
            key=f.metadata.get("alias", f.name),
            annotation=annotation,
            kind=kind,
            target=target,
            converter=f.metadata.get("converter"),
            has_default=(
                f.default is not dataclasses.MISSING
                or f.default_factory is not dataclasses.MISSING
            ),
        )
    return DtoSchema(
        dto_type=dto_type,
        fields=types.MappingProxyType(specs),
        extra_attr=extra_attr,
    )
