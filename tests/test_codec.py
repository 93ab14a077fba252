"""Tests for DTO decoding, encoding and the extra-field bag."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any

import pytest
from pydantic import BaseModel

from sellerkit import Dto, DtoCodec, dto_field
from sellerkit.core.errors import (
    CodecError,
    InvalidEnumValueError,
    MalformedPayloadError,
    UnknownFieldError,
)
from sellerkit.dto import FieldKind, schema_of
from sellerkit.telemetry import Attr, MockTelemetryProvider, SpanKind
from tests.conftest import Item, Supply, SupplyStatus, Tag, Warehouse

SUPPLY_PAYLOAD: dict[str, Any] = {
    "id": "WB-GI-1",
    "name": "Main",
    "done": "false",
    "status": "open",
    "createdAt": "2024-01-15T10:00:00Z",
    "warehouse": {"id": "507", "name": "Koledino"},
    "orderIds": ["11", 12],
}


class TestSchema:
    def test_fields_and_kinds(self) -> None:
        schema = schema_of(Supply)
        assert list(schema.fields) == [
            "id",
            "name",
            "done",
            "status",
            "created_at",
            "warehouse",
            "order_ids",
        ]
        assert schema.fields["done"].kind == FieldKind.BOOL
        assert schema.fields["status"].kind == FieldKind.ENUM
        assert schema.fields["status"].target is SupplyStatus
        assert schema.fields["created_at"].kind == FieldKind.DATETIME
        assert schema.fields["warehouse"].kind == FieldKind.DTO
        assert schema.fields["order_ids"].kind == FieldKind.LIST
        assert schema.fields["order_ids"].target is int

    def test_aliases(self) -> None:
        schema = schema_of(Supply)
        assert schema.fields["created_at"].key == "createdAt"
        assert schema.lookup("createdAt") is schema.fields["created_at"]
        assert schema.lookup("created_at") is None
        assert schema.lookup("id") is schema.fields["id"]
        assert schema.lookup("nope") is None

    def test_extra_bag_not_a_field(self) -> None:
        schema = schema_of(Supply)
        assert "_extra" not in schema.fields
        assert schema.extra_attr == "_extra"

    def test_schema_is_cached(self) -> None:
        assert schema_of(Supply) is schema_of(Supply)
        assert Supply.schema() is schema_of(Supply)

    def test_non_dataclass_rejected(self) -> None:
        with pytest.raises(TypeError):
            schema_of(int)


class TestDecode:
    def test_full_payload(self) -> None:
        supply = Supply.from_dict(SUPPLY_PAYLOAD)

        assert supply.id == "WB-GI-1"
        assert supply.done is False
        assert supply.status is SupplyStatus.OPEN
        assert supply.created_at == datetime(2024, 1, 15, 10, 0, tzinfo=UTC)
        assert supply.warehouse == Warehouse(id=507, name="Koledino")
        assert supply.order_ids == [11, 12]

    def test_scalar_wrapped_for_list_field(self) -> None:
        assert Supply.from_dict({"orderIds": 5}).order_ids == [5]

    def test_attribute_name_of_aliased_field_is_not_a_field(self) -> None:
        payload = {"id": "x", "created_at": "2024-01-15T10:00:00"}

        supply = Supply.from_dict(payload)

        assert supply.created_at is None
        assert supply.extra("created_at") == "2024-01-15T10:00:00"
        assert supply.to_dict()["created_at"] == "2024-01-15T10:00:00"
        assert Supply.from_dict(supply.to_dict()) == supply
        with pytest.raises(UnknownFieldError):
            Supply.from_dict(payload, strict=True)

    def test_absent_fields_take_defaults(self) -> None:
        supply = Supply.from_dict({"id": "x"})
        assert supply.name == ""
        assert supply.done is False
        assert supply.order_ids == []

    def test_absent_field_without_default_is_none(self) -> None:
        @dataclass(frozen=True, kw_only=True)
        class Required(Dto):
            code: int

        assert Required.from_dict({}).code is None

    def test_explicit_null_is_none(self) -> None:
        supply = Supply.from_dict({"name": None})
        assert supply.name is None

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(MalformedPayloadError):
            Supply.from_dict(["not", "a", "mapping"])  # type: ignore[arg-type]

    def test_decoded_dto_is_immutable(self) -> None:
        supply = Supply.from_dict({"id": "x"})
        with pytest.raises(dataclasses.FrozenInstanceError):
            supply.id = "y"  # type: ignore[misc]


class TestStrictness:
    def test_tolerant_keeps_unknown_keys(self) -> None:
        item = Item.from_dict({"id": 5, "name": "x", "legacy": True})
        assert item.id == 5
        assert item.extra("legacy") is True
        assert item.extra("missing") is None
        assert item.extra("missing", "fallback") == "fallback"
        assert dict(item.extra_fields) == {"legacy": True}

    def test_strict_rejects_unknown_keys(self) -> None:
        with pytest.raises(UnknownFieldError) as exc_info:
            Item.from_dict({"id": 5, "name": "x", "legacy": True}, strict=True)
        assert exc_info.value.field == "legacy"
        assert exc_info.value.dto_type is Item
        assert "legacy" in str(exc_info.value)

    def test_strict_accepts_known_keys(self) -> None:
        item = Item.from_dict({"id": "5", "tag": "NEW"}, strict=True)
        assert item == Item(id=5, tag=Tag.NEW)

    def test_nested_dto_decodes_tolerantly_under_strict(self) -> None:
        payload = {"id": "x", "warehouse": {"id": 1, "zone": "A"}}

        supply = Supply.from_dict(payload, strict=True)

        assert supply.warehouse == Warehouse(id=1)
        assert supply.warehouse.extra("zone") == "A"

    def test_strict_still_rejects_top_level_keys_beside_nested(self) -> None:
        with pytest.raises(UnknownFieldError) as exc_info:
            Supply.from_dict({"warehouse": {"id": 1, "zone": "A"}, "junk": 1}, strict=True)
        assert exc_info.value.dto_type is Supply
        assert exc_info.value.field == "junk"

    def test_invalid_enum_raises_in_tolerant_mode(self) -> None:
        with pytest.raises(InvalidEnumValueError):
            Item.from_dict({"id": 5, "name": "x", "tag": "UNKNOWN_TAG"})

    def test_invalid_datetime_raises_in_tolerant_mode(self) -> None:
        with pytest.raises(CodecError):
            Supply.from_dict({"createdAt": "someday"})

    def test_extra_not_part_of_equality(self) -> None:
        assert Item.from_dict({"id": 1, "junk": 1}) == Item(id=1)

    def test_extra_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="sellerkit.dto"):
            Item.from_dict({"id": 1, "junk": 1})
        assert "junk" in caplog.text


class TestEncode:
    def test_wire_keys_and_normalized_values(self) -> None:
        supply = Supply.from_dict(SUPPLY_PAYLOAD)
        assert supply.to_dict() == {
            "id": "WB-GI-1",
            "name": "Main",
            "done": False,
            "status": "open",
            "createdAt": "2024-01-15T10:00:00+00:00",
            "warehouse": {"id": 507, "name": "Koledino"},
            "orderIds": [11, 12],
        }

    def test_extra_merged_at_top_level(self) -> None:
        item = Item.from_dict({"id": 1, "name": "x", "legacy": {"a": 1}})
        assert item.to_dict() == {"id": 1, "name": "x", "tag": None, "legacy": {"a": 1}}
        assert item.to_dict(include_extra=False) == {"id": 1, "name": "x", "tag": None}

    def test_round_trip(self) -> None:
        payload = {"id": 5, "name": "x", "tag": "SALE", "legacy": [1, 2]}
        item = Item.from_dict(payload)
        assert Item.from_dict(item.to_dict()) == item
        assert item.to_dict() == payload

    def test_declared_field_wins_over_extra(self) -> None:
        codec = DtoCodec()
        item = Item(id=1)
        object.__setattr__(item, "_extra", {"id": 99, "other": "y"})
        assert codec.encode(item) == {"id": 1, "name": "", "tag": None, "other": "y"}

    def test_normalize_pydantic_model(self) -> None:
        class Price(BaseModel):
            amount: int
            currency: str

        codec = DtoCodec()
        assert codec.normalize({"p": Price(amount=1, currency="RUB")}) == {
            "p": {"amount": 1, "currency": "RUB"}
        }


class TestFromResponse:
    def test_json_text(self) -> None:
        item = Item.from_response('{"id": 3, "name": "lamp"}')
        assert item == Item(id=3, name="lamp")

    def test_json_bytes(self) -> None:
        assert Item.from_response(b'{"id": 3}') == Item(id=3)

    def test_decoded_mapping(self) -> None:
        assert Item.from_response({"id": "3"}) == Item(id=3)

    @pytest.mark.parametrize("body", ["not json", "[1, 2]", "42", b"\xff\xfe", None, [1]])
    def test_malformed(self, body: Any) -> None:
        with pytest.raises(MalformedPayloadError):
            Item.from_response(body)

    def test_strict_flag_forwarded(self) -> None:
        with pytest.raises(UnknownFieldError):
            Item.from_response('{"id": 1, "junk": 2}', strict=True)


class TestFromObject:
    def test_simple_namespace(self) -> None:
        obj = SimpleNamespace(id="4", name="box", _private="hidden")
        item = Item.from_object(obj)
        assert item == Item(id=4, name="box")
        assert item.extra("_private") is None

    def test_nested_objects(self) -> None:
        obj = SimpleNamespace(id="x", warehouse=SimpleNamespace(id="9", name="Tula"))
        supply = Supply.from_object(obj)
        assert supply.warehouse == Warehouse(id=9, name="Tula")

    def test_pydantic_model(self) -> None:
        class Remote(BaseModel):
            id: int
            name: str
            color: str

        item = Item.from_object(Remote(id=2, name="cup", color="red"))
        assert item == Item(id=2, name="cup")
        assert item.extra("color") == "red"

    def test_other_dto_keeps_extras(self) -> None:
        source = Item.from_dict({"id": 1, "name": "a", "legacy": "v"})
        copy = Item.from_object(source)
        assert copy == source
        assert copy.extra("legacy") == "v"

    def test_plain_mapping(self) -> None:
        assert Item.from_object({"id": "8"}) == Item(id=8)

    def test_scalar_rejected(self) -> None:
        with pytest.raises(MalformedPayloadError):
            Item.from_object(42)


class TestConverter:
    def test_custom_converter(self) -> None:
        @dataclass(frozen=True, kw_only=True)
        class Price(Dto):
            kopecks: int = dto_field(
                alias="price", default=0, converter=lambda v: round(float(v) * 100)
            )

        assert Price.from_dict({"price": "12.34"}).kopecks == 1234
        assert Price(kopecks=5).to_dict() == {"price": 5}


class TestTelemetry:
    def test_decode_span(self) -> None:
        telemetry = MockTelemetryProvider()
        codec = DtoCodec(telemetry=telemetry)

        codec.decode(Item, {"id": 1, "a": 1, "b": 2})

        spans = telemetry.get_spans(SpanKind.DTO_DECODE)
        assert len(spans) == 1
        assert spans[0].status == "ok"
        assert spans[0].attributes[Attr.DTO_TYPE] == "Item"
        assert spans[0].attributes[Attr.DTO_STRICT] is False
        assert spans[0].attributes[Attr.DTO_EXTRA_COUNT] == 2

    def test_failed_decode_span(self) -> None:
        telemetry = MockTelemetryProvider()
        codec = DtoCodec(telemetry=telemetry)

        with pytest.raises(UnknownFieldError):
            codec.decode(Item, {"junk": 1}, strict=True)

        spans = telemetry.get_spans(SpanKind.DTO_DECODE)
        assert spans[0].status == "error"
        assert "junk" in (spans[0].error_message or "")
