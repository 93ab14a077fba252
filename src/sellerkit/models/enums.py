"""All string enums for SellerKit."""

from __future__ import annotations

from enum import StrEnum, unique

from sellerkit.core.errors import InvalidMethodError


@unique
class HttpMethod(StrEnum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    MULTIPART = "MULTIPART"

    @classmethod
    def parse(cls, value: str | HttpMethod) -> HttpMethod:
        """Case-insensitive lookup; raises :class:`InvalidMethodError`."""
        if isinstance(value, HttpMethod):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise InvalidMethodError(str(value)) from None

    @property
    def verb(self) -> str:
        """The verb that goes on the wire (multipart uploads are POSTs)."""
        return "POST" if self is HttpMethod.MULTIPART else self.value


@unique
class EventPhase(StrEnum):
    REQUEST = "request"
    RESPONSE = "response"
    ERROR = "error"
