"""Exception hierarchy for SellerKit."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sellerkit.models.http import ResponseOutcome

__all__ = [
    "CodecError",
    "CoercionError",
    "InvalidDateTimeError",
    "InvalidEnumValueError",
    "InvalidMethodError",
    "MalformedPayloadError",
    "SellerKitError",
    "TransportError",
    "UnknownFieldError",
]


class SellerKitError(Exception):
    """Base exception for all SellerKit errors."""


class TransportError(SellerKitError):
    """The call produced no usable response.

    Raised for network-level failures (timeout, DNS, refused connection) and
    for error responses whose body is not JSON.

    Attributes:
        outcome: Telemetry of the failed call. ``outcome.status_code`` is
            ``None`` when no response was received at all.
    """

    def __init__(self, message: str, *, outcome: ResponseOutcome | None = None) -> None:
        super().__init__(message)
        self.outcome = outcome

    @property
    def status_code(self) -> int | None:
        return self.outcome.status_code if self.outcome is not None else None


class InvalidMethodError(SellerKitError, ValueError):
    """Unsupported HTTP method passed to the gateway."""

    def __init__(self, method: str) -> None:
        super().__init__(f"Unsupported request method: {method.upper()}")
        self.method = method


class CodecError(SellerKitError, ValueError):
    """Base class for DTO decode/encode failures."""


class MalformedPayloadError(CodecError):
    """Input did not decode to a structured (mapping) value."""


class UnknownFieldError(CodecError):
    """Strict decode met a key that the DTO does not declare."""

    def __init__(self, field: str, dto_type: type) -> None:
        super().__init__(f'Unknown field "{field}" for {dto_type.__qualname__}')
        self.field = field
        self.dto_type = dto_type


class CoercionError(CodecError):
    """A raw value could not be converted to the declared type."""

    def __init__(self, message: str, *, value: Any = None, target: Any = None) -> None:
        super().__init__(message)
        self.value = value
        self.target = target


class InvalidEnumValueError(CoercionError):
    """Value is not one of the enum's declared values."""

    def __init__(self, value: Any, enum_type: type) -> None:
        super().__init__(
            f'Invalid enum value "{value}" for {enum_type.__qualname__}',
            value=value,
            target=enum_type,
        )
        self.enum_type = enum_type


class InvalidDateTimeError(CoercionError):
    """Value could not be parsed as a date/time."""

    def __init__(self, value: Any, target: type) -> None:
        super().__init__(f'Invalid datetime "{value}"', value=value, target=target)
