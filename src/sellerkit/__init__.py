"""SellerKit - HTTP gateway and typed DTO codec for e-commerce seller APIs."""

from sellerkit._version import __version__
from sellerkit.core.config import GatewayConfig
from sellerkit.core.errors import (
    CodecError,
    CoercionError,
    InvalidDateTimeError,
    InvalidEnumValueError,
    InvalidMethodError,
    MalformedPayloadError,
    SellerKitError,
    TransportError,
    UnknownFieldError,
)
from sellerkit.core.events import EventBus
from sellerkit.core.gateway import HttpGateway
from sellerkit.core.masking import REDACTED, HeaderMasker, mask_headers
from sellerkit.core.rate_limit import RateLimitTracker
from sellerkit.dto import Dto, DtoCodec, TypeCoercionEngine, dto_field
from sellerkit.endpoints import Endpoint
from sellerkit.models.enums import EventPhase, HttpMethod
from sellerkit.models.events import ErrorEvent, ObservabilityEvent, RequestEvent, ResponseEvent
from sellerkit.models.http import RateLimitInfo, RequestDescriptor, ResponseOutcome

__all__ = [
    "REDACTED",
    "CodecError",
    "CoercionError",
    "Dto",
    "DtoCodec",
    "Endpoint",
    "ErrorEvent",
    "EventBus",
    "EventPhase",
    "GatewayConfig",
    "HeaderMasker",
    "HttpGateway",
    "HttpMethod",
    "InvalidDateTimeError",
    "InvalidEnumValueError",
    "InvalidMethodError",
    "MalformedPayloadError",
    "ObservabilityEvent",
    "RateLimitInfo",
    "RateLimitTracker",
    "RequestDescriptor",
    "RequestEvent",
    "ResponseEvent",
    "ResponseOutcome",
    "SellerKitError",
    "TransportError",
    "TypeCoercionEngine",
    "UnknownFieldError",
    "__version__",
    "dto_field",
    "mask_headers",
]
