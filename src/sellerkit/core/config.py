"""HTTP gateway configuration."""

from __future__ import annotations

from urllib.parse import urlparse

from pydantic import BaseModel, Field, SecretStr, field_validator


class GatewayConfig(BaseModel):
    """Configuration for :class:`~sellerkit.core.gateway.HttpGateway`.

    Attributes:
        base_url: API root; request paths are appended to it.
        api_key: Sent verbatim as the ``Authorization`` header.
        proxy_url: Optional proxy for every request.
        timeout: Seconds per request. ``None`` or ``0`` means unbounded.
        verify: Verify TLS certificates.
        headers: Extra default headers, applied after the built-in defaults
            and before per-call headers.
    """

    base_url: str
    api_key: SecretStr
    proxy_url: str | None = None
    timeout: float | None = None
    verify: bool = True
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if not parsed.scheme or not parsed.hostname:
            raise ValueError("base_url must be a valid URL with scheme and host")
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"base_url scheme must be http or https, got {parsed.scheme!r}")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def normalize_timeout(cls, v: float | None) -> float | None:
        if v is None or v == 0:
            return None
        if v < 0:
            raise ValueError("timeout must not be negative")
        return v
