"""Tests for gateway configuration validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from sellerkit import GatewayConfig


class TestGatewayConfig:
    def test_defaults(self) -> None:
        config = GatewayConfig(base_url="https://api.example.com", api_key="k")
        assert config.proxy_url is None
        assert config.timeout is None
        assert config.verify is True
        assert config.headers == {}

    def test_trailing_slash_stripped(self) -> None:
        config = GatewayConfig(base_url="https://api.example.com/", api_key="k")
        assert config.base_url == "https://api.example.com"

    def test_base_url_with_path_kept(self) -> None:
        config = GatewayConfig(base_url="https://api.example.com/v1/", api_key="k")
        assert config.base_url == "https://api.example.com/v1"

    @pytest.mark.parametrize("url", ["api.example.com", "ftp://api.example.com", "https://"])
    def test_invalid_base_url(self, url: str) -> None:
        with pytest.raises(ValidationError):
            GatewayConfig(base_url=url, api_key="k")

    def test_api_key_is_secret(self) -> None:
        config = GatewayConfig(base_url="https://api.example.com", api_key="secret-key")
        assert config.api_key.get_secret_value() == "secret-key"
        assert "secret-key" not in repr(config)
        assert "secret-key" not in str(config.model_dump())

    def test_zero_timeout_is_unbounded(self) -> None:
        config = GatewayConfig(base_url="https://api.example.com", api_key="k", timeout=0)
        assert config.timeout is None

    def test_positive_timeout(self) -> None:
        config = GatewayConfig(base_url="https://api.example.com", api_key="k", timeout=2.5)
        assert config.timeout == 2.5

    def test_negative_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GatewayConfig(base_url="https://api.example.com", api_key="k", timeout=-1)

    def test_api_key_required(self) -> None:
        with pytest.raises(ValidationError):
            GatewayConfig(base_url="https://api.example.com")  # type: ignore[call-arg]
