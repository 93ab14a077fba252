"""Tests for sensitive header masking."""

from __future__ import annotations

import httpx

from sellerkit import REDACTED, HeaderMasker, mask_headers


class TestHeaderMasker:
    def test_masks_authorization_and_passes_others(self) -> None:
        masked = mask_headers({"Authorization": "secret", "X-Custom": "v"})
        assert masked == {"Authorization": REDACTED, "X-Custom": "v"}

    def test_case_insensitive(self) -> None:
        masked = mask_headers({"AUTHORIZATION": "secret", "x-API-key": "k", "Api-Key": "k2"})
        assert masked == {"AUTHORIZATION": REDACTED, "x-API-key": REDACTED, "Api-Key": REDACTED}

    def test_proxy_authorization(self) -> None:
        assert mask_headers({"Proxy-Authorization": "Basic abc"}) == {
            "Proxy-Authorization": REDACTED
        }

    def test_does_not_mutate_input(self) -> None:
        headers = {"Authorization": "secret"}
        mask_headers(headers)
        assert headers == {"Authorization": "secret"}

    def test_accepts_httpx_headers(self) -> None:
        masked = mask_headers(httpx.Headers({"Authorization": "secret", "Accept": "*/*"}))
        assert masked["authorization"] == REDACTED
        assert masked["accept"] == "*/*"

    def test_custom_sensitive_set(self) -> None:
        masker = HeaderMasker(["X-Session"])
        assert masker.mask({"x-session": "s", "Authorization": "a"}) == {
            "x-session": REDACTED,
            "Authorization": "a",
        }
        assert masker.is_sensitive("X-SESSION")

    def test_empty(self) -> None:
        assert mask_headers({}) == {}
