"""Tests for rate limiting and client address resolution behind proxies."""

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from papyrusdb import rate_limit
from papyrusdb.config import get_settings
from papyrusdb.main import app


def _request(peer: str, forwarded_for: str | None = None) -> Request:
    headers = []
    if forwarded_for is not None:
        headers.append((b"x-forwarded-for", forwarded_for.encode()))
    return Request({"type": "http", "headers": headers, "client": (peer, 51234)})


@pytest.fixture
def trusted(monkeypatch):
    """Reload the trusted proxy list from TRUSTED_PROXY_CIDRS."""
    def _set(value: str | None):
        if value is None:
            monkeypatch.delenv("TRUSTED_PROXY_CIDRS", raising=False)
        else:
            monkeypatch.setenv("TRUSTED_PROXY_CIDRS", value)
        monkeypatch.setattr(rate_limit, "_trusted_networks", None)
    return _set


class TestClientIp:
    """X-Forwarded-For is honored only from trusted proxies."""

    def test_forwarded_for_from_trusted_proxy(self, trusted):
        trusted(None)
        request = _request("127.0.0.1", "203.0.113.7, 10.0.0.2")
        assert rate_limit.get_client_ip(request) == "203.0.113.7"

    def test_forwarded_for_from_untrusted_peer_ignored(self, trusted):
        trusted(None)
        request = _request("198.51.100.20", "203.0.113.7")
        assert rate_limit.get_client_ip(request) == "198.51.100.20"

    def test_trusted_proxy_without_header(self, trusted):
        trusted(None)
        assert rate_limit.get_client_ip(_request("192.168.1.10")) == "192.168.1.10"

    def test_custom_cidrs_replace_defaults(self, trusted):
        trusted("198.51.100.0/24")
        assert rate_limit.get_client_ip(_request("198.51.100.20", "203.0.113.7")) == "203.0.113.7"
        assert rate_limit.get_client_ip(_request("127.0.0.1", "203.0.113.7")) == "127.0.0.1"

    def test_invalid_cidr_skipped(self, trusted):
        trusted("10.0.0.0/8, not-a-cidr")
        networks = rate_limit._get_trusted_networks()
        assert [str(n) for n in networks] == ["10.0.0.0/8"]

    def test_non_ip_peer_is_not_trusted(self, trusted):
        trusted(None)
        assert rate_limit._is_trusted_proxy("testclient") is False


class TestLimiter:
    """Default limit applied to every route."""

    def test_limit_exceeded_returns_429(self, monkeypatch, auth_headers):
        monkeypatch.setenv("PAPYRUS_RATE_LIMIT", "2/minute")
        monkeypatch.setenv("PAPYRUS_RATE_LIMIT_ENABLED", "true")
        get_settings.cache_clear()
        try:
            monkeypatch.setattr(app.state, "limiter", rate_limit.build_limiter())
            client = TestClient(app)
            codes = [client.get("/status", headers=auth_headers).status_code for _ in range(3)]
        finally:
            get_settings.cache_clear()

        assert codes == [200, 200, 429]

    def test_disabled_limiter_lets_requests_through(self, auth_headers):
        assert app.state.limiter.enabled is False
        client = TestClient(app)
        codes = {client.get("/status", headers=auth_headers).status_code for _ in range(5)}
        assert codes == {200}
