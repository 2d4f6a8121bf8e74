"""Unit tests for request throttling keys and the audit trail helpers."""
import pytest
from starlette.requests import Request

from gymcore import rate_limit
from gymcore.logging_middleware import gym_in_path


def _request(headers=None, client=("10.0.0.5", 5123)):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/auth/login",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestClientAddress:
    """Test which address requests are throttled on."""

    def test_peer_address_by_default(self):
        """Forwarded headers are ignored unless trusted."""
        request = _request({"X-Forwarded-For": "203.0.113.9"})
        assert rate_limit.client_address(request) == "10.0.0.5"

    def test_first_forwarded_hop_when_trusted(self, monkeypatch):
        """Test the original client behind a proxy."""
        monkeypatch.setattr(rate_limit.settings, "trust_proxy_headers", True)
        request = _request({"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})
        assert rate_limit.client_address(request) == "203.0.113.9"

    def test_trusted_without_header(self, monkeypatch):
        """Test falling back to the peer address."""
        monkeypatch.setattr(rate_limit.settings, "trust_proxy_headers", True)
        assert rate_limit.client_address(_request()) == "10.0.0.5"


class TestGymInPath:
    """Test the gym recorded on audit lines."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/api/gym/12/members", 12),
            ("/api/gym/7", 7),
            ("/api/gyms/3", 3),
            ("/api/gyms", None),
            ("/api/gym-auth/login", None),
            ("/api/marketplace/gyms/123456", None),
        ],
    )
    def test_paths(self, path, expected):
        assert gym_in_path(path) == expected
