"""Tests for MasterClient class."""

from urllib.parse import parse_qs

import pytest
import requests
import responses

from webfilter.client import MasterClient
from webfilter.exceptions import ClientInputError, ConfigurationError, TransportError

BASE = "http://127.0.0.1:5001"


@pytest.fixture
def client():
    """Create a MasterClient instance for testing."""
    with MasterClient("127.0.0.1:5001", timeout=5) as c:
        yield c


class TestInit:
    """Tests for address handling."""

    def test_default_host(self):
        assert MasterClient(":6000").base_url == "http://127.0.0.1:6000"

    def test_ipv6(self):
        assert MasterClient("[::1]:5001").base_url == "http://[::1]:5001"

    def test_invalid_addr(self):
        with pytest.raises(ConfigurationError):
            MasterClient("localhost")


class TestValidate:
    """Tests for validate method."""

    @responses.activate
    def test_allowed(self, client):
        responses.add(responses.POST, f"{BASE}/rpc/validate", json={"ok": True}, status=200)
        assert client.validate("example.org") is True
        assert responses.calls[0].request.body == b'{"host": "example.org"}'

    @responses.activate
    def test_blocked(self, client):
        responses.add(responses.POST, f"{BASE}/rpc/validate", json={"ok": False}, status=200)
        assert client.validate("mail.example.com") is False

    @responses.activate
    def test_connection_error(self, client):
        responses.add(
            responses.POST,
            f"{BASE}/rpc/validate",
            body=requests.exceptions.ConnectionError("refused"),
        )
        with pytest.raises(TransportError, match="refused"):
            client.validate("example.org")

    @responses.activate
    def test_timeout(self, client):
        responses.add(
            responses.POST, f"{BASE}/rpc/validate", body=requests.exceptions.Timeout()
        )
        with pytest.raises(TransportError):
            client.validate("example.org")

    @responses.activate
    def test_no_retry(self, client):
        responses.add(responses.POST, f"{BASE}/rpc/validate", status=503)
        with pytest.raises(TransportError, match="503"):
            client.validate("example.org")
        assert len(responses.calls) == 1

    @responses.activate
    def test_invalid_json(self, client):
        responses.add(responses.POST, f"{BASE}/rpc/validate", body="nope", status=200)
        with pytest.raises(TransportError, match="Invalid JSON"):
            client.validate("example.org")

    @responses.activate
    def test_unexpected_shape(self, client):
        responses.add(responses.POST, f"{BASE}/rpc/validate", json={"ok": "yes"}, status=200)
        with pytest.raises(TransportError, match="Unexpected"):
            client.validate("example.org")


class TestAdminCommands:
    """Tests for add/open/close_host/hosts."""

    @responses.activate
    def test_add(self, client):
        responses.add(
            responses.POST, f"{BASE}/admin/add", status=302, headers={"Location": "/admin/"}
        )
        client.add("example.com")
        assert parse_qs(responses.calls[0].request.body) == {"suffix": ["example.com"]}

    @responses.activate
    def test_add_rejected(self, client):
        responses.add(
            responses.POST,
            f"{BASE}/admin/add",
            body="suffix must be a non-empty string",
            status=400,
        )
        with pytest.raises(ClientInputError, match="non-empty"):
            client.add("")

    @responses.activate
    def test_open(self, client):
        responses.add(
            responses.POST, f"{BASE}/admin/open", status=302, headers={"Location": "/admin/"}
        )
        client.open("example.com", 30)
        assert parse_qs(responses.calls[0].request.body) == {
            "suffix": ["example.com"],
            "mins": ["30"],
        }

    @responses.activate
    def test_close_host(self, client):
        responses.add(
            responses.POST, f"{BASE}/admin/close", status=302, headers={"Location": "/admin/"}
        )
        client.close_host("example.com")
        assert len(responses.calls) == 1

    @responses.activate
    def test_hosts(self, client):
        hosts = [{"suffix": "example.com", "closed": True, "mins_remaining": -1}]
        responses.add(responses.GET, f"{BASE}/admin/api/hosts", json=hosts, status=200)
        assert client.hosts() == hosts

    @responses.activate
    def test_hosts_unexpected_shape(self, client):
        responses.add(responses.GET, f"{BASE}/admin/api/hosts", json={"a": 1}, status=200)
        with pytest.raises(TransportError):
            client.hosts()
