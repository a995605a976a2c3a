import json
from unittest.mock import MagicMock

import httpx
import pytest
from pydantic import ValidationError

from idx_flow.client import AuthClient
from idx_flow.config import IdxConfig, get_oauth_domain, validate_version_config
from idx_flow.errors import AuthApiError, ConfigurationError, TransportError
from idx_flow.storage import FileStorage, MemoryStorage
from idx_flow.transport import HttpTransport

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def test_config_from_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("IDX_ISSUER", "https://example.okta.com/oauth2/default/")
    monkeypatch.setenv("IDX_TRANSACTION_FILE", str(tmp_path / "tx.json"))
    monkeypatch.setenv("IDX_HTTP_TIMEOUT", "3.5")
    monkeypatch.delenv("IDX_API_VERSION", raising=False)

    config = IdxConfig.from_env()

    assert config.issuer == "https://example.okta.com/oauth2/default"
    assert config.version == "1.0.0"
    assert config.http_timeout == 3.5
    assert isinstance(AuthClient(config, transport=MagicMock()).storage, FileStorage)


def test_config_requires_issuer():
    with pytest.raises(ValidationError):
        IdxConfig(issuer="  ")


def test_oauth_domain():
    assert get_oauth_domain("https://example.okta.com/oauth2/default") == "https://example.okta.com"
    assert get_oauth_domain("https://example.okta.com") == "https://example.okta.com"


@pytest.mark.parametrize("version", ["", None, "1.0.0 ", "9.9.9"])
def test_invalid_versions(version):
    with pytest.raises(ConfigurationError):
        validate_version_config(version)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


def test_file_storage_round_trip(tmp_path):
    storage = FileStorage(str(tmp_path / "nested" / "tx.json"))
    assert storage.load() is None

    storage.save({"version": "1.0.0", "stateHandle": "s"})
    assert json.loads((tmp_path / "nested" / "tx.json").read_text()) == {"stateHandle": "s", "version": "1.0.0"}
    assert storage.load() == {"version": "1.0.0", "stateHandle": "s"}

    storage.clear()
    assert storage.load() is None


def test_memory_storage_clear():
    storage = MemoryStorage({"version": "1.0.0"})
    storage.clear()
    assert storage.load() is None


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


def _transport(handler) -> HttpTransport:
    return HttpTransport(client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_transport_returns_json_body():
    def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content) == {"interactionHandle": "ih"}
        return httpx.Response(200, json={"version": "1.0.0"})

    body = _transport(handler).request("POST", "https://example.okta.com/idp/idx/introspect", args={"interactionHandle": "ih"})
    assert body == {"version": "1.0.0"}


def test_transport_error_status_carries_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"version": "1.0.0", "messages": {}}, headers={"WWW-Authenticate": "Bearer"})

    with pytest.raises(AuthApiError) as excinfo:
        _transport(handler).request("POST", "https://example.okta.com/idp/idx/identify")

    assert excinfo.value.status_code == 401
    assert excinfo.value.response_body["version"] == "1.0.0"
    assert excinfo.value.headers["www-authenticate"] == "Bearer"


def test_transport_network_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TransportError) as excinfo:
        _transport(handler).request("POST", "https://example.okta.com/idp/idx/identify")

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
