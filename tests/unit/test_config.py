"""
Unit tests for server configuration.
"""

import pytest

from assetserver.config import ServerConfig, is_loopback


class TestDefaults:

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.timeout == 5.0
        assert config.root_dir == "dist"
        assert config.bundle_dir is None

    def test_defaults_validate(self):
        ServerConfig().validate()


class TestValidate:

    @pytest.mark.parametrize("port", [-1, 65536])
    def test_port_range(self, port):
        with pytest.raises(ValueError, match="port"):
            ServerConfig(port=port).validate()

    def test_port_zero_allowed(self):
        ServerConfig(port=0).validate()

    @pytest.mark.parametrize("host", ["0.0.0.0", "192.168.1.10", "example.com"])
    def test_rejects_non_loopback(self, host):
        with pytest.raises(ValueError, match="loopback"):
            ServerConfig(host=host).validate()

    @pytest.mark.parametrize("field", ["timeout", "accept_timeout", "drain_timeout"])
    def test_timeouts_positive(self, field):
        with pytest.raises(ValueError, match=field):
            ServerConfig(**{field: 0}).validate()

    def test_buffer_size(self):
        with pytest.raises(ValueError, match="buffer_size"):
            ServerConfig(buffer_size=10).validate()

    def test_log_level(self):
        with pytest.raises(ValueError, match="log level"):
            ServerConfig(log_level="LOUD").validate()


@pytest.mark.parametrize("host, expected", [
    ("127.0.0.1", True),
    ("127.1.2.3", True),
    ("::1", True),
    ("localhost", True),
    ("0.0.0.0", False),
    ("10.0.0.1", False),
    ("not-a-host", False),
])
def test_is_loopback(host, expected):
    assert is_loopback(host) is expected


def test_from_env(monkeypatch):
    monkeypatch.setenv("ASSET_SERVER_PORT", "3000")
    monkeypatch.setenv("ASSET_SERVER_TIMEOUT", "2.5")
    monkeypatch.setenv("ASSET_SERVER_ROOT", "/tmp/site")
    monkeypatch.setenv("ASSET_SERVER_BUNDLE", "/opt/bundle")
    monkeypatch.setenv("ASSET_SERVER_LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("ASSET_SERVER_HOST", raising=False)

    config = ServerConfig.from_env()

    assert config.host == "127.0.0.1"
    assert config.port == 3000
    assert config.timeout == 2.5
    assert config.root_dir == "/tmp/site"
    assert config.bundle_dir == "/opt/bundle"
    assert config.log_level == "DEBUG"
