"""
pytest configuration and fixtures.
"""

import socket
from pathlib import Path
from typing import Dict, Generator, Tuple

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from assetserver import AssetServer, AssetStore, ServerConfig


INDEX_HTML = b"<h1>hi</h1>"
INDEX_CSS = b"body{}"
UNICODE_HTML = "<p>héllo wörld ✓</p>".encode("utf-8")


@pytest.fixture
def asset_dir(tmp_path: Path) -> Path:
    """A populated asset directory."""
    root = tmp_path / "dist"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "index.css").write_bytes(INDEX_CSS)
    (root / "unicode.html").write_bytes(UNICODE_HTML)
    return root


@pytest.fixture
def store(asset_dir: Path) -> AssetStore:
    return AssetStore(asset_dir)


@pytest.fixture
def config(asset_dir: Path) -> ServerConfig:
    """Test configuration: ephemeral port, short timeouts."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=1.0,
        accept_timeout=0.1,
        drain_timeout=2.0,
        root_dir=str(asset_dir),
        log_level="WARNING",
    )


@pytest.fixture
def running_server(config: ServerConfig, store: AssetStore) -> Generator[AssetServer, None, None]:
    """An AssetServer accepting connections on an ephemeral port."""
    server = AssetServer(config, store=store)
    server.start()

    yield server

    server.shutdown()


def server_port(server: AssetServer) -> int:
    return int(server.url.rsplit(":", 1)[1])


def fetch(port: int, raw: bytes, timeout: float = 5.0) -> bytes:
    """Send raw request bytes and read until the server closes."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        s.sendall(raw)
        chunks = []
        while True:
            chunk = s.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def split_response(data: bytes) -> Tuple[str, Dict[str, str], bytes]:
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return lines[0], headers, body


@pytest.fixture
def send_raw(running_server: AssetServer):
    """Send raw bytes to the running server, returning the raw reply."""
    port = server_port(running_server)

    def send(raw: bytes) -> bytes:
        return fetch(port, raw)

    return send


@pytest.fixture
def http_get(send_raw):
    """GET a path from the running server, returning (status line, headers, body)."""

    def get(path: str):
        return split_response(send_raw(f"GET {path} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode()))

    return get
