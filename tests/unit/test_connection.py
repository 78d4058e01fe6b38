"""
Unit tests for the connection handler, driven over socket pairs.
"""

import socket
import time
from unittest import mock

import pytest

from assetserver.core.connection import Connection, ConnectionHandler, ConnectionState
from assetserver.http.resolver import PathResolver
from assetserver.http.status_codes import HTTPStatus
from assetserver.store import AssetStore


@pytest.fixture
def pair():
    """Connected (server side, client side) sockets."""
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    client_side.close()
    server_side.close()


def make_connection(sock, timeout: float = 0.3) -> Connection:
    return Connection(
        socket=sock,
        address=("127.0.0.1", 50000),
        timeout=timeout,
        linger_timeout=0.05,
    )


def read_all(sock) -> bytes:
    sock.settimeout(2.0)
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


class TestConnectionHandler:

    def test_serves_one_request_and_closes(self, pair, store: AssetStore):
        server_side, client_side = pair
        conn = make_connection(server_side)
        client_side.sendall(b"GET /index.css HTTP/1.1\r\n\r\n")

        response = ConnectionHandler(conn, PathResolver(store)).handle()

        assert response.status == HTTPStatus.OK
        assert conn.state == ConnectionState.CLOSED
        assert read_all(client_side) == response.to_bytes()

    def test_missing_file_is_404_not_error(self, pair, store: AssetStore):
        server_side, client_side = pair
        conn = make_connection(server_side)
        client_side.sendall(b"GET /missing.txt HTTP/1.1\r\n\r\n")

        response = ConnectionHandler(conn, PathResolver(store)).handle()

        assert response.status == HTTPStatus.NOT_FOUND
        assert conn.state == ConnectionState.CLOSED
        assert read_all(client_side).startswith(b"HTTP/1.1 404 Not Found\r\n")

    def test_malformed_request_serves_index(self, pair, store: AssetStore):
        server_side, client_side = pair
        client_side.sendall(b"hello?\r\n\r\n")

        response = ConnectionHandler(make_connection(server_side), PathResolver(store)).handle()

        assert response.status == HTTPStatus.OK
        assert response.body == b"<h1>hi</h1>"

    def test_timeout_writes_nothing(self, pair, store: AssetStore):
        server_side, client_side = pair
        conn = make_connection(server_side, timeout=0.2)

        started = time.monotonic()
        response = ConnectionHandler(conn, PathResolver(store)).handle()

        assert response is None
        assert time.monotonic() - started >= 0.2
        assert conn.state == ConnectionState.CLOSED
        assert read_all(client_side) == b""

    def test_peer_closed_before_sending(self, pair, store: AssetStore):
        server_side, client_side = pair
        client_side.shutdown(socket.SHUT_WR)

        conn = make_connection(server_side)
        assert ConnectionHandler(conn, PathResolver(store)).handle() is None
        assert conn.state == ConnectionState.CLOSED

    def test_resolver_failure_still_answers_once(self, pair):
        server_side, client_side = pair
        resolver = mock.Mock(spec=PathResolver)
        resolver.resolve.side_effect = RuntimeError("boom")
        client_side.sendall(b"GET / HTTP/1.1\r\n\r\n")

        response = ConnectionHandler(make_connection(server_side), resolver).handle()

        assert response.status == HTTPStatus.NOT_FOUND
        assert read_all(client_side).count(b"HTTP/1.1") == 1


class TestTransportErrors:

    def _broken_socket(self, **errors):
        sock = mock.Mock(spec=socket.socket)
        for method, exc in errors.items():
            getattr(sock, method).side_effect = exc
        return sock

    def test_reset_while_reading(self, store: AssetStore):
        sock = self._broken_socket(recv=ConnectionResetError("reset by peer"))
        conn = make_connection(sock)

        assert ConnectionHandler(conn, PathResolver(store)).handle() is None
        assert conn.state == ConnectionState.ERRORED
        sock.close.assert_called_once()

    def test_broken_pipe_while_writing(self, store: AssetStore):
        sock = self._broken_socket(sendall=BrokenPipeError("broken pipe"))
        sock.recv.side_effect = [b"GET / HTTP/1.1\r\n\r\n", b""]
        conn = make_connection(sock)

        assert ConnectionHandler(conn, PathResolver(store)).handle() is None
        assert conn.state == ConnectionState.ERRORED
        sock.close.assert_called_once()


class TestConnectionClose:

    def test_close_is_idempotent(self, pair):
        server_side, _ = pair
        conn = make_connection(server_side)

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_close_sends_fin(self, pair):
        server_side, client_side = pair
        conn = make_connection(server_side)

        with conn:
            conn.send_response(b"data")

        assert read_all(client_side) == b"data"

    def test_drain_is_bounded(self):
        """A peer that never stops sending cannot hold the close open."""
        sock = mock.Mock(spec=socket.socket)
        sock.recv.return_value = b"x"
        conn = make_connection(sock)

        started = time.monotonic()
        conn.close()

        assert time.monotonic() - started < 1.0
        sock.close.assert_called_once()
        assert conn.state == ConnectionState.CLOSED
