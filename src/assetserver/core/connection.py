"""
=============================================================================
CONNECTION HANDLING
=============================================================================

One accepted socket, from accept to close, carrying exactly one request.

=============================================================================
ONE CHUNK, ONE REQUEST
=============================================================================

TCP is a byte stream and a request can in principle arrive split over
several recv() calls. Our only client is a co-located renderer sending
tiny GET requests, so the first chunk is treated as the whole request:

    Client sends:   GET /index.css HTTP/1.1\r\nHost: ...\r\n\r\n
    Server reads:   recv(8192) → everything above, in one piece

No buffering and no header scanning. If a client ever did split the
request line, the parser would fall back to /index.html.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    ┌──────┐  recv()   ┌─────────┐  parsed  ┌───────────┐  built  ┌─────────┐
    │ IDLE │ ────────► │ READING │ ───────► │ RESOLVING │ ──────► │ WRITING │
    └──────┘           └────┬────┘          └─────┬─────┘         └────┬────┘
                            │ timeout /           │                    │ sent
                            │ peer closed         │                    ▼
                            │                     │               ┌────────┐
                            └─────────────────────┼─────────────► │ CLOSED │
                                                  │               └────────┘
               socket error in READING / RESOLVING / WRITING
                            │
                            ▼
                       ┌─────────┐
                       │ ERRORED │   (logged, socket closed, absorbing)
                       └─────────┘

=============================================================================
TIMEOUTS
=============================================================================

The socket timeout is armed as soon as the connection is wrapped. A
client that connects and sends nothing is disconnected after `timeout`
seconds, and no bytes are written to it.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from ..errors import TransportError
from ..http.request import parse_request
from ..http.resolver import PathResolver
from ..http.response import ResolvedResponse, build_response, not_found


logger = logging.getLogger(__name__)

# One line per answered request, Apache-style
access_logger = logging.getLogger("assetserver.access")


class ConnectionState(Enum):
    """Connection lifecycle states."""

    IDLE = "idle"            # Accepted, nothing read yet
    READING = "reading"      # Waiting for the request bytes
    RESOLVING = "resolving"  # Parsing, looking up the asset
    WRITING = "writing"      # Sending the response
    CLOSED = "closed"        # Socket released normally
    ERRORED = "errored"      # Socket failed; released, terminal


@dataclass
class Connection:
    """
    A client socket plus the bookkeeping for one request.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier for log correlation.
        state: Current ConnectionState.
        created_at: time.monotonic() at accept.
    """

    socket: socket.socket
    address: Tuple[str, int]

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    state: ConnectionState = ConnectionState.IDLE
    created_at: float = field(default_factory=time.monotonic)

    buffer_size: int = 8192
    timeout: float = 5.0
    linger_timeout: float = 0.5

    _released: bool = field(default=False, repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.monotonic() - self.created_at

    def read_request(self) -> Optional[bytes]:
        """
        Read the request with a single recv().

        Returns:
            The first chunk the client sent, or None if the client sent
            nothing before the timeout or closed its end first.

        Raises:
            TransportError: On reset or any other socket failure.
        """
        self.state = ConnectionState.READING
        try:
            data = self.socket.recv(self.buffer_size)
        except socket.timeout:
            logger.debug(f"[{self.id}] No data within {self.timeout}s, closing")
            return None
        except OSError as e:
            raise TransportError(self.id, str(e)) from e

        if not data:
            logger.debug(f"[{self.id}] Client closed before sending a request")
            return None
        return data

    def send_response(self, data: bytes) -> None:
        """
        Write the whole response.

        sendall() loops until every byte is handed to the kernel, so a
        response is never left half-written on a healthy socket.

        Raises:
            TransportError: On broken pipe, reset or timeout.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
        except OSError as e:
            raise TransportError(self.id, str(e)) from e

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR)  → FIN, the client sees end-of-body
        2. drain briefly      → unread request bytes don't turn the
                                close into a RST; at most
                                linger_timeout seconds in total
        3. close()            → release the file descriptor

        Safe to call more than once. An ERRORED connection stays ERRORED.
        """
        if self._released:
            return
        self._released = True

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        deadline = time.monotonic() + self.linger_timeout
        try:
            self.socket.settimeout(self.linger_timeout)
            while time.monotonic() < deadline and self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        if self.state != ConnectionState.ERRORED:
            self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection {self.state.value} after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class ConnectionHandler:
    """
    Processes one Connection end to end: read → resolve → write → close.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        handle() Flow                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   read_request()  ── None ──────────────────────────► close          │
    │        │                                                             │
    │        ▼                                                             │
    │   parse_request() → resolver.resolve() → build_response()           │
    │        │            (file errors are already a NotFound)            │
    │        ▼                                                             │
    │   send_response() ──────────────────────────────────► close          │
    │                                                                      │
    │   TransportError anywhere ──► ERRORED, log, close                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    A handler owns its connection and its request/response values; the
    resolver it shares with other handlers is stateless.
    """

    def __init__(self, connection: Connection, resolver: PathResolver):
        self.connection = connection
        self.resolver = resolver

    def handle(self) -> Optional[ResolvedResponse]:
        """
        Run the connection to completion.

        Returns:
            The response that was written, or None if nothing was sent
            (timeout, early close, or transport error).
        """
        conn = self.connection
        started = time.monotonic()

        with conn:
            try:
                raw = conn.read_request()
                if raw is None:
                    return None

                conn.state = ConnectionState.RESOLVING
                request = parse_request(raw, conn.address)
                response = self._respond(request.path)

                conn.send_response(response.to_bytes())
            except TransportError as e:
                conn.state = ConnectionState.ERRORED
                logger.warning(str(e))
                return None

        duration_ms = (time.monotonic() - started) * 1000
        access_logger.info(
            f'{request.client_ip} - - "{request.path}" '
            f"{int(response.status)} {len(response.body)} {duration_ms:.2f}ms"
        )
        return response

    def _respond(self, path: str) -> ResolvedResponse:
        try:
            return build_response(self.resolver.resolve(path))
        except Exception:
            # Exactly one response per connection, even on a resolver bug
            logger.exception(f"[{self.connection.id}] Unexpected error resolving {path!r}")
            return not_found()
