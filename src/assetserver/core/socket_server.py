"""
=============================================================================
LISTENING SOCKET
=============================================================================

Owns the listening socket: create, bind, listen, accept, release.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create the socket
    2. bind()      Reserve 127.0.0.1:PORT      ─┐
    3. listen()    Start queueing connections  ─┴─ BindError if either fails
    4. accept()    One new socket per client (loops until shutdown)
    5. close()     Release the port

bind() and serve() are separate steps on purpose: the lifecycle object
binds synchronously (so a busy port is reported to the caller before
anything else happens) and only then runs the accept loop on a thread.

=============================================================================
SOCKET OPTIONS
=============================================================================

SO_REUSEADDR:
    Rebind immediately after a restart instead of waiting out TIME_WAIT.

TCP_NODELAY:
    Send small responses right away instead of waiting for Nagle's
    algorithm to coalesce them.

Accept timeout:
    accept() wakes up every `accept_timeout` seconds so the loop sees
    a shutdown request without needing the socket to be closed under it.

Accept errors:
    A failed accept() (aborted handshake, descriptor exhaustion) is
    logged and retried after `accept_timeout`. Only shutdown() ends
    the loop.

=============================================================================
"""

import logging
import socket
import time
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from ..errors import BindError
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP listener.

    Usage:
        def on_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.bind()                # raises BindError
        server.serve(on_connection)  # blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

    @property
    def bound_address(self) -> Tuple[str, int]:
        """
        Actual (host, port) of the listening socket.

        Differs from the config when port 0 was requested.
        """
        if self._socket is None:
            return (self.config.host, self.config.port)
        return self._socket.getsockname()[:2]

    def _create_socket(self) -> socket.socket:
        family = socket.AF_INET6 if ":" in self.config.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.settimeout(self.config.accept_timeout)
        return sock

    def bind(self) -> Tuple[str, int]:
        """
        Create, bind and listen.

        Returns:
            The bound (host, port).

        Raises:
            BindError: If the address is in use, not permitted, or
                       otherwise unavailable.
        """
        host, port = self.config.host, self.config.port
        sock = self._create_socket()
        try:
            sock.bind((host, port))
            sock.listen(self.config.backlog)
        except OSError as e:
            sock.close()
            logger.error(f"Failed to bind to {host}:{port}: {e}")
            raise BindError(host, port, e.strerror or str(e)) from e

        self._socket = sock
        self._running = True

        bound_host, bound_port = self.bound_address
        logger.info(f"Listening on {bound_host}:{bound_port}")
        return bound_host, bound_port

    def serve(self, connection_handler: Callable[[Connection], None]):
        """
        Run the accept loop until shutdown().

        Each accepted socket is wrapped in a Connection (which arms the
        inactivity timeout) and passed to connection_handler. The
        callback must not block: it is expected to hand the connection
        to its own thread.
        """
        if self._socket is None:
            raise RuntimeError("bind() must be called before serve()")

        try:
            while self._running:
                try:
                    client_socket, client_address = self._socket.accept()
                except socket.timeout:
                    continue
                except OSError as e:
                    if not self._running:
                        break
                    # ECONNABORTED, EMFILE and friends are per-attempt
                    logger.error(f"Accept error: {e}")
                    time.sleep(self.config.accept_timeout)
                    continue

                logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

                try:
                    conn = Connection(
                        socket=client_socket,
                        address=client_address[:2],
                        buffer_size=self.config.buffer_size,
                        timeout=self.config.timeout,
                    )
                except OSError as e:
                    # Client vanished between accept() and setup
                    logger.warning(f"Dropping connection from {client_address[0]}: {e}")
                    client_socket.close()
                    continue

                connection_handler(conn)
        finally:
            self._cleanup()

    def shutdown(self):
        """
        Stop accepting connections.

        Idempotent and safe to call from any thread or a signal handler.
        The listening socket is released by the accept loop within
        accept_timeout seconds.
        """
        if self._running:
            logger.info("Shutting down listener...")
        self._running = False

    def _cleanup(self):
        if self._socket is not None:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None
            logger.info("Listener stopped")
