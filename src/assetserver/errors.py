"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure the server can meet falls into one of four buckets, and
each bucket has exactly one place where it is handled:

    ┌─────────────────────────────────────────────────────────────────────┐
    │   ERROR              RAISED BY            HANDLED BY                │
    ├─────────────────────────────────────────────────────────────────────┤
    │   BindError          SocketServer.bind    caller of start()         │
    │                                           (server never starts)     │
    │                                                                      │
    │   FileAccessError    AssetStore.read      PathResolver              │
    │                                           (becomes a 404)           │
    │                                                                      │
    │   TransportError     ConnectionHandler    ConnectionHandler         │
    │                                           (logged, socket closed)   │
    │                                                                      │
    │   malformed request  (not an exception)   parser defaults to        │
    │                                           /index.html               │
    └─────────────────────────────────────────────────────────────────────┘

Only BindError ever reaches the embedding application.

=============================================================================
"""


class AssetServerError(Exception):
    """Base class for all asset server errors."""


class BindError(AssetServerError):
    """
    Raised when the listening socket cannot be established.

    Typical causes are "Address already in use" (another process owns
    the port) and "Permission denied" (privileged port).
    """

    def __init__(self, host: str, port: int, reason: str):
        super().__init__(f"Cannot listen on {host}:{port}: {reason}")
        self.host = host
        self.port = port
        self.reason = reason


class FileAccessError(AssetServerError):
    """Raised when an asset cannot be read from (or copied into) the store."""

    def __init__(self, name: str, reason: str):
        super().__init__(f"Cannot access asset {name!r}: {reason}")
        self.name = name
        self.reason = reason


class TransportError(AssetServerError):
    """
    A socket-level failure on one client connection.

    Reset, broken pipe and similar errors are wrapped in this type so
    they can be logged uniformly. It never leaves the connection handler.
    """

    def __init__(self, connection_id: str, reason: str):
        super().__init__(f"[{connection_id}] transport error: {reason}")
        self.connection_id = connection_id
        self.reason = reason
