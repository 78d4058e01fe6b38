"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    SocketServer       listening socket, accept loop
    Connection         one client socket, one request
    ConnectionHandler  read → resolve → write → close for a Connection

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionHandler, ConnectionState

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionHandler",
    "ConnectionState",
]
