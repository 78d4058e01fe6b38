"""
=============================================================================
ASSETSERVER - Loopback Static Asset Server
=============================================================================

A tiny HTTP file server meant to live inside a host application and
serve its bundled web assets (HTML/CSS/JS) to a co-located renderer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         REQUEST PATH                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer ──accept──► ConnectionHandler                        │
    │                                 │                                    │
    │                                 ├── read one chunk                   │
    │                                 ├── parse_request()   "GET /x HTTP" │
    │                                 ├── PathResolver      → AssetStore  │
    │                                 ├── build_response()  200 / 404     │
    │                                 └── write, FIN, close               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

One request per connection, no keep-alive, no TLS, loopback only.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    assetserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m assetserver)
    ├── server.py            # AssetServer lifecycle object
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # BindError, FileAccessError, TransportError
    ├── store.py             # AssetStore, ServedAsset
    ├── core/
    │   ├── socket_server.py # Listening socket, accept loop
    │   └── connection.py    # Connection, ConnectionHandler
    └── http/
        ├── request.py       # Request path extraction
        ├── resolver.py      # Path → Found / NotFound
        ├── response.py      # Found / NotFound → bytes
        ├── status_codes.py  # 200 / 404
        └── mime_types.py    # Extension → Content-Type

=============================================================================
QUICK START
=============================================================================

    from assetserver import AssetServer, ServerConfig

    server = AssetServer(
        ServerConfig(root_dir="dist", bundle_dir="assets/dist"),
        on_ready=lambda url: print("ready at", url),
    )
    server.start()
    ...
    server.shutdown()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .errors import AssetServerError, BindError, FileAccessError, TransportError
from .server import AssetServer, configure_logging
from .store import AssetStore, ServedAsset

__all__ = [
    "AssetServer",
    "ServerConfig",
    "AssetStore",
    "ServedAsset",
    "AssetServerError",
    "BindError",
    "FileAccessError",
    "TransportError",
    "configure_logging",
    "__version__",
]
