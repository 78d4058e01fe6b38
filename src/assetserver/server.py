"""
=============================================================================
SERVER LIFECYCLE
=============================================================================

AssetServer ties the pieces together and is the one object an embedding
application holds on to.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        AssetServer.start()                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. populate store from bundle_dir (if configured)                 │
    │          └── FileAccessError ──► on_error(msg), raise               │
    │                                                                      │
    │   2. SocketServer.bind()  (bind + listen, synchronous)              │
    │          └── BindError ──────► on_error(msg), raise                 │
    │                                                                      │
    │   3. accept loop on a background thread                             │
    │          └── each Connection ──► new ConnectionHandler              │
    │                                  on its own thread                  │
    │                                                                      │
    │   4. on_ready(url)    (only now is the address reachable)           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
USAGE
=============================================================================

Embedded, with callbacks:

    server = AssetServer(
        ServerConfig(root_dir="dist", bundle_dir="assets/dist"),
        on_ready=lambda url: webview.load(url),
        on_error=lambda msg: banner.show(msg),
    )
    server.start()
    ...
    server.shutdown()

Scoped:

    with AssetServer(ServerConfig(port=0)) as server:
        fetch(server.url + "/index.html")

Standalone (blocks, Ctrl+C to stop):

    AssetServer(ServerConfig.from_env()).serve_forever()

=============================================================================
THREADING
=============================================================================

One thread accepts; every connection gets its own short-lived thread.
Handlers share only the PathResolver and AssetStore, both read-only.
The set of live handler threads is the only mutable shared state and is
used for nothing but the best-effort drain in shutdown().

=============================================================================
"""

import logging
import signal
import threading
import time
from typing import Callable, Optional, Set

from .config import ServerConfig
from .core import Connection, ConnectionHandler, SocketServer
from .errors import BindError, FileAccessError
from .http.resolver import PathResolver
from .store import AssetStore


logger = logging.getLogger(__name__)


ReadyCallback = Callable[[str], None]
ErrorCallback = Callable[[str], None]


def configure_logging(level: str = "INFO"):
    """Configure root logging for standalone use (the CLI)."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("assetserver").setLevel(log_level)


def format_url(host: str, port: int) -> str:
    if ":" in host:
        host = f"[{host}]"
    return f"http://{host}:{port}"


class AssetServer:
    """
    Loopback static asset server.

    =========================================================================
    FEATURES
    =========================================================================

    - One GET request per connection, answered once, then closed
    - Serves a flat asset directory; "/" maps to index.html
    - Synthetic empty favicon, 404 for everything unreadable
    - Per-connection inactivity timeout
    - Readiness / error callbacks for the embedding application
    - Graceful shutdown with a best-effort drain

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        store: Optional[AssetStore] = None,
        on_ready: Optional[ReadyCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        """
        Args:
            config: Server configuration. Defaults to 127.0.0.1:8080
                    serving ./dist.
            store: Asset store to serve. Defaults to config.root_dir.
            on_ready: Called with the bound URL once the server accepts
                      connections.
            on_error: Called with a human-readable message if startup
                      fails.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self.store = store or AssetStore(self.config.root_dir)
        self.on_ready = on_ready
        self.on_error = on_error

        self._socket_server = SocketServer(self.config)
        self._resolver = PathResolver(self.store)

        self._accept_thread: Optional[threading.Thread] = None
        self._handlers: Set[threading.Thread] = set()
        self._handlers_lock = threading.Lock()
        self._url: Optional[str] = None

    @property
    def url(self) -> Optional[str]:
        """Bound URL, or None before start()."""
        return self._url

    @property
    def is_running(self) -> bool:
        return self._accept_thread is not None and self._accept_thread.is_alive()

    @property
    def active_connections(self) -> int:
        with self._handlers_lock:
            return len(self._handlers)

    # =========================================================================
    # STARTUP
    # =========================================================================

    def start(self) -> str:
        """
        Bind, listen and start accepting in the background.

        Returns:
            The bound URL, e.g. "http://127.0.0.1:8080".

        Raises:
            BindError: The listening socket could not be established.
            FileAccessError: The bundled assets could not be copied.
            RuntimeError: The server is already running.
        """
        if self.is_running:
            raise RuntimeError("Server is already running")

        try:
            if self.config.bundle_dir:
                self.store.populate(self.config.bundle_dir)
            host, port = self._socket_server.bind()
        except (BindError, FileAccessError) as e:
            self._notify_error(f"Error starting asset server: {e}")
            raise

        self._url = format_url(host, port)

        self._accept_thread = threading.Thread(
            target=self._socket_server.serve,
            args=(self._dispatch,),
            name="assetserver-accept",
            daemon=True,
        )
        self._accept_thread.start()

        logger.info(f"Serving {self.store.root_dir} at {self._url}")
        if self.on_ready is not None:
            self.on_ready(self._url)
        return self._url

    def _notify_error(self, message: str):
        logger.error(message)
        if self.on_error is not None:
            self.on_error(message)

    # =========================================================================
    # CONNECTION DISPATCH
    # =========================================================================

    def _dispatch(self, conn: Connection):
        """Give a freshly accepted connection its own handler thread."""
        handler = ConnectionHandler(conn, self._resolver)
        thread = threading.Thread(
            target=self._run_handler,
            args=(handler,),
            name=f"assetserver-conn-{conn.id}",
            daemon=True,
        )
        with self._handlers_lock:
            self._handlers.add(thread)
        try:
            thread.start()
        except RuntimeError as e:
            logger.error(f"[{conn.id}] Cannot start handler thread: {e}")
            with self._handlers_lock:
                self._handlers.discard(thread)
            conn.close()

    def _run_handler(self, handler: ConnectionHandler):
        try:
            handler.handle()
        except Exception:
            # Thread boundary: a failed handler must never reach the listener
            logger.exception(f"[{handler.connection.id}] Connection handler crashed")
        finally:
            with self._handlers_lock:
                self._handlers.discard(threading.current_thread())

    # =========================================================================
    # SHUTDOWN
    # =========================================================================

    def shutdown(self, drain_timeout: Optional[float] = None):
        """
        Stop accepting and release the listening socket.

        In-flight connections are not aborted; they get up to
        drain_timeout seconds (config.drain_timeout by default) to finish.
        Safe to call more than once.
        """
        accept_thread, self._accept_thread = self._accept_thread, None
        if accept_thread is None:
            return

        self._socket_server.shutdown()
        accept_thread.join(timeout=self.config.accept_timeout * 4)

        if drain_timeout is None:
            drain_timeout = self.config.drain_timeout
        remaining = self._drain(drain_timeout)
        if remaining:
            logger.warning(f"Shutdown finished with {remaining} connection(s) still open")

        logger.info("Asset server stopped")

    def _drain(self, timeout: float) -> int:
        deadline = time.monotonic() + timeout
        with self._handlers_lock:
            pending = list(self._handlers)

        for thread in pending:
            if thread is threading.current_thread():
                continue
            thread.join(max(0.0, deadline - time.monotonic()))

        with self._handlers_lock:
            return len(self._handlers)

    # =========================================================================
    # BLOCKING ENTRY POINT
    # =========================================================================

    def serve_forever(self):
        """
        Start and block until SIGINT/SIGTERM (or shutdown() from another
        thread).

        Signal handlers are installed only on the main thread and are
        restored on exit, so embedding applications keep their own.
        """
        self.start()

        original_handlers = {}
        if threading.current_thread() is threading.main_thread():
            def shutdown_handler(signum, frame):
                logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
                self._socket_server.shutdown()

            for sig in (signal.SIGINT, signal.SIGTERM):
                original_handlers[sig] = signal.signal(sig, shutdown_handler)

        try:
            accept_thread = self._accept_thread
            while accept_thread is not None and accept_thread.is_alive():
                # Timed join keeps the main thread responsive to signals
                accept_thread.join(0.5)
        finally:
            for sig, handler in original_handlers.items():
                signal.signal(sig, handler)
            self.shutdown()

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self) -> "AssetServer":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False
