"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the asset server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m assetserver --port 3000                         │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── ASSET_SERVER_PORT=3000 python -m assetserver              │
    │                                                                      │
    │   3. Defaults in this dataclass                                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The server only ever listens on loopback. validate() enforces that, so
a misconfigured host fails at startup instead of exposing the asset
directory to the network.

=============================================================================
"""

import ipaddress
import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the asset server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size

    TIMEOUTS
    - timeout, accept_timeout, drain_timeout

    ASSET STORE
    - root_dir, bundle_dir

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Loopback address to bind to ("127.0.0.1", "::1" or "localhost")."""

    port: int = 8080
    """Port to listen on. 0 lets the OS pick a free port (used by tests)."""

    backlog: int = 16
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 8192
    """
    Size of the single recv() that reads the request.
    The first chunk is treated as the complete request.
    """

    # ─────────────────────────────────────────────────────────────────────
    # TIMEOUTS
    # ─────────────────────────────────────────────────────────────────────

    timeout: float = 5.0
    """
    Per-connection inactivity timeout in seconds.
    A client that sends nothing within this window is disconnected
    without a response.
    """

    accept_timeout: float = 0.5
    """How often the accept loop wakes up to check for shutdown."""

    drain_timeout: float = 5.0
    """How long shutdown waits for in-flight connections to finish."""

    # ─────────────────────────────────────────────────────────────────────
    # ASSET STORE
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "dist"
    """Flat directory the assets are served from."""

    bundle_dir: Optional[str] = None
    """
    Directory of bundled resources copied into root_dir before serving.
    None means root_dir is already populated.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        ASSET_SERVER_HOST       Bind host (default: 127.0.0.1)
        ASSET_SERVER_PORT       Bind port (default: 8080)
        ASSET_SERVER_TIMEOUT    Connection timeout in seconds (default: 5)
        ASSET_SERVER_ROOT       Asset directory (default: dist)
        ASSET_SERVER_BUNDLE     Bundled resources directory (default: None)
        ASSET_SERVER_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        """
        return cls(
            host=os.getenv("ASSET_SERVER_HOST", "127.0.0.1"),
            port=int(os.getenv("ASSET_SERVER_PORT", "8080")),
            timeout=float(os.getenv("ASSET_SERVER_TIMEOUT", "5")),
            root_dir=os.getenv("ASSET_SERVER_ROOT", "dist"),
            bundle_dir=os.getenv("ASSET_SERVER_BUNDLE"),
            log_level=os.getenv("ASSET_SERVER_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once by AssetServer.__init__ so bad settings fail fast,
        before any socket is created.

        Raises:
            ValueError: If any setting is out of range.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if not is_loopback(self.host):
            raise ValueError(f"host must be a loopback address, got {self.host!r}")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        for name in ("timeout", "accept_timeout", "drain_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")


def is_loopback(host: str) -> bool:
    """True for "localhost" and any IPv4/IPv6 loopback address."""
    if host == "localhost":
        return True
    try:
        return ipaddress.ip_address(host).is_loopback
    except ValueError:
        return False
