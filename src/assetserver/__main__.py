"""
=============================================================================
ASSET SERVER CLI ENTRY POINT
=============================================================================

    # Serve ./dist on 127.0.0.1:8080
    python -m assetserver

    # Copy bundled assets into ./dist first, then serve
    python -m assetserver --bundle ./assets/dist

    # Custom port and directory
    python -m assetserver --port 3000 --root /tmp/site

Environment variables (ASSET_SERVER_*) provide the defaults; command-line
arguments override them.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .errors import BindError, FileAccessError
from .server import AssetServer, configure_logging


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assetserver",
        description="Serve bundled static assets over loopback HTTP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m assetserver                         # Serve ./dist on :8080
  python -m assetserver --bundle assets/dist    # Populate ./dist first
  python -m assetserver --port 3000 --root www  # Custom port and root
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Loopback address to bind to (default: {defaults.host})",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})",
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=defaults.timeout,
        help=f"Per-connection inactivity timeout in seconds (default: {defaults.timeout})",
    )

    # ─────────────────────────────────────────────────────────────────────
    # ASSET ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.root_dir,
        help=f"Directory to serve (default: {defaults.root_dir})",
    )

    parser.add_argument(
        "--bundle", "-b",
        default=defaults.bundle_dir,
        help="Directory of bundled assets to copy into --root before serving",
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        type=str.upper,
        default=defaults.log_level.upper(),
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"assetserver {__version__}",
    )

    return parser


def main(argv=None) -> int:
    """CLI entry point. Returns the process exit code."""
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid ASSET_SERVER_* environment: {e}", file=sys.stderr)
        return 2

    args = build_parser(defaults).parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        root_dir=args.root,
        bundle_dir=args.bundle,
        log_level=args.log_level,
    )

    try:
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.log_level)

    server = AssetServer(
        config,
        on_ready=lambda url: print(f"Serving {config.root_dir} at {url} (Ctrl+C to stop)"),
    )

    try:
        server.serve_forever()
    except (BindError, FileAccessError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
