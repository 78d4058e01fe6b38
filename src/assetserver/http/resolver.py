"""
=============================================================================
PATH RESOLVER
=============================================================================

Maps a request path to an asset in the store.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        resolve(path) Flow                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   path == "/favicon.ico" ──► Found(b"", "image/x-icon")             │
    │        │                     (no filesystem access)                 │
    │        ▼                                                             │
    │   path == "/"  ──► filename = "index.html"                          │
    │   otherwise    ──► filename = path[1:]                              │
    │        │                                                             │
    │        ▼                                                             │
    │   store.read(filename)                                              │
    │        ├── bytes            ──► Found(bytes, content_type_for(...)) │
    │        └── FileAccessError  ──► NotFound(path)                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The favicon short-circuit keeps browser favicon probes from filling the
log with 404s.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from ..errors import FileAccessError
from .mime_types import FAVICON_CONTENT_TYPE, content_type_for

if TYPE_CHECKING:
    from ..store import AssetStore


logger = logging.getLogger(__name__)


INDEX_FILE = "index.html"
FAVICON_PATH = "/favicon.ico"


@dataclass(frozen=True)
class Found:
    """The asset exists; body and its content type."""

    body: bytes
    content_type: str


@dataclass(frozen=True)
class NotFound:
    """No readable asset for the requested path."""

    path: str


Resolution = Union[Found, NotFound]


def filename_for(path: str) -> str:
    """Map a request path to a filename relative to the store root."""
    if path == "/":
        return INDEX_FILE
    return path[1:]


class PathResolver:
    """
    Resolves request paths against an AssetStore.

    Holds no per-request state, so one resolver is shared by every
    connection.
    """

    def __init__(self, store: "AssetStore"):
        self.store = store

    def resolve(self, path: str) -> Resolution:
        """
        Resolve a request path.

        Args:
            path: Request path starting with "/".

        Returns:
            Found with the file's bytes, or NotFound if the file cannot
            be read for any reason.
        """
        if path == FAVICON_PATH:
            return Found(body=b"", content_type=FAVICON_CONTENT_TYPE)

        filename = filename_for(path)
        try:
            body = self.store.read(filename)
        except FileAccessError as e:
            logger.warning(f"File not found: {filename} ({e.reason})")
            return NotFound(path=path)

        return Found(body=body, content_type=content_type_for(filename))
