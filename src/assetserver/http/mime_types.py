"""
=============================================================================
CONTENT-TYPE INFERENCE
=============================================================================

Maps a filename's extension to the Content-Type header value.

The bundled assets are a handful of web files, so the table is short:

    ┌────────────────────────────────────────────────────────────────────┐
    │  EXTENSION   CONTENT-TYPE                                          │
    ├────────────────────────────────────────────────────────────────────┤
    │  .html       text/html                                             │
    │  .js         application/javascript                                │
    │  .css        text/css                                              │
    │  (other)     text/plain                                            │
    └────────────────────────────────────────────────────────────────────┘

Unknown extensions fall back to text/plain rather than the usual
application/octet-stream: the store only holds text bundles, and the
renderer should display an unexpected file rather than download it.

Adding a type is a one-line change to CONTENT_TYPES.

=============================================================================
"""

from pathlib import PurePosixPath


CONTENT_TYPES = {
    ".html": "text/html",
    ".js": "application/javascript",
    ".css": "text/css",
}

DEFAULT_CONTENT_TYPE = "text/plain"

# Browsers probe /favicon.ico on every page load
FAVICON_CONTENT_TYPE = "image/x-icon"


def content_type_for(filename: str) -> str:
    """
    Get the Content-Type for a filename based on its extension.

    The lookup is case-insensitive on the suffix.

    Examples:
        >>> content_type_for("index.html")
        'text/html'

        >>> content_type_for("bundle.JS")
        'application/javascript'

        >>> content_type_for("notes.txt")
        'text/plain'
    """
    suffix = PurePosixPath(filename).suffix.lower()
    return CONTENT_TYPES.get(suffix, DEFAULT_CONTENT_TYPE)
