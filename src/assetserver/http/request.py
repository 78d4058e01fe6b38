"""
=============================================================================
REQUEST PARSER
=============================================================================

Extracts the request target from the first chunk a client sends.

The only client is a renderer running in the same process group, and it
only ever asks for a few files. So instead of a full HTTP parser this
module looks for one thing in the request line:

    GET /index.css HTTP/1.1\r\n
        ▲────────▲
        └── the text between "GET " and " HTTP" is the path

    ┌─────────────────────────────────────────────────────────────────────┐
    │   INPUT                                   PATH                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │   GET / HTTP/1.1                          /                         │
    │   GET /index.css HTTP/1.0                 /index.css                │
    │   GET /app.js?v=2 HTTP/1.1                /app.js?v=2  (verbatim)   │
    │   POST /form HTTP/1.1                     /index.html  (default)    │
    │   garbage                                 /index.html  (default)    │
    └─────────────────────────────────────────────────────────────────────┘

No percent-decoding and no query stripping is done. A request that does
not match falls back to /index.html instead of failing.

=============================================================================
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union


DEFAULT_PATH = "/index.html"

# Shortest match, so a later " HTTP" in a header value is never swallowed
_REQUEST_TARGET = re.compile(r"GET (.+?) HTTP")


@dataclass(frozen=True)
class IncomingRequest:
    """
    One request, alive for the duration of one connection.

    Attributes:
        raw: The bytes received from the client.
        path: Extracted request path, always starting with "/".
        client_address: (ip, port) of the peer, when known.
    """

    raw: bytes
    path: str
    client_address: Optional[Tuple[str, int]] = None

    @property
    def client_ip(self) -> str:
        return self.client_address[0] if self.client_address else "-"


def _decode(raw: Union[bytes, str]) -> str:
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw


def parse_request_path(raw: Union[bytes, str]) -> str:
    """
    Extract the request path from raw request data.

    Args:
        raw: The received buffer, bytes or already-decoded text.

    Returns:
        The path between "GET " and " HTTP", or DEFAULT_PATH when the
        pattern is absent or the target is not an absolute path.
    """
    match = _REQUEST_TARGET.search(_decode(raw))
    if match is None:
        return DEFAULT_PATH

    path = match.group(1)
    if not path.startswith("/"):
        return DEFAULT_PATH
    return path


def parse_request(
    raw: Union[bytes, str],
    client_address: Optional[Tuple[str, int]] = None,
) -> IncomingRequest:
    """Parse a raw buffer into an IncomingRequest."""
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    return IncomingRequest(
        raw=raw,
        path=parse_request_path(raw),
        client_address=client_address,
    )
