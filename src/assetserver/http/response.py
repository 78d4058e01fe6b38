"""
=============================================================================
RESPONSE BUILDER
=============================================================================

Turns a resolution outcome into the bytes written back to the client.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\r\n                 ← Status line
    Content-Type: text/html\r\n
    Content-Length: 11\r\n              ← Byte length of the body
    Connection: close\r\n               ← One request per connection
    \r\n                                ← Empty line (separator)
    <h1>hi</h1>                         ← Body bytes, verbatim

No Date, Server or caching headers are sent.

=============================================================================
CONTENT-LENGTH IS A BYTE COUNT
=============================================================================

    "héllo"            → 5 characters
    "héllo".encode()   → 6 bytes  (é is two bytes in UTF-8)

The client stops reading after Content-Length bytes, so counting
characters would truncate any page with non-ASCII text. The body is
always bytes here, and len() is taken on those bytes.

=============================================================================
"""

from dataclasses import dataclass
from typing import Dict, Union

from .resolver import Found, NotFound, Resolution
from .status_codes import HTTPStatus


NOT_FOUND_BODY = "File not found"
NOT_FOUND_CONTENT_TYPE = "text/plain"


@dataclass(frozen=True)
class ResolvedResponse:
    """
    A response ready to be written to the socket.

    Produced once per connection, written, then discarded.
    """

    status: HTTPStatus
    content_type: str
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 404 Not Found"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def headers(self) -> Dict[str, str]:
        """Response headers, in the order they are sent."""
        return {
            "Content-Type": self.content_type,
            "Content-Length": str(len(self.body)),
            "Connection": "close",
        }

    def to_bytes(self) -> bytes:
        """Serialize status line, headers and body."""
        lines = [self.status_line]
        lines.extend(f"{name}: {value}" for name, value in self.headers.items())
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("latin-1") + b"\r\n"
        return header_bytes + self.body


def found(body: Union[str, bytes], content_type: str) -> ResolvedResponse:
    """Build a 200 response. String bodies are UTF-8 encoded."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    return ResolvedResponse(status=HTTPStatus.OK, content_type=content_type, body=body)


def not_found(message: str = NOT_FOUND_BODY) -> ResolvedResponse:
    """Build a 404 response with a short plain-text body."""
    return ResolvedResponse(
        status=HTTPStatus.NOT_FOUND,
        content_type=NOT_FOUND_CONTENT_TYPE,
        body=message.encode("utf-8"),
    )


def build_response(outcome: Resolution) -> ResolvedResponse:
    """
    Build the response for a resolution outcome.

    Args:
        outcome: Found or NotFound from PathResolver.resolve().

    Returns:
        The response to write.
    """
    if isinstance(outcome, Found):
        return found(outcome.body, outcome.content_type)
    if isinstance(outcome, NotFound):
        return not_found()
    raise TypeError(f"Unknown resolution outcome: {outcome!r}")
