"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

The request → resolution → response pipeline, free of any socket code:

    raw bytes ──► parse_request() ──► PathResolver.resolve() ──► build_response()
                  (request.py)        (resolver.py)              (response.py)

Each step is a pure function of its input (plus a read-only store), so
the whole pipeline is testable without opening a socket.

=============================================================================
"""

from .status_codes import HTTPStatus
from .mime_types import CONTENT_TYPES, DEFAULT_CONTENT_TYPE, content_type_for
from .request import DEFAULT_PATH, IncomingRequest, parse_request, parse_request_path
from .resolver import Found, NotFound, PathResolver, Resolution
from .response import ResolvedResponse, build_response, found, not_found

__all__ = [
    "HTTPStatus",
    "CONTENT_TYPES",
    "DEFAULT_CONTENT_TYPE",
    "content_type_for",
    "DEFAULT_PATH",
    "IncomingRequest",
    "parse_request",
    "parse_request_path",
    "Found",
    "NotFound",
    "PathResolver",
    "Resolution",
    "ResolvedResponse",
    "build_response",
    "found",
    "not_found",
]
