"""
HTTP status codes used by the asset server.

The server only ever answers with two statuses: the asset was found, or
it was not. Anything else (bad method, traversal attempt, unreadable
file) collapses into one of these two.
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200           # Asset served (including the synthetic favicon)
    NOT_FOUND = 404    # Asset missing or unreadable

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _PHRASES[self]


_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
}
