"""
Unit tests for content-type inference.
"""

import pytest

from assetserver.http.mime_types import (
    CONTENT_TYPES,
    DEFAULT_CONTENT_TYPE,
    content_type_for,
)


@pytest.mark.parametrize("filename, expected", [
    ("index.html", "text/html"),
    ("index.js", "application/javascript"),
    ("index.css", "text/css"),
    ("nested/dir/page.html", "text/html"),
])
def test_known_extensions(filename, expected):
    assert content_type_for(filename) == expected


@pytest.mark.parametrize("filename", ["notes.txt", "data.json", "favicon.ico", "README", "archive.tar.gz"])
def test_unknown_extensions_fall_back_to_text_plain(filename):
    assert content_type_for(filename) == DEFAULT_CONTENT_TYPE == "text/plain"


def test_suffix_is_case_insensitive():
    assert content_type_for("INDEX.HTML") == "text/html"
    assert content_type_for("Bundle.Js") == "application/javascript"


def test_table_is_the_lookup():
    """Extending the table extends inference."""
    assert set(CONTENT_TYPES) == {".html", ".js", ".css"}
