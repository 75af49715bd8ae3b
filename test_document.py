import pytest

from html_entry.document import (
    detect_charset_from_bytes,
    is_document,
    markup,
    parse_document,
    query,
    query_one,
    text,
)
from html_entry.exceptions import ConfigurationError, DocumentError


def test_detect_charset_applies_browser_mapping():
    """Declared charsets are mapped the way browsers map them (iso-8859-1 → windows-1252)."""
    assert detect_charset_from_bytes(b'<meta charset="iso-8859-1">') == "windows-1252"
    assert detect_charset_from_bytes(
        b'<meta http-equiv="Content-Type" content="text/html; charset=koi8-r">'
    ) == "koi8-r"
    assert detect_charset_from_bytes(b'<?xml version="1.0" encoding="UTF-16"?>') == "utf-16"
    assert detect_charset_from_bytes(b"<html><body>plain</body></html>") == "utf-8"


def test_bytes_are_decoded_with_declared_charset():
    """Raw bytes are decoded with the charset the document declares."""
    raw = (b'<html><head><meta charset="windows-1252"></head>'
           b'<body><p>caf\xe9</p></body></html>')
    document = parse_document(raw)
    assert text(query_one(document, "p")) == "café"


def test_query_returns_matches_in_document_order(items_document):
    """Selector matches come back in document order."""
    titles = [text(node).strip() for node in query(items_document, ".item h2")]
    assert titles == ["First", "Second", "Third"]


def test_query_on_absent_context_matches_nothing():
    """A None context matches nothing."""
    assert query(None, "p") == []
    assert query_one(None, "p") is None


def test_query_without_match_is_empty(items_document):
    """No match is an empty list, not an error."""
    assert query(items_document, ".missing") == []
    assert query_one(items_document, ".missing") is None


def test_invalid_selector_is_a_configuration_error(items_document):
    """Broken CSS surfaces as ConfigurationError."""
    with pytest.raises(ConfigurationError):
        query(items_document, "div[")
    with pytest.raises(ConfigurationError):
        query_one(items_document, "div[")


def test_markup_serializes_the_node():
    """markup() returns the node's outer HTML."""
    document = parse_document('<div><b class="x">bold</b></div>')
    assert markup(query_one(document, "b")) == '<b class="x">bold</b>'


def test_xml_documents_keep_their_structure():
    """The xml builder keeps element names and nesting."""
    document = parse_document(
        "<feed><entry><title>One</title></entry><entry><title>Two</title></entry></feed>",
        features="xml",
    )

    assert is_document(document)
    assert query(document, "body") == []
    assert [text(node) for node in query(document, "entry title")] == ["One", "Two"]


def test_elements_are_not_documents(items_document):
    """Only whole documents count as documents."""
    assert is_document(items_document)
    assert not is_document(query_one(items_document, ".item"))


def test_non_markup_input_is_rejected():
    """Anything but str/bytes is a DocumentError."""
    with pytest.raises(DocumentError):
        parse_document(42)
