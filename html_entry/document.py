"""
Markup adapter: the only module that talks to BeautifulSoup directly.

Provides what the extraction engine needs from a parser:
- parse_document(): raw str/bytes → BeautifulSoup document
- query() / query_one(): CSS selection in document order (soupsieve)
- text() / markup(): the two value forms of a node

Design principle: the engine never sees parser details, so every other
module goes through these helpers.
"""

import re
from typing import Optional, Union

from bs4 import BeautifulSoup
from bs4.element import Tag
from soupsieve import SelectorSyntaxError

from .exceptions import ConfigurationError, DocumentError
from .logger import get_module_logger

logger = get_module_logger("document")

# Parser fallback chain for HTML.
# html5lib implements the full WHATWG parsing algorithm and copes with the
# worst malformed HTML; lxml is fast and tolerant; html.parser ships with
# Python and is always available.
HTML_PARSERS = ['html5lib', 'lxml', 'html.parser']

# lxml's XML builder; keeps tag case and does not invent <html>/<body>
XML_PARSER = 'xml'

# WHATWG encoding spec: browsers silently remap these charsets.
# https://encoding.spec.whatwg.org/#names-and-labels
WHATWG_CHARSET_MAP = {
    'iso-8859-1': 'windows-1252',
    'iso8859-1': 'windows-1252',
    'iso88591': 'windows-1252',
    'latin-1': 'windows-1252',
    'latin1': 'windows-1252',
    'us-ascii': 'windows-1252',
    'ascii': 'windows-1252',
    'iso-8859-9': 'windows-1254',
    'iso-8859-11': 'windows-874',
}


def detect_charset_from_bytes(raw_bytes: bytes) -> str:
    """
    Detect charset from raw markup bytes by scanning the first 2048 bytes
    for <meta charset=...>, <meta http-equiv="Content-Type" ...> or an XML
    declaration's encoding="...".

    Returns the browser-equivalent charset or 'utf-8' as default.
    """
    head_str = raw_bytes[:2048].decode('ascii', errors='ignore')

    charset = None

    # Modern form: <meta charset="...">
    m = re.search(r'<meta[^>]+charset=["\']?\s*([^\s"\';>]+)', head_str, re.IGNORECASE)
    if m:
        charset = m.group(1).strip().lower()

    # Legacy form: <meta http-equiv="Content-Type" content="...; charset=...">
    if not charset:
        m = re.search(
            r'<meta[^>]+content=["\'][^"\']*charset=([^\s"\';>]+)',
            head_str, re.IGNORECASE
        )
        if m:
            charset = m.group(1).strip().lower()

    # XML declaration: <?xml version="1.0" encoding="..."?>
    if not charset:
        m = re.search(r'<\?xml[^>]+encoding=["\']([^"\']+)', head_str, re.IGNORECASE)
        if m:
            charset = m.group(1).strip().lower()

    if not charset:
        return 'utf-8'

    return WHATWG_CHARSET_MAP.get(charset, charset)


def decode_markup(raw_bytes: bytes) -> str:
    """Decode bytes with their declared charset, replacing undecodable bytes."""
    charset = detect_charset_from_bytes(raw_bytes)
    try:
        return raw_bytes.decode(charset, errors='replace')
    except LookupError:
        # Unknown charset name in the page; UTF-8 is the best guess left
        logger.warning(f"Unknown declared charset '{charset}', decoding as utf-8")
        return raw_bytes.decode('utf-8', errors='replace')


def parse_document(markup: Union[str, bytes], features: Optional[str] = None) -> BeautifulSoup:
    """
    Parse markup into a document.

    Args:
        markup: HTML/XML as text or raw bytes
        features: BeautifulSoup parser name; None walks the HTML fallback
                  chain, 'xml' uses lxml's XML builder

    Returns:
        BeautifulSoup document

    Raises:
        DocumentError: if the input is not markup or no parser accepted it
    """
    if isinstance(markup, bytes):
        markup = decode_markup(markup)
    if not isinstance(markup, str):
        raise DocumentError(f"Cannot parse {type(markup).__name__}, expected str or bytes")

    parsers = [features] if features else HTML_PARSERS
    errors = []
    for parser in parsers:
        try:
            return BeautifulSoup(markup, parser)
        except Exception as e:
            logger.warning(f"{parser} parsing failed: {e}")
            errors.append(f"{parser}: {e}")

    raise DocumentError("Markup could not be parsed", details={"errors": errors})


def is_document(obj) -> bool:
    """True for a whole parsed document, False for an element inside one."""
    return isinstance(obj, BeautifulSoup)


def query(context, selector: str) -> list[Tag]:
    """
    All descendants of context matching a CSS selector, in document order.

    A None context matches nothing.

    Raises:
        ConfigurationError: for a selector soupsieve cannot compile
    """
    if context is None:
        return []
    try:
        return list(context.select(selector))
    except SelectorSyntaxError as e:
        raise ConfigurationError(
            f"Invalid CSS selector '{selector}'",
            details={"error": str(e)}
        ) from e


def query_one(context, selector: str) -> Optional[Tag]:
    """First descendant of context matching a CSS selector, or None."""
    if context is None:
        return None
    try:
        return context.select_one(selector)
    except SelectorSyntaxError as e:
        raise ConfigurationError(
            f"Invalid CSS selector '{selector}'",
            details={"error": str(e)}
        ) from e


def text(node) -> str:
    """Concatenated text content of a node and its descendants."""
    return node.get_text()


def markup(node) -> str:
    """Serialized markup of a node, tag included."""
    return str(node)
