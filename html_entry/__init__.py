"""
html_entry

Declarative extraction of records from HTML/XML documents.
- EntityFetcher: instructions → one record or a list of records
- PageFetcher:   blocks of a page → records, plus last-page detection
- HtmlEntry:     markup in, records out

Public API surface:
  Fetchers       : EntityFetcher, PageFetcher, ValuesCollector, HtmlEntry
  Instructions   : SelectorInstruction, FunctionInstruction, Filter,
                   PageInstructions, parse_instruction, parse_instructions
  Documents      : parse_document
  Error types    : ConfigurationError, DocumentError
  Caching        : SelectorCache (optional, caller-owned)
"""

# --- Fetchers ---
from .entity_fetcher import EntityFetcher
from .page_fetcher import PageFetcher
from .values_collector import ValuesCollector
from .main import HtmlEntry, fetch_html

# --- Instruction models ---
from .schemas import (
    Filter,
    SelectorInstruction,
    FunctionInstruction,
    PageInstructions,
    parse_instruction,
    parse_instructions,
)

# --- Documents and settings ---
from .document import parse_document
from .config import Settings

# --- Exceptions ---
from .exceptions import HtmlEntryError, ConfigurationError, DocumentError

# --- Cache ---
from .selector_cache import SelectorCache

__version__ = "0.3.0"
__all__ = [
    "EntityFetcher",
    "PageFetcher",
    "ValuesCollector",
    "HtmlEntry",
    "fetch_html",
    "Filter",
    "SelectorInstruction",
    "FunctionInstruction",
    "PageInstructions",
    "parse_instruction",
    "parse_instructions",
    "parse_document",
    "Settings",
    "HtmlEntryError",
    "ConfigurationError",
    "DocumentError",
    "SelectorCache",
]
