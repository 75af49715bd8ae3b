"""
Custom exceptions for the html_entry extraction engine.

Error philosophy:
  - ConfigurationError → FAIL HARD: the instruction set itself is wrong, the
    whole fetch call is aborted before (or as soon as) the bad piece is seen.
  - DocumentError      → FAIL HARD: the markup could not be turned into a
    document at all.
  - "No match"         → NOT AN ERROR: a selector that matches nothing yields
    an empty list or a None field value.

Errors raised by caller-supplied functions are never wrapped; they reach the
caller of fetch() unchanged.
"""

from typing import Optional


class HtmlEntryError(Exception):
    """Base exception for all html_entry errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- FAIL HARD: misuse of the instruction configuration ---

class ConfigurationError(HtmlEntryError):
    """
    Raised when instructions are missing, malformed or contradictory.

    Configuration errors do not depend on the document being processed,
    so retrying with another page will not help.
    """

    def __init__(
        self,
        message: str,
        instruction: Optional[object] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        # The offending instruction (model or raw mapping), when there is one
        self.instruction = instruction

    def to_response(self) -> dict:
        """Convert to a JSON-friendly error payload."""
        return {
            "error": "ConfigurationError",
            "message": self.message,
            "details": self.details
        }


# --- FAIL HARD: input that no parser accepted ---

class DocumentError(HtmlEntryError):
    """Raised when markup cannot be parsed into a document."""

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.source_name = source_name  # file name or None for in-memory markup
