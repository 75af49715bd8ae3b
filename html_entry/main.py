"""
Main orchestrator for html_entry.

Wires the markup adapter and the PageFetcher together so callers can go from
raw markup (or a file) straight to records:

    entry = HtmlEntry({"block": {"selector": ".list"},
                       "entity": [{"selector": ".item", "data": {...}}],
                       "last_page": {"selector": ".pager .next"}})
    records = entry.parse(html)
"""

from pathlib import Path
from typing import Optional, Union

from .config import Settings
from .document import parse_document
from .exceptions import DocumentError
from .logger import get_module_logger, setup_logger
from .page_fetcher import PageFetcher
from .selector_cache import SelectorCache

logger = get_module_logger("main")


class HtmlEntry:
    """
    Main orchestrator for instruction-driven extraction.

    1. Parse markup into a document (parser from settings)
    2. PageFetcher: blocks → entities → records
    """

    def __init__(
        self,
        instructions,
        cache: Optional[SelectorCache] = None,
        settings: Optional[Settings] = None,
        log_level: Union[int, str, None] = None
    ):
        self.settings = settings or Settings()
        # An explicit log_level wins over the settings
        setup_logger(level=log_level if log_level is not None else self.settings.log_level)

        self.page_fetcher = PageFetcher(
            instructions,
            cache=cache,
            root_selector=self.settings.root_selector
        )

        logger.debug(f"HtmlEntry initialized (parser: {self.settings.parser or 'auto'})")

    def load(self, markup: Union[str, bytes]):
        """Parse markup with the configured parser."""
        return parse_document(markup, features=self.settings.parser)

    def parse(self, markup: Union[str, bytes]) -> list[dict]:
        """
        Extract records from markup.

        Args:
            markup: HTML/XML text or raw bytes

        Returns:
            Records of every block, in block order
        """
        document = self.load(markup)
        items = self.page_fetcher.fetch(document)
        logger.info(f"Complete: {len(items)} records")
        return items

    def parse_file(self, file_path: Union[str, Path]) -> list[dict]:
        """Extract records from a markup file."""
        file_path = Path(file_path)
        try:
            # Raw bytes, so the declared charset decides the decoding
            raw_bytes = file_path.read_bytes()
        except OSError as e:
            raise DocumentError(f"Cannot read {file_path}: {e}", source_name=file_path.name) from e
        return self.parse(raw_bytes)

    def is_last_page(self, markup: Union[str, bytes]) -> bool:
        """Apply the last_page instruction to markup."""
        return self.page_fetcher.last_page(self.load(markup))


def fetch_html(markup: Union[str, bytes], instructions) -> list[dict]:
    """Convenience function to extract records from markup."""
    return HtmlEntry(instructions).parse(markup)
