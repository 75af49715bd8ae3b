"""
Page fetcher: runs entity extraction over the blocks of a page.

Page instructions:
  block     → where each group of entities lives (selector or function);
              without it the whole page body is the only block
  entity    → the EntityFetcher instructions, run in plenty mode per block
  last_page → how to tell that there is no next page
"""

from typing import Optional

from bs4 import BeautifulSoup

from . import resolver
from .document import is_document
from .entity_fetcher import EntityFetcher
from .exceptions import ConfigurationError
from .logger import get_module_logger
from .schemas import Instruction, PageInstructions, SelectorInstruction
from .selector_cache import SelectorCache

logger = get_module_logger("page_fetcher")

DEFAULT_ROOT_SELECTOR = "body"


class PageFetcher:
    """Fetches every entity of a page."""

    def __init__(
        self,
        instructions=None,
        cache: Optional[SelectorCache] = None,
        root_selector: str = DEFAULT_ROOT_SELECTOR
    ):
        self._instructions: Optional[PageInstructions] = None
        self.cache = cache
        self.root_selector = root_selector
        if instructions is not None:
            self.instructions = instructions

    @property
    def instructions(self) -> Optional[PageInstructions]:
        return self._instructions

    @instructions.setter
    def instructions(self, instructions) -> None:
        self._instructions = PageInstructions.from_config(instructions)

    def fetch(self, document: BeautifulSoup) -> list[dict]:
        """
        Fetch entities from document.

        Args:
            document: BeautifulSoup document or element

        Returns:
            Records of every block, concatenated in block order
        """
        instructions = self._require_instructions()
        if instructions.entity is None:
            raise ConfigurationError("Entity instructions are not set.")

        if instructions.block is None:
            blocks = [self._root_block(document)]
        else:
            blocks = self.fetch_block_document(document, instructions.block)

        items = []
        for block_document in blocks:
            items.extend(self._fetch_data(block_document, instructions.entity))

        logger.debug(f"Fetched {len(items)} entities from {len(blocks)} blocks")
        return items

    def last_page(self, document: BeautifulSoup) -> bool:
        """
        Check if it's a last page.

        A function instruction decides by its (truthy) result; a selector
        instruction says "last page" when it matches at least one node.
        """
        instructions = self._require_instructions()
        instruction = instructions.last_page
        if instruction is None:
            raise ConfigurationError("Last page instruction is not set.")

        if instruction.is_function:
            return bool(resolver.call_function(document, instruction))
        return len(resolver.fetch_nodes(document, instruction, self.cache)) > 0

    def fetch_block_document(self, document, instruction: Optional[Instruction]) -> list:
        """Resolve the block instruction into an ordered list of blocks."""
        if instruction is None:
            raise ConfigurationError("Block instructions are not set.")

        if instruction.is_function:
            blocks = resolver.call_function(document, instruction)
            if blocks is None:
                return []
            return resolver.as_node_list(blocks)

        return resolver.fetch_nodes(document, instruction, self.cache)

    def _root_block(self, document):
        if not is_document(document):
            return document
        root = self.fetch_block_document(document, SelectorInstruction(selector=self.root_selector))
        if not root:
            # No <body> (XML documents): the document is its own block
            return document
        return root[0]

    def _fetch_data(self, block_document, instructions: list[Instruction]) -> list[dict]:
        fetcher = EntityFetcher(instructions, cache=self.cache)
        return fetcher.fetch(block_document, plenty=True)

    def _require_instructions(self) -> PageInstructions:
        if self._instructions is None:
            raise ConfigurationError("Page instructions are not set.")
        return self._instructions
