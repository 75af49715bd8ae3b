"""
Entity fetcher: reads records out of an HTML/XML block according to
instructions.

Single mode (plenty=False) builds one record: every top-level instruction
resolves one node and its data fields go into a shared collector.

Plenty mode (plenty=True) builds a list of records. Each top-level
instruction is a "column" of matched nodes, and node i of every column lands
in record i:

    instructions = [
        {"selector": ".vote-up", "data": {"up": {"selector": "span"}}},
        {"selector": ".vote-down", "data": {"down": {"selector": "span"}}},
    ]
    → [{"up": ..., "down": ...}, {"up": ..., "down": ...}, ...]

Options of a top-level instruction:
  merge       → every match goes to record 0 (later matches overwrite fields)
  allow_empty → no match still counts as one (absent) node, so the column
                keeps its place in record 0
"""

from typing import Optional, Union

from . import resolver
from .exceptions import ConfigurationError
from .logger import get_module_logger
from .schemas import Instruction, parse_instructions
from .selector_cache import SelectorCache
from .values_collector import ValuesCollector

logger = get_module_logger("entity_fetcher")


class EntityFetcher:
    """Fetches one entity definition from a document or block."""

    def __init__(self, instructions=None, cache: Optional[SelectorCache] = None):
        self._instructions: Optional[list[Instruction]] = None
        self.cache = cache
        if instructions is not None:
            self.instructions = instructions

    @property
    def instructions(self) -> Optional[list[Instruction]]:
        return self._instructions

    @instructions.setter
    def instructions(self, instructions) -> None:
        """Accepts a list of instructions or a single one (wrapped into a list)."""
        self._instructions = parse_instructions(instructions)

    def fetch(self, document, plenty: bool = False) -> Union[dict, list[dict]]:
        """
        Fetch data from document.

        Args:
            document: BeautifulSoup document or element
            plenty: Fetch a list of records instead of one

        Returns:
            One record (dict), or a list of records in plenty mode
        """
        if plenty:
            return self.fetch_plenty(document)
        return self.fetch_single(document)

    def fetch_single(self, document) -> dict:
        """Fetch one record from document."""
        instructions = self._require_instructions()
        collector = self.get_values_collector(document)

        for instruction in instructions:
            node = resolver.fetch_node(document, instruction, self.cache)

            if instruction.data is None:
                continue
            for name, data_instruction in instruction.data.items():
                collector.fetch(name, data_instruction, node)

        return collector.data

    def fetch_plenty(self, document) -> list[dict]:
        """Fetch a list of records from document, one per grouping index."""
        instructions = self._require_instructions()
        collectors = self._process_instructions(document, instructions)
        logger.debug(f"Fetched {len(collectors)} records from {len(instructions)} instructions")

        return [collectors[index].data for index in sorted(collectors)]

    def get_values_collector(self, document) -> ValuesCollector:
        return ValuesCollector(document, cache=self.cache)

    def _require_instructions(self) -> list[Instruction]:
        if self._instructions is None:
            raise ConfigurationError("Instructions are not set.")
        return self._instructions

    def _process_instructions(self, document, instructions: list[Instruction]) -> dict[int, ValuesCollector]:
        # Grouping index → collector, created on first use
        collectors: dict[int, ValuesCollector] = {}
        for instruction in instructions:
            nodes = self._retrieve_nodes(document, instruction)
            for i, node in enumerate(nodes):
                self._process_node(document, node, instruction, collectors, i)
        return collectors

    def _retrieve_nodes(self, document, instruction: Instruction) -> list:
        nodes = resolver.fetch_nodes(document, instruction, self.cache)
        if not nodes and instruction.allow_empty:
            nodes = [None]
        return nodes

    def _process_node(self, document, node, instruction: Instruction,
                      collectors: dict[int, ValuesCollector], index: int) -> None:
        if instruction.merge:
            # gather items under the same collector
            index = 0

        if index not in collectors:
            collectors[index] = self.get_values_collector(document)

        if instruction.data is None:
            return

        for name, data_instruction in instruction.data.items():
            collectors[index].fetch(name, data_instruction, node)
