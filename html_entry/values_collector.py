"""
Values collector: assembles one record, field by field.

An EntityFetcher creates one collector per emerging record and calls
fetch(name, instruction, node) for every field in declaration order.

Field kinds:
  selector → resolve from the node context, then apply filters
             (node / node_text / attribute / text, stripped unless no_strip);
             with nested data the value is a sub-record instead
  function → instruction.function(record_so_far, name, document, instruction)

Function fields only see fields fetched before them. That ordering is the
whole dependency model: there is no graph and no cycle to detect.
"""

from typing import Optional

from . import resolver
from .document import markup, text
from .schemas import Filter, Instruction, parse_instruction
from .selector_cache import SelectorCache


class ValuesCollector:
    """Collects field values for one record."""

    def __init__(self, document, cache: Optional[SelectorCache] = None):
        # document: the block the record comes from; function fields get it
        self.document = document
        self.cache = cache
        self._data: dict = {}

    @property
    def data(self) -> dict:
        """The record collected so far."""
        return self._data

    def fetch(self, name: str, instruction, node):
        """
        Evaluate one field into the record and return its value.

        A name fetched twice keeps the last value.
        """
        instruction = parse_instruction(instruction)

        if instruction.is_function:
            value = instruction.function(self._data, name, self.document, instruction)
        else:
            value = self._fetch_value(instruction, node)

        self._data[name] = value
        return value

    def _fetch_value(self, instruction: Instruction, node):
        if instruction.plenty:
            nodes = resolver.fetch_nodes(node, instruction, self.cache)
            if instruction.data is not None:
                return [self._fetch_sub_record(instruction, child) for child in nodes]
            return [self._filter_value(child, instruction) for child in nodes]

        found = resolver.fetch_node(node, instruction, self.cache)
        if instruction.data is not None:
            if found is None:
                return None
            return self._fetch_sub_record(instruction, found)
        return self._filter_value(found, instruction)

    def _fetch_sub_record(self, instruction: Instruction, context) -> dict:
        """Nested fields, evaluated against the matched node."""
        collector = ValuesCollector(self.document, cache=self.cache)
        for name, field_instruction in instruction.data.items():
            collector.fetch(name, field_instruction, context)
        return collector.data

    @staticmethod
    def _filter_value(node, instruction: Instruction):
        """Apply filters to a matched node."""
        if node is None:
            return None

        filters = instruction.filters
        if Filter.NODE in filters:
            return node
        if Filter.NODE_TEXT in filters:
            return markup(node)

        if instruction.attribute:
            value = node.get(instruction.attribute)
            if value is None:
                return None
            # bs4 returns multi-valued attributes (class, rel) as lists
            if isinstance(value, list):
                value = " ".join(value)
        else:
            value = text(node)

        if Filter.NO_STRIP in filters:
            return value
        return value.strip()
