"""
Node resolver: turns one instruction into nodes.

Selector instructions run their CSS selector against the context node.
Function instructions call the caller's NodeFunction with
(document, instruction) and return whatever it produces.

"No match" is never an error here: it is None or an empty list.
"""

from typing import Optional

from bs4.element import PageElement

from . import document as markup_document
from .schemas import Instruction
from .selector_cache import SelectorCache


def call_function(document, instruction: Instruction):
    """Call a function instruction the way block/entity/last_page do."""
    return instruction.function(document, instruction)


def as_node_list(result) -> list:
    """
    Normalise a function result into an ordered list of nodes.

    A single node is wrapped; any other iterable (list, generator,
    tag.children, filter(...)) is walked in order. Tags are iterable
    themselves, so they are checked first.
    """
    if isinstance(result, PageElement):
        return [result]
    return list(result)


def fetch_nodes(context, instruction: Instruction, cache: Optional[SelectorCache] = None) -> list:
    """
    All nodes an instruction resolves to, in document order.

    A function returning None resolves to [None] (one absent node); a single
    node is wrapped into a list.
    """
    if instruction.is_function:
        result = call_function(context, instruction)
        if result is None:
            return [None]
        return as_node_list(result)

    if context is None:
        return []
    if cache is not None:
        return cache.fetch(context, instruction.selector, markup_document.query)
    return markup_document.query(context, instruction.selector)


def fetch_node(context, instruction: Instruction, cache: Optional[SelectorCache] = None):
    """First node an instruction resolves to, or None."""
    if instruction.is_function:
        return call_function(context, instruction)

    if context is None:
        return None
    if cache is not None:
        nodes = cache.fetch(context, instruction.selector, markup_document.query)
        return nodes[0] if nodes else None
    return markup_document.query_one(context, instruction.selector)
