"""
In-memory cache of selector results.

Benefits:
- Speed: pages that repeat the same selector against the same node (e.g. a
  block selector and a last_page check) evaluate it once
- Debugging: hit/miss counters show whether an instruction set re-queries

The cache is an explicit object. Nothing is cached unless the caller creates a
SelectorCache and hands it to a fetcher, and its lifetime is the caller's.
It never invalidates: do not mutate a document and expect fresh results.
"""

import threading
from typing import Callable, Optional

from .logger import get_module_logger

logger = get_module_logger("selector_cache")


class SelectorCache:
    """
    Maps (context node, selector) to the ordered list of matched nodes.

    Entries are keyed by id() of the context and keep a reference to the
    context itself, so an id cannot be reused by another object while its
    entry exists. A lock guards the map; one cache may be shared by threads
    extracting independent documents.
    """

    def __init__(self, max_entries: Optional[int] = None):
        """
        Initialize selector cache.

        Args:
            max_entries: Stop storing new entries once this many exist.
                         None means unbounded.
        """
        self.max_entries = max_entries
        self._entries: dict[tuple[int, str], tuple[object, list]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, context, selector: str) -> Optional[list]:
        """Cached matches for (context, selector), or None on a miss."""
        with self._lock:
            entry = self._entries.get((id(context), selector))
            if entry is None or entry[0] is not context:
                self.misses += 1
                return None
            self.hits += 1
            return list(entry[1])

    def put(self, context, selector: str, nodes: list) -> None:
        """Store matches for (context, selector)."""
        with self._lock:
            if self.max_entries is not None and len(self._entries) >= self.max_entries:
                return
            self._entries[(id(context), selector)] = (context, list(nodes))

    def fetch(self, context, selector: str, query: Callable[[object, str], list]) -> list:
        """Return cached matches, running query(context, selector) on a miss."""
        nodes = self.get(context, selector)
        if nodes is not None:
            logger.debug(f"Cache hit for selector: {selector}")
            return nodes
        nodes = query(context, selector)
        self.put(context, selector, nodes)
        return list(nodes)

    def exists(self, context, selector: str) -> bool:
        """Check if matches for (context, selector) are cached."""
        with self._lock:
            entry = self._entries.get((id(context), selector))
            return entry is not None and entry[0] is context

    def clear(self) -> int:
        """Drop every entry. Returns the number of entries removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self.hits = 0
            self.misses = 0
        logger.debug(f"Cleared {count} cached selector results")
        return count

    def stats(self) -> dict:
        """Hit/miss counters and current size."""
        with self._lock:
            return {"hits": self.hits, "misses": self.misses, "size": len(self._entries)}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
