"""
Bounded least-recently-used cache for data source lookups.
"""

from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional
import logging

logger = logging.getLogger(__name__)

_MISSING = object()


class BoundedCache:
    """
    Fixed-capacity LRU cache.

    When full, inserting a new key evicts the least recently used entry.
    A capacity of 0 disables caching.
    """

    def __init__(self, capacity: int = 256, name: str = 'cache'):
        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        self.capacity = capacity
        self.name = name
        self._entries: 'OrderedDict[Hashable, Any]' = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable, default: Optional[Any] = None) -> Any:
        value = self._entries.get(key, _MISSING)
        if value is _MISSING:
            self.misses += 1
            return default
        self.hits += 1
        self._entries.move_to_end(key)
        return value

    def put(self, key: Hashable, value: Any) -> None:
        if self.capacity == 0:
            return
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = value
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"{self.name}: evicted {evicted!r}")

    def get_or_load(self, key: Hashable, loader: Callable[[], Any]) -> Any:
        """
        Return the cached value for key, calling loader on a miss.

        Exceptions from loader propagate and nothing is cached.
        """
        value = self.get(key, _MISSING)
        if value is _MISSING:
            value = loader()
            self.put(key, value)
        return value

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
