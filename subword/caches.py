"""Shared caches of the tokenizer.

Both caches are keyed by the content of the rule list (a hash of the ordered rules
and of the charset), never by object identity: two equal rule lists built
separately share entries, and a rule list mutated after first use gets a fresh key.

Both are bounded and evict the least recently used entry. They are safe to share
between threads. Two threads missing the same key may both compute the value; the
first insertion wins and the results are identical anyway.
"""

import hashlib
import threading
from collections import OrderedDict
from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Generic, NamedTuple, TypeVar

from subword.utils import Pair, parse_pair

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

RANK_CACHE_CAPACITY = 32
RESULT_CACHE_CAPACITY = 100_000


def fingerprint(merges: Sequence[str], charset: Iterable[str] = ()) -> str:
    h = hashlib.sha1()
    for rule in merges:
        h.update(rule.encode("utf-8"))
        h.update(b"\n")
    h.update(b"\x00")  # Separates the rules from the charset
    for symbol in sorted(charset):
        h.update(symbol.encode("utf-8"))
        h.update(b"\n")
    return h.hexdigest()


class LRUCache(Generic[K, V]):
    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"Cache capacity must be >= 1, got {capacity}!")
        self.capacity = capacity
        self._entries: OrderedDict[K, V] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: K) -> bool:
        return key in self._entries

    def get(self, key: K) -> V | None:
        with self._lock:
            value = self._entries.get(key)
            if value is not None:
                self._entries.move_to_end(key)
            return value

    def put(self, key: K, value: V) -> V:
        """Insert `value` unless the key is already present. Returns the cached value."""
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                self._entries.move_to_end(key)
                return existing
            self._entries[key] = value
            if len(self._entries) > self.capacity:
                self._entries.popitem(last=False)  # Evict the least recently used
            return value

    def get_or_compute(self, key: K, compute: Callable[[], V]) -> V:
        value = self.get(key)
        if value is None:
            # Computed outside the lock: concurrent misses may compute twice
            value = self.put(key, compute())
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class MergeTable(NamedTuple):
    """Parsed rule list: the pairs in training order and the rank of each pair."""

    pairs: tuple[Pair, ...]
    ranks: dict[Pair, int]

    @classmethod
    def from_merges(cls, merges: Sequence[str]) -> "MergeTable":
        pairs = tuple(parse_pair(rule) for rule in merges)
        ranks: dict[Pair, int] = {}
        for rank, pair in enumerate(pairs):
            # A repeated rule keeps its first (lowest) rank
            ranks.setdefault(pair, rank)
        return cls(pairs, ranks)


class RankCache(LRUCache[str, MergeTable]):
    def __init__(self, capacity: int = RANK_CACHE_CAPACITY) -> None:
        super().__init__(capacity)

    def table_for(self, merges: Sequence[str], key: str) -> MergeTable:
        return self.get_or_compute(key, lambda: MergeTable.from_merges(merges))


ResultKey = tuple[bool, str, str]


class ResultCache(LRUCache[ResultKey, tuple[str, ...]]):
    def __init__(self, capacity: int = RESULT_CACHE_CAPACITY) -> None:
        super().__init__(capacity)


rank_cache = RankCache()
result_cache = ResultCache()
