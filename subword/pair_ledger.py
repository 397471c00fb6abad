import heapq

from subword.utils import Pair


class PairLedger:
    """Corpus-wide bookkeeping of adjacent symbol pairs.

    The ledger owns three structures that must always move together:
        - `pair_counts`: for each pair, the sum over all words of (number of adjacent
            occurrences in the word) x (word frequency).
        - `pair_to_words`: for each pair, the ids of the words whose current
            segmentation contains it at least once. This is what lets a merge touch
            only the words it can affect instead of rescanning the whole corpus.
        - a max-heap of (count, pair) snapshots used to find the next merge candidate.
            Snapshots may be outdated: they are validated lazily in `peek_max`.

    Callers only go through `record_occurrence` / `remove_occurrence` (or
    `reconcile`, which is built on them), so the two indices can never drift apart.

    Heap entries are `(-count, left, right)`: among pairs with equal counts, the
    lexicographically smallest (left, right) comes out first. This makes training
    deterministic.
    """

    def __init__(self) -> None:
        self.pair_counts: dict[Pair, int] = {}
        self.pair_to_words: dict[Pair, set[int]] = {}
        self._heap: list[tuple[int, str, str]] = []

    def __len__(self) -> int:
        return len(self.pair_counts)

    def __contains__(self, pair: Pair) -> bool:
        return pair in self.pair_counts

    def count(self, pair: Pair) -> int:
        return self.pair_counts.get(pair, 0)

    def words_containing(self, pair: Pair) -> set[int]:
        return set(self.pair_to_words.get(pair, ()))

    def record_occurrence(self, pair: Pair, word_id: int, weight: int) -> None:
        """Add `weight` (local count x word frequency) occurrences of `pair` found
        in word `word_id`.
        """
        new_count = self.pair_counts.get(pair, 0) + weight
        self._set_count(pair, new_count)
        if new_count > 0:
            self.pair_to_words.setdefault(pair, set()).add(word_id)

    def remove_occurrence(
        self, pair: Pair, word_id: int, weight: int, still_present: bool
    ) -> None:
        """Subtract `weight` occurrences of `pair` contributed by word `word_id`.
        `still_present` tells whether the word keeps at least one occurrence.
        """
        self._set_count(pair, self.pair_counts.get(pair, 0) - weight)
        if not still_present:
            word_ids = self.pair_to_words.get(pair)
            if word_ids is not None:
                word_ids.discard(word_id)
                if not word_ids:
                    del self.pair_to_words[pair]

    def reconcile(
        self,
        word_id: int,
        frequency: int,
        before: dict[Pair, int],
        after: dict[Pair, int],
    ) -> None:
        """Apply the change in local pair counts of one word (before vs after a
        merge), weighted by the word frequency.
        """
        if before == after:
            return
        for pair in before.keys() | after.keys():
            b = before.get(pair, 0)
            a = after.get(pair, 0)
            if a > b:
                self.record_occurrence(pair, word_id, (a - b) * frequency)
            elif a < b:
                self.remove_occurrence(pair, word_id, (b - a) * frequency, a > 0)

    def discard(self, pair: Pair) -> None:
        """Forget a pair entirely."""
        self.pair_counts.pop(pair, None)
        self.pair_to_words.pop(pair, None)

    def peek_max(self) -> tuple[Pair, int] | None:
        """Return the pair with the highest live count, or None if no pair is left.

        Outdated heap entries met on the way are re-pushed with their live count if
        it is still positive, and dropped otherwise. The valid entry stays on the heap:
        once the pair is merged away its count changes and the entry goes stale.
        """
        while self._heap:
            neg_count, left, right = self._heap[0]
            pair = (left, right)
            current = self.pair_counts.get(pair, 0)
            if current == -neg_count:
                return pair, current
            heapq.heappop(self._heap)
            if current > 0:
                heapq.heappush(self._heap, (-current, left, right))
        return None

    def _set_count(self, pair: Pair, count: int) -> None:
        if count <= 0:
            self.pair_counts.pop(pair, None)
            return
        self.pair_counts[pair] = count
        heapq.heappush(self._heap, (-count, pair[0], pair[1]))
