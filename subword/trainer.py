import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass

from subword.config import TrainerConfig
from subword.encoding import Encoding
from subword.pair_ledger import PairLedger
from subword.utils import format_pair, get_pair_counts, merge_pair, segment


@dataclass
class WordEntry:
    id: int
    frequency: int
    tokens: list[str]  # Current segmentation, updated in place by merges


class BPETrainer:
    """Learn byte pair encoding merge rules from word frequencies.

    Every distinct word starts out split into characters (after the optional boundary
    marker). At each step, the adjacent pair with the highest corpus-wide count
    (weighted by word frequency) is merged everywhere it occurs and recorded as a
    rule, until the merge budget is used up, no pair is left, or the best pair falls
    below `min_pair_freq`.

    Rather than recounting all pairs after every merge, the trainer keeps a
    `PairLedger` up to date: only the words that contain the merged pair are
    rescanned, and only the pairs whose local count changed are touched.
    """

    def __init__(self, config: TrainerConfig) -> None:
        self.config = config

    def train(self, word_counts: Mapping[str, int]) -> Encoding:
        if not word_counts:
            raise ValueError("Cannot train on an empty word-frequency mapping!")
        start = time.perf_counter()
        config = self.config

        words, charset = self._init_words(word_counts)
        ledger = PairLedger()
        for word in words:
            for pair, count in get_pair_counts(word.tokens).items():
                ledger.record_occurrence(pair, word.id, count * word.frequency)

        tokens = set(charset)
        merges: list[str] = []
        budget = config.merge_budget(len(charset))
        count_iterations = config.budget_mode == "iterations"

        used = 0
        while used < budget:
            if count_iterations:
                used += 1

            top = ledger.peek_max()
            if top is None:
                break  # No pair left
            pair, pair_count = top
            if pair_count < config.min_pair_freq:
                break  # Remaining gains are too small

            word_ids = ledger.words_containing(pair)
            if not word_ids:
                # The pair has a count but no word holds it: clear it and carry on
                logging.debug(f"Pair {pair} has count {pair_count} but no word")
                ledger.discard(pair)
                continue

            replaced = 0
            for word_id in word_ids:
                word = words[word_id]
                before = get_pair_counts(word.tokens)
                replaced += merge_pair(word.tokens, pair) * word.frequency
                after = get_pair_counts(word.tokens)
                ledger.reconcile(word.id, word.frequency, before, after)

            if replaced == 0:
                break  # The pair had already vanished

            merges.append(format_pair(pair))
            tokens.add(pair[0] + pair[1])
            if not count_iterations:
                used += 1
            logging.debug(f"Merge {len(merges)}: {pair} (count={pair_count})")

        vocabulary: dict[str, int] = {}
        for word in words:
            key = " ".join(word.tokens)
            vocabulary[key] = vocabulary.get(key, 0) + word.frequency

        elapsed_ms = (time.perf_counter() - start) * 1000
        logging.info(
            f"Encoding took {elapsed_ms:.0f} ms | "
            f"merges={len(merges)} | "
            f"symbols={len(tokens)} | "
            f"boundary={config.boundary} | "
            f"min_pair_freq={config.min_pair_freq}"
        )
        return Encoding(
            vocabulary=vocabulary, merges=merges, charset=charset, tokens=tokens
        )

    def _init_words(
        self, word_counts: Mapping[str, int]
    ) -> tuple[list[WordEntry], set[str]]:
        words = []
        charset: set[str] = set()
        for word_id, (word, frequency) in enumerate(word_counts.items()):
            if frequency < 1:
                raise ValueError(f"Word {word!r} has frequency {frequency}, expected >= 1!")
            if any(c.isspace() for c in word):
                raise ValueError(f"Word {word!r} contains whitespace!")
            word_tokens = segment(word, self.config.boundary)
            charset.update(word_tokens)
            words.append(WordEntry(word_id, frequency, word_tokens))
        return words, charset


def train(
    word_counts: Mapping[str, int],
    vocab_size: int,
    min_pair_freq: int = 2,
    max_merges: int = 50_000,
    boundary: bool = True,
    budget_mode: str = "accepted",
) -> Encoding:
    config = TrainerConfig(
        vocab_size=vocab_size,
        min_pair_freq=min_pair_freq,
        max_merges=max_merges,
        boundary=boundary,
        budget_mode=budget_mode,
    )
    return BPETrainer(config).train(word_counts)
