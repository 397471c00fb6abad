import enum
from collections.abc import Collection, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

from subword import caches
from subword.caches import MergeTable, fingerprint
from subword.encoding import Encoding
from subword.utils import BOUNDARY_MARKER, Pair, merge_pair, segment


class Strategy(str, enum.Enum):
    """How merge rules are replayed on a word.

    RULE_ORDER: take the rules in training order and apply each one everywhere in the
        word before moving on to the next.
    RANK: repeatedly merge the single adjacent pair with the lowest rank (leftmost on
        ties) until no adjacent pair has a rank. This is the usual BPE inference.

    The two can produce different segmentations of the same word.
    """

    RULE_ORDER = "rule_order"
    RANK = "rank"


def _merge_by_rule_order(tokens: list[str], pairs: Sequence[Pair]) -> list[str]:
    for pair in pairs:
        if len(tokens) < 2:
            break
        merge_pair(tokens, pair)
    return tokens


def _merge_by_rank(tokens: list[str], ranks: dict[Pair, int]) -> list[str]:
    while len(tokens) >= 2:
        best_rank = None
        best_i = -1
        for i, pair in enumerate(zip(tokens, tokens[1:])):
            rank = ranks.get(pair)
            # Strict comparison keeps the leftmost pair on ties
            if rank is not None and (best_rank is None or rank < best_rank):
                best_rank = rank
                best_i = i
                if rank == 0:
                    break
        if best_i == -1:
            break  # No mergeable pair left
        tokens[best_i : best_i + 2] = [tokens[best_i] + tokens[best_i + 1]]
    return tokens


def tokenize_rule_order(
    word: str,
    merges: Sequence[str],
    charset: Collection[str],
    boundary: bool = True,
) -> list[str]:
    """Segment `word` by applying each merge rule to exhaustion, in training order.

    The word is lowercased and split into characters; characters outside `charset`
    become the unknown-symbol placeholder, which no rule can match.

    The rules and charset are hashed on every call to find the cached merge table.
    Use `Tokenizer` to tokenize many words with the same rules.
    """
    tokens = segment(word.lower(), boundary, charset)
    if len(tokens) < 2 or not merges:
        return tokens
    key = fingerprint(merges, charset)
    table = caches.rank_cache.table_for(merges, key)
    return _merge_by_rule_order(tokens, table.pairs)


def tokenize_by_rank(
    word: str,
    merges: Sequence[str],
    charset: Collection[str],
    boundary: bool = True,
    use_cache: bool = True,
) -> list[str]:
    """Segment `word` by always merging the lowest-rank adjacent pair first.

    Results are memoized in the shared result cache, keyed by the boundary flag, the
    content of the rules and charset, and the lowercased word. The rules are hashed
    on every call, even on a cache hit; `Tokenizer` hashes them once.
    """
    return _tokenize_by_rank(
        word, merges, charset, boundary, fingerprint(merges, charset), use_cache
    )


def _tokenize_by_rank(
    word: str,
    merges: Sequence[str],
    charset: Collection[str],
    boundary: bool,
    key: str,
    use_cache: bool,
) -> list[str]:
    lower = word.lower()
    cache_key = (boundary, key, lower)
    if use_cache:
        cached = caches.result_cache.get(cache_key)
        if cached is not None:
            return list(cached)

    tokens = segment(lower, boundary, charset)
    if len(tokens) >= 2 and merges:
        table = caches.rank_cache.table_for(merges, key)
        tokens = _merge_by_rank(tokens, table.ranks)

    if use_cache:
        caches.result_cache.put(cache_key, tuple(tokens))
    return tokens


def tokenize(
    word: str,
    merges: Sequence[str],
    charset: Collection[str],
    boundary: bool = True,
    strategy: Strategy | str = Strategy.RANK,
) -> list[str]:
    strategy = Strategy(strategy)
    if strategy is Strategy.RULE_ORDER:
        return tokenize_rule_order(word, merges, charset, boundary)
    return tokenize_by_rank(word, merges, charset, boundary)


class Tokenizer:
    """Tokenizer bound to a trained `Encoding`.

    The merge table is looked up once at construction instead of on every call.
    Tokenization only reads the encoding, so `tokenize_words` can spread words over
    a thread pool.
    """

    def __init__(
        self,
        encoding: Encoding,
        boundary: bool = True,
        strategy: Strategy | str = Strategy.RANK,
    ) -> None:
        self.encoding = encoding
        self.boundary = boundary
        self.strategy = Strategy(strategy)
        self.table: MergeTable = caches.rank_cache.table_for(
            encoding.merges, encoding.fingerprint
        )

    def tokenize(self, word: str) -> list[str]:
        if self.strategy is Strategy.RANK:
            return _tokenize_by_rank(
                word,
                self.encoding.merges,
                self.encoding.charset,
                self.boundary,
                self.encoding.fingerprint,
                use_cache=True,
            )
        tokens = segment(word.lower(), self.boundary, self.encoding.charset)
        return _merge_by_rule_order(tokens, self.table.pairs)

    def tokenize_words(
        self, words: Iterable[str], max_workers: int | None = None
    ) -> list[list[str]]:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(self.tokenize, words))

    def detokenize(self, tokens: Iterable[str]) -> str:
        """Concatenate symbols and strip the boundary marker if one was added."""
        text = "".join(tokens)
        if self.boundary and text.startswith(BOUNDARY_MARKER):
            text = text[len(BOUNDARY_MARKER) :]
        return text
