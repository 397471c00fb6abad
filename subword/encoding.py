from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType

from subword.caches import fingerprint


@dataclass(frozen=True)
class Encoding:
    """Result of BPE training.

    Attributes:
        vocabulary: maps each final segmentation (symbols joined by a space) to the
            total frequency of the words that ended up with it.
        merges: the applied merge rules as "left right" strings, in training order.
            The position of a rule is its rank when tokenizing.
        charset: the initial (pre-merge) symbols.
        tokens: every symbol seen during training, i.e. the charset plus the result
            of every merge.
    """

    vocabulary: Mapping[str, int] = field(default_factory=dict)
    merges: tuple[str, ...] = ()
    charset: frozenset[str] = frozenset()
    tokens: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        # Freeze whatever the caller passed in
        object.__setattr__(self, "vocabulary", MappingProxyType(dict(self.vocabulary)))
        object.__setattr__(self, "merges", tuple(self.merges))
        object.__setattr__(self, "charset", frozenset(self.charset))
        object.__setattr__(self, "tokens", frozenset(self.tokens))

    @cached_property
    def fingerprint(self) -> str:
        """Content hash of the merge rules and charset, used as a cache key."""
        return fingerprint(self.merges, self.charset)
