"""Turn raw text lines into the word frequencies consumed by the trainer."""

import functools
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

import regex as re

from subword.split_patterns import (
    CLITIC_PATTERN,
    DIGIT_PATTERN,
    DIGIT_PLACEHOLDER,
    DIGIT_SPLIT_PATTERN,
    DROPPED_PATTERN,
    WORD_SPLIT_PATTERN,
)


@dataclass(frozen=True)
class SplitConfig:
    lowercase: bool = True
    digits_to_at: bool = True
    keep_hyphen: bool = False
    keep_apostrophe: bool = True
    split_clitics: bool = False


@functools.lru_cache(maxsize=None)
def _compile(config: SplitConfig):
    dropped = DROPPED_PATTERN
    if not config.keep_hyphen:
        dropped += "|-"
    if not config.keep_apostrophe:
        dropped += "|'"
    split = DIGIT_SPLIT_PATTERN if config.digits_to_at else WORD_SPLIT_PATTERN
    return re.compile(dropped), re.compile(split)


_DIGIT = re.compile(DIGIT_PATTERN)
_CLITIC = re.compile(CLITIC_PATTERN)


def split_line(line: str, config: SplitConfig | None = None) -> list[str]:
    """Split a raw line into words.

    The line is split on whitespace. Within each chunk, brackets, quotes, tabs and `#`
    are dropped, sentence punctuation (`.?!,:;`) becomes a word of its own and, with
    `digits_to_at`, every digit becomes a separate `@` word. Hyphens and apostrophes
    are kept or dropped according to `config`; with `split_clitics`, a word is also
    split right after an apostrophe (`l'homme` -> `l'`, `homme`).

    Example:
        >>> split_line("Paris, (en 1998) l'été!")
        ['paris', ',', 'en', '@', '@', '@', '@', "l'été", '!']
    """
    config = config or SplitConfig()
    if config.lowercase:
        line = line.lower()
    dropped, split = _compile(config)

    words = []
    for chunk in line.split():
        chunk = dropped.sub("", chunk)
        for word in split.findall(chunk):
            if config.digits_to_at and _DIGIT.fullmatch(word):
                words.append(DIGIT_PLACEHOLDER)
            elif config.split_clitics and config.keep_apostrophe:
                words.extend(_CLITIC.findall(word))
            else:
                words.append(word)
    return words


def count_words(
    lines: Iterable[str], config: SplitConfig | None = None
) -> Counter[str]:
    counts: Counter[str] = Counter()
    for line in lines:
        counts.update(split_line(line, config))
    return counts
