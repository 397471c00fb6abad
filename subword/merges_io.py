"""Reading and writing merge rules and vocabularies as plain text."""

import logging
import pathlib
from collections.abc import Iterable, Mapping

from subword.encoding import Encoding


def parse_merges(lines: Iterable[str]) -> list[str]:
    """Parse merge rules, one `left right` pair per line.

    Blank lines and comments (leading `#`) are ignored. Lines that do not hold exactly
    two whitespace-separated symbols are skipped.
    """
    merges = []
    for line_no, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        if len(parts) != 2:
            logging.debug(f"Skipping malformed merge rule on line {line_no}: {line!r}")
            continue
        merges.append(f"{parts[0]} {parts[1]}")
    return merges


def read_merges(path: str | pathlib.Path) -> list[str]:
    with open(path, "r", encoding="utf-8") as f:
        return parse_merges(f)


def write_merges(
    path: str | pathlib.Path, merges: Iterable[str], header: bool = True
) -> None:
    """Write merge rules one per line, in order.

    A rule whose left symbol starts with `#` would be read back as a comment, so it
    raises `ValueError` before anything is written.
    """
    merges = list(merges)
    for rank, rule in enumerate(merges):
        if rule.startswith("#"):
            raise ValueError(
                f"Merge rule {rank} ({rule!r}) starts with '#' and would be read "
                "back as a comment!"
            )
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        if header:
            f.write("# BPE merge rules, one pair per line, in training order\n")
        for rule in merges:
            f.write(rule + "\n")


def write_vocabulary(
    path: str | pathlib.Path, vocabulary: Mapping[str, int] | Encoding
) -> None:
    """Write `symbols<TAB>frequency` lines, most frequent first."""
    if isinstance(vocabulary, Encoding):
        vocabulary = vocabulary.vocabulary
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for symbols, frequency in sorted(vocabulary.items(), key=lambda kv: (-kv[1], kv[0])):
            f.write(f"{symbols}\t{frequency}\n")


def read_vocabulary(path: str | pathlib.Path) -> dict[str, int]:
    """Read `symbols<TAB>frequency` lines. Lines without a tab or an integer are skipped."""
    vocabulary = {}
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.rstrip("\n")
            if not line:
                continue
            symbols, tab, frequency = line.rpartition("\t")
            if tab:
                try:
                    vocabulary[symbols] = int(frequency)
                    continue
                except ValueError:
                    pass
            logging.debug(f"Skipping malformed vocabulary entry on line {line_no}: {line!r}")
    return vocabulary
