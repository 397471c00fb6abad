"""Utility functions for symbol sequences."""

from collections.abc import Iterable

Pair = tuple[str, str]

BOUNDARY_MARKER = "_"
UNK_TOKEN = "<UNK>"


def get_pair_counts(
    tokens: list[str], pair_counts: dict[Pair, int] | None = None
) -> dict[Pair, int]:
    """Count the occurrences of each pair of adjacent symbols in the list.

    Args:
        tokens: the list of symbols in which to count pairs.
        pair_counts: a dictionary to update with the counts.

    Returns:
        A dictionary that maps each pair of symbols to the number of times it occurs.
    """
    pair_counts = {} if pair_counts is None else pair_counts
    for pair in zip(tokens, tokens[1:]):  # Iterate over consecutive elements
        pair_counts[pair] = pair_counts.get(pair, 0) + 1
    return pair_counts


def merge_pair(tokens: list[str], pair: Pair) -> int:
    """Replace all non-overlapping occurrences of `pair` in `tokens` with the
    concatenated symbol. The list is updated in place.

    Args:
        tokens: the list of symbols to update.
        pair: the (left, right) pair of symbols to merge.

    Returns:
        The number of replacements made.
    """
    left, right = pair
    merged = left + right
    replaced = 0
    i = 0
    while i < len(tokens) - 1:
        if tokens[i] == left and tokens[i + 1] == right:
            # The merged symbol is not compared against `pair` again: move past it
            tokens[i : i + 2] = [merged]
            replaced += 1
        i += 1
    return replaced


def segment(
    word: str, boundary: bool, charset: Iterable[str] | None = None
) -> list[str]:
    """Split a word into single-character symbols, optionally prefixed with the
    boundary marker. When `charset` is given, characters outside of it are replaced
    by the unknown-symbol placeholder.
    """
    surface = BOUNDARY_MARKER + word if boundary else word
    if charset is None:
        return list(surface)
    return [c if c in charset else UNK_TOKEN for c in surface]


def format_pair(pair: Pair) -> str:
    return f"{pair[0]} {pair[1]}"


def parse_pair(rule: str) -> Pair:
    """Split a `"left right"` rule string into its two symbols."""
    parts = rule.split()
    if len(parts) != 2:
        raise ValueError(f"Merge rule must have exactly two symbols: {rule!r}")
    return parts[0], parts[1]
