import argparse
import itertools
import logging

from subword.config import BUDGET_MODES, TrainerConfig
from subword.merges_io import write_merges, write_vocabulary
from subword.tokenizer import Strategy, Tokenizer
from subword.trainer import BPETrainer
from subword.word_counts import SplitConfig, count_words

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    # fmt: off
    parser = argparse.ArgumentParser(description="Train a word-level BPE vocabulary")

    # I/O
    parser.add_argument("--input-file", type=str, required=True, help="Raw text corpus, one sentence per line")
    parser.add_argument("--max-lines", type=int, default=None, help="Only count words in the first N lines")
    parser.add_argument("--merges-out", type=str, default=None, help="Where to write the merge rules")
    parser.add_argument("--vocab-out", type=str, default=None, help="Where to write the segmented vocabulary")

    # Training
    parser.add_argument("--vocab-size", type=int, default=5_000, help="Target vocabulary size")
    parser.add_argument("--min-pair-freq", type=int, default=2, help="Stop when the best pair is rarer than this")
    parser.add_argument("--max-merges", type=int, default=50_000, help="Hard cap on the number of merges")
    parser.add_argument("--no-boundary", action="store_true", help="Do not prepend the start-of-word marker")
    parser.add_argument("--budget-mode", type=str, default="accepted", choices=BUDGET_MODES, help="What consumes the merge budget: accepted|iterations")

    # Tokenization
    parser.add_argument("--strategy", type=str, default=Strategy.RANK.value, choices=[s.value for s in Strategy], help="Rule replay: rank|rule_order")
    parser.add_argument("--tokenize", type=str, nargs="*", default=[], help="Words to segment with the trained rules")
    # fmt: on
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    for arg_name, arg_value in vars(args).items():
        logging.info(f"{arg_name}: {arg_value}")

    with open(args.input_file, "r", encoding="utf-8") as f:
        lines = itertools.islice(f, args.max_lines)
        word_counts = count_words(lines, SplitConfig())
    logging.info(f"Counted {sum(word_counts.values())} words, {len(word_counts)} types")

    config = TrainerConfig(
        vocab_size=args.vocab_size,
        min_pair_freq=args.min_pair_freq,
        max_merges=args.max_merges,
        boundary=not args.no_boundary,
        budget_mode=args.budget_mode,
    )
    encoding = BPETrainer(config).train(word_counts)

    if args.merges_out:
        write_merges(args.merges_out, encoding.merges)
        logging.info(f"Merge rules saved to {args.merges_out}")
    if args.vocab_out:
        write_vocabulary(args.vocab_out, encoding)
        logging.info(f"Vocabulary saved to {args.vocab_out}")

    tokenizer = Tokenizer(encoding, boundary=config.boundary, strategy=args.strategy)
    for word, tokens in zip(args.tokenize, tokenizer.tokenize_words(args.tokenize)):
        logging.info(f"{word} -> {' '.join(tokens)}")


if __name__ == "__main__":
    main()
