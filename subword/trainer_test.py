import unittest
from unittest import mock

from subword.config import TrainerConfig
from subword.pair_ledger import PairLedger
from subword.trainer import BPETrainer, train
from subword.utils import get_pair_counts, merge_pair, parse_pair, segment

TOY_COUNTS = {"de": 120, "la": 80, "paris": 15, "partir": 12, "dela": 5}

# With ties broken on the smallest (left, right), training on TOY_COUNTS is fully
# determined. For instance ("_", "d") and ("d", "e") both occur 125 times, and "_"
# sorts before "d".
TOY_MERGES = [
    "_ d",
    "_d e",
    "l a",
    "_ la",
    "_ p",
    "_p a",
    "_pa r",
    "_par i",
    "_pari s",
    "_par t",
    "_part i",
    "_parti r",
    "_de la",
]

CORPUS_COUNTS = {
    "the": 50,
    "then": 12,
    "there": 9,
    "these": 7,
    "lower": 6,
    "lowest": 4,
    "newer": 5,
    "newest": 3,
    "wider": 2,
    "widest": 2,
    "a": 30,
    "banana": 3,
    "bandana": 1,
    "aaaa": 2,
}


class TestBPETrainer(unittest.TestCase):
    def test_toy_corpus(self):
        encoding = train(TOY_COUNTS, vocab_size=200)

        self.assertGreater(len(encoding.merges), 0, msg="No merge was produced!")
        self.assertGreater(len(encoding.vocabulary), 0)
        for rule in encoding.merges:
            self.assertEqual(rule.count(" "), 1, msg=f"Malformed rule {rule!r}")
            left, right = rule.split(" ")
            self.assertTrue(left and right)

        self.assertEqual(list(encoding.merges), TOY_MERGES)
        self.assertEqual(
            set(encoding.charset), {"_", "d", "e", "l", "a", "p", "r", "i", "s", "t"}
        )
        self.assertEqual(
            dict(encoding.vocabulary),
            {"_de": 120, "_la": 80, "_paris": 15, "_partir": 12, "_dela": 5},
            msg="Every word should end up as a single symbol!",
        )
        self.assertEqual(len(encoding.tokens), len(encoding.charset) + len(encoding.merges))
        self.assertTrue(encoding.charset <= encoding.tokens)

    def test_without_boundary(self):
        encoding = train(TOY_COUNTS, vocab_size=200, boundary=False)
        self.assertNotIn("_", encoding.charset)
        self.assertEqual(encoding.merges[0], "d e", msg="(d, e) occurs 125 times")
        self.assertEqual(sum(encoding.vocabulary.values()), sum(TOY_COUNTS.values()))

    def test_empty_input(self):
        self.assertRaises(ValueError, train, {}, 100)
        self.assertRaises(ValueError, train, None, 100)

    def test_invalid_words(self):
        self.assertRaises(ValueError, train, {"de": 0}, 100)
        self.assertRaises(ValueError, train, {"de": -3}, 100)
        self.assertRaises(ValueError, train, {"de la": 3}, 100)

    def test_vocab_size_below_charset(self):
        encoding = train(TOY_COUNTS, vocab_size=5)
        self.assertEqual(
            encoding.merges,
            (),
            msg="The target is clamped up to the charset size, so no merge is possible!",
        )
        self.assertEqual(encoding.tokens, encoding.charset)
        self.assertIn("_ p a r i s", encoding.vocabulary)

    def test_budget(self):
        # 10 initial symbols, so a target of 13 leaves room for 3 merges
        encoding = train(TOY_COUNTS, vocab_size=13)
        self.assertEqual(list(encoding.merges), TOY_MERGES[:3])

        encoding = train(TOY_COUNTS, vocab_size=200, max_merges=2)
        self.assertEqual(list(encoding.merges), TOY_MERGES[:2])

    def test_min_pair_freq(self):
        # "_de la" is only seen 5 times
        encoding = train(TOY_COUNTS, vocab_size=200, min_pair_freq=6)
        self.assertEqual(list(encoding.merges), TOY_MERGES[:-1])
        self.assertEqual(encoding.vocabulary["_de la"], 5)

        encoding = train(TOY_COUNTS, vocab_size=200, min_pair_freq=1000)
        self.assertEqual(encoding.merges, ())

    def test_increasing_vocab_size_extends_rules(self):
        small = train(CORPUS_COUNTS, vocab_size=20)
        large = train(CORPUS_COUNTS, vocab_size=5000)
        self.assertGreater(len(large.merges), len(small.merges))
        self.assertEqual(
            large.merges[: len(small.merges)],
            small.merges,
            msg="A larger budget should only append merges!",
        )

        small = train(TOY_COUNTS, vocab_size=100)
        large = train(TOY_COUNTS, vocab_size=5000)
        self.assertEqual(large.merges[: len(small.merges)], small.merges)

    def test_merges_replay_on_corpus(self):
        """Replaying the rules on the corpus should reproduce the vocabulary, and each
        rule should have been frequent enough when it was selected.
        """
        min_pair_freq = 3
        encoding = train(CORPUS_COUNTS, vocab_size=60, min_pair_freq=min_pair_freq)
        self.assertLessEqual(len(encoding.merges), 60 - len(encoding.charset))

        words = {word: segment(word, boundary=True) for word in CORPUS_COUNTS}
        for rule in encoding.merges:
            pair = parse_pair(rule)
            pair_count = sum(
                get_pair_counts(tokens).get(pair, 0) * CORPUS_COUNTS[word]
                for word, tokens in words.items()
            )
            self.assertGreaterEqual(pair_count, min_pair_freq, msg=f"Rule {rule!r}")

            # The selected pair must be a most frequent one at that point
            all_counts = {}
            for word, tokens in words.items():
                for p, count in get_pair_counts(tokens).items():
                    all_counts[p] = all_counts.get(p, 0) + count * CORPUS_COUNTS[word]
            self.assertEqual(pair_count, max(all_counts.values()), msg=f"Rule {rule!r}")

            for tokens in words.values():
                merge_pair(tokens, pair)

        vocabulary = {}
        for word, tokens in words.items():
            key = " ".join(tokens)
            vocabulary[key] = vocabulary.get(key, 0) + CORPUS_COUNTS[word]
        self.assertEqual(dict(encoding.vocabulary), vocabulary)

        merged = {left + right for left, right in map(parse_pair, encoding.merges)}
        self.assertEqual(
            encoding.tokens,
            encoding.charset | merged,
            msg="Every merged symbol should be counted exactly once!",
        )

    def test_vocabulary_aggregates_frequencies(self):
        # Without merges, the vocabulary is the character segmentation of each word
        encoding = train({"ab": 3, "Ab": 4}, vocab_size=0, boundary=False)
        self.assertEqual(dict(encoding.vocabulary), {"a b": 3, "A b": 4})

        # ("a", "a") occurs 1 x 3 + 2 x 4 times, then ("aa", "a") only 4 times
        encoding = train({"aa": 3, "aaa": 4}, vocab_size=100, boundary=False)
        self.assertEqual(list(encoding.merges), ["a a", "aa a"])
        self.assertEqual(dict(encoding.vocabulary), {"aa": 3, "aaa": 4})

        encoding = train({"aa": 3, "aaa": 4}, vocab_size=100, min_pair_freq=5, boundary=False)
        self.assertEqual(list(encoding.merges), ["a a"])
        self.assertEqual(dict(encoding.vocabulary), {"aa": 3, "aa a": 4})

        # ("ab", "ab") is seen once only, below the default floor
        encoding = train({"ab": 3, "abab": 1}, vocab_size=100, boundary=False)
        self.assertEqual(list(encoding.merges), ["a b"])
        self.assertEqual(dict(encoding.vocabulary), {"ab": 3, "ab ab": 1})

    def test_config_object(self):
        config = TrainerConfig(vocab_size=13, budget_mode="iterations")
        encoding = BPETrainer(config).train(TOY_COUNTS)
        self.assertEqual(list(encoding.merges), TOY_MERGES[:3])


class TestBudgetModes(unittest.TestCase):
    """A pair with a count but no word holding it is cleared without being merged.
    Only the "iterations" mode spends a budget slot on it.
    """

    def train_with_gap(self, budget_mode: str) -> list[str]:
        original = PairLedger.words_containing
        calls = []

        def words_containing(ledger, pair):
            calls.append(pair)
            if len(calls) == 1:
                return set()  # Simulate a missing word index for the first candidate
            return original(ledger, pair)

        with mock.patch.object(
            PairLedger, "words_containing", autospec=True, side_effect=words_containing
        ):
            encoding = train(TOY_COUNTS, vocab_size=13, budget_mode=budget_mode)
        self.assertEqual(calls[0], ("_", "d"))
        return list(encoding.merges)

    def test_accepted_mode(self):
        self.assertEqual(self.train_with_gap("accepted"), ["d e", "_ de", "l a"])

    def test_iterations_mode(self):
        self.assertEqual(self.train_with_gap("iterations"), ["d e", "_ de"])


if __name__ == "__main__":
    unittest.main()
