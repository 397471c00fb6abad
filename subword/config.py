from dataclasses import dataclass

BUDGET_MODES = ("accepted", "iterations")


@dataclass
class TrainerConfig:
    """Hyperparameters of the BPE trainer.

    Attributes:
        vocab_size: target vocabulary size. It is clamped upward to the number of
            initial symbols, so a small value simply means no merges.
        min_pair_freq: stop as soon as the best remaining pair is less frequent.
        max_merges: hard cap on the number of merges.
        boundary: prepend the start-of-word marker before character segmentation.
        budget_mode: how the merge budget is consumed. With "accepted", only merges
            that were actually applied use up the budget. With "iterations", every
            iteration of the training loop does, including the ones that found a
            pair with no word left to merge.
    """

    vocab_size: int
    min_pair_freq: int = 2
    max_merges: int = 50_000
    boundary: bool = True
    budget_mode: str = "accepted"

    def __post_init__(self) -> None:
        if self.min_pair_freq < 1:
            raise ValueError(f"min_pair_freq must be >= 1, got {self.min_pair_freq}!")
        if self.max_merges < 0:
            raise ValueError(f"max_merges must be >= 0, got {self.max_merges}!")
        if self.budget_mode not in BUDGET_MODES:
            raise ValueError(
                f"Budget mode {self.budget_mode} is not recognized! "
                f"Expected one of {BUDGET_MODES}."
            )

    def merge_budget(self, initial_symbols: int) -> int:
        want = max(self.vocab_size, initial_symbols)
        return min(self.max_merges, max(0, want - initial_symbols))
