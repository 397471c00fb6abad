from subword.config import TrainerConfig
from subword.encoding import Encoding
from subword.merges_io import read_merges, write_merges
from subword.tokenizer import (
    Strategy,
    Tokenizer,
    tokenize,
    tokenize_by_rank,
    tokenize_rule_order,
)
from subword.trainer import BPETrainer, train
from subword.utils import BOUNDARY_MARKER, UNK_TOKEN
from subword.word_counts import SplitConfig, count_words, split_line
