"""subtok: word-level BPE subword vocabulary training."""

from importlib.metadata import PackageNotFoundError, version

from ._progress import disable_progress, enable_progress, progress_disabled
from .config import TrainingConfig
from .counter import PairCounter, count_vocab_pairs
from .parallel import ParallelMode, list_parallel_modes
from .pattern import TokenPattern, list_patterns
from .pretokenize import Pretokenizer, build_vocab
from .selector import select_best
from .serialize import format_vocab, save_merges, write_vocab
from .trainer import (
    BPETrainer,
    BPETrainingResult,
    MergeRecord,
    StopReason,
    train_bpe,
)
from .vocab import InsertResult, Vocabulary, VocabularyEntry

try:
    __version__ = version("subtok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "Vocabulary",
    "VocabularyEntry",
    "InsertResult",
    "PairCounter",
    "ParallelMode",
    "TokenPattern",
    "TrainingConfig",
    "BPETrainer",
    "BPETrainingResult",
    "MergeRecord",
    "StopReason",
    "Pretokenizer",
    "build_vocab",
    "count_vocab_pairs",
    "select_best",
    "train_bpe",
    "format_vocab",
    "write_vocab",
    "save_merges",
    "list_patterns",
    "list_parallel_modes",
    "enable_progress",
    "disable_progress",
    "progress_disabled",
]
