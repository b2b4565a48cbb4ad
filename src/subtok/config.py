"""Training configuration and library-wide defaults."""

import os
from dataclasses import dataclass
from typing import Final

from .errors import ConfigError

DEFAULT_MAX_VOCAB_SIZE: Final[int] = 50_000
DEFAULT_NUM_MERGES: Final[int] = 50
DEFAULT_MIN_COUNT: Final[int] = 1
# weighted pair counts must fit a signed 64-bit counter
MAX_PAIR_COUNT: Final[int] = 2**63 - 1
DEFAULT_DELIMITER: Final[str] = "\t"
NULL_PLACEHOLDER: Final[str] = "[NULL]"
# distinct invalid tokens remembered for reporting
MAX_INVALID_SAMPLES: Final[int] = 100
PARALLEL_MODES: Final[tuple[str, ...]] = ("auto", "thread", "process", "off")


@dataclass(frozen=True)
class TrainingConfig:
    """
    Settings consumed by :class:`subtok.trainer.BPETrainer`.

    :param max_vocab_size: Maximum number of distinct tokens kept in the vocabulary.
    :param num_merges: Merge budget, i.e. the maximum number of merge iterations.
    :param min_count: Minimum weighted count a pair needs to be merged.
    :param num_workers: Worker count for pair counting; ``None`` uses all CPUs.
    :param parallel_mode: One of "auto", "thread", "process" or "off".
    :param verbose: Log every learned merge at INFO level.
    :param show_progress: Display a progress bar over merge iterations.
    """

    max_vocab_size: int = DEFAULT_MAX_VOCAB_SIZE
    num_merges: int = DEFAULT_NUM_MERGES
    min_count: int = DEFAULT_MIN_COUNT
    num_workers: int | None = None
    parallel_mode: str = "auto"
    verbose: bool = False
    show_progress: bool = True

    def __post_init__(self) -> None:
        if self.max_vocab_size < 1:
            raise ConfigError(
                "max_vocab_size must be positive",
                field="max_vocab_size",
                value=self.max_vocab_size,
            )
        if self.num_merges < 0:
            raise ConfigError(
                "num_merges must not be negative",
                field="num_merges",
                value=self.num_merges,
            )
        if self.min_count < 1:
            raise ConfigError(
                "min_count must be at least 1", field="min_count", value=self.min_count
            )
        if self.num_workers is not None and self.num_workers < 1:
            raise ConfigError(
                "num_workers must be positive",
                field="num_workers",
                value=self.num_workers,
            )
        if self.parallel_mode.lower() not in PARALLEL_MODES:
            raise ConfigError(
                "unknown parallel mode",
                field="parallel_mode",
                value=self.parallel_mode,
            )

    @property
    def workers(self) -> int:
        """Effective worker count; ``None`` resolves to the CPU count."""
        if self.num_workers is None:
            return os.cpu_count() or 1
        return self.num_workers
