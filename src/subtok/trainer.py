"""Standalone BPE training loop."""

import dataclasses
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from tqdm import tqdm

from ._decorators import measure_time
from ._progress import _is_enabled
from ._sanitise import render_symbol
from .config import DEFAULT_NUM_MERGES, TrainingConfig
from .counter import PairCounter
from .errors import AllocationError
from .selector import select_best
from .types import PairKey, Symbol
from .vocab import Vocabulary

log = logging.getLogger(__name__)


class StopReason(str, Enum):
    """Why a training run ended."""

    BUDGET_EXHAUSTED = "budget_exhausted"
    NO_MORE_PAIRS = "no_more_pairs"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Running:
    """Training in progress at ``iteration`` with ``remaining`` merges left."""

    iteration: int
    remaining: int


@dataclass(frozen=True)
class Stopped:
    """Terminal training state."""

    reason: StopReason


type TrainerState = Running | Stopped


@dataclass(frozen=True)
class MergeRecord:
    """One learned merge."""

    iteration: int
    pair: PairKey
    merged: Symbol
    count: int
    # diagnostics only
    entries_changed: int = 0


@dataclass
class BPETrainingResult:
    """Results from one BPE training run."""

    vocab: Vocabulary
    merges: list[MergeRecord]
    reason: StopReason

    @property
    def n_merges_completed(self) -> int:
        return len(self.merges)

    def merge_pairs(self) -> list[PairKey]:
        """Learned pairs in merge order."""
        return [record.pair for record in self.merges]


class BPETrainer:
    """
    BPE trainer that learns merges over a word vocabulary.

    Each iteration counts adjacent symbol pairs (optionally in parallel), picks
    the best pair and merges it in every entry. Training stops when the merge
    budget is used up, when no pair reaches ``min_count``, or when a stop
    signal is set between iterations.

    Example:
       >>> vocab = Vocabulary.from_tokens("low lower lowest low".split())
       >>> trainer = BPETrainer(num_merges=10, show_progress=False)
       >>> result = trainer.train(vocab)
       >>> print(f"Learned {result.n_merges_completed} merges ({result.reason.value})")
    """

    def __init__(self, config: TrainingConfig | None = None, **overrides) -> None:
        """
        :param config: Base training configuration.
        :param overrides: Field overrides applied on top of ``config``.
        """
        config = config or TrainingConfig()
        if overrides:
            config = dataclasses.replace(config, **overrides)
        self.config = config
        self.state: TrainerState = Running(0, config.num_merges)
        self.merges: list[MergeRecord] = []
        self._stop = threading.Event()

    def stop(self) -> None:
        """Request a clean stop at the next iteration boundary."""
        self._stop.set()

    @measure_time("bpe training")
    def train(
        self, vocab: Vocabulary, stop_event: threading.Event | None = None
    ) -> BPETrainingResult:
        """
        Run merge iterations over ``vocab`` until a terminal state is reached.

        The vocabulary is split into subwords before the first count if that
        has not happened yet. It is mutated in place and must not be modified
        by anyone else while training runs.

        :param vocab: Vocabulary to train on.
        :param stop_event: External stop signal checked once per iteration.
        :returns: The vocabulary, the merge log and the stop reason.
        :raises AllocationError: If memory runs out during an iteration.
        :raises CountOverflowError: If a pair count exceeds the 64-bit range.
        """
        self.state = Running(0, self.config.num_merges)
        self.merges = []
        self._stop.clear()
        signals = [self._stop] if stop_event is None else [self._stop, stop_event]

        log.info(
            f"training on {len(vocab)} tokens with budget of "
            f"{self.config.num_merges} merges"
        )

        show = self.config.show_progress and _is_enabled()
        with (
            PairCounter(self.config.num_workers, self.config.parallel_mode) as counter,
            tqdm(
                total=self.config.num_merges,
                desc="merging",
                unit="merge",
                disable=not show,
            ) as bar,
        ):
            while isinstance(self.state, Running):
                if any(signal.is_set() for signal in signals):
                    self.state = Stopped(StopReason.CANCELLED)
                    break
                if isinstance(self.step(vocab, counter), Running):
                    bar.update(1)

        reason = self.state.reason
        if reason is StopReason.NO_MORE_PAIRS and len(vocab) > 0:
            log.warning(
                f"no more pairs to merge after {len(self.merges)} merges "
                f"(requested {self.config.num_merges}) stopping early"
            )
        elif reason is StopReason.CANCELLED:
            log.warning(f"training cancelled after {len(self.merges)} merges")

        return BPETrainingResult(vocab=vocab, merges=list(self.merges), reason=reason)

    def step(self, vocab: Vocabulary, counter: PairCounter) -> TrainerState:
        """
        Perform exactly one transition of the training state machine.

        A running state either runs one count, select and apply cycle and
        advances, or moves to a terminal state. Terminal states are returned
        unchanged.
        """
        match self.state:
            case Stopped():
                return self.state
            case Running(iteration=iteration, remaining=remaining):
                pass

        if len(vocab) == 0:
            self.state = Stopped(StopReason.NO_MORE_PAIRS)
            return self.state
        if remaining == 0:
            self.state = Stopped(StopReason.BUDGET_EXHAUSTED)
            return self.state

        try:
            if not vocab.is_split:
                vocab.to_subwords()
            tally = counter.count(vocab)
            pair = select_best(tally, self.config.min_count)
            if pair is None:
                self.state = Stopped(StopReason.NO_MORE_PAIRS)
                return self.state
            count = tally[pair]
            # the tally is no longer needed once the winner is known
            del tally
            changed = vocab.apply_merge(pair)
        except MemoryError as e:
            raise AllocationError(
                "out of memory", operation=f"merge iteration {iteration}"
            ) from e

        record = MergeRecord(
            iteration=iteration,
            pair=pair,
            merged=pair[0] + pair[1],
            count=count,
            entries_changed=changed,
        )
        self.merges.append(record)

        if self.config.verbose:
            log.info(
                "merge %d/%d: (%s, %s) -> %s (count %d)",
                iteration + 1,
                self.config.num_merges,
                render_symbol(pair[0]),
                render_symbol(pair[1]),
                render_symbol(record.merged),
                count,
            )
        log.debug(f"merge {iteration + 1} changed {changed} entries")

        self.state = Running(iteration + 1, remaining - 1)
        return self.state


def train_bpe(
    tokens: Iterable[str | bytes],
    num_merges: int = DEFAULT_NUM_MERGES,
    stop_event: threading.Event | None = None,
    **config,
) -> BPETrainingResult:
    """
    Build a vocabulary from ``tokens`` and train BPE merges on it.

    :param tokens: Surface tokens, one per occurrence, in any order.
    :param num_merges: Merge budget.
    :param stop_event: Optional external stop signal.
    :param config: Further :class:`TrainingConfig` fields.
    :returns: Training result holding the trained vocabulary.
    """
    cfg = TrainingConfig(num_merges=num_merges, **config)
    vocab = Vocabulary.from_tokens(tokens, max_size=cfg.max_vocab_size)
    return BPETrainer(cfg).train(vocab, stop_event=stop_event)


__all__ = [
    "StopReason",
    "Running",
    "Stopped",
    "TrainerState",
    "MergeRecord",
    "BPETrainingResult",
    "BPETrainer",
    "train_bpe",
]
