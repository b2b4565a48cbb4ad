"""Pair counting over a vocabulary with optional thread or process workers."""

import logging
import os
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Final

from ._bpe import count_pairs, merge_tallies
from .parallel import ParallelMode, ParallelStrategy, shard
from .types import PairTally
from .vocab import Vocabulary

log = logging.getLogger(__name__)

# below this many entries a sequential pass beats worker scheduling overhead
AUTO_MIN_ENTRIES: Final[int] = 4096


class PairCounter:
    """
    Produce the weighted pair tally of a vocabulary.

    Entries are partitioned into disjoint contiguous shards. Each worker counts
    its shard into a private tally and the partial tallies are summed once all
    workers have finished, so no shared structure is written concurrently.
    The result is the same for every mode and worker count.

    The executor is created lazily and reused across calls; use the counter as
    a context manager (or call :meth:`close`) to shut it down.

    Example:
       >>> with PairCounter(num_workers=4, parallel_mode="thread") as counter:
       ...     tally = counter.count(vocab)
    """

    def __init__(
        self,
        num_workers: int | None = None,
        parallel_mode: ParallelStrategy | ParallelMode = "auto",
    ) -> None:
        if num_workers is None:
            self.workers = os.cpu_count() or 1
        else:
            self.workers = max(1, num_workers)  # "0" interpreted as 1 worker
        self.mode = ParallelMode.get(parallel_mode)
        self._executor: Executor | None = None

    def __enter__(self) -> "PairCounter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Shut down the worker pool, if one was started."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def resolve_mode(self, n_entries: int) -> ParallelMode:
        """Pick the concrete mode used for a vocabulary of ``n_entries`` entries."""
        if self.workers == 1 or n_entries < 2:
            return ParallelMode.OFF
        match self.mode:
            case ParallelMode.AUTO:
                # many small entries regress under worker scheduling overhead
                if n_entries < AUTO_MIN_ENTRIES:
                    return ParallelMode.OFF
                return ParallelMode.THREAD
            case _:
                return self.mode

    def count(self, vocab: Vocabulary) -> PairTally:
        """
        Count adjacent symbol pairs over every entry of ``vocab``.

        The vocabulary is only read. The returned tally reflects a completed
        pass over its current state.

        :param vocab: Vocabulary to scan.
        :returns: Weighted pair counts.
        :raises CountOverflowError: If a count exceeds the 64-bit counter range.
        """
        items = vocab.items()
        mode = self.resolve_mode(len(items))

        if mode is ParallelMode.OFF:
            return count_pairs(items)

        shards = shard(items, self.workers)
        log.debug(f"counting {len(items)} entries in {len(shards)} {mode.value} shards")

        pool = self._get_executor(mode)
        if mode is ParallelMode.PROCESS:
            # ship plain tuples so workers never see live vocabulary objects
            shards = [[(tuple(syms), freq) for syms, freq in part] for part in shards]

        # list() blocks until every shard is counted
        partials = list(pool.map(count_pairs, shards))
        return merge_tallies(partials)

    def _get_executor(self, mode: ParallelMode) -> Executor:
        """Build or return the cached executor for ``mode``."""
        if self._executor is not None and not isinstance(
            self._executor, _EXECUTOR_TYPES[mode]
        ):
            self.close()
        if self._executor is None:
            self._executor = _EXECUTOR_TYPES[mode](max_workers=self.workers)
        return self._executor


_EXECUTOR_TYPES: Final[dict[ParallelMode, type[Executor]]] = {
    ParallelMode.THREAD: ThreadPoolExecutor,
    ParallelMode.PROCESS: ProcessPoolExecutor,
}


def count_vocab_pairs(
    vocab: Vocabulary,
    num_workers: int | None = None,
    parallel_mode: ParallelStrategy = "auto",
) -> PairTally:
    """One-off pair count with a temporary :class:`PairCounter`."""
    with PairCounter(num_workers, parallel_mode) as counter:
        return counter.count(vocab)


__all__ = ["PairCounter", "count_vocab_pairs"]
