"""
Core Byte Pair Encoding (BPE) operations on symbol sequences.
"""

from collections.abc import Iterable, Sequence

from .config import MAX_PAIR_COUNT
from .errors import CountOverflowError
from .types import PairKey, PairTally, Symbol


def count_pairs(items: Iterable[tuple[Sequence[Symbol], int]]) -> PairTally:
    """
    Count adjacent symbol pairs weighted by entry frequency.

    Each ``(symbols, frequency)`` item adds ``frequency`` to the tally of every
    adjacent pair ``(symbols[i], symbols[i + 1])``. Items are only read.

    :param items: Symbol sequences paired with their token frequency.
    :returns: Mapping of pair to its weighted occurrence count.
    :raises CountOverflowError: If a count exceeds the 64-bit counter range.
    """
    tally: PairTally = {}

    for symbols, freq in items:
        for i in range(len(symbols) - 1):
            pair = (symbols[i], symbols[i + 1])
            count = tally.get(pair, 0) + freq
            if count > MAX_PAIR_COUNT:
                raise CountOverflowError("pair count overflow", pair=pair, count=count)
            tally[pair] = count

    return tally


def merge_tallies(partials: Iterable[PairTally]) -> PairTally:
    """
    Sum partial tallies key by key into one tally.

    :param partials: Tallies produced by independent workers.
    :returns: Combined tally.
    :raises CountOverflowError: If a summed count exceeds the 64-bit counter range.
    """
    partials = list(partials)
    if len(partials) == 1:
        return partials[0]

    total: PairTally = {}
    for partial in partials:
        for pair, freq in partial.items():
            count = total.get(pair, 0) + freq
            if count > MAX_PAIR_COUNT:
                raise CountOverflowError("pair count overflow", pair=pair, count=count)
            total[pair] = count

    return total


def merge_pair(symbols: Sequence[Symbol], target: PairKey) -> list[Symbol]:
    """
    Merge all occurrences of a target pair into a single concatenated symbol.

    The scan is greedy and left to right. After a merge it resumes behind the
    consumed pair, so in ``["a", "a", "a"]`` only the first two symbols merge.

    Args:
        symbols (Sequence[Symbol]): Current segmentation of one token.
        target (PairKey): The adjacent pair of symbols to merge.

    Returns:
        list[Symbol]: New segmentation with every matched pair collapsed.
    """
    if len(symbols) < 2:
        return list(symbols)

    left, right = target
    merged = left + right
    newsyms: list[Symbol] = []

    i = 0
    n = len(symbols)
    while i < n:
        # check if we can form a pair and it matches the target
        if i < n - 1 and symbols[i] == left and symbols[i + 1] == right:
            newsyms.append(merged)
            i += 2
        else:
            newsyms.append(symbols[i])
            i += 1

    return newsyms
