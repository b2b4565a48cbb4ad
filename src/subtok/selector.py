"""Deterministic choice of the next pair to merge."""

from .config import DEFAULT_MIN_COUNT
from .errors import TrainingError
from .types import PairKey, PairTally


def _rank(item: tuple[PairKey, int]) -> tuple[int, PairKey]:
    pair, count = item
    # highest count first, then codepoint order of (left, right)
    return -count, pair


def select_best(tally: PairTally, min_count: int = DEFAULT_MIN_COUNT) -> PairKey | None:
    """
    Return the pair with the strictly highest count.

    Ties are broken by lexicographic order of the pair's symbols (left symbol
    first, then right), so the result does not depend on tally iteration
    order or on how counting was split across workers.

    :param tally: Weighted pair counts from one counting pass.
    :param min_count: Smallest count that qualifies a pair for merging.
    :returns: The winning pair, or ``None`` when the tally is empty or the best
        count is below ``min_count``.
    :raises TrainingError: If ``min_count`` is less than 1.
    """
    if min_count < 1:
        raise TrainingError(f"min_count must be at least 1, got {min_count}")
    if not tally:
        return None

    pair, count = min(tally.items(), key=_rank)
    if count < min_count:
        return None
    return pair
