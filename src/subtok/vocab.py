"""
Vocabulary model: surface tokens with their frequency and current segmentation.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from ._bpe import merge_pair
from ._sanitise import decode_token, render_symbol
from .config import DEFAULT_MAX_VOCAB_SIZE, MAX_INVALID_SAMPLES
from .errors import AllocationError, EncodingError, VocabularyError
from .types import PairKey, Symbol, SymbolSequence

log = logging.getLogger(__name__)


class InsertResult(str, Enum):
    """Outcome of a single :meth:`Vocabulary.insert_or_increment` call."""

    INSERTED = "inserted"
    INCREMENTED = "incremented"
    # vocabulary at max size, token not kept
    DROPPED = "dropped"
    # token could not be decoded into symbols
    INVALID = "invalid"


@dataclass
class VocabularyEntry:
    """One distinct surface token."""

    token: str
    symbols: SymbolSequence = field(default_factory=list)
    frequency: int = 1

    def __post_init__(self) -> None:
        if not self.symbols:
            self.symbols = [self.token]

    def render(self, sep: str = " ") -> str:
        """Return the current segmentation joined by ``sep``."""
        return sep.join(self.symbols)


class VocabSnapshot:
    """
    Restartable view over ``(segmentation, frequency)`` pairs.

    Nothing is copied up front: every iteration walks the vocabulary as it is
    at that moment, in insertion order.
    """

    def __init__(self, vocab: "Vocabulary", sep: str = " ") -> None:
        self._vocab = vocab
        self._sep = sep

    def __iter__(self) -> Iterator[tuple[str, int]]:
        for entry in self._vocab:
            yield entry.render(self._sep), entry.frequency

    def __len__(self) -> int:
        return len(self._vocab)


class Vocabulary:
    """
    Insertion-ordered mapping from surface token to :class:`VocabularyEntry`.

    The vocabulary is filled with :meth:`insert_or_increment`, split into
    single-codepoint symbols once with :meth:`to_subwords`, and rewritten in
    place by :meth:`apply_merge`. Once split it no longer accepts tokens.

    Example:
       >>> vocab = Vocabulary.from_tokens(["low", "lower", "low"])
       >>> vocab.to_subwords()
       >>> vocab.apply_merge(("l", "o"))
       2
       >>> list(vocab.snapshot())
       [('lo w', 2), ('lo w e r', 1)]
    """

    def __init__(self, max_size: int = DEFAULT_MAX_VOCAB_SIZE) -> None:
        if max_size < 1:
            raise VocabularyError("max size must be positive", vocab_size=max_size)
        self.max_size = max_size
        self._entries: dict[str, VocabularyEntry] = {}
        self._split = False
        # tokens dropped because the vocabulary was full
        self.n_dropped = 0
        # tokens skipped because they could not be decoded
        self.n_invalid = 0
        # distinct escaped sample of skipped tokens, capped at MAX_INVALID_SAMPLES
        self.invalid_tokens: list[str] = []

    @classmethod
    def from_tokens(
        cls, tokens: Iterable[str | bytes], max_size: int = DEFAULT_MAX_VOCAB_SIZE
    ) -> "Vocabulary":
        """Build a vocabulary from a stream of surface tokens."""
        vocab = cls(max_size)
        vocab.update(tokens)
        return vocab

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, token: object) -> bool:
        return token in self._entries

    def __getitem__(self, token: str) -> VocabularyEntry:
        return self._entries[token]

    def __iter__(self) -> Iterator[VocabularyEntry]:
        return iter(self._entries.values())

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(size={len(self)}, max_size={self.max_size}, "
            f"split={self._split})"
        )

    @property
    def is_split(self) -> bool:
        """Whether :meth:`to_subwords` has been called."""
        return self._split

    def insert_or_increment(self, token: str | bytes) -> InsertResult:
        """
        Record one occurrence of ``token``.

        Known tokens have their frequency incremented. New tokens get an entry
        with frequency 1 as long as the vocabulary is below ``max_size``;
        otherwise they are dropped and counted in ``n_dropped``. Tokens that
        cannot be decoded are skipped and counted in ``n_invalid``.

        :param token: Surface token as a string or UTF-8 bytes.
        :returns: What happened to the token.
        :raises VocabularyError: If the vocabulary has already been split.
        :raises AllocationError: If memory runs out while growing the vocabulary.
        """
        if self._split:
            raise VocabularyError(
                "cannot add tokens after splitting into subwords",
                vocab_size=len(self),
            )

        try:
            token = decode_token(token)
        except EncodingError as e:
            self.n_invalid += 1
            sample = render_symbol(repr(token))
            if (
                len(self.invalid_tokens) < MAX_INVALID_SAMPLES
                and sample not in self.invalid_tokens
            ):
                self.invalid_tokens.append(sample)
            log.warning(f"skipping invalid token: {e}")
            return InsertResult.INVALID

        entry = self._entries.get(token)
        if entry is not None:
            entry.frequency += 1
            return InsertResult.INCREMENTED

        if len(self._entries) >= self.max_size:
            if self.n_dropped == 0:
                log.warning(
                    f"vocabulary reached max size {self.max_size}, dropping new tokens"
                )
            self.n_dropped += 1
            return InsertResult.DROPPED

        try:
            self._entries[token] = VocabularyEntry(token)
        except MemoryError as e:
            raise AllocationError(
                "out of memory", operation="growing vocabulary"
            ) from e
        return InsertResult.INSERTED

    def update(self, tokens: Iterable[str | bytes]) -> Counter[InsertResult]:
        """Insert every token of ``tokens`` and tally the outcomes."""
        results: Counter[InsertResult] = Counter()
        for token in tokens:
            results[self.insert_or_increment(token)] += 1
        return results

    def to_subwords(self) -> None:
        """
        Re-split every entry into one symbol per codepoint of its token.

        :raises VocabularyError: If the vocabulary was already split, so merged
            symbols are never broken up again.
        """
        if self._split:
            raise VocabularyError("vocabulary already split into subwords")

        for entry in self._entries.values():
            entry.symbols = list(entry.token)
        self._split = True

        log.debug(f"split {len(self)} tokens into {self.symbol_count()} symbols")

    def apply_merge(self, pair: PairKey) -> int:
        """
        Collapse non-overlapping occurrences of ``pair`` in every entry.

        :param pair: The adjacent symbols to merge.
        :returns: Number of entries whose segmentation changed.
        """
        # rewrite everything first so a failure leaves no entry half-merged
        updates: list[tuple[VocabularyEntry, SymbolSequence]] = []
        for entry in self._entries.values():
            if len(entry.symbols) < 2:
                continue
            symbols = merge_pair(entry.symbols, pair)
            if len(symbols) != len(entry.symbols):
                updates.append((entry, symbols))

        for entry, symbols in updates:
            entry.symbols = symbols
        return len(updates)

    def items(self) -> list[tuple[SymbolSequence, int]]:
        """Return ``(symbols, frequency)`` pairs in insertion order."""
        return [(entry.symbols, entry.frequency) for entry in self._entries.values()]

    def snapshot(self, sep: str = " ") -> VocabSnapshot:
        """Return a lazy, restartable view of ``(segmentation, frequency)`` pairs."""
        return VocabSnapshot(self, sep)

    def symbol_count(self) -> int:
        """Total number of symbols across all entries."""
        return sum(len(entry.symbols) for entry in self._entries.values())

    def distinct_symbols(self) -> set[Symbol]:
        """Set of all symbols currently used by some entry."""
        return {sym for entry in self._entries.values() for sym in entry.symbols}

    def total_frequency(self) -> int:
        """Sum of frequencies over all entries."""
        return sum(entry.frequency for entry in self._entries.values())
