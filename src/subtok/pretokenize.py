"""Split raw text into normalized surface tokens for vocabulary building."""

import logging
from collections import Counter
from collections.abc import Iterator

import regex as re

from .config import DEFAULT_MAX_VOCAB_SIZE
from .errors import PatternError
from .pattern import TokenPattern, compile_pattern
from .vocab import InsertResult, Vocabulary

log = logging.getLogger(__name__)


class Pretokenizer:
    """
    Regex-based splitter that turns raw text into surface tokens.

    ``pattern`` is either the name of a :class:`TokenPattern` or, when it is not
    a known name, a custom regex. Every match is one token; tokens are
    case-folded unless ``casefold`` is ``False``.
    """

    def __init__(self, pattern: str = "delimited", casefold: bool = True) -> None:
        try:
            self.pat = TokenPattern.get(pattern)
        except PatternError:
            # not a built-in name, treat as custom regex
            self.pat = pattern
        self.compiled_pat: re.Pattern[str] = compile_pattern(self.pat)
        self.casefold = casefold

    def split(self, text: str) -> Iterator[str]:
        """Yield normalized tokens of ``text`` in order of appearance."""
        for m in re.finditer(self.compiled_pat, text):
            token = m.group(0)
            yield token.casefold() if self.casefold else token

    def feed(self, vocab: Vocabulary, text: str | list[str]) -> Counter[InsertResult]:
        """Insert every token of ``text`` into ``vocab``."""
        # handle list input
        if isinstance(text, list):
            text = "\n".join(text)
        results = vocab.update(self.split(text))
        log.debug(
            f"fed {sum(results.values())} tokens: "
            + ", ".join(f"{res.value}={n}" for res, n in results.items())
        )
        return results


def build_vocab(
    text: str | list[str],
    max_size: int = DEFAULT_MAX_VOCAB_SIZE,
    pattern: str = "delimited",
    casefold: bool = True,
) -> Vocabulary:
    """
    Tokenize ``text`` and count its tokens into a new vocabulary.

    .. code-block:: python

        vocab = build_vocab("The cat sat. The end!")
        vocab["the"].frequency  # 2
    """
    vocab = Vocabulary(max_size)
    results = Pretokenizer(pattern, casefold).feed(vocab, text)
    log.info(
        f"built vocabulary of {len(vocab)} tokens from "
        f"{sum(results.values())} occurrences"
    )
    return vocab
