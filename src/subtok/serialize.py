"""
Plain-text output of vocabularies and merge logs.
"""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TextIO

from ._sanitise import render_symbol
from .config import DEFAULT_DELIMITER, NULL_PLACEHOLDER
from .trainer import MergeRecord
from .vocab import Vocabulary

log = logging.getLogger(__name__)


def _surface(token: str) -> str:
    """
    Return ``token`` escaped for a one-line column, or the placeholder when it
    has no UTF-8 surface form.
    """
    if not token:
        return NULL_PLACEHOLDER
    try:
        token.encode("utf-8")
    except UnicodeEncodeError:
        return NULL_PLACEHOLDER
    # newlines and tabs inside a token would break the line format
    return render_symbol(token)


def format_vocab(
    snapshot: Iterable[tuple[str, int]], delimiter: str = DEFAULT_DELIMITER
) -> Iterator[str]:
    """Yield one ``<token><delimiter><frequency>`` line per entry."""
    for token, freq in snapshot:
        yield f"{_surface(token)}{delimiter}{freq}\n"


def write_vocab(
    vocab: Vocabulary | Iterable[tuple[str, int]],
    target: str | Path | TextIO,
    delimiter: str = DEFAULT_DELIMITER,
) -> int:
    """
    Write a token-frequency listing to a path or an open text stream.

    Parent directories are created for paths. Streams are written to but
    left open.

    :param vocab: A vocabulary (its default snapshot is used) or any iterable of
        ``(token, frequency)`` pairs.
    :param target: Output file path or text stream.
    :param delimiter: Column separator.
    :returns: Number of lines written.
    """
    snapshot = vocab.snapshot() if isinstance(vocab, Vocabulary) else vocab

    if isinstance(target, (str, Path)):
        path = Path(target)
        path.parent.mkdir(parents=True, exist_ok=True)
        log.debug(f"saving vocab to {path}")
        with path.open("w", encoding="utf-8", newline="\n") as f:
            return _write_lines(f, format_vocab(snapshot, delimiter))
    return _write_lines(target, format_vocab(snapshot, delimiter))


def save_merges(records: Iterable[MergeRecord], path: str | Path) -> None:
    """
    Persist the merge log as ``iteration<TAB>left<TAB>right<TAB>count`` lines.

    Control characters inside symbols are escaped so each merge stays on one
    line.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    log.debug(f"saving merges to {path}")

    with path.open("w", encoding="utf-8", newline="\n") as f:
        for rec in records:
            left, right = (render_symbol(sym) for sym in rec.pair)
            f.write(f"{rec.iteration}\t{left}\t{right}\t{rec.count}\n")


def _write_lines(f: TextIO, lines: Iterable[str]) -> int:
    n = 0
    for line in lines:
        f.write(line)
        n += 1
    return n
