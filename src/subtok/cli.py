"""Command-line entry point: train a subword vocabulary from a text file."""

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import (
    DEFAULT_DELIMITER,
    DEFAULT_MAX_VOCAB_SIZE,
    DEFAULT_MIN_COUNT,
    DEFAULT_NUM_MERGES,
    TrainingConfig,
)
from .errors import SubTokError
from .parallel import list_parallel_modes
from .pattern import list_patterns
from .pretokenize import build_vocab
from .serialize import save_merges, write_vocab
from .trainer import BPETrainer

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subtok", description="Train a BPE subword vocabulary from raw text."
    )
    parser.add_argument("input", type=Path, help="UTF-8 text file to train on.")
    parser.add_argument(
        "--merges",
        type=int,
        default=DEFAULT_NUM_MERGES,
        help=f"Merge budget (default: {DEFAULT_NUM_MERGES}).",
    )
    parser.add_argument(
        "--max-vocab",
        type=int,
        default=DEFAULT_MAX_VOCAB_SIZE,
        help=f"Maximum distinct tokens kept (default: {DEFAULT_MAX_VOCAB_SIZE:,}).",
    )
    parser.add_argument(
        "--min-count",
        type=int,
        default=DEFAULT_MIN_COUNT,
        help="Minimum pair count required to merge (default: 1).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker count for pair counting (default: all CPUs).",
    )
    parser.add_argument(
        "--parallel-mode",
        choices=list_parallel_modes(),
        default="auto",
        help="How pair counting is parallelized (default: auto).",
    )
    parser.add_argument(
        "--pattern",
        default="delimited",
        help=f"Split pattern name ({', '.join(list_patterns())}) or a custom regex.",
    )
    parser.add_argument(
        "--no-casefold",
        action="store_true",
        help="Keep the original letter case of tokens.",
    )
    parser.add_argument(
        "--init-vocab",
        type=Path,
        default=None,
        help="Where to write the vocabulary before merging.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("vocab.txt"),
        help="Where to write the final vocabulary (default: vocab.txt).",
    )
    parser.add_argument(
        "--merges-out",
        type=Path,
        default=None,
        help="Optional path for the merge log.",
    )
    parser.add_argument(
        "--delimiter",
        default=DEFAULT_DELIMITER,
        help="Column separator for vocabulary files (default: tab).",
    )
    parser.add_argument(
        "--print",
        dest="print_vocab",
        action="store_true",
        help="Also print the final vocabulary to stdout.",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Log every learned merge."
    )
    parser.add_argument(
        "--no-progress", action="store_true", help="Disable the progress bar."
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run(args: argparse.Namespace) -> int:
    """Execute one training run described by parsed ``args``."""
    config = TrainingConfig(
        max_vocab_size=args.max_vocab,
        num_merges=args.merges,
        min_count=args.min_count,
        num_workers=args.workers,
        parallel_mode=args.parallel_mode,
        verbose=args.verbose,
        show_progress=not args.no_progress,
    )

    # undecodable bytes become lone surrogates and are flagged as invalid tokens
    text = args.input.read_text(encoding="utf-8", errors="surrogateescape")
    log.info(f"read {len(text):,} chars from {args.input}")

    vocab = build_vocab(
        text,
        max_size=config.max_vocab_size,
        pattern=args.pattern,
        casefold=not args.no_casefold,
    )
    if vocab.n_dropped:
        log.warning(f"{vocab.n_dropped} token occurrences dropped at capacity")
    if vocab.n_invalid:
        log.warning(f"{vocab.n_invalid} invalid tokens skipped")

    if args.init_vocab is not None:
        write_vocab(vocab, args.init_vocab, args.delimiter)
        log.info(f"initial vocabulary saved to {args.init_vocab}")

    result = BPETrainer(config).train(vocab)
    log.info(
        f"stopped ({result.reason.value}) after {result.n_merges_completed} merges, "
        f"{len(vocab.distinct_symbols())} distinct symbols"
    )

    write_vocab(vocab, args.output, args.delimiter)
    log.info(f"vocabulary saved to {args.output}")

    if args.merges_out is not None:
        save_merges(result.merges, args.merges_out)
        log.info(f"merges saved to {args.merges_out}")

    if args.print_vocab:
        write_vocab(vocab, sys.stdout, args.delimiter)

    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse ``argv``, configure logging and train."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        return run(args)
    except SubTokError as e:
        log.error(str(e))
        return 1
    except OSError as e:
        log.error(f"i/o error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
