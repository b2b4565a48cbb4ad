"""Benchmark pair counting modes and full training on a synthetic or Hugging Face corpus.

Outputs one row per parallel mode:
  Mode | Workers | Count Time | Train Time | Merges | Tally Size
"""

import argparse
import logging
import time

from subtok import BPETrainer, PairCounter, build_vocab, disable_progress

HF_DATASET = "stevez80/Sci-Fi-Books-gutenberg"


def make_text(target_mb: int) -> str:
    """Build deterministic synthetic text close to target size."""
    target_bytes = target_mb * 1024 * 1024
    seed = (
        "The wormhole shimmered above Titan while engines hummed in sync. "
        "Captain Rao logged coordinates and the archive AI cross-checked stellar drift. "
        "Quantum relays pulsed, translating static into maps for the next jump. "
    )
    # vary word endings so the vocabulary does not collapse to a few entries
    parts = []
    size = 0
    i = 0
    while size < target_bytes:
        chunk = seed.replace("drift", f"drift{i % 997}").replace("jump", f"jump{i % 613}")
        parts.append(chunk)
        size += len(chunk.encode("utf-8"))
        i += 1
    return "".join(parts)


def load_corpus(num_docs: int | None) -> str:
    """Load up to `num_docs` documents via dataset indexing; full dataset when None."""
    from datasets import load_dataset

    print(f"Loading {HF_DATASET} (non-streaming) …")
    ds = load_dataset(HF_DATASET, split="train")
    if num_docs is not None:
        return "\n".join(ds[:num_docs]["text"])
    return "\n".join(ds["text"])


def bench_mode(
    text: str, mode: str, workers: int, merges: int
) -> tuple[float, float, int, int]:
    """Return (count_secs, train_secs, merges_done, tally_size) for one mode."""
    vocab = build_vocab(text)
    vocab.to_subwords()

    with PairCounter(workers, mode) as counter:
        start = time.perf_counter()
        tally = counter.count(vocab)
        count_secs = time.perf_counter() - start

    trainer = BPETrainer(num_merges=merges, num_workers=workers, parallel_mode=mode)
    start = time.perf_counter()
    result = trainer.train(vocab)
    train_secs = time.perf_counter() - start

    return count_secs, train_secs, result.n_merges_completed, len(tally)


def main() -> None:
    """Run the counting benchmark and print a table row per mode."""
    parser = argparse.ArgumentParser(description="Benchmark subtok pair counting.")
    parser.add_argument("--size-mb", type=int, default=8, help="Synthetic corpus size.")
    parser.add_argument(
        "--dataset",
        action="store_true",
        help=f"Use {HF_DATASET} instead of synthetic text.",
    )
    parser.add_argument(
        "--num-docs",
        type=int,
        default=1000,
        help="Number of dataset documents to load.",
    )
    parser.add_argument("--workers", type=int, default=8, help="Worker count.")
    parser.add_argument("--merges", type=int, default=200, help="Merge budget.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    disable_progress()

    text = load_corpus(args.num_docs) if args.dataset else make_text(args.size_mb)
    print(f"Corpus: {len(text):,} chars")

    print()
    print(
        f"| {'Mode':8} | {'Workers':7} | {'Count Time':10} "
        f"| {'Train Time':10} | {'Merges':6} | {'Tally Size':10} |"
    )
    print(f"| {'-' * 8} | {'-' * 7} | {'-' * 10} | {'-' * 10} | {'-' * 6} | {'-' * 10} |")
    for mode in ("off", "thread", "process"):
        workers = 1 if mode == "off" else args.workers
        count_secs, train_secs, done, tally_size = bench_mode(
            text, mode, workers, args.merges
        )
        print(
            f"| {mode:8} | {workers:7} | {f'{count_secs:.3f}s':10} "
            f"| {f'{train_secs:.2f}s':10} | {done:6} | {tally_size:10,} |"
        )
    print()


if __name__ == "__main__":
    main()
