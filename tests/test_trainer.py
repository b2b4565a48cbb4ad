"""Tests for the BPE training loop: scenarios, stop reasons and determinism."""

import threading

import pytest

from subtok import (
    BPETrainer,
    PairCounter,
    StopReason,
    TrainingConfig,
    Vocabulary,
    train_bpe,
)
from subtok._bpe import merge_pair
from subtok.errors import AllocationError, ConfigError
from subtok.trainer import Running, Stopped

TEXT = (
    "although post-structuralist critiques have problematized the notion of "
    "objective epistemology especially within the context of late modernity "
    "fragmented narratives the intertextual entanglement of discourse power and "
    "subjectivity remains a locus of theoretical contestation"
)


# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def scenario_vocab():
    """Return {"aa": 3, "ab": 1}."""
    return Vocabulary.from_tokens(["aa", "aa", "aa", "ab"])


def make_trainer(**overrides) -> BPETrainer:
    return BPETrainer(show_progress=False, **overrides)


# Scenarios
# ---------------------------------------------------------------------------


def test_first_merge_picks_most_frequent_pair(scenario_vocab):
    """("a", "a") = 3 beats ("a", "b") = 1 and only "aa" changes."""
    result = make_trainer(num_merges=1).train(scenario_vocab)

    assert result.reason is StopReason.BUDGET_EXHAUSTED
    assert result.n_merges_completed == 1
    record = result.merges[0]
    assert record.iteration == 0
    assert record.pair == ("a", "a")
    assert record.merged == "aa"
    assert record.count == 3
    assert record.entries_changed == 1
    assert scenario_vocab["aa"].symbols == ["aa"]
    assert scenario_vocab["ab"].symbols == ["a", "b"]


def test_empty_vocabulary_stops_immediately():
    """An empty vocabulary is a normal terminal state with no merges."""
    result = make_trainer(num_merges=10).train(Vocabulary())
    assert result.reason is StopReason.NO_MORE_PAIRS
    assert result.merges == []


def test_zero_budget_leaves_vocabulary_unchanged(scenario_vocab):
    """A budget of 0 stops before touching the vocabulary."""
    before = list(scenario_vocab.snapshot())
    result = make_trainer(num_merges=0).train(scenario_vocab)

    assert result.reason is StopReason.BUDGET_EXHAUSTED
    assert result.merges == []
    assert list(scenario_vocab.snapshot()) == before
    assert not scenario_vocab.is_split


@pytest.mark.parametrize("workers,mode", [(1, "off"), (2, "thread"), (3, "process")])
def test_tie_resolved_lexicographically(workers, mode):
    """Equal counts pick the smaller pair for any worker configuration."""
    vocab = Vocabulary.from_tokens(["zy", "zy", "ab", "ab", "mn", "mn"])
    result = make_trainer(
        num_merges=1, num_workers=workers, parallel_mode=mode
    ).train(vocab)
    assert result.merges[0].pair == ("a", "b")


# Stop conditions
# ---------------------------------------------------------------------------


def test_no_more_pairs(caplog):
    """Training stops early once no pair is left."""
    vocab = Vocabulary.from_tokens(["ab", "cd"])
    with caplog.at_level("WARNING"):
        result = make_trainer(num_merges=10).train(vocab)

    assert result.reason is StopReason.NO_MORE_PAIRS
    assert result.merge_pairs() == [("a", "b"), ("c", "d")]
    assert "stopping early" in caplog.text


def test_min_count_stops_training(scenario_vocab):
    """Pairs below min_count are never merged."""
    result = make_trainer(num_merges=10, min_count=2).train(scenario_vocab)
    assert result.merge_pairs() == [("a", "a")]
    assert result.reason is StopReason.NO_MORE_PAIRS


def test_single_codepoint_tokens_have_no_pairs():
    """Tokens of one codepoint never produce a pair."""
    result = make_trainer(num_merges=5).train(Vocabulary.from_tokens(["a", "b", "a"]))
    assert result.reason is StopReason.NO_MORE_PAIRS
    assert result.merges == []


def test_external_stop_signal(scenario_vocab):
    """A set stop event ends training at the next iteration boundary."""
    event = threading.Event()
    event.set()
    result = make_trainer(num_merges=10).train(scenario_vocab, stop_event=event)
    assert result.reason is StopReason.CANCELLED
    assert result.merges == []


def test_stop_between_iterations():
    """stop() lets the running iteration finish and then cancels."""
    vocab = Vocabulary.from_tokens(TEXT.split())
    trainer = make_trainer(num_merges=50)
    original_step = trainer.step

    def step_then_stop(vocab, counter):
        state = original_step(vocab, counter)
        if len(trainer.merges) == 2:
            trainer.stop()
        return state

    trainer.step = step_then_stop
    result = trainer.train(vocab)

    assert result.reason is StopReason.CANCELLED
    assert result.n_merges_completed == 2


def test_allocation_failure_propagates(scenario_vocab, monkeypatch):
    """Running out of memory during a merge surfaces as AllocationError."""

    def fail(self, pair):
        raise MemoryError()

    monkeypatch.setattr(Vocabulary, "apply_merge", fail)
    with pytest.raises(AllocationError):
        make_trainer(num_merges=3).train(scenario_vocab)


def test_allocation_failure_mid_merge_keeps_vocabulary(monkeypatch):
    """A MemoryError half way through a merge leaves every entry as it was."""
    vocab = Vocabulary.from_tokens(["aa", "aa", "aa", "aab"])
    calls = []

    def fail_second(symbols, pair):
        calls.append(pair)
        if len(calls) == 2:
            raise MemoryError()
        return merge_pair(symbols, pair)

    monkeypatch.setattr("subtok.vocab.merge_pair", fail_second)
    trainer = make_trainer(num_merges=3, parallel_mode="off")
    with pytest.raises(AllocationError):
        trainer.train(vocab)

    assert vocab["aa"].symbols == ["a", "a"]
    assert vocab["aab"].symbols == ["a", "a", "b"]
    assert trainer.merges == []


# State machine
# ---------------------------------------------------------------------------


def test_step_transitions(scenario_vocab):
    """Each step performs one cycle and advances the state."""
    trainer = make_trainer(num_merges=2)
    with PairCounter(num_workers=1) as counter:
        assert trainer.step(scenario_vocab, counter) == Running(1, 1)
        assert trainer.step(scenario_vocab, counter) == Running(2, 0)
        assert trainer.step(scenario_vocab, counter) == Stopped(
            StopReason.BUDGET_EXHAUSTED
        )
        # terminal states are sticky
        assert trainer.step(scenario_vocab, counter) == Stopped(
            StopReason.BUDGET_EXHAUSTED
        )
    assert [rec.pair for rec in trainer.merges] == [("a", "a"), ("a", "b")]


def test_merges_strictly_reduce_symbols():
    """Every successful iteration strictly decreases the total symbol count."""
    vocab = Vocabulary.from_tokens(TEXT.split())
    vocab.to_subwords()
    trainer = make_trainer(num_merges=30)

    counts = [vocab.symbol_count()]
    with PairCounter(num_workers=1) as counter:
        while isinstance(trainer.step(vocab, counter), Running):
            counts.append(vocab.symbol_count())

    assert len(counts) > 1
    assert all(later < earlier for earlier, later in zip(counts, counts[1:]))


def test_frequencies_survive_training():
    """Training never changes token frequencies."""
    tokens = TEXT.split() * 3
    vocab = Vocabulary.from_tokens(tokens)
    make_trainer(num_merges=20).train(vocab)
    for entry in vocab:
        assert entry.frequency == tokens.count(entry.token)
        assert "".join(entry.symbols) == entry.token


# Determinism
# ---------------------------------------------------------------------------


def test_training_is_deterministic():
    """Identical input and configuration give identical merges and vocabulary."""
    tokens = TEXT.split()
    first = train_bpe(tokens, 40, show_progress=False)
    second = train_bpe(tokens, 40, show_progress=False)

    assert first.merges == second.merges
    assert list(first.vocab.snapshot()) == list(second.vocab.snapshot())


def test_parallel_training_matches_sequential():
    """Worker configuration does not change what is learned."""
    tokens = TEXT.split()
    seq = train_bpe(tokens, 40, parallel_mode="off", show_progress=False)
    par = train_bpe(
        tokens, 40, num_workers=4, parallel_mode="thread", show_progress=False
    )
    assert seq.merge_pairs() == par.merge_pairs()
    assert list(seq.vocab.snapshot()) == list(par.vocab.snapshot())


# Configuration
# ---------------------------------------------------------------------------


def test_negative_budget_rejected():
    """A negative merge budget is a configuration error."""
    with pytest.raises(ConfigError):
        BPETrainer(num_merges=-1)


def test_overrides_apply_on_top_of_config():
    """Keyword overrides replace fields of the base configuration."""
    trainer = BPETrainer(TrainingConfig(num_merges=7, min_count=2), min_count=3)
    assert trainer.config.num_merges == 7
    assert trainer.config.min_count == 3


def test_train_bpe_respects_max_vocab_size():
    """train_bpe builds its vocabulary with the configured capacity."""
    result = train_bpe(["ab", "cd", "ef"], 5, max_vocab_size=2, show_progress=False)
    assert len(result.vocab) == 2
    assert result.vocab.n_dropped == 1
