"""End-to-end tests for the subtok command line."""

import pytest

from subtok.cli import build_parser, main


@pytest.fixture
def corpus(tmp_path):
    """Write a small corpus file and return its path."""
    path = tmp_path / "corpus.txt"
    path.write_text("AA aa, aa! ab\n", encoding="utf-8")
    return path


def test_train_writes_vocab_files(corpus, tmp_path):
    """Initial and final vocabularies and the merge log are written."""
    init = tmp_path / "init_vocab.txt"
    out = tmp_path / "vocab.txt"
    merges = tmp_path / "merges.txt"

    code = main(
        [
            str(corpus),
            "--merges", "1",
            "--init-vocab", str(init),
            "--output", str(out),
            "--merges-out", str(merges),
            "--no-progress",
        ]
    )

    assert code == 0
    assert init.read_text(encoding="utf-8") == "aa\t3\nab\t1\n"
    assert out.read_text(encoding="utf-8") == "aa\t3\na b\t1\n"
    assert merges.read_text(encoding="utf-8") == "0\ta\ta\t3\n"


def test_print_vocab(corpus, tmp_path, capsys):
    """--print echoes the final vocabulary to stdout."""
    code = main(
        [
            str(corpus),
            "--merges", "5",
            "--output", str(tmp_path / "vocab.txt"),
            "--delimiter", " ",
            "--print",
            "--no-progress",
        ]
    )
    assert code == 0
    assert capsys.readouterr().out == "aa 3\nab 1\n"


def test_malformed_input_bytes_are_skipped(tmp_path):
    """Undecodable bytes are skipped as invalid tokens, the run still succeeds."""
    corpus = tmp_path / "bad.txt"
    corpus.write_bytes(b"ok \xff\xfe ok\n")
    out = tmp_path / "vocab.txt"

    code = main([str(corpus), "--merges", "3", "--output", str(out), "--no-progress"])

    assert code == 0
    assert out.read_text(encoding="utf-8") == "ok\t2\n"


def test_invalid_config_returns_error(corpus, tmp_path):
    """Configuration errors end with a non-zero exit status."""
    code = main(
        [str(corpus), "--merges", "-1", "--output", str(tmp_path / "v.txt")]
    )
    assert code == 1


def test_missing_input_returns_error(tmp_path):
    """A missing input file is reported, not raised."""
    code = main([str(tmp_path / "missing.txt"), "--output", str(tmp_path / "v.txt")])
    assert code == 1


def test_parser_defaults():
    """Defaults mirror the library configuration."""
    args = build_parser().parse_args(["in.txt"])
    assert args.merges == 50
    assert args.max_vocab == 50_000
    assert args.parallel_mode == "auto"
    assert args.pattern == "delimited"
