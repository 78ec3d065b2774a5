"""Tests for the command-line runner."""

from fandash.__main__ import main


def test_status_mode_prints_every_category(capsys) -> None:
    main(["--mode", "status", "--store", "memory"])

    out = capsys.readouterr().out
    assert "Cache Status" in out
    assert "Merchandise" in out
    assert "not cached" in out
