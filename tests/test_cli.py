from __future__ import annotations

from viabilitycalc import cli


def test_questions_lists_option_ids(capsys) -> None:
    assert cli.main(["--no-color", "questions"]) == 0
    out = capsys.readouterr().out
    assert "plausible" in out
    assert "cannot-buy" in out


def test_score_example(capsys) -> None:
    assert cli.main(["--no-color", "score", "--example"]) == 0
    out = capsys.readouterr().out
    assert "Verdict: Not viable" in out
    assert "Color: red-400" in out


def test_score_overrides_example_answers(capsys) -> None:
    argv = ["--no-color", "score", "--example", "-a", "liquid=always-in-market"]
    assert cli.main(argv) == 0
    out = capsys.readouterr().out
    assert "Verdict: Scale Up" in out


def test_score_without_answers_is_pending(capsys) -> None:
    assert cli.main(["--no-color", "score"]) == 0
    out = capsys.readouterr().out
    assert "Score: 0\n" in out
    assert "Score: 0.0" not in out
    assert "Verdict: TBD" in out


def test_invalid_answer_exits_with_error(capsys) -> None:
    assert cli.main(["--no-color", "score", "-a", "liquid=forever"]) == cli.EXIT_INVALID_ANSWER
    out = capsys.readouterr().out
    assert "forever" in out
