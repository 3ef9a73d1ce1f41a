import builtins
import json
from collections.abc import Callable

import pytest

from miuscript.miu_repl import MIU_FACE, print_parser_errors, start_repl


def feed(lines: list[str]) -> Callable[[str], str]:
    it = iter(lines)

    def fake_input(prompt: str) -> str:
        try:
            return next(it)
        except StopIteration:
            raise EOFError from None

    return fake_input


def run(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    lines: list[str],
    verbose: bool = False,
) -> str:
    monkeypatch.setattr(builtins, "input", feed(lines))
    start_repl(verbose=verbose)
    return capsys.readouterr().out


def test_repl_quit(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run(monkeypatch, capsys, ["quit"])
    assert "Exiting miuscript REPL" in out


def test_repl_exit(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run(monkeypatch, capsys, ["exit"])
    assert "Exiting miuscript REPL" in out


def test_repl_eof_exits(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run(monkeypatch, capsys, [])
    assert "Exiting miuscript REPL" in out


def test_repl_keyboard_interrupt_exits(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def interrupt(prompt: str) -> str:
        raise KeyboardInterrupt

    monkeypatch.setattr(builtins, "input", interrupt)
    start_repl()
    assert "Exiting miuscript REPL" in capsys.readouterr().out


def test_repl_echoes_canonical_rendering(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run(monkeypatch, capsys, ["1 + 2 * 3", "quit"])
    assert "(1 + (2 * 3));" in out


def test_repl_prints_every_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run(monkeypatch, capsys, ["let x 5; let = 10;", "quit"])
    assert "parser errors:" in out
    assert "\texpected next token to be `=`, got `INT`" in out
    assert "\texpected next token to be `IDENT`, got `=`" in out
    assert "\tno prefix production for `=`" in out


def test_repl_skips_blank_and_comment_lines(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run(monkeypatch, capsys, ["   ", "# just a note", "quit"])
    assert "parser errors" not in out
    assert out.count("\n") == 2  # banner + exit message


def test_repl_multiline_braces(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run(monkeypatch, capsys, ["let f = fn(x) {", "x * 2;", "};", "quit"])
    assert "let f = fn(x) { (x * 2); };" in out


def test_repl_braces_inside_strings_do_not_continue(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run(monkeypatch, capsys, ['"{";', "quit"])
    assert '"{";' in out
    assert out.rstrip().endswith("Exiting miuscript REPL.")


def test_repl_verbose_mode_toggle_prints_json(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run(monkeypatch, capsys, ["verbose-mode", "x", "quit"])
    assert "Verbose mode ON" in out
    start = out.index("{")
    end = out.rindex("}") + 1
    tree = json.loads(out[start:end])
    assert tree["kind"] == "program"
    assert tree["statements"][0]["value"] == {
        "kind": "identifier",
        "line": 1,
        "col": 1,
        "name": "x",
    }


def test_repl_verbose_mode_toggles_off(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run(monkeypatch, capsys, ["verbose-mode", "quit"], verbose=True)
    assert "Verbose mode OFF" in out


def test_print_parser_errors(capsys: pytest.CaptureFixture[str]) -> None:
    print_parser_errors(["one", "two"])
    out = capsys.readouterr().out
    assert MIU_FACE in out
    assert out.endswith("parser errors:\n\tone\n\ttwo\n")
