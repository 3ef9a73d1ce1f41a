import json
import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from miuscript import miu_cli

FAKE_SOURCE = "let x = 1 + 2 * 3;"
FAKE_RENDER = "let x = (1 + (2 * 3));"


@pytest.fixture(autouse=True)  # type: ignore[misc]
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_run_miu_string_input_prints(capsys: pytest.CaptureFixture[str]) -> None:
    assert miu_cli.run_miu(source=FAKE_SOURCE, is_string=True)
    assert capsys.readouterr().out.strip() == FAKE_RENDER


def test_run_miu_file_input(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    file_path = tmp_path / "input.miu"
    file_path.write_text(FAKE_SOURCE)
    assert miu_cli.run_miu(source=str(file_path))
    assert FAKE_RENDER in capsys.readouterr().out


def test_run_miu_rejects_other_suffix() -> None:
    with pytest.raises(ValueError, match=r"\.miu"):
        miu_cli.run_miu(source="program.txt")


def test_run_miu_json_output(capsys: pytest.CaptureFixture[str]) -> None:
    assert miu_cli.run_miu(source="x;", is_string=True, as_json=True)
    tree = json.loads(capsys.readouterr().out)
    assert tree["kind"] == "program"
    assert tree["statements"][0]["kind"] == "expression_statement"


def test_run_miu_output_file(tmp_path: Path) -> None:
    output_path = tmp_path / "out.miu"
    assert miu_cli.run_miu(source=FAKE_SOURCE, is_string=True, out=str(output_path))
    assert output_path.read_text().strip() == FAKE_RENDER


def test_run_miu_reports_all_errors_on_stderr(
    capsys: pytest.CaptureFixture[str],
) -> None:
    assert not miu_cli.run_miu(source="let x 5; @", is_string=True)
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.splitlines() == [
        "expected next token to be `=`, got `INT`",
        "no prefix production for `ILLEGAL`",
    ]


def test_main_exits_nonzero_on_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["miuscript", "-s", "let = ;"])
    with pytest.raises(SystemExit) as exc:
        miu_cli.main()
    assert exc.value.code == 1


def test_main_string_source(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "argv", ["miuscript", "-s", FAKE_SOURCE])
    miu_cli.main()
    assert FAKE_RENDER in capsys.readouterr().out


def test_main_without_source_launches_repl(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[bool] = []
    monkeypatch.setattr(sys, "argv", ["miuscript"])
    monkeypatch.setattr(
        "miuscript.miu_repl.start_repl", lambda verbose=False: calls.append(verbose)
    )
    miu_cli.main()
    assert calls == [False]


def test_main_repl_flag_passes_verbose(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[bool] = []
    monkeypatch.setattr(sys, "argv", ["miuscript", "--repl", "--verbose"])
    monkeypatch.setattr(
        "miuscript.miu_repl.start_repl", lambda verbose=False: calls.append(verbose)
    )
    miu_cli.main()
    assert calls == [True]


@pytest.mark.parametrize(
    "verbose,env,expected",
    [
        (True, None, logging.DEBUG),
        (False, None, logging.WARNING),
        (False, "info", logging.INFO),
        (False, "not-a-level", logging.WARNING),
    ],
)  # type: ignore[misc]
def test_configure_logging_levels(
    monkeypatch: pytest.MonkeyPatch, verbose: bool, env: str | None, expected: int
) -> None:
    if env is None:
        monkeypatch.delenv(miu_cli.LOG_LEVEL_ENV, raising=False)
    else:
        monkeypatch.setenv(miu_cli.LOG_LEVEL_ENV, env)
    miu_cli.configure_logging(verbose)
    assert logging.getLogger().level == expected
