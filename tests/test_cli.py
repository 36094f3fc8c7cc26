import re

import pytest
from click.testing import CliRunner

from tasklog.cli import main
from tasklog.config import WriterSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for field in WriterSettings.model_fields:
        monkeypatch.setenv(f"TASKLOG_{field.upper()}", "")
        monkeypatch.delenv(f"TASKLOG_{field.upper()}")


def test_pipe_to_file(tmp_path):
    source = tmp_path / "input.txt"
    source.write_text("alpha\nbeta\n")
    output = tmp_path / "out.log"

    result = CliRunner().invoke(main, [
        "pipe", str(source), "--output", str(output),
        "--pattern", "[%l] %p: ", "--prefix", "app", "--level", "warning",
    ])

    assert result.exit_code == 0, result.output
    assert output.read_text(encoding="utf-8") == "[WARNING] app: alpha\n[WARNING] app: beta\n"


def test_pipe_buffered_from_stdin(tmp_path):
    output = tmp_path / "out.log"

    result = CliRunner().invoke(
        main, ["pipe", "--output", str(output), "--pattern", "", "--buffered"], input="one\ntwo\n"
    )

    assert result.exit_code == 0, result.output
    assert output.read_text(encoding="utf-8") == "one\ntwo\n"


def test_pipe_below_threshold_writes_nothing(tmp_path):
    source = tmp_path / "input.txt"
    source.write_text("noise\n")
    output = tmp_path / "out.log"

    result = CliRunner().invoke(main, [
        "pipe", str(source), "-o", str(output), "--level", "debug", "--threshold", "info",
    ])

    assert result.exit_code == 0, result.output
    assert output.read_text(encoding="utf-8") == ""


def test_pipe_reads_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("TASKLOG_PATTERN=\"env> \"\n")
    source = tmp_path / "input.txt"
    source.write_text("x\n")
    output = tmp_path / "out.log"

    result = CliRunner().invoke(main, ["--env-file", str(env_file), "pipe", str(source), "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert output.read_text(encoding="utf-8") == "env> x\n"


@pytest.mark.parametrize("buffered", [False, True])
def test_demo(tmp_path, buffered):
    output = tmp_path / "demo.log"
    args = ["demo", "--loggers", "4", "--messages", "3", "--output", str(output)]
    if buffered:
        args.append("--buffered")

    result = CliRunner().invoke(main, args)

    assert result.exit_code == 0, result.output
    lines = output.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 12
    for i in range(4):
        own = [line for line in lines if re.search(rf"\] \[{i}\] message \d$", line)]
        assert [line[-1] for line in own] == ["0", "1", "2"]
