"""
Unit Tests: command-line interface.
"""

import asyncio
import sys
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from localstore import __version__
from localstore.cli.app import app

runner = CliRunner()


@pytest.fixture
def invoke(tmp_path):
    base_args = [
        "--config",
        str(tmp_path / "config.ini"),
        "--data-dir",
        str(tmp_path / "data"),
    ]

    def _invoke(*args, **kwargs):
        return runner.invoke(app, [*base_args, *args], **kwargs)

    return _invoke


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_put_and_cat(invoke):
    put = invoke("put", "--parents", "docs/notes/a.txt", "hello")
    assert put.exit_code == 0, put.output

    cat = invoke("cat", "docs/notes/a.txt")
    assert cat.exit_code == 0
    assert cat.output == "hello"


def test_put_into_missing_folder_fails(invoke):
    result = invoke("put", "docs/a.txt", "hello")

    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_put_from_local_file(invoke, tmp_path):
    source = tmp_path / "source.bin"
    source.write_bytes(b"from disk")

    assert invoke("put", "copy.bin", "--from", str(source)).exit_code == 0
    assert invoke("cat", "copy.bin").output == "from disk"


def test_put_from_stdin(invoke):
    assert invoke("put", "stdin.txt", input="piped text").exit_code == 0
    assert invoke("cat", "stdin.txt").output == "piped text"


def test_put_reads_stdin_before_the_event_loop(invoke):
    unread = []
    real_run = asyncio.run

    def run(coro):
        unread.append(sys.stdin.read())
        return real_run(coro)

    with patch("localstore.cli.app.asyncio.run", side_effect=run):
        result = invoke("put", "stdin.txt", input="piped text")

    assert result.exit_code == 0, result.output
    assert unread == [""]


def test_command_closes_event_log(invoke):
    with patch("localstore.utils.structured_logger.StructuredLogger.close") as close:
        assert invoke("ls").exit_code == 0

    close.assert_called_once()


def test_ls(invoke):
    invoke("mkdir", "docs")
    invoke("put", "docs/a.txt", "x")
    invoke("mkdir", "docs/sub")

    result = invoke("ls", "docs")

    assert result.exit_code == 0
    assert "a.txt" in result.output
    assert "sub/" in result.output


def test_ls_missing_folder(invoke):
    result = invoke("ls", "nowhere")

    assert result.exit_code == 1
    assert "not found" in result.output


def test_cat_missing_file(invoke):
    assert invoke("cat", "missing.txt").exit_code == 1


def test_rm_and_rmdir(invoke):
    invoke("put", "--parents", "docs/a.txt", "x")

    assert invoke("rm", "docs/a.txt").exit_code == 0
    assert invoke("cat", "docs/a.txt").exit_code == 1
    assert invoke("rm", "docs/a.txt").exit_code == 0

    assert invoke("rmdir", "docs").exit_code == 0
    assert invoke("ls", "docs").exit_code == 1


def test_mkdir_with_missing_parent(invoke):
    assert invoke("mkdir", "a/b").exit_code == 1


def test_settings_roundtrip(invoke):
    assert invoke("settings", "set", "SettingsSampleBoolean", "true").exit_code == 0
    assert invoke("settings", "set", "SettingsSampleEnum", "SECOND").exit_code == 0

    result = invoke("settings", "get")

    assert result.exit_code == 0
    assert "SettingsSampleBoolean" in result.output
    assert '"SECOND"' in result.output


def test_show_config(invoke):
    result = invoke("--show-config")

    assert result.exit_code == 0
    assert "chunk_size" in result.output


def test_interrupt_exits_cleanly():
    from localstore.__main__ import main

    with patch("localstore.__main__.app", side_effect=KeyboardInterrupt):
        with pytest.raises(SystemExit) as exc_info:
            main()

    assert exc_info.value.code == 0
