"""Tests for relpub.platform.process module."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from relpub.core.result import Err, Ok
from relpub.platform.process import MASK, ProcessError, mask_text, run


class TestMaskText:
    def test_replaces_every_occurrence(self) -> None:
        assert mask_text("a s3cret b s3cret", ["s3cret"]) == f"a {MASK} b {MASK}"

    def test_ignores_empty_secrets(self) -> None:
        assert mask_text("abc", ["", "zzz"]) == "abc"


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(command=("git", "status"), returncode=1, stdout="", stderr="")
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("cargo", "publish", "--allow-dirty", "--token", "x"),
            returncode=101,
            stdout="",
            stderr="",
        )
        assert str(error) == "cargo publish --allow-dirty ... failed (exit 101)"

    def test_masked(self) -> None:
        error = ProcessError(
            command=("cargo", "publish", "--token", "tok-123"),
            returncode=101,
            stdout="using tok-123",
            stderr="bad token tok-123",
        )

        masked = error.masked(["tok-123"])

        assert masked.command == ("cargo", "publish", "--token", MASK)
        assert "tok-123" not in masked.stdout
        assert "tok-123" not in masked.stderr
        assert masked.returncode == 101

    def test_masked_without_secrets_is_identity(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        assert error.masked([""]) is error

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "hello" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; sys.stderr.write('nope'); sys.exit(42)"],
            cwd=tmp_path,
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 42
        assert "nope" in result.error.stderr

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert len(result.error.stderr) > 0

    def test_uses_cwd_and_env(self, tmp_path: Path) -> None:
        (tmp_path / "marker.txt").write_text("x")
        env = os.environ.copy()
        env["RELPUB_TEST_VAR"] = "value-1"

        result = run(
            [
                sys.executable,
                "-c",
                "import os; print(os.listdir('.'), os.environ['RELPUB_TEST_VAR'])",
            ],
            cwd=tmp_path,
            env=env,
        )

        assert isinstance(result, Ok)
        assert "marker.txt" in result.value
        assert "value-1" in result.value

    def test_timeout(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import time; time.sleep(10)"],
            cwd=tmp_path,
            timeout=0.2,
        )

        assert isinstance(result, Err)
        assert "timed out" in result.error.stderr.lower()
