"""Helpers for tests that need a real git repository."""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

CARGO_TOML = '[package]\nname = "demo"\nversion = "0.0.0"\nedition = "2021"\n'

GitRunner = Callable[..., str]

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def make_git_runner(home: Path) -> GitRunner:
    """Run git with an isolated HOME and identity; returns stdout."""
    env = os.environ.copy()
    env.update(
        {
            "HOME": str(home),
            "GIT_CONFIG_NOSYSTEM": "1",
            "GIT_AUTHOR_NAME": "Release Bot",
            "GIT_AUTHOR_EMAIL": "release@example.com",
            "GIT_COMMITTER_NAME": "Release Bot",
            "GIT_COMMITTER_EMAIL": "release@example.com",
        }
    )

    def run(repo: Path, *args: str) -> str:
        proc = subprocess.run(
            ["git", "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
            cwd=repo,
            env=env,
            capture_output=True,
            text=True,
            check=True,
        )
        return proc.stdout.strip()

    return run
