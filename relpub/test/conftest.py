from __future__ import annotations

from pathlib import Path

import pytest

from relpub.test._gitutil import CARGO_TOML, GitRunner, make_git_runner


@pytest.fixture
def git(tmp_path: Path) -> GitRunner:
    home = tmp_path / "home"
    home.mkdir(exist_ok=True)
    return make_git_runner(home)


@pytest.fixture
def crate_repo(tmp_path: Path, git: GitRunner) -> Path:
    """A git repo with Cargo.toml committed and tagged 1.0.0."""
    repo = tmp_path / "crate"
    repo.mkdir()
    git(repo, "init", "-q")
    (repo / "Cargo.toml").write_text(CARGO_TOML, encoding="utf-8")
    git(repo, "add", "Cargo.toml")
    git(repo, "commit", "-q", "-m", "initial")
    git(repo, "tag", "1.0.0")
    return repo
