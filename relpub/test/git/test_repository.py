"""Tests for git/repository.py."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from relpub.core.result import Err, Ok
from relpub.git.repository import GitError, Repository
from relpub.platform.process import ProcessError
from relpub.test._gitutil import GitRunner, requires_git


class TestRunnerWiring:
    """Command construction, without a real git."""

    def test_commands_run_inside_repo(self, tmp_path: Path) -> None:
        with patch("relpub.git.repository.run_process") as mock_run:
            mock_run.return_value = Ok("abc123\n")
            result = Repository(tmp_path).head_commit()

        assert result == Ok("abc123")
        cmd = mock_run.call_args.args[0]
        assert cmd[:3] == ["git", "-C", str(tmp_path)]
        assert cmd[3:] == ["rev-parse", "--verify", "--quiet", "HEAD^{commit}"]

    def test_clone_arguments(self, tmp_path: Path) -> None:
        dest = tmp_path / "out"
        with patch("relpub.git.repository.run_process") as mock_run:
            mock_run.return_value = Ok("")
            result = Repository.clone("https://example.com/x.git", dest, ref="1.2.3", depth=1)

        assert isinstance(result, Ok)
        assert result.value.path == dest
        assert mock_run.call_args.args[0] == [
            "git",
            "clone",
            "--depth",
            "1",
            "--branch",
            "1.2.3",
            "https://example.com/x.git",
            str(dest),
        ]

    def test_clone_full_history_omits_depth(self, tmp_path: Path) -> None:
        with patch("relpub.git.repository.run_process") as mock_run:
            mock_run.return_value = Ok("")
            Repository.clone("url", tmp_path / "out", depth=0)

        assert "--depth" not in mock_run.call_args.args[0]

    def test_clone_failure(self, tmp_path: Path) -> None:
        with patch("relpub.git.repository.run_process") as mock_run:
            mock_run.return_value = Err(
                ProcessError(("git", "clone"), 128, "", "fatal: repository not found\n")
            )
            result = Repository.clone("url", tmp_path / "out")

        assert result == Err(
            GitError(command="clone", message="fatal: repository not found", returncode=128)
        )

    def test_changed_paths_parses_porcelain(self, tmp_path: Path) -> None:
        with patch("relpub.git.repository.run_process") as mock_run:
            mock_run.return_value = Ok(" M Cargo.toml\n?? notes.txt\n")
            result = Repository(tmp_path).changed_paths()

        assert result == Ok(["Cargo.toml", "notes.txt"])


@requires_git
class TestRealRepository:
    def test_is_work_tree(self, crate_repo: Path, tmp_path: Path) -> None:
        assert Repository(crate_repo).is_work_tree() is True
        plain = tmp_path / "plain"
        plain.mkdir()
        assert Repository(plain).is_work_tree() is False
        assert Repository(tmp_path / "missing").is_work_tree() is False

    def test_clean_then_dirty(self, crate_repo: Path) -> None:
        repo = Repository(crate_repo)
        assert repo.changed_paths() == Ok([])

        (crate_repo / "Cargo.toml").write_text("changed\n", encoding="utf-8")

        assert repo.changed_paths() == Ok(["Cargo.toml"])

    def test_tag_resolves_to_head(self, crate_repo: Path) -> None:
        repo = Repository(crate_repo)
        head = repo.head_commit()
        tagged = repo.resolve_commit("1.0.0")

        assert isinstance(head, Ok)
        assert len(head.value) == 40
        assert tagged == head

    def test_annotated_tag_is_peeled(self, crate_repo: Path, git: GitRunner) -> None:
        git(crate_repo, "tag", "-a", "2.0.0", "-m", "release 2.0.0")
        repo = Repository(crate_repo)

        assert repo.resolve_commit("2.0.0") == repo.head_commit()

    def test_unknown_ref(self, crate_repo: Path) -> None:
        result = Repository(crate_repo).resolve_commit("9.9.9")

        assert isinstance(result, Err)
        assert result.error.command == "rev-parse"
        assert "9.9.9" in result.error.message

    def test_clone_at_tag(self, crate_repo: Path, tmp_path: Path, git: GitRunner) -> None:
        (crate_repo / "extra.txt").write_text("after the tag\n", encoding="utf-8")
        git(crate_repo, "add", "extra.txt")
        git(crate_repo, "commit", "-q", "-m", "after tag")

        dest = tmp_path / "clone"
        result = Repository.clone(crate_repo.as_uri(), dest, ref="1.0.0", depth=1)

        assert isinstance(result, Ok)
        assert (dest / "Cargo.toml").is_file()
        assert not (dest / "extra.txt").exists()
