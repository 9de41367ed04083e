"""Git repository abstraction.

Provides the Repository class for the git operations a release run needs:
cloning at a tag, checking the work tree is clean, and resolving commits.
All operations return Result types.

Usage:
    repo = Repository(Path("/path/to/checkout"))

    match repo.head_commit():
        case Ok(sha):
            print(f"HEAD: {sha}")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relpub.core.result import Err, Ok, Result
from relpub.platform.process import ProcessError
from relpub.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def _git_error(command: str, error: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=error.stderr.strip() or error.stdout.strip() or fallback,
        returncode=error.returncode,
    )


class Repository:
    """A git work tree on disk.

    Attributes:
        path: Path to the work tree root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def clone(
        cls,
        url: str,
        dest: Path,
        *,
        ref: str | None = None,
        depth: int = 1,
    ) -> Result[Repository, GitError]:
        """Clone ``url`` into ``dest``, optionally at a branch or tag.

        Args:
            url: Remote URL or local path.
            dest: Target directory (must not exist or be empty).
            ref: Branch or tag to check out (detached for tags).
            depth: History depth; 0 clones the full history.
        """
        args = ["git", "clone"]
        if depth > 0:
            args += ["--depth", str(depth)]
        if ref:
            args += ["--branch", ref]
        args += [url, str(dest)]

        dest.parent.mkdir(parents=True, exist_ok=True)
        result = run_process(args, cwd=dest.parent, timeout=_GIT_NETWORK_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(_git_error("clone", result.error, "clone failed"))
        return Ok(cls(dest))

    def is_work_tree(self) -> bool:
        """True if path is inside a git work tree."""
        if not self.path.is_dir():
            return False
        result = self._run(["rev-parse", "--is-inside-work-tree"])
        return isinstance(result, Ok) and result.value.strip() == "true"

    def changed_paths(self) -> Result[list[str], GitError]:
        """Paths with staged, unstaged or untracked changes.

        Runs `git status --porcelain` and returns the path column.
        """
        result = self._run(["status", "--porcelain"])
        match result:
            case Err(e):
                return Err(_git_error("status", e, "git status failed"))
            case Ok(stdout):
                return Ok([ln[3:] for ln in stdout.splitlines() if len(ln) > 3])

    def head_commit(self) -> Result[str, GitError]:
        """Full SHA of HEAD."""
        return self.resolve_commit("HEAD")

    def resolve_commit(self, ref: str) -> Result[str, GitError]:
        """Resolve a ref (branch, tag, sha) to the commit it points at.

        Annotated tags are peeled to their commit.
        """
        result = self._run(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])
        match result:
            case Err(e):
                return Err(_git_error("rev-parse", e, f"unknown revision: {ref}"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
