from __future__ import annotations

from pathlib import Path

from relpub.core.config import CheckoutConfig
from relpub.core.result import Err, Ok, Result
from relpub.git.repository import GitError, Repository
from relpub.output.console import ConsoleProtocol, Style
from relpub.platform.files import is_writable_dir
from relpub.release.errors import CheckoutError
from relpub.release.model import SourceTree

_DIRTY_PREVIEW = 5


def _from_git(error: GitError, message: str) -> CheckoutError:
    return CheckoutError(message=message, hint=error.message or None, returncode=error.returncode)


def clone_source(
    *,
    url: str,
    dest: Path,
    tag: str,
    settings: CheckoutConfig,
    console: ConsoleProtocol,
) -> Result[SourceTree, CheckoutError]:
    """Clone ``url`` at ``tag`` into an empty ``dest``."""
    if dest.exists() and any(dest.iterdir()):
        return Err(
            CheckoutError(
                message=f"checkout destination is not empty: {dest}",
                hint="Use a fresh directory for each run.",
            )
        )

    console.print(f"git clone --branch {tag} {url} {dest}", Style.DIM)
    cloned = Repository.clone(url, dest, ref=tag, depth=settings.depth)
    if isinstance(cloned, Err):
        return Err(_from_git(cloned.error, f"failed to clone {url} at {tag}"))

    head = cloned.value.head_commit()
    if isinstance(head, Err):
        return Err(_from_git(head.error, "cloned tree has no HEAD commit"))

    return Ok(SourceTree(root=dest, head=head.value, cloned=True))


def verify_source(
    *,
    root: Path,
    tag: str,
    settings: CheckoutConfig,
    console: ConsoleProtocol,
) -> Result[SourceTree, CheckoutError]:
    """Check that an existing tree is a clean, writable work tree at ``tag``."""
    if not root.is_dir():
        return Err(CheckoutError(message=f"source tree not found: {root}"))

    repo = Repository(root)
    if not repo.is_work_tree():
        return Err(
            CheckoutError(
                message=f"not a git work tree: {root}",
                hint="Check out the repository before publishing.",
            )
        )

    if not is_writable_dir(root):
        return Err(CheckoutError(message=f"source tree is not writable: {root}"))

    changed = repo.changed_paths()
    if isinstance(changed, Err):
        return Err(_from_git(changed.error, "failed to check git status"))
    if changed.value:
        preview = ", ".join(changed.value[:_DIRTY_PREVIEW])
        if len(changed.value) > _DIRTY_PREVIEW:
            preview += ", ..."
        return Err(
            CheckoutError(
                message=f"source tree is dirty: {root}",
                hint=f"Start from a fresh checkout (changed: {preview})",
            )
        )

    head = repo.head_commit()
    if isinstance(head, Err):
        return Err(_from_git(head.error, "source tree has no HEAD commit"))

    if settings.verify_ref:
        tagged = repo.resolve_commit(tag)
        if isinstance(tagged, Err):
            return Err(
                CheckoutError(
                    message=f"release tag not found in source tree: {tag}",
                    hint="Fetch tags or set checkout.verify_ref = false.",
                    returncode=tagged.error.returncode,
                )
            )
        if tagged.value != head.value:
            return Err(
                CheckoutError(
                    message=f"HEAD is not at {tag}",
                    hint=f"HEAD={head.value[:12]} {tag}={tagged.value[:12]}",
                )
            )

    console.print(f"source: {root} @ {head.value[:12]}", Style.DIM)
    return Ok(SourceTree(root=root, head=head.value, cloned=False))


def acquire_source(
    *,
    tag: str,
    settings: CheckoutConfig,
    console: ConsoleProtocol,
    source: Path,
    clone_url: str | None = None,
) -> Result[SourceTree, CheckoutError]:
    """Obtain a clean, writable tree at the released commit.

    With ``clone_url`` the repository is cloned into ``source``; otherwise
    ``source`` must already be a checkout (the CI checkout step).
    """
    if clone_url:
        return clone_source(
            url=clone_url, dest=source, tag=tag, settings=settings, console=console
        )
    return verify_source(root=source, tag=tag, settings=settings, console=console)
