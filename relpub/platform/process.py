"""Subprocess execution with Result-based error handling.

``run`` captures output and returns ``ProcessError`` for a non-zero exit, a
timeout or a command that could not be started (``returncode == -1``).
Callers that pass secrets on argv or in the environment mask the error with
``ProcessError.masked`` before showing it.
"""

from __future__ import annotations

import subprocess
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from relpub.core.result import Err, Ok, Result

__all__ = ["MASK", "ProcessError", "mask_text", "run"]

MASK = "***"

_NOT_STARTED = -1
_SHOWN_ARGS = 3


def mask_text(text: str, secrets: Iterable[str]) -> str:
    """Replace every occurrence of each non-empty secret with ``***``."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, MASK)
    return text


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that did not exit 0.

    Attributes:
        command: argv as executed.
        returncode: Exit status, or -1 when the command never ran or timed out.
        stdout: Captured standard output.
        stderr: Captured standard error, or the reason it never ran.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:_SHOWN_ARGS])
        if len(self.command) > _SHOWN_ARGS:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"

    def masked(self, secrets: Iterable[str]) -> ProcessError:
        """Copy with secrets removed from the command and captured output."""
        values = tuple(s for s in secrets if s)
        if not values:
            return self
        return replace(
            self,
            command=tuple(mask_text(part, values) for part in self.command),
            stdout=mask_text(self.stdout, values),
            stderr=mask_text(self.stderr, values),
        )


def run(
    cmd: Sequence[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd`` and return its stdout.

    ``env`` replaces the environment when given. ``timeout`` is in seconds;
    None waits forever.
    """
    argv = tuple(cmd)
    try:
        proc = subprocess.run(
            argv,
            cwd=str(cwd),
            env=None if env is None else dict(env),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return Err(ProcessError(argv, _NOT_STARTED, partial, f"timed out after {timeout}s"))
    except OSError as e:
        return Err(ProcessError(argv, _NOT_STARTED, "", str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(argv, proc.returncode, proc.stdout, proc.stderr))
    return Ok(proc.stdout)
