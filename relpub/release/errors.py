"""Error types of a release run.

Each step has its own error type; ReleaseError is their union so callers can
``match`` on the failing step.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class InputError:
    """The triggering event is unusable (no tag, no token, wrong action)."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class CheckoutError:
    """The source tree is unavailable, not writable, dirty or at the wrong commit."""

    message: str
    hint: str | None = None
    returncode: int | None = None


@dataclass(frozen=True, slots=True)
class ManifestFormatError:
    """The manifest has no usable version line or cannot be read/written."""

    path: Path
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class PublishError:
    """The publish command exited non-zero.

    stdout/stderr are the command's output with secrets already masked.
    """

    message: str
    returncode: int
    stdout: str = ""
    stderr: str = ""
    hint: str | None = None


ReleaseError = InputError | CheckoutError | ManifestFormatError | PublishError
