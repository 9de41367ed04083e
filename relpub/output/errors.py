"""Error presentation utilities.

Centralized error formatting and exit code mapping for release runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relpub.core.errors import ErrorCode, propagated_exit_code
from relpub.output.console import Style
from relpub.release.errors import (
    CheckoutError,
    InputError,
    ManifestFormatError,
    PublishError,
    ReleaseError,
)

if TYPE_CHECKING:
    from relpub.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]

_OUTPUT_TAIL_LINES = 40


def _print_tail(console: ConsoleProtocol, label: str, text: str) -> None:
    lines = text.rstrip().splitlines()
    if not lines:
        return
    console.print(f"{label}:", Style.DIM)
    if len(lines) > _OUTPUT_TAIL_LINES:
        console.print(f"  ... ({len(lines) - _OUTPUT_TAIL_LINES} lines omitted)", Style.DIM)
    for line in lines[-_OUTPUT_TAIL_LINES:]:
        console.print(f"  {line}")


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a release error with its hint and the failing tool's output."""
    match error:
        case InputError(message=message):
            console.error(message)
        case CheckoutError(message=message):
            console.error(f"checkout failed: {message}")
        case ManifestFormatError(message=message, path=path):
            console.error(f"manifest error: {message}")
            console.print(f"file: {path}", Style.DIM)
        case PublishError(message=message, stdout=stdout, stderr=stderr):
            console.error(f"publish failed: {message}")
            _print_tail(console, "stdout", stdout)
            _print_tail(console, "stderr", stderr)

    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    match error:
        case InputError():
            return int(ErrorCode.USER_ERROR)
        case CheckoutError(returncode=rc):
            return propagated_exit_code(rc, ErrorCode.CHECKOUT_ERROR)
        case ManifestFormatError():
            return int(ErrorCode.MANIFEST_ERROR)
        case PublishError(returncode=rc):
            return propagated_exit_code(rc, ErrorCode.PUBLISH_ERROR)
