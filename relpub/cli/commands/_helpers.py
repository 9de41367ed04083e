"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer

from relpub.output.console import ConsoleProtocol
from relpub.output.errors import print_release_error, release_error_exit_code
from relpub.release.errors import ReleaseError


def exit_with_release_error(error: ReleaseError, console: ConsoleProtocol) -> NoReturn:
    """Print ``error`` and exit with its exit code."""
    print_release_error(error, console)
    raise typer.Exit(code=release_error_exit_code(error))
