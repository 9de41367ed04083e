from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from relpub.core.config import Config, load_config, load_config_or_default, resolve_config_path
from relpub.core.errors import ErrorCode
from relpub.core.result import Err
from relpub.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    config_path: Path
    console: ConsoleProtocol


def build_context(*, config_root: Path, explicit_config: Path | None = None) -> CLIContext:
    """Load configuration and create the console.

    Exits with ENV_ERROR when a config file is required but missing or invalid.
    """
    path, required = resolve_config_path(
        explicit=explicit_config, source_root=config_root, environ=os.environ
    )
    result = load_config(path) if required else load_config_or_default(path)
    if isinstance(result, Err):
        typer.echo(f"error: {result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(config=result.value, config_path=path, console=RichConsole())
