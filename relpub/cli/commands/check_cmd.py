from __future__ import annotations

import os
from pathlib import Path

import typer

from relpub.cli.context import build_context
from relpub.core.errors import ErrorCode
from relpub.output.console import Style
from relpub.release.preflight import CheckStatus, run_preflight


def check(
    source: Path = typer.Option(Path("."), "--source", help="Checkout to inspect"),
    config: Path | None = typer.Option(None, "--config", help="Path to relpub.toml"),
) -> None:
    """Check that a release could run here."""
    ctx = build_context(config_root=source, explicit_config=config)

    ctx.console.header("Release preflight")
    ctx.console.print(f"source: {source.resolve()}", Style.DIM)
    ctx.console.print(f"config: {ctx.config_path}", Style.DIM)

    results = run_preflight(source=source, config=ctx.config, environ=os.environ)
    for r in results:
        ctx.console.print(f"{r.name}: {r.message}", _style_for_status(r.status))
        if r.hint and r.status != CheckStatus.OK:
            ctx.console.print(f"hint: {r.hint}", Style.DIM)

    if any(r.is_error for r in results):
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))


def _style_for_status(status: CheckStatus) -> Style:
    if status == CheckStatus.OK:
        return Style.SUCCESS
    if status == CheckStatus.WARNING:
        return Style.WARNING
    return Style.ERROR
