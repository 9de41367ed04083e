from __future__ import annotations

from pathlib import Path

import typer

from relpub.cli.commands._helpers import exit_with_release_error
from relpub.cli.context import build_context
from relpub.core.result import Err
from relpub.output.console import Style
from relpub.release.event import normalize_tag
from relpub.release.manifest import rewrite_manifest


def rewrite(
    tag: str = typer.Argument(..., help="Version to write into the manifest"),
    manifest: Path | None = typer.Option(
        None, "--manifest", help="Manifest file (default: manifest.path from config)"
    ),
    config: Path | None = typer.Option(None, "--config", help="Path to relpub.toml"),
) -> None:
    """Rewrite the manifest version line only (no checkout, no publish)."""
    ctx = build_context(config_root=Path.cwd(), explicit_config=config)
    settings = ctx.config

    path = manifest if manifest is not None else Path(settings.manifest.path)
    version = normalize_tag(tag, strip_prefix=settings.event.strip_prefix)

    result = rewrite_manifest(path, version, settings=settings.manifest)
    if isinstance(result, Err):
        exit_with_release_error(result.error, ctx.console)

    done = result.value
    if done.match_count == 0:
        ctx.console.warning(f"no version line in {path}; left unchanged")
        return
    if done.match_count > 1:
        ctx.console.warning(f"{done.match_count} version lines; rewrote line {done.line_number}")
    if done.changed:
        ctx.console.success(f"{path}: {done.previous} -> {done.version}")
    else:
        ctx.console.print(f"{path}: already {done.version}", Style.DIM)
