from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path

import typer

from relpub.cli.commands._helpers import exit_with_release_error
from relpub.cli.context import build_context
from relpub.core.result import Err
from relpub.release.event import event_from_environment
from relpub.release.publish import CommandPublisher
from relpub.release.service import run_release


def publish(
    tag: str | None = typer.Option(
        None, "--tag", help="Release tag (default: $GITHUB_REF_NAME or the event payload)"
    ),
    token_env: str | None = typer.Option(
        None, "--token-env", help="Environment variable holding the registry token"
    ),
    source: Path = typer.Option(
        Path("."), "--source", help="Checkout to publish from (clone destination with --clone)"
    ),
    clone: str | None = typer.Option(
        None, "--clone", help="Clone this repository at the tag into --source first"
    ),
    config: Path | None = typer.Option(None, "--config", help="Path to relpub.toml"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Rewrite the manifest but only show the publish command"
    ),
) -> None:
    """Rewrite the manifest version to the release tag and publish."""
    config_root = Path.cwd() if clone else source
    ctx = build_context(config_root=config_root, explicit_config=config)

    settings = ctx.config
    if token_env:
        settings = replace(settings, event=replace(settings.event, token_env=token_env))

    event = event_from_environment(os.environ, settings=settings.event, tag=tag)
    if isinstance(event, Err):
        exit_with_release_error(event.error, ctx.console)

    result = run_release(
        event.value,
        source=source.expanduser().resolve(),
        settings=settings,
        console=ctx.console,
        publisher=CommandPublisher(settings.publish),
        clone_url=clone,
        dry_run=dry_run,
    )
    if isinstance(result, Err):
        exit_with_release_error(result.error.error, ctx.console)
