"""Invoke the registry publish command.

The default is ``cargo publish --allow-dirty``: the tree differs from the
committed source once the version is rewritten. The token goes to the tool
through its environment (CARGO_REGISTRY_TOKEN) unless ``token_flag`` asks
for it on argv. Either way it is masked in anything we print.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from relpub.core.config import PublishConfig
from relpub.core.result import Err, Ok, Result
from relpub.platform.process import mask_text
from relpub.platform.process import run as run_process
from relpub.release.errors import PublishError

__all__ = [
    "ALLOW_DIRTY_FLAG",
    "CommandPublisher",
    "PublishCommand",
    "Publisher",
    "build_publish_command",
]

ALLOW_DIRTY_FLAG = "--allow-dirty"


class Publisher(Protocol):
    def describe(self, root: Path, token: str) -> str:
        """Command line that ``publish`` would run, with the token masked."""
        ...

    def publish(self, root: Path, token: str) -> Result[str, PublishError]:
        """Publish the tree at ``root``; Ok carries the tool's output."""
        ...


def _empty_env() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class PublishCommand:
    argv: tuple[str, ...]
    env: dict[str, str] = field(default_factory=_empty_env)

    def render(self, secrets: tuple[str, ...] = ()) -> str:
        return mask_text(shlex.join(self.argv), secrets)


def build_publish_command(settings: PublishConfig, token: str) -> PublishCommand:
    argv = list(settings.command)
    if settings.allow_dirty and ALLOW_DIRTY_FLAG not in argv:
        argv.append(ALLOW_DIRTY_FLAG)
    argv.extend(settings.args)

    env = dict(settings.env)
    if settings.token_flag:
        argv.extend([settings.token_flag, token])
    else:
        env[settings.token_env] = token

    return PublishCommand(argv=tuple(argv), env=env)


class CommandPublisher:
    """Runs the configured publish command once, without retries or timeout."""

    def __init__(
        self,
        settings: PublishConfig,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._settings = settings
        self._environ = dict(os.environ if environ is None else environ)

    def describe(self, root: Path, token: str) -> str:
        return build_publish_command(self._settings, token).render((token,))

    def publish(self, root: Path, token: str) -> Result[str, PublishError]:
        command = build_publish_command(self._settings, token)
        env = {**self._environ, **command.env}

        result = run_process(list(command.argv), cwd=root, env=env)
        if isinstance(result, Err):
            error = result.error.masked((token,))
            hint = None
            if error.returncode == -1:
                hint = f"Is {command.argv[0]} installed and on PATH?"
            return Err(
                PublishError(
                    message=f"{command.render((token,))} failed (exit {error.returncode})",
                    returncode=error.returncode,
                    stdout=error.stdout,
                    stderr=error.stderr,
                    hint=hint,
                )
            )

        return Ok(mask_text(result.value, (token,)))
