"""Preflight checks for a release run.

Verifies what a run needs before a tag is pushed: the manifest has a version
line, git and the publish tool are on PATH, and the token variable is set.
Nothing is modified.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from relpub.core.config import Config
from relpub.core.result import Err
from relpub.release.event import FALLBACK_TOKEN_ENV
from relpub.release.manifest import find_version_values, read_version

Which = Callable[[str], str | None]


class CheckStatus(Enum):
    OK = auto()
    WARNING = auto()
    ERROR = auto()


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Result of a single check.

    Attributes:
        name: What was checked (e.g. "manifest", "git")
        status: Whether the check passed, warned, or failed
        message: Human-readable result
        hint: Optional fix
    """

    name: str
    status: CheckStatus
    message: str
    hint: str | None = None

    @property
    def is_error(self) -> bool:
        return self.status == CheckStatus.ERROR

    @classmethod
    def success(cls, name: str, message: str) -> CheckResult:
        return cls(name=name, status=CheckStatus.OK, message=message)

    @classmethod
    def warning(cls, name: str, message: str, hint: str | None = None) -> CheckResult:
        return cls(name=name, status=CheckStatus.WARNING, message=message, hint=hint)

    @classmethod
    def error(cls, name: str, message: str, hint: str | None = None) -> CheckResult:
        return cls(name=name, status=CheckStatus.ERROR, message=message, hint=hint)


def check_manifest(source: Path, config: Config) -> CheckResult:
    path = source / config.manifest.path
    result = read_version(path, encoding=config.manifest.encoding)
    if isinstance(result, Err):
        if config.manifest.on_missing == "skip" and path.is_file():
            return CheckResult.warning("manifest", f"{result.error.message} (skipped)")
        return CheckResult.error("manifest", result.error.message, result.error.hint)

    count = len(find_version_values(path.read_text(encoding=config.manifest.encoding)))
    if count > 1:
        message = f"{config.manifest.path}: {count} version lines, first is {result.value}"
        if config.manifest.on_multiple == "error":
            return CheckResult.error("manifest", message, "Keep a single version line.")
        return CheckResult.warning("manifest", message, "Only the first line is rewritten.")
    return CheckResult.success("manifest", f"{config.manifest.path}: version {result.value}")


def check_tool(name: str, which: Which, hint: str) -> CheckResult:
    found = which(name)
    if found is None:
        return CheckResult.error(name, "missing", hint)
    return CheckResult.success(name, found)


def check_token(config: Config, environ: Mapping[str, str]) -> CheckResult:
    for var in (config.event.token_env, FALLBACK_TOKEN_ENV):
        if environ.get(var, "").strip():
            return CheckResult.success("token", f"{var} is set")
    return CheckResult.warning(
        "token",
        f"{config.event.token_env} is not set",
        "The CI secret store provides it at release time.",
    )


def run_preflight(
    *,
    source: Path,
    config: Config,
    environ: Mapping[str, str],
    which: Which = shutil.which,
) -> list[CheckResult]:
    publish_tool = config.publish.command[0]
    return [
        check_manifest(source, config),
        check_tool("git", which, "Install git: https://git-scm.com/"),
        check_tool(publish_tool, which, f"Install {publish_tool} and put it on PATH."),
        check_token(config, environ),
    ]
