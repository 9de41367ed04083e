from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path


class RunState(StrEnum):
    START = "start"
    CHECKED_OUT = "checked_out"
    VERSION_REWRITTEN = "version_rewritten"
    PUBLISHED = "published"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.DONE, RunState.FAILED)


@dataclass(frozen=True, slots=True)
class ReleaseEvent:
    """A published release: the tag to ship and the registry credential.

    The token is excluded from repr so it cannot leak through debug output.
    """

    tag: str
    token: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class SourceTree:
    root: Path
    head: str | None = None
    cloned: bool = False


@dataclass(frozen=True, slots=True)
class ManifestRewrite:
    """Outcome of rewriting the manifest version line.

    Attributes:
        path: Manifest file.
        version: The value written (the release tag).
        previous: Value found before the rewrite, None when no line matched.
        line_number: 1-based line of the rewritten version, None when no line matched.
        match_count: Number of lines matching the version pattern.
        changed: Whether the file content changed.
    """

    path: Path
    version: str
    previous: str | None
    line_number: int | None
    match_count: int
    changed: bool


@dataclass(frozen=True, slots=True)
class RunReport:
    state: RunState
    source: SourceTree | None = None
    rewrite: ManifestRewrite | None = None
    publish_output: str = ""
    dry_run: bool = False
