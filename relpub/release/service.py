"""One release run: checkout, rewrite the manifest version, publish.

The run is a small state machine. Each non-terminal state has a handler that
performs one step and returns the next state; the first Err moves the run to
FAILED and stops it. Nothing is rolled back: a failed publish leaves the
rewritten manifest in place, and a rerun starts over from START.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Protocol

from relpub.core.config import CheckoutConfig, Config
from relpub.core.result import Err, Ok, Result
from relpub.output.console import ConsoleProtocol, Style
from relpub.release.checkout import acquire_source
from relpub.release.errors import CheckoutError, ReleaseError
from relpub.release.manifest import rewrite_manifest
from relpub.release.model import ReleaseEvent, RunReport, RunState, SourceTree
from relpub.release.publish import Publisher


class CheckoutFn(Protocol):
    def __call__(
        self,
        *,
        tag: str,
        settings: CheckoutConfig,
        console: ConsoleProtocol,
        source: Path,
        clone_url: str | None = None,
    ) -> Result[SourceTree, CheckoutError]: ...


@dataclass(frozen=True, slots=True)
class RunFailure:
    """A run that ended in FAILED.

    Attributes:
        error: What went wrong.
        step: State the run was in when the step failed.
        report: Everything completed before the failure.
    """

    error: ReleaseError
    step: RunState
    report: RunReport


StepHandler = Callable[[RunReport], Result[RunReport, ReleaseError]]


def run_state_machine(
    *,
    initial: RunReport,
    handlers: Mapping[RunState, StepHandler],
) -> Result[RunReport, RunFailure]:
    current = initial
    while not current.state.is_terminal:
        handler = handlers.get(current.state)
        if handler is None:
            raise AssertionError(f"no handler for release state: {current.state}")

        outcome = handler(current)
        if isinstance(outcome, Err):
            failed = replace(current, state=RunState.FAILED)
            return Err(RunFailure(error=outcome.error, step=current.state, report=failed))
        current = outcome.value

    return Ok(current)


def run_release(
    event: ReleaseEvent,
    *,
    source: Path,
    settings: Config,
    console: ConsoleProtocol,
    publisher: Publisher,
    clone_url: str | None = None,
    dry_run: bool = False,
    checkout: CheckoutFn = acquire_source,
) -> Result[RunReport, RunFailure]:
    """Ship ``event.tag`` to the registry.

    Args:
        event: Tag and token of the published release.
        source: Existing checkout, or clone destination with ``clone_url``.
        settings: Loaded configuration.
        console: Progress output; the token is registered as a secret.
        publisher: Runs the publish command.
        clone_url: Clone the repository at the tag instead of using ``source``.
        dry_run: Checkout and rewrite, but only show the publish command.

    Returns:
        Ok(RunReport) in state DONE, or Err(RunFailure) in state FAILED.
    """
    console.register_secret(event.token)

    def do_checkout(run: RunReport) -> Result[RunReport, ReleaseError]:
        console.info(f"acquire source tree for {event.tag}")
        tree = checkout(
            tag=event.tag,
            settings=settings.checkout,
            console=console,
            source=source,
            clone_url=clone_url,
        )
        if isinstance(tree, Err):
            return tree
        return Ok(replace(run, state=RunState.CHECKED_OUT, source=tree.value))

    def do_rewrite(run: RunReport) -> Result[RunReport, ReleaseError]:
        assert run.source is not None
        manifest_path = run.source.root / settings.manifest.path
        console.info(f"rewrite version in {settings.manifest.path}")
        result = rewrite_manifest(manifest_path, event.tag, settings=settings.manifest)
        if isinstance(result, Err):
            return result

        rewrite = result.value
        if rewrite.match_count == 0:
            console.warning(f"no version line in {manifest_path.name}; left unchanged")
        elif rewrite.match_count > 1:
            console.warning(
                f"{rewrite.match_count} version lines in {manifest_path.name}; "
                f"rewrote line {rewrite.line_number} only"
            )
        if rewrite.changed:
            console.print(f"version: {rewrite.previous} -> {rewrite.version}", Style.DIM)
        elif rewrite.match_count:
            console.print(f"version already {rewrite.version}", Style.DIM)
        return Ok(replace(run, state=RunState.VERSION_REWRITTEN, rewrite=rewrite))

    def do_publish(run: RunReport) -> Result[RunReport, ReleaseError]:
        assert run.source is not None
        command = publisher.describe(run.source.root, event.token)
        if dry_run:
            console.print(f"dry-run: {command}", Style.DIM)
            return Ok(replace(run, state=RunState.PUBLISHED, dry_run=True))

        console.info(f"publish: {command}")
        result = publisher.publish(run.source.root, event.token)
        if isinstance(result, Err):
            return result
        return Ok(replace(run, state=RunState.PUBLISHED, publish_output=result.value))

    def do_finish(run: RunReport) -> Result[RunReport, ReleaseError]:
        if run.dry_run:
            console.success(f"{event.tag} ready to publish (dry-run)")
        else:
            console.success(f"published {event.tag}")
        return Ok(replace(run, state=RunState.DONE))

    return run_state_machine(
        initial=RunReport(state=RunState.START),
        handlers={
            RunState.START: do_checkout,
            RunState.CHECKED_OUT: do_rewrite,
            RunState.VERSION_REWRITTEN: do_publish,
            RunState.PUBLISHED: do_finish,
        },
    )
