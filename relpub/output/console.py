"""Console output abstraction.

Release steps report progress through ConsoleProtocol so they never depend
on rich directly and tests can capture what was printed. Every implementation
masks registered secrets: a registry token handed to ``register_secret`` is
printed as ``***`` whatever message it ends up in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

from relpub.platform.process import mask_text

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Styled, secret-masking console output."""

    def register_secret(self, value: str) -> None:
        """Mask ``value`` in everything printed from now on."""
        ...

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...


class RichConsole:
    """Production console backed by rich.

    Markup in messages is not interpreted: command output and file contents
    are printed verbatim.
    """

    def __init__(self, *, stderr: bool = False) -> None:
        from rich.console import Console

        self._console = Console(stderr=stderr, highlight=False)
        self._secrets: list[str] = []
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.HEADER: "blue bold",
        }

    def register_secret(self, value: str) -> None:
        if value and value not in self._secrets:
            self._secrets.append(value)

    def _emit(self, prefix: str, message: str, style: str) -> None:
        from rich.text import Text

        text = Text()
        if prefix:
            text.append(prefix, style=style)
            text.append(" ")
            text.append(mask_text(message, self._secrets))
        else:
            text.append(mask_text(message, self._secrets), style=style)
        self._console.print(text)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._emit("", message, self._style_map.get(style, ""))

    def success(self, message: str) -> None:
        self._emit("OK", message, "green")

    def error(self, message: str) -> None:
        self._emit("error:", message, "red bold")

    def warning(self, message: str) -> None:
        self._emit("warning:", message, "yellow")

    def info(self, message: str) -> None:
        self._emit("info:", message, "cyan")

    def header(self, message: str) -> None:
        self._console.print()
        self._emit("", message, "blue bold")


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


def _empty_secrets() -> list[str]:
    return []


@dataclass
class MockConsole:
    """Console that captures output for tests.

    Secrets are masked exactly as RichConsole masks them.
    """

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    secrets: list[str] = field(default_factory=_empty_secrets)

    def register_secret(self, value: str) -> None:
        if value and value not in self.secrets:
            self.secrets.append(value)

    def _record(self, message: str, style: Style) -> None:
        self.outputs.append(OutputRecord(mask_text(message, self.secrets), style))

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._record(message, style)

    def success(self, message: str) -> None:
        self._record(f"OK {message}", Style.SUCCESS)

    def error(self, message: str) -> None:
        self._record(f"error: {message}", Style.ERROR)

    def warning(self, message: str) -> None:
        self._record(f"warning: {message}", Style.WARNING)

    def info(self, message: str) -> None:
        self._record(f"info: {message}", Style.INFO)

    def header(self, message: str) -> None:
        self._record(message, Style.HEADER)

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        """All output as a single newline-separated string."""
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def has_success(self) -> bool:
        return any(o.style == Style.SUCCESS for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]
