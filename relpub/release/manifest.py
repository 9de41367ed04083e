"""Textual rewrite of the manifest version line.

The manifest is treated as plain text, never parsed as TOML: only the quoted
value of the first ``version = "..."`` line changes. Every other byte of
the file stays as it was, including line endings, a UTF-8 BOM, and comments
after the value.
"""

from __future__ import annotations

import codecs
import re
from dataclasses import dataclass
from pathlib import Path

from relpub.core.config import ManifestConfig
from relpub.core.result import Err, Ok, Result
from relpub.platform.files import atomic_write_bytes
from relpub.release.errors import ManifestFormatError
from relpub.release.model import ManifestRewrite

__all__ = [
    "TextRewrite",
    "find_version_values",
    "read_version",
    "replace_version_value",
    "rewrite_manifest",
]

_VERSION_LINE_RE = re.compile(r'^version[ \t]*=[ \t]*"(?P<value>[^"\r\n]*)"', re.MULTILINE)
_FORBIDDEN_IN_VALUE = ('"', "\r", "\n")
_UTF8_NAMES = {"utf-8", "utf8", "utf_8"}


@dataclass(frozen=True, slots=True)
class TextRewrite:
    text: str
    previous: str | None
    line_number: int | None
    match_count: int


def find_version_values(text: str) -> list[str]:
    """Values of every version line, in file order."""
    return [m.group("value") for m in _VERSION_LINE_RE.finditer(text)]


def replace_version_value(text: str, version: str) -> TextRewrite:
    """Replace the value of the first version line with ``version``.

    Text without a version line is returned unchanged with match_count 0.
    """
    matches = list(_VERSION_LINE_RE.finditer(text))
    if not matches:
        return TextRewrite(text=text, previous=None, line_number=None, match_count=0)

    first = matches[0]
    start, end = first.span("value")
    return TextRewrite(
        text=text[:start] + version + text[end:],
        previous=first.group("value"),
        line_number=text.count("\n", 0, start) + 1,
        match_count=len(matches),
    )


def _split_bom(data: bytes, encoding: str) -> tuple[bytes, bytes]:
    if encoding.lower() in _UTF8_NAMES and data.startswith(codecs.BOM_UTF8):
        return (codecs.BOM_UTF8, data[len(codecs.BOM_UTF8) :])
    return (b"", data)


def _load(path: Path, encoding: str) -> Result[tuple[bytes, str], ManifestFormatError]:
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        return Err(ManifestFormatError(path=path, message=f"manifest not found: {path}"))
    except OSError as e:
        return Err(ManifestFormatError(path=path, message=f"failed to read {path.name}: {e}"))

    bom, body = _split_bom(data, encoding)
    try:
        return Ok((bom, body.decode(encoding)))
    except LookupError:
        return Err(ManifestFormatError(path=path, message=f"unknown encoding: {encoding}"))
    except UnicodeDecodeError as e:
        return Err(
            ManifestFormatError(
                path=path,
                message=f"{path.name} is not valid {encoding}: {e.reason}",
                hint="Set manifest.encoding in relpub.toml.",
            )
        )


def read_version(path: Path, *, encoding: str = "utf-8") -> Result[str, ManifestFormatError]:
    """Current value of the first version line."""
    loaded = _load(path, encoding)
    if isinstance(loaded, Err):
        return loaded

    values = find_version_values(loaded.value[1])
    if not values:
        return Err(
            ManifestFormatError(path=path, message=f'no `version = "..."` line in {path.name}')
        )
    return Ok(values[0])


def rewrite_manifest(
    path: Path,
    version: str,
    *,
    settings: ManifestConfig,
) -> Result[ManifestRewrite, ManifestFormatError]:
    """Set the manifest version to ``version``.

    Zero version lines: an error, or a no-op under ``on_missing = "skip"``.
    Several version lines: the first is rewritten, or an error under
    ``on_multiple = "error"``. A value already equal to ``version`` leaves
    the file untouched, so repeated rewrites are idempotent.
    """
    if any(ch in version for ch in _FORBIDDEN_IN_VALUE):
        return Err(
            ManifestFormatError(
                path=path,
                message=f"version {version!r} cannot be written into a quoted value",
            )
        )

    loaded = _load(path, settings.encoding)
    if isinstance(loaded, Err):
        return loaded
    bom, text = loaded.value

    rewrite = replace_version_value(text, version)

    if rewrite.match_count == 0:
        if settings.on_missing == "skip":
            return Ok(
                ManifestRewrite(
                    path=path,
                    version=version,
                    previous=None,
                    line_number=None,
                    match_count=0,
                    changed=False,
                )
            )
        return Err(
            ManifestFormatError(
                path=path,
                message=f'no `version = "..."` line in {path.name}',
                hint='Add a top-level version line or set manifest.on_missing = "skip".',
            )
        )

    if rewrite.match_count > 1 and settings.on_multiple == "error":
        return Err(
            ManifestFormatError(
                path=path,
                message=f"{rewrite.match_count} version lines in {path.name}",
                hint='Keep a single version line or set manifest.on_multiple = "first".',
            )
        )

    changed = rewrite.text != text
    if changed:
        try:
            payload = bom + rewrite.text.encode(settings.encoding)
        except UnicodeEncodeError as e:
            return Err(
                ManifestFormatError(
                    path=path,
                    message=f"version {version!r} is not encodable as {settings.encoding}: {e.reason}",
                )
            )
        try:
            atomic_write_bytes(path, payload)
        except OSError as e:
            return Err(
                ManifestFormatError(path=path, message=f"failed to write {path.name}: {e}")
            )

    return Ok(
        ManifestRewrite(
            path=path,
            version=version,
            previous=rewrite.previous,
            line_number=rewrite.line_number,
            match_count=rewrite.match_count,
            changed=changed,
        )
    )
