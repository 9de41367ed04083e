"""Typed configuration loading.

The release run is configured by an optional ``relpub.toml``:

    [event]
    tag_env = "GITHUB_REF_NAME"
    token_env = "CRATES_IO_API_TOKEN"
    strip_prefix = ""

    [checkout]
    verify_ref = true
    depth = 1

    [manifest]
    path = "Cargo.toml"
    encoding = "utf-8"
    on_missing = "error"    # or "skip"
    on_multiple = "first"   # or "error"

    [publish]
    command = ["cargo", "publish"]
    args = []
    allow_dirty = true
    token_env = "CARGO_REGISTRY_TOKEN"
    token_flag = ""         # e.g. "--token" to pass the token on argv

    [publish.env]
    CARGO_REGISTRIES_CRATES_IO_PROTOCOL = "sparse"

Every key is optional; the defaults reproduce the crates.io release workflow.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, cast

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_int,
    get_str,
    get_str_list,
    get_str_map,
    get_table,
)

__all__ = [
    "CONFIG_ENV",
    "CONFIG_FILENAME",
    "CheckoutConfig",
    "Config",
    "ConfigError",
    "EventConfig",
    "ManifestConfig",
    "MissingPolicy",
    "MultiplePolicy",
    "PublishConfig",
    "load_config",
    "load_config_or_default",
    "resolve_config_path",
]

CONFIG_FILENAME = "relpub.toml"
CONFIG_ENV = "RELPUB_CONFIG"

MissingPolicy = Literal["error", "skip"]
MultiplePolicy = Literal["first", "error"]

_MISSING_POLICIES: tuple[str, ...] = ("error", "skip")
_MULTIPLE_POLICIES: tuple[str, ...] = ("first", "error")


def _default_publish_env() -> dict[str, str]:
    return {"CARGO_REGISTRIES_CRATES_IO_PROTOCOL": "sparse"}


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class EventConfig:
    """Where the release tag and the registry token come from."""

    tag_env: str = "GITHUB_REF_NAME"
    token_env: str = "CRATES_IO_API_TOKEN"
    strip_prefix: str = ""


@dataclass(frozen=True, slots=True)
class CheckoutConfig:
    verify_ref: bool = True
    depth: int = 1


@dataclass(frozen=True, slots=True)
class ManifestConfig:
    """Manifest location and rewrite policies.

    Attributes:
        path: Manifest path, relative to the source tree.
        encoding: Text encoding used to decode and re-encode the file.
        on_missing: "error" fails the run when no version line exists,
            "skip" leaves the file untouched and continues.
        on_multiple: "first" rewrites only the first version line,
            "error" refuses to guess.
    """

    path: str = "Cargo.toml"
    encoding: str = "utf-8"
    on_missing: MissingPolicy = "error"
    on_multiple: MultiplePolicy = "first"


@dataclass(frozen=True, slots=True)
class PublishConfig:
    """External publish command settings."""

    command: tuple[str, ...] = ("cargo", "publish")
    args: tuple[str, ...] = ()
    allow_dirty: bool = True
    token_env: str = "CARGO_REGISTRY_TOKEN"
    token_flag: str | None = None
    env: dict[str, str] = field(default_factory=_default_publish_env)


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    event: EventConfig = field(default_factory=EventConfig)
    checkout: CheckoutConfig = field(default_factory=CheckoutConfig)
    manifest: ManifestConfig = field(default_factory=ManifestConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: On unknown policy names or malformed values.
        """
        event: StrDict = get_table(data, "event") or {}
        checkout: StrDict = get_table(data, "checkout") or {}
        manifest: StrDict = get_table(data, "manifest") or {}
        publish: StrDict = get_table(data, "publish") or {}

        on_missing = get_str(manifest, "on_missing") or "error"
        if on_missing not in _MISSING_POLICIES:
            raise ValueError(f"manifest.on_missing must be one of {_MISSING_POLICIES}")
        on_multiple = get_str(manifest, "on_multiple") or "first"
        if on_multiple not in _MULTIPLE_POLICIES:
            raise ValueError(f"manifest.on_multiple must be one of {_MULTIPLE_POLICIES}")

        depth = get_int(checkout, "depth")
        if depth is not None and depth < 0:
            raise ValueError("checkout.depth must be >= 0")

        command = get_str_list(publish, "command")
        if "command" in publish and not command:
            raise ValueError("publish.command must be a non-empty list of strings")
        args = get_str_list(publish, "args")
        if "args" in publish and args is None:
            raise ValueError("publish.args must be a list of strings")
        env = get_str_map(publish, "env")
        if "env" in publish and env is None:
            raise ValueError("publish.env values must be strings")

        raw_prefix = event.get("strip_prefix", "")
        if not isinstance(raw_prefix, str):
            raise ValueError("event.strip_prefix must be a string")

        allow_dirty = get_bool(publish, "allow_dirty")
        verify_ref = get_bool(checkout, "verify_ref")

        return cls(
            event=EventConfig(
                tag_env=get_str(event, "tag_env") or "GITHUB_REF_NAME",
                token_env=get_str(event, "token_env") or "CRATES_IO_API_TOKEN",
                strip_prefix=raw_prefix,
            ),
            checkout=CheckoutConfig(
                verify_ref=True if verify_ref is None else verify_ref,
                depth=1 if depth is None else depth,
            ),
            manifest=ManifestConfig(
                path=get_str(manifest, "path") or "Cargo.toml",
                encoding=get_str(manifest, "encoding") or "utf-8",
                on_missing=cast(MissingPolicy, on_missing),
                on_multiple=cast(MultiplePolicy, on_multiple),
            ),
            publish=PublishConfig(
                command=tuple(command) if command else ("cargo", "publish"),
                args=tuple(args or ()),
                allow_dirty=True if allow_dirty is None else allow_dirty,
                token_env=get_str(publish, "token_env") or "CARGO_REGISTRY_TOKEN",
                token_flag=get_str(publish, "token_flag"),
                env=_default_publish_env() if env is None else env,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relpub.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config from file, or defaults when the file does not exist.

    A file that exists but is invalid is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)


def resolve_config_path(
    *,
    explicit: Path | None,
    source_root: Path,
    environ: Mapping[str, str] | None = None,
) -> tuple[Path, bool]:
    """Pick the config file to load.

    Returns:
        (path, required). An explicit path or RELPUB_CONFIG must exist;
        the default relpub.toml in the source tree is optional.
    """
    env = os.environ if environ is None else environ
    if explicit is not None:
        return (explicit, True)
    from_env = env.get(CONFIG_ENV, "").strip()
    if from_env:
        return (Path(from_env).expanduser(), True)
    return (source_root / CONFIG_FILENAME, False)
