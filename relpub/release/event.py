"""Turn the CI trigger into a ReleaseEvent.

On GitHub Actions a release event exposes the tag as GITHUB_REF_NAME and the
full payload as a JSON file at GITHUB_EVENT_PATH. Explicit values (CLI flags)
win over both.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

from relpub.core.config import EventConfig
from relpub.core.result import Err, Ok, Result
from relpub.core.structured import as_str_dict, get_str, get_table
from relpub.release.errors import InputError
from relpub.release.model import ReleaseEvent

FALLBACK_TOKEN_ENV = "CARGO_REGISTRY_TOKEN"
_PUBLISHED_ACTION = "published"


def _read_payload(environ: Mapping[str, str]) -> Result[dict[str, object] | None, InputError]:
    raw_path = environ.get("GITHUB_EVENT_PATH", "").strip()
    if not raw_path:
        return Ok(None)

    path = Path(raw_path)
    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Ok(None)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        return Err(InputError(message=f"unreadable event payload: {e}", hint=str(path)))

    return Ok(as_str_dict(obj))


def _payload_tag(payload: Mapping[str, object]) -> str | None:
    release = get_table(payload, "release")
    if release is None:
        return None
    return get_str(release, "tag_name")


def normalize_tag(tag: str, *, strip_prefix: str = "") -> str:
    value = tag.strip()
    if strip_prefix and value.startswith(strip_prefix) and len(value) > len(strip_prefix):
        value = value[len(strip_prefix) :]
    return value


def event_from_environment(
    environ: Mapping[str, str],
    *,
    settings: EventConfig,
    tag: str | None = None,
    token: str | None = None,
) -> Result[ReleaseEvent, InputError]:
    """Build the ReleaseEvent for this run.

    Tag lookup: ``tag``, then the ``settings.tag_env`` variable, then
    ``release.tag_name`` in the event payload. Token lookup: ``token``,
    then ``settings.token_env``, then CARGO_REGISTRY_TOKEN.

    Release payloads whose action is not "published" are rejected.
    """
    payload_result = _read_payload(environ)
    if isinstance(payload_result, Err):
        return payload_result
    payload = payload_result.value

    if payload is not None and environ.get("GITHUB_EVENT_NAME") == "release":
        action = get_str(payload, "action")
        if action is not None and action != _PUBLISHED_ACTION:
            return Err(
                InputError(
                    message=f"release action '{action}' does not trigger a publish",
                    hint="Only published releases are shipped to the registry.",
                )
            )

    raw_tag = tag or environ.get(settings.tag_env, "") or ""
    if not raw_tag.strip() and payload is not None:
        raw_tag = _payload_tag(payload) or ""

    value = normalize_tag(raw_tag, strip_prefix=settings.strip_prefix)
    if not value:
        return Err(
            InputError(
                message="release tag is missing",
                hint=f"Pass --tag or set {settings.tag_env}.",
            )
        )

    secret = token or environ.get(settings.token_env, "") or environ.get(FALLBACK_TOKEN_ENV, "")
    if not secret.strip():
        return Err(
            InputError(
                message="registry token is missing",
                hint=f"Set {settings.token_env} from the CI secret store.",
            )
        )

    return Ok(ReleaseEvent(tag=value, token=secret.strip()))
