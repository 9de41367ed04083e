"""Release publisher.

A published release runs four steps in order:
- event: read the tag and the registry token from the trigger
- checkout: obtain a clean, writable tree at the released commit
- manifest: rewrite the manifest version line to the tag
- publish: run the registry publish command with the token
"""

from __future__ import annotations

from .errors import CheckoutError, InputError, ManifestFormatError, PublishError, ReleaseError
from .model import ManifestRewrite, ReleaseEvent, RunReport, RunState, SourceTree

__all__ = [
    "CheckoutError",
    "InputError",
    "ManifestFormatError",
    "ManifestRewrite",
    "PublishError",
    "ReleaseError",
    "ReleaseEvent",
    "RunReport",
    "RunState",
    "SourceTree",
]
