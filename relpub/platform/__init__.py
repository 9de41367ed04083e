"""Platform layer: subprocesses and filesystem."""

from .files import atomic_write_bytes, is_writable_dir
from .process import MASK, ProcessError, mask_text, run

__all__ = [
    "MASK",
    "ProcessError",
    "atomic_write_bytes",
    "is_writable_dir",
    "mask_text",
    "run",
]
