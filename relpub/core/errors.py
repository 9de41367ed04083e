"""Process exit codes.

Each failing step of a release run maps to its own code so CI logs show which
step broke:
- 0: Success
- 1: User error (missing tag or token, bad arguments)
- 2: Environment error (invalid config, git or publish tool missing)
- 3: Checkout error (source tree unavailable, dirty or at the wrong commit)
- 4: Manifest error (version line missing or ambiguous)
- 5: Publish error (registry rejected the package, network or auth failure)
"""

from enum import IntEnum

__all__ = ["ErrorCode", "propagated_exit_code"]


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    CHECKOUT_ERROR = 3
    MANIFEST_ERROR = 4
    PUBLISH_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")


def propagated_exit_code(returncode: int | None, fallback: ErrorCode) -> int:
    """Use an external command's status as our own when it is a real exit code.

    Negative codes (signals, spawn failures) and out-of-range values fall back
    to the step's category code.
    """
    if returncode is not None and 0 < returncode < 256:
        return returncode
    return int(fallback)
