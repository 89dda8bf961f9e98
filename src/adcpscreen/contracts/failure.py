"""Centralized failure policy for contract violations.

Contracts fail fast and loud. All violations raise the same exception
type so callers can handle programming errors uniformly.
"""

from enum import Enum


class FailurePolicy(str, Enum):
    """What the caller does with a violation.

    FAIL_FAST: Raise immediately (used by ``require``)
    SKIP_FRAME: Log, leave the frame uncorrected and keep the stream flowing
        (used by the stream router)
    """
    FAIL_FAST = "fail_fast"
    SKIP_FRAME = "skip_frame"


class ContractViolation(RuntimeError):
    """Raised when a frame or a stage list breaks a contract.

    Key distinction:
    - ValueError / ValidationError: user or config error (handled by Pydantic)
    - ContractViolation: malformed frame or mis-ordered stages
    - Exception: arithmetic trouble inside a stage (caught per stage)
    """
    pass
