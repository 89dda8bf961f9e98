"""Contracts: fail-fast checks on frames and stage lists.

Key principle:
- Pydantic validates config correctness
- Contracts validate frame shape and stage order
- Stages handle science edge cases (missing data, bad readings)
"""

from adcpscreen.contracts.failure import ContractViolation, FailurePolicy
from adcpscreen.contracts.base import require
from adcpscreen.contracts.ensemble import assert_ensemble_consistent
from adcpscreen.contracts.pipeline import assert_stage_order

__all__ = [
    "ContractViolation",
    "FailurePolicy",
    "require",
    "assert_ensemble_consistent",
    "assert_stage_order",
]
