"""Stage order contract."""

from typing import Sequence

from adcpscreen.contracts.base import require
from adcpscreen.contracts.invariants import STAGE_ORDER


def assert_stage_order(names: Sequence[str]) -> None:
    """Enforce that a selected stage list follows the canonical order.

    Raises
    ------
    ContractViolation
        On an unknown stage, a duplicate, or an out-of-order stage.
    """
    positions = []
    for name in names:
        require(name in STAGE_ORDER, f"Stage contract violated: unknown stage '{name}'")
        positions.append(STAGE_ORDER.index(name))
    require(
        all(a < b for a, b in zip(positions, positions[1:])),
        f"Stage contract violated: {list(names)} is not in canonical order"
    )
