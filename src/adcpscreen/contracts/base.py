"""Base contract enforcement utilities.

``require`` is the single enforcement mechanism for all contracts.
"""

from adcpscreen.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a contract.

    Parameters
    ----------
    condition : bool
        The invariant that must hold. If False, ContractViolation is raised.
    message : str
        Explanation of the violation.

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(ensemble.is_ensemble_avail, "Frame contract: missing header")
    """
    if not condition:
        raise ContractViolation(message)
