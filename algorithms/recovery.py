"""
Safe-State Recovery for Deadlock Avoidance Lab.

Randomly generated levels can start in an unsafe state. Recovery frees
resources from the allocation matrix until the Banker's check passes.
"""

from typing import Tuple

from models.system_state import MatrixState
from algorithms.avoidance import is_safe_state


def release_one_instance_each(state: MatrixState) -> int:
    """
    Preempt one instance from every non-zero allocation cell.

    Released instances go back to Available, so resource conservation holds.

    Args:
        state: Matrix state to modify in place

    Returns:
        Total number of instances released
    """
    held = state.allocation_matrix > 0
    released_per_resource = held.sum(axis=0)

    state.allocation_matrix[held] -= 1
    state.available_vector += released_per_resource

    return int(released_per_resource.sum())


def trim_until_safe(state: MatrixState, max_attempts: int = 10) -> Tuple[bool, int]:
    """
    Reduce allocations until the state is safe or the budget is exhausted.

    Each attempt releases one instance from every allocated cell. Exhausting
    the budget is not an error: the caller loads the level best-effort.

    Args:
        state: Matrix state to modify in place
        max_attempts: Maximum number of release passes

    Returns:
        Tuple of (is_safe, attempts_used)
    """
    attempts = 0

    while attempts < max_attempts:
        if is_safe_state(state).safe:
            return True, attempts

        # Nothing left to release; further passes cannot change the outcome
        if not state.allocation_matrix.any():
            break

        release_one_instance_each(state)
        attempts += 1

    return is_safe_state(state).safe, attempts
