"""
Deadlock Avoidance Algorithm (Banker's Algorithm) for Deadlock Avoidance Lab.

Provides the Need computation and the safety check used by the allocation game.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List

from models.system_state import MatrixState


@dataclass(frozen=True)
class SafetyResult:
    """
    Outcome of a Banker's safety check.

    Attributes:
        safe: True if every process could finish
        sequence: Process indices in the order they finish (partial when unsafe)
    """
    safe: bool
    sequence: List[int] = field(default_factory=list)

    def describe(self) -> str:
        """Format the sequence for display."""
        if not self.sequence:
            return "(none)"
        return " -> ".join(f"P{i}" for i in self.sequence)


def compute_need(max_matrix, allocation_matrix) -> np.ndarray:
    """
    Compute the Need matrix.

    Need[i][j] = Max[i][j] - Allocation[i][j]

    Args:
        max_matrix: [P][R] maximum demand
        allocation_matrix: [P][R] current allocation (same shape)

    Returns:
        [P][R] need matrix
    """
    return np.asarray(max_matrix, dtype=int) - np.asarray(allocation_matrix, dtype=int)


def can_satisfy(need_row, available) -> bool:
    """Check if Need[i] <= Available for all resource types."""
    return bool(np.all(np.asarray(need_row) <= np.asarray(available)))


def find_safe_sequence(allocation, need, available) -> SafetyResult:
    """
    Check if a state is safe using Banker's Algorithm.

    Algorithm:
    1. Initialize Work = Available, Finish = [False] * num_processes
    2. Find the lowest index i where Finish[i] == False and Need[i] <= Work
    3. If found: Finish[i] = True, Work += Allocation[i], append i, go to 2
    4. Stop when a full pass finds nobody; SAFE iff all Finish[i] == True

    Time Complexity: O(P²×R)

    Args:
        allocation: [P][R] allocation matrix
        need: [P][R] need matrix
        available: [R] available vector

    Returns:
        SafetyResult with the (possibly partial) finishing order

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 7.5: Deadlock Avoidance.
    """
    allocation = np.asarray(allocation, dtype=int)
    need = np.asarray(need, dtype=int)

    # Work is a copy so the caller's vector is never modified
    work = np.array(available, dtype=int)
    num_processes = allocation.shape[0]
    finish = np.zeros(num_processes, dtype=bool)
    safe_sequence = []

    made_progress = True
    while made_progress:
        made_progress = False

        for i in range(num_processes):
            if finish[i]:
                continue

            if np.all(need[i] <= work):
                work += allocation[i]
                finish[i] = True
                safe_sequence.append(i)
                made_progress = True
                break  # Restart from P0: lower index always wins ties

    return SafetyResult(safe=bool(np.all(finish)), sequence=safe_sequence)


def is_safe_state(state: MatrixState) -> SafetyResult:
    """
    Run the safety check against a MatrixState.

    Args:
        state: Current matrix state

    Returns:
        SafetyResult for the state
    """
    return find_safe_sequence(
        state.allocation_matrix,
        state.need_matrix,
        state.available_vector
    )
