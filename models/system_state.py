"""
Matrix State model for Deadlock Avoidance Lab.

Holds the Max/Allocation/Available matrices that the Banker's game plays on.
"""

import numpy as np
from typing import Dict, List, Optional
from dataclasses import dataclass, field


@dataclass
class MatrixState:
    """
    Resource-allocation state for one level.

    Attributes:
        max_matrix: [P][R] Maximum instances each process may ever hold
        allocation_matrix: [P][R] Instances currently held by each process
        available_vector: [R] Unallocated instances per resource type
        total_vector: [R] Total instances per resource type (derived when omitted)

    Invariants:
        allocation_matrix <= max_matrix (element-wise)
        available_vector + column sums of allocation_matrix == total_vector
    """
    max_matrix: np.ndarray
    allocation_matrix: np.ndarray
    available_vector: np.ndarray
    total_vector: Optional[np.ndarray] = field(default=None)

    def __post_init__(self):
        """Normalise inputs to integer arrays and derive the totals."""
        self.max_matrix = np.array(self.max_matrix, dtype=int, ndmin=2)
        self.allocation_matrix = np.array(self.allocation_matrix, dtype=int, ndmin=2)
        self.available_vector = np.array(self.available_vector, dtype=int)

        if self.max_matrix.shape != self.allocation_matrix.shape:
            raise ValueError(
                f"Max shape {self.max_matrix.shape} does not match "
                f"allocation shape {self.allocation_matrix.shape}"
            )
        if self.available_vector.shape != (self.num_resources,):
            raise ValueError(
                f"Available vector has {self.available_vector.size} entries, "
                f"expected {self.num_resources}"
            )

        if self.total_vector is None:
            self.total_vector = self.available_vector + self.allocation_matrix.sum(axis=0)
        else:
            self.total_vector = np.array(self.total_vector, dtype=int)

    @classmethod
    def from_lists(
        cls,
        max_matrix: List[List[int]],
        allocation_matrix: List[List[int]],
        available_vector: List[int]
    ) -> "MatrixState":
        """Build a state from plain nested lists."""
        return cls(
            max_matrix=np.array(max_matrix, dtype=int),
            allocation_matrix=np.array(allocation_matrix, dtype=int),
            available_vector=np.array(available_vector, dtype=int)
        )

    @property
    def num_processes(self) -> int:
        """Number of processes in the level."""
        return self.max_matrix.shape[0]

    @property
    def num_resources(self) -> int:
        """Number of resource types in the level."""
        return self.max_matrix.shape[1]

    @property
    def need_matrix(self) -> np.ndarray:
        """
        Get need matrix [P][R].
        Computed as: Need = Max - Allocation, on every access.
        """
        return self.max_matrix - self.allocation_matrix

    def copy(self) -> "MatrixState":
        """Deep copy used for trial transitions."""
        return MatrixState(
            max_matrix=self.max_matrix.copy(),
            allocation_matrix=self.allocation_matrix.copy(),
            available_vector=self.available_vector.copy(),
            total_vector=self.total_vector.copy()
        )

    def complete_process(self, index: int) -> None:
        """
        Grant a process its remaining need, then release everything it holds.

        Args:
            index: Process index

        Raises:
            ValueError: If the remaining need exceeds available resources
        """
        need = self.need_matrix[index]
        if np.any(need > self.available_vector):
            raise ValueError(
                f"P{index}: need {need.tolist()} exceeds available "
                f"{self.available_vector.tolist()}"
            )

        # Allocate remaining need (process reaches its max demand)
        self.allocation_matrix[index] += need
        self.available_vector -= need

        # Process finishes and returns its whole holding
        self.available_vector += self.allocation_matrix[index]
        self.allocation_matrix[index] = 0

    def snapshot(self) -> Dict:
        """
        Create snapshot of the matrices for display or comparison.

        Returns:
            Dictionary of plain lists
        """
        return {
            'max': self.max_matrix.tolist(),
            'allocation': self.allocation_matrix.tolist(),
            'need': self.need_matrix.tolist(),
            'available': self.available_vector.tolist()
        }

    def display(self) -> str:
        """
        Generate readable string representation of the matrices.

        Returns:
            Formatted string showing all matrices and vectors
        """
        output = []
        output.append("\n" + "="*60)
        output.append("MATRIX STATE")
        output.append("="*60)

        header = "     " + " ".join([f"R{j:2}" for j in range(self.num_resources)])

        output.append("\nAvailable Resources:")
        output.append("  [" + ", ".join(
            f"R{j}:{self.available_vector[j]:2}" for j in range(self.num_resources)
        ) + "]")

        for title, matrix in (
            ("Max Matrix", self.max_matrix),
            ("Allocation Matrix", self.allocation_matrix),
            ("Need Matrix (Max - Allocation)", self.need_matrix),
        ):
            output.append(f"\n{title}:")
            output.append(header)
            for i in range(self.num_processes):
                row = f"  P{i}: "
                row += " ".join([f"{matrix[i][j]:3}" for j in range(self.num_resources)])
                output.append(row)

        output.append("\n" + "="*60)
        return "\n".join(output)

    def assert_resource_conservation(self, context=""):
        """Verify resource conservation: allocated + available = total for all resources.

        Args:
            context: Description of when this check is being run (for error messages)

        Raises:
            AssertionError: If resource conservation is violated
        """
        for j in range(self.num_resources):
            allocated = self.allocation_matrix[:, j].sum()
            available = self.available_vector[j]
            total = self.total_vector[j]

            assert allocated + available == total, (
                f"Resource conservation violated for R{j} {context}\n"
                f"  Allocated: {allocated}, Available: {available}, Total: {total}\n"
                f"  Allocated + Available = {allocated + available} != {total}"
            )

            assert available >= 0, (
                f"Negative available resources for R{j} {context}\n"
                f"  Available: {available}"
            )

        assert np.all(self.allocation_matrix <= self.max_matrix), (
            f"Allocation exceeds max demand {context}"
        )
