"""
Scenario Loader for Deadlock Avoidance Lab.

Provides the built-in levels, loads and validates JSON scenario files, and
generates random levels for the later stages of the game.
"""

import json
import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from models.system_state import MatrixState
from utils.config import GameSettings


class ScenarioLoadError(Exception):
    """Exception raised when scenario file cannot be loaded or is invalid."""
    pass


@dataclass
class Scenario:
    """
    A level definition.

    Attributes:
        max_matrix: [P][R] maximum demand
        allocation_matrix: [P][R] initial allocation
        available_vector: [R] initially free instances
        description: Short text shown when the level starts
    """
    max_matrix: List[List[int]]
    allocation_matrix: List[List[int]]
    available_vector: List[int]
    description: str = ""

    @property
    def num_processes(self) -> int:
        return len(self.max_matrix)

    @property
    def num_resources(self) -> int:
        return len(self.available_vector)

    def to_state(self) -> MatrixState:
        """Fresh MatrixState for this scenario (lists are copied)."""
        return MatrixState.from_lists(
            self.max_matrix,
            self.allocation_matrix,
            self.available_vector
        )


BUILTIN_SCENARIOS: Dict[int, Scenario] = {
    1: Scenario(
        max_matrix=[[7, 5, 3], [3, 2, 2]],
        allocation_matrix=[[0, 1, 0], [2, 0, 0]],
        available_vector=[5, 4, 3],
        description="Basic scenario with 2 processes and 3 resource types"
    ),
    2: Scenario(
        max_matrix=[[7, 5, 3], [3, 2, 2], [9, 0, 2], [2, 2, 2]],
        allocation_matrix=[[0, 1, 0], [2, 0, 0], [3, 0, 2], [2, 1, 1]],
        available_vector=[3, 3, 2],
        description="Intermediate scenario with 4 processes"
    ),
}


def load_scenario(file_path: str) -> Scenario:
    """
    Load scenario from JSON file.

    Expected keys: "max", "allocation", "available", optional "description".

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Validated Scenario

    Raises:
        ScenarioLoadError: If file cannot be loaded or is invalid
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ScenarioLoadError(f"Scenario file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise ScenarioLoadError(f"Invalid JSON in scenario file: {e}")

    return scenario_from_dict(data)


def scenario_from_dict(data: Dict[str, Any]) -> Scenario:
    """
    Build and validate a Scenario from parsed JSON data.

    Raises:
        ScenarioLoadError: On missing fields, ragged or negative matrices,
            or allocations above max demand
    """
    if not isinstance(data, dict):
        raise ScenarioLoadError("Scenario must be a JSON object")

    for key in ('max', 'allocation', 'available'):
        if key not in data:
            raise ScenarioLoadError(f"Scenario missing '{key}' field")

    available = _load_vector(data['available'], 'available')
    num_resources = len(available)
    max_matrix = _load_matrix(data['max'], 'max', num_resources)
    allocation = _load_matrix(data['allocation'], 'allocation', num_resources)

    if len(max_matrix) != len(allocation):
        raise ScenarioLoadError(
            f"'max' has {len(max_matrix)} rows but 'allocation' has {len(allocation)}"
        )
    if not max_matrix:
        raise ScenarioLoadError("Scenario must define at least one process")

    _validate_allocations(max_matrix, allocation)

    return Scenario(
        max_matrix=max_matrix,
        allocation_matrix=allocation,
        available_vector=available,
        description=str(data.get('description', ''))
    )


def _load_vector(values: Any, name: str) -> List[int]:
    """Validate a non-empty vector of non-negative integers."""
    if not isinstance(values, list) or not values:
        raise ScenarioLoadError(f"'{name}' must be a non-empty list")
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ScenarioLoadError(f"'{name}' contains non-integer value {value!r}")
        if value < 0:
            raise ScenarioLoadError(f"'{name}' contains negative value {value}")
    return list(values)


def _load_matrix(rows: Any, name: str, num_resources: int) -> List[List[int]]:
    """Validate a matrix whose rows all have num_resources entries."""
    if not isinstance(rows, list):
        raise ScenarioLoadError(f"'{name}' must be a list of rows")

    matrix = []
    for i, row in enumerate(rows):
        row = _load_vector(row, f"{name}[{i}]")
        if len(row) != num_resources:
            raise ScenarioLoadError(
                f"'{name}' row P{i} has {len(row)} entries, expected {num_resources}"
            )
        matrix.append(row)
    return matrix


def _validate_allocations(max_matrix: List[List[int]], allocation: List[List[int]]) -> None:
    """
    Check Allocation <= Max for every process and resource.

    Raises:
        ScenarioLoadError: Listing every offending cell
    """
    errors = []
    for i, (max_row, alloc_row) in enumerate(zip(max_matrix, allocation)):
        for j, (mx, al) in enumerate(zip(max_row, alloc_row)):
            if al > mx:
                errors.append(f"P{i}: R{j} allocation {al} exceeds max demand {mx}")

    if errors:
        raise ScenarioLoadError(
            "Invalid initial allocations:\n" + "\n".join(f"  - {e}" for e in errors)
        )


def generate_random_scenario(
    num_processes: int,
    num_resources: int,
    rng: Optional[np.random.Generator] = None
) -> Scenario:
    """
    Generate a random level.

    For each cell: Max in [1, 10], Allocation in [0, Max]. Each resource type
    gets a random total in [10, 24]; Available = max(0, total - allocated).
    The result is not guaranteed to be safe.

    Args:
        num_processes: Number of processes
        num_resources: Number of resource types
        rng: Optional numpy Generator (seed it for reproducible levels)

    Returns:
        Generated Scenario
    """
    if rng is None:
        rng = np.random.default_rng()

    max_matrix = rng.integers(1, 11, size=(num_processes, num_resources))
    allocation = rng.integers(0, max_matrix + 1)
    totals = rng.integers(10, 25, size=num_resources)
    available = np.maximum(0, totals - allocation.sum(axis=0))

    return Scenario(
        max_matrix=max_matrix.tolist(),
        allocation_matrix=allocation.tolist(),
        available_vector=available.tolist(),
        description=f"Random scenario with {num_processes} processes"
    )


def scenario_for_level(
    level: int,
    settings: Optional[GameSettings] = None,
    rng: Optional[np.random.Generator] = None
) -> Scenario:
    """
    Scenario for a level: built-in when one exists, random otherwise.

    Random levels get level + 2 processes, capped at settings.max_processes.
    """
    if level in BUILTIN_SCENARIOS:
        return BUILTIN_SCENARIOS[level]

    settings = settings or GameSettings()
    num_processes = min(level + 2, settings.max_processes)
    return generate_random_scenario(num_processes, settings.random_resources, rng)
