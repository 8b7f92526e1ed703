"""
Metrics Tracking for Deadlock Avoidance Lab.

Tracks player performance across the levels of one game session.
"""

from dataclasses import dataclass, field
from typing import Dict, List
import statistics


@dataclass
class LevelResult:
    """Outcome of one cleared level."""
    level: int
    executions: int
    time_remaining: int
    time_bonus: int


@dataclass
class GameMetrics:
    """
    Accumulated metrics for a single game session.

    Tracks:
    1. Executions: processes completed successfully
    2. Denials per reason: insufficient resources / unsafe transition / no selection
    3. Per-level results: time left and bonus when each level was cleared
    4. Resource utilization %: allocated/total sampled after each execution
    """
    executions: int = 0
    denials: Dict[str, int] = field(default_factory=dict)
    levels: List[LevelResult] = field(default_factory=list)
    utilization_samples: List[float] = field(default_factory=list)

    def record_execution(self, allocated_instances: int, total_instances: int) -> None:
        """
        Record a committed execution and sample utilization.

        Args:
            allocated_instances: Sum of allocated instances after the commit
            total_instances: Sum of total instances across all resources
        """
        self.executions += 1
        if total_instances > 0:
            self.utilization_samples.append((allocated_instances / total_instances) * 100)

    def record_denial(self, reason: str) -> None:
        """Record a rejected execution by reason."""
        self.denials[reason] = self.denials.get(reason, 0) + 1

    def record_level(self, level: int, executions: int, time_remaining: int, time_bonus: int) -> None:
        """Record a cleared level."""
        self.levels.append(LevelResult(level, executions, time_remaining, time_bonus))

    @property
    def total_denials(self) -> int:
        return sum(self.denials.values())

    @property
    def levels_completed(self) -> int:
        return len(self.levels)

    def get_accuracy(self) -> float:
        """Share of execute attempts that succeeded."""
        attempts = self.executions + self.total_denials
        if attempts == 0:
            return 0.0
        return self.executions / attempts

    def get_avg_time_remaining(self) -> float:
        """Average clock left when levels were cleared."""
        if not self.levels:
            return 0.0
        return statistics.mean(r.time_remaining for r in self.levels)

    def get_avg_utilization(self) -> float:
        """Average resource utilization after executions."""
        if not self.utilization_samples:
            return 0.0
        return statistics.mean(self.utilization_samples)

    def display(self) -> str:
        """Format metrics for display."""
        lines = [
            "Game Metrics:",
            f"  Executions: {self.executions}",
            f"  Denials: {self.total_denials}",
        ]
        for reason, count in sorted(self.denials.items()):
            lines.append(f"    {reason}: {count}")
        lines.append(f"  Accuracy: {self.get_accuracy():.2%}")
        lines.append(f"  Levels completed: {self.levels_completed}")
        lines.append(f"  Avg time remaining: {self.get_avg_time_remaining():.1f}s")
        lines.append(f"  Avg utilization: {self.get_avg_utilization():.2f}%")
        return "\n".join(lines)
