"""
Logger utility for Deadlock Avoidance Lab.

Provides level-by-level logging of game actions with verbosity levels.
"""

from typing import List, Optional
from datetime import datetime


class SimulatorLogger:
    """
    Logger for game events and decisions.

    Format: "Level X: P2 executes - COMPLETED (reason)"
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None, quiet: bool = False):
        """
        Initialize logger.

        Args:
            verbose: Enable debug output
            log_file: Optional file path for logging
            quiet: Suppress console output (file output is kept)
        """
        self.verbose = verbose
        self.quiet = quiet
        self.log_file = log_file
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Game Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        if not self.quiet:
            print(formatted)

        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_level(self, level: int, message: str, severity: str = "info") -> None:
        """Log a message tagged with the game level."""
        self.log(f"Level {level}: {message}", severity)

    def log_execute(self, level: int, pid: int, points: int, sequence: List[int]) -> None:
        """
        Log a committed process execution.

        Args:
            level: Current game level
            pid: Process index that completed
            points: Points awarded
            sequence: Safe sequence of the remaining state
        """
        seq_str = " -> ".join(f"P{i}" for i in sequence) or "(none)"
        self.log_level(level, f"P{pid} executes - COMPLETED (+{points}, safe sequence: {seq_str})")

    def log_denial(self, level: int, pid: Optional[int], reason: str) -> None:
        """
        Log a rejected execution.

        Args:
            level: Current game level
            pid: Selected process, or None if nothing was selected
            reason: Reason for the rejection
        """
        who = f"P{pid}" if pid is not None else "No process"
        self.log_level(level, f"{who} executes - DENIED ({reason})", "warning")

    def log_level_complete(self, level: int, bonus: int, score: int) -> None:
        """Log a cleared level."""
        self.log_level(level, f"LEVEL COMPLETE - time bonus {bonus}, score {score}")

    def log_game_over(self, level: int, reason: str, score: int) -> None:
        """Log the end of the game."""
        self.log_level(level, f"GAME OVER - {reason} (final score {score})")

    def log_cycle_status(self, has_cycle: bool, cycle_labels: List[str]) -> None:
        """
        Log the outcome of a cycle detection run.

        Args:
            has_cycle: Whether a cycle was found
            cycle_labels: "A->B" strings for the marked edges
        """
        if has_cycle:
            self.log(f"Deadlock detected! Cycle edges: [{', '.join(cycle_labels)}]")
        else:
            self.log("No cycles detected", "debug")

    def log_state(self, level: int, state_str: str) -> None:
        """
        Log matrix state snapshot.

        Args:
            level: Current game level
            state_str: Formatted matrix state
        """
        if self.verbose:
            self.log_level(level, f"Matrix State:\n{state_str}", "debug")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
