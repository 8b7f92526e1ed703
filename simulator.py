"""
Deadlock Avoidance Lab - Banker's Algorithm game.

The AllocationSimulator drives one game session: levels are loaded from
built-in, JSON or random scenarios, the player picks processes to run to
completion, and every execution is guarded by the Banker's safety check.
The presentation layer owns the real clock and calls tick() once a second.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from models.system_state import MatrixState
from algorithms.avoidance import can_satisfy, is_safe_state
from algorithms.recovery import trim_until_safe
from analysis.events import EventLog, GameEvent, EventType
from analysis.metrics import GameMetrics
from utils.config import GameSettings
from utils.logger import SimulatorLogger
from utils.scenario_loader import Scenario, scenario_for_level


class GamePhase(Enum):
    """Lifecycle of a level."""
    LOADED = "loaded"
    RUNNING = "running"
    PAUSED = "paused"
    LEVEL_COMPLETE = "level_complete"
    GAME_OVER = "game_over"


class GameOverReason(Enum):
    """Why a game ended."""
    TIME_EXPIRED = "Time's up!"
    UNSAFE_STATE = "System entered an unsafe state"


class GameError(Exception):
    """Base class for rejected game actions."""
    pass


class NoProcessSelected(GameError):
    """Execute was called with no pending selection."""

    def __init__(self):
        super().__init__("Please select a process first!")


class InsufficientResources(GameError):
    """The selected process needs more than is currently available."""

    def __init__(self, process: int, need: List[int], available: List[int]):
        self.process = process
        self.need = need
        self.available = available
        super().__init__(
            f"Cannot satisfy P{process}: need {need} exceeds available {available}"
        )


class UnsafeTransition(GameError):
    """Completing the selected process would leave the system unsafe."""

    def __init__(self, process: int):
        self.process = process
        super().__init__(f"Unsafe allocation for P{process} - action reverted")


class GamePaused(GameError):
    """Action attempted while the game is paused."""

    def __init__(self):
        super().__init__("Game is paused")


class GameOver(GameError):
    """The game has ended; only a restart or a new game can continue."""

    def __init__(self, reason: GameOverReason, score: int):
        self.reason = reason
        self.score = score
        super().__init__(f"Game over: {reason.value} (score {score})")


@dataclass(frozen=True)
class GameSnapshot:
    """
    Read-only view of the game handed to the presentation layer.

    Matrices are plain lists so snapshots compare by value.
    """
    level: int
    phase: GamePhase
    score: int
    time_remaining: int
    max: List[List[int]]
    allocation: List[List[int]]
    need: List[List[int]]
    available: List[int]
    is_safe: bool
    safe_sequence: List[int]
    completed: Tuple[int, ...] = ()
    selected: Optional[int] = None
    description: str = ""
    ready: List[int] = field(default_factory=list)


class AllocationSimulator:
    """
    Banker's Algorithm game loop.

    Phases per level: LOADED -> RUNNING <-> PAUSED -> LEVEL_COMPLETE | GAME_OVER.
    The clock is armed on load and starts on the first successful execution.
    """

    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        logger: Optional[SimulatorLogger] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize a game session (no level loaded yet).

        Args:
            settings: Game parameters (defaults when omitted)
            logger: Logger for game events
            seed: Optional seed for random levels
        """
        self.settings = settings or GameSettings()
        self.logger = logger or SimulatorLogger()
        self.rng = np.random.default_rng(seed)
        self.event_log = EventLog()
        self.metrics = GameMetrics()

        self.level = 1
        self.score = 0
        self.time_remaining = self.settings.time_for_level(self.level)
        self.state: Optional[MatrixState] = None
        self.description = ""
        self.completed = set()
        self.selected: Optional[int] = None
        self.phase = GamePhase.LOADED
        self.timer_running = False
        self.game_over_reason: Optional[GameOverReason] = None
        self.last_level_bonus = 0
        self._level_executions = 0
        self._phase_before_pause = GamePhase.LOADED

    # -- Level lifecycle -------------------------------------------------

    def start_game(self, level: int = 1) -> GameSnapshot:
        """Reset score and metrics and load the given level."""
        self.score = 0
        self.metrics = GameMetrics()
        return self.load_level(level)

    def load_level(self, level: int) -> GameSnapshot:
        """
        Load a level: built-in scenario when one exists, random otherwise.

        Args:
            level: Level number (1-based)

        Returns:
            Snapshot of the freshly loaded level
        """
        scenario = scenario_for_level(level, self.settings, self.rng)
        return self.load_scenario(scenario, level)

    def load_scenario(self, scenario: Scenario, level: Optional[int] = None) -> GameSnapshot:
        """
        Install a scenario as the current level.

        An unsafe starting state is trimmed (allocations released) until safe;
        if the trimming budget runs out the level loads as it is.

        Args:
            scenario: Level definition
            level: Level number to record (keeps the current one when omitted)

        Returns:
            Snapshot of the loaded level
        """
        if level is not None:
            self.level = level

        self.state = scenario.to_state()
        self.description = scenario.description
        self.completed = set()
        self.selected = None
        self.phase = GamePhase.LOADED
        self.timer_running = False
        self.game_over_reason = None
        self.last_level_bonus = 0
        self._level_executions = 0
        self.time_remaining = self.settings.time_for_level(self.level)

        if not is_safe_state(self.state).safe:
            is_safe, attempts = trim_until_safe(self.state, self.settings.safe_trim_attempts)
            if is_safe:
                self.logger.log_level(
                    self.level, f"Initial state trimmed to safety in {attempts} pass(es)", "debug"
                )
            else:
                self.logger.log_level(
                    self.level,
                    f"Initial state still unsafe after {attempts} pass(es); loading best-effort",
                    "warning"
                )

        self.state.assert_resource_conservation("after loading level")

        snapshot = self.snapshot()
        self.event_log.add(GameEvent(
            level=self.level,
            event_type=EventType.LOAD,
            time_remaining=self.time_remaining,
            message=self.description
        ))
        self.logger.log_level(
            self.level,
            f"Loaded {self.state.num_processes} processes x {self.state.num_resources} resources "
            f"({'safe' if snapshot.is_safe else 'UNSAFE'})"
        )
        self.logger.log_state(self.level, self.state.display())
        return snapshot

    def next_level(self) -> GameSnapshot:
        """
        Advance after a cleared level.

        Raises:
            GameError: If the level is not complete or this was the last level
        """
        if self.phase != GamePhase.LEVEL_COMPLETE:
            raise GameError("Finish the current level first")
        if not self.has_next_level:
            raise GameError(f"No more levels after level {self.level}")
        return self.load_level(self.level + 1)

    def restart_level(self) -> GameSnapshot:
        """
        Start the current level over with a zero score.

        A "play again" control after game over should call start_game(),
        which goes back to level 1; this method replays the current level.
        """
        self.score = 0
        return self.load_level(self.level)

    @property
    def has_next_level(self) -> bool:
        """True while the current level is below settings.max_levels."""
        return self.level < self.settings.max_levels

    # -- Player actions --------------------------------------------------

    def select_process(self, index: int) -> bool:
        """
        Mark a process as the pending selection.

        Args:
            index: Process index

        Returns:
            False (nothing changes) if the index is invalid or already completed
        """
        self._ensure_playable()

        if not 0 <= index < self.state.num_processes:
            self.logger.log_level(self.level, f"P{index} does not exist", "warning")
            return False
        if index in self.completed:
            self.logger.log_level(self.level, f"P{index} has already completed", "warning")
            return False

        self.selected = index
        if not can_satisfy(self.state.need_matrix[index], self.state.available_vector):
            self.logger.log_level(
                self.level, f"P{index} selected - insufficient resources available", "warning"
            )

        self.event_log.add(GameEvent(
            level=self.level,
            event_type=EventType.SELECT,
            process_id=index,
            time_remaining=self.time_remaining
        ))
        return True

    def execute(self) -> GameSnapshot:
        """
        Run the selected process to completion.

        Steps:
        1. Require a selection and Need[i] <= Available
        2. On a copy: allocate the remaining need, then release everything
           the process holds
        3. Run the safety check on the copy (Need recomputed)
        4. If safe: commit, score, start the clock; if unsafe: discard

        Returns:
            Snapshot after the commit

        Raises:
            NoProcessSelected: No pending selection
            InsufficientResources: Need exceeds available (nothing changes)
            UnsafeTransition: Trial state unsafe (nothing changes)
            GameOver: The game has already ended
        """
        self._ensure_playable()

        if self.selected is None:
            self._deny(None, "no process selected", EventType.DENIAL)
            raise NoProcessSelected()

        index = self.selected
        need = self.state.need_matrix[index]
        available = self.state.available_vector

        if not can_satisfy(need, available):
            self._deny(index, "insufficient resources", EventType.DENIAL)
            raise InsufficientResources(index, need.tolist(), available.tolist())

        # Trial transition on a copy so a rejection leaves no trace
        trial = self.state.copy()
        trial.complete_process(index)
        safety = is_safe_state(trial)

        if not safety.safe:
            self._deny(index, "unsafe state", EventType.UNSAFE)
            raise UnsafeTransition(index)

        # Commit
        self.state = trial
        self.state.assert_resource_conservation(f"after completing P{index}")
        self.completed.add(index)
        self.selected = None
        self.score += self.settings.points_per_execution
        self._level_executions += 1

        if not self.timer_running:
            self.timer_running = True
        if self.phase == GamePhase.LOADED:
            self.phase = GamePhase.RUNNING

        self.metrics.record_execution(
            int(self.state.allocation_matrix.sum()),
            int(self.state.total_vector.sum())
        )
        self.event_log.add(GameEvent(
            level=self.level,
            event_type=EventType.EXECUTE,
            process_id=index,
            time_remaining=self.time_remaining,
            message=f"safe sequence {safety.describe()}"
        ))
        self.logger.log_execute(self.level, index, self.settings.points_per_execution, safety.sequence)

        if len(self.completed) == self.state.num_processes:
            self._complete_level()

        return self.snapshot()

    def tick(self) -> Optional[GameOverReason]:
        """
        Advance the clock by one second.

        Ignored until the first successful execution, while paused, and once
        the level has ended.

        Returns:
            TIME_EXPIRED when this tick ended the game, else None
        """
        if not self.timer_running or self.phase != GamePhase.RUNNING:
            return None

        self.time_remaining -= 1
        if self.time_remaining <= 0:
            self.time_remaining = 0
            self._game_over(GameOverReason.TIME_EXPIRED)
            return GameOverReason.TIME_EXPIRED
        return None

    def check_safety(self) -> GameSnapshot:
        """
        Re-evaluate safety of the current state.

        Raises:
            GameOver: If the state is unsafe (the game ends with UNSAFE_STATE)
        """
        if self.state is None:
            raise GameError("No level loaded")

        snapshot = self.snapshot()
        if not snapshot.is_safe and self.phase not in (GamePhase.GAME_OVER, GamePhase.LEVEL_COMPLETE):
            self._game_over(GameOverReason.UNSAFE_STATE)
            raise GameOver(GameOverReason.UNSAFE_STATE, self.score)
        return snapshot

    def pause(self) -> bool:
        """Freeze the clock. Returns False if there is nothing to pause."""
        if self.phase not in (GamePhase.LOADED, GamePhase.RUNNING):
            return False
        self._phase_before_pause = self.phase
        self.phase = GamePhase.PAUSED
        return True

    def resume(self) -> bool:
        """Unfreeze the clock. Returns False if the game was not paused."""
        if self.phase != GamePhase.PAUSED:
            return False
        self.phase = self._phase_before_pause
        return True

    def stop(self) -> None:
        """Cancel the clock, e.g. when the player leaves the game screen."""
        self.timer_running = False

    # -- Queries ---------------------------------------------------------

    def ready_processes(self) -> List[int]:
        """Uncompleted processes whose need fits the available vector."""
        if self.state is None:
            return []
        need = self.state.need_matrix
        return [
            i for i in range(self.state.num_processes)
            if i not in self.completed and can_satisfy(need[i], self.state.available_vector)
        ]

    def snapshot(self) -> GameSnapshot:
        """Current matrices plus safety and game context."""
        if self.state is None:
            raise GameError("No level loaded")

        safety = is_safe_state(self.state)
        matrices = self.state.snapshot()
        return GameSnapshot(
            level=self.level,
            phase=self.phase,
            score=self.score,
            time_remaining=self.time_remaining,
            max=matrices['max'],
            allocation=matrices['allocation'],
            need=matrices['need'],
            available=matrices['available'],
            is_safe=safety.safe,
            safe_sequence=list(safety.sequence) if safety.safe else [],
            completed=tuple(sorted(self.completed)),
            selected=self.selected,
            description=self.description,
            ready=self.ready_processes()
        )

    # -- Internals -------------------------------------------------------

    def _ensure_playable(self) -> None:
        if self.state is None:
            raise GameError("No level loaded")
        if self.phase == GamePhase.GAME_OVER:
            raise GameOver(self.game_over_reason, self.score)
        if self.phase == GamePhase.PAUSED:
            raise GamePaused()

    def _deny(self, index: Optional[int], reason: str, event_type: EventType) -> None:
        self.metrics.record_denial(reason)
        self.event_log.add(GameEvent(
            level=self.level,
            event_type=event_type,
            process_id=index,
            time_remaining=self.time_remaining,
            reason=reason
        ))
        self.logger.log_denial(self.level, index, reason)

    def _complete_level(self) -> None:
        self.timer_running = False
        bonus = self.time_remaining * self.settings.time_bonus
        self.last_level_bonus = bonus
        self.score += bonus
        self.phase = GamePhase.LEVEL_COMPLETE

        self.metrics.record_level(self.level, self._level_executions, self.time_remaining, bonus)
        self.event_log.add(GameEvent(
            level=self.level,
            event_type=EventType.LEVEL_COMPLETE,
            time_remaining=self.time_remaining,
            message=f"bonus {bonus}"
        ))
        self.logger.log_level_complete(self.level, bonus, self.score)

    def _game_over(self, reason: GameOverReason) -> None:
        self.timer_running = False
        self.selected = None
        self.phase = GamePhase.GAME_OVER
        self.game_over_reason = reason

        self.event_log.add(GameEvent(
            level=self.level,
            event_type=EventType.GAME_OVER,
            time_remaining=self.time_remaining,
            reason=reason.value
        ))
        self.logger.log_game_over(self.level, reason.value, self.score)
