"""
Event Model for Deadlock Avoidance Lab.

Defines event types for tracking game actions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EventType(Enum):
    """Types of events in the game."""
    LOAD = "load"
    SELECT = "select"
    EXECUTE = "execute"
    DENIAL = "denial"
    UNSAFE = "unsafe"
    LEVEL_COMPLETE = "level_complete"
    GAME_OVER = "game_over"


@dataclass
class GameEvent:
    """
    Represents a single event in the game.

    Attributes:
        level: Level being played when the event occurred
        event_type: Type of event
        process_id: Process involved (None for level-wide events)
        time_remaining: Clock value when the event occurred
        message: Human-readable description
        reason: Reason for denial/game over (if applicable)
    """
    level: int
    event_type: EventType
    process_id: Optional[int] = None
    time_remaining: int = 0
    message: str = ""
    reason: str = ""

    def __str__(self) -> str:
        """Format event for logging."""
        base = f"Level {self.level} [{self.time_remaining:3}s]"
        who = f"P{self.process_id}" if self.process_id is not None else "-"

        if self.event_type == EventType.EXECUTE:
            return f"{base}: {who} - COMPLETED ({self.message})"
        elif self.event_type in (EventType.DENIAL, EventType.UNSAFE):
            return f"{base}: {who} - DENIED ({self.reason})"
        elif self.event_type == EventType.SELECT:
            return f"{base}: {who} selected"
        elif self.event_type == EventType.GAME_OVER:
            return f"{base}: GAME OVER ({self.reason})"
        else:
            return f"{base}: {self.event_type.value} {self.message}".rstrip()


@dataclass
class EventLog:
    """Collection of game events."""
    events: list = None

    def __post_init__(self):
        if self.events is None:
            self.events = []

    def add(self, event: GameEvent) -> None:
        """Add an event to the log."""
        self.events.append(event)

    def get_events_by_type(self, event_type: EventType) -> list:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]

    def get_events_by_level(self, level: int) -> list:
        """Get all events from a specific level."""
        return [e for e in self.events if e.level == level]

    def display(self) -> str:
        """Format all events for display."""
        return "\n".join(str(event) for event in self.events)
