"""
Game settings for Deadlock Avoidance Lab.

Defaults match the classroom game; a JSON file can override any of them.
"""

import json
from dataclasses import dataclass, fields, asdict
from typing import Any, Dict, Optional


class SettingsLoadError(Exception):
    """Exception raised when a settings file cannot be loaded or is invalid."""
    pass


@dataclass
class GameSettings:
    """
    Tunable game parameters.

    Attributes:
        timer_duration: Seconds on the clock for level 1
        min_timer: Lower bound for later levels
        timer_step: Seconds removed per level after level 1
        points_per_execution: Score for each completed process
        time_bonus: Score per second left when a level is cleared
        max_levels: Highest playable level
        max_processes: Cap on processes in a generated level
        random_resources: Resource types in a generated level
        safe_trim_attempts: Passes allowed to make a generated level safe
        canvas_width, canvas_height: Graph playground bounds
        max_high_scores: Entries kept on the high-score board
    """
    timer_duration: int = 60
    min_timer: int = 30
    timer_step: int = 5
    points_per_execution: int = 100
    time_bonus: int = 10
    max_levels: int = 5
    max_processes: int = 6
    random_resources: int = 3
    safe_trim_attempts: int = 10
    canvas_width: int = 800
    canvas_height: int = 500
    max_high_scores: int = 10

    def time_for_level(self, level: int) -> int:
        """Clock for a level: full duration on level 1, shrinking afterwards."""
        if level <= 1:
            return self.timer_duration
        return max(self.min_timer, self.timer_duration - level * self.timer_step)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary of all settings."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameSettings":
        """
        Build settings from a dictionary of overrides.

        Raises:
            SettingsLoadError: On unknown keys or non-integer values
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise SettingsLoadError(f"Unknown settings: {', '.join(sorted(unknown))}")

        for key, value in data.items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise SettingsLoadError(f"Setting '{key}' must be an integer, got {value!r}")
            if value < 0:
                raise SettingsLoadError(f"Setting '{key}' cannot be negative")

        return cls(**data)


def load_settings(file_path: Optional[str] = None) -> GameSettings:
    """
    Load settings from a JSON file, or defaults when no path is given.

    Args:
        file_path: Optional path to a JSON object of overrides

    Returns:
        GameSettings instance

    Raises:
        SettingsLoadError: If the file cannot be read or is invalid
    """
    if file_path is None:
        return GameSettings()

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise SettingsLoadError(f"Settings file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise SettingsLoadError(f"Invalid JSON in settings file: {e}")

    if not isinstance(data, dict):
        raise SettingsLoadError("Settings file must contain a JSON object")

    return GameSettings.from_dict(data)
