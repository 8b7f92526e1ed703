"""
High-score board for Deadlock Avoidance Lab.

Keeps the best final scores, highest first, optionally backed by a JSON file.
"""

import json
from dataclasses import dataclass, asdict
from datetime import date
from pathlib import Path
from typing import List, Optional

from utils.config import GameSettings


@dataclass
class ScoreRecord:
    """A final score and the day it was set."""
    score: int
    date: str


class HighScoreBoard:
    """
    Capped list of ScoreRecords sorted by score, descending.

    Ties keep insertion order (earlier scores rank first).
    """

    def __init__(self, max_entries: int = 10, file_path: Optional[str] = None):
        """
        Initialize the board, reading file_path if it exists.

        Args:
            max_entries: Number of records kept
            file_path: Optional JSON file used by load() and save()
        """
        self.max_entries = max_entries
        self.file_path = Path(file_path) if file_path else None
        self.records: List[ScoreRecord] = []

        if self.file_path and self.file_path.exists():
            self.load()

    @classmethod
    def from_settings(cls, settings: GameSettings, file_path: Optional[str] = None) -> "HighScoreBoard":
        """Board capped at settings.max_high_scores."""
        return cls(max_entries=settings.max_high_scores, file_path=file_path)

    def add(self, score: int, when: Optional[date] = None) -> Optional[int]:
        """
        Submit a final score.

        Args:
            score: Final game score
            when: Day the score was set (today by default)

        Returns:
            1-based rank on the board, or None if it did not make the cut
        """
        record = ScoreRecord(score=int(score), date=(when or date.today()).isoformat())
        self.records.append(record)
        self.records.sort(key=lambda r: r.score, reverse=True)
        del self.records[self.max_entries:]

        if self.file_path:
            self.save()

        for rank, kept in enumerate(self.records, start=1):
            if kept is record:
                return rank
        return None

    def best(self) -> Optional[ScoreRecord]:
        """Top record, if any."""
        return self.records[0] if self.records else None

    def load(self) -> None:
        """
        Replace the records with the contents of the file.

        Unreadable files leave the board empty rather than failing the game.
        """
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            self.records = []
            return

        records = []
        for item in data if isinstance(data, list) else []:
            if isinstance(item, dict) and isinstance(item.get('score'), int):
                records.append(ScoreRecord(score=item['score'], date=str(item.get('date', ''))))

        records.sort(key=lambda r: r.score, reverse=True)
        self.records = records[:self.max_entries]

    def save(self) -> None:
        """Write the records to the file."""
        with open(self.file_path, 'w', encoding='utf-8') as f:
            json.dump([asdict(r) for r in self.records], f, indent=2)

    def display(self) -> str:
        """Format the board for display."""
        if not self.records:
            return "No scores yet! Play to set your first score."
        return "\n".join(
            f"#{rank:<3} {r.score:>6} points  {r.date}"
            for rank, r in enumerate(self.records, start=1)
        )
