"""Category logger for simulation events.

Entries are buffered while a tick runs and written out by ``flush_tick``.
Verbosity only decides what gets printed or written to the log file; every
entry is kept in memory for ``export_json``.
"""

from __future__ import annotations

import json
import os
import sys
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Optional, TextIO


@dataclass
class LogEntry:
    tick: int
    category: str
    message: str
    data: dict = field(default_factory=dict)

    def format(self) -> str:
        return f"[Tick {self.tick:>5}] [{self.category:<10}] {self.message}"


class SimLogger:
    """Buffered category logger with a verbosity threshold."""

    LIFECYCLE = "LIFECYCLE"
    GENERATION = "GENERATION"
    ERROR = "ERROR"
    COLONY = "COLONY"
    TRIBE = "TRIBE"
    BREEDING = "BREEDING"

    # minimum verbosity at which each category is shown; unknown ones need 3
    LEVELS: dict[str, int] = {
        LIFECYCLE: 0,
        GENERATION: 0,
        ERROR: 0,
        COLONY: 1,
        TRIBE: 1,
        BREEDING: 2,
    }

    def __init__(
        self,
        verbosity: int = 1,
        log_file: Optional[str] = None,
        stdout: bool = True,
    ) -> None:
        """
        verbosity levels:
            0 = lifecycle, generation and errors
            1 = + colony and tribe status tables
            2 = + every bred genome
            3 = everything (debug)
        """
        self.verbosity = verbosity
        self._stdout = stdout
        self._pending: list[LogEntry] = []
        self._history: list[LogEntry] = []
        self._file: Optional[TextIO] = None
        if log_file:
            _ensure_parent(log_file)
            self._file = open(log_file, "w", encoding="utf-8")

    @property
    def entries(self) -> list[LogEntry]:
        """Every flushed entry plus whatever is still buffered."""
        return self._history + self._pending

    def log(self, category: str, message: str, tick: int = 0, **data) -> None:
        self._pending.append(LogEntry(tick, category, message, data))

    def visible(self, entry: LogEntry) -> bool:
        return self.LEVELS.get(entry.category, 3) <= self.verbosity

    def flush_tick(self, tick: int) -> None:
        """Print and write the entries buffered since the last flush."""
        shown = [e for e in self._pending if self.visible(e)]
        for entry in shown:
            line = entry.format()
            if self._stdout:
                print(line, file=sys.stderr if entry.category == self.ERROR else sys.stdout)
            if self._file:
                self._file.write(line + "\n")
        if self._file and shown:
            self._file.flush()

        self._history.extend(self._pending)
        self._pending = []

    def by_category(self, category: str) -> list[LogEntry]:
        return [e for e in self.entries if e.category == category]

    def category_counts(self) -> Counter:
        return Counter(e.category for e in self.entries)

    def export_json(self, filepath: str) -> None:
        _ensure_parent(filepath)
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump([asdict(e) for e in self.entries], f, indent=2, default=str)

    def close(self) -> None:
        if self._file:
            self._file.close()
            self._file = None


def _ensure_parent(path: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
