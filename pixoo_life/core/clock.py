"""Tick counter and frame pacing for the display loop."""

import time

from pixoo_life.core.config import FRAME_INTERVAL_MS


class SimClock:
    """Counts ticks and paces frames with a fixed pause."""

    def __init__(self, interval_ms: int = FRAME_INTERVAL_MS) -> None:
        self.tick: int = 0
        self.interval_ms = interval_ms

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0

    def advance(self) -> None:
        """Advance the clock by one tick."""
        self.tick += 1

    def pause(self) -> None:
        """Sleep for one frame interval. A zero interval does not sleep."""
        if self.interval_ms > 0:
            time.sleep(self.interval_seconds)
