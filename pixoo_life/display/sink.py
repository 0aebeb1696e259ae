"""Display sinks: where a finished frame goes.

The simulations only ever call ``clear``, ``draw_pixel`` and ``push``. The
base class owns the RGB buffer; subclasses decide what ``push`` does with it.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from pixoo_life.core.config import BACKGROUND_COLOR, GRID_SIZE

RGB = tuple[int, int, int]


class DisplayError(RuntimeError):
    """A frame could not be delivered."""


def clamp_color(color: RGB) -> RGB:
    r, g, b = color
    return (
        max(0, min(255, int(r))),
        max(0, min(255, int(g))),
        max(0, min(255, int(b))),
    )


class DisplaySink:
    """A square RGB frame buffer with a pluggable ``push``."""

    def __init__(self, size: int = GRID_SIZE) -> None:
        self.size = size
        self.buffer = np.zeros((size, size, 3), dtype=np.uint8)

    def clear(self, color: RGB = BACKGROUND_COLOR) -> None:
        """Fill the whole buffer with one colour."""
        self.buffer[:, :] = clamp_color(color)

    def draw_pixel(self, x: int, y: int, color: RGB) -> None:
        """Set one pixel. Coordinates outside the display are ignored."""
        if x < 0 or x >= self.size or y < 0 or y >= self.size:
            return
        self.buffer[y, x] = clamp_color(color)

    def pixel(self, x: int, y: int) -> RGB:
        r, g, b = self.buffer[y, x]
        return int(r), int(g), int(b)

    def to_bytes(self) -> bytes:
        """Row-major RGB bytes (index = x + y * size), the device wire order."""
        return self.buffer.tobytes()

    def push(self) -> None:
        raise NotImplementedError


class BufferSink(DisplaySink):
    """In-process sink that counts pushes and optionally keeps every frame."""

    def __init__(self, size: int = GRID_SIZE, keep_frames: bool = False,
                 max_frames: Optional[int] = None) -> None:
        super().__init__(size)
        self.keep_frames = keep_frames
        self.max_frames = max_frames
        self.frames: list[np.ndarray] = []
        self.push_count: int = 0

    def push(self) -> None:
        self.push_count += 1
        if self.keep_frames:
            self.frames.append(self.buffer.copy())
            if self.max_frames is not None and len(self.frames) > self.max_frames:
                self.frames.pop(0)

    @property
    def last_frame(self) -> Optional[np.ndarray]:
        return self.frames[-1] if self.frames else None
