"""Matplotlib window that stands in for the LED panel."""

from __future__ import annotations

import matplotlib.pyplot as plt

from pixoo_life.core.config import GRID_SIZE
from pixoo_life.display.sink import DisplayError, DisplaySink


class ViewerSink(DisplaySink):
    """Shows every pushed frame in an interactive figure."""

    def __init__(self, size: int = GRID_SIZE, title: str = "Pixoo", scale: float = 6.0) -> None:
        super().__init__(size)
        self.title = title
        self.scale = scale
        self._fig = None
        self._image = None
        self._initialized = False

    def initialize(self) -> None:
        """Set up the figure with a single pixel-exact image."""
        plt.ion()
        self._fig, ax = plt.subplots(figsize=(self.scale, self.scale))
        self._fig.canvas.manager.set_window_title(self.title)
        self._image = ax.imshow(self.buffer, interpolation="nearest")
        ax.set_axis_off()
        plt.tight_layout()
        self._initialized = True
        plt.pause(0.01)

    def push(self) -> None:
        if not self._initialized:
            self.initialize()
        if not plt.fignum_exists(self._fig.number):
            raise DisplayError("Viewer window was closed")
        self._image.set_data(self.buffer)
        self._fig.canvas.draw_idle()
        plt.pause(0.001)

    def save(self, filepath: str) -> None:
        """Save the current buffer as an image."""
        plt.imsave(filepath, self.buffer)

    def close(self) -> None:
        if self._fig is not None:
            plt.close(self._fig)
            self._fig = None
            self._initialized = False
