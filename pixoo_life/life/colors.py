"""Hue/brightness to RGB conversion for cells and people."""

from __future__ import annotations

import colorsys

from pixoo_life.core.config import (
    BRIGHTNESS_STEP,
    CELL_SATURATION,
    MAX_BRIGHTNESS,
    MIN_BRIGHTNESS,
)

RGB = tuple[int, int, int]


def initial_brightness() -> float:
    return MIN_BRIGHTNESS


def increment_brightness(current: float) -> float:
    return min(MAX_BRIGHTNESS, current + BRIGHTNESS_STEP)


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> RGB:
    """Hue in degrees, saturation and lightness in [0, 1]."""
    r, g, b = colorsys.hls_to_rgb((hue % 360) / 360.0, lightness, saturation)
    return int(round(r * 255)), int(round(g * 255)), int(round(b * 255))


def cell_color(hue: float, brightness: float) -> RGB:
    return hsl_to_rgb(hue, CELL_SATURATION, brightness)
