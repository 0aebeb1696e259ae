"""Continent masks: spatial falloff functions that bias height toward land."""

from __future__ import annotations

from enum import Enum
from typing import Callable

import numpy as np

from pixoo_life.world.noise import NoiseState


class ContinentShape(Enum):
    ISLAND = "island"
    PENINSULA = "peninsula"
    INLAND = "inland"
    ARCHIPELAGO = "archipelago"
    COASTAL = "coastal"


DEFAULT_SHAPE = ContinentShape.PENINSULA


def _edge_noise(noise: NoiseState, x, y, scale: float, weight: float):
    return noise.fractal(x * scale, y * scale, 3, 2.0, 0.5) * weight


def _finish(mask, noise_term, exponent: float):
    return np.clip(mask + noise_term, 0.0, 1.0) ** exponent


def island_mask(noise: NoiseState, x, y, size: int):
    half = size / 2
    dist = np.sqrt((x - half) ** 2 + (y - half) ** 2)
    mask = np.maximum(0.0, 1.0 - dist / (size * 0.3))
    return _finish(mask, _edge_noise(noise, x, y, 0.02, 0.3), 0.7)


def peninsula_mask(noise: NoiseState, x, y, size: int):
    half = size / 2
    # curved arm reaching in from the right edge
    dx = x - half * 1.7
    dy = y - half + np.sin(x * 0.05) * size * 0.2
    dist = np.sqrt(dx * dx + dy * dy)
    mask = np.maximum(0.0, 1.0 - dist / (size * 0.5))
    mask = mask * np.maximum(0.0, (x / size) * 1.2)
    return _finish(mask, _edge_noise(noise, x, y, 0.03, 0.4), 0.8)


def inland_mask(noise: NoiseState, x, y, size: int):
    edge = np.minimum(np.minimum(x, size - x), np.minimum(y, size - y)) / size
    mask = np.minimum(1.0, edge * 4)
    return _finish(mask, _edge_noise(noise, x, y, 0.02, 0.3), 0.7)


_ARCHIPELAGO_CENTERS: list[tuple[float, float]] = [
    (0.3, 0.3),
    (0.7, 0.4),
    (0.5, 0.6),
    (0.2, 0.7),
    (0.8, 0.7),
]


def archipelago_mask(noise: NoiseState, x, y, size: int):
    best = np.zeros(np.shape(x))
    for fx, fy in _ARCHIPELAGO_CENTERS:
        dist = np.sqrt((x - size * fx) ** 2 + (y - size * fy) ** 2)
        best = np.maximum(best, np.maximum(0.0, 1.0 - dist / (size * 0.15)))
    return _finish(best, _edge_noise(noise, x, y, 0.02, 0.3), 0.7)


def coastal_mask(noise: NoiseState, x, y, size: int):
    # land on the left half
    bias = np.maximum(0.0, 1.0 - (x / size) * 2)
    return _finish(bias, _edge_noise(noise, x, y, 0.02, 0.3), 0.7)


MASK_FUNCTIONS: dict[ContinentShape, Callable] = {
    ContinentShape.ISLAND: island_mask,
    ContinentShape.PENINSULA: peninsula_mask,
    ContinentShape.INLAND: inland_mask,
    ContinentShape.ARCHIPELAGO: archipelago_mask,
    ContinentShape.COASTAL: coastal_mask,
}


def continent_mask(
    noise: NoiseState, x, y, size: int, shape: ContinentShape = DEFAULT_SHAPE
):
    """Evaluate the mask for *shape* at coordinates x, y (scalars or arrays)."""
    return MASK_FUNCTIONS[shape](noise, np.asarray(x, dtype=np.float64),
                                 np.asarray(y, dtype=np.float64), size)


def parse_shape(name: str) -> ContinentShape:
    """Look up a shape by its lowercase name."""
    try:
        return ContinentShape(name.lower())
    except ValueError:
        valid = ", ".join(s.value for s in ContinentShape)
        raise ValueError(f"Unknown continent shape {name!r} (expected one of: {valid})") from None
