"""Seeded 2D gradient noise and fractal (fBM) composition.

The permutation and gradient tables are derived from a Park-Miller
linear-congruential generator so that the same integer seed always yields
the same tables, independently of numpy's bit generators. Sampling works on
scalars or numpy arrays of coordinates.
"""

from __future__ import annotations

import math
from typing import Iterator, Union

import numpy as np

from pixoo_life.core.config import (
    DEFAULT_NOISE_SEED,
    LCG_MODULUS,
    LCG_MULTIPLIER,
    PERLIN_SIZE,
)

ArrayLike = Union[float, np.ndarray]


def lcg_stream(seed: int) -> Iterator[float]:
    """Yield Park-Miller values normalised to [0, 1)."""
    state = seed % LCG_MODULUS
    if state == 0:
        # 0 is a fixed point of the multiplier
        state = 1
    while True:
        state = (state * LCG_MULTIPLIER) % LCG_MODULUS
        yield state / LCG_MODULUS


def fade(t: ArrayLike) -> ArrayLike:
    """Quintic fade curve 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (6 * t - 15) + 10)


def lerp(a: ArrayLike, b: ArrayLike, t: ArrayLike) -> ArrayLike:
    return a + t * (b - a)


class NoiseState:
    """Permutation and gradient tables for one terrain generation run."""

    def __init__(self, seed: int = DEFAULT_NOISE_SEED) -> None:
        self.seed = seed
        rand = lcg_stream(seed)

        p = list(range(PERLIN_SIZE))
        for i in range(PERLIN_SIZE - 1, 0, -1):
            j = int(next(rand) * (i + 1))
            p[i], p[j] = p[j], p[i]

        angles = [next(rand) * 2 * math.pi for _ in range(PERLIN_SIZE)]
        gx = [math.cos(a) for a in angles]
        gy = [math.sin(a) for a in angles]

        self.permutation = np.array(p + p, dtype=np.int64)
        self.grad_x = np.array(gx + gx, dtype=np.float64)
        self.grad_y = np.array(gy + gy, dtype=np.float64)
        for table in (self.permutation, self.grad_x, self.grad_y):
            table.flags.writeable = False

    def _grad_dot(self, ix, iy, dx, dy):
        idx = self.permutation[ix + self.permutation[iy]]
        return self.grad_x[idx] * dx + self.grad_y[idx] * dy

    def sample(self, x: ArrayLike, y: ArrayLike) -> ArrayLike:
        """Classic 2D gradient noise, roughly in [-1, 1]."""
        xs = np.asarray(x, dtype=np.float64)
        ys = np.asarray(y, dtype=np.float64)
        x0 = np.floor(xs)
        y0 = np.floor(ys)
        xf = xs - x0
        yf = ys - y0
        cx = x0.astype(np.int64) & (PERLIN_SIZE - 1)
        cy = y0.astype(np.int64) & (PERLIN_SIZE - 1)

        bottom_left = self._grad_dot(cx, cy, xf, yf)
        bottom_right = self._grad_dot(cx + 1, cy, xf - 1, yf)
        top_left = self._grad_dot(cx, cy + 1, xf, yf - 1)
        top_right = self._grad_dot(cx + 1, cy + 1, xf - 1, yf - 1)

        u = fade(xf)
        v = fade(yf)
        bottom = lerp(bottom_left, bottom_right, u)
        top = lerp(top_left, top_right, u)
        result = lerp(bottom, top, v)
        if result.ndim == 0:
            return float(result)
        return result

    def fractal(
        self,
        x: ArrayLike,
        y: ArrayLike,
        octaves: int,
        lacunarity: float,
        gain: float,
    ) -> ArrayLike:
        """Sum *octaves* samples at rising frequency, normalised by total amplitude."""
        freq = 1.0
        amp = 1.0
        total = 0.0
        total_amp = 0.0
        for _ in range(octaves):
            total = total + self.sample(np.multiply(x, freq), np.multiply(y, freq)) * amp
            total_amp += amp
            freq *= lacunarity
            amp *= gain
        if total_amp == 0:
            return total
        return total / total_amp


def initialize(seed: int) -> NoiseState:
    """Build the noise tables for *seed*."""
    return NoiseState(seed)
