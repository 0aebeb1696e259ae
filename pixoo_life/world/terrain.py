"""Procedural terrain: height, climate, rivers, biomes and food resources.

Generation order:
    1. noise tables from the seed
    2. height field (three fBM layers blended with a continent mask)
    3. river and tributary carving
    4. one toroidal box-blur pass
    5. temperature and moisture fields
    6. biome classification
    7. per-biome resource amounts

Every random draw goes through one ``numpy.random.Generator`` seeded with the
same integer as the noise tables, so a seed reproduces the map exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
from numpy.random import Generator

from pixoo_life.core.config import (
    ALTITUDE_COOLING,
    BANK_HEIGHT,
    BIOME_RESOURCES,
    CLIMATE_LACUNARITY,
    CLIMATE_OCTAVES,
    COLD_TEMPERATURE,
    DETAIL_LACUNARITY,
    DETAIL_OCTAVES,
    GRID_SIZE,
    HEIGHT_BASE_SCALE,
    HEIGHT_CONTRAST,
    HEIGHT_LAYERS,
    HEIGHT_OFFSET,
    HEIGHT_RANGE,
    HOT_TEMPERATURE,
    MASK_EXPONENT,
    MASK_WEIGHT,
    MOISTURE_DETAIL,
    MOISTURE_EXPONENT,
    MOISTURE_SCALE,
    MOUNTAIN_LEVEL,
    NOISE_GAIN,
    NOISE_WEIGHT,
    RESOURCE_HIGHLIGHT_COLOR,
    RESOURCE_NODE_AMOUNT,
    RESOURCE_NODE_CHANCES,
    RIVER_COUNT,
    RIVER_JITTER,
    RIVER_MAX_STEPS,
    RIVER_SPRING_ATTEMPTS,
    RIVER_SPRING_MIN_HEIGHT,
    RIVER_STEP_RADIUS,
    RIVER_WIDTH_RANGE,
    SMOOTH_ITERATIONS,
    SPAWN_TOP_CANDIDATES,
    TEMPERATURE_DETAIL,
    TEMPERATURE_EXPONENT,
    TEMPERATURE_SCALE,
    TERRAIN_COLORS,
    TRIBUTARY_FACTOR,
    TRIBUTARY_MAX_STEPS,
    TRIBUTARY_SEARCH_RADIUS,
    WATER_HEIGHT,
    WATER_LEVEL,
)
from pixoo_life.world.masks import DEFAULT_SHAPE, ContinentShape, continent_mask
from pixoo_life.world.noise import NoiseState


class Biome(Enum):
    WATER = "water"
    PLAINS = "plains"
    FOREST = "forest"
    DESERT = "desert"
    MOUNTAIN = "mountain"
    SNOWCAP = "snowcap"
    CAVE_FLOOR = "cavefloor"
    RESOURCE_NODE = "resource"
    TAIGA = "taiga"
    TUNDRA = "tundra"


_BLOCKING: frozenset[Biome] = frozenset({Biome.WATER, Biome.MOUNTAIN, Biome.SNOWCAP})
FERTILE: frozenset[Biome] = frozenset({Biome.PLAINS, Biome.FOREST})


@dataclass
class Cell:
    """One coordinate of the terrain world."""

    terrain: Biome = Biome.PLAINS
    occupant: Optional["Person"] = None  # noqa: F821
    resource_amount: int = 0
    structure: Optional["Structure"] = None  # noqa: F821


class TerrainMap:
    """Square toroidal grid of cells plus the fields it was classified from."""

    def __init__(
        self,
        grid: list[list[Cell]],
        height: Optional[np.ndarray] = None,
        temperature: Optional[np.ndarray] = None,
        moisture: Optional[np.ndarray] = None,
        seed: Optional[int] = None,
        shape: ContinentShape = DEFAULT_SHAPE,
    ) -> None:
        self.grid = grid
        self.size = len(grid)
        self.height = height
        self.temperature = temperature
        self.moisture = moisture
        self.seed = seed
        self.shape = shape

    @classmethod
    def filled(cls, size: int, terrain: Biome = Biome.PLAINS) -> "TerrainMap":
        """A uniform map, handy for hand-built scenarios."""
        return cls([[Cell(terrain=terrain) for _ in range(size)] for _ in range(size)])

    def wrap(self, x: int, y: int) -> tuple[int, int]:
        return x % self.size, y % self.size

    def get_cell(self, x: int, y: int) -> Cell:
        """Get the cell at (x, y), wrapping around the edges."""
        return self.grid[y % self.size][x % self.size]

    def biomes(self) -> list[list[Biome]]:
        return [[cell.terrain for cell in row] for row in self.grid]

    def count(self, biome: Biome) -> int:
        return sum(1 for row in self.grid for cell in row if cell.terrain is biome)

    def to_rgb(self, highlight_resources: bool = False) -> np.ndarray:
        """Render the biomes as a (size, size, 3) uint8 image."""
        image = np.zeros((self.size, self.size, 3), dtype=np.uint8)
        for y, row in enumerate(self.grid):
            for x, cell in enumerate(row):
                if highlight_resources and cell.resource_amount > 0:
                    image[y, x] = RESOURCE_HIGHLIGHT_COLOR
                else:
                    image[y, x] = terrain_color(cell.terrain)
        return image


def terrain_color(biome: Biome) -> tuple[int, int, int]:
    return TERRAIN_COLORS.get(biome.value, (0, 0, 0))


def is_walkable(biome: Biome) -> bool:
    return biome not in _BLOCKING


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------

def _coordinates(size: int) -> tuple[np.ndarray, np.ndarray]:
    ys, xs = np.mgrid[0:size, 0:size]
    return xs.astype(np.float64), ys.astype(np.float64)


def height_field(
    noise: NoiseState, size: int, shape: ContinentShape = DEFAULT_SHAPE
) -> np.ndarray:
    """Layered fBM height in [0, 1], blended 65/35 with the continent mask."""
    xs, ys = _coordinates(size)
    value = np.zeros((size, size), dtype=np.float64)
    for multiplier, weight, octaves, lacunarity in HEIGHT_LAYERS:
        scale = HEIGHT_BASE_SCALE * multiplier
        value += weight * noise.fractal(xs * scale, ys * scale, octaves, lacunarity, NOISE_GAIN)

    value = (value + HEIGHT_OFFSET) / HEIGHT_RANGE
    value = np.maximum(value, 0.0) ** HEIGHT_CONTRAST
    mask = continent_mask(noise, xs, ys, size, shape) ** MASK_EXPONENT
    return value * NOISE_WEIGHT + mask * MASK_WEIGHT


def temperature_field(noise: NoiseState, size: int, heights: np.ndarray) -> np.ndarray:
    """Banded temperature, cooled by altitude."""
    xs, ys = _coordinates(size)
    s = TEMPERATURE_SCALE
    detail_mult, detail_weight = TEMPERATURE_DETAIL
    t = noise.fractal(xs * s, ys * s, CLIMATE_OCTAVES, CLIMATE_LACUNARITY, NOISE_GAIN)
    detail = detail_weight * noise.fractal(
        xs * s * detail_mult, ys * s * detail_mult, DETAIL_OCTAVES, DETAIL_LACUNARITY, NOISE_GAIN
    )
    normalized = (t + detail + 1) / 2
    return np.maximum(0.0, normalized - ALTITUDE_COOLING * heights) ** TEMPERATURE_EXPONENT


def moisture_field(noise: NoiseState, size: int) -> np.ndarray:
    xs, ys = _coordinates(size)
    s = MOISTURE_SCALE
    detail_mult, detail_weight = MOISTURE_DETAIL
    w = noise.fractal(xs * s, ys * s, CLIMATE_OCTAVES, CLIMATE_LACUNARITY, NOISE_GAIN)
    detail = detail_weight * noise.fractal(
        xs * s * detail_mult, ys * s * detail_mult, DETAIL_OCTAVES, DETAIL_LACUNARITY, NOISE_GAIN
    )
    return np.maximum(0.0, (w + detail + 1) / 2) ** MOISTURE_EXPONENT


# ---------------------------------------------------------------------------
# Rivers
# ---------------------------------------------------------------------------

_RIVER_OFFSETS: list[tuple[int, int]] = [
    (dx, dy)
    for dx in range(-RIVER_STEP_RADIUS, RIVER_STEP_RADIUS + 1)
    for dy in range(-RIVER_STEP_RADIUS, RIVER_STEP_RADIUS + 1)
    if (dx, dy) != (0, 0)
]
_STEP_OFFSETS: list[tuple[int, int]] = [
    (dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1)
]


def _pick_spring(heights: np.ndarray, rng: Generator) -> tuple[int, int]:
    size = heights.shape[0]
    x = y = 0
    for _ in range(RIVER_SPRING_ATTEMPTS):
        x = int(rng.integers(size))
        y = int(rng.integers(size))
        if heights[y, x] >= RIVER_SPRING_MIN_HEIGHT:
            break
    return x, y


def _walk_downhill(heights: np.ndarray, x: int, y: int, rng: Generator) -> list[tuple[int, int]]:
    """Carve the main channel. Stops on water, when stuck, or at the step cap."""
    size = heights.shape[0]
    path: list[tuple[int, int]] = []
    for _ in range(RIVER_MAX_STEPS):
        path.append((x, y))
        heights[y, x] = WATER_HEIGHT

        jitter = rng.random(len(_RIVER_OFFSETS)) * RIVER_JITTER
        nx, ny = x, y
        lowest = 1.0
        for (dx, dy), j in zip(_RIVER_OFFSETS, jitter):
            xx, yy = (x + dx) % size, (y + dy) % size
            h = heights[yy, xx] - j
            if h < lowest:
                lowest = h
                nx, ny = xx, yy

        if heights[ny, nx] < WATER_LEVEL:
            break
        if (nx, ny) == (x, y):
            break
        x, y = nx, ny
    return path


def _widen(heights: np.ndarray, path: list[tuple[int, int]], rng: Generator) -> None:
    size = heights.shape[0]
    lo, hi = RIVER_WIDTH_RANGE
    for rx, ry in path:
        width = int(rng.integers(lo, hi + 1))
        for dx in range(-width, width + 1):
            for dy in range(-width, width + 1):
                xx, yy = (rx + dx) % size, (ry + dy) % size
                dist = (dx * dx + dy * dy) ** 0.5
                if dist <= width:
                    heights[yy, xx] = WATER_HEIGHT
                elif dist <= width + 1:
                    heights[yy, xx] = min(heights[yy, xx], BANK_HEIGHT)


def _water_nearby(
    heights: np.ndarray, x: int, y: int, own: set[tuple[int, int]]
) -> bool:
    size = heights.shape[0]
    for radius in range(1, TRIBUTARY_SEARCH_RADIUS):
        for dx in range(-radius, radius + 1):
            for dy in range(-radius, radius + 1):
                xx, yy = (x + dx) % size, (y + dy) % size
                if (xx, yy) in own:
                    continue
                if heights[yy, xx] <= WATER_LEVEL:
                    return True
    return False


def _carve_tributary(heights: np.ndarray, rng: Generator) -> list[tuple[int, int]]:
    """Walk downhill from a random cell until other water is within reach."""
    size = heights.shape[0]
    x = int(rng.integers(size))
    y = int(rng.integers(size))
    own: set[tuple[int, int]] = set()
    for _ in range(TRIBUTARY_MAX_STEPS):
        ground = heights[y, x]
        heights[y, x] = WATER_HEIGHT
        own.add((x, y))

        if _water_nearby(heights, x, y, own):
            break

        nx, ny = x, y
        lowest = ground
        for dx, dy in _STEP_OFFSETS:
            xx, yy = (x + dx) % size, (y + dy) % size
            if (xx, yy) in own:
                continue
            if heights[yy, xx] < lowest:
                lowest = heights[yy, xx]
                nx, ny = xx, yy

        if (nx, ny) == (x, y):
            break
        x, y = nx, ny
    return sorted(own)


def carve_rivers(heights: np.ndarray, rng: Generator, count: int = RIVER_COUNT) -> None:
    """Carve *count* rivers and twice as many tributaries into *heights* in place."""
    for _ in range(count):
        x, y = _pick_spring(heights, rng)
        path = _walk_downhill(heights, x, y, rng)
        _widen(heights, path, rng)

    for _ in range(count * TRIBUTARY_FACTOR):
        _carve_tributary(heights, rng)


def smooth_heights(heights: np.ndarray, iterations: int = SMOOTH_ITERATIONS) -> np.ndarray:
    """3x3 box blur with toroidal wrap."""
    result = heights
    for _ in range(iterations):
        total = np.zeros_like(result)
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                total += np.roll(np.roll(result, dy, axis=0), dx, axis=1)
        result = total / 9.0
    return result


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def assign_biome(height: float, temperature: float, moisture: float) -> Biome:
    """Threshold rules; height wins over climate."""
    if height < WATER_LEVEL:
        return Biome.WATER
    if height > MOUNTAIN_LEVEL:
        return Biome.MOUNTAIN

    if temperature < COLD_TEMPERATURE:
        return Biome.TAIGA if moisture > 0.5 else Biome.TUNDRA

    if temperature > HOT_TEMPERATURE:
        if moisture < 0.2:
            return Biome.DESERT
        if moisture > 0.5:
            return Biome.FOREST
        return Biome.PLAINS

    if moisture > 0.6:
        return Biome.FOREST
    if moisture > 0.3:
        return Biome.PLAINS
    return Biome.DESERT


def roll_resources(biome: Biome, rng: Generator) -> int:
    """Starting food amount for a cell of *biome*."""
    entry = BIOME_RESOURCES.get(biome.value)
    if entry is None:
        return 0
    chance, lo, hi = entry
    if rng.random() < chance:
        return int(rng.integers(lo, hi))
    return 0


def generate(
    size: int = GRID_SIZE,
    seed: int = 0,
    shape: ContinentShape = DEFAULT_SHAPE,
    rivers: int = RIVER_COUNT,
    resource_nodes: bool = False,
) -> TerrainMap:
    """Generate a full terrain map. The same arguments always give the same map."""
    if size < 3:
        raise ValueError(f"Terrain size must be at least 3, got {size}")

    noise = NoiseState(seed)
    rng = np.random.default_rng(seed)

    raw_heights = height_field(noise, size, shape)
    heights = raw_heights.copy()
    carve_rivers(heights, rng, rivers)
    heights = smooth_heights(heights)

    temperature = temperature_field(noise, size, raw_heights)
    moisture = moisture_field(noise, size)

    grid: list[list[Cell]] = []
    for y in range(size):
        row: list[Cell] = []
        for x in range(size):
            biome = assign_biome(heights[y, x], temperature[y, x], moisture[y, x])
            row.append(Cell(terrain=biome, resource_amount=roll_resources(biome, rng)))
        grid.append(row)

    terrain_map = TerrainMap(grid, heights, temperature, moisture, seed=seed, shape=shape)
    if resource_nodes:
        place_resource_nodes(terrain_map, rng)
    return terrain_map


def place_resource_nodes(terrain_map: TerrainMap, rng: Generator) -> int:
    """Turn a few cells into rich resource nodes. Returns how many were placed."""
    placed = 0
    lo, hi = RESOURCE_NODE_AMOUNT
    for row in terrain_map.grid:
        for cell in row:
            chance = RESOURCE_NODE_CHANCES.get(cell.terrain.value)
            if chance is None:
                continue
            if rng.random() < chance:
                cell.terrain = Biome.RESOURCE_NODE
                cell.resource_amount = int(rng.integers(lo, hi))
                placed += 1
    return placed


def find_spawn_location(
    terrain_map: TerrainMap,
    center: tuple[int, int],
    radius: int,
    rng: Generator,
) -> Optional[tuple[int, int]]:
    """Pick a walkable, fertile spot near *center*, or None if there is none."""
    cx, cy = center
    candidates: list[tuple[int, tuple[int, int]]] = []
    for dx in range(-radius, radius + 1):
        for dy in range(-radius, radius + 1):
            x, y = terrain_map.wrap(cx + dx, cy + dy)
            if not is_walkable(terrain_map.grid[y][x].terrain):
                continue

            score = 0
            has_node = False
            for nx in (-1, 0, 1):
                for ny in (-1, 0, 1):
                    t = terrain_map.get_cell(x + nx, y + ny).terrain
                    if t is Biome.RESOURCE_NODE:
                        has_node = True
                    if t in (Biome.PLAINS, Biome.FOREST, Biome.TAIGA):
                        score += 2
            if has_node:
                score += 3
            if score > 0:
                candidates.append((score, (x, y)))

    if not candidates:
        return None
    candidates.sort(key=lambda c: -c[0])
    index = int(rng.integers(min(SPAWN_TOP_CANDIDATES, len(candidates))))
    return candidates[index][1]
