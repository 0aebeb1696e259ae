"""Tribal Life: tribes foraging on a generated landscape."""

from __future__ import annotations

from typing import Optional

import numpy as np
from numpy.random import Generator

from pixoo_life.core.config import (
    GRID_SIZE,
    INITIAL_TRIBES,
    PERSON_LIGHTNESS,
    RESOURCE_HIGHLIGHT_COLOR,
    STATUS_LOG_INTERVAL,
    TRIBE_HUES,
)
from pixoo_life.life.colors import hsl_to_rgb
from pixoo_life.tribes.tribe import Tribe, create_tribe, initialize_tribe, update_person
from pixoo_life.world import terrain
from pixoo_life.world.masks import DEFAULT_SHAPE, ContinentShape


class TribalLife:
    """Terrain map plus tribes, advanced one scan per tick.

    People are updated in row-major order directly on the shared grid. A
    person who steps onto a cell further along the scan is visited again in
    the same tick, and whoever is scanned first claims a contested cell.
    """

    def __init__(
        self,
        size: int = GRID_SIZE,
        seed: Optional[int] = None,
        shape: ContinentShape = DEFAULT_SHAPE,
        terrain_map: Optional[terrain.TerrainMap] = None,
        rng: Optional[Generator] = None,
    ) -> None:
        if seed is None:
            seed = int(np.random.default_rng().integers(10_000))
        self.seed = seed
        self.map = terrain_map if terrain_map is not None else terrain.generate(size, seed, shape)
        self.size = self.map.size
        self.rng: Generator = rng if rng is not None else np.random.default_rng(seed)
        self.tribes: dict[int, Tribe] = {}
        self.deaths_last_tick: int = 0
        self.is_running: bool = True

    @property
    def population(self) -> int:
        return sum(len(t.population) for t in self.tribes.values())

    def initialize_tribes(self, count: int = INITIAL_TRIBES) -> list[Tribe]:
        """Spawn *count* tribes at random centres. Tribes that find no home are skipped."""
        spawned: list[Tribe] = []
        for i in range(count):
            tribe = create_tribe(i + 1, TRIBE_HUES[i % len(TRIBE_HUES)])
            center = (int(self.rng.integers(self.size)), int(self.rng.integers(self.size)))
            if initialize_tribe(self.map, tribe, center, self.rng):
                self.tribes[tribe.id] = tribe
                spawned.append(tribe)
        return spawned

    def start(self) -> None:
        if not self.tribes:
            self.initialize_tribes()

    def tick(self) -> None:
        before = self.population
        for y in range(self.size):
            for x in range(self.size):
                if self.map.grid[y][x].occupant is not None:
                    update_person(self.map, (x, y), self.tribes, self.rng)
        self.deaths_last_tick = before - self.population

    def stop(self) -> None:
        self.is_running = False

    def draw(self, sink) -> None:
        for y, row in enumerate(self.map.grid):
            for x, cell in enumerate(row):
                if cell.resource_amount > 0:
                    sink.draw_pixel(x, y, RESOURCE_HIGHLIGHT_COLOR)
                else:
                    sink.draw_pixel(x, y, terrain.terrain_color(cell.terrain))

        for y, row in enumerate(self.map.grid):
            for x, cell in enumerate(row):
                if cell.occupant is None:
                    continue
                tribe = self.tribes.get(cell.occupant.tribe_id)
                if tribe is not None:
                    sink.draw_pixel(x, y, hsl_to_rgb(tribe.base_hue, 1.0, PERSON_LIGHTNESS))

    def report(self, tick: int, logger, metrics) -> None:
        if self.deaths_last_tick:
            logger.log(logger.TRIBE, f"{self.deaths_last_tick} people died", tick=tick)
        if tick % STATUS_LOG_INTERVAL == 0:
            for line in self.status_lines():
                logger.log(logger.TRIBE, line, tick=tick)
        if metrics is not None:
            metrics.record_tribes(tick, self)

    def status_lines(self) -> list[str]:
        lines = ["Tribes status:"]
        for tribe_id, tribe in self.tribes.items():
            stock = ", ".join(f"{kind.value}: {amount}" for kind, amount in tribe.resources.items())
            lines.append(f"  Tribe {tribe_id}: population {len(tribe.population)}, resources {stock}")
        return lines
