"""Life Evolved: Conway-style automaton where every lineage carries its own rules.

Each generation is computed from ``grid`` into ``next_grid`` and the two are
swapped once every cell has been visited, so no cell ever sees a partially
updated neighbourhood. Coordinates wrap on both axes.
"""

from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpy.random import Generator

from pixoo_life.core.config import (
    BACKGROUND_COLOR,
    GRID_SIZE,
    INITIAL_COLONIES,
    MAX_COLONIES,
    MIN_COLONY_SIZE,
    SEED_MARGIN,
    SEED_PATTERNS,
    STATUS_LOG_INTERVAL,
)
from pixoo_life.life.colors import cell_color, increment_brightness, initial_brightness
from pixoo_life.life.genome import (
    Genome,
    breed_genomes,
    create_initial_genome,
    mutate_genome,
    should_breed,
)

_NEIGHBOR_OFFSETS: list[tuple[int, int]] = [
    (dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)
]


@dataclass
class LifeCell:
    """State of one automaton cell. Dead cells have no genome."""

    genome: Optional[Genome] = None
    age: int = 0
    brightness: float = 0.0

    @property
    def alive(self) -> bool:
        return self.genome is not None


@dataclass
class Colony:
    """A connected group of live cells sharing one genome."""

    genome: Genome
    members: set[tuple[int, int]] = field(default_factory=set)

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass
class StepStats:
    """What happened during one generation."""

    births: int = 0
    deaths: int = 0
    bred: list[Genome] = field(default_factory=list)

    @property
    def breedings(self) -> int:
        return len(self.bred)


def _empty_grid(size: int) -> list[list[LifeCell]]:
    return [[LifeCell() for _ in range(size)] for _ in range(size)]


def ranked_genomes(tally: Counter) -> list[tuple[Genome, int]]:
    """Most common first; ties keep their first-seen order."""
    return sorted(tally.items(), key=lambda item: -item[1])


class LifeEvolved:
    """The evolving automaton plus its colony bookkeeping."""

    def __init__(
        self,
        size: int = GRID_SIZE,
        rng: Optional[Generator] = None,
        seed: Optional[int] = None,
    ) -> None:
        if size < 3:
            raise ValueError(f"Grid size must be at least 3, got {size}")
        self.size = size
        self.rng: Generator = rng if rng is not None else np.random.default_rng(seed)
        self.grid = _empty_grid(size)
        self.next_grid = _empty_grid(size)
        self.colonies: list[Colony] = []
        self.generation: int = 0
        self.last_step = StepStats()
        self.is_running: bool = True

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_cell(self, x: int, y: int) -> LifeCell:
        return self.grid[y % self.size][x % self.size]

    def set_cell(self, x: int, y: int, cell: LifeCell) -> None:
        self.grid[y % self.size][x % self.size] = cell

    def live_cells(self) -> set[tuple[int, int]]:
        return {
            (x, y)
            for y, row in enumerate(self.grid)
            for x, cell in enumerate(row)
            if cell.alive
        }

    @property
    def live_count(self) -> int:
        return sum(1 for row in self.grid for cell in row if cell.alive)

    def distinct_genomes(self) -> set[Genome]:
        return {cell.genome for row in self.grid for cell in row if cell.alive}

    def _neighbors(self, x: int, y: int):
        for dx, dy in _NEIGHBOR_OFFSETS:
            yield (x + dx) % self.size, (y + dy) % self.size

    def neighbor_genomes(self, x: int, y: int) -> Counter:
        """Tally of live neighbour genomes, in first-seen order."""
        tally: Counter = Counter()
        for nx, ny in self._neighbors(x, y):
            genome = self.grid[ny][nx].genome
            if genome is not None:
                tally[genome] += 1
        return tally

    def count_neighbors(self, x: int, y: int, genome: Optional[Genome] = None) -> int:
        """Live neighbours, or only those equal to *genome* when given."""
        count = 0
        for nx, ny in self._neighbors(x, y):
            other = self.grid[ny][nx].genome
            if other is not None and (genome is None or other == genome):
                count += 1
        return count

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def clear(self) -> None:
        self.grid = _empty_grid(self.size)
        self.next_grid = _empty_grid(self.size)
        self.colonies = []

    def seed_colony(
        self, genome: Genome, center: tuple[int, int], pattern: list[tuple[int, int]]
    ) -> None:
        """Stamp *pattern* (offsets from *center*) as live cells of *genome*."""
        cx, cy = center
        for dx, dy in pattern:
            self.set_cell(cx + dx, cy + dy, LifeCell(genome, 0, initial_brightness()))

    def seed_initial_colonies(self, count: int = INITIAL_COLONIES) -> list[Genome]:
        """Place *count* classic-rule colonies with evenly spaced hues."""
        genomes: list[Genome] = []
        # small grids shrink the margin; set_cell wraps whatever spills over
        margin = min(SEED_MARGIN, self.size // 4)
        span = max(1, self.size - 2 * margin)
        for i in range(count):
            genome = create_initial_genome((i * (360 / count)) % 360)
            cx = int(self.rng.integers(span)) + margin
            cy = int(self.rng.integers(span)) + margin
            self.seed_colony(genome, (cx, cy), SEED_PATTERNS[i % len(SEED_PATTERNS)])
            genomes.append(genome)
        self.update_colonies()
        return genomes

    # ------------------------------------------------------------------
    # Transition
    # ------------------------------------------------------------------

    def _try_breeding(self, ranked: list[tuple[Genome, int]]) -> Optional[Genome]:
        if len(ranked) < 2:
            return None
        (dominant, dominant_count), (second, _) = ranked[0], ranked[1]
        if should_breed(dominant_count, self.rng):
            return breed_genomes(dominant, second, self.rng)
        return None

    def _next_cell(self, x: int, y: int, stats: StepStats) -> LifeCell:
        current = self.grid[y][x]
        ranked = ranked_genomes(self.neighbor_genomes(x, y))

        if current.genome is None:
            child = self._try_breeding(ranked)
            if child is not None:
                stats.births += 1
                stats.bred.append(child)
                return LifeCell(child, 0, initial_brightness())

            if ranked:
                dominant, _ = ranked[0]
                if dominant.births(self.count_neighbors(x, y, dominant)):
                    stats.births += 1
                    return LifeCell(mutate_genome(dominant, self.rng), 0, initial_brightness())
            return LifeCell()

        if current.genome.survives(self.count_neighbors(x, y, current.genome)):
            return LifeCell(
                mutate_genome(current.genome, self.rng),
                current.age + 1,
                increment_brightness(current.brightness),
            )

        stats.deaths += 1
        return LifeCell()

    def step(self) -> StepStats:
        """Advance one generation and refresh the colony list."""
        stats = StepStats()
        for y in range(self.size):
            for x in range(self.size):
                self.next_grid[y][x] = self._next_cell(x, y, stats)

        self.grid, self.next_grid = self.next_grid, self.grid
        self.generation += 1
        self.update_colonies()
        self.last_step = stats
        return stats

    # ------------------------------------------------------------------
    # Colonies
    # ------------------------------------------------------------------

    def find_colonies(
        self, min_size: int = MIN_COLONY_SIZE, max_colonies: int = MAX_COLONIES
    ) -> list[Colony]:
        """Flood-fill same-genome groups, largest first."""
        colonies: list[Colony] = []
        processed: set[tuple[int, int]] = set()

        for y in range(self.size):
            for x in range(self.size):
                if (x, y) in processed:
                    continue
                genome = self.grid[y][x].genome
                if genome is None:
                    continue

                processed.add((x, y))
                colony = Colony(genome, {(x, y)})
                queue = deque([(x, y)])
                while queue:
                    px, py = queue.popleft()
                    for nx, ny in self._neighbors(px, py):
                        if (nx, ny) in processed:
                            continue
                        if self.grid[ny][nx].genome == genome:
                            processed.add((nx, ny))
                            colony.members.add((nx, ny))
                            queue.append((nx, ny))

                if colony.size >= min_size:
                    colonies.append(colony)

        colonies.sort(key=lambda c: -c.size)
        return colonies[:max_colonies]

    def update_colonies(self) -> list[Colony]:
        self.colonies = self.find_colonies()
        return self.colonies

    # ------------------------------------------------------------------
    # Loop hooks
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Seed the default colonies if the grid is still empty."""
        if self.live_count == 0:
            self.seed_initial_colonies()

    def tick(self) -> None:
        self.step()

    def stop(self) -> None:
        self.is_running = False

    def draw(self, sink) -> None:
        """Paint live cells in their lineage hue, brighter with age."""
        sink.clear(BACKGROUND_COLOR)
        for y, row in enumerate(self.grid):
            for x, cell in enumerate(row):
                if cell.genome is not None:
                    sink.draw_pixel(x, y, cell_color(cell.genome.base_hue, cell.brightness))

    def report(self, tick: int, logger, metrics) -> None:
        """Push this generation's numbers to the logger and metrics collector."""
        for genome in self.last_step.bred:
            logger.log(
                logger.BREEDING,
                f"New genome bred: hue {round(genome.base_hue)}, rules {genome.rule_string}",
                tick=tick,
                hue=genome.base_hue,
                rules=genome.rule_string,
            )
        if tick % STATUS_LOG_INTERVAL == 0:
            for line in self.status_lines():
                logger.log(logger.COLONY, line, tick=tick)
        if metrics is not None:
            metrics.record_life(tick, self)

    def status_lines(self) -> list[str]:
        lines = [f"Colony status: {len(self.colonies)} colonies, {self.live_count} live cells"]
        for i, colony in enumerate(self.colonies, start=1):
            lines.append(
                f"  Colony {i}: size {colony.size}, hue {round(colony.genome.base_hue)}, "
                f"rules {colony.genome.rule_string}"
            )
        return lines
