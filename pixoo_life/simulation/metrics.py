"""Per-tick data collection, summaries and CSV export."""

from __future__ import annotations

import csv
import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TickSnapshot:
    """A snapshot of simulation state for one tick."""

    tick: int = 0
    live_cells: int = 0
    births: int = 0
    deaths: int = 0
    breedings: int = 0
    distinct_genomes: int = 0
    colony_count: int = 0
    largest_colony: int = 0
    population: int = 0
    tribe_population: dict[int, int] = field(default_factory=dict)
    tribe_food: dict[int, int] = field(default_factory=dict)


class MetricsCollector:
    """Collects time-series data every tick."""

    def __init__(self) -> None:
        self.snapshots: list[TickSnapshot] = []

    def record_life(self, tick: int, life: "LifeEvolved") -> TickSnapshot:  # noqa: F821
        """Collect automaton metrics for this tick."""
        stats = life.last_step
        live = life.live_count
        snapshot = TickSnapshot(
            tick=tick,
            live_cells=live,
            births=stats.births,
            deaths=stats.deaths,
            breedings=stats.breedings,
            distinct_genomes=len(life.distinct_genomes()),
            colony_count=len(life.colonies),
            largest_colony=life.colonies[0].size if life.colonies else 0,
            population=live,
        )
        self.snapshots.append(snapshot)
        return snapshot

    def record_tribes(self, tick: int, world: "TribalLife") -> TickSnapshot:  # noqa: F821
        """Collect tribe metrics for this tick."""
        snapshot = TickSnapshot(
            tick=tick,
            deaths=world.deaths_last_tick,
            population=world.population,
            tribe_population={tid: len(t.population) for tid, t in world.tribes.items()},
            tribe_food={tid: t.food for tid, t in world.tribes.items()},
        )
        self.snapshots.append(snapshot)
        return snapshot

    @property
    def peak_population(self) -> int:
        return max((s.population for s in self.snapshots), default=0)

    def export_csv(self, filepath: str) -> None:
        """Export all snapshots to CSV."""
        os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
        tribe_ids = sorted({tid for s in self.snapshots for tid in s.tribe_population})
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(
                [
                    "tick", "population", "live_cells", "births", "deaths",
                    "breedings", "distinct_genomes", "colonies", "largest_colony",
                ]
                + [f"tribe_{tid}_population" for tid in tribe_ids]
                + [f"tribe_{tid}_food" for tid in tribe_ids]
            )
            for s in self.snapshots:
                writer.writerow(
                    [
                        s.tick, s.population, s.live_cells, s.births, s.deaths,
                        s.breedings, s.distinct_genomes, s.colony_count, s.largest_colony,
                    ]
                    + [s.tribe_population.get(tid, 0) for tid in tribe_ids]
                    + [s.tribe_food.get(tid, 0) for tid in tribe_ids]
                )

    def summary_report(self, start_tick: int = 0, end_tick: Optional[int] = None) -> str:
        """Generate a human-readable summary of the recorded period."""
        relevant = [
            s for s in self.snapshots
            if s.tick >= start_tick and (end_tick is None or s.tick <= end_tick)
        ]
        if not relevant:
            return "No data available for the specified period."

        first = relevant[0]
        last = relevant[-1]
        lines = [
            f"=== Simulation Summary: Tick {first.tick} to Tick {last.tick} ===",
            f"Population: {first.population} -> {last.population} "
            f"(peak {max(s.population for s in relevant)})",
            f"  Total births: {sum(s.births for s in relevant)}",
            f"  Total deaths: {sum(s.deaths for s in relevant)}",
        ]

        total_breedings = sum(s.breedings for s in relevant)
        if total_breedings or last.live_cells:
            lines.append("")
            lines.append("Automaton:")
            lines.append(f"  Genomes bred: {total_breedings}")
            lines.append(f"  Distinct genomes (final): {last.distinct_genomes}")
            lines.append(f"  Colonies (final): {last.colony_count}, largest {last.largest_colony}")

        if last.tribe_population:
            lines.append("")
            lines.append("Tribes (final tick):")
            for tid in sorted(last.tribe_population):
                lines.append(
                    f"  Tribe {tid}: population {last.tribe_population[tid]}, "
                    f"food {last.tribe_food.get(tid, 0)}"
                )

        return "\n".join(lines)
