"""Batch analysis: run Life Evolved headless over many seeds and aggregate."""

from __future__ import annotations

import csv
import os
import statistics
import time
from dataclasses import dataclass

import numpy as np

from pixoo_life.core.config import BATCH_RUNS, BATCH_SEED_POOL, BATCH_TICKS, GRID_SIZE


@dataclass
class RunResult:
    """Summary of a single headless run."""
    seed: int
    ticks: int
    final_live_cells: int
    peak_live_cells: int
    total_births: int
    total_deaths: int
    total_breedings: int
    final_genomes: int
    final_colonies: int
    largest_colony: int
    dominant_rules: str
    extinct_tick: int  # first tick with no live cells, or -1
    elapsed_seconds: float


def run_single(seed: int, ticks: int, size: int = GRID_SIZE) -> RunResult:
    """Run one simulation without a display and return its summary."""
    from pixoo_life.life.engine import LifeEvolved
    from pixoo_life.simulation.metrics import MetricsCollector

    life = LifeEvolved(size=size, seed=seed)
    life.start()
    metrics = MetricsCollector()

    t0 = time.time()
    for tick in range(1, ticks + 1):
        life.step()
        metrics.record_life(tick, life)
    elapsed = time.time() - t0

    snaps = metrics.snapshots
    last = snaps[-1] if snaps else None

    extinct_tick = -1
    for s in snaps:
        if s.live_cells == 0:
            extinct_tick = s.tick
            break

    dominant = life.colonies[0].genome.rule_string if life.colonies else ""

    return RunResult(
        seed=seed,
        ticks=ticks,
        final_live_cells=last.live_cells if last else 0,
        peak_live_cells=metrics.peak_population,
        total_births=sum(s.births for s in snaps),
        total_deaths=sum(s.deaths for s in snaps),
        total_breedings=sum(s.breedings for s in snaps),
        final_genomes=last.distinct_genomes if last else 0,
        final_colonies=last.colony_count if last else 0,
        largest_colony=last.largest_colony if last else 0,
        dominant_rules=dominant,
        extinct_tick=extinct_tick,
        elapsed_seconds=elapsed,
    )


def stat_line(label: str, values: list[float], fmt: str = ".1f") -> str:
    if not values:
        return f"  {label}: no data"
    spread = statistics.stdev(values) if len(values) > 1 else 0.0
    return (
        f"  {label:<26s}  mean={statistics.mean(values):{fmt}}  "
        f"median={statistics.median(values):{fmt}}  std={spread:{fmt}}  "
        f"range=[{min(values):{fmt}}, {max(values):{fmt}}]"
    )


def batch(
    n_runs: int = BATCH_RUNS,
    ticks: int = BATCH_TICKS,
    size: int = GRID_SIZE,
    output_dir: str = "results/batch",
    master_seed: int = 0,
) -> list[RunResult]:
    """Run *n_runs* simulations with seeds drawn from *master_seed* and report."""
    os.makedirs(output_dir, exist_ok=True)
    rng = np.random.default_rng(master_seed)
    seeds = [int(s) for s in rng.integers(0, BATCH_SEED_POOL, size=n_runs)]
    results: list[RunResult] = []

    print("=== Life Evolved batch ===")
    print(f"Runs: {n_runs} | Ticks/run: {ticks} | Grid: {size}x{size}")
    print(f"Seeds: {seeds[:5]}{'...' if n_runs > 5 else ''}")
    print()

    total_t0 = time.time()
    for i, seed in enumerate(seeds):
        result = run_single(seed, ticks, size)
        results.append(result)
        status = "EXTINCT" if result.extinct_tick >= 0 else "ALIVE"
        print(
            f"  Run {i+1:>3}/{n_runs} | seed={seed:>5} | "
            f"live={result.final_live_cells:>4} | genomes={result.final_genomes:>3} | "
            f"bred={result.total_breedings:>3} | {status} | {result.elapsed_seconds:.1f}s"
        )

    total_elapsed = time.time() - total_t0
    print(f"\nAll {n_runs} runs completed in {total_elapsed:.1f}s")

    print("\n" + "=" * 70)
    print("AGGREGATE RESULTS")
    print("=" * 70)
    print(stat_line("Final live cells", [r.final_live_cells for r in results]))
    print(stat_line("Peak live cells", [r.peak_live_cells for r in results]))
    print(stat_line("Genomes bred", [r.total_breedings for r in results]))
    print(stat_line("Final distinct genomes", [r.final_genomes for r in results]))
    print(stat_line("Largest colony", [r.largest_colony for r in results]))

    extinct = sum(1 for r in results if r.extinct_tick >= 0)
    print(f"  Extinction rate: {extinct}/{n_runs} ({extinct / max(1, n_runs) * 100:.0f}%)")

    rule_freq: dict[str, int] = {}
    for r in results:
        if r.dominant_rules:
            rule_freq[r.dominant_rules] = rule_freq.get(r.dominant_rules, 0) + 1
    if rule_freq:
        print("\nDOMINANT RULES")
        for rules, count in sorted(rule_freq.items(), key=lambda x: -x[1]):
            print(f"  {rules}: {count}/{n_runs} runs")

    csv_path = os.path.join(output_dir, "batch_results.csv")
    export_results(results, csv_path)
    print(f"\nResults exported to {csv_path}")
    return results


def export_results(results: list[RunResult], csv_path: str) -> None:
    with open(csv_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "seed", "ticks", "final_live", "peak_live", "births", "deaths",
            "breedings", "genomes", "colonies", "largest_colony",
            "dominant_rules", "extinct_tick", "elapsed_s",
        ])
        for r in results:
            writer.writerow([
                r.seed, r.ticks, r.final_live_cells, r.peak_live_cells,
                r.total_births, r.total_deaths, r.total_breedings,
                r.final_genomes, r.final_colonies, r.largest_colony,
                r.dominant_rules, r.extinct_tick, f"{r.elapsed_seconds:.2f}",
            ])
