"""Command-line entry point for the Pixoo life simulations."""

from __future__ import annotations

import argparse
import os
import signal
import sys
import time

from pixoo_life.core.config import (
    BATCH_RUNS,
    BATCH_TICKS,
    FRAME_INTERVAL_MS,
    GRID_SIZE,
    RIVER_COUNT,
)
from pixoo_life.world.masks import DEFAULT_SHAPE, ContinentShape, parse_shape

SINK_CHOICES = ["viewer", "device", "simulator", "none"]


def build_sink(kind: str, host: str | None, size: int):
    """Create the display sink named on the command line."""
    if kind == "viewer":
        from pixoo_life.display.viewer import ViewerSink
        return ViewerSink(size=size)
    if kind in ("device", "simulator"):
        if not host:
            raise SystemExit(f"--host is required for the {kind} sink")
        from pixoo_life.display.http import HttpSink
        return HttpSink(host, size=size, simulator=(kind == "simulator"))
    from pixoo_life.display.sink import BufferSink
    return BufferSink(size=size)


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--seed", type=int, default=None, help="Random seed (random if omitted)")
    parser.add_argument("--size", type=int, default=GRID_SIZE, help="Grid size in pixels")
    parser.add_argument("--ticks", type=int, default=None, help="Stop after N ticks (run forever if omitted)")
    parser.add_argument("--sink", choices=SINK_CHOICES, default="viewer", help="Where frames are pushed")
    parser.add_argument("--host", type=str, default=None, help="Device IP or simulator host:port")
    parser.add_argument("--interval", type=int, default=FRAME_INTERVAL_MS, help="Pause between ticks in ms")
    parser.add_argument("--verbosity", type=int, default=1, choices=[0, 1, 2, 3], help="Log verbosity level")
    parser.add_argument("--output-dir", type=str, default=None, help="Write log, metrics and charts here")


def _shape_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--shape",
        type=parse_shape,
        default=DEFAULT_SHAPE,
        help="Continent mask shape: " + ", ".join(s.value for s in ContinentShape),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixoo-life",
        description="Evolving life simulations for a 64x64 Pixoo LED display",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    life = sub.add_parser("life", help="Run Life Evolved", formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    _add_run_options(life)

    tribes = sub.add_parser("tribes", help="Run Tribal Life", formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    _add_run_options(tribes)
    _shape_option(tribes)

    terrain = sub.add_parser("terrain", help="Render a terrain map to PNG",
                             formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    terrain.add_argument("--seed", type=int, default=1337, help="Terrain seed")
    terrain.add_argument("--size", type=int, default=GRID_SIZE, help="Map size")
    terrain.add_argument("--rivers", type=int, default=RIVER_COUNT, help="Number of rivers")
    terrain.add_argument("--scale", type=int, default=8, help="Pixels per cell in the PNG")
    terrain.add_argument("--output", type=str, default="terrain.png", help="PNG path")
    terrain.add_argument("--fields", action="store_true", help="Also save height/temperature/moisture plots")
    _shape_option(terrain)

    batch = sub.add_parser("batch", help="Headless Life Evolved runs over many seeds",
                           formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    batch.add_argument("--runs", type=int, default=BATCH_RUNS, help="Number of runs")
    batch.add_argument("--ticks", type=int, default=BATCH_TICKS, help="Ticks per run")
    batch.add_argument("--size", type=int, default=GRID_SIZE, help="Grid size")
    batch.add_argument("--master-seed", type=int, default=0, help="Seed for drawing run seeds")
    batch.add_argument("--output-dir", type=str, default="results/batch")

    return parser


def _run_simulation(args: argparse.Namespace) -> int:
    import numpy as np

    from pixoo_life.core.clock import SimClock
    from pixoo_life.simulation.loop import run_loop
    from pixoo_life.simulation.metrics import MetricsCollector
    from pixoo_life.viz.logger import SimLogger

    seed = args.seed if args.seed is not None else int(np.random.default_rng().integers(10_000))
    logger = SimLogger(
        verbosity=args.verbosity,
        log_file=os.path.join(args.output_dir, "simulation.log") if args.output_dir else None,
    )
    metrics = MetricsCollector()

    print(f"=== Pixoo {args.command} ===")
    print(f"Seed: {seed} | Grid: {args.size}x{args.size} | Sink: {args.sink}")

    t0 = time.time()
    if args.command == "life":
        from pixoo_life.life.engine import LifeEvolved
        simulation = LifeEvolved(size=args.size, seed=seed)
    else:
        from pixoo_life.tribes.world import TribalLife
        print("Generating world...")
        simulation = TribalLife(size=args.size, seed=seed, shape=args.shape)
        logger.log(logger.GENERATION, f"Terrain generated with seed {seed} ({args.shape.value})")
    print(f"Initialization complete in {time.time() - t0:.2f}s")

    sink = build_sink(args.sink, args.host, args.size)

    def _interrupt(signum, frame):
        print("\nStopping after the current tick...")
        simulation.stop()

    previous = signal.signal(signal.SIGINT, _interrupt)
    print("Press Ctrl+C to exit")
    try:
        ticks = run_loop(
            simulation,
            sink,
            clock=SimClock(args.interval),
            logger=logger,
            metrics=metrics,
            max_ticks=args.ticks,
        )
    finally:
        signal.signal(signal.SIGINT, previous)

    print()
    print(metrics.summary_report())
    counts = logger.category_counts()
    if counts:
        print("Events: " + ", ".join(f"{cat.lower()} {n}" for cat, n in sorted(counts.items())))

    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)
        metrics.export_csv(os.path.join(args.output_dir, "metrics.csv"))
        logger.export_json(os.path.join(args.output_dir, "events.json"))
        try:
            from pixoo_life.viz.charts import save_metrics_charts
            save_metrics_charts(metrics, args.output_dir)
        except Exception as e:
            print(f"Could not generate plots: {e}")
        print(f"\nAll results saved to {args.output_dir}/")
    logger.close()

    if hasattr(sink, "close"):
        sink.close()
    return 0 if ticks > 0 else 1


def _render_terrain(args: argparse.Namespace) -> int:
    from pixoo_life.viz.charts import save_field_images, save_terrain_image
    from pixoo_life.world.terrain import Biome, generate

    t0 = time.time()
    terrain_map = generate(args.size, args.seed, args.shape, rivers=args.rivers)
    print(f"Generated {args.size}x{args.size} terrain (seed {args.seed}, {args.shape.value}) "
          f"in {time.time() - t0:.2f}s")
    for biome in Biome:
        n = terrain_map.count(biome)
        if n:
            print(f"  {biome.value:<10} {n:>5} ({n / args.size ** 2:.0%})")

    save_terrain_image(terrain_map, args.output, scale=args.scale)
    print(f"Saved terrain image to {args.output}")
    if args.fields:
        out_dir = os.path.dirname(args.output) or "."
        for path in save_field_images(terrain_map, out_dir):
            print(f"Saved {path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "terrain":
        return _render_terrain(args)
    if args.command == "batch":
        from pixoo_life.batch import batch
        batch(n_runs=args.runs, ticks=args.ticks, size=args.size,
              output_dir=args.output_dir, master_seed=args.master_seed)
        return 0
    return _run_simulation(args)


if __name__ == "__main__":
    sys.exit(main())
