"""The display loop shared by every simulation."""

from __future__ import annotations

import time
from typing import Optional

from pixoo_life.core.clock import SimClock
from pixoo_life.core.config import BACKGROUND_COLOR, CONNECTION_WARMUP_MS
from pixoo_life.simulation.metrics import MetricsCollector
from pixoo_life.viz.logger import SimLogger


def connect(sink, warmup_ms: int = CONNECTION_WARMUP_MS) -> None:
    """Push one blank frame so the display is ready before the first tick."""
    sink.clear(BACKGROUND_COLOR)
    sink.push()
    if warmup_ms > 0:
        time.sleep(warmup_ms / 1000.0)


def run_loop(
    simulation,
    sink,
    clock: Optional[SimClock] = None,
    logger: Optional[SimLogger] = None,
    metrics: Optional[MetricsCollector] = None,
    max_ticks: Optional[int] = None,
    warmup_ms: int = CONNECTION_WARMUP_MS,
) -> int:
    """Tick, draw and push until the simulation is stopped.

    The run flag is checked once per tick, so ``simulation.stop()`` takes
    effect after the current tick finishes. Any failure while ticking,
    drawing or pushing is logged and ends the run. Returns the number of
    ticks completed.
    """
    clock = clock or SimClock()
    logger = logger or SimLogger(verbosity=0)
    completed = 0

    try:
        connect(sink, warmup_ms)
        simulation.start()
        logger.log(logger.LIFECYCLE, f"{type(simulation).__name__} started", tick=clock.tick)
        logger.flush_tick(clock.tick)

        while simulation.is_running:
            if max_ticks is not None and completed >= max_ticks:
                simulation.stop()
                break
            simulation.tick()
            simulation.draw(sink)
            sink.push()

            clock.advance()
            completed += 1
            simulation.report(clock.tick, logger, metrics)
            logger.flush_tick(clock.tick)

            if max_ticks is None or completed < max_ticks:
                clock.pause()
    except Exception as e:
        logger.log(logger.ERROR, f"Error in simulation loop: {e}", tick=clock.tick,
                   error=type(e).__name__)
        simulation.stop()

    logger.log(logger.LIFECYCLE, f"Stopped after {completed} ticks", tick=clock.tick)
    logger.flush_tick(clock.tick)
    return completed
