from pixoo_life.core.clock import SimClock
from pixoo_life.display.sink import BufferSink, DisplayError
from pixoo_life.life.engine import LifeEvolved
from pixoo_life.simulation.loop import run_loop
from pixoo_life.simulation.metrics import MetricsCollector
from pixoo_life.viz.logger import SimLogger


class FlakySink(BufferSink):
    def __init__(self, size, fail_on):
        super().__init__(size)
        self.fail_on = fail_on

    def push(self):
        super().push()
        if self.push_count == self.fail_on:
            raise DisplayError("device went away")


class StopsItself:
    def __init__(self, stop_at):
        self.stop_at = stop_at
        self.is_running = True
        self.started = False
        self.ticks = 0
        self.reported = []

    def start(self):
        self.started = True

    def tick(self):
        self.ticks += 1
        if self.ticks == self.stop_at:
            self.stop()

    def stop(self):
        self.is_running = False

    def draw(self, sink):
        sink.draw_pixel(0, 0, (self.ticks, 0, 0))

    def report(self, tick, logger, metrics):
        self.reported.append(tick)


def quiet_logger():
    return SimLogger(verbosity=0, stdout=False)


def test_run_loop_respects_max_ticks():
    life = LifeEvolved(size=8, seed=1)
    sink = BufferSink(size=8)
    metrics = MetricsCollector()
    done = run_loop(life, sink, clock=SimClock(0), logger=quiet_logger(),
                    metrics=metrics, max_ticks=5, warmup_ms=0)
    assert done == 5
    # one blank frame on connect, then one per tick
    assert sink.push_count == 6
    assert not life.is_running
    assert [s.tick for s in metrics.snapshots] == [1, 2, 3, 4, 5]


def test_stop_takes_effect_after_current_tick():
    sim = StopsItself(stop_at=3)
    sink = BufferSink(size=4)
    done = run_loop(sim, sink, clock=SimClock(0), logger=quiet_logger(), warmup_ms=0)
    assert sim.started
    assert done == 3
    assert sim.reported == [1, 2, 3]
    assert sink.pixel(0, 0) == (3, 0, 0)


def test_push_failure_is_logged_and_ends_run():
    sim = StopsItself(stop_at=100)
    sink = FlakySink(size=4, fail_on=3)
    logger = quiet_logger()
    done = run_loop(sim, sink, clock=SimClock(0), logger=logger, warmup_ms=0)
    assert done == 1
    assert not sim.is_running
    errors = logger.by_category(logger.ERROR)
    assert len(errors) == 1
    assert "device went away" in errors[0].message
    assert errors[0].data["error"] == "DisplayError"


def test_failure_on_connect_never_ticks():
    sim = StopsItself(stop_at=100)
    sink = FlakySink(size=4, fail_on=1)
    done = run_loop(sim, sink, clock=SimClock(0), logger=quiet_logger(), warmup_ms=0)
    assert done == 0
    assert sim.ticks == 0
    assert not sim.started


def test_lifecycle_is_logged():
    logger = quiet_logger()
    run_loop(StopsItself(stop_at=2), BufferSink(size=2), clock=SimClock(0),
             logger=logger, warmup_ms=0)
    messages = [e.message for e in logger.by_category(logger.LIFECYCLE)]
    assert messages == ["StopsItself started", "Stopped after 2 ticks"]


def test_clock_counts_ticks():
    clock = SimClock(250)
    assert clock.interval_seconds == 0.25
    clock.advance()
    clock.advance()
    assert clock.tick == 2
    SimClock(0).pause()


def test_zero_max_ticks_runs_nothing():
    sim = StopsItself(stop_at=100)
    sink = BufferSink(size=4)
    done = run_loop(sim, sink, clock=SimClock(0), logger=quiet_logger(),
                    max_ticks=0, warmup_ms=0)
    assert done == 0
    assert sim.ticks == 0
    assert not sim.is_running
    assert sink.push_count == 1


def test_small_life_grid_runs_in_loop():
    life = LifeEvolved(size=3, seed=2)
    done = run_loop(life, BufferSink(size=3), clock=SimClock(0), logger=quiet_logger(),
                    max_ticks=3, warmup_ms=0)
    assert done == 3
