from collections import Counter

import pytest

from pixoo_life.display.sink import BufferSink
from pixoo_life.life import engine
from pixoo_life.life.colors import cell_color
from pixoo_life.life.engine import LifeCell, LifeEvolved, ranked_genomes
from pixoo_life.life.genome import Genome
from pixoo_life.simulation.metrics import MetricsCollector
from pixoo_life.viz.logger import SimLogger

STABLE = Genome((3,), (2, 3), 0.0)
OTHER = Genome((3,), (2, 3), 180.0)

GLIDER = [(1, 0), (2, 1), (0, 2), (1, 2), (2, 2)]


@pytest.fixture(autouse=True)
def no_mutation(monkeypatch):
    # pattern tests need lineages to stay put from one generation to the next
    monkeypatch.setattr(engine, "mutate_genome", lambda genome, rng: genome)


def place(life, genome, cells, offset=(0, 0)):
    ox, oy = offset
    for x, y in cells:
        life.set_cell(x + ox, y + oy, LifeCell(genome, 0, 0.3))


def test_rejects_tiny_grid():
    with pytest.raises(ValueError):
        LifeEvolved(size=2)


def test_dead_grid_stays_dead():
    life = LifeEvolved(size=8, seed=0)
    stats = life.step()
    assert life.live_count == 0
    assert stats.births == 0 and stats.deaths == 0


def test_birth_with_three_neighbors():
    life = LifeEvolved(size=10, seed=0)
    place(life, STABLE, [(1, 0), (0, 1), (2, 1)])
    life.step()
    assert life.get_cell(1, 1).genome == STABLE
    assert life.get_cell(1, 1).age == 0


def test_blinker_oscillates():
    life = LifeEvolved(size=10, seed=0)
    place(life, STABLE, [(4, 3), (4, 4), (4, 5)])
    stats = life.step()
    assert life.live_cells() == {(3, 4), (4, 4), (5, 4)}
    assert stats.births == 2 and stats.deaths == 2
    life.step()
    assert life.live_cells() == {(4, 3), (4, 4), (4, 5)}


def test_glider_moves_diagonally():
    life = LifeEvolved(size=16, seed=0)
    place(life, STABLE, GLIDER, offset=(3, 3))
    for _ in range(4):
        life.step()
    assert life.live_cells() == {(x + 4, y + 4) for x, y in GLIDER}


def test_glider_wraps_around_edges():
    life = LifeEvolved(size=8, seed=0)
    place(life, STABLE, GLIDER, offset=(6, 6))
    for _ in range(4):
        life.step()
    assert life.live_cells() == {((x + 7) % 8, (y + 7) % 8) for x, y in GLIDER}


def test_survivors_age_and_brighten():
    life = LifeEvolved(size=8, seed=0)
    place(life, STABLE, [(2, 2), (3, 2), (2, 3), (3, 3)])
    life.step()
    cell = life.get_cell(2, 2)
    assert cell.age == 1
    assert cell.brightness == pytest.approx(0.35)


def test_ranked_genomes_keeps_first_seen_order_on_ties():
    a = Genome((3,), (2, 3), 10.0)
    b = Genome((3,), (2, 3), 20.0)
    c = Genome((3,), (2, 3), 30.0)
    tally = Counter()
    tally[a] += 2
    tally[b] += 2
    tally[c] += 3
    assert [g for g, _ in ranked_genomes(tally)] == [c, a, b]


def test_breeding_produces_valid_children():
    life = LifeEvolved(size=8, seed=7)
    children = [life._try_breeding([(STABLE, 5), (OTHER, 3)]) for _ in range(1000)]
    bred = [c for c in children if c is not None]
    assert bred
    for child in bred:
        assert child.birth_rule and child.survival_rule
    assert life._try_breeding([(STABLE, 8)]) is None
    assert all(life._try_breeding([(STABLE, 4), (OTHER, 4)]) is None for _ in range(200))


def test_colony_size_threshold():
    life = LifeEvolved(size=16, seed=0)
    place(life, STABLE, [(3, 2), (2, 3), (3, 3), (4, 3), (3, 4)])
    place(life, OTHER, [(10, 10), (11, 10), (10, 11), (11, 11)])
    colonies = life.find_colonies()
    assert len(colonies) == 1
    assert colonies[0].genome == STABLE
    assert colonies[0].size == 5


def test_adjacent_genomes_form_separate_colonies():
    life = LifeEvolved(size=16, seed=0)
    place(life, STABLE, [(x, 5) for x in range(5)])
    place(life, OTHER, [(x, 6) for x in range(6)])
    colonies = life.find_colonies()
    assert [(c.genome, c.size) for c in colonies] == [(OTHER, 6), (STABLE, 5)]


def test_colony_spans_the_edge():
    life = LifeEvolved(size=16, seed=0)
    place(life, STABLE, [(15, 0), (0, 0), (1, 0), (15, 15), (0, 15)])
    colonies = life.find_colonies()
    assert len(colonies) == 1
    assert colonies[0].size == 5


def test_at_most_eight_colonies_largest_first():
    life = LifeEvolved(size=32, seed=0)
    for i in range(10):
        place(life, STABLE, [(x, i * 3) for x in range(5 + i)])
    colonies = life.find_colonies()
    assert len(colonies) == 8
    assert [c.size for c in colonies] == [14, 13, 12, 11, 10, 9, 8, 7]


def test_start_seeds_four_colonies():
    life = LifeEvolved(size=32, seed=3)
    life.start()
    hues = {g.base_hue for g in life.distinct_genomes()}
    assert hues <= {0.0, 90.0, 180.0, 270.0}
    assert 0 < life.live_count <= 18
    live = life.live_count
    life.start()
    assert life.live_count == live


@pytest.mark.parametrize("size", [3, 5, 8])
def test_start_fits_small_grids(size):
    life = LifeEvolved(size=size, seed=1)
    life.start()
    assert life.distinct_genomes()
    assert life.live_count > 0
    life.step()


def test_seeded_runs_are_reproducible():
    a = LifeEvolved(size=24, seed=11)
    b = LifeEvolved(size=24, seed=11)
    a.start()
    b.start()
    for _ in range(15):
        a.step()
        b.step()
    assert a.live_cells() == b.live_cells()


def test_draw_paints_live_cells():
    life = LifeEvolved(size=8, seed=0)
    life.set_cell(2, 3, LifeCell(STABLE, 0, 0.3))
    sink = BufferSink(size=8)
    life.draw(sink)
    assert sink.pixel(2, 3) == cell_color(0.0, 0.3)
    assert sink.pixel(0, 0) == (0, 0, 0)


def test_report_logs_status_and_records_metrics():
    life = LifeEvolved(size=16, seed=0)
    place(life, STABLE, [(2, 2), (3, 2), (2, 3), (3, 3), (4, 4), (5, 4)])
    life.step()
    logger = SimLogger(verbosity=3, stdout=False)
    metrics = MetricsCollector()
    life.report(20, logger, metrics)
    assert logger.by_category(logger.COLONY)
    assert logger.by_category(logger.COLONY)[0].message.startswith("Colony status")
    assert metrics.snapshots[-1].tick == 20
    assert metrics.snapshots[-1].live_cells == life.live_count
    life.report(21, logger, metrics)
    assert len(logger.by_category(logger.COLONY)) == 1 + len(life.colonies)
