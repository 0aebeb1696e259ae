import numpy as np
import pytest

from pixoo_life.display.sink import BufferSink
from pixoo_life.simulation.metrics import MetricsCollector
from pixoo_life.tribes.tribe import (
    PersonRole,
    ResourceKind,
    create_person,
    create_tribe,
    initialize_tribe,
    update_person,
)
from pixoo_life.tribes.world import TribalLife
from pixoo_life.viz.logger import SimLogger
from pixoo_life.world.terrain import FERTILE, Biome, TerrainMap


def settle(terrain_map, tribe, pos, **attrs):
    person = create_person(tribe)
    for name, value in attrs.items():
        setattr(person, name, value)
    x, y = pos
    terrain_map.grid[y][x].occupant = person
    tribe.population.add(pos)
    return person


def occupied_by(terrain_map, tribe_id):
    return {
        (x, y)
        for y, row in enumerate(terrain_map.grid)
        for x, cell in enumerate(row)
        if cell.occupant is not None and cell.occupant.tribe_id == tribe_id
    }


def test_person_ids_are_sequential():
    tribe = create_tribe(2, 300.0)
    assert create_person(tribe).id == "2-0"
    assert create_person(tribe).id == "2-1"
    assert tribe.food == 500


def test_starving_person_loses_one_health():
    m = TerrainMap.filled(8)
    tribe = create_tribe(1, 180.0)
    tribe.resources[ResourceKind.FOOD] = 0
    person = settle(m, tribe, (4, 4), hunger=96.0)
    pos = update_person(m, (4, 4), {1: tribe}, np.random.default_rng(0))
    assert pos is not None
    assert person.health == 99.0
    assert person.hunger == pytest.approx(96.02)
    assert tribe.food == 0


def test_hungry_person_eats_one_food():
    m = TerrainMap.filled(8)
    tribe = create_tribe(1, 180.0)
    person = settle(m, tribe, (4, 4), hunger=30.0, health=50.0)
    update_person(m, (4, 4), {1: tribe}, np.random.default_rng(0))
    assert tribe.food == 499
    assert person.hunger == pytest.approx(0.02)
    assert person.health == 51.0
    assert person.age == 1


def test_fed_person_does_not_eat():
    m = TerrainMap.filled(8)
    tribe = create_tribe(1, 180.0)
    settle(m, tribe, (4, 4), hunger=10.0)
    update_person(m, (4, 4), {1: tribe}, np.random.default_rng(0))
    assert tribe.food == 500


def test_gatherer_harvests_its_cell():
    m = TerrainMap.filled(8)
    m.grid[4][4].resource_amount = 12
    tribe = create_tribe(1, 180.0)
    settle(m, tribe, (4, 4), hunger=10.0)
    pos = update_person(m, (4, 4), {1: tribe}, np.random.default_rng(0))
    assert pos == (4, 4)
    assert m.grid[4][4].resource_amount == 7
    assert tribe.food == 505


def test_gatherer_steps_toward_food():
    m = TerrainMap.filled(8)
    m.grid[5][5].resource_amount = 20
    tribe = create_tribe(1, 180.0)
    settle(m, tribe, (4, 4))
    pos = update_person(m, (4, 4), {1: tribe}, np.random.default_rng(0))
    assert pos == (5, 5)
    assert m.grid[4][4].occupant is None
    assert m.grid[5][5].occupant is not None
    assert tribe.population == {(5, 5)}


def test_death_clears_the_cell():
    m = TerrainMap.filled(8)
    tribe = create_tribe(1, 180.0)
    tribe.resources[ResourceKind.FOOD] = 0
    settle(m, tribe, (2, 2), hunger=99.0, health=1.0)
    assert update_person(m, (2, 2), {1: tribe}, np.random.default_rng(0)) is None
    assert m.grid[2][2].occupant is None
    assert tribe.population == set()


def test_empty_cell_is_a_no_op():
    m = TerrainMap.filled(4)
    assert update_person(m, (1, 1), {}, np.random.default_rng(0)) is None


def test_boxed_in_person_stays_put():
    m = TerrainMap.filled(5, Biome.WATER)
    m.grid[2][2].terrain = Biome.PLAINS
    tribe = create_tribe(1, 180.0)
    settle(m, tribe, (2, 2), role=PersonRole.EXPLORER)
    assert update_person(m, (2, 2), {1: tribe}, np.random.default_rng(0)) == (2, 2)


def test_initialize_tribe_uses_distinct_fertile_cells():
    m = TerrainMap.filled(16, Biome.FOREST)
    tribe = create_tribe(1, 180.0)
    assert initialize_tribe(m, tribe, (8, 8), np.random.default_rng(0))
    assert len(tribe.population) == 10
    assert occupied_by(m, 1) == tribe.population
    for x, y in tribe.population:
        assert m.grid[y][x].terrain in FERTILE


def test_initialize_tribe_fails_without_land():
    m = TerrainMap.filled(8, Biome.WATER)
    tribe = create_tribe(1, 180.0)
    assert not initialize_tribe(m, tribe, (4, 4), np.random.default_rng(0))
    assert tribe.population == set()


def test_population_tracks_occupants_over_time():
    world = TribalLife(terrain_map=TerrainMap.filled(16), seed=4)
    world.start()
    assert world.tribes
    for _ in range(30):
        world.tick()
        for tribe_id, tribe in world.tribes.items():
            assert occupied_by(world.map, tribe_id) == tribe.population


def test_generated_world_runs():
    world = TribalLife(size=24, seed=21)
    world.start()
    sink = BufferSink(size=24)
    logger = SimLogger(verbosity=3, stdout=False)
    metrics = MetricsCollector()
    for tick in range(1, 21):
        world.tick()
        world.draw(sink)
        world.report(tick, logger, metrics)
    assert len(metrics.snapshots) == 20
    assert metrics.snapshots[-1].population == world.population
    assert logger.by_category(logger.TRIBE)[0].message == "Tribes status:"


def test_draw_shows_people_over_terrain():
    m = TerrainMap.filled(4)
    world = TribalLife(terrain_map=m, seed=0)
    tribe = create_tribe(1, 0.0)
    world.tribes[1] = tribe
    settle(m, tribe, (1, 1))
    sink = BufferSink(size=4)
    world.draw(sink)
    assert sink.pixel(0, 0) == (126, 200, 80)
    r, g, b = sink.pixel(1, 1)
    assert r > g and r > b
