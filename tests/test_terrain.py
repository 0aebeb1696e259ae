import numpy as np
import pytest

from pixoo_life.core.config import WATER_HEIGHT
from pixoo_life.world.masks import ContinentShape, continent_mask, parse_shape
from pixoo_life.world.noise import NoiseState
from pixoo_life.world.terrain import (
    _carve_tributary,
    Biome,
    TerrainMap,
    assign_biome,
    carve_rivers,
    find_spawn_location,
    generate,
    is_walkable,
    place_resource_nodes,
    smooth_heights,
)


def test_same_seed_same_map():
    a = generate(24, seed=99)
    b = generate(24, seed=99)
    assert a.biomes() == b.biomes()
    assert np.array_equal(a.height, b.height)
    assert [[c.resource_amount for c in row] for row in a.grid] == \
        [[c.resource_amount for c in row] for row in b.grid]


def test_different_seeds_differ():
    assert generate(24, seed=1).biomes() != generate(24, seed=2).biomes()


def test_generate_rejects_tiny_grid():
    with pytest.raises(ValueError):
        generate(2)


def test_generated_fields_are_sane():
    m = generate(24, seed=5, shape=ContinentShape.ISLAND)
    assert m.size == 24
    assert m.height.shape == (24, 24)
    assert not np.isnan(m.temperature).any()
    assert not np.isnan(m.moisture).any()
    for row in m.grid:
        for cell in row:
            if cell.resource_amount > 0:
                assert cell.terrain in (Biome.PLAINS, Biome.FOREST, Biome.TAIGA)


@pytest.mark.parametrize("shape", list(ContinentShape))
def test_masks_stay_in_unit_range(shape):
    noise = NoiseState(1337)
    ys, xs = np.mgrid[0:32, 0:32]
    mask = continent_mask(noise, xs, ys, 32, shape)
    assert mask.shape == (32, 32)
    assert mask.min() >= 0.0
    assert mask.max() <= 1.0


def test_parse_shape():
    assert parse_shape("Island") is ContinentShape.ISLAND
    with pytest.raises(ValueError, match="archipelago"):
        parse_shape("moon")


def test_assign_biome_thresholds():
    assert assign_biome(0.1, 0.5, 0.5) is Biome.WATER
    assert assign_biome(0.95, 0.5, 0.5) is Biome.MOUNTAIN
    assert assign_biome(0.5, 0.1, 0.7) is Biome.TAIGA
    assert assign_biome(0.5, 0.1, 0.2) is Biome.TUNDRA
    assert assign_biome(0.5, 0.8, 0.1) is Biome.DESERT
    assert assign_biome(0.5, 0.8, 0.6) is Biome.FOREST
    assert assign_biome(0.5, 0.8, 0.3) is Biome.PLAINS
    assert assign_biome(0.5, 0.5, 0.7) is Biome.FOREST
    assert assign_biome(0.5, 0.5, 0.4) is Biome.PLAINS
    assert assign_biome(0.5, 0.5, 0.1) is Biome.DESERT


def test_walkability():
    assert not is_walkable(Biome.WATER)
    assert not is_walkable(Biome.MOUNTAIN)
    assert is_walkable(Biome.PLAINS)
    assert is_walkable(Biome.DESERT)


def test_carve_rivers_cuts_a_channel():
    heights = np.full((32, 32), 0.8)
    carve_rivers(heights, np.random.default_rng(0), count=1)
    # a widened channel is at least a radius-2 disc
    assert (heights <= WATER_HEIGHT).sum() >= 13


def sloped_field(size=64, water_from=60):
    # falls from 0.9 in the west to 0.4 in the east, with a lake band on the east edge
    heights = np.tile(np.linspace(0.9, 0.4, size), (size, 1))
    heights[:, water_from:] = WATER_HEIGHT
    return heights


def test_tributary_runs_downhill_until_water_is_near():
    walked = 0
    for seed in range(10):
        heights = sloped_field()
        path = _carve_tributary(heights, np.random.default_rng(seed))
        xs = [x for x, _ in path]
        for x, y in path:
            assert heights[y, x] == WATER_HEIGHT
        if len(path) == 1:
            # started within 4 columns of the lake, which wraps onto x=0..3
            assert xs[0] >= 56 or xs[0] <= 3
            continue
        walked += 1
        # one cell per column, stopping 4 columns short of the lake at x=60
        assert max(xs) == 56
        assert sorted(xs) == list(range(min(xs), 57))
    assert walked > 0


def test_smoothing_wraps_and_preserves_mass():
    heights = np.zeros((8, 8))
    heights[0, 0] = 9.0
    smoothed = smooth_heights(heights)
    assert smoothed[0, 0] == pytest.approx(1.0)
    assert smoothed[7, 7] == pytest.approx(1.0)
    assert smoothed[2, 2] == 0.0
    assert smoothed.sum() == pytest.approx(9.0)
    assert heights[0, 0] == 9.0


def test_get_cell_wraps():
    m = TerrainMap.filled(5)
    assert m.get_cell(-1, 7) is m.grid[2][4]


def test_spawn_location_none_on_water():
    m = TerrainMap.filled(10, Biome.WATER)
    assert find_spawn_location(m, (5, 5), 3, np.random.default_rng(0)) is None


def test_spawn_location_is_walkable_and_near():
    m = TerrainMap.filled(16, Biome.PLAINS)
    for x in range(16):
        m.grid[8][x].terrain = Biome.WATER
    spot = find_spawn_location(m, (4, 4), 3, np.random.default_rng(1))
    assert spot is not None
    x, y = spot
    assert is_walkable(m.grid[y][x].terrain)
    assert abs(x - 4) <= 3 and abs(y - 4) <= 3


def test_resource_nodes_are_placed():
    m = TerrainMap.filled(20, Biome.FOREST)
    placed = place_resource_nodes(m, np.random.default_rng(3))
    assert placed == m.count(Biome.RESOURCE_NODE)
    assert placed > 0
    for row in m.grid:
        for cell in row:
            if cell.terrain is Biome.RESOURCE_NODE:
                assert 50 <= cell.resource_amount < 100


def test_to_rgb_highlights_food():
    m = TerrainMap.filled(4, Biome.WATER)
    m.grid[1][2].resource_amount = 10
    image = m.to_rgb(highlight_resources=True)
    assert image.shape == (4, 4, 3)
    assert tuple(image[1, 2]) == (255, 255, 150)
    assert tuple(image[0, 0]) == (48, 128, 255)
