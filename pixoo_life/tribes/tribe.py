"""Tribes and the people in them: state, spawning and per-tick behaviour."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from numpy.random import Generator

from pixoo_life.core.config import (
    DEFAULT_BEHAVIOR,
    EAT_HUNGER_THRESHOLD,
    FOOD_PER_MEAL,
    GATHER_HUNGER_RELIEF,
    HEALTH_RECOVERY,
    HUNGER_RATE,
    HUNGER_RATE_FACTOR,
    INITIAL_TRIBE_SIZE,
    MAX_HEALTH,
    MAX_HUNGER,
    MEAL_HUNGER_RELIEF,
    RECOVERY_HUNGER,
    RESOURCE_GATHER_RATE,
    SPAWN_ATTEMPTS,
    SPAWN_SEARCH_RADIUS,
    STARTING_RESOURCES,
    STARVATION_DAMAGE,
    STARVATION_HUNGER,
)
from pixoo_life.world.terrain import FERTILE, TerrainMap, find_spawn_location, is_walkable

Position = tuple[int, int]


class PersonRole(Enum):
    GATHERER = "gatherer"
    WARRIOR = "warrior"
    BUILDER = "builder"
    EXPLORER = "explorer"


class ResourceKind(Enum):
    FOOD = "food"
    WOOD = "wood"
    STONE = "stone"
    IRON = "iron"


@dataclass
class TribeBehavior:
    """Temperament knobs, each in [0, 1]."""

    aggressiveness: float = DEFAULT_BEHAVIOR["aggressiveness"]
    exploration: float = DEFAULT_BEHAVIOR["exploration"]
    gathering: float = DEFAULT_BEHAVIOR["gathering"]


def _starting_resources() -> dict[ResourceKind, int]:
    return {kind: STARTING_RESOURCES[kind.value] for kind in ResourceKind}


@dataclass
class Tribe:
    """A group of people sharing a colour and a stockpile."""

    id: int
    base_hue: float
    population: set[Position] = field(default_factory=set)
    resources: dict[ResourceKind, int] = field(default_factory=_starting_resources)
    behavior: TribeBehavior = field(default_factory=TribeBehavior)
    next_person_id: int = 0

    @property
    def food(self) -> int:
        return self.resources.get(ResourceKind.FOOD, 0)

    def add_resource(self, kind: ResourceKind, amount: int) -> None:
        self.resources[kind] = self.resources.get(kind, 0) + amount


@dataclass
class Person:
    """One member of a tribe, living on a single cell."""

    id: str
    tribe_id: int
    role: PersonRole = PersonRole.GATHERER
    health: float = MAX_HEALTH
    hunger: float = 0.0
    age: int = 0
    carrying: Optional[ResourceKind] = None


@dataclass
class Structure:
    """A building owned by a tribe. Nothing builds these yet."""

    kind: str  # "hut", "farm" or "storehouse"
    tribe_id: int
    health: float = MAX_HEALTH


# (dx, dy) in the fixed order gatherers look around
DIRECTIONS: list[Position] = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
]


def create_tribe(tribe_id: int, base_hue: float) -> Tribe:
    return Tribe(id=tribe_id, base_hue=base_hue)


def create_person(tribe: Tribe, role: PersonRole = PersonRole.GATHERER) -> Person:
    person = Person(id=f"{tribe.id}-{tribe.next_person_id}", tribe_id=tribe.id, role=role)
    tribe.next_person_id += 1
    return person


def _can_enter(terrain_map: TerrainMap, x: int, y: int) -> bool:
    cell = terrain_map.grid[y][x]
    return cell.occupant is None and is_walkable(cell.terrain)


def _find_home(
    terrain_map: TerrainMap, center: Position, rng: Generator
) -> Optional[Position]:
    spot = find_spawn_location(terrain_map, center, SPAWN_SEARCH_RADIUS, rng)
    if spot is not None and terrain_map.get_cell(*spot).terrain in FERTILE:
        return spot

    x, y = terrain_map.wrap(*center)
    for _ in range(SPAWN_ATTEMPTS):
        if terrain_map.grid[y][x].terrain in FERTILE:
            return x, y
        x = int(rng.integers(terrain_map.size))
        y = int(rng.integers(terrain_map.size))
    return None


def initialize_tribe(
    terrain_map: TerrainMap,
    tribe: Tribe,
    center: Position,
    rng: Generator,
    size: int = INITIAL_TRIBE_SIZE,
    role: PersonRole = PersonRole.GATHERER,
) -> bool:
    """Settle up to *size* people on free fertile cells near *center*.

    Returns False when no home could be found or nobody could be placed.
    """
    home = _find_home(terrain_map, center, rng)
    if home is None:
        return False

    hx, hy = home
    nearby = [(dx, dy) for dx in range(-2, 3) for dy in range(-2, 3)]
    for index in rng.permutation(len(nearby)):
        if len(tribe.population) >= size:
            break
        dx, dy = nearby[int(index)]
        x, y = terrain_map.wrap(hx + dx, hy + dy)
        cell = terrain_map.grid[y][x]
        if cell.occupant is None and cell.terrain in FERTILE:
            cell.occupant = create_person(tribe, role)
            tribe.population.add((x, y))

    return len(tribe.population) > 0


def move_person(terrain_map: TerrainMap, source: Position, target: Position, tribe: Tribe) -> Position:
    """Move the occupant of *source* onto the empty *target* cell."""
    src = terrain_map.grid[source[1]][source[0]]
    dst = terrain_map.grid[target[1]][target[0]]
    dst.occupant = src.occupant
    src.occupant = None
    tribe.population.discard(source)
    tribe.population.add(target)
    return target


def move_randomly(
    terrain_map: TerrainMap, pos: Position, tribe: Tribe, rng: Generator
) -> Position:
    """Step to a random free neighbour, preferring food or fertile ground."""
    x, y = pos
    order = [DIRECTIONS[int(i)] for i in rng.permutation(len(DIRECTIONS))]
    targets = [terrain_map.wrap(x + dx, y + dy) for dx, dy in order]
    open_targets = [t for t in targets if _can_enter(terrain_map, *t)]

    for tx, ty in open_targets:
        cell = terrain_map.grid[ty][tx]
        if cell.resource_amount > 0 or cell.terrain in FERTILE:
            return move_person(terrain_map, pos, (tx, ty), tribe)

    if open_targets:
        return move_person(terrain_map, pos, open_targets[0], tribe)
    return pos


def handle_gatherer(
    terrain_map: TerrainMap, pos: Position, person: Person, tribe: Tribe, rng: Generator
) -> Position:
    x, y = pos
    here = terrain_map.grid[y][x]
    if here.resource_amount > 0:
        gathered = min(here.resource_amount, RESOURCE_GATHER_RATE)
        here.resource_amount -= gathered
        tribe.add_resource(ResourceKind.FOOD, gathered)
        person.hunger = max(0.0, person.hunger - GATHER_HUNGER_RELIEF)
        return pos

    for dx, dy in DIRECTIONS:
        tx, ty = terrain_map.wrap(x + dx, y + dy)
        if terrain_map.grid[ty][tx].resource_amount > 0 and _can_enter(terrain_map, tx, ty):
            return move_person(terrain_map, pos, (tx, ty), tribe)

    return move_randomly(terrain_map, pos, tribe, rng)


def handle_wanderer(
    terrain_map: TerrainMap, pos: Position, person: Person, tribe: Tribe, rng: Generator
) -> Position:
    # TODO: warriors should fight neighbouring tribes and builders should raise Structures
    return move_randomly(terrain_map, pos, tribe, rng)


ROLE_HANDLERS: dict[PersonRole, Callable] = {
    PersonRole.GATHERER: handle_gatherer,
    PersonRole.WARRIOR: handle_wanderer,
    PersonRole.BUILDER: handle_wanderer,
    PersonRole.EXPLORER: handle_wanderer,
}


def update_person(
    terrain_map: TerrainMap, pos: Position, tribes: dict[int, Tribe], rng: Generator
) -> Optional[Position]:
    """Advance one person by a tick.

    Returns where the person ended up, or None if the cell was empty or the
    person died this tick.
    """
    x, y = pos
    cell = terrain_map.grid[y][x]
    person = cell.occupant
    if person is None:
        return None
    tribe = tribes[person.tribe_id]

    person.hunger = min(MAX_HUNGER, person.hunger + HUNGER_RATE * HUNGER_RATE_FACTOR)
    if person.hunger > STARVATION_HUNGER:
        person.health -= STARVATION_DAMAGE
    elif person.hunger < RECOVERY_HUNGER:
        person.health = min(MAX_HEALTH, person.health + HEALTH_RECOVERY)
    person.age += 1

    if person.hunger > EAT_HUNGER_THRESHOLD and tribe.food > 0:
        person.hunger = max(0.0, person.hunger - MEAL_HUNGER_RELIEF)
        tribe.resources[ResourceKind.FOOD] -= FOOD_PER_MEAL

    if person.health <= 0:
        cell.occupant = None
        tribe.population.discard(pos)
        return None

    return ROLE_HANDLERS[person.role](terrain_map, pos, person, tribe, rng)
