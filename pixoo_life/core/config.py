"""All tunable constants for the Pixoo life simulations.

Every magic number in the codebase must reference this file.
"""

# =============================================================================
# DISPLAY
# =============================================================================
GRID_SIZE: int = 64
BACKGROUND_COLOR: tuple[int, int, int] = (0, 0, 0)
FRAME_INTERVAL_MS: int = 300          # pause between ticks
CONNECTION_WARMUP_MS: int = 1000      # pause after the first blank frame
HTTP_TIMEOUT_S: float = 2.0
GIF_ID_RESET_LIMIT: int = 32          # device wants its GIF id reset this often

# =============================================================================
# NOISE
# =============================================================================
PERLIN_SIZE: int = 256
LCG_MULTIPLIER: int = 16807
LCG_MODULUS: int = 2147483647
DEFAULT_NOISE_SEED: int = 1337

# =============================================================================
# TERRAIN - height field
# =============================================================================
HEIGHT_BASE_SCALE: float = 0.012
# (scale multiplier, weight, octaves, lacunarity)
HEIGHT_LAYERS: list[tuple[float, float, int, float]] = [
    (1.0, 1.0, 6, 2.4),     # coarse
    (4.0, 0.6, 4, 2.2),     # medium
    (12.0, 0.2, 2, 2.0),    # fine
]
NOISE_GAIN: float = 0.5
HEIGHT_OFFSET: float = 1.5
HEIGHT_RANGE: float = 3.0
HEIGHT_CONTRAST: float = 1.3
MASK_EXPONENT: float = 0.6
NOISE_WEIGHT: float = 0.65
MASK_WEIGHT: float = 0.35

# =============================================================================
# TERRAIN - rivers
# =============================================================================
RIVER_COUNT: int = 12
RIVER_SPRING_MIN_HEIGHT: float = 0.7
RIVER_SPRING_ATTEMPTS: int = 100
RIVER_MAX_STEPS: int = 300
RIVER_STEP_RADIUS: int = 2            # 5x5 neighbourhood
RIVER_JITTER: float = 0.1
RIVER_WIDTH_RANGE: tuple[int, int] = (2, 3)
WATER_HEIGHT: float = 0.25
BANK_HEIGHT: float = 0.31
TRIBUTARY_FACTOR: int = 2
TRIBUTARY_MAX_STEPS: int = 100
TRIBUTARY_SEARCH_RADIUS: int = 5
SMOOTH_ITERATIONS: int = 1

# =============================================================================
# TERRAIN - climate
# =============================================================================
TEMPERATURE_SCALE: float = 0.014
TEMPERATURE_DETAIL: tuple[float, float] = (3.0, 0.3)     # scale multiplier, weight
ALTITUDE_COOLING: float = 0.3
TEMPERATURE_EXPONENT: float = 1.2
MOISTURE_SCALE: float = 0.015
MOISTURE_DETAIL: tuple[float, float] = (4.0, 0.3)
MOISTURE_EXPONENT: float = 1.1
CLIMATE_OCTAVES: int = 4
CLIMATE_LACUNARITY: float = 2.2
DETAIL_OCTAVES: int = 2
DETAIL_LACUNARITY: float = 2.0

# =============================================================================
# TERRAIN - biome thresholds
# =============================================================================
WATER_LEVEL: float = 0.3
MOUNTAIN_LEVEL: float = 0.88
COLD_TEMPERATURE: float = 0.25
HOT_TEMPERATURE: float = 0.65

# biome -> (probability, min amount, max amount exclusive)
BIOME_RESOURCES: dict[str, tuple[float, int, int]] = {
    "plains": (0.4, 20, 50),
    "forest": (0.6, 25, 65),
    "taiga": (0.3, 15, 40),
}

# biome -> probability of becoming a resource node in the optional pass
RESOURCE_NODE_CHANCES: dict[str, float] = {
    "forest": 0.08,
    "mountain": 0.08,
    "taiga": 0.08,
    "plains": 0.03,
    "tundra": 0.03,
    "desert": 0.01,
}
RESOURCE_NODE_AMOUNT: tuple[int, int] = (50, 100)

TERRAIN_COLORS: dict[str, tuple[int, int, int]] = {
    "water": (48, 128, 255),
    "plains": (126, 200, 80),
    "forest": (38, 160, 49),
    "desert": (255, 198, 91),
    "mountain": (142, 129, 115),
    "snowcap": (255, 255, 255),
    "resource": (255, 215, 0),
    "taiga": (56, 125, 52),
    "tundra": (134, 169, 83),
}
RESOURCE_HIGHLIGHT_COLOR: tuple[int, int, int] = (255, 255, 150)

# =============================================================================
# GENOME
# =============================================================================
MIN_MUTATION_RATE: float = 0.005
MAX_MUTATION_RATE: float = 0.02
INITIAL_MUTATION_RATE: float = 0.01
RULE_MUTATION_CHANCE: float = 0.4
RULE_ADD_CHANCE: float = 0.5
HUE_MUTATION_MAX: float = 20.0
RATE_MUTATION_MAX: float = 0.01
BREED_RATE_JITTER: float = 0.005
BREED_MUTATE_CHANCE: float = 0.3
BREEDING_CHANCE: float = 0.02
MIN_NEIGHBORS_FOR_BREEDING: int = 5
CLASSIC_BIRTH_RULE: tuple[int, ...] = (3,)
CLASSIC_SURVIVAL_RULE: tuple[int, ...] = (2, 3)

# =============================================================================
# CELLULAR LIFE
# =============================================================================
INITIAL_COLONIES: int = 4
MAX_COLONIES: int = 8
MIN_COLONY_SIZE: int = 5
SEED_MARGIN: int = 4
MIN_BRIGHTNESS: float = 0.3
BRIGHTNESS_STEP: float = 0.05
MAX_BRIGHTNESS: float = 0.9
CELL_SATURATION: float = 1.0

# Initial colony shapes as (dx, dy) offsets from the colony centre
SEED_PATTERNS: list[list[tuple[int, int]]] = [
    [(0, -1), (0, 0), (0, 1)],
    [(-1, -1), (-1, 0), (0, -1), (0, 0)],
    [(0, -1), (0, 0), (-1, -1), (-1, 0), (-2, 0), (1, 0)],
    [(0, 0), (-1, 0), (-2, 0), (0, -1), (-1, -2)],
]

# =============================================================================
# TRIBES
# =============================================================================
INITIAL_TRIBES: int = 3
TRIBE_HUES: list[float] = [180.0, 300.0, 260.0, 30.0]
INITIAL_TRIBE_SIZE: int = 10
SPAWN_ATTEMPTS: int = 100
SPAWN_SEARCH_RADIUS: int = 8
SPAWN_TOP_CANDIDATES: int = 3
HUNGER_RATE: float = 0.1
HUNGER_RATE_FACTOR: float = 0.2
STARVATION_HUNGER: float = 95.0
STARVATION_DAMAGE: float = 1.0
RECOVERY_HUNGER: float = 70.0
HEALTH_RECOVERY: float = 1.0
MAX_HEALTH: float = 100.0
MAX_HUNGER: float = 100.0
EAT_HUNGER_THRESHOLD: float = 20.0
MEAL_HUNGER_RELIEF: float = 30.0
FOOD_PER_MEAL: int = 1
RESOURCE_GATHER_RATE: int = 5
GATHER_HUNGER_RELIEF: float = 5.0
PERSON_LIGHTNESS: float = 0.6

STARTING_RESOURCES: dict[str, int] = {
    "food": 500,
    "wood": 200,
    "stone": 100,
    "iron": 50,
}
DEFAULT_BEHAVIOR: dict[str, float] = {
    "aggressiveness": 0.2,
    "exploration": 0.5,
    "gathering": 0.8,
}

# =============================================================================
# LOGGING / METRICS
# =============================================================================
STATUS_LOG_INTERVAL: int = 20         # log colony / tribe tables every N ticks

# =============================================================================
# BATCH
# =============================================================================
BATCH_RUNS: int = 20
BATCH_TICKS: int = 200
BATCH_SEED_POOL: int = 100_000
