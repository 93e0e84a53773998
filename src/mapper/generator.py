"""Main world generation orchestration."""

import numpy as np
import structlog
from numpy.typing import NDArray

from .biomes import Biome, biome_code
from .climate import classify_biomes, make_moisture, make_temperature
from .config import GenerationSettings, GeneratorConfig
from .elevation import synthesize_elevation
from .exceptions import InvalidDimensionsError
from .labels import generate_labels
from .models import WorldMap
from .noise import NoiseSampler
from .rivers import carve_rivers, simulate_rivers
from .roads import build_roads
from .settlements import place_settlements

logger = structlog.get_logger()

# Seeds are 32-bit; larger and negative values wrap
SEED_MASK = 0xFFFFFFFF


def generate(
    seed: int,
    settings: GenerationSettings | None = None,
    width: int = 160,
    height: int = 120,
    config: GeneratorConfig | None = None,
) -> WorldMap:
    """Generate a complete world map.

    The result is a pure function of the arguments.

    Args:
        seed: World seed.
        settings: Density and land knobs; defaults to ``config.settings``.
        width: Map width in cells.
        height: Map height in cells.
        config: Tuning configuration; defaults to the built-in values.

    Returns:
        Immutable WorldMap.

    Raises:
        InvalidDimensionsError: If width or height is negative.
    """
    if width < 0 or height < 0:
        raise InvalidDimensionsError(f"Map dimensions must be non-negative, got {width}x{height}")

    config = config or GeneratorConfig()
    settings = settings or config.settings
    seed &= SEED_MASK

    if width == 0 or height == 0:
        logger.info("empty_world", width=width, height=height)
        return WorldMap.empty(width, height)

    logger.info(
        "generating_world",
        seed=seed,
        width=width,
        height=height,
        rivers=settings.river_density,
        cities=settings.city_density,
        land=settings.land_percentage,
    )

    sampler = NoiseSampler(seed)
    rng = np.random.default_rng(seed)

    # Stage A: continuous fields
    elevation = synthesize_elevation(sampler, width, height, settings.land_percentage)
    moisture = make_moisture(sampler, width, height)
    temperature = make_temperature(sampler, elevation)
    biomes = classify_biomes(elevation, moisture, temperature)

    # Stage B: hydrology
    rivers = simulate_rivers(elevation, settings.river_density, rng, config.rivers)
    elevation, biomes = carve_rivers(elevation, biomes, rivers, config.rivers)
    logger.info("rivers_carved", count=len(rivers))

    # Stage C: settlements and roads
    cities = place_settlements(biomes, settings.city_density, rng, config.settlements)
    logger.info("settlements_placed", count=len(cities))

    roads, bridges = build_roads(elevation, biomes, cities, rng, config.roads)
    logger.info("roads_built", count=len(roads), bridges=len(bridges))

    # Stage D: labels
    labels = generate_labels(biomes, rivers, rng, config.labels)

    world = WorldMap(
        elevation=elevation,
        moisture=moisture,
        temperature=temperature,
        biomes=biomes,
        rivers=rivers,
        cities=cities,
        roads=roads,
        bridges=bridges,
        labels=labels,
    )
    _log_world_stats(world.biomes)
    return world


def _log_world_stats(biomes: NDArray[np.uint8]) -> None:
    """Log land and water coverage."""
    total = biomes.size
    land = int(np.sum(np.isin(biomes, [biome_code(b) for b in Biome if b.is_land])))
    logger.info(
        "world_stats",
        cells=total,
        land_fraction=round(land / total, 3),
        biome_types=len(np.unique(biomes)),
    )
