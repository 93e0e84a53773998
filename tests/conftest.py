"""Shared test fixtures for mapper tests."""

import numpy as np
import pytest

from mapper.biomes import Biome, biome_code
from mapper.config import GenerationSettings, GeneratorConfig
from mapper.generator import generate
from mapper.models import WorldMap
from mapper.noise import NoiseSampler


@pytest.fixture(scope="session")
def sampler() -> NoiseSampler:
    """Noise sampler for seed 42."""
    return NoiseSampler(42)


@pytest.fixture(scope="session")
def small_world() -> WorldMap:
    """80x60 world with dense rivers and cities."""
    settings = GenerationSettings(river_density=0.8, city_density=0.9, land_percentage=0.6)
    return generate(7, settings, width=80, height=60)


@pytest.fixture(scope="session")
def dense_config() -> GeneratorConfig:
    """Config with tighter spacing so small maps get several settlements."""
    return GeneratorConfig.model_validate(
        {
            "settlements": {
                "major_spacing": 20.0,
                "medium_spacing": 14.0,
                "small_spacing": 10.0,
            },
        }
    )


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator."""
    return np.random.default_rng(1234)


def biome_grid(rows: list[str]) -> np.ndarray:
    """Build a biome code grid from rows of one-letter codes.

    ``~`` ocean, ``s`` shore, ``p`` plains, ``f`` forest, ``h`` hills,
    ``m`` mountains, ``r`` river, ``l`` lake, ``w`` swamp.
    """
    legend = {
        "~": Biome.OCEAN,
        "s": Biome.SHORE,
        "p": Biome.PLAINS,
        "f": Biome.FOREST,
        "h": Biome.HILLS,
        "m": Biome.MOUNTAINS,
        "r": Biome.RIVER,
        "l": Biome.LAKE,
        "w": Biome.SWAMP,
    }
    return np.array(
        [[biome_code(legend[c]) for c in row] for row in rows], dtype=np.uint8
    )
