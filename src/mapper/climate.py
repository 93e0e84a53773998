"""Moisture and temperature fields, and biome classification."""

import numpy as np
from numpy.typing import NDArray

from .biomes import Biome, biome_code, biome_from_code
from .noise import Channel, NoiseSampler

# Elevation bands, lowest first
DEEP_OCEAN_LEVEL = -0.4
OCEAN_LEVEL = -0.15
SHORE_LEVEL = -0.05
BEACH_LEVEL = 0.05
COASTAL_LOWLAND_LEVEL = 0.15
LOWLAND_LEVEL = 0.25
HILLS_LEVEL = 0.5
MOUNTAINS_LEVEL = 0.75

# Coastal lowland (BEACH_LEVEL .. COASTAL_LOWLAND_LEVEL)
COASTAL_SWAMP_MOISTURE = 0.85
COASTAL_FOREST_MOISTURE = 0.55
COASTAL_DESERT_MOISTURE = 0.25
COASTAL_DESERT_TEMPERATURE = 0.7

# Lowland (COASTAL_LOWLAND_LEVEL .. LOWLAND_LEVEL)
LOWLAND_SWAMP_MOISTURE = 0.8
LOWLAND_SWAMP_TEMPERATURE = 0.5
LOWLAND_FOREST_MOISTURE = 0.5
LOWLAND_DESERT_MOISTURE = 0.3
LOWLAND_DESERT_TEMPERATURE = 0.6


def _scaled_axes(
    width: int, height: int, frequency: float
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    scale = frequency / min(width, height)
    return (
        np.arange(width, dtype=np.float64) * scale,
        np.arange(height, dtype=np.float64) * scale,
    )


def make_moisture(sampler: NoiseSampler, width: int, height: int) -> NDArray[np.float64]:
    """Generate moisture field.

    Args:
        sampler: Noise sampler for the world seed.
        width: Map width in cells.
        height: Map height in cells.

    Returns:
        2D moisture array in range [0, 1].
    """
    if width == 0 or height == 0:
        return np.zeros((height, width), dtype=np.float64)

    xs, ys = _scaled_axes(width, height, 3.0)
    moisture = sampler.grid(Channel.MOISTURE, xs, ys) * 0.5 + 0.5
    return np.clip(moisture, 0.0, 1.0)


def make_temperature(
    sampler: NoiseSampler,
    elevation: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Generate temperature field.

    Temperature falls off towards both map edges in y (latitude) and with
    elevation.

    Args:
        sampler: Noise sampler for the world seed.
        elevation: Elevation field in [-1, 1].

    Returns:
        2D temperature array in range [0, 1].
    """
    height, width = elevation.shape
    if width == 0 or height == 0:
        return np.zeros((height, width), dtype=np.float64)

    xs, ys = _scaled_axes(width, height, 2.0)
    base = sampler.grid(Channel.TEMPERATURE, xs, ys) * 0.5 + 0.5

    latitude = np.abs(np.arange(height, dtype=np.float64) / height - 0.5) * 2.0
    altitude = (elevation + 1.0) / 2.0

    temperature = base * (1.0 - latitude[:, np.newaxis] * 0.3) * (1.0 - altitude * 0.4)
    return np.clip(temperature, 0.0, 1.0)


def classify_biomes(
    elevation: NDArray[np.float64],
    moisture: NDArray[np.float64],
    temperature: NDArray[np.float64],
) -> NDArray[np.uint8]:
    """Classify each cell into a biome.

    The first matching condition wins, so each band only needs its
    upper bound.

    Args:
        elevation: Elevation field.
        moisture: Moisture field [0, 1].
        temperature: Temperature field [0, 1].

    Returns:
        2D array of biome codes as uint8.
    """
    e, m, t = elevation, moisture, temperature
    coastal = e < COASTAL_LOWLAND_LEVEL
    lowland = e < LOWLAND_LEVEL

    conditions = [
        e < DEEP_OCEAN_LEVEL,
        e < OCEAN_LEVEL,
        e < SHORE_LEVEL,
        e < BEACH_LEVEL,
        coastal & (m > COASTAL_SWAMP_MOISTURE),
        coastal & (m > COASTAL_FOREST_MOISTURE),
        coastal & (m < COASTAL_DESERT_MOISTURE) & (t > COASTAL_DESERT_TEMPERATURE),
        coastal,
        lowland & (m > LOWLAND_SWAMP_MOISTURE) & (t < LOWLAND_SWAMP_TEMPERATURE),
        lowland & (m > LOWLAND_FOREST_MOISTURE),
        lowland & (m < LOWLAND_DESERT_MOISTURE) & (t > LOWLAND_DESERT_TEMPERATURE),
        lowland,
        e < HILLS_LEVEL,
        e < MOUNTAINS_LEVEL,
    ]
    choices = [
        Biome.DEEP_OCEAN,
        Biome.OCEAN,
        Biome.SHORE,
        Biome.BEACH,
        Biome.SWAMP,
        Biome.FOREST,
        Biome.DESERT,
        Biome.PLAINS,
        Biome.SWAMP,
        Biome.FOREST,
        Biome.DESERT,
        Biome.PLAINS,
        Biome.HILLS,
        Biome.MOUNTAINS,
    ]

    return np.select(
        conditions,
        [biome_code(b) for b in choices],
        default=biome_code(Biome.SNOW_PEAKS),
    ).astype(np.uint8)


def determine_biome(elevation: float, moisture: float, temperature: float) -> Biome:
    """Scalar form of :func:`classify_biomes` for a single cell."""
    code = classify_biomes(
        np.array([elevation]), np.array([moisture]), np.array([temperature])
    )[0]
    return biome_from_code(code)
