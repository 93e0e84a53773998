"""Biome types and their properties."""

from enum import Enum


class Biome(str, Enum):
    """Discrete terrain/ecology classification of a grid cell."""

    DEEP_OCEAN = "deep_ocean"
    OCEAN = "ocean"
    SHORE = "shore"
    BEACH = "beach"
    PLAINS = "plains"
    FOREST = "forest"
    HILLS = "hills"
    MOUNTAINS = "mountains"
    SNOW_PEAKS = "snow_peaks"
    RIVER = "river"
    LAKE = "lake"
    SWAMP = "swamp"
    DESERT = "desert"

    @property
    def is_water(self) -> bool:
        """Whether this biome is a body of water."""
        return self in WATER_BIOMES

    @property
    def is_land(self) -> bool:
        """Whether this biome is dry land."""
        return self not in WATER_BIOMES

    @property
    def blocks_roads(self) -> bool:
        """Whether roads are forbidden from entering this biome."""
        return self in ROAD_BLOCKING_BIOMES


# Define sets for O(1) lookup
WATER_BIOMES = frozenset({
    Biome.DEEP_OCEAN,
    Biome.OCEAN,
    Biome.SHORE,
    Biome.LAKE,
    Biome.RIVER,
})

# Rivers are water but can be bridged
ROAD_BLOCKING_BIOMES = frozenset({
    Biome.DEEP_OCEAN,
    Biome.OCEAN,
    Biome.SHORE,
    Biome.LAKE,
})

SETTLEMENT_BIOMES = frozenset({
    Biome.PLAINS,
    Biome.HILLS,
    Biome.FOREST,
    Biome.DESERT,
    Biome.BEACH,
})


# Compact uint8 storage for biome grids, in declaration order
_BIOME_TO_CODE: dict[Biome, int] = {biome: i for i, biome in enumerate(Biome)}
_CODE_TO_BIOME: dict[int, Biome] = {i: biome for biome, i in _BIOME_TO_CODE.items()}


def biome_code(biome: Biome) -> int:
    """Convert a Biome to its uint8 grid value."""
    return _BIOME_TO_CODE[biome]


def biome_from_code(value: int) -> Biome:
    """Convert a uint8 grid value back to its Biome.

    Raises:
        ValueError: If the value is not a known biome code.
    """
    try:
        return _CODE_TO_BIOME[int(value)]
    except KeyError:
        raise ValueError(f"Unknown biome code: {value}") from None


def codes_for(biomes: frozenset[Biome] | set[Biome]) -> list[int]:
    """uint8 codes for a set of biomes, for use with ``np.isin``."""
    return sorted(_BIOME_TO_CODE[b] for b in biomes)
