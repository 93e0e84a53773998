"""Procedural world map generation package.

This package generates fictional landscapes from a seed: elevation,
climate and biomes, rivers, Zipf-sized settlements, a road network with
bridges, and named map labels.
"""

from .biomes import Biome
from .config import GenerationSettings, GeneratorConfig, load_config
from .exceptions import ConfigNotFoundError, InvalidDimensionsError, MapperError
from .generator import generate
from .models import (
    Bridge,
    City,
    PlaceLabel,
    Road,
    RoadType,
    SettlementTier,
    TerrainPoint,
    WorldMap,
)
from .validation import ValidationResult, validate_world

__all__ = [
    "Biome",
    "Bridge",
    "City",
    "ConfigNotFoundError",
    "GenerationSettings",
    "GeneratorConfig",
    "InvalidDimensionsError",
    "MapperError",
    "PlaceLabel",
    "Road",
    "RoadType",
    "SettlementTier",
    "TerrainPoint",
    "ValidationResult",
    "WorldMap",
    "generate",
    "load_config",
    "validate_world",
]
