"""Core value types and the generated world map."""

from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel

from .biomes import Biome, biome_from_code


class TerrainPoint(BaseModel, frozen=True):
    """Per-cell terrain sample."""

    elevation: float
    moisture: float
    temperature: float
    biome: Biome


class SettlementTier(str, Enum):
    """Settlement size class."""

    MAJOR = "major"
    MEDIUM = "medium"
    SMALL = "small"


class City(BaseModel, frozen=True):
    """A named settlement on a land cell."""

    x: int
    y: int
    name: str
    population: int
    tier: SettlementTier

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.y)


class Bridge(BaseModel, frozen=True):
    """A road crossing a river cell."""

    x: int
    y: int
    name: str


class RoadType(str, Enum):
    """Road class, from backbone to footpath."""

    HIGHWAY = "highway"
    ROAD = "road"
    TRAIL = "trail"


class Road(BaseModel, frozen=True):
    """A named polyline of (x, y) cells."""

    path: tuple[tuple[int, int], ...]
    name: str
    road_type: RoadType
    bridges: tuple[Bridge, ...] = ()


class PlaceLabel(BaseModel, frozen=True):
    """A named map feature anchored at a fractional position."""

    x: float
    y: float
    name: str
    feature_type: str


class WorldMap:
    """Generated world: terrain grids plus placed features.

    Grids are indexed ``[y, x]`` with shape (height, width) and are
    read-only. Rivers are (x, y) paths.
    """

    def __init__(
        self,
        elevation: NDArray[np.float64],
        moisture: NDArray[np.float64],
        temperature: NDArray[np.float64],
        biomes: NDArray[np.uint8],
        rivers: list[list[tuple[int, int]]] | None = None,
        cities: list[City] | None = None,
        roads: list[Road] | None = None,
        bridges: list[Bridge] | None = None,
        labels: list[PlaceLabel] | None = None,
    ):
        shapes = {elevation.shape, moisture.shape, temperature.shape, biomes.shape}
        if len(shapes) != 1:
            raise ValueError(f"Grid shapes differ: {sorted(shapes)}")

        self.elevation = elevation
        self.moisture = moisture
        self.temperature = temperature
        self.biomes = biomes
        for grid in (self.elevation, self.moisture, self.temperature, self.biomes):
            grid.setflags(write=False)

        self.rivers = tuple(tuple(path) for path in rivers or ())
        self.cities = tuple(cities or ())
        self.roads = tuple(roads or ())
        self.bridges = tuple(bridges or ())
        self.labels = tuple(labels or ())

    @classmethod
    def empty(cls, width: int, height: int) -> "WorldMap":
        """A featureless map of the given shape."""
        return cls(
            elevation=np.zeros((height, width), dtype=np.float64),
            moisture=np.zeros((height, width), dtype=np.float64),
            temperature=np.zeros((height, width), dtype=np.float64),
            biomes=np.zeros((height, width), dtype=np.uint8),
        )

    @property
    def width(self) -> int:
        return self.elevation.shape[1]

    @property
    def height(self) -> int:
        return self.elevation.shape[0]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def biome_at(self, x: int, y: int) -> Biome:
        """Biome of the cell at column ``x``, row ``y``."""
        return biome_from_code(self.biomes[y, x])

    def terrain_point(self, x: int, y: int) -> TerrainPoint:
        """Full terrain sample of the cell at column ``x``, row ``y``.

        Raises:
            IndexError: If the cell is outside the map.
        """
        if not self.in_bounds(x, y):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height} map")
        return TerrainPoint(
            elevation=float(self.elevation[y, x]),
            moisture=float(self.moisture[y, x]),
            temperature=float(self.temperature[y, x]),
            biome=self.biome_at(x, y),
        )

    def biome_counts(self) -> dict[Biome, int]:
        """Cell count per biome present on the map."""
        codes, counts = np.unique(self.biomes, return_counts=True)
        return {biome_from_code(c): int(n) for c, n in zip(codes, counts)}

    def to_dict(self) -> dict[str, Any]:
        """Plain structural dump for renderers and serializers."""
        return {
            "width": self.width,
            "height": self.height,
            "elevation": self.elevation.tolist(),
            "moisture": self.moisture.tolist(),
            "temperature": self.temperature.tolist(),
            "biomes": [
                [biome_from_code(v).value for v in row] for row in self.biomes
            ],
            "rivers": [[list(cell) for cell in path] for path in self.rivers],
            "cities": [c.model_dump(mode="json") for c in self.cities],
            "roads": [r.model_dump(mode="json") for r in self.roads],
            "bridges": [b.model_dump(mode="json") for b in self.bridges],
            "labels": [label.model_dump(mode="json") for label in self.labels],
        }
