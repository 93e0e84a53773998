"""Elevation synthesis: continent formations, island layers, sea level.

Each map picks one continent formation from the continent noise channel.
A formation is a union (pointwise max) of geometric land primitives laid
over an ocean floor of -1; secondary island clusters and rotated coastline
noise are layered on top before the field is split at sea level into a
land range (0, 1] and a water range [-1, 0).
"""

import math
from dataclasses import dataclass, field

import numpy as np
import structlog
from numpy.typing import NDArray

from .noise import Channel, NoiseSampler

logger = structlog.get_logger()

TAU = 2.0 * math.pi

# Reference map size the noise frequencies were tuned on
BASELINE_WIDTH = 160.0
BASELINE_HEIGHT = 120.0

EDGE_FALLOFF_BAND = 0.05
EDGE_CONTINENT_PERCENT = 25

# Below this land target the map is forced to open water
MIN_LAND_TARGET = 0.01
# Maps [-1, 1] onto [-1, -0.06], strictly below the shore/beach boundary
SUBMERGED_SCALE = 0.47


@dataclass
class CoordinateGrid:
    """Normalized cell coordinates plus a cache of lattice noise layers."""

    sampler: NoiseSampler
    width: int
    height: int
    nx: NDArray[np.float64] = field(init=False)
    ny: NDArray[np.float64] = field(init=False)
    xx: NDArray[np.float64] = field(init=False)
    yy: NDArray[np.float64] = field(init=False)
    freq_scale: float = field(init=False)
    _cache: dict = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        self.nx = np.arange(self.width, dtype=np.float64) / self.width
        self.ny = np.arange(self.height, dtype=np.float64) / self.height
        self.xx, self.yy = np.meshgrid(self.nx, self.ny)
        self.freq_scale = min(
            self.width / BASELINE_WIDTH, self.height / BASELINE_HEIGHT
        )

    @property
    def shape(self) -> tuple[int, int]:
        return (self.height, self.width)

    def noise(
        self,
        channel: Channel,
        frequency: float,
        scaled: bool = True,
    ) -> NDArray[np.float64]:
        """Noise layer sampled at ``frequency`` cycles per map.

        Args:
            channel: Noise channel.
            frequency: Multiplier on normalized coordinates.
            scaled: Whether to also apply the map-size frequency scale.

        Returns:
            Array of shape (height, width).
        """
        key = (channel, frequency, scaled)
        if key not in self._cache:
            factor = frequency * (self.freq_scale if scaled else 1.0)
            self._cache[key] = self.sampler.grid(
                channel, self.nx * factor, self.ny * factor
            )
        return self._cache[key]


def _radial_profile(
    dist: NDArray[np.float64],
    radius: float,
    power: float,
) -> NDArray[np.float64]:
    """(1 - d/r)^power inside the radius, 0 outside."""
    return np.clip(1.0 - dist / radius, 0.0, None) ** power


@dataclass(frozen=True)
class Island:
    """A circular land primitive."""

    x: float
    y: float
    radius: float


@dataclass(frozen=True)
class VolcanicChain:
    """Volcanic cones strung along a gently curved subduction line."""

    islands: tuple[Island, ...]

    @classmethod
    def from_noise(cls, sampler: NoiseSampler, land_target: float) -> "VolcanicChain":
        c = Channel.CONTINENT
        chain_angle = sampler.sample(c, 0.5, 0.5) * TAU
        chain_length = 0.6 + land_target * 0.3
        num_islands = 4 + int(land_target * 6.0)

        start_x = 0.5 + sampler.sample(c, 1.5, 1.5) * 0.3
        start_y = 0.5 + sampler.sample(c, 2.5, 2.5) * 0.3

        islands = []
        for i in range(num_islands):
            t = i / num_islands
            curve = math.sin(t * math.pi) * 0.1
            ix = (
                start_x
                + math.cos(chain_angle) * t * chain_length
                + math.sin(chain_angle) * curve
            )
            iy = (
                start_y
                + math.sin(chain_angle) * t * chain_length
                - math.cos(chain_angle) * curve
            )
            scatter_x = sampler.sample(c, i * 3.0, i * 4.0) * 0.03
            scatter_y = sampler.sample(c, i * 4.0, i * 3.0) * 0.03

            # Larger cones in the middle of the chain
            size_factor = 1.0 - abs(t - 0.5) * 0.5
            radius = (0.03 + size_factor * 0.05) * (1.0 + land_target * 0.5)
            islands.append(Island(ix + scatter_x, iy + scatter_y, radius))

        return cls(islands=tuple(islands))

    def edge_falloff(self, has_edge_continent: bool) -> bool:
        return True

    def shape(self, grid: CoordinateGrid) -> NDArray[np.float64]:
        value = np.full(grid.shape, -1.0)
        for island in self.islands:
            dist = np.hypot(grid.xx - island.x, grid.yy - island.y)
            height = _radial_profile(dist, island.radius, 1.5) * 0.8
            value = np.where(dist < island.radius, np.maximum(value, height), value)
        return value


@dataclass(frozen=True)
class TectonicRidge:
    """Elongated, rotated continent with a mountain spine."""

    angle: float
    length: float
    width: float
    center_x: float
    center_y: float

    @classmethod
    def from_noise(cls, sampler: NoiseSampler, land_target: float) -> "TectonicRidge":
        c = Channel.CONTINENT
        return cls(
            angle=sampler.sample(c, 1.0, 2.0) * TAU,
            length=0.3 + land_target * 0.2,
            width=0.2 + land_target * 0.15,
            center_x=0.5 + sampler.sample(c, 3.0, 4.0) * 0.2,
            center_y=0.5 + sampler.sample(c, 4.0, 3.0) * 0.2,
        )

    def edge_falloff(self, has_edge_continent: bool) -> bool:
        return False

    def shape(self, grid: CoordinateGrid) -> NDArray[np.float64]:
        dx = grid.xx - self.center_x
        dy = grid.yy - self.center_y
        cos_a, sin_a = math.cos(self.angle), math.sin(self.angle)
        along = np.abs(dx * cos_a - dy * sin_a)
        across = np.abs(dx * sin_a + dy * cos_a)

        inside = (along < self.length) & (across < self.width)
        base_height = (1.0 - across / self.width) * 0.8
        variation = grid.noise(Channel.ELEVATION, 20.0) * 0.3
        taper = 1.0 - (along / self.length) * 0.5

        return np.where(inside, np.maximum(-1.0, base_height * taper + variation), -1.0)


@dataclass(frozen=True)
class CrescentArc:
    """Island arc following part of a circle."""

    center_x: float
    center_y: float
    radius: float
    width: float
    start_angle: float
    span: float

    @classmethod
    def from_noise(cls, sampler: NoiseSampler, land_target: float) -> "CrescentArc":
        c = Channel.CONTINENT
        return cls(
            center_x=0.5 + sampler.sample(c, 5.0, 6.0) * 0.3,
            center_y=0.5 + sampler.sample(c, 6.0, 5.0) * 0.3,
            radius=0.3 + land_target * 0.2,
            width=0.08 + land_target * 0.1,
            start_angle=sampler.sample(c, 7.0, 8.0) * math.pi,
            span=math.pi * (0.5 + land_target * 0.5),
        )

    def edge_falloff(self, has_edge_continent: bool) -> bool:
        return False

    def shape(self, grid: CoordinateGrid) -> NDArray[np.float64]:
        dx = grid.xx - self.center_x
        dy = grid.yy - self.center_y
        dist = np.hypot(dx, dy)
        angle_diff = np.mod(np.arctan2(dy, dx) - self.start_angle, TAU)
        offset = np.abs(dist - self.radius)

        inside = (angle_diff < self.span) & (offset < self.width)
        height = (1.0 - offset / self.width) * 0.7 + grid.noise(
            Channel.ELEVATION, 15.0
        ) * 0.3

        return np.where(inside, np.maximum(-1.0, height), -1.0)


@dataclass(frozen=True)
class MultiPlate:
    """Overlapping tectonic plates with collision ranges and rift valleys."""

    plates: tuple[Island, ...]
    land_target: float

    @classmethod
    def from_noise(cls, sampler: NoiseSampler, land_target: float) -> "MultiPlate":
        c = Channel.CONTINENT
        num_plates = 2 + int(land_target * 2.0)
        plates = []
        for p in range(num_plates):
            offset = p * 50.0
            plates.append(
                Island(
                    x=0.5 + sampler.sample(c, offset * 0.3, offset * 0.4) * 0.4,
                    y=0.5 + sampler.sample(c, offset * 0.4, offset * 0.3) * 0.4,
                    radius=0.2 + abs(sampler.sample(c, offset * 0.5, offset * 0.6)) * 0.2,
                )
            )
        return cls(plates=tuple(plates), land_target=land_target)

    def edge_falloff(self, has_edge_continent: bool) -> bool:
        return not has_edge_continent

    def shape(self, grid: CoordinateGrid) -> NDArray[np.float64]:
        value = np.full(grid.shape, -1.0)

        # Irregular plate boundaries
        boundary = (
            grid.noise(Channel.ELEVATION, 8.0) * 0.15
            + grid.noise(Channel.DETAIL, 15.0) * 0.1
        )
        rift = grid.noise(Channel.CONTINENT, 20.0)
        distances = [np.hypot(grid.xx - p.x, grid.yy - p.y) for p in self.plates]

        for i, plate in enumerate(self.plates):
            dist = distances[i]
            effective = plate.radius + boundary
            inside = dist < effective
            safe = np.where(effective > 0.0, effective, 1.0)
            plate_height = (1.0 - dist / safe) * 0.5

            near_other = np.zeros(grid.shape, dtype=bool)
            for j, other in enumerate(self.plates):
                if j != i:
                    near_other |= distances[j] < other.radius + 0.05

            height = np.select(
                [near_other & (rift > 0.2), rift < -0.3],
                [plate_height + 0.3, plate_height * 0.5],
                default=plate_height,
            )
            value = np.where(inside, np.maximum(value, height), value)

        # Thin land bridges between plates
        if self.land_target > 0.3:
            isthmus = grid.noise(Channel.ELEVATION, 6.0)
            value = np.where(
                (isthmus > 0.4) & (value > -0.5), np.maximum(value, 0.3), value
            )

        return value


@dataclass(frozen=True)
class ArchipelagoIsland:
    """An island of a fractal cluster with its own profile."""

    x: float
    y: float
    radius: float
    power: float
    peak: float


@dataclass(frozen=True)
class Archipelago:
    """Clusters of power-law sized, distorted islands joined by shallows."""

    islands: tuple[ArchipelagoIsland, ...]

    @classmethod
    def from_noise(cls, sampler: NoiseSampler, land_target: float) -> "Archipelago":
        c = Channel.CONTINENT
        e = Channel.ELEVATION
        num_clusters = 1 + int(land_target * 2.0)
        base_islands = 3 + int(land_target * 5.0)

        islands = []
        for k in range(num_clusters):
            cluster_seed = k * 47.3
            cx = 0.5 + sampler.sample(c, cluster_seed * 0.13, cluster_seed * 0.17) * 0.4
            cy = 0.5 + sampler.sample(c, cluster_seed * 0.19, cluster_seed * 0.11) * 0.4

            for i in range(base_islands):
                island_seed = i * 13.7 + cluster_seed
                # Many small islands, few large
                size_factor = math.exp(-(i / 3.0))
                size_variation = abs(
                    sampler.sample(e, island_seed * 0.23, island_seed * 0.29)
                )

                scatter = size_factor * 0.2 + 0.05
                angle = island_seed * 2.3
                radius = scatter * (1.0 + size_variation)
                ix = (
                    cx
                    + math.cos(angle) * radius
                    + sampler.sample(c, island_seed * 0.31, island_seed * 0.37) * scatter
                )
                iy = (
                    cy
                    + math.sin(angle) * radius
                    + sampler.sample(c, island_seed * 0.41, island_seed * 0.43) * scatter
                )

                islands.append(
                    ArchipelagoIsland(
                        x=ix,
                        y=iy,
                        radius=(0.02 + size_factor * 0.1)
                        * (1.0 + size_variation * 0.5)
                        * math.sqrt(land_target),
                        power=1.5 + size_variation,
                        peak=0.4 + size_factor * 0.4,
                    )
                )

        return cls(islands=tuple(islands))

    def edge_falloff(self, has_edge_continent: bool) -> bool:
        return False

    def shape(self, grid: CoordinateGrid) -> NDArray[np.float64]:
        value = np.full(grid.shape, -1.0)
        distortion = grid.noise(Channel.DETAIL, 50.0) * 0.3

        for island in self.islands:
            if island.radius <= 0.0:
                continue
            dx = grid.xx - island.x
            dy = grid.yy - island.y
            dist = np.sqrt(dx * dx * (1.0 + distortion) + dy * dy * (1.0 - distortion))
            height = _radial_profile(dist, island.radius, island.power) * island.peak
            value = np.where(dist < island.radius, np.maximum(value, height), value)

        # Shallow underwater ridges between islands
        ridge = grid.noise(Channel.ELEVATION, 5.0)
        return np.where(
            (ridge > 0.3) & (value > -0.8), np.maximum(value, -0.1 + ridge * 0.3), value
        )


Formation = VolcanicChain | TectonicRidge | CrescentArc | MultiPlate | Archipelago

# Indexed by the formation type drawn from the continent channel
FORMATIONS: tuple[type, ...] = (
    VolcanicChain,
    TectonicRidge,
    CrescentArc,
    MultiPlate,
    Archipelago,
)


def formation_index(sampler: NoiseSampler) -> int:
    """Formation type in [0, 5) drawn from the continent channel."""
    formation_seed = sampler.sample(Channel.CONTINENT, 0.777, 0.333) * 100.0
    return int(abs(formation_seed)) % len(FORMATIONS)


def has_edge_continent(sampler: NoiseSampler) -> bool:
    """Whether land may run off the map edge (about a quarter of seeds)."""
    seed_hash = int(sampler.sample(Channel.CONTINENT, 0.123, 0.456) * 1000.0)
    return abs(seed_hash) % 100 < EDGE_CONTINENT_PERCENT


def choose_formation(sampler: NoiseSampler, land_target: float) -> Formation:
    """Build the continent formation for this seed.

    Args:
        sampler: Noise sampler for the world seed.
        land_target: Target land fraction in [0, 1].

    Returns:
        The formation, parameterized from continent noise.
    """
    formation_cls = FORMATIONS[formation_index(sampler)]
    return formation_cls.from_noise(sampler, land_target)


def add_island_clusters(
    value: NDArray[np.float64],
    grid: CoordinateGrid,
    land_target: float,
) -> NDArray[np.float64]:
    """Layer multi-scale clustered islands over a continent field.

    Args:
        value: Continent value field.
        grid: Coordinate grid.
        land_target: Target land fraction in [0, 1].

    Returns:
        Field with secondary islands unioned in.
    """
    large = grid.noise(Channel.CONTINENT, 3.0)
    medium = grid.noise(Channel.ELEVATION, 8.0)
    small = grid.noise(Channel.DETAIL, 25.0)

    # Squared for clustering: islands near other islands
    cluster = (large * 0.5 + 0.5) ** 2.0
    island_noise = large * 0.4 + medium * 0.4 * cluster + small * 0.2
    speckle = grid.noise(Channel.DETAIL, 100.0, scaled=False)

    is_large = island_noise > 0.6
    is_medium = ~is_large & (island_noise > 0.45) & (cluster > 0.3)
    is_small = (
        ~is_large
        & ~is_medium
        & (island_noise > 0.35)
        & (speckle > 0.5 - 0.3 * land_target)
    )

    value = np.where(is_large, np.maximum(value, island_noise * 0.8), value)
    value = np.where(is_medium, np.maximum(value, island_noise * 0.5), value)
    value = np.where(is_small, np.maximum(value, island_noise * 0.3), value)
    return value


def apply_edge_falloff(
    value: NDArray[np.float64],
    grid: CoordinateGrid,
) -> NDArray[np.float64]:
    """Sink land in the outer band of the map so it does not hit the border."""
    edge_dist = np.minimum(0.5 - np.abs(grid.xx - 0.5), 0.5 - np.abs(grid.yy - 0.5))
    ratio = edge_dist / EDGE_FALLOFF_BAND
    return np.where(edge_dist < EDGE_FALLOFF_BAND, value * ratio - (1.0 - ratio), value)


def coastline_detail(grid: CoordinateGrid) -> NDArray[np.float64]:
    """Fine coastline noise sampled on rotated axes to avoid banding."""
    angle = grid.noise(Channel.CONTINENT, 2.0, scaled=False) * math.pi
    cos_a, sin_a = np.cos(angle), np.sin(angle)
    rotated_x = grid.xx * cos_a - grid.yy * sin_a
    rotated_y = grid.xx * sin_a + grid.yy * cos_a

    factor = 40.0 * grid.freq_scale
    rotated = grid.sampler.points(
        Channel.ELEVATION, rotated_x * factor, rotated_y * factor
    )
    return rotated * 0.1 + grid.noise(Channel.DETAIL, 80.0) * 0.05


def sea_level_for(land_target: float) -> float:
    """Continent value separating land from water for a land target."""
    return -0.1 + (1.0 - land_target) * 0.3


def apply_sea_level(
    base: NDArray[np.float64],
    sea_level: float,
) -> NDArray[np.float64]:
    """Rescale land into (0, 1] and water into [-1, 0).

    Args:
        base: Raw continent-plus-detail field.
        sea_level: Threshold between land and water.

    Returns:
        Final elevation field.
    """
    land = np.clip((base - sea_level) / (1.0 - sea_level), 0.01, 1.0)
    water = np.maximum((base - sea_level) / (1.0 + sea_level), -1.0)
    return np.where(base > sea_level, land, water)


def synthesize_elevation(
    sampler: NoiseSampler,
    width: int,
    height: int,
    land_target: float,
) -> NDArray[np.float64]:
    """Generate the elevation field.

    Args:
        sampler: Noise sampler for the world seed.
        width: Map width in cells.
        height: Map height in cells.
        land_target: Target land fraction in [0, 1].

    Returns:
        Elevation array of shape (height, width) in [-1, 1].
    """
    if width == 0 or height == 0:
        return np.zeros((height, width), dtype=np.float64)

    grid = CoordinateGrid(sampler, width, height)
    formation = choose_formation(sampler, land_target)
    edge_continent = has_edge_continent(sampler)

    logger.debug(
        "formation_selected",
        formation=type(formation).__name__,
        edge_continent=edge_continent,
    )

    value = formation.shape(grid)

    if land_target > 0.2:
        value = add_island_clusters(value, grid, land_target)

    if formation.edge_falloff(edge_continent):
        value = apply_edge_falloff(value, grid)

    base = value + coastline_detail(grid)
    elevation = apply_sea_level(base, sea_level_for(land_target))

    if land_target < MIN_LAND_TARGET:
        elevation = -1.0 + (elevation + 1.0) * SUBMERGED_SCALE

    return elevation
