"""River simulation: steepest-descent tracing and bank erosion."""

from dataclasses import dataclass
from enum import Enum

import numpy as np
import structlog
from numpy.typing import NDArray

from .biomes import Biome, biome_code
from .config import RiverConfig

logger = structlog.get_logger()

# (dx, dy) in scan order; ties keep the first lowest neighbour
NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = tuple(
    (dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0)
)

MIN_DENSITY = 0.01


class RiverOutcome(str, Enum):
    """How a traced river ended."""

    REACHED_SEA = "reached_sea"
    POOLED = "pooled"
    ABANDONED = "abandoned"


@dataclass
class RiverTrace:
    """A traced river path and how it terminated."""

    path: list[tuple[int, int]]  # (x, y) coordinates
    outcome: RiverOutcome

    @property
    def committed(self) -> bool:
        return self.outcome is not RiverOutcome.ABANDONED


def river_count(density: float, rng: np.random.Generator, config: RiverConfig) -> int:
    """Number of river candidates for a density in [0, 1]."""
    if density < MIN_DENSITY:
        return 0
    low = int(density * config.rivers_per_density_min)
    high = int(density * config.rivers_per_density_max)
    if low == high:
        return low
    return int(rng.integers(low, high + 1))


def find_river_source(
    elevation: NDArray[np.float64],
    rng: np.random.Generator,
    config: RiverConfig,
) -> tuple[int, int] | None:
    """Pick a random cell of mid-range elevation.

    Args:
        elevation: Elevation field.
        rng: Random number generator.
        config: River configuration.

    Returns:
        (x, y) of the source, or None if no attempt found one.
    """
    height, width = elevation.shape
    for _ in range(config.start_attempts):
        x = int(rng.integers(0, width))
        y = int(rng.integers(0, height))
        if config.source_min_elevation < elevation[y, x] < config.source_max_elevation:
            return (x, y)
    return None


def trace_river(
    elevation: NDArray[np.float64],
    source: tuple[int, int],
    config: RiverConfig,
) -> RiverTrace:
    """Follow steepest descent from a source.

    Each step moves to the lowest unvisited 8-neighbour that is strictly
    lower than the current cell.

    Args:
        elevation: Elevation field.
        source: Starting (x, y) cell.
        config: River configuration.

    Returns:
        RiverTrace with the path and its outcome.
    """
    height, width = elevation.shape
    x, y = source
    path: list[tuple[int, int]] = []
    visited: set[tuple[int, int]] = set()

    for _ in range(config.max_steps):
        path.append((x, y))
        visited.add((x, y))
        current = elevation[y, x]

        if current < config.sea_level:
            if len(path) > config.min_sea_length:
                return RiverTrace(path, RiverOutcome.REACHED_SEA)
            return RiverTrace(path, RiverOutcome.ABANDONED)

        lowest = current
        next_cell = None
        for dx, dy in NEIGHBOR_OFFSETS:
            nx, ny = x + dx, y + dy
            if not (0 <= nx < width and 0 <= ny < height):
                continue
            if (nx, ny) not in visited and elevation[ny, nx] < lowest:
                lowest = elevation[ny, nx]
                next_cell = (nx, ny)

        if next_cell is None:
            if len(path) > config.min_lake_length and current < config.lake_level:
                return RiverTrace(path, RiverOutcome.POOLED)
            return RiverTrace(path, RiverOutcome.ABANDONED)

        x, y = next_cell

    return RiverTrace(path, RiverOutcome.ABANDONED)


def simulate_rivers(
    elevation: NDArray[np.float64],
    density: float,
    rng: np.random.Generator,
    config: RiverConfig,
) -> list[list[tuple[int, int]]]:
    """Trace river candidates and keep the committed ones.

    Args:
        elevation: Elevation field (not modified).
        density: River density in [0, 1].
        rng: Random number generator.
        config: River configuration.

    Returns:
        List of committed river paths in (x, y) coordinates.
    """
    if elevation.size == 0:
        return []

    candidates = river_count(density, rng, config)
    rivers: list[list[tuple[int, int]]] = []
    outcomes = {outcome: 0 for outcome in RiverOutcome}
    skipped = 0

    for _ in range(candidates):
        source = find_river_source(elevation, rng, config)
        if source is None:
            skipped += 1
            continue

        trace = trace_river(elevation, source, config)
        outcomes[trace.outcome] += 1
        if trace.committed:
            rivers.append(trace.path)

    logger.debug(
        "rivers_traced",
        candidates=candidates,
        no_source=skipped,
        **{outcome.value: n for outcome, n in outcomes.items()},
    )
    return rivers


def carve_rivers(
    elevation: NDArray[np.float64],
    biomes: NDArray[np.uint8],
    rivers: list[list[tuple[int, int]]],
    config: RiverConfig,
) -> tuple[NDArray[np.float64], NDArray[np.uint8]]:
    """Mark river cells and erode them and their banks.

    Args:
        elevation: Elevation field.
        biomes: Biome code grid.
        rivers: River paths in (x, y) coordinates.
        config: River configuration.

    Returns:
        Tuple of (eroded elevation, updated biomes); inputs are not modified.
    """
    elevation = elevation.copy()
    biomes = biomes.copy()
    height, width = elevation.shape
    river_code = biome_code(Biome.RIVER)

    for path in rivers:
        for x, y in path:
            if not (0 <= x < width and 0 <= y < height):
                continue
            biomes[y, x] = river_code
            elevation[y, x] *= config.erosion

            # The cell itself and its orthogonal neighbours
            for dx, dy in ((0, -1), (-1, 0), (0, 0), (1, 0), (0, 1)):
                nx, ny = x + dx, y + dy
                if 0 <= nx < width and 0 <= ny < height:
                    if elevation[ny, nx] > config.bank_floor:
                        elevation[ny, nx] *= config.bank_erosion

    return elevation, biomes
