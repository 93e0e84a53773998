"""Settlement placement with Zipf-distributed city sizes."""

import math

import numpy as np
import structlog
from numpy.typing import NDArray

from .biomes import SETTLEMENT_BIOMES, Biome, biome_from_code, codes_for
from .config import SettlementConfig
from .models import City, SettlementTier
from .names import city_name

logger = structlog.get_logger()

MIN_DENSITY = 0.01
MAJOR_MIN_DENSITY = 0.1
MEDIUM_MIN_DENSITY = 0.05

# Acceptance probability per biome for non-major settlements
BIOME_SUITABILITY: dict[Biome, float] = {
    Biome.PLAINS: 1.0,
    Biome.BEACH: 0.7,
    Biome.HILLS: 0.5,
    Biome.FOREST: 0.2,
}


def candidate_cells(
    biomes: NDArray[np.uint8],
    margin: int,
) -> list[tuple[int, int]]:
    """Settleable cells at least ``margin`` from the border, row-major.

    Args:
        biomes: Biome code grid.
        margin: Cells to keep free along each edge.

    Returns:
        List of (x, y) cells.
    """
    height, width = biomes.shape
    mask = np.zeros((height, width), dtype=bool)
    if height > 2 * margin and width > 2 * margin:
        inner = biomes[margin : height - margin, margin : width - margin]
        mask[margin : height - margin, margin : width - margin] = np.isin(
            inner, codes_for(SETTLEMENT_BIOMES)
        )
    ys, xs = np.nonzero(mask)
    return [(int(x), int(y)) for y, x in zip(ys, xs)]


def settlement_counts(
    density: float,
    land_factor: float,
    config: SettlementConfig,
) -> tuple[int, int, int]:
    """Number of (major, medium, small) settlements to attempt.

    Args:
        density: City density in [0, 1].
        land_factor: Fraction of the map that is settleable.
        config: Settlement configuration.

    Returns:
        Tuple of (major, medium, small) counts.
    """
    major = 0
    if density >= MAJOR_MIN_DENSITY:
        major = min(
            int((density - MAJOR_MIN_DENSITY) * 10.0 * land_factor * 2.0),
            config.max_major,
        )

    medium = 0
    if density >= MEDIUM_MIN_DENSITY:
        medium = min(
            int((density - MEDIUM_MIN_DENSITY) * 25.0 * land_factor * 2.0),
            config.max_medium,
        )

    small = min(int(density * 70.0 * land_factor * 2.0), config.max_small)
    return major, medium, small


def plan_settlements(
    counts: tuple[int, int, int],
    rng: np.random.Generator,
    config: SettlementConfig,
) -> list[tuple[SettlementTier, int]]:
    """Tier and population of each settlement, in placement order.

    Major city populations follow Zipf's law: the rank-r city has
    ``base_population // r`` inhabitants.
    """
    major, medium, small = counts
    plan = [
        (SettlementTier.MAJOR, config.base_population // rank)
        for rank in range(1, major + 1)
    ]
    low, high = config.medium_population
    plan += [
        (SettlementTier.MEDIUM, int(rng.integers(low, high))) for _ in range(medium)
    ]
    low, high = config.small_population
    plan += [
        (SettlementTier.SMALL, int(rng.integers(low, high))) for _ in range(small)
    ]
    return plan


def _spacing(tier: SettlementTier, config: SettlementConfig) -> float:
    if tier is SettlementTier.MAJOR:
        return config.major_spacing
    if tier is SettlementTier.MEDIUM:
        return config.medium_spacing
    return config.small_spacing


def _is_suitable(
    biome: Biome,
    tier: SettlementTier,
    rng: np.random.Generator,
) -> bool:
    """Biome acceptance; majors always accept the coast."""
    if biome is Biome.PLAINS:
        return True
    if biome is Biome.BEACH and tier is SettlementTier.MAJOR:
        return True
    chance = BIOME_SUITABILITY.get(biome)
    if chance is None:
        return False
    return bool(rng.random() < chance)


def _violates_spacing(
    x: int,
    y: int,
    tier: SettlementTier,
    placed: list[City],
    check_alignment: bool,
    rng: np.random.Generator,
    config: SettlementConfig,
) -> bool:
    """Whether a candidate is too close to, or lined up with, a placed city.

    Small settlements may sit closer to major cities as suburbs: never
    nearer than ``suburb_min_distance``, and within ``suburb_range`` the
    spacing for that pair drops to ``suburb_spacing`` with probability
    ``suburb_chance``.
    """
    for other in placed:
        dx = x - other.x
        dy = y - other.y
        dist = math.hypot(dx, dy)

        aligned = abs(dx) < config.alignment_tolerance or abs(dy) < config.alignment_tolerance
        if check_alignment and aligned and dist < config.alignment_range:
            return True

        min_dist = _spacing(tier, config)
        if tier is SettlementTier.SMALL and other.tier is SettlementTier.MAJOR:
            if dist < config.suburb_min_distance:
                return True
            if dist < config.suburb_range and rng.random() < config.suburb_chance:
                min_dist = config.suburb_spacing

        if dist < min_dist:
            return True

    return False


def place_settlements(
    biomes: NDArray[np.uint8],
    density: float,
    rng: np.random.Generator,
    config: SettlementConfig,
) -> list[City]:
    """Place major cities, medium towns and small towns.

    Args:
        biomes: Biome code grid (after river carving).
        density: City density in [0, 1].
        rng: Random number generator.
        config: Settlement configuration.

    Returns:
        Placed settlements; ones that exhaust their attempts are omitted.
    """
    if density < MIN_DENSITY:
        return []

    candidates = candidate_cells(biomes, config.edge_margin)
    if not candidates:
        return []

    land_factor = len(candidates) / biomes.size
    counts = settlement_counts(density, land_factor, config)
    plan = plan_settlements(counts, rng, config)

    cities: list[City] = []
    for tier, population in plan:
        for attempt in range(config.placement_attempts):
            x, y = candidates[int(rng.integers(0, len(candidates)))]
            biome = biome_from_code(biomes[y, x])

            if not _is_suitable(biome, tier, rng):
                continue

            check_alignment = attempt < config.alignment_attempts
            if _violates_spacing(x, y, tier, cities, check_alignment, rng, config):
                continue

            cities.append(
                City(
                    x=x,
                    y=y,
                    name=city_name(len(cities), rng),
                    population=population,
                    tier=tier,
                )
            )
            break

    logger.debug(
        "settlements_planned",
        candidates=len(candidates),
        major=counts[0],
        medium=counts[1],
        small=counts[2],
        placed=len(cities),
    )
    return cities
