"""Region discovery and named map labels."""

import math
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
import structlog
from numpy.typing import NDArray
from scipy import ndimage

from .biomes import Biome, codes_for
from .config import LabelConfig
from .models import PlaceLabel
from .names import forest_name, mountain_name, ocean_name, river_name, swamp_name

logger = structlog.get_logger()

Cell = tuple[int, int]

NEIGHBOR_OFFSETS: tuple[Cell, ...] = tuple(
    (dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0)
)

# Label spacing is tuned for this map size and scales with it
BASELINE_WIDTH = 160.0
BASELINE_HEIGHT = 120.0

RIVER_LABEL_FRACTIONS = ((1, 3), (1, 2), (2, 3))


def find_regions(
    biomes: NDArray[np.uint8],
    predicate: Callable[[Biome], bool],
    min_size: int = 10,
) -> list[list[Cell]]:
    """8-connected regions of cells whose biome satisfies a predicate.

    Regions are discovered in row-major order of their first cell.

    Args:
        biomes: Biome code grid.
        predicate: Membership test per biome.
        min_size: Regions with this many cells or fewer are dropped.

    Returns:
        List of regions, each a list of (x, y) cells.
    """
    height, width = biomes.shape
    member = np.isin(biomes, codes_for({b for b in Biome if predicate(b)})).tolist()
    visited = [[False] * width for _ in range(height)]
    regions = []

    for y in range(height):
        for x in range(width):
            if visited[y][x] or not member[y][x]:
                continue

            region = []
            stack = [(x, y)]
            while stack:
                cx, cy = stack.pop()
                if visited[cy][cx]:
                    continue
                visited[cy][cx] = True
                region.append((cx, cy))

                for dx, dy in NEIGHBOR_OFFSETS:
                    nx, ny = cx + dx, cy + dy
                    if 0 <= nx < width and 0 <= ny < height:
                        if not visited[ny][nx] and member[ny][nx]:
                            stack.append((nx, ny))

            if len(region) > min_size:
                regions.append(region)

    return regions


def region_anchor(region: list[Cell]) -> Cell:
    """Cell of a region farthest (taxicab) from the region's boundary.

    Cells outside the region and off the map both count as boundary.
    Falls back to the integer centroid when no cell is interior.

    Args:
        region: Non-empty list of (x, y) cells.

    Returns:
        (x, y) anchor cell.
    """
    xs = np.array([x for x, _ in region])
    ys = np.array([y for _, y in region])
    x0, y0 = xs.min(), ys.min()

    # One cell of padding so the bounding box edge is boundary too
    mask = np.zeros((ys.max() - y0 + 3, xs.max() - x0 + 3), dtype=bool)
    mask[ys - y0 + 1, xs - x0 + 1] = True
    depth = ndimage.distance_transform_cdt(mask, metric="taxicab") - 1

    if depth.max() <= 0:
        return (int(xs.sum()) // len(region), int(ys.sum()) // len(region))

    row, col = np.unravel_index(np.argmax(depth), depth.shape)
    return (int(col + x0 - 1), int(row + y0 - 1))


@dataclass(frozen=True)
class RegionCategory:
    """A labelled kind of region."""

    feature_type: str
    members: frozenset[Biome]
    max_labels: int
    min_size: int
    name: Callable[[int, np.random.Generator], str]


def label_categories(config: LabelConfig) -> tuple[RegionCategory, ...]:
    """Region categories in labelling priority order."""
    return (
        RegionCategory(
            "ocean",
            frozenset({Biome.OCEAN, Biome.DEEP_OCEAN}),
            config.max_oceans,
            config.ocean_min_size,
            lambda index, rng: ocean_name(rng),
        ),
        RegionCategory(
            "mountains",
            frozenset({Biome.MOUNTAINS, Biome.SNOW_PEAKS}),
            config.max_mountains,
            config.mountain_min_size,
            mountain_name,
        ),
        RegionCategory(
            "forest",
            frozenset({Biome.FOREST}),
            config.max_forests,
            config.forest_min_size,
            lambda index, rng: forest_name(rng),
        ),
        RegionCategory(
            "swamp",
            frozenset({Biome.SWAMP}),
            config.max_swamps,
            config.swamp_min_size,
            lambda index, rng: swamp_name(rng),
        ),
    )


class LabelPlacer:
    """Places labels while keeping them a minimum distance apart."""

    def __init__(self, min_distance: float):
        self.min_distance = min_distance
        self.labels: list[PlaceLabel] = []

    def is_crowded(self, x: float, y: float) -> bool:
        return any(
            math.hypot(x - label.x, y - label.y) < self.min_distance
            for label in self.labels
        )

    def place(self, x: float, y: float, name: str, feature_type: str) -> None:
        self.labels.append(PlaceLabel(x=x, y=y, name=name, feature_type=feature_type))


def generate_labels(
    biomes: NDArray[np.uint8],
    rivers: list[list[Cell]],
    rng: np.random.Generator,
    config: LabelConfig,
) -> list[PlaceLabel]:
    """Name the largest oceans, mountain ranges, forests, swamps and rivers.

    Args:
        biomes: Biome code grid (after river carving).
        rivers: River paths in (x, y) coordinates.
        rng: Random number generator.
        config: Label configuration.

    Returns:
        Placed labels, in category order.
    """
    height, width = biomes.shape
    if height == 0 or width == 0:
        return []

    scale = max(width / BASELINE_WIDTH, height / BASELINE_HEIGHT)
    placer = LabelPlacer(config.label_spacing * scale)

    for category in label_categories(config):
        regions = find_regions(
            biomes, category.members.__contains__, config.min_region_size
        )
        ranked = sorted(enumerate(regions), key=lambda item: len(item[1]), reverse=True)

        for index, region in ranked[: category.max_labels]:
            if len(region) <= category.min_size:
                continue
            ax, ay = region_anchor(region)
            if placer.is_crowded(ax, ay):
                continue
            placer.place(float(ax), float(ay), category.name(index, rng), category.feature_type)

    river_labels = 0
    for path in rivers:
        if river_labels >= config.max_river_labels:
            break
        if len(path) <= config.river_min_length:
            continue
        for num, den in RIVER_LABEL_FRACTIONS:
            x, y = path[len(path) * num // den]
            if not placer.is_crowded(x, y):
                placer.place(float(x), float(y), river_name(rng), "river")
                river_labels += 1
                break

    logger.debug("labels_placed", count=len(placer.labels))
    return placer.labels
