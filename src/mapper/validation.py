"""Post-generation validation of world invariants."""

from dataclasses import dataclass, field

import numpy as np
import structlog

from .biomes import ROAD_BLOCKING_BIOMES, Biome, biome_code, codes_for
from .config import RiverConfig
from .models import WorldMap

logger = structlog.get_logger()


@dataclass
class ValidationResult:
    """Errors and warnings collected by ``validate_world``.

    Warnings are reported but never fail a world.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


def validate_world(
    world: WorldMap,
    width: int | None = None,
    height: int | None = None,
    rivers: RiverConfig | None = None,
) -> ValidationResult:
    """Validate a generated world against its structural invariants.

    Args:
        world: Generated world.
        width: Expected width, if known.
        height: Expected height, if known.
        rivers: River configuration the world was generated with.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()

    # Check 1: Grid shapes
    _check_grid_shape(world, width, height, result)

    # Check 2: Cities on land
    _check_city_placement(world, result)

    # Check 3: Roads in bounds and off open water
    _check_road_cells(world, result)

    # Check 4: Bridges span rivers
    _check_bridges(world, result)

    # Check 5: Rivers long enough and ending low
    _check_river_termination(world, rivers or RiverConfig(), result)

    if result.passed:
        logger.info("validation_passed", warnings=len(result.warnings))
    else:
        logger.warning("validation_failed", errors=len(result.errors))
        for error in result.errors:
            logger.error("validation_error", detail=error)

    for warning in result.warnings:
        logger.warning("validation_warning", detail=warning)

    return result


def _check_grid_shape(
    world: WorldMap,
    width: int | None,
    height: int | None,
    result: ValidationResult,
) -> None:
    """Check all grids share the expected (height, width) shape."""
    expected = (
        world.height if height is None else height,
        world.width if width is None else width,
    )
    for name in ("elevation", "moisture", "temperature", "biomes"):
        shape = getattr(world, name).shape
        if shape != expected:
            result.add_error(f"{name} grid has shape {shape}, expected {expected}")


def _check_city_placement(world: WorldMap, result: ValidationResult) -> None:
    """Check cities sit on in-bounds land cells."""
    invalid = 0
    for city in world.cities:
        if not world.in_bounds(city.x, city.y) or world.biome_at(city.x, city.y).is_water:
            invalid += 1

    if invalid > 0:
        result.add_error(f"{invalid} cities not on land")

    positions = {city.position for city in world.cities}
    if len(positions) < len(world.cities):
        result.add_error("Several cities share a cell")


def _check_road_cells(world: WorldMap, result: ValidationResult) -> None:
    """Check road paths stay on the map and off blocking water."""
    blocking = set(codes_for(ROAD_BLOCKING_BIOMES))
    out_of_bounds = 0
    on_water = 0

    for road in world.roads:
        for x, y in road.path:
            if not world.in_bounds(x, y):
                out_of_bounds += 1
            elif int(world.biomes[y, x]) in blocking:
                on_water += 1

        if not road.path:
            result.add_warning(f"Road '{road.name}' has an empty path")

    if out_of_bounds > 0:
        result.add_error(f"{out_of_bounds} road cells outside the map")
    if on_water > 0:
        result.add_error(f"{on_water} road cells on open water")


def _check_bridges(world: WorldMap, result: ValidationResult) -> None:
    """Check every bridge sits on a river cell."""
    misplaced = sum(
        1
        for bridge in world.bridges
        if not world.in_bounds(bridge.x, bridge.y)
        or world.biome_at(bridge.x, bridge.y) is not Biome.RIVER
    )
    if misplaced > 0:
        result.add_error(f"{misplaced} bridges not on a river")


def _check_river_termination(
    world: WorldMap,
    config: RiverConfig,
    result: ValidationResult,
) -> None:
    """Check rivers meet the minimum length and end at sea or in a basin.

    A river ending below zero reached the sea and needs more than
    ``min_sea_length`` cells; one pooling in a basin needs more than
    ``min_lake_length``.
    """
    short = 0
    for path in world.rivers:
        limit = config.min_lake_length
        if path:
            x, y = path[-1]
            if world.in_bounds(x, y) and world.elevation[y, x] < 0:
                limit = config.min_sea_length
        if len(path) <= limit:
            short += 1
    if short > 0:
        result.add_error(f"{short} rivers shorter than the minimum length")

    high = 0
    for path in world.rivers:
        if not path:
            continue
        x, y = path[-1]
        if not world.in_bounds(x, y) or world.elevation[y, x] >= config.lake_level:
            high += 1
    if high > 0:
        result.add_error(f"{high} rivers end above the basin level")

    if world.rivers:
        river_cells = int(np.sum(world.biomes == biome_code(Biome.RIVER)))
        if river_cells == 0:
            result.add_warning("Rivers present but no river cells carved")