"""Tests for world validation."""

import numpy as np

from mapper.biomes import Biome, biome_code
from mapper.models import Bridge, City, Road, RoadType, SettlementTier, WorldMap
from mapper.validation import ValidationResult, validate_world


def world_with(**features) -> WorldMap:
    """10x10 map: ocean in the left column, a river in column 5, plains elsewhere."""
    biomes = np.full((10, 10), biome_code(Biome.PLAINS), dtype=np.uint8)
    biomes[:, 0] = biome_code(Biome.OCEAN)
    biomes[:, 5] = biome_code(Biome.RIVER)
    elevation = np.full((10, 10), 0.4)
    elevation[:, 0] = -0.5
    elevation[:, 5] = 0.1
    return WorldMap(
        elevation=elevation,
        moisture=np.full((10, 10), 0.5),
        temperature=np.full((10, 10), 0.5),
        biomes=biomes,
        **features,
    )


def city(x: int, y: int) -> City:
    return City(x=x, y=y, name="Test", population=10_000, tier=SettlementTier.SMALL)


class TestValidationResult:
    """Tests for the result accumulator."""

    def test_fresh_result_passes(self) -> None:
        result = ValidationResult()
        assert result.passed
        assert result == ValidationResult(errors=[], warnings=[])

    def test_warning_keeps_pass(self) -> None:
        result = ValidationResult()
        result.add_warning("minor")
        assert result.passed

    def test_error_fails(self) -> None:
        result = ValidationResult()
        result.add_error("broken")
        assert not result.passed
        assert result.errors == ["broken"]


class TestValidateWorld:
    """Tests for each world check."""

    def test_clean_world_passes(self) -> None:
        river = [(5, y) for y in range(10)]
        road = Road(
            path=((3, 3), (4, 3), (5, 3), (6, 3)),
            name="Trade Road",
            road_type=RoadType.ROAD,
            bridges=(Bridge(x=5, y=3, name="Old River Bridge"),),
        )
        world = world_with(
            rivers=[river],
            cities=[city(3, 3), city(6, 3)],
            roads=[road],
            bridges=list(road.bridges),
        )
        result = validate_world(world, 10, 10)
        assert result.passed, result.errors
        assert result.warnings == []

    def test_wrong_shape(self) -> None:
        result = validate_world(world_with(), 12, 10)
        assert not result.passed
        assert any("expected (10, 12)" in error for error in result.errors)

    def test_city_on_water(self) -> None:
        result = validate_world(world_with(cities=[city(0, 4)]))
        assert "1 cities not on land" in result.errors

    def test_city_off_map(self) -> None:
        result = validate_world(world_with(cities=[city(10, 4)]))
        assert not result.passed

    def test_shared_city_cell(self) -> None:
        result = validate_world(world_with(cities=[city(3, 3), city(3, 3)]))
        assert "Several cities share a cell" in result.errors

    def test_road_on_open_water(self) -> None:
        road = Road(path=((1, 1), (0, 1)), name="Bad Road", road_type=RoadType.ROAD)
        result = validate_world(world_with(roads=[road]))
        assert "1 road cells on open water" in result.errors

    def test_road_crossing_river_allowed(self) -> None:
        road = Road(path=((4, 1), (5, 1), (6, 1)), name="Ford Road", road_type=RoadType.ROAD)
        assert validate_world(world_with(roads=[road])).passed

    def test_road_off_map(self) -> None:
        road = Road(path=((9, 9), (10, 9)), name="Edge Road", road_type=RoadType.ROAD)
        result = validate_world(world_with(roads=[road]))
        assert "1 road cells outside the map" in result.errors

    def test_empty_road_warns(self) -> None:
        road = Road(path=(), name="Ghost Road", road_type=RoadType.TRAIL)
        result = validate_world(world_with(roads=[road]))
        assert result.passed
        assert result.warnings

    def test_bridge_off_river(self) -> None:
        result = validate_world(world_with(bridges=[Bridge(x=2, y=2, name="Dry Bridge")]))
        assert "1 bridges not on a river" in result.errors

    def test_short_river(self) -> None:
        river = [(5, y) for y in range(5)]
        result = validate_world(world_with(rivers=[river]))
        assert "1 rivers shorter than the minimum length" in result.errors

    def test_short_sea_river(self) -> None:
        """Rivers reaching the sea need more cells than basin rivers."""
        river = [(x, 2) for x in range(8, -1, -1)]
        result = validate_world(world_with(rivers=[river]))
        assert "1 rivers shorter than the minimum length" in result.errors

    def test_long_sea_river(self) -> None:
        river = [(9, y) for y in range(5)] + [(x, 5) for x in range(8, -1, -1)]
        assert validate_world(world_with(rivers=[river])).passed

    def test_basin_river_minimum(self) -> None:
        river = [(5, y) for y in range(9)]
        result = validate_world(world_with(rivers=[river]))
        assert result.passed, result.errors

    def test_river_ending_high(self) -> None:
        river = [(x, 2) for x in range(1, 11)]
        result = validate_world(world_with(rivers=[river]))
        assert not result.passed

    def test_uncarved_rivers_warn(self) -> None:
        biomes = np.full((10, 10), biome_code(Biome.PLAINS), dtype=np.uint8)
        world = WorldMap(
            elevation=np.full((10, 10), 0.1),
            moisture=np.zeros((10, 10)),
            temperature=np.zeros((10, 10)),
            biomes=biomes,
            rivers=[[(x, 0) for x in range(10)]],
        )
        result = validate_world(world)
        assert result.passed
        assert "Rivers present but no river cells carved" in result.warnings
