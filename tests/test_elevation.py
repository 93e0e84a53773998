"""Tests for elevation synthesis."""

import numpy as np
import pytest

from mapper.elevation import (
    FORMATIONS,
    Archipelago,
    CoordinateGrid,
    CrescentArc,
    Island,
    MultiPlate,
    TectonicRidge,
    VolcanicChain,
    apply_edge_falloff,
    apply_sea_level,
    choose_formation,
    formation_index,
    sea_level_for,
    synthesize_elevation,
)
from mapper.noise import NoiseSampler


class TestFormationSelection:
    """Tests for choosing a continent formation."""

    def test_index_in_range(self) -> None:
        for seed in range(20):
            assert 0 <= formation_index(NoiseSampler(seed)) < len(FORMATIONS)

    def test_deterministic(self) -> None:
        a = choose_formation(NoiseSampler(99), 0.4)
        b = choose_formation(NoiseSampler(99), 0.4)
        assert a == b

    def test_type_matches_index(self) -> None:
        for seed in range(10):
            sampler = NoiseSampler(seed)
            formation = choose_formation(sampler, 0.5)
            assert type(formation) is FORMATIONS[formation_index(sampler)]

    def test_all_formations_reachable(self) -> None:
        """A modest range of seeds covers several formation types."""
        seen = {formation_index(NoiseSampler(seed)) for seed in range(60)}
        assert len(seen) >= 3


class TestFormations:
    """Tests for individual formation shapes."""

    @pytest.fixture
    def grid(self, sampler: NoiseSampler) -> CoordinateGrid:
        return CoordinateGrid(sampler, 64, 48)

    def test_volcanic_chain_island_count(self, sampler: NoiseSampler) -> None:
        chain = VolcanicChain.from_noise(sampler, 0.5)
        assert len(chain.islands) == 4 + int(0.5 * 6)

    def test_volcanic_chain_peaks_at_island(self, grid: CoordinateGrid) -> None:
        chain = VolcanicChain(islands=(Island(0.5, 0.5, 0.2),))
        value = chain.shape(grid)
        assert value.shape == (48, 64)
        assert value[24, 32] == pytest.approx(0.8)
        assert value[0, 0] == -1.0

    def test_ridge_inside_and_outside(self, grid: CoordinateGrid) -> None:
        ridge = TectonicRidge(angle=0.0, length=0.3, width=0.1, center_x=0.5, center_y=0.5)
        value = ridge.shape(grid)
        assert value[24, 32] > -1.0
        assert value[0, 0] == -1.0

    def test_arc_outside_band_is_ocean(self, grid: CoordinateGrid) -> None:
        arc = CrescentArc(
            center_x=0.5, center_y=0.5, radius=0.3, width=0.05, start_angle=0.0, span=np.pi
        )
        value = arc.shape(grid)
        # Centre of the circle is far from the band
        assert value[24, 32] == -1.0

    def test_multi_plate_plate_count(self, sampler: NoiseSampler) -> None:
        assert len(MultiPlate.from_noise(sampler, 0.0).plates) == 2
        assert len(MultiPlate.from_noise(sampler, 1.0).plates) == 4

    def test_archipelago_island_count(self, sampler: NoiseSampler) -> None:
        archipelago = Archipelago.from_noise(sampler, 1.0)
        assert len(archipelago.islands) == (1 + 2) * (3 + 5)

    def test_archipelago_zero_land_has_no_islands(self, grid: CoordinateGrid) -> None:
        """Zero-sized islands are skipped."""
        archipelago = Archipelago.from_noise(grid.sampler, 0.0)
        assert all(island.radius == 0.0 for island in archipelago.islands)
        assert archipelago.shape(grid).max() <= 0.2

    def test_shapes_stay_in_range(self, grid: CoordinateGrid) -> None:
        for formation_cls in FORMATIONS:
            value = formation_cls.from_noise(grid.sampler, 0.6).shape(grid)
            assert value.min() >= -1.0
            assert np.isfinite(value).all()

    def test_edge_falloff_flags(self, sampler: NoiseSampler) -> None:
        assert VolcanicChain.from_noise(sampler, 0.4).edge_falloff(True)
        assert MultiPlate.from_noise(sampler, 0.4).edge_falloff(False)
        assert not MultiPlate.from_noise(sampler, 0.4).edge_falloff(True)
        assert not TectonicRidge.from_noise(sampler, 0.4).edge_falloff(False)


class TestSeaLevel:
    """Tests for the land/water split."""

    def test_sea_level_formula(self) -> None:
        assert sea_level_for(0.0) == pytest.approx(0.2)
        assert sea_level_for(1.0) == pytest.approx(-0.1)

    def test_land_range(self) -> None:
        result = apply_sea_level(np.array([0.0, 0.5, 5.0]), sea_level=-0.1)
        assert result[0] >= 0.01
        assert result[2] == 1.0

    def test_just_above_sea_level_floor(self) -> None:
        """Land never rounds down to exactly zero."""
        result = apply_sea_level(np.array([0.1001]), sea_level=0.1)
        assert result[0] == pytest.approx(0.01)

    def test_water_range(self) -> None:
        result = apply_sea_level(np.array([-5.0, -0.5, 0.0]), sea_level=0.1)
        assert result[0] == -1.0
        assert (result < 0.0).all()


class TestEdgeFalloff:
    """Tests for the border band falloff."""

    def test_interior_unchanged(self, sampler: NoiseSampler) -> None:
        grid = CoordinateGrid(sampler, 100, 100)
        value = np.full((100, 100), 0.5)
        result = apply_edge_falloff(value, grid)
        assert result[50, 50] == 0.5

    def test_border_sunk(self, sampler: NoiseSampler) -> None:
        grid = CoordinateGrid(sampler, 100, 100)
        value = np.full((100, 100), 0.5)
        result = apply_edge_falloff(value, grid)
        assert result[0, 50] == pytest.approx(-1.0)
        assert result[2, 50] < 0.5


class TestSynthesizeElevation:
    """Tests for the full elevation field."""

    def test_output_shape(self, sampler: NoiseSampler) -> None:
        result = synthesize_elevation(sampler, 50, 30, 0.4)
        assert result.shape == (30, 50)

    def test_output_range(self, sampler: NoiseSampler) -> None:
        result = synthesize_elevation(sampler, 50, 30, 0.7)
        assert result.min() >= -1.0
        assert result.max() <= 1.0

    def test_deterministic(self) -> None:
        a = synthesize_elevation(NoiseSampler(5), 40, 30, 0.5)
        b = synthesize_elevation(NoiseSampler(5), 40, 30, 0.5)
        np.testing.assert_array_equal(a, b)

    def test_zero_land_submerged(self) -> None:
        """No cell reaches beach level when land is zero."""
        for seed in range(5):
            result = synthesize_elevation(NoiseSampler(seed), 40, 30, 0.0)
            assert result.max() < -0.05

    def test_full_land_range(self) -> None:
        """Full land keeps the field in range and yields land cells."""
        for seed in range(3):
            result = synthesize_elevation(NoiseSampler(seed), 40, 30, 1.0)
            assert result.min() >= -1.0
            assert result.max() <= 1.0
            assert (result > 0).any()

    def test_more_land_target_more_land(self) -> None:
        sampler = NoiseSampler(11)
        low = synthesize_elevation(sampler, 60, 45, 0.1)
        high = synthesize_elevation(sampler, 60, 45, 0.9)
        assert np.mean(high > 0) > np.mean(low > 0)

    def test_empty_dimensions(self, sampler: NoiseSampler) -> None:
        assert synthesize_elevation(sampler, 0, 10, 0.4).shape == (10, 0)

    def test_tiny_map(self, sampler: NoiseSampler) -> None:
        assert synthesize_elevation(sampler, 2, 2, 0.4).shape == (2, 2)
