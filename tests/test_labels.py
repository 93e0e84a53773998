"""Tests for region discovery and label placement."""

import math

import numpy as np
from conftest import biome_grid

from mapper.biomes import Biome, biome_code
from mapper.config import LabelConfig
from mapper.labels import LabelPlacer, find_regions, generate_labels, region_anchor


def is_forest(biome: Biome) -> bool:
    return biome is Biome.FOREST


class TestFindRegions:
    """Tests for 8-connected flood fill."""

    def test_small_regions_dropped(self) -> None:
        biomes = biome_grid(
            [
                "ffffpppp",
                "ffffpfff",
                "ffffpfff",
                "pppppppp",
            ]
        )
        regions = find_regions(biomes, is_forest)
        assert len(regions) == 1
        assert len(regions[0]) == 12

    def test_min_size_is_exclusive(self) -> None:
        biomes = biome_grid(["ffffffffff", "pppppppppp"])
        assert find_regions(biomes, is_forest, min_size=10) == []
        assert len(find_regions(biomes, is_forest, min_size=9)) == 1

    def test_diagonal_connectivity(self) -> None:
        rows = ["".join("f" if x == y else "p" for x in range(12)) for y in range(12)]
        regions = find_regions(biome_grid(rows), is_forest)
        assert len(regions) == 1
        assert sorted(regions[0]) == [(i, i) for i in range(12)]

    def test_discovery_order(self) -> None:
        """Regions come out in row-major order of their first cell."""
        rows = ["pppppppfff"] * 4 + ["pppppppppp"] + ["fffpppppp"] * 4
        rows = [row.ljust(10, "p") for row in rows]
        regions = find_regions(biome_grid(rows), is_forest)
        assert len(regions) == 2
        assert min(regions[0], key=lambda c: (c[1], c[0])) == (7, 0)
        assert min(regions[1], key=lambda c: (c[1], c[0])) == (0, 5)

    def test_predicate_covers_several_biomes(self) -> None:
        biomes = biome_grid(["mmmmmm", "hhhhhh"])
        regions = find_regions(
            biomes, lambda b: b in {Biome.MOUNTAINS, Biome.HILLS}, min_size=5
        )
        assert len(regions) == 1
        assert len(regions[0]) == 12


class TestRegionAnchor:
    """Tests for choosing a label position inside a region."""

    def test_square_center(self) -> None:
        region = [(x, y) for y in range(1, 8) for x in range(2, 9)]
        assert region_anchor(region) == (5, 4)

    def test_thin_line_uses_centroid(self) -> None:
        region = [(x, 4) for x in range(3, 18)]
        assert region_anchor(region) == (10, 4)

    def test_anchor_inside_region(self) -> None:
        # L-shaped region whose centroid lies outside it
        region = [(x, y) for y in range(10) for x in range(3)]
        region += [(x, y) for y in range(7, 10) for x in range(3, 12)]
        assert region_anchor(region) in set(region)


class TestLabelPlacer:
    """Tests for spacing between labels."""

    def test_crowding(self) -> None:
        placer = LabelPlacer(10.0)
        placer.place(5.0, 5.0, "A", "ocean")
        assert placer.is_crowded(10.0, 10.0)
        assert not placer.is_crowded(15.0, 5.0)


class TestGenerateLabels:
    """Tests for the labelling pass."""

    def test_empty_map(self, rng: np.random.Generator) -> None:
        assert generate_labels(np.zeros((0, 0), dtype=np.uint8), [], rng, LabelConfig()) == []

    def test_large_ocean_labelled(self, rng: np.random.Generator) -> None:
        biomes = np.full((30, 40), biome_code(Biome.OCEAN), dtype=np.uint8)
        labels = generate_labels(biomes, [], rng, LabelConfig())
        assert len(labels) == 1
        assert labels[0].feature_type == "ocean"
        # First cell, row-major, at the greatest distance from the map edge
        assert (labels[0].x, labels[0].y) == (14.0, 14.0)

    def test_small_ocean_not_labelled(self, rng: np.random.Generator) -> None:
        """Regions at or under the category floor get no label."""
        biomes = np.full((10, 15), biome_code(Biome.OCEAN), dtype=np.uint8)
        assert generate_labels(biomes, [], rng, LabelConfig()) == []

    def test_river_label(self, rng: np.random.Generator) -> None:
        biomes = np.full((30, 40), biome_code(Biome.PLAINS), dtype=np.uint8)
        river = [(x, 10) for x in range(40)]
        labels = generate_labels(biomes, [river], rng, LabelConfig())
        assert len(labels) == 1
        assert labels[0].feature_type == "river"
        assert (labels[0].x, labels[0].y) == (13.0, 10.0)
        assert labels[0].name.endswith(" River")

    def test_short_river_not_labelled(self, rng: np.random.Generator) -> None:
        biomes = np.full((30, 40), biome_code(Biome.PLAINS), dtype=np.uint8)
        river = [(x, 10) for x in range(30)]
        assert generate_labels(biomes, [river], rng, LabelConfig()) == []

    def test_labels_spaced(self, rng: np.random.Generator) -> None:
        biomes = np.full((40, 60), biome_code(Biome.OCEAN), dtype=np.uint8)
        biomes[5:35, 5:25] = biome_code(Biome.MOUNTAINS)
        biomes[5:35, 35:55] = biome_code(Biome.FOREST)
        rivers = [[(x, 38) for x in range(60)], [(59, y) for y in range(40)]]
        labels = generate_labels(biomes, rivers, rng, LabelConfig())

        spacing = 80.0 * max(60 / 160, 40 / 120)
        for i, label in enumerate(labels):
            for other in labels[:i]:
                assert math.hypot(label.x - other.x, label.y - other.y) >= spacing
        assert {label.feature_type for label in labels} <= {"ocean", "mountains", "forest", "river"}
