"""Tests for coherent noise sampling."""

import numpy as np
import pytest

from mapper.noise import Channel, NoiseSampler


class TestSample:
    """Tests for single-point sampling."""

    def test_deterministic_with_same_seed(self) -> None:
        """Same seed, channel and point give the same value."""
        a = NoiseSampler(42)
        b = NoiseSampler(42)
        assert a.sample(Channel.ELEVATION, 1.3, 2.7) == b.sample(Channel.ELEVATION, 1.3, 2.7)

    def test_different_seed_different_output(self) -> None:
        """Different seeds produce different fields."""
        xs = np.linspace(0.0, 5.0, 20)
        a = NoiseSampler(1).grid(Channel.ELEVATION, xs, xs)
        b = NoiseSampler(2).grid(Channel.ELEVATION, xs, xs)
        assert not np.allclose(a, b)

    def test_channels_independent(self, sampler: NoiseSampler) -> None:
        """Each channel is a different field."""
        xs = np.linspace(0.0, 5.0, 20)
        elevation = sampler.grid(Channel.ELEVATION, xs, xs)
        moisture = sampler.grid(Channel.MOISTURE, xs, xs)
        assert not np.allclose(elevation, moisture)

    def test_channel_seeded_with_offset(self) -> None:
        """Channel c of seed s matches channel 0 of seed s + c."""
        xs = np.linspace(0.0, 3.0, 10)
        shifted = NoiseSampler(10).grid(Channel.CONTINENT, xs, xs)
        base = NoiseSampler(14).grid(Channel.ELEVATION, xs, xs)
        np.testing.assert_array_equal(shifted, base)

    def test_output_in_range(self, sampler: NoiseSampler) -> None:
        """Values stay within [-1, 1]."""
        values = [
            sampler.sample(channel, x * 0.37, x * 0.91)
            for channel in Channel
            for x in range(50)
        ]
        assert min(values) >= -1.0
        assert max(values) <= 1.0

    def test_continuous(self, sampler: NoiseSampler) -> None:
        """Nearby points have nearby values."""
        a = sampler.sample(Channel.DETAIL, 0.5, 0.5)
        b = sampler.sample(Channel.DETAIL, 0.5001, 0.5)
        assert abs(a - b) < 0.01


class TestGrid:
    """Tests for lattice sampling."""

    def test_output_shape(self, sampler: NoiseSampler) -> None:
        """Shape is (len(ys), len(xs))."""
        result = sampler.grid(Channel.ELEVATION, np.arange(7) * 0.1, np.arange(3) * 0.1)
        assert result.shape == (3, 7)

    def test_matches_point_sampling(self, sampler: NoiseSampler) -> None:
        """Each lattice value equals the single-point sample."""
        xs = np.array([0.0, 0.25, 1.5])
        ys = np.array([0.1, 2.0])
        result = sampler.grid(Channel.TEMPERATURE, xs, ys)
        for j, y in enumerate(ys):
            for i, x in enumerate(xs):
                assert result[j, i] == pytest.approx(sampler.sample(Channel.TEMPERATURE, x, y))

    def test_empty_axes(self, sampler: NoiseSampler) -> None:
        """Empty coordinate vectors give an empty array."""
        result = sampler.grid(Channel.ELEVATION, np.array([]), np.arange(4) * 0.1)
        assert result.shape == (4, 0)


class TestPoints:
    """Tests for elementwise sampling."""

    def test_preserves_shape(self, sampler: NoiseSampler) -> None:
        """Output has the shape of the coordinate arrays."""
        xs = np.random.default_rng(0).random((4, 5))
        ys = np.random.default_rng(1).random((4, 5))
        assert sampler.points(Channel.DETAIL, xs, ys).shape == (4, 5)

    def test_matches_lattice(self, sampler: NoiseSampler) -> None:
        """Sampling a meshgrid elementwise equals lattice sampling."""
        xs = np.linspace(0.0, 2.0, 6)
        ys = np.linspace(0.0, 1.0, 4)
        xx, yy = np.meshgrid(xs, ys)
        np.testing.assert_allclose(
            sampler.points(Channel.ELEVATION, xx, yy),
            sampler.grid(Channel.ELEVATION, xs, ys),
        )