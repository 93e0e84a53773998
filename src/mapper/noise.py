"""Coherent noise sampling for world generation.

Wraps several independent OpenSimplex sources, one per field channel,
each seeded from the world seed with a fixed per-channel offset.
"""

from enum import IntEnum

import numpy as np
from numpy.typing import ArrayLike, NDArray
from opensimplex import OpenSimplex


class Channel(IntEnum):
    """Noise channels; the value is the seed offset of the channel."""

    ELEVATION = 0
    MOISTURE = 1
    TEMPERATURE = 2
    DETAIL = 3
    CONTINENT = 4


class NoiseSampler:
    """Deterministic multi-channel coherent noise.

    Pure function of (seed, channel, x, y). All outputs are clamped to
    [-1, 1].
    """

    def __init__(self, seed: int):
        """Initialize NoiseSampler.

        Args:
            seed: World seed. Channel ``c`` is seeded with ``seed + c``.
        """
        self.seed = seed
        self._sources = {
            channel: OpenSimplex(seed=seed + channel.value) for channel in Channel
        }

    def sample(self, channel: Channel, x: float, y: float) -> float:
        """Sample a single point.

        Args:
            channel: Noise channel.
            x: X coordinate in noise space.
            y: Y coordinate in noise space.

        Returns:
            Noise value in [-1, 1].
        """
        value = self._sources[channel].noise2(float(x), float(y))
        return min(1.0, max(-1.0, value))

    def grid(
        self,
        channel: Channel,
        xs: ArrayLike,
        ys: ArrayLike,
    ) -> NDArray[np.float64]:
        """Sample the lattice spanned by two coordinate vectors.

        Args:
            channel: Noise channel.
            xs: 1D array of x coordinates (columns).
            ys: 1D array of y coordinates (rows).

        Returns:
            Array of shape (len(ys), len(xs)) in [-1, 1].
        """
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        if xs.size == 0 or ys.size == 0:
            return np.zeros((ys.size, xs.size), dtype=np.float64)

        values = self._sources[channel].noise2array(xs, ys)
        return np.clip(np.asarray(values, dtype=np.float64), -1.0, 1.0)

    def points(
        self,
        channel: Channel,
        xs: ArrayLike,
        ys: ArrayLike,
    ) -> NDArray[np.float64]:
        """Sample arbitrary points elementwise.

        Args:
            channel: Noise channel.
            xs: Array of x coordinates.
            ys: Array of y coordinates, same shape as ``xs``.

        Returns:
            Array with the shape of ``xs`` in [-1, 1].
        """
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        source = self._sources[channel]

        flat = np.fromiter(
            (
                source.noise2(float(x), float(y))
                for x, y in zip(xs.ravel(), ys.ravel())
            ),
            dtype=np.float64,
            count=xs.size,
        )
        return np.clip(flat.reshape(xs.shape), -1.0, 1.0)
