"""Random sampling utilities for Monte Carlo rendering.

The renderer never touches a global random state. Every render band owns a
RandomSource wrapping its own ``numpy.random.Generator``; a Generator is not
safe for concurrent use, so a RandomSource must stay confined to one band.
Sources for a render are derived from a single seed with
``numpy.random.SeedSequence.spawn``, which gives statistically independent
streams and makes a seeded render reproducible for a fixed band layout.

The band kernel cannot call back into numpy, so for each row a band draws its
sub-pixel jitter with uniforms() and a seed for the kernel's own stream with
stream_seed().

Example:
    >>> from raytracer.core.sampling import RandomSource
    >>> sources = RandomSource.spawn(seed=42, count=4)
    >>> point = sources[0].in_unit_sphere()
    >>> point.length_squared() < 1.0
    True
"""

from __future__ import annotations

import numpy as np

from raytracer.core.vector import Vector3


class RandomSource:
    """Uniform random numbers and unit-shape samples from one numpy Generator.

    Attributes:
        generator: The underlying numpy Generator.
    """

    def __init__(self, generator: np.random.Generator | None = None) -> None:
        """Wrap a numpy Generator.

        Args:
            generator: The generator to draw from. A freshly seeded default
                generator is created when omitted.
        """
        self.generator = generator if generator is not None else np.random.default_rng()

    @classmethod
    def from_seed(cls, seed: int | np.random.SeedSequence | None) -> RandomSource:
        """Create a source from a seed (None draws fresh OS entropy)."""
        return cls(np.random.default_rng(seed))

    @classmethod
    def spawn(cls, seed: int | None, count: int) -> list[RandomSource]:
        """Derive independent random sources from a single seed.

        Args:
            seed: Root seed. None draws fresh entropy from the OS.
            count: Number of sources to derive.

        Returns:
            A list of ``count`` sources; source ``i`` is always the same
            stream for the same seed.
        """
        children = np.random.SeedSequence(seed).spawn(count)
        return [cls.from_seed(child) for child in children]

    def uniform(self) -> float:
        """Return a uniform float in [0, 1)."""
        return float(self.generator.random())

    def uniforms(self, shape: int | tuple[int, ...]) -> np.ndarray:
        """Return an array of uniform floats in [0, 1).

        Draws the same values, in C order, as that many uniform() calls.
        """
        return self.generator.random(shape)

    def stream_seed(self) -> int:
        """Return a nonzero 32-bit seed for a kernel-side random stream."""
        return int(self.generator.integers(1, 2**32, dtype=np.uint32))

    def in_unit_sphere(self) -> Vector3:
        """Generate a random point strictly inside the unit sphere.

        Uses rejection sampling on the enclosing cube.
        """
        while True:
            x, y, z = (self.generator.random(3) * 2.0 - 1.0).tolist()
            if x * x + y * y + z * z < 1.0:
                return Vector3(x, y, z)

    def in_unit_disk(self) -> Vector3:
        """Generate a random point (x, y, 0) strictly inside the unit disk.

        Used for lens sampling in depth-of-field cameras.
        """
        while True:
            x, y = (self.generator.random(2) * 2.0 - 1.0).tolist()
            if x * x + y * y < 1.0:
                return Vector3(x, y, 0.0)
