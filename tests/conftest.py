"""Pytest configuration for raytracer tests.

This module provides shared fixtures for all test modules: Taichi
initialization, which must happen once per session, a seeded random source
and deterministic stand-ins for it, so that material and camera tests can pin
every random draw.
"""

import itertools

import matplotlib
import pytest

from raytracer.core.kernels import init_taichi
from raytracer.core.sampling import RandomSource
from raytracer.core.vector import ZERO, Vector3

# Never open windows during tests
matplotlib.use("Agg")


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    init_taichi()
    yield


class FixedRandomSource:
    """Random source returning scripted values.

    Uniform draws cycle through ``uniforms``; the unit sphere and unit disk
    always return the configured points.
    """

    def __init__(self, uniforms=(0.5,), sphere_point=ZERO, disk_point=ZERO):
        self._uniforms = itertools.cycle(uniforms)
        self.sphere_point = sphere_point
        self.disk_point = disk_point
        self.calls = 0

    def uniform(self):
        self.calls += 1
        return next(self._uniforms)

    def in_unit_sphere(self):
        self.calls += 1
        return self.sphere_point

    def in_unit_disk(self):
        self.calls += 1
        return self.disk_point


class ForbiddenRandomSource:
    """Random source that fails the test if it is consulted at all."""

    def uniform(self):
        raise AssertionError("uniform() should not be called")

    def in_unit_sphere(self):
        raise AssertionError("in_unit_sphere() should not be called")

    def in_unit_disk(self):
        raise AssertionError("in_unit_disk() should not be called")


@pytest.fixture
def rng():
    """A seeded random source for reproducible sampling tests."""
    return RandomSource.from_seed(42)


@pytest.fixture
def fixed_rng():
    """Factory for scripted random sources."""

    def _make(uniforms=(0.5,), sphere_point=ZERO, disk_point=ZERO):
        return FixedRandomSource(uniforms, sphere_point, disk_point)

    return _make


@pytest.fixture
def forbidden_rng():
    """A random source that must never be used."""
    return ForbiddenRandomSource()


@pytest.fixture
def up():
    """The +y unit vector, used as a surface normal in many tests."""
    return Vector3(0.0, 1.0, 0.0)
