"""Vector3 value type and vector utilities for CPU ray tracing.

This module provides the immutable Vector3 dataclass used throughout the
renderer as a spatial point, a direction and an RGB color alike, together
with the reflection, refraction and Fresnel helpers the materials build on.

Example:
    >>> from raytracer.core.vector import Vector3, reflect
    >>> incident = Vector3(1.0, -1.0, 0.0)
    >>> normal = Vector3(0.0, 1.0, 0.0)
    >>> reflect(incident, normal)
    Vector3(x=1.0, y=1.0, z=0.0)
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vector3:
    """An immutable three-component vector of floats.

    Arithmetic operators are component-wise. Multiplying by a scalar scales
    every component; multiplying by another Vector3 multiplies matching
    components, which is how colors are attenuated.

    Attributes:
        x: First component (red when used as a color).
        y: Second component (green when used as a color).
        z: Third component (blue when used as a color).
    """

    x: float
    y: float
    z: float

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, other: Vector3 | float) -> Vector3:
        if isinstance(other, Vector3):
            return Vector3(self.x * other.x, self.y * other.y, self.z * other.z)
        return Vector3(self.x * other, self.y * other, self.z * other)

    def __rmul__(self, other: float) -> Vector3:
        return Vector3(self.x * other, self.y * other, self.z * other)

    def __truediv__(self, scalar: float) -> Vector3:
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def dot(self, other: Vector3) -> float:
        """Compute the dot product with another vector."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector3) -> Vector3:
        """Compute the cross product self x other."""
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length_squared(self) -> float:
        """Squared Euclidean length; avoids the square root when comparing."""
        return self.x * self.x + self.y * self.y + self.z * self.z

    def length(self) -> float:
        """Euclidean length of the vector."""
        return math.sqrt(self.length_squared())

    def unit(self) -> Vector3:
        """Return the vector scaled to unit length.

        Returns:
            A unit vector in the same direction.

        Raises:
            ZeroDivisionError: If the vector has zero length.
        """
        return self / self.length()

    def to_tuple(self) -> tuple[float, float, float]:
        """Return the components as a plain (x, y, z) tuple."""
        return (self.x, self.y, self.z)

    @classmethod
    def from_iterable(cls, values) -> Vector3:
        """Build a vector from any three-element iterable (list, tuple, array)."""
        x, y, z = values
        return cls(float(x), float(y), float(z))


ZERO = Vector3(0.0, 0.0, 0.0)
ONE = Vector3(1.0, 1.0, 1.0)


# =============================================================================
# Optics Helpers
# =============================================================================


def reflect(incident: Vector3, normal: Vector3) -> Vector3:
    """Reflect an incident vector about a normal.

    Computes d - 2(d . n)n. The result does not depend on which side the
    normal faces, so callers may pass either orientation.

    Args:
        incident: The incoming direction vector.
        normal: The surface normal (should be unit length).

    Returns:
        The reflected direction vector.
    """
    return incident - normal * (2.0 * incident.dot(normal))


def refract(unit_incident: Vector3, normal: Vector3, ratio: float) -> Vector3 | None:
    """Refract a unit incident vector through a surface using Snell's law.

    Args:
        unit_incident: The incoming direction, unit length.
        normal: The unit surface normal, facing against the incident ray.
        ratio: Ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction, or None when the discriminant is not
        positive (total internal reflection).
    """
    cosine = -normal.dot(unit_incident)
    discriminant = 1.0 - ratio * ratio * (1.0 - cosine * cosine)
    if discriminant <= 0.0:
        return None
    return unit_incident * ratio + normal * (ratio * cosine - math.sqrt(discriminant))


def schlick(cosine: float, index: float) -> float:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        index: Refractive index (or ratio of indices) of the interface.

    Returns:
        The approximate probability of reflection. Equals r0 exactly at
        normal incidence (cosine == 1).
    """
    r0 = (1.0 - index) / (1.0 + index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * (1.0 - cosine) ** 5
