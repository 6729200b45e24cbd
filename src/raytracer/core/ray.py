"""Ray data structure.

A ray is the parametrized half-line origin + t * direction. The direction is
deliberately left unnormalized: its length encodes how far the ray travels
per unit of t, which the camera's depth-of-field offsets rely on.

Example:
    >>> from raytracer.core.ray import Ray
    >>> from raytracer.core.vector import Vector3
    >>> ray = Ray(origin=Vector3(0.0, 0.0, 0.0), direction=Vector3(0.0, 0.0, -2.0))
    >>> ray.point_at(0.5)
    Vector3(x=0.0, y=0.0, z=-1.0)
"""

from __future__ import annotations

from dataclasses import dataclass

from raytracer.core.vector import Vector3


@dataclass(frozen=True, slots=True)
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction vector of the ray. Not required to be unit
            length.
    """

    origin: Vector3
    direction: Vector3

    def point_at(self, t: float) -> Vector3:
        """Compute the point along the ray at parameter t.

        Args:
            t: The parameter value. Positive values are in front of the origin.

        Returns:
            The point origin + t * direction.
        """
        return self.origin + self.direction * t
