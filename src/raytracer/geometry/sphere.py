"""Sphere primitive with ray-sphere intersection.

Substituting the ray p(t) = origin + t * direction into the implicit sphere
equation |p - center|^2 = radius^2 yields the quadratic

    a*t^2 + b*t + c = 0

with
    a = direction . direction
    b = 2 * (origin - center) . direction
    c = (origin - center) . (origin - center) - radius^2

Only the smaller root is examined. For a ray starting inside the sphere that
root lies behind the origin, so such a ray reports no hit from this sphere.

Example:
    >>> from raytracer.core.ray import Ray
    >>> from raytracer.core.vector import Vector3
    >>> from raytracer.geometry.sphere import Sphere
    >>> from raytracer.materials.lambertian import Lambertian
    >>> sphere = Sphere(Vector3(0, 0, -1), 0.5, Lambertian(Vector3(0.5, 0.5, 0.5)))
    >>> hit = sphere.check_hit(Ray(Vector3(0, 0, 0), Vector3(0, 0, -1)), 0.0, 10.0)
    >>> hit.t
    0.5
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from raytracer.core.ray import Ray
from raytracer.core.vector import Vector3
from raytracer.geometry.hittable import Hit, Hittable
from raytracer.materials.material import Material


@dataclass(frozen=True)
class Sphere(Hittable):
    """A sphere defined by center point, radius and owned material.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere. Zero or negative radii are not
            rejected; they produce degenerate results.
        material: The material shading this sphere.
    """

    center: Vector3
    radius: float
    material: Material

    def check_hit(self, ray: Ray, t_min: float, t_max: float) -> Hit | None:
        """Test for ray-sphere intersection.

        Args:
            ray: The ray to test (direction need not be normalized).
            t_min: Minimum t value to consider a valid hit (avoids
                self-intersection).
            t_max: Maximum t value to consider a valid hit.

        Returns:
            A Hit for the near root if it lies in [t_min, t_max], otherwise
            None.
        """
        oc = ray.origin - self.center
        a = ray.direction.dot(ray.direction)
        b = 2.0 * oc.dot(ray.direction)
        c = oc.dot(oc) - self.radius * self.radius
        discriminant = b * b - 4.0 * a * c

        if discriminant < 0.0:
            return None

        t = (-b - math.sqrt(discriminant)) / (2.0 * a)
        if t < t_min or t > t_max:
            return None

        point = ray.point_at(t)
        # Outward normal: from the center through the hit point
        normal = (point - self.center).unit()
        return Hit(t=t, point=point, normal=normal, material=self.material)
