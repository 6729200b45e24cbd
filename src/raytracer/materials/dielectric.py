"""Dielectric (glass/water) material implementation.

This module implements transparent materials that either reflect or refract
incoming light.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for the Fresnel reflectance
    - Total internal reflection when the refraction discriminant is not
      positive

Surfaces report outward normals, so the material works out on its own whether
the ray is entering or leaving the medium. The surrounding medium is assumed
to be air (index 1.0).

Example:
    >>> from raytracer.materials.dielectric import Dielectric
    >>> glass = Dielectric.glass()
    >>> glass.refraction_index
    1.5
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from raytracer.core.ray import Ray
from raytracer.core.vector import ONE, reflect, refract, schlick
from raytracer.materials.material import Material, MaterialType, ScatteredHit

if TYPE_CHECKING:
    from raytracer.core.sampling import RandomSource
    from raytracer.geometry.hittable import Hit


class Dielectric(Material):
    """Dielectric (glass/water) material.

    Attributes:
        refraction_index: Index of refraction. Common values:
            - Water: 1.3
            - Glass: 1.5
            - Diamond: 1.8
        absorb_total_internal_reflection: When True, a ray that cannot
            refract is absorbed instead of being mirror-reflected.
    """

    material_type = MaterialType.DIELECTRIC

    def __init__(
        self,
        refraction_index: float,
        *,
        absorb_total_internal_reflection: bool = False,
    ) -> None:
        """Create a dielectric material.

        Args:
            refraction_index: Index of refraction, at least 1.0.
            absorb_total_internal_reflection: Absorb rays on total internal
                reflection instead of reflecting them.

        Raises:
            ValueError: If refraction_index is less than 1.0.
        """
        if refraction_index < 1.0:
            raise ValueError(
                f"Index of refraction = {refraction_index} is less than 1.0. "
                "IOR must be >= 1.0 for physically meaningful materials."
            )
        self.refraction_index = refraction_index
        self.absorb_total_internal_reflection = absorb_total_internal_reflection

    @classmethod
    def water(cls) -> Dielectric:
        return cls(1.3)

    @classmethod
    def glass(cls) -> Dielectric:
        return cls(1.5)

    @classmethod
    def diamond(cls) -> Dielectric:
        return cls(1.8)

    def scatter(self, hit: Hit, ray_in: Ray, rng: RandomSource) -> ScatteredHit | None:
        """Reflect or refract the incoming ray.

        A ray travelling along the outward normal is leaving the medium
        (index ratio n) and the normal is flipped to face it; any other ray,
        including one that grazes the surface, is entering it (ratio 1/n).
        The ray reflects with probability given by Schlick's approximation
        and refracts otherwise.

        Args:
            hit: The intersection being shaded.
            ray_in: The incoming ray.
            rng: Random source owned by the calling render thread.

        Returns:
            The reflected or refracted ray with white attenuation, or None on
            total internal reflection when absorb_total_internal_reflection
            is set.
        """
        unit_direction = ray_in.direction.unit()

        if unit_direction.dot(hit.normal) > 0.0:
            normal = -hit.normal
            ratio = self.refraction_index
        else:
            normal = hit.normal
            ratio = 1.0 / self.refraction_index

        refracted = refract(unit_direction, normal, ratio)

        if refracted is None:
            if self.absorb_total_internal_reflection:
                return None
            direction = reflect(unit_direction, normal)
        elif rng.uniform() < schlick(-normal.dot(unit_direction), ratio):
            direction = reflect(unit_direction, normal)
        else:
            direction = refracted

        return ScatteredHit(Ray(hit.point, direction), ONE)

    def params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"refraction_index": self.refraction_index}
        if self.absorb_total_internal_reflection:
            params["absorb_total_internal_reflection"] = True
        return params

    def __repr__(self) -> str:
        return f"Dielectric(refraction_index={self.refraction_index})"
