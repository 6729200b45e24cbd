"""Lambertian (ideal diffuse) material implementation.

The scattered direction aims at a random point inside the unit sphere that
sits tangent to the surface at the hit point:

    target = point + normal + random_in_unit_sphere()

which favours directions close to the normal. Diffuse surfaces in this model
always scatter; the albedo alone controls how much light survives a bounce.

Example:
    >>> from raytracer.core.vector import Vector3
    >>> from raytracer.materials.lambertian import Lambertian
    >>> matte_red = Lambertian(Vector3(0.8, 0.3, 0.3))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from raytracer.core.ray import Ray
from raytracer.core.vector import Vector3
from raytracer.materials.material import Material, MaterialType, ScatteredHit, validate_color

if TYPE_CHECKING:
    from raytracer.core.sampling import RandomSource
    from raytracer.geometry.hittable import Hit


class Lambertian(Material):
    """Lambertian (ideal diffuse) material.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    material_type = MaterialType.LAMBERTIAN

    def __init__(self, albedo: Vector3) -> None:
        """Create a diffuse material.

        Args:
            albedo: The diffuse reflectance color.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
        """
        validate_color("albedo", albedo)
        self.albedo = albedo

    def scatter(self, hit: Hit, ray_in: Ray, rng: RandomSource) -> ScatteredHit:
        """Scatter toward a random point in the unit sphere above the surface.

        Args:
            hit: The intersection being shaded.
            ray_in: The incoming ray (unused; diffuse scattering ignores it).
            rng: Random source owned by the calling render thread.

        Returns:
            The scattered ray with the albedo as attenuation. Never None.
        """
        target = hit.point + hit.normal + rng.in_unit_sphere()
        return ScatteredHit(Ray(hit.point, target - hit.point), self.albedo)

    def params(self) -> dict[str, Any]:
        return {"albedo": list(self.albedo.to_tuple())}

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo!r})"
