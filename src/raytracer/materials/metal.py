"""Metal (specular reflective) material implementation.

Perfect metals (fuzz = 0) produce mirror reflections. Rougher metals perturb
the mirror direction by a random offset inside a sphere of radius ``fuzz``,
which blurs the reflection. A perturbed direction that ends up at or below
the surface is absorbed, so fuzzy metals darken at glancing angles.

The reflection formula is:
    R = D - 2(D . N)N

Example:
    >>> from raytracer.core.vector import Vector3
    >>> from raytracer.materials.metal import Metal
    >>> brushed_gold = Metal(Vector3(0.8, 0.6, 0.2), fuzz=0.3)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from raytracer.core.ray import Ray
from raytracer.core.vector import Vector3, reflect
from raytracer.materials.material import Material, MaterialType, ScatteredHit, validate_color

if TYPE_CHECKING:
    from raytracer.core.sampling import RandomSource
    from raytracer.geometry.hittable import Hit


class Metal(Material):
    """Metal (specular reflective) material.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: The surface fuzziness in [0, 1]. 0 = perfect mirror.
    """

    material_type = MaterialType.METAL

    def __init__(self, albedo: Vector3, fuzz: float = 0.0) -> None:
        """Create a metal material.

        Args:
            albedo: The reflective color.
            fuzz: Fuzziness of the reflection. Values are clamped to [0, 1].

        Raises:
            ValueError: If any albedo component is outside [0, 1].
        """
        validate_color("albedo", albedo)
        self.albedo = albedo
        self.fuzz = min(max(fuzz, 0.0), 1.0)

    def scatter(self, hit: Hit, ray_in: Ray, rng: RandomSource) -> ScatteredHit | None:
        """Reflect the incoming ray about the normal, perturbed by fuzz.

        Args:
            hit: The intersection being shaded.
            ray_in: The incoming ray.
            rng: Random source owned by the calling render thread.

        Returns:
            The reflected ray with the albedo as attenuation, or None if the
            perturbed direction does not point away from the surface.
        """
        reflected = reflect(ray_in.direction.unit(), hit.normal)
        direction = reflected + rng.in_unit_sphere() * self.fuzz

        if direction.dot(hit.normal) <= 0.0:
            return None
        return ScatteredHit(Ray(hit.point, direction), self.albedo)

    def params(self) -> dict[str, Any]:
        return {"albedo": list(self.albedo.to_tuple()), "fuzz": self.fuzz}

    def __repr__(self) -> str:
        return f"Metal(albedo={self.albedo!r}, fuzz={self.fuzz})"
