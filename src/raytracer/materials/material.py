"""Material interface and scatter result.

A material turns an incoming ray and a hit into either a scattered ray with a
color attenuation or nothing at all (the ray is absorbed). Materials carry
only their configured parameters and are never mutated after construction,
so a single instance can be shared by every render thread.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from raytracer.core.ray import Ray
from raytracer.core.vector import Vector3

if TYPE_CHECKING:
    from raytracer.core.sampling import RandomSource
    from raytracer.geometry.hittable import Hit


class MaterialType(str, Enum):
    """Enumeration of supported material types.

    The values are the names used in serialized scene descriptions.
    """

    LAMBERTIAN = "lambertian"
    METAL = "metal"
    DIELECTRIC = "dielectric"


@dataclass(frozen=True, slots=True)
class ScatteredHit:
    """Outcome of a successful scatter.

    Attributes:
        ray: The outgoing ray.
        attenuation: Per-channel RGB multiplier in [0, 1] applied to the light
            carried back along the outgoing ray.
    """

    ray: Ray
    attenuation: Vector3


class Material(ABC):
    """Base class for all surface materials."""

    material_type: ClassVar[MaterialType]

    @abstractmethod
    def scatter(self, hit: Hit, ray_in: Ray, rng: RandomSource) -> ScatteredHit | None:
        """Decide how an incoming ray continues after hitting this material.

        Args:
            hit: The intersection being shaded.
            ray_in: The ray that produced the hit.
            rng: Random source owned by the calling render thread.

        Returns:
            The scattered ray and its attenuation, or None if the ray is
            absorbed.
        """

    @abstractmethod
    def params(self) -> dict[str, Any]:
        """Return the material parameters as plain, JSON-friendly values."""


def validate_color(name: str, color: Vector3) -> None:
    """Check that every component of a reflectance color lies in [0, 1].

    Args:
        name: Parameter name used in the error message.
        color: The color to check.

    Raises:
        ValueError: If any component is outside [0, 1].
    """
    for i, component in enumerate(color):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"{name.capitalize()} component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
