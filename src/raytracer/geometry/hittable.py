"""Hit records and the intersectable-object interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from raytracer.core.ray import Ray
from raytracer.core.vector import Vector3

if TYPE_CHECKING:
    from raytracer.materials.material import Material


@dataclass(frozen=True, slots=True)
class Hit:
    """Record of a ray-object intersection.

    Attributes:
        t: The parameter value along the ray where the intersection occurred.
        point: The 3D point where the ray met the surface.
        normal: The unit surface normal at the intersection point. Always
            points outward, away from the object's interior, even when the
            ray started inside it.
        material: The material of the object that was hit. Borrowed from the
            scene for the duration of a color computation.
    """

    t: float
    point: Vector3
    normal: Vector3
    material: Material


class Hittable(ABC):
    """An object a ray can intersect."""

    @abstractmethod
    def check_hit(self, ray: Ray, t_min: float, t_max: float) -> Hit | None:
        """Test the ray for an intersection with parameter in [t_min, t_max].

        Args:
            ray: The ray to test.
            t_min: Minimum t value to consider a valid hit.
            t_max: Maximum t value to consider a valid hit.

        Returns:
            The hit record, or None when the ray misses within the range.
        """
