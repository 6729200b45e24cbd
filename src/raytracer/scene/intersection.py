"""Scene-level intersection testing.

The Scene is an ordered collection of intersectable objects resolved to the
nearest hit. It is built before rendering and only read afterwards, so one
instance is shared by every render thread without locking.

Example:
    >>> from raytracer.core.vector import Vector3
    >>> from raytracer.geometry.sphere import Sphere
    >>> from raytracer.materials.lambertian import Lambertian
    >>> from raytracer.scene.intersection import Scene
    >>> grey = Lambertian(Vector3(0.5, 0.5, 0.5))
    >>> scene = Scene([Sphere(Vector3(0, 0, -1), 0.5, grey)])
    >>> scene.add(Sphere(Vector3(0, -100.5, -1), 100.0, grey))
    >>> len(scene)
    2
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from raytracer.core.ray import Ray
from raytracer.geometry.hittable import Hit, Hittable


class Scene(Hittable):
    """An ordered collection of intersectable objects."""

    def __init__(self, objects: Iterable[Hittable] = ()) -> None:
        self._objects: list[Hittable] = list(objects)

    def add(self, obj: Hittable) -> None:
        """Append an object. Must not be called while a render is running."""
        self._objects.append(obj)

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[Hittable]:
        return iter(self._objects)

    def check_hit(self, ray: Ray, t_min: float, t_max: float) -> Hit | None:
        """Test the ray against every object and return the nearest hit.

        The upper bound shrinks to the closest t found so far. A later object
        only replaces the current best when it is strictly nearer, so on an
        exact tie the object added first wins.

        Args:
            ray: The ray to test.
            t_min: Minimum t value to consider a valid hit.
            t_max: Maximum t value to consider a valid hit.

        Returns:
            The globally nearest hit in [t_min, t_max], or None.
        """
        closest: Hit | None = None
        closest_t = t_max

        for obj in self._objects:
            hit = obj.check_hit(ray, t_min, closest_t)
            if hit is not None and (closest is None or hit.t < closest_t):
                closest = hit
                closest_t = hit.t

        return closest
