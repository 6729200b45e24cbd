"""Ready-made scenes and their matching cameras.

Two scenes are provided:

- ``random_spheres_scene``: a huge grey ground sphere, three large spheres
  (glass, matte brown, polished metal) and a grid of small spheres with
  random materials. Odds per small sphere: 80% diffuse, 15% metal, 5% glass.
- ``two_spheres_scene``: a single matte sphere resting on a large ground
  sphere, useful for quick checks.

Each scene has a camera helper returning a CameraConfig for a given aspect
ratio.

Example:
    >>> from raytracer.core.sampling import RandomSource
    >>> from raytracer.scene.presets import random_spheres_camera, random_spheres_scene
    >>> scene = random_spheres_scene(RandomSource.from_seed(7))
    >>> camera_config = random_spheres_camera(aspect_ratio=2.0)
"""

from __future__ import annotations

from raytracer.camera.thin_lens import CameraConfig
from raytracer.core.sampling import RandomSource
from raytracer.core.vector import Vector3
from raytracer.geometry.sphere import Sphere
from raytracer.materials.dielectric import Dielectric
from raytracer.materials.lambertian import Lambertian
from raytracer.materials.material import Material
from raytracer.materials.metal import Metal
from raytracer.scene.intersection import Scene

# Small spheres are not placed this close to the large metal sphere
_KEEP_CLEAR_CENTER = Vector3(4.0, 0.2, 0.0)
_KEEP_CLEAR_DISTANCE = 0.9

SMALL_SPHERE_RADIUS = 0.2


def _random_material(rng: RandomSource) -> Material:
    choice = rng.uniform()
    if choice < 0.8:
        return Lambertian(
            Vector3(
                rng.uniform() * rng.uniform(),
                rng.uniform() * rng.uniform(),
                rng.uniform() * rng.uniform(),
            )
        )
    if choice < 0.95:
        return Metal(
            Vector3(
                0.5 * (1.0 + rng.uniform()),
                0.5 * (1.0 + rng.uniform()),
                0.5 * (1.0 + rng.uniform()),
            ),
            0.5 * rng.uniform(),
        )
    return Dielectric.glass()


def random_spheres_scene(rng: RandomSource, grid: int = 10) -> Scene:
    """Create the random spheres scene.

    Args:
        rng: Random source used for sphere placement and materials.
        grid: Half-extent of the small-sphere grid; small spheres are placed
            at integer cells in [-grid, grid) along x and z.

    Returns:
        The populated scene.
    """
    scene = Scene()

    # First a huge "floor" sphere
    scene.add(Sphere(Vector3(0.0, -1000.0, 0.0), 1000.0, Lambertian(Vector3(0.5, 0.5, 0.5))))

    # The three main ones
    scene.add(Sphere(Vector3(0.0, 1.0, 0.0), 1.0, Dielectric.glass()))
    scene.add(Sphere(Vector3(-4.0, 1.0, 0.0), 1.0, Lambertian(Vector3(0.4, 0.2, 0.1))))
    scene.add(Sphere(Vector3(4.0, 1.0, 0.0), 1.0, Metal(Vector3(0.7, 0.6, 0.5), 0.0)))

    for a in range(-grid, grid):
        for b in range(-grid, grid):
            material = _random_material(rng)
            center = Vector3(
                a + 0.9 * rng.uniform(),
                SMALL_SPHERE_RADIUS,
                b + 0.9 * rng.uniform(),
            )
            if (center - _KEEP_CLEAR_CENTER).length() > _KEEP_CLEAR_DISTANCE:
                scene.add(Sphere(center, SMALL_SPHERE_RADIUS, material))

    return scene


def random_spheres_camera(aspect_ratio: float, aperture: float = 0.1) -> CameraConfig:
    """Camera for the random spheres scene, focused on the look-at point."""
    return CameraConfig.looking_at(
        Vector3(11.0, 1.8, 3.5),
        Vector3(-1.0, 0.5, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=aperture,
    )


def two_spheres_scene() -> Scene:
    """A matte sphere of radius 0.5 at (0, 0, -1) on a ground sphere of radius 100."""
    return Scene(
        [
            Sphere(Vector3(0.0, 0.0, -1.0), 0.5, Lambertian(Vector3(0.8, 0.3, 0.3))),
            Sphere(Vector3(0.0, -100.5, -1.0), 100.0, Lambertian(Vector3(0.8, 0.8, 0.0))),
        ]
    )


def two_spheres_camera(aspect_ratio: float) -> CameraConfig:
    """Pinhole camera at the origin looking down -z with a 90 degree field of view."""
    return CameraConfig(
        look_from=Vector3(0.0, 0.0, 0.0),
        look_at=Vector3(0.0, 0.0, -1.0),
        vup=Vector3(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_distance=1.0,
    )
