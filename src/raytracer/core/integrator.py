"""Path tracing integrator resolving the color carried by a ray.

The integrator follows a ray through the scene, letting each hit material
decide how it scatters, and multiplies the attenuations collected along the
way. A path ends in one of three ways:

    - it escapes the scene and picks up the sky gradient,
    - it exceeds the bounce budget (MAX_DEPTH) and contributes black,
    - a material absorbs it and it contributes black.

The last two are numerically identical but have different causes: the first
is an engineering bound on work per pixel, the second is physical. There is
no Russian roulette; the bounce budget is a hard cutoff.

Example:
    >>> from raytracer.core.integrator import color_for
    >>> from raytracer.core.ray import Ray
    >>> from raytracer.core.sampling import RandomSource
    >>> from raytracer.core.vector import Vector3
    >>> from raytracer.scene.presets import two_spheres_scene
    >>>
    >>> scene = two_spheres_scene()
    >>> ray = Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, -1.0))
    >>> color = color_for(ray, scene, RandomSource.from_seed(1))

The band kernel in raytracer.core.kernels traces the same paths inside
Taichi; this module is the reference it mirrors.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from raytracer.core.ray import Ray
from raytracer.core.vector import ONE, ZERO, Vector3

if TYPE_CHECKING:
    from raytracer.core.sampling import RandomSource
    from raytracer.geometry.hittable import Hittable

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum ray bounces (path length)
MAX_DEPTH = 50

# t_min and t_max for ray intersection; t_min avoids self-intersection acne
T_MIN = 1e-4
T_MAX = math.inf

# Sky gradient endpoints, bottom (horizon) to top
HORIZON_COLOR = ONE
ZENITH_COLOR = Vector3(0.5, 0.7, 1.0)

BLACK = ZERO


def sky_color(ray: Ray) -> Vector3:
    """Background color for a ray that escapes the scene.

    Linearly blends white and sky blue by the vertical component of the
    normalized ray direction.

    Args:
        ray: The escaping ray.

    Returns:
        The sky color in the ray's direction.
    """
    t = 0.5 * (ray.direction.unit().y + 1.0)
    return HORIZON_COLOR * (1.0 - t) + ZENITH_COLOR * t


def color_for(
    ray: Ray,
    scene: Hittable,
    rng: RandomSource,
    depth: int = 0,
    max_depth: int = MAX_DEPTH,
) -> Vector3:
    """Trace a ray through the scene and return the color it carries.

    Equivalent to the recursion

        color(ray, d) = sky(ray)                              if ray misses
                      = black                                 if d >= max_depth
                      = black                                 if absorbed
                      = attenuation * color(scattered, d + 1) otherwise

    unrolled into a loop that carries the product of attenuations.

    Args:
        ray: The ray to trace.
        scene: Anything intersectable; usually a Scene.
        rng: Random source owned by the calling render thread.
        depth: Number of bounces already taken by this path.
        max_depth: Bounce budget; a hit at this depth yields black.

    Returns:
        The linear RGB color for this path sample.
    """
    throughput = ONE

    while True:
        hit = scene.check_hit(ray, T_MIN, T_MAX)

        if hit is None:
            return throughput * sky_color(ray)

        if depth >= max_depth:
            # Bounce budget exhausted
            return BLACK

        scattered = hit.material.scatter(hit, ray, rng)
        if scattered is None:
            # Absorbed by the material
            return BLACK

        throughput = throughput * scattered.attenuation
        ray = scattered.ray
        depth += 1
