"""Thin-lens camera model with depth of field.

This module implements a look-at camera that generates primary rays for
rendering. The camera supports:
- Look-at positioning (look_from, look_at, vup)
- Vertical field of view in degrees
- Arbitrary aspect ratios
- A finite lens aperture for depth of field

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward look_from (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport is placed ``focus_distance`` in front of the camera, so objects
at that distance are in perfect focus. Ray origins are jittered across a disk
of radius aperture / 2 in the (u, v) plane; the further an object is from the
focus plane, the more its image blurs. An aperture of zero gives a pinhole
camera whose rays never consult the random source.

Example:
    >>> from raytracer.camera.thin_lens import CameraConfig, setup_camera
    >>> from raytracer.core.vector import Vector3
    >>> config = CameraConfig(
    ...     look_from=Vector3(0.0, 0.0, 0.0),
    ...     look_at=Vector3(0.0, 0.0, -1.0),
    ...     vup=Vector3(0.0, 1.0, 0.0),
    ...     vfov=90.0,
    ...     aspect_ratio=2.0,
    ... )
    >>> camera = setup_camera(config)
    >>> ray = camera.get_ray(0.5, 0.5)  # Ray through image center
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from raytracer.core.ray import Ray
from raytracer.core.sampling import RandomSource
from raytracer.core.vector import ZERO, Vector3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class CameraConfig:
    """User-facing configuration for a thin-lens camera.

    Attributes:
        look_from: Camera position in world space.
        look_at: Point the camera is looking at in world space.
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables depth of field.
        focus_distance: Distance from the camera to the plane in perfect focus.
    """

    look_from: Vector3
    look_at: Vector3
    vup: Vector3
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_distance: float = 1.0

    @classmethod
    def looking_at(
        cls,
        look_from: Vector3,
        look_at: Vector3,
        *,
        vup: Vector3 = Vector3(0.0, 1.0, 0.0),
        vfov: float,
        aspect_ratio: float,
        aperture: float = 0.0,
    ) -> CameraConfig:
        """Create a config focused exactly on the look_at point."""
        return cls(
            look_from=look_from,
            look_at=look_at,
            vup=vup,
            vfov=vfov,
            aspect_ratio=aspect_ratio,
            aperture=aperture,
            focus_distance=(look_from - look_at).length(),
        )


@dataclass(frozen=True)
class Camera:
    """Immutable camera basis derived from a CameraConfig.

    Attributes:
        origin: Camera position.
        lower_left_corner: Lower-left corner of the viewport in world space.
        horizontal: Vector spanning the full viewport width.
        vertical: Vector spanning the full viewport height.
        u: Right direction.
        v: Up direction.
        w: Backward direction (opposite view direction).
        lens_radius: Radius of the lens disk (aperture / 2).
    """

    origin: Vector3
    lower_left_corner: Vector3
    horizontal: Vector3
    vertical: Vector3
    u: Vector3
    v: Vector3
    w: Vector3
    lens_radius: float

    def get_ray(self, s: float, t: float, rng: RandomSource | None = None) -> Ray:
        """Generate a ray through normalized image coordinates (s, t).

        The coordinates are normalized:
        - s = 0: left edge of image, s = 1: right edge
        - t = 0: bottom edge of image, t = 1: top edge

        Args:
            s: Horizontal coordinate in [0, 1] (left to right).
            t: Vertical coordinate in [0, 1] (bottom to top).
            rng: Random source for lens sampling. Only required when the
                camera has a nonzero aperture.

        Returns:
            A ray from the (jittered) lens point toward the viewport point.
            The direction is not normalized.

        Raises:
            ValueError: If the camera has a nonzero aperture and no random
                source is given.
        """
        offset = ZERO
        if self.lens_radius > 0.0:
            if rng is None:
                raise ValueError(
                    f"A random source is required for lens sampling (lens radius {self.lens_radius})"
                )
            rd = rng.in_unit_disk() * self.lens_radius
            offset = self.u * rd.x + self.v * rd.y

        origin = self.origin + offset
        target = self.lower_left_corner + self.horizontal * s + self.vertical * t
        return Ray(origin, target - origin)


# =============================================================================
# Camera Setup
# =============================================================================


def setup_camera(config: CameraConfig) -> Camera:
    """Compute the camera basis and viewport geometry from a configuration.

    Args:
        config: Camera configuration with position, orientation, FOV and lens.

    Returns:
        The immutable Camera used for ray generation.

    Raises:
        ZeroDivisionError: If look_from equals look_at or vup is parallel to
            the view direction.
    """
    half_height = math.tan(math.radians(config.vfov) / 2.0)
    half_width = config.aspect_ratio * half_height

    w = (config.look_from - config.look_at).unit()
    u = config.vup.cross(w).unit()
    v = w.cross(u)

    focus = config.focus_distance
    origin = config.look_from
    lower_left = origin - u * (half_width * focus) - v * (half_height * focus) - w * focus

    return Camera(
        origin=origin,
        lower_left_corner=lower_left,
        horizontal=u * (2.0 * half_width * focus),
        vertical=v * (2.0 * half_height * focus),
        u=u,
        v=v,
        w=w,
        lens_radius=config.aperture / 2.0,
    )
