"""Taichi band kernel for CPU-parallel path tracing.

This module is the compiled counterpart of the integrator: it holds the scene
in Taichi fields and traces whole image rows inside a single kernel launch.
The kernel's outermost loop runs over render bands, so Taichi spreads the
bands across its CPU thread pool while every band walks its own pixels,
samples and bounces serially.

Scene layout (Structure of Arrays):
    - spheres: center, radius, material id
    - materials: type index, albedo, fuzz, refraction index, absorb flag

Materials are dispatched by type index (LAMBERTIAN, METAL, DIELECTRIC) with
the same scattering rules as the Material classes. Each band owns one
xorshift32 state, reseeded from its RandomSource on every launch, so a seeded
render does not depend on how Taichi schedules the bands.

Taichi must be initialized exactly once per process; init_taichi() does this
lazily and is safe to call repeatedly.

Example:
    >>> from raytracer.camera.thin_lens import setup_camera
    >>> from raytracer.core.kernels import get_tracer
    >>> from raytracer.scene.presets import two_spheres_camera, two_spheres_scene
    >>>
    >>> tracer = get_tracer()
    >>> tracer.upload(two_spheres_scene(), setup_camera(two_spheres_camera(2.0)))
    >>> tracer.sphere_count
    2
"""

import logging
import threading
from collections.abc import Iterator
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raytracer.core.integrator import T_MIN

if TYPE_CHECKING:
    from raytracer.camera.thin_lens import Camera
    from raytracer.geometry.hittable import Hittable
    from raytracer.materials.material import Material

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# =============================================================================
# Kernel Constants
# =============================================================================

# Capacity of the scene fields
MAX_SPHERES = 1024
MAX_MATERIALS = 1024

# Capacity of the per-band random state
MAX_BANDS = 256

# Material type indices used for dispatch inside kernels
LAMBERTIAN = 0
METAL = 1
DIELECTRIC = 2

# Keyed by MaterialType value
MATERIAL_INDEX = {
    "lambertian": LAMBERTIAN,
    "metal": METAL,
    "dielectric": DIELECTRIC,
}

# Rejection sampling attempts before giving up on a unit sphere/disk point
MAX_REJECTION_ATTEMPTS = 100

_init_lock = threading.Lock()
_initialized = False
_tracer: "BandTracer | None" = None


def init_taichi() -> None:
    """Initialize Taichi for double-precision CPU rendering.

    Only the first call initializes the runtime; later calls return at once.
    fast_math stays off so kernel arithmetic rounds exactly like the Python
    integrator.
    """
    global _initialized
    with _init_lock:
        if _initialized:
            return
        ti.init(arch=ti.cpu, default_fp=ti.f64, fast_math=False)
        _initialized = True
        logger.debug("Taichi initialized on CPU with f64 arithmetic")


def get_tracer() -> "BandTracer":
    """Return the process-wide BandTracer, creating it on first use."""
    global _tracer
    init_taichi()
    with _init_lock:
        if _tracer is None:
            _tracer = BandTracer()
        return _tracer


def flatten_spheres(scene: "Hittable") -> "Iterator[Hittable]":
    """Yield the spheres of a scene in insertion order.

    Nested scenes are flattened depth first, which keeps the first-added
    object first.

    Raises:
        TypeError: If the scene contains anything other than spheres.
    """
    from raytracer.geometry.sphere import Sphere
    from raytracer.scene.intersection import Scene

    if isinstance(scene, Scene):
        for obj in scene:
            yield from flatten_spheres(obj)
    elif isinstance(scene, Sphere):
        yield scene
    else:
        raise TypeError(
            f"Cannot render {type(scene).__name__}: only spheres and scenes of spheres are supported"
        )


def _material_index(material: "Material") -> int:
    material_type = getattr(material, "material_type", None)
    index = MATERIAL_INDEX.get(getattr(material_type, "value", None))
    if index is None:
        raise TypeError(f"Cannot render material {type(material).__name__}: unknown material type")
    return index


# =============================================================================
# Taichi Helper Functions
# =============================================================================


@ti.func
def _unit(v: vec3) -> vec3:
    """Scale a vector to unit length (same operation order as Vector3.unit)."""
    return v / ti.sqrt(v.x * v.x + v.y * v.y + v.z * v.z)


@ti.func
def _reflect(incident: vec3, normal: vec3) -> vec3:
    return incident - normal * (2.0 * incident.dot(normal))


@ti.func
def _schlick(cosine: ti.f64, index: ti.f64) -> ti.f64:
    r0 = (1.0 - index) / (1.0 + index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * (1.0 - cosine) ** 5


@ti.func
def _sky(direction: vec3) -> vec3:
    """Sky gradient, white at the horizon to (0.5, 0.7, 1.0) at the zenith."""
    t = 0.5 * (_unit(direction).y + 1.0)
    return vec3(1.0, 1.0, 1.0) * (1.0 - t) + vec3(0.5, 0.7, 1.0) * t


# =============================================================================
# Band Tracer
# =============================================================================


@ti.data_oriented
class BandTracer:
    """Scene fields plus the kernel that traces one row per band.

    A BandTracer is shared by every render in the process. Rendering holds
    ``lock`` from upload() until the last row has been traced, so two renders
    started from different Python threads never interleave their scenes.

    Attributes:
        lock: Serializes renders that share the fields.
    """

    def __init__(self) -> None:
        self.lock = threading.Lock()

        # Sphere storage
        self.sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
        self.sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
        self.sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
        self.num_spheres = ti.field(dtype=ti.i32, shape=())

        # Material storage, indexed by material id
        self.material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
        self.material_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
        self.material_fuzz = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
        self.material_iors = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
        self.material_absorb = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
        self.num_materials = ti.field(dtype=ti.i32, shape=())

        # Camera state
        self.camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())
        self.camera_lower_left = ti.Vector.field(3, dtype=ti.f64, shape=())
        self.camera_horizontal = ti.Vector.field(3, dtype=ti.f64, shape=())
        self.camera_vertical = ti.Vector.field(3, dtype=ti.f64, shape=())
        self.camera_u = ti.Vector.field(3, dtype=ti.f64, shape=())
        self.camera_v = ti.Vector.field(3, dtype=ti.f64, shape=())
        self.camera_lens_radius = ti.field(dtype=ti.f64, shape=())

        # One xorshift32 state per band
        self.rng_state = ti.field(dtype=ti.u32, shape=MAX_BANDS)

    @property
    def sphere_count(self) -> int:
        """Number of spheres currently uploaded."""
        return int(self.num_spheres[None])

    @property
    def material_count(self) -> int:
        """Number of distinct materials currently uploaded."""
        return int(self.num_materials[None])

    def upload(self, scene: "Hittable", camera: "Camera") -> None:
        """Copy a scene and camera into the Taichi fields.

        Materials shared by several spheres are stored once.

        Args:
            scene: A Scene of spheres, or a single Sphere.
            camera: The camera to render from.

        Raises:
            TypeError: If the scene holds a non-sphere object or a material
                without a known type.
            RuntimeError: If the scene exceeds the field capacity.
        """
        material_ids: dict[int, int] = {}
        sphere_count = 0

        for sphere in flatten_spheres(scene):
            if sphere_count >= MAX_SPHERES:
                raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

            material = sphere.material
            material_id = material_ids.get(id(material))
            if material_id is None:
                material_id = len(material_ids)
                if material_id >= MAX_MATERIALS:
                    raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")
                self._set_material(material_id, material)
                material_ids[id(material)] = material_id

            self.sphere_centers[sphere_count] = sphere.center.to_tuple()
            self.sphere_radii[sphere_count] = sphere.radius
            self.sphere_material_ids[sphere_count] = material_id
            sphere_count += 1

        self.num_spheres[None] = sphere_count
        self.num_materials[None] = len(material_ids)

        self.camera_origin[None] = camera.origin.to_tuple()
        self.camera_lower_left[None] = camera.lower_left_corner.to_tuple()
        self.camera_horizontal[None] = camera.horizontal.to_tuple()
        self.camera_vertical[None] = camera.vertical.to_tuple()
        self.camera_u[None] = camera.u.to_tuple()
        self.camera_v[None] = camera.v.to_tuple()
        self.camera_lens_radius[None] = camera.lens_radius

        logger.debug("Uploaded %d spheres with %d materials", sphere_count, len(material_ids))

    def _set_material(self, material_id: int, material: "Material") -> None:
        mat_type = _material_index(material)
        albedo = getattr(material, "albedo", None)

        self.material_types[material_id] = mat_type
        self.material_albedos[material_id] = albedo.to_tuple() if albedo is not None else (1.0, 1.0, 1.0)
        self.material_fuzz[material_id] = getattr(material, "fuzz", 0.0)
        self.material_iors[material_id] = getattr(material, "refraction_index", 1.0)
        self.material_absorb[material_id] = int(
            getattr(material, "absorb_total_internal_reflection", False)
        )

    def trace_rows(
        self,
        rows: npt.NDArray[np.int32],
        jitter: npt.NDArray[np.float64],
        seeds: npt.NDArray[np.uint32],
        width: int,
        height: int,
        max_depth: int,
        threads: int,
    ) -> npt.NDArray[np.float64]:
        """Trace one image row for each band in parallel.

        Args:
            rows: Image row per band, counted from the top. At most
                MAX_BANDS entries.
            jitter: Sub-pixel offsets of shape (bands, width, samples, 2);
                the last axis holds the horizontal then vertical offset.
            seeds: Nonzero xorshift32 seed per band.
            width: Image width in pixels.
            height: Image height in pixels.
            max_depth: Bounce budget per path.
            threads: Maximum number of CPU threads for the launch.

        Returns:
            Averaged linear colors of shape (bands, width, 3).

        Raises:
            RuntimeError: If more bands than MAX_BANDS are requested.
        """
        bands = rows.shape[0]
        if bands > MAX_BANDS:
            raise RuntimeError(f"Maximum number of bands ({MAX_BANDS}) exceeded")

        out = np.zeros((bands, width, 3), dtype=np.float64)
        self._trace_rows(
            np.ascontiguousarray(rows, dtype=np.int32),
            np.ascontiguousarray(jitter, dtype=np.float64),
            np.ascontiguousarray(seeds, dtype=np.uint32),
            out,
            width,
            height,
            jitter.shape[2],
            max_depth,
            max(1, min(threads, bands)),
        )
        return out

    # -------------------------------------------------------------------------
    # Kernel
    # -------------------------------------------------------------------------

    @ti.kernel
    def _trace_rows(
        self,
        rows: ti.types.ndarray(dtype=ti.i32, ndim=1),
        jitter: ti.types.ndarray(dtype=ti.f64, ndim=4),
        seeds: ti.types.ndarray(dtype=ti.u32, ndim=1),
        out: ti.types.ndarray(dtype=ti.f64, ndim=3),
        width: ti.i32,
        height: ti.i32,
        samples: ti.i32,
        max_depth: ti.i32,
        threads: ti.template(),
    ):
        # One band per task; only the outermost loop is parallel
        ti.loop_config(parallelize=threads, block_dim=1)
        for b in range(rows.shape[0]):
            self.rng_state[b] = seeds[b]
            # Image rows count from the top; camera t counts from the bottom
            y = height - 1 - rows[b]

            for x in range(width):
                color = vec3(0.0, 0.0, 0.0)
                for k in range(samples):
                    s = (ti.cast(x, ti.f64) + jitter[b, x, k, 0]) / width
                    t = (ti.cast(y, ti.f64) + jitter[b, x, k, 1]) / height
                    origin, direction = self._camera_ray(b, s, t)
                    color += self._trace_path(b, origin, direction, max_depth)

                color = color / samples
                for c in ti.static(range(3)):
                    out[b, x, c] = color[c]

    # -------------------------------------------------------------------------
    # Random numbers
    # -------------------------------------------------------------------------

    @ti.func
    def _uniform(self, band: ti.i32) -> ti.f64:
        """Advance the band's xorshift32 state and return a float in (0, 1)."""
        x = self.rng_state[band]
        x ^= x << 13
        x ^= ti.bit_shr(x, 17)
        x ^= x << 5
        self.rng_state[band] = x
        return ti.cast(x, ti.f64) / 4294967296.0

    @ti.func
    def _in_unit_sphere(self, band: ti.i32) -> vec3:
        p = vec3(0.0, 0.0, 0.0)
        found = 0
        for _ in range(MAX_REJECTION_ATTEMPTS):
            if found == 0:
                p = vec3(
                    self._uniform(band) * 2.0 - 1.0,
                    self._uniform(band) * 2.0 - 1.0,
                    self._uniform(band) * 2.0 - 1.0,
                )
                if p.dot(p) < 1.0:
                    found = 1
        return p

    @ti.func
    def _in_unit_disk(self, band: ti.i32) -> vec3:
        p = vec3(0.0, 0.0, 0.0)
        found = 0
        for _ in range(MAX_REJECTION_ATTEMPTS):
            if found == 0:
                p = vec3(self._uniform(band) * 2.0 - 1.0, self._uniform(band) * 2.0 - 1.0, 0.0)
                if p.x * p.x + p.y * p.y < 1.0:
                    found = 1
        return p

    # -------------------------------------------------------------------------
    # Camera, intersection and scattering
    # -------------------------------------------------------------------------

    @ti.func
    def _camera_ray(self, band: ti.i32, s: ti.f64, t: ti.f64):
        """Thin-lens primary ray through (s, t); returns (origin, direction)."""
        offset = vec3(0.0, 0.0, 0.0)
        lens_radius = self.camera_lens_radius[None]
        if lens_radius > 0.0:
            rd = self._in_unit_disk(band) * lens_radius
            offset = self.camera_u[None] * rd.x + self.camera_v[None] * rd.y

        origin = self.camera_origin[None] + offset
        target = (
            self.camera_lower_left[None]
            + self.camera_horizontal[None] * s
            + self.camera_vertical[None] * t
        )
        return origin, target - origin

    @ti.func
    def _hit_scene(self, origin: vec3, direction: vec3):
        """Nearest sphere hit in [T_MIN, inf); returns (sphere index or -1, t).

        Only the near root of each sphere is examined. A later sphere must be
        strictly nearer to replace the current hit.
        """
        hit_index = -1
        closest_t = tm.inf

        for i in range(self.num_spheres[None]):
            oc = origin - self.sphere_centers[i]
            radius = self.sphere_radii[i]
            a = direction.dot(direction)
            b = 2.0 * oc.dot(direction)
            c = oc.dot(oc) - radius * radius
            discriminant = b * b - 4.0 * a * c

            if discriminant >= 0.0:
                t = (-b - ti.sqrt(discriminant)) / (2.0 * a)
                if t >= T_MIN and t < closest_t:
                    hit_index = i
                    closest_t = t

        return hit_index, closest_t

    @ti.func
    def _scatter(
        self, material_id: ti.i32, band: ti.i32, direction: vec3, point: vec3, normal: vec3
    ):
        """Scatter by material type.

        Returns:
            A tuple (scattered, new_direction, attenuation); scattered is 0
            when the ray is absorbed.
        """
        mat_type = self.material_types[material_id]
        scattered = 1
        new_direction = vec3(0.0, 0.0, 0.0)
        attenuation = vec3(1.0, 1.0, 1.0)

        if mat_type == LAMBERTIAN:
            target = point + normal + self._in_unit_sphere(band)
            new_direction = target - point
            attenuation = self.material_albedos[material_id]

        elif mat_type == METAL:
            reflected = _reflect(_unit(direction), normal)
            new_direction = reflected + self._in_unit_sphere(band) * self.material_fuzz[material_id]
            attenuation = self.material_albedos[material_id]
            if new_direction.dot(normal) <= 0.0:
                scattered = 0

        else:
            unit_direction = _unit(direction)
            ior = self.material_iors[material_id]

            # Entering unless the ray travels along the outward normal
            facing = normal
            ratio = 1.0 / ior
            if unit_direction.dot(normal) > 0.0:
                facing = -normal
                ratio = ior

            cosine = -facing.dot(unit_direction)
            discriminant = 1.0 - ratio * ratio * (1.0 - cosine * cosine)

            if discriminant <= 0.0:
                # Total internal reflection
                new_direction = _reflect(unit_direction, facing)
                if self.material_absorb[material_id] == 1:
                    scattered = 0
            elif self._uniform(band) < _schlick(cosine, ratio):
                new_direction = _reflect(unit_direction, facing)
            else:
                new_direction = unit_direction * ratio + facing * (
                    ratio * cosine - ti.sqrt(discriminant)
                )

        return scattered, new_direction, attenuation

    @ti.func
    def _trace_path(self, band: ti.i32, origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
        """Follow one path and return its color (mirrors color_for)."""
        ray_origin = origin
        ray_direction = direction
        throughput = vec3(1.0, 1.0, 1.0)
        color = vec3(0.0, 0.0, 0.0)
        active = 1

        # Taichi doesn't support break in ti.func loops
        for depth in range(max_depth + 1):
            if active == 1:
                hit_index, hit_t = self._hit_scene(ray_origin, ray_direction)

                if hit_index < 0:
                    color = throughput * _sky(ray_direction)
                    active = 0
                elif depth >= max_depth:
                    # Bounce budget exhausted
                    active = 0
                else:
                    point = ray_origin + ray_direction * hit_t
                    normal = _unit(point - self.sphere_centers[hit_index])
                    scattered, new_direction, attenuation = self._scatter(
                        self.sphere_material_ids[hit_index], band, ray_direction, point, normal
                    )
                    if scattered == 0:
                        # Absorbed by the material
                        active = 0
                    else:
                        throughput = throughput * attenuation
                        ray_origin = point
                        ray_direction = new_direction

        return color
