"""Core rendering module.

Components:
    vector: Immutable 3-vector with reflection, refraction and Schlick helpers
    ray: Ray data structure
    sampling: Thread-confined random source (unit sphere, unit disk)
    integrator: Recursive path tracing with the sky gradient background
    kernels: Taichi band kernel tracing one row per band in parallel
    renderer: Band-parallel renderer and 8-bit quantization
"""

from .integrator import MAX_DEPTH, T_MAX, T_MIN, color_for, sky_color
from .kernels import BandTracer, get_tracer, init_taichi
from .ray import Ray
from .renderer import RenderSettings, band_ranges, render, render_band, to_rgb8
from .sampling import RandomSource
from .vector import ONE, ZERO, Vector3, reflect, refract, schlick

__all__ = [
    # Vector math
    "Vector3",
    "ZERO",
    "ONE",
    "reflect",
    "refract",
    "schlick",
    # Rays and sampling
    "Ray",
    "RandomSource",
    # Integrator
    "MAX_DEPTH",
    "T_MIN",
    "T_MAX",
    "color_for",
    "sky_color",
    # Band kernel
    "BandTracer",
    "get_tracer",
    "init_taichi",
    # Renderer
    "RenderSettings",
    "band_ranges",
    "render",
    "render_band",
    "to_rgb8",
]
