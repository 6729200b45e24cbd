"""Parallel band renderer producing the final 8-bit pixel buffer.

The image is split into contiguous horizontal bands of rows, one per worker
thread, with band height ceil(height / threads). The rows are traced by the
Taichi band kernel: each launch traces the next row of every band, with one
band per CPU thread, and writes only into that band's rows of the output
buffer. The scene and camera are uploaded once and only read afterwards.

Each band gets its own RandomSource spawned from the render seed by band
index. For every row it draws the sub-pixel jitter (horizontal then vertical
offset, pixel by pixel) followed by a seed for the kernel's random stream. A
seeded render is therefore reproducible for a given image size and thread
count, independent of how the threads are scheduled.

The render call blocks until every row is done. An exception raised while
preparing or tracing a row, or by the progress callback, aborts the whole
render and propagates to the caller.

Example:
    >>> from raytracer.camera.thin_lens import setup_camera
    >>> from raytracer.core.renderer import RenderSettings, render
    >>> from raytracer.scene.presets import two_spheres_camera, two_spheres_scene
    >>>
    >>> settings = RenderSettings(width=200, height=100, samples=10, threads=4, seed=1)
    >>> camera = setup_camera(two_spheres_camera(settings.aspect_ratio))
    >>> image = render(two_spheres_scene(), camera, settings)
    >>> image.shape
    (100, 200, 3)
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from raytracer.core.integrator import MAX_DEPTH
from raytracer.core.kernels import BandTracer, get_tracer
from raytracer.core.sampling import RandomSource

if TYPE_CHECKING:
    from raytracer.camera.thin_lens import Camera
    from raytracer.geometry.hittable import Hittable

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (completed_rows, total_rows)
ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class RenderSettings:
    """Image and sampling parameters for a render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Number of samples per pixel.
        threads: Number of worker threads (and bands).
        max_depth: Bounce budget per path.
        seed: Root seed for all random sources. None draws fresh entropy.
    """

    width: int
    height: int
    samples: int = 50
    threads: int = 6
    max_depth: int = MAX_DEPTH
    seed: int | None = None

    def __post_init__(self) -> None:
        for name in ("width", "height", "samples", "threads"):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"{name} must be at least 1, got {value}")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height


def band_ranges(height: int, threads: int) -> list[tuple[int, int]]:
    """Split image rows into contiguous bands, top row first.

    Args:
        height: Number of image rows.
        threads: Number of workers.

    Returns:
        List of half-open (start_row, end_row) ranges. At most ``threads``
        bands; the last one may be shorter.
    """
    band_height = math.ceil(height / threads)
    return [(start, min(start + band_height, height)) for start in range(0, height, band_height)]


def to_rgb8(image: npt.NDArray[np.float64]) -> npt.NDArray[np.uint8]:
    """Gamma-correct linear colors and quantize them to 8 bits.

    Applies gamma 2 (square root), then maps each channel to
    round(255 * value), rounding halves up and clamping to [0, 255].

    Args:
        image: Linear color array with values >= 0, any shape.

    Returns:
        Array of the same shape with dtype uint8.
    """
    encoded = np.floor(np.sqrt(np.maximum(image, 0.0)) * 255.0 + 0.5)
    return np.clip(encoded, 0, 255).astype(np.uint8)


def _trace_rows(
    tracer: BandTracer,
    settings: RenderSettings,
    rows: Sequence[int],
    sources: Sequence[RandomSource],
) -> npt.NDArray[np.uint8]:
    """Trace one row per band in a single kernel launch.

    Returns:
        The quantized rows, shape (len(rows), width, 3).
    """
    jitter = np.stack([rng.uniforms((settings.width, settings.samples, 2)) for rng in sources])
    seeds = np.array([rng.stream_seed() for rng in sources], dtype=np.uint32)

    linear = tracer.trace_rows(
        np.array(rows, dtype=np.int32),
        jitter,
        seeds,
        settings.width,
        settings.height,
        settings.max_depth,
        settings.threads,
    )
    return to_rgb8(linear)


def render_band(
    scene: Hittable,
    camera: Camera,
    settings: RenderSettings,
    start_row: int,
    band: npt.NDArray[np.uint8],
    rng: RandomSource,
) -> None:
    """Render the rows of one band into its slice of the output buffer.

    Args:
        scene: The scene to render (read only).
        camera: The camera to render from (read only).
        settings: Image and sampling parameters.
        start_row: Index of the band's first row, counted from the top.
        band: View of the output buffer for this band, shape
            (rows, width, 3). Written in place.
        rng: Random source confined to this band.

    Raises:
        TypeError: If the scene holds anything the kernel cannot trace.
    """
    tracer = get_tracer()
    with tracer.lock:
        tracer.upload(scene, camera)
        for band_row in range(band.shape[0]):
            band[band_row] = _trace_rows(tracer, settings, [start_row + band_row], [rng])[0]


def render(
    scene: Hittable,
    camera: Camera,
    settings: RenderSettings,
    callback: ProgressCallback | None = None,
) -> npt.NDArray[np.uint8]:
    """Render the scene with one CPU thread per band.

    Args:
        scene: The scene to render. Must not be modified during the call.
        camera: The camera to render from.
        settings: Image, sampling and threading parameters.
        callback: Optional function called on the calling thread after each
            kernel launch. Receives (completed_rows, total_rows).

    Returns:
        Array of shape (height, width, 3) with dtype uint8, rows ordered top
        to bottom.

    Raises:
        TypeError: If the scene holds anything the kernel cannot trace.
        Exception: Whatever the callback raised; the render is abandoned.
    """
    image = np.zeros((settings.height, settings.width, 3), dtype=np.uint8)
    bands = band_ranges(settings.height, settings.threads)
    sources = RandomSource.spawn(settings.seed, len(bands))
    # The first band is always the tallest
    passes = bands[0][1] - bands[0][0]

    logger.info(
        "Rendering %dx%d at %d spp across %d bands",
        settings.width,
        settings.height,
        settings.samples,
        len(bands),
    )
    start_time = time.perf_counter()

    tracer = get_tracer()
    with tracer.lock:
        tracer.upload(scene, camera)
        completed = 0

        for offset in range(passes):
            active = [
                (start + offset, rng)
                for (start, end), rng in zip(bands, sources)
                if start + offset < end
            ]
            rows = [row for row, _ in active]
            image[rows] = _trace_rows(tracer, settings, rows, [rng for _, rng in active])

            completed += len(rows)
            logger.debug("Row pass %d/%d finished", offset + 1, passes)
            if callback is not None:
                callback(completed, settings.height)

    logger.info("Render finished in %.2fs", time.perf_counter() - start_time)
    return image
