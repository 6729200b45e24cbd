"""Image export utilities for rendered images.

This module saves the 8-bit RGB buffers produced by the renderer.

Supported formats:
    - Plain-text portable pixmap (PPM "P3"), written directly
    - PNG and any other format Pillow can write, chosen by file suffix

Example:
    >>> from raytracer.preview.export import save_image
    >>> save_image(image, "out/random_spheres.ppm")
    >>> save_image(image, "out/random_spheres.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def _check_rgb8(image: npt.NDArray[np.uint8]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected an image with dtype uint8, got {image.dtype}")


def write_ppm(image: npt.NDArray[np.uint8], stream: TextIO) -> None:
    """Write an image as a plain-text PPM to an open text stream.

    The header is ``P3``, the dimensions and the maximum value 255, each on
    its own line, followed by one ``r g b`` line per pixel in row-major
    order, top row first.

    Args:
        image: Array of shape (H, W, 3) with dtype uint8.
        stream: Writable text stream.

    Raises:
        ValueError: If the image has the wrong shape or dtype.
    """
    _check_rgb8(image)
    height, width, _ = image.shape

    stream.write(f"P3\n{width} {height}\n255\n")
    for r, g, b in image.reshape(-1, 3).tolist():
        stream.write(f"{r} {g} {b}\n")


def save_ppm(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an image as a plain-text PPM file.

    Args:
        image: Array of shape (H, W, 3) with dtype uint8.
        filepath: Output file path.
    """
    with open(filepath, "w", encoding="ascii") as stream:
        write_ppm(image, stream)


def save_png(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an image through Pillow (format chosen from the suffix).

    Args:
        image: Array of shape (H, W, 3) with dtype uint8.
        filepath: Output file path (e.g. ending in .png).
    """
    _check_rgb8(image)
    PILImage.fromarray(image).save(filepath)


def save_image(image: npt.NDArray[np.uint8], filepath: str | Path) -> Path:
    """Save an image, writing plain PPM for ``.ppm`` and using Pillow otherwise.

    Parent directories are created as needed.

    Args:
        image: Array of shape (H, W, 3) with dtype uint8.
        filepath: Output file path.

    Returns:
        The path that was written.
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.suffix.lower() == ".ppm":
        save_ppm(image, path)
    else:
        save_png(image, path)
    return path
