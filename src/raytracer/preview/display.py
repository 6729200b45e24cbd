"""Matplotlib-based preview display for rendered images.

Example:
    >>> from raytracer.preview.display import show_preview
    >>> show_preview(image, title="Random spheres - 50 SPP")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def show_preview(
    image: npt.NDArray[np.uint8],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display a rendered image as a Matplotlib figure.

    Args:
        image: Array of shape (H, W, 3) with dtype uint8, top row first.
        title: Figure title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    ax.imshow(image)
    ax.axis("off")

    if title is None:
        height, width = image.shape[:2]
        title = f"Render Preview - {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
