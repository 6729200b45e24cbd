"""Preview module for image output.

Components:
    export: Plain PPM writer and Pillow-based PNG export
    display: Matplotlib figure preview
"""

from .display import show_preview
from .export import save_image, save_png, save_ppm, write_ppm

__all__ = [
    "save_image",
    "save_png",
    "save_ppm",
    "write_ppm",
    "show_preview",
]
