"""Camera module for primary ray generation.

Components:
    thin_lens: Positionable camera with field of view and depth of field
"""

from .thin_lens import Camera, CameraConfig, setup_camera

__all__ = [
    "Camera",
    "CameraConfig",
    "setup_camera",
]
