"""Scene module for scene management.

Components:
    intersection: Scene container answering nearest-hit queries
    manager: Scene serialization to dictionaries and JSON files
    presets: The random spheres and two spheres scenes with their cameras
"""

from .intersection import Scene
from .manager import (
    SceneConfig,
    load_scene,
    material_from_dict,
    save_scene,
    scene_from_config,
    scene_from_dict,
    scene_to_config,
    scene_to_dict,
)
from .presets import (
    random_spheres_camera,
    random_spheres_scene,
    two_spheres_camera,
    two_spheres_scene,
)

__all__ = [
    "Scene",
    # Serialization
    "SceneConfig",
    "material_from_dict",
    "scene_to_config",
    "scene_from_config",
    "scene_to_dict",
    "scene_from_dict",
    "save_scene",
    "load_scene",
    # Presets
    "random_spheres_scene",
    "random_spheres_camera",
    "two_spheres_scene",
    "two_spheres_camera",
]
