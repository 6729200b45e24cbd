"""Scene serialization to and from plain dictionaries and JSON files.

A serialized scene lists its materials once and lets spheres refer to them
by index, so a material shared by several spheres stays shared after a round
trip:

    {
        "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}, ...],
        "spheres": [{"center": [0, 0, -1], "radius": 0.5, "material_id": 0}, ...]
    }

Example:
    >>> from raytracer.scene.manager import load_scene, save_scene
    >>> scene = load_scene("examples/scenes/three_spheres.json")
    >>> save_scene(scene, "copy.json")
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from raytracer.core.vector import Vector3
from raytracer.geometry.sphere import Sphere
from raytracer.materials.dielectric import Dielectric
from raytracer.materials.lambertian import Lambertian
from raytracer.materials.material import Material, MaterialType
from raytracer.materials.metal import Metal
from raytracer.scene.intersection import Scene


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def material_from_dict(data: dict[str, Any]) -> Material:
    """Build a material from its serialized form.

    Args:
        data: Dictionary with a "type" key and the material's parameters.

    Returns:
        The material instance.

    Raises:
        ValueError: If the material type is unknown or a parameter is invalid.
    """
    mat_type = str(data.get("type", "")).lower()

    if mat_type == MaterialType.LAMBERTIAN.value:
        return Lambertian(Vector3.from_iterable(data.get("albedo", [0.5, 0.5, 0.5])))
    if mat_type == MaterialType.METAL.value:
        return Metal(
            Vector3.from_iterable(data.get("albedo", [0.8, 0.8, 0.8])),
            float(data.get("fuzz", 0.0)),
        )
    if mat_type == MaterialType.DIELECTRIC.value:
        return Dielectric(
            float(data.get("refraction_index", 1.5)),
            absorb_total_internal_reflection=bool(
                data.get("absorb_total_internal_reflection", False)
            ),
        )
    raise ValueError(f"Unknown material type: {mat_type}")


def scene_to_config(scene: Scene) -> SceneConfig:
    """Export a scene of spheres to a configuration object.

    Materials are deduplicated by identity.

    Args:
        scene: The scene to export.

    Returns:
        A SceneConfig containing all materials and spheres.

    Raises:
        TypeError: If the scene contains an object that is not a Sphere.
    """
    config = SceneConfig()
    material_ids: dict[int, int] = {}

    for obj in scene:
        if not isinstance(obj, Sphere):
            raise TypeError(f"Cannot serialize scene object of type {type(obj).__name__}")

        key = id(obj.material)
        if key not in material_ids:
            material_ids[key] = len(config.materials)
            config.materials.append(
                {"type": obj.material.material_type.value, **obj.material.params()}
            )

        config.spheres.append(
            {
                "center": list(obj.center.to_tuple()),
                "radius": obj.radius,
                "material_id": material_ids[key],
            }
        )

    return config


def scene_from_config(config: SceneConfig) -> Scene:
    """Build a scene from a configuration object.

    Args:
        config: The scene configuration to load.

    Returns:
        The scene, with spheres in configuration order.

    Raises:
        ValueError: If the configuration contains invalid data.
    """
    # Materials first (needed for primitives)
    materials = [material_from_dict(mat_config) for mat_config in config.materials]

    scene = Scene()
    for sphere_config in config.spheres:
        material_id = int(sphere_config.get("material_id", 0))
        if not 0 <= material_id < len(materials):
            raise ValueError(f"Invalid material_id: {material_id}")
        scene.add(
            Sphere(
                center=Vector3.from_iterable(sphere_config.get("center", [0, 0, 0])),
                radius=float(sphere_config.get("radius", 1.0)),
                material=materials[material_id],
            )
        )
    return scene


def scene_to_dict(scene: Scene) -> dict[str, Any]:
    """Export the scene to a dictionary (for JSON serialization)."""
    config = scene_to_config(scene)
    return {"materials": config.materials, "spheres": config.spheres}


def scene_from_dict(data: dict[str, Any]) -> Scene:
    """Load a scene from a dictionary with 'materials' and 'spheres' keys."""
    return scene_from_config(
        SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
        )
    )


def save_scene(scene: Scene, filepath: str | Path) -> None:
    """Write the scene to a JSON file."""
    Path(filepath).write_text(json.dumps(scene_to_dict(scene), indent=2))


def load_scene(filepath: str | Path) -> Scene:
    """Read a scene from a JSON file.

    Raises:
        OSError: If the file cannot be read.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the scene description is invalid.
    """
    return scene_from_dict(json.loads(Path(filepath).read_text()))
