"""Materials module for light scattering models.

Components:
    material: Base material interface and the scatter result
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like refraction with Schlick reflectance
"""

from .dielectric import Dielectric
from .lambertian import Lambertian
from .material import Material, MaterialType, ScatteredHit, validate_color
from .metal import Metal

__all__ = [
    # Base
    "Material",
    "MaterialType",
    "ScatteredHit",
    "validate_color",
    # Models
    "Lambertian",
    "Metal",
    "Dielectric",
]
