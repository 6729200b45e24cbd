"""Geometry module for shape primitives.

Components:
    hittable: Hit record and the abstract intersectable interface
    sphere: Ray-sphere intersection
"""

from .hittable import Hit, Hittable
from .sphere import Sphere

__all__ = [
    "Hit",
    "Hittable",
    "Sphere",
]
