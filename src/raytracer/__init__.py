"""Multithreaded sphere path tracer.

This package renders scenes made of spheres with diffuse, metallic and glass
materials, using a thin-lens camera with depth of field and a Monte Carlo
path tracer that spreads image bands across worker threads.

Subpackages:
    core: Vector math, rays, random sampling, the integrator and the renderer
    geometry: Hit records, the intersectable interface and spheres
    materials: Lambertian, metal and dielectric scattering models
    scene: Nearest-hit scene container, JSON serialization and preset scenes
    camera: Thin-lens camera with ray generation
    preview: Image export (PPM, PNG) and Matplotlib preview
"""

__version__ = "0.1.0"
