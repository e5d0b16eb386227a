"""Taichi-based Monte Carlo sphere ray tracer.

This package renders scenes made of spheres with GPU-accelerated ray tracing
using Taichi, with support for:
- Diffuse, metal and glass materials
- A thin-lens camera with depth of field
- Jittered multi-sample anti-aliasing
- Batched rendering with progress reporting and PPM/PNG export

Subpackages:
    core: Vector utilities, rays, render configuration, estimator and render driver
    geometry: Sphere primitive and intersection
    materials: Scattering models
    scene: Scene storage, scene builder and ready-made scenes
    camera: Thin-lens camera with ray generation
    preview: Image quantization and export
"""

__version__ = "0.1.0"
