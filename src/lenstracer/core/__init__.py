"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector algebra and random sampling primitives
    config: Render configuration with documented defaults
    integrator: Radiance estimator and the parallel render kernel
    renderer: Batched render driver with progress reporting

The integrator estimates radiance with Monte Carlo path tracing: every pixel
averages many jittered camera rays, each followed through up to max_depth
bounces until it is absorbed or escapes to the sky gradient.

All compute-intensive operations use Taichi kernels for parallel execution.
"""

from .config import RenderConfig
from .ray import (
    NEAR_ZERO,
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_range,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.lenstracer.core.integrator or src.lenstracer.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "NEAR_ZERO",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_range",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
    "RenderConfig",
]
