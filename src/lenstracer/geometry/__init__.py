"""Geometry module for shape primitives.

This module provides the surface contract and its one implementation:

Components:
    sphere: Sphere primitive, HitRecord and ray-sphere intersection

All intersection routines are implemented as Taichi functions (@ti.func)
so they can be called from render kernels. A surface test takes the ray,
an accepted [t_min, t_max] interval, and returns a HitRecord whose normal
always opposes the incoming ray.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere, set_face_normal

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "set_face_normal",
]
