"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere dataclass, the HitRecord produced by an
intersection test, and the face-orientation step shared by every surface.

Intersection solves the half-b form of the ray-sphere quadratic. The nearer
root is always preferred when both lie in [t_min, t_max]; t_min keeps a
scattered ray from re-hitting the surface it leaves ("shadow acne").

A negative radius is allowed and models an inward-facing sphere, which is
how a hollow glass shell is built. The outward normal (p - center) / radius
flips with the radius, so no special case is needed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lenstracer.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Negative values flip the normals
            inward.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    The record is returned by value. Only when hit == 1 are the other fields
    meaningful; a miss leaves them at their zero defaults.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The ray parameter of the intersection.
        point: The 3D point where the ray intersected the surface.
        normal: The unit surface normal, always oriented against the
            incoming ray.
        front_face: 1 if the geometric outward normal already opposed the
            ray (the ray arrived from outside), 0 otherwise.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a geometric normal against the incoming ray.

    Args:
        ray_direction: The direction of the incoming ray.
        outward_normal: The unit outward normal of the surface.

    Returns:
        A tuple (front_face, normal) where front_face is 1 when
        dot(ray_direction, outward_normal) < 0 and normal is outward_normal
        for front faces, its negation otherwise.
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(ray_direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    The intersection is found by solving:
        |ray_origin + t * ray_direction - center|^2 = radius^2

    which, with oc = origin - center, is the quadratic
        a*t^2 + 2*half_b*t + c = 0
    where
        a = dot(direction, direction)
        half_b = dot(oc, direction)
        c = dot(oc, oc) - radius^2

    The direction need not be normalized since a carries its magnitude.

    Roots are tried nearest first, (-half_b - sqrt(d)) / a, then
    (-half_b + sqrt(d)) / a, each accepted if t_min <= root <= t_max.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        sphere: The sphere to test intersection against.
        t_min: Minimum accepted t (self-intersection epsilon).
        t_max: Maximum accepted t (closest hit found so far).

    Returns:
        A HitRecord. Check the hit field to determine if intersection
        occurred.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = t_min <= root and root <= t_max

        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = t_min <= root and root <= t_max

        if valid:
            did_hit = 1
            hit_t = root
            hit_point = ray_origin + root * ray_direction

            # Sign-correct for negative radius: numerator and denominator flip together
            outward_normal = (hit_point - sphere.center) / sphere.radius
            is_front_face, hit_normal = set_face_normal(ray_direction, outward_normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)
