"""Ray data structure and vector utilities for GPU-accelerated ray tracing.

This module provides the fundamental Ray dataclass together with the vector
algebra and random sampling primitives used by the materials and the camera.
All operations are Taichi functions so they can run inside render kernels.

Vectors are ``taichi.math.vec3``. Points and colors use the same type; only
the role differs. Arithmetic is exact floating point with no implicit
clamping, and ``normalize`` of a zero vector produces NaN components which
propagate silently through later math.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Squared-length threshold below which a direction is treated as degenerate
NEAR_ZERO = 1e-15


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length; intersection math accounts for its magnitude.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    No validation is done on t; callers keep it inside their own interval.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the length (magnitude) of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The vector is divided by its magnitude. A zero-length input is a
    contract violation: the division yields NaN components and no fallback
    is substituted.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v.
    """
    return v / length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether a vector is degenerate (squared length below NEAR_ZERO).

    Args:
        v: The vector to check.

    Returns:
        1 if the squared length is below NEAR_ZERO, 0 otherwise.
    """
    result = 0
    if length_squared(v) < NEAR_ZERO:
        result = 1
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes v - 2 * (v . n) * n. The normal should be unit length.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(uv: vec3, normal: vec3, eta_ratio: ti.f32) -> vec3:
    """Refract a unit vector through a surface using Snell's law.

    The incident vector is split into components perpendicular and parallel
    to the normal. The perpendicular part is scaled by eta_ratio and the
    parallel part is rebuilt from the unit-length constraint. The absolute
    value under the square root tolerates floating point error near grazing
    angles.

    Callers check for total internal reflection before refracting.

    Args:
        uv: The incoming direction (unit length).
        normal: The surface normal, facing against uv (unit length).
        eta_ratio: Ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction vector.
    """
    cos_theta = tm.min(tm.dot(-uv, normal), 1.0)
    r_out_perp = eta_ratio * (uv + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f32, ratio: ti.f32) -> ti.f32:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ratio: Ratio of refractive indices.

    Returns:
        The approximate Fresnel reflectance coefficient.
    """
    r0 = (1.0 - ratio) / (1.0 + ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_range(min_value: ti.f32, max_value: ti.f32) -> vec3:
    """Generate a vector whose components are uniform in [min_value, max_value).

    Each component is drawn independently.
    """
    span = max_value - min_value
    return vec3(
        min_value + span * ti.random(ti.f32),
        min_value + span * ti.random(ti.f32),
        min_value + span * ti.random(ti.f32),
    )


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit sphere.

    Rejection sampling from the enclosing cube. The expected number of draws
    is 6 / pi (about 1.91); the loop retries until a sample is accepted.

    Returns:
        A random point with squared length < 1.
    """
    p = random_range(-1.0, 1.0)
    while length_squared(p) >= 1.0:
        p = random_range(-1.0, 1.0)
    return p


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Same rejection technique as random_in_unit_sphere(), restricted to the
    first two components. Used for thin-lens depth of field.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(ti.random(ti.f32) * 2.0 - 1.0, ti.random(ti.f32) * 2.0 - 1.0, 0.0)
    while length_squared(p) >= 1.0:
        p = vec3(ti.random(ti.f32) * 2.0 - 1.0, ti.random(ti.f32) * 2.0 - 1.0, 0.0)
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector.

    This is the normalized version of random_in_unit_sphere().
    """
    return normalize(random_in_unit_sphere())
