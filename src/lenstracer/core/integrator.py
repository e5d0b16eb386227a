"""Radiance estimator and parallel render loop.

This module implements the Monte Carlo estimator that turns camera rays into
pixel colors, together with the render target the estimator accumulates into.

The estimator follows a ray through the scene: at every hit the surface
material either absorbs the ray (the path contributes black) or scatters it,
multiplying the path throughput by the material's attenuation. A ray that
escapes the scene picks up the sky gradient. A path that runs out of bounces
contributes black.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Iterative bounce loop with an explicit maximum depth
    - Per-pixel sample accumulation with jittered anti-aliasing
    - Sky gradient background, white at the horizon and blue overhead

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.lenstracer.core.integrator import (
    ...     render_image, setup_render_target, get_linear_image_numpy
    ... )
    >>> from src.lenstracer.scene.presets import create_random_spheres_scene
    >>> from src.lenstracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=7)
    >>> setup_camera(camera)
    >>> setup_render_target(300, 200)
    >>> render_image(num_samples=16, max_depth=50)
    >>> image = get_linear_image_numpy()
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.lenstracer.camera.thin_lens import get_ray
from src.lenstracer.core.ray import Ray, make_ray, normalize
from src.lenstracer.materials.dielectric import scatter_dielectric_by_id
from src.lenstracer.materials.lambertian import scatter_lambertian_by_id
from src.lenstracer.materials.metal import scatter_metal_by_id
from src.lenstracer.scene.intersection import intersect_scene
from src.lenstracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum ray bounces (path length)
MAX_DEPTH = 50

# Hits closer than T_MIN are ignored to avoid self-intersection ("shadow acne")
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Per-pixel sum of sample colors (preallocated to max size)
_color_sum = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel (preallocated to max size)
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.
    The buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT
    to avoid Taichi kernel recompilation issues.

    Args:
        width: Image width in pixels (2..MAX_IMAGE_WIDTH).
        height: Image height in pixels (2..MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions exceed the maximum supported size or are
            too small to place jittered samples (fewer than 2 pixels).
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if width < 2 or height < 2:
        raise ValueError(f"Image dimensions ({width}x{height}) must be at least 2x2")

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_sum.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the scatter function of the hit surface's material.

    Args:
        material_id: The unified material handle.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit length, facing the incoming ray).
        front_face: 1 if the outside of the surface was hit, 0 otherwise.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Radiance Estimator
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky gradient seen by a ray that escapes the scene.

    Blends from white (looking straight down) to light blue (straight up)
    by the height of the unit direction.
    """
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Follows the ray for at most max_depth surface interactions:
    - a miss returns the accumulated throughput times the sky gradient;
    - an absorbed ray returns black;
    - a path still bouncing when the depth runs out returns black.

    With max_depth <= 0 the result is black without touching the scene.

    Args:
        ray: The ray to trace.
        max_depth: Maximum number of surface interactions.

    Returns:
        The estimated radiance (RGB). No clamping is applied.
    """
    origin = ray.origin
    direction = ray.direction

    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Taichi has no early return from a ti.func loop
    active = 1

    for _ in range(max_depth):
        if active == 1:
            hit_record = intersect_scene(origin, direction, T_MIN, T_MAX)

            if hit_record.hit == 0:
                color = throughput * background_color(direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    hit_record.material_id,
                    direction,
                    hit_record.normal,
                    hit_record.front_face,
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = hit_record.point
                    direction = scattered_direction

    return color


@ti.func
def sample_pixel(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32, max_depth: ti.i32) -> vec3:
    """Trace one jittered camera ray through pixel (i, j).

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum number of surface interactions.

    Returns:
        The radiance estimate for this sample.
    """
    s = (ti.cast(pixel_i, ti.f32) + ti.random(ti.f32)) / ti.cast(width - 1, ti.f32)
    t = (ti.cast(pixel_j, ti.f32) + ti.random(ti.f32)) / ti.cast(height - 1, ti.f32)
    return ray_color(get_ray(s, t), max_depth)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_samples(width: ti.i32, height: ti.i32, num_samples: ti.i32, max_depth: ti.i32):
    """Render num_samples samples for every pixel and accumulate them.

    The outermost loop runs in parallel; each pixel writes only its own slot.
    """
    for i, j in ti.ndrange(width, height):
        pixel_sum = vec3(0.0, 0.0, 0.0)
        for _ in range(num_samples):
            pixel_sum += sample_pixel(i, j, width, height, max_depth)

        _color_sum[i, j] += pixel_sum
        _sample_count[i, j] += num_samples


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32, max_depth: ti.i32
) -> vec3:
    """Render a single sample for a specific pixel without accumulating it."""
    return sample_pixel(pixel_i, pixel_j, width, height, max_depth)


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    """Estimate radiance along one explicit ray."""
    return ray_color(make_ray(origin, direction), max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Estimate radiance along a single ray from Python.

    Uses the current scene but not the camera or the render target. Useful
    for testing and debugging the estimator.

    Args:
        origin: Ray origin.
        direction: Ray direction (any non-zero length).
        max_depth: Maximum number of surface interactions.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    color = _trace_single_ray(vec3(*origin), vec3(*direction), max_depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def render_sample(pixel_i: int, pixel_j: int, max_depth: int = MAX_DEPTH) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = bottom).
        max_depth: Maximum number of surface interactions.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, max_depth)

    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1, max_depth: int = MAX_DEPTH) -> None:
    """Render the image with the specified number of samples per pixel.

    Accumulates samples into the render target. Can be called multiple times
    to add more samples for convergence.

    Args:
        num_samples: Number of samples to render per pixel.
        max_depth: Maximum number of surface interactions per path.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    if num_samples <= 0:
        return

    width, height = get_image_dimensions()
    _render_samples(width, height, num_samples, max_depth)


def get_total_samples() -> int:
    """Get the total number of samples rendered so far.

    Returns the sample count from pixel (0, 0), which is the same for all
    pixels after calling render_image().

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_linear_image_numpy() -> npt.NDArray[np.float32]:
    """Get the averaged linear-space image as a NumPy array.

    The array shape is (height, width, 3) with the top row first. Values are
    not clamped and NaN samples propagate into their pixel. Pixels without
    samples are black.

    Returns:
        NumPy array of shape (height, width, 3) with dtype float32.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    color_sum = _color_sum.to_numpy()[:width, :height, :]
    counts = _sample_count.to_numpy()[:width, :height]

    image = color_sum / np.maximum(counts, 1)[:, :, np.newaxis]

    # Transpose from (width, height, 3) to (height, width, 3) for standard image format
    image = np.transpose(image, (1, 0, 2))

    # Flip vertically (row 0 is the bottom of the image)
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)
