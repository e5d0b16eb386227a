"""Thin-lens camera model with depth of field.

The camera maps normalized image-plane coordinates (s, t) to world-space
rays. It supports:
- Look-at positioning (look_from, look_at, vup)
- Vertical field of view specification
- Arbitrary aspect ratios
- Depth of field through a finite lens aperture

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward look_from (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport is placed on the focal plane, focus_distance along -w, by
scaling every viewport vector by focus_distance. Each ray starts at a random
point on a lens disk of radius aperture / 2 and is aimed at the same point on
the focal plane, so geometry at the focus distance stays sharp while
everything else blurs. With aperture 0 the camera is a pinhole and get_ray
is deterministic.

The basis is computed once on the host with NumPy and uploaded to Taichi
fields; kernels only read it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lenstracer.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>>
    >>> camera = ThinLensCamera(
    ...     look_from=(13.0, 2.0, 3.0),
    ...     look_at=(0.0, 0.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=3.0 / 2.0,
    ...     aperture=0.1,
    ...     focus_distance=10.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import math
from dataclasses import asdict, dataclass, fields
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.lenstracer.core.ray import Ray, make_ray, random_in_unit_disk, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class ThinLensCamera:
    """Configuration for a thin-lens (depth of field) camera.

    Attributes:
        look_from: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at in world space (x, y, z).
        vup: Up hint for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables depth of field.
        focus_distance: Distance from look_from to the plane in focus.
    """

    look_from: tuple[float, float, float] = (0.0, 0.0, 0.0)
    look_at: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 16.0 / 9.0
    aperture: float = 1.0
    focus_distance: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        """Export the camera configuration to a dictionary."""
        data = asdict(self)
        for key in ("look_from", "look_at", "vup"):
            data[key] = list(data[key])
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ThinLensCamera":
        """Create a camera from a dictionary; missing keys use defaults.

        Raises:
            ValueError: If the dictionary contains unknown keys.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown camera keys: {sorted(unknown)}")

        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key in ("look_from", "look_at", "vup"):
                kwargs[key] = (float(value[0]), float(value[1]), float(value[2]))
            else:
                kwargs[key] = float(value)
        return cls(**kwargs)


@dataclass(frozen=True)
class CameraBasis:
    """Derived image-plane geometry for a camera.

    Attributes:
        origin: Lens center (look_from).
        u: Unit right vector.
        v: Unit up vector.
        w: Unit backward vector (opposite the view direction).
        horizontal: Full viewport width vector on the focal plane.
        vertical: Full viewport height vector on the focal plane.
        lower_left_corner: Lower-left corner of the viewport on the focal plane.
        lens_radius: aperture / 2.
    """

    origin: npt.NDArray[np.float64]
    u: npt.NDArray[np.float64]
    v: npt.NDArray[np.float64]
    w: npt.NDArray[np.float64]
    horizontal: npt.NDArray[np.float64]
    vertical: npt.NDArray[np.float64]
    lower_left_corner: npt.NDArray[np.float64]
    lens_radius: float


def compute_camera_basis(camera: ThinLensCamera) -> CameraBasis:
    """Compute the orthonormal basis and focal-plane viewport of a camera.

    Args:
        camera: Camera configuration.

    Returns:
        The derived CameraBasis (float64 NumPy vectors).
    """
    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    look_from = np.array(camera.look_from, dtype=np.float64)
    look_at = np.array(camera.look_at, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    # w points from look_at toward look_from (backward)
    w = look_from - look_at
    w = w / np.linalg.norm(w)

    # u points right (perpendicular to w and vup)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)

    # v points up in the camera's frame
    v = np.cross(w, u)

    horizontal = camera.focus_distance * viewport_width * u
    vertical = camera.focus_distance * viewport_height * v
    lower_left = look_from - horizontal / 2.0 - vertical / 2.0 - camera.focus_distance * w

    return CameraBasis(
        origin=look_from,
        u=u,
        v=v,
        w=w,
        horizontal=horizontal,
        vertical=vertical,
        lower_left_corner=lower_left,
        lens_radius=camera.aperture / 2.0,
    )


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Focal-plane viewport
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> CameraBasis:
    """Upload a camera to the Taichi fields read by get_ray().

    Must be called before rendering, and not while a render is running.

    Args:
        camera: Camera configuration.

    Returns:
        The CameraBasis that was uploaded.
    """
    basis = compute_camera_basis(camera)

    _camera_origin[None] = basis.origin.tolist()
    _camera_u[None] = basis.u.tolist()
    _camera_v[None] = basis.v.tolist()
    _camera_w[None] = basis.w.tolist()
    _viewport_horizontal[None] = basis.horizontal.tolist()
    _viewport_vertical[None] = basis.vertical.tolist()
    _lower_left_corner[None] = basis.lower_left_corner.tolist()
    _lens_radius[None] = basis.lens_radius

    return basis


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32) -> Ray:
    """Generate a camera ray through normalized image coordinates (s, t).

    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    A lens sample is drawn on the disk of radius lens_radius in the (u, v)
    plane. The ray starts at origin + offset and points at the focal-plane
    point for (s, t), minus that same offset. The direction is not
    normalized.

    Args:
        s: Horizontal coordinate, roughly in [0, 1].
        t: Vertical coordinate, roughly in [0, 1].

    Returns:
        The camera ray.
    """
    u, v, _ = get_camera_basis()
    rd = _lens_radius[None] * random_in_unit_disk()
    offset = u * rd.x + v * rd.y

    origin = get_camera_origin()
    direction = (
        _lower_left_corner[None]
        + s * _viewport_horizontal[None]
        + t * _viewport_vertical[None]
        - origin
        - offset
    )
    return make_ray(origin + offset, direction)


@ti.func
def get_camera_origin() -> vec3:
    """Get the lens center in world space."""
    return _camera_origin[None]


@ti.func
def get_camera_basis():
    """Get the camera's orthonormal basis vectors as (u, v, w)."""
    return _camera_u[None], _camera_v[None], _camera_w[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, Any]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        (as float tuples) and lens_radius.
    """

    def _triple(f: Any) -> tuple[float, float, float]:
        value = f[None]
        return (float(value[0]), float(value[1]), float(value[2]))

    return {
        "origin": _triple(_camera_origin),
        "u": _triple(_camera_u),
        "v": _triple(_camera_v),
        "w": _triple(_camera_w),
        "horizontal": _triple(_viewport_horizontal),
        "vertical": _triple(_viewport_vertical),
        "lower_left": _triple(_lower_left_corner),
        "lens_radius": float(_lens_radius[None]),
    }
