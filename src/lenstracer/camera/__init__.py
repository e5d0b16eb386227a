"""Camera module for view and ray generation.

Components:
    thin_lens: Thin-lens perspective camera with depth of field

Camera responsibilities:
    - Transform (s, t) image coordinates to world-space rays
    - Support look-at positioning with an up hint
    - Model field of view, aspect ratio, aperture and focus distance

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .thin_lens import (
    CameraBasis,
    ThinLensCamera,
    compute_camera_basis,
    get_camera_basis,
    get_camera_info,
    get_camera_origin,
    get_ray,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "CameraBasis",
    "compute_camera_basis",
    "setup_camera",
    "get_ray",
    "get_camera_origin",
    "get_camera_basis",
    "get_camera_info",
]
