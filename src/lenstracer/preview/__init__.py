"""Preview module for rendered output.

Components:
    export: Gamma correction, 8-bit quantization and PPM/PNG writers

Example:
    >>> from src.lenstracer.preview import save_ppm
    >>> from src.lenstracer.core.renderer import Renderer
    >>>
    >>> renderer = Renderer()
    >>> renderer.render(16)
    >>> save_ppm(renderer.get_image_numpy(), "output.ppm")
"""

from src.lenstracer.preview.export import (
    MAX_INTENSITY,
    compute_rmse,
    format_ppm,
    linear_to_uint8,
    save_image,
    save_png,
    save_ppm,
)

__all__ = [
    "MAX_INTENSITY",
    "linear_to_uint8",
    "format_ppm",
    "save_ppm",
    "save_png",
    "save_image",
    "compute_rmse",
]
