"""Image export utilities for rendered images.

This module turns the averaged linear image into 8-bit output:

    1. NaN components become 0
    2. Gamma 2 correction (square root)
    3. Clamp to [0, 0.999], scale by 256 and truncate

The 0.999 clamp keeps 1.0 at 255 instead of overflowing to 256.

Supported formats:
    - PPM (plain-text P3, no dependencies)
    - PNG (8-bit via Pillow)

Example:
    >>> from src.lenstracer.preview.export import save_png
    >>> from src.lenstracer.core.integrator import get_linear_image_numpy
    >>>
    >>> save_png(get_linear_image_numpy(), "output.png")
"""

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Upper clamp applied before scaling to 8 bits
MAX_INTENSITY = 0.999


def linear_to_uint8(image: npt.NDArray[np.floating[npt.NBitBase]]) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to gamma-corrected uint8.

    Args:
        image: Linear image array of shape (H, W, 3). Values may be outside
            [0, 1] or NaN.

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    linear = np.nan_to_num(np.asarray(image, dtype=np.float64), nan=0.0)
    corrected = np.sqrt(np.maximum(linear, 0.0))
    scaled = 256.0 * np.clip(corrected, 0.0, MAX_INTENSITY)
    return scaled.astype(np.uint8)


def format_ppm(image: npt.NDArray[np.floating[npt.NBitBase]]) -> str:
    """Render an image as plain-text PPM (P3) content.

    Rows are written top to bottom, one pixel ("r g b") per line.

    Args:
        image: Linear image array of shape (H, W, 3), top row first.

    Returns:
        The PPM file content.
    """
    pixels = linear_to_uint8(image)
    height, width = pixels.shape[:2]

    lines = ["P3", f"{width} {height}", "255"]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.reshape(-1, 3))
    return "\n".join(lines) + "\n"


def save_ppm(image: npt.NDArray[np.floating[npt.NBitBase]], filepath: str | Path) -> None:
    """Save a linear image as a plain-text PPM file.

    Args:
        image: Linear image array of shape (H, W, 3), top row first.
        filepath: Output file path.
    """
    Path(filepath).write_text(format_ppm(image), encoding="ascii")


def save_png(image: npt.NDArray[np.floating[npt.NBitBase]], filepath: str | Path) -> None:
    """Save a linear image as an 8-bit PNG file.

    Applies the same quantization as save_ppm().

    Args:
        image: Linear image array of shape (H, W, 3), top row first.
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(linear_to_uint8(image), mode="RGB")
    pil_image.save(filepath)


def save_image(image: npt.NDArray[np.floating[npt.NBitBase]], filepath: str | Path) -> None:
    """Save an image, choosing the format from the file extension.

    Raises:
        ValueError: If the extension is neither .ppm nor .png.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix == ".ppm":
        save_ppm(image, filepath)
    elif suffix == ".png":
        save_png(image, filepath)
    else:
        raise ValueError(f"Unsupported output format '{suffix}' (expected .ppm or .png)")


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
