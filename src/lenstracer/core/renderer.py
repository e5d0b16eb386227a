"""Batched render driver.

This module provides a convenient wrapper around the core integrator that supports:
- Rendering a RenderConfig's full sample budget in batches
- Progress callbacks between batches
- A generator interface for iterative processing
- Easy reset and export of the accumulated image

The Renderer class owns the render target for its configuration. The scene
and the camera are set up separately (SceneManager, setup_camera) before
rendering starts.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.lenstracer.core.config import RenderConfig
    >>> from src.lenstracer.core.renderer import Renderer
    >>> from src.lenstracer.scene.presets import create_random_spheres_scene
    >>> from src.lenstracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=7)
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(RenderConfig(image_width=300, image_height=200))
    >>> renderer.render()
    >>> renderer.save_png("spheres.png")
"""

from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from src.lenstracer.core.config import RenderConfig
from src.lenstracer.core.integrator import (
    clear_render_target,
    get_linear_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from src.lenstracer.preview.export import linear_to_uint8, save_png, save_ppm

# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Render driver that accumulates samples for one configuration.

    The renderer keeps its configuration and delegates storage to the
    integrator's global buffers (which are Taichi fields), so only one
    Renderer should be active at a time.

    Attributes:
        config: The render configuration.
    """

    def __init__(self, config: RenderConfig | None = None) -> None:
        """Initialize the renderer and its render target.

        Args:
            config: Render configuration. Defaults to RenderConfig().

        Raises:
            ValueError: If the image size exceeds the maximum supported size.
        """
        self.config = config if config is not None else RenderConfig()
        setup_render_target(self.config.image_width, self.config.image_height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.image_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.config.image_height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulated samples without changing the configuration."""
        clear_render_target()

    def render(
        self,
        num_samples: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples in batches with an optional progress callback.

        Accumulates into the existing buffer, so calling render() again keeps
        refining the image.

        Args:
            num_samples: Samples per pixel to add. Defaults to
                config.samples_per_pixel.
            callback: Optional function called after each batch with
                (current_total_samples, target_total_samples).
        """
        for current, target in self.render_progressive(num_samples):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples in batches, yielding progress after each batch.

        Args:
            num_samples: Samples per pixel to add. Defaults to
                config.samples_per_pixel.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Example:
            >>> for current, target in renderer.render_progressive(64):
            ...     print(f"Progress: {current}/{target} samples")
        """
        if num_samples is None:
            num_samples = self.config.samples_per_pixel
        if num_samples <= 0:
            return

        batch_size = max(1, self.config.batch_size)
        target_samples = self.sample_count + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self.config.max_depth)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the averaged linear image, shape (height, width, 3), top row first."""
        return get_linear_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-corrected 8-bit image."""
        return linear_to_uint8(self.get_image_numpy())

    def save_ppm(self, filepath: str | Path) -> None:
        """Save the current image as a plain-text PPM file."""
        save_ppm(self.get_image_numpy(), filepath)

    def save_png(self, filepath: str | Path) -> None:
        """Save the current image as a PNG file."""
        save_png(self.get_image_numpy(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count}, max_depth={self.config.max_depth})"
        )
