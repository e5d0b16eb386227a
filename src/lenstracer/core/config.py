"""Render configuration.

Rendering parameters are gathered in a single dataclass that is passed to the
render driver instead of living as module-level constants. The defaults
reproduce the canonical random-spheres render: a 1200x800 image (3:2 aspect
ratio), 512 samples per pixel and at most 50 bounces per path.

Example:
    >>> config = RenderConfig.from_aspect_ratio(400, 16.0 / 9.0, samples_per_pixel=32)
    >>> config.image_height
    225
"""

from dataclasses import asdict, dataclass, fields
from typing import Any

DEFAULT_IMAGE_WIDTH = 1200
DEFAULT_IMAGE_HEIGHT = 800
DEFAULT_SAMPLES_PER_PIXEL = 512
DEFAULT_MAX_DEPTH = 50
DEFAULT_BATCH_SIZE = 16


@dataclass
class RenderConfig:
    """Parameters controlling a render.

    Attributes:
        image_width: Image width in pixels.
        image_height: Image height in pixels.
        samples_per_pixel: Number of jittered camera rays averaged per pixel.
        max_depth: Maximum number of bounces per path. Paths still alive
            after max_depth bounces contribute black.
        batch_size: Samples per pixel rendered between progress updates.
    """

    image_width: int = DEFAULT_IMAGE_WIDTH
    image_height: int = DEFAULT_IMAGE_HEIGHT
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_depth: int = DEFAULT_MAX_DEPTH
    batch_size: int = DEFAULT_BATCH_SIZE

    @classmethod
    def from_aspect_ratio(
        cls,
        image_width: int,
        aspect_ratio: float,
        **kwargs: Any,
    ) -> "RenderConfig":
        """Create a config whose height is derived from width and aspect ratio.

        The height is int(image_width / aspect_ratio), truncated.

        Args:
            image_width: Image width in pixels.
            aspect_ratio: Width divided by height.
            **kwargs: Any other RenderConfig field.

        Returns:
            A new RenderConfig.
        """
        image_height = int(image_width / aspect_ratio)
        return cls(image_width=image_width, image_height=image_height, **kwargs)

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.image_width / self.image_height

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration to a dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderConfig":
        """Create a configuration from a dictionary.

        Missing keys fall back to their defaults.

        Raises:
            ValueError: If the dictionary contains unknown keys.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown render config keys: {sorted(unknown)}")
        return cls(**{key: int(value) for key, value in data.items()})
