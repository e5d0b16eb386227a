"""Tests for the batched render driver.

This module tests the Renderer class including:
- Initialization from a RenderConfig
- Batch rendering and sample accumulation
- Progress callbacks and generators
- Reset functionality
- Image output in various formats

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import numpy as np
import pytest
from PIL import Image as PILImage


def _setup_simple_scene():
    """Helper to set up a diffuse sphere in front of a pinhole camera."""
    from src.lenstracer.camera.thin_lens import ThinLensCamera, setup_camera
    from src.lenstracer.scene.manager import SceneManager

    scene = SceneManager()
    mat_id = scene.add_lambertian_material((0.5, 0.5, 0.5))
    scene.add_sphere((0.0, 0.0, -2.0), 1.0, mat_id)

    camera = ThinLensCamera(
        look_from=(0.0, 0.0, 0.0),
        look_at=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=1.0,
        aperture=0.0,
        focus_distance=1.0,
    )
    setup_camera(camera)


def _small_renderer(**kwargs):
    from src.lenstracer.core.config import RenderConfig
    from src.lenstracer.core.renderer import Renderer

    defaults = {"image_width": 16, "image_height": 16, "samples_per_pixel": 4, "max_depth": 8}
    defaults.update(kwargs)
    return Renderer(RenderConfig(**defaults))


class TestRendererInit:
    """Test Renderer initialization."""

    def test_init_creates_render_target(self):
        """Test that initialization creates a render target with correct dimensions."""
        from src.lenstracer.core.integrator import get_image_dimensions

        renderer = _small_renderer(image_width=32, image_height=24)

        assert renderer.width == 32
        assert renderer.height == 24
        assert renderer.sample_count == 0
        assert get_image_dimensions() == (32, 24)

    def test_init_default_config(self):
        """Test the default configuration is the 1200x800 canonical render."""
        from src.lenstracer.core.renderer import Renderer

        renderer = Renderer()
        assert (renderer.width, renderer.height) == (1200, 800)
        assert renderer.config.samples_per_pixel == 512
        assert renderer.config.max_depth == 50

    def test_init_rejects_oversized_dimensions(self):
        """Test that initialization rejects dimensions exceeding max size."""
        with pytest.raises(ValueError, match="exceed maximum"):
            _small_renderer(image_width=4096, image_height=100)


class TestRendererRender:
    """Test batch rendering."""

    def test_render_uses_config_sample_budget(self):
        """Test render() with no argument renders samples_per_pixel samples."""
        _setup_simple_scene()
        renderer = _small_renderer(samples_per_pixel=6, batch_size=4)

        renderer.render()
        assert renderer.sample_count == 6

    def test_render_accumulates_samples(self):
        """Test repeated render calls keep refining the same image."""
        _setup_simple_scene()
        renderer = _small_renderer()

        renderer.render(3)
        renderer.render(2)
        assert renderer.sample_count == 5

    @pytest.mark.parametrize("num_samples", [0, -3])
    def test_render_with_non_positive_samples_does_nothing(self, num_samples):
        """Test zero or negative sample counts leave the image unchanged."""
        _setup_simple_scene()
        renderer = _small_renderer()

        renderer.render(num_samples)
        assert renderer.sample_count == 0

    def test_reset_clears_sample_count(self):
        """Test that reset clears the accumulated samples."""
        _setup_simple_scene()
        renderer = _small_renderer()

        renderer.render(2)
        renderer.reset()

        assert renderer.sample_count == 0
        assert np.all(renderer.get_image_numpy() == 0.0)


class TestRendererCallbacks:
    """Test progress callback functionality."""

    def test_callback_receives_progress(self):
        """Test that callback receives one update per batch."""
        _setup_simple_scene()
        renderer = _small_renderer(batch_size=2)

        progress_values = []

        def callback(current, target):
            progress_values.append((current, target))

        renderer.render(10, callback=callback)

        assert progress_values == [(2, 10), (4, 10), (6, 10), (8, 10), (10, 10)]

    def test_callback_with_partial_last_batch(self):
        """Test the last batch renders only the remaining samples."""
        _setup_simple_scene()
        renderer = _small_renderer(batch_size=4)

        progress_values = []
        renderer.render(6, callback=lambda current, target: progress_values.append(current))

        assert progress_values == [4, 6]

    def test_callback_with_existing_samples(self):
        """Test that the target accounts for pre-existing samples."""
        _setup_simple_scene()
        renderer = _small_renderer(batch_size=16)
        renderer.render(5)

        progress_values = []
        renderer.render(3, callback=lambda current, target: progress_values.append((current, target)))

        assert progress_values == [(8, 8)]


class TestRendererGenerator:
    """Test the generator interface."""

    def test_render_progressive_yields_progress(self):
        """Test the generator yields after each batch."""
        _setup_simple_scene()
        renderer = _small_renderer(batch_size=1)

        progress = list(renderer.render_progressive(3))
        assert progress == [(1, 3), (2, 3), (3, 3)]

    def test_render_progressive_interruptible(self):
        """Test that stopping the generator early stops rendering."""
        _setup_simple_scene()
        renderer = _small_renderer(batch_size=1)

        for current, _ in renderer.render_progressive(100):
            if current >= 2:
                break

        assert renderer.sample_count == 2

    def test_render_progressive_with_zero_samples(self):
        """Test the generator is empty for zero samples."""
        renderer = _small_renderer()
        assert list(renderer.render_progressive(0)) == []


class TestRendererImageOutput:
    """Test image access and export."""

    def test_get_image_numpy_returns_correct_shape(self):
        """Test the linear image is (height, width, 3) float32."""
        _setup_simple_scene()
        renderer = _small_renderer(image_width=20, image_height=10)
        renderer.render(2)

        image = renderer.get_image_numpy()
        assert image.shape == (10, 20, 3)
        assert image.dtype == np.float32
        assert np.all(np.isfinite(image))

    def test_get_image_uint8_values(self):
        """Test the 8-bit image has the same shape and dtype uint8."""
        _setup_simple_scene()
        renderer = _small_renderer()
        renderer.render(2)

        image = renderer.get_image_uint8()
        assert image.shape == (16, 16, 3)
        assert image.dtype == np.uint8
        # Sphere fills the centre; sky fills the corners
        assert image[8, 8].sum() < image[0, 0].sum()

    def test_save_ppm(self, tmp_path):
        """Test save_ppm writes a P3 header with the image size."""
        _setup_simple_scene()
        renderer = _small_renderer(image_width=12, image_height=8)
        renderer.render(1)

        path = tmp_path / "image.ppm"
        renderer.save_ppm(path)

        lines = path.read_text().splitlines()
        assert lines[:3] == ["P3", "12 8", "255"]
        assert len(lines) == 3 + 12 * 8

    def test_save_png(self, tmp_path):
        """Test save_png writes an RGB PNG of the image size."""
        _setup_simple_scene()
        renderer = _small_renderer(image_width=12, image_height=8)
        renderer.render(1)

        path = tmp_path / "image.png"
        renderer.save_png(path)

        img = PILImage.open(path)
        assert img.size == (12, 8)
        assert img.mode == "RGB"


class TestRendererRepr:
    """Test the string representation."""

    def test_repr_shows_state(self):
        """Test repr includes size, samples and depth."""
        _setup_simple_scene()
        renderer = _small_renderer(image_width=16, image_height=8, max_depth=5)
        renderer.render(2)

        assert repr(renderer) == "Renderer(width=16, height=8, samples=2, max_depth=5)"
