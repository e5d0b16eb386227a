"""Tests for the render_spheres command-line script.

Taichi is already initialized by conftest.py, so these tests call
render_spheres() directly instead of main().
"""

import json

import pytest
from PIL import Image as PILImage

from examples.render_spheres import parse_args, render_spheres


class TestParseArgs:
    """Test argument parsing."""

    def test_defaults(self):
        """Test the defaults render the random scene."""
        args = parse_args([])

        assert args.scene == "random"
        assert args.scene_file is None
        assert args.width == 1200
        assert args.samples == 512
        assert args.max_depth == 50
        assert args.output == "image.ppm"

    def test_options(self):
        """Test options are parsed into their fields."""
        args = parse_args(["--scene", "three", "--width", "64", "--samples", "2", "--seed", "5", "--quiet"])

        assert args.scene == "three"
        assert args.width == 64
        assert args.samples == 2
        assert args.seed == 5
        assert args.quiet is True


class TestRenderSpheres:
    """Test end-to-end rendering to a file."""

    def test_three_spheres_png(self, tmp_path):
        """Test the three spheres scene renders to a PNG of the derived size."""
        output = tmp_path / "three.png"
        args = parse_args(
            ["--scene", "three", "--width", "32", "--samples", "2", "--max-depth", "4", "--output", str(output), "--quiet"]
        )

        assert render_spheres(args) == output
        img = PILImage.open(output)
        # 32 / (16 / 9) = 18
        assert img.size == (32, 18)

    def test_random_scene_ppm(self, tmp_path):
        """Test the random scene renders to a PPM with a 3:2 size."""
        output = tmp_path / "random.ppm"
        args = parse_args(
            ["--width", "30", "--samples", "1", "--max-depth", "3", "--seed", "2", "--output", str(output), "--quiet"]
        )

        render_spheres(args)
        lines = output.read_text().splitlines()
        assert lines[:3] == ["P3", "30 20", "255"]

    def test_scene_file(self, tmp_path):
        """Test a JSON scene file with a camera section."""
        scene_file = tmp_path / "scene.json"
        scene_file.write_text(
            json.dumps(
                {
                    "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
                    "spheres": [{"center": [0, 0, -1], "radius": 0.5, "material_id": 0}],
                    "camera": {"aspect_ratio": 2.0, "aperture": 0.0},
                }
            )
        )
        output = tmp_path / "file.ppm"
        args = parse_args(
            ["--scene-file", str(scene_file), "--width", "16", "--samples", "1", "--output", str(output), "--quiet"]
        )

        render_spheres(args)
        assert output.read_text().splitlines()[1] == "16 8"

    def test_unsupported_output_raises(self, tmp_path):
        """Test an unknown output suffix is rejected before rendering."""
        args = parse_args(["--output", str(tmp_path / "image.jpg"), "--quiet"])

        with pytest.raises(ValueError, match="Unsupported output format"):
            render_spheres(args)
