#!/usr/bin/env python3
"""Render a sphere scene.

This script renders one of the built-in sphere scenes (or a scene loaded
from JSON) with the thin-lens camera and writes the result as PPM or PNG.
Progress and timings are reported on stderr so that the image can be
written to a file next to the log.

Usage:
    python -m examples.render_spheres [options]

Options:
    --scene {random,three}  Built-in scene (default: random)
    --scene-file PATH       JSON scene with "materials", "spheres" and "camera"
    --width WIDTH           Image width in pixels (default: 1200)
    --samples SAMPLES       Samples per pixel (default: 512)
    --max-depth DEPTH       Maximum bounces per path (default: 50)
    --batch-size SIZE       Samples per progress update (default: 16)
    --seed SEED             Seed for the random scene layout
    --output OUTPUT         Output file, .ppm or .png (default: image.ppm)
    --quiet                 Suppress progress output

The image height follows from the width and the camera's aspect ratio.

Example:
    python -m examples.render_spheres --width 400 --samples 32 --output spheres.png
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path

import taichi as ti

DEFAULT_WIDTH = 1200
DEFAULT_SAMPLES = 512
DEFAULT_MAX_DEPTH = 50
DEFAULT_BATCH_SIZE = 16


class ProgressLog:
    """Prints messages to stderr prefixed with the elapsed time."""

    def __init__(self, quiet: bool = False) -> None:
        self.quiet = quiet
        self.start_time = time.time()

    def elapsed(self) -> float:
        return time.time() - self.start_time

    def log(self, message: str) -> None:
        if not self.quiet:
            print(f"[{self.elapsed():8.2f}s] {message}", file=sys.stderr)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=("random", "three"),
        default="random",
        help="Built-in scene to render (default: random)",
    )
    parser.add_argument(
        "--scene-file",
        type=str,
        default=None,
        help="JSON scene file; overrides --scene",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=DEFAULT_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES,
        help=f"Number of samples per pixel (default: {DEFAULT_SAMPLES})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum bounces per path (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Samples per progress update (default: {DEFAULT_BATCH_SIZE})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random scene layout (default: fresh entropy)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="image.ppm",
        help="Output file path, .ppm or .png (default: image.ppm)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def load_scene(args: argparse.Namespace):
    """Build the requested scene and return (scene_manager, camera)."""
    from src.lenstracer.camera.thin_lens import ThinLensCamera
    from src.lenstracer.scene.manager import SceneManager
    from src.lenstracer.scene.presets import (
        create_random_spheres_scene,
        create_three_spheres_scene,
    )

    if args.scene_file is not None:
        data = json.loads(Path(args.scene_file).read_text())
        scene = SceneManager()
        scene.from_dict(data)
        camera = ThinLensCamera.from_dict(data.get("camera", {}))
        return scene, camera

    if args.scene == "three":
        return create_three_spheres_scene()
    return create_random_spheres_scene(seed=args.seed)


def render_spheres(args: argparse.Namespace) -> Path:
    """Render the scene described by args and save it.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.lenstracer.camera.thin_lens import setup_camera
    from src.lenstracer.core.config import RenderConfig
    from src.lenstracer.core.renderer import Renderer
    from src.lenstracer.preview.export import save_image

    progress = ProgressLog(quiet=args.quiet)

    output_file = Path(args.output)
    if output_file.suffix.lower() not in (".ppm", ".png"):
        raise ValueError(f"Unsupported output format '{output_file.suffix}' (expected .ppm or .png)")

    progress.log("Setting up world")
    scene, camera = load_scene(args)
    setup_camera(camera)
    progress.log(f"Scene has {scene.get_sphere_count()} spheres, {scene.get_material_count()} materials")

    config = RenderConfig.from_aspect_ratio(
        args.width,
        camera.aspect_ratio,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        batch_size=args.batch_size,
    )
    renderer = Renderer(config)

    progress.log(
        f"Rendering {config.image_width}x{config.image_height}, "
        f"{config.samples_per_pixel} samples per pixel"
    )
    render_start = time.time()

    def progress_callback(current: int, target: int) -> None:
        elapsed = time.time() - render_start
        progress_pct = (current / target) * 100 if target > 0 else 0
        samples_per_sec = current / elapsed if elapsed > 0 else 0
        progress.log(
            f"Progress: {current}/{target} samples ({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s"
        )

    renderer.render(callback=progress_callback)

    progress.log(f"Writing {output_file}")
    save_image(renderer.get_image_numpy(), output_file)

    progress.log(f"Done in {progress.elapsed():.2f}s")
    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
    except Exception:
        ti.init(arch=ti.cpu)

    try:
        render_spheres(args)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
