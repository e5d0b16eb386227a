"""Ready-made scenes.

This module provides factory functions for the two standard sphere scenes:

- Random spheres: a large gray ground sphere, a 22x22 grid of small spheres
  with randomly chosen materials, and three large feature spheres (glass,
  diffuse and polished metal), viewed through a lens with shallow depth of
  field. This is the default scene of the renderer.
- Three spheres: a small test scene with a diffuse ball between a hollow
  glass ball and a fuzzy metal ball, resting on a very large sphere.

Each factory clears the global scene, builds it through a SceneManager and
returns the manager together with a matching camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.lenstracer.scene.presets import create_random_spheres_scene
    >>> from src.lenstracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=42)
    >>> setup_camera(camera)
    >>> # Now render using the scene and camera
"""

import math

import numpy as np

from src.lenstracer.camera.thin_lens import ThinLensCamera
from src.lenstracer.scene.manager import SceneManager

# =============================================================================
# Random Spheres Parameters
# =============================================================================

RANDOM_SCENE_ASPECT_RATIO = 3.0 / 2.0

# Grid of small spheres spans a, b in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_SPHERE_RADIUS = 0.2

# Small spheres closer than this to KEEP_CLEAR_POINT are skipped
KEEP_CLEAR_POINT = (4.0, 0.2, 0.0)
KEEP_CLEAR_DISTANCE = 0.9

# Material choice thresholds on a uniform byte (0..255)
DIFFUSE_THRESHOLD = 206
METAL_THRESHOLD = 244

GLASS_INDEX = 1.5


def create_random_spheres_scene(
    seed: int | None = None,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random spheres scene.

    Scene contents:
        - Ground: sphere at (0, -1000, 0), radius 1000, gray diffuse (0.5)
        - Grid: for a, b in [-11, 11), a sphere of radius 0.2 at
          (a + 0.9 * u1, 0.2, b + 0.9 * u2), skipped when within 0.9 of
          (4, 0.2, 0). Its material is diffuse with probability 206/256
          (albedo = random * random), metal with probability 38/256
          (albedo in [0.5, 1), fuzz in [0, 0.5)) and glass (1.5) otherwise.
        - Glass sphere at (0, 1, 0), radius 1
        - Diffuse sphere at (-4, 1, 0), radius 1, albedo (0.4, 0.2, 0.1)
        - Metal sphere at (4, 1, 0), radius 1, albedo (0.7, 0.6, 0.5), no fuzz

    The camera looks from (13, 2, 3) at the origin with a 20 degree vertical
    field of view, a 3:2 aspect ratio, aperture 0.1 and focus distance 10.

    Args:
        seed: Seed for the layout generator. None draws fresh entropy, so
            every call produces a different arrangement.

    Returns:
        Tuple of (scene_manager, camera).
    """
    rng = np.random.default_rng(seed)

    scene = SceneManager()

    scene.add_lambertian_sphere((0.0, -1000.0, 0.0), 1000.0, (0.5, 0.5, 0.5))

    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            choose_mat = int(rng.integers(0, 256))
            center = (
                a + 0.9 * float(rng.random()),
                SMALL_SPHERE_RADIUS,
                b + 0.9 * float(rng.random()),
            )

            if math.dist(center, KEEP_CLEAR_POINT) <= KEEP_CLEAR_DISTANCE:
                continue

            if choose_mat < DIFFUSE_THRESHOLD:
                albedo = tuple(float(x) for x in rng.random(3) * rng.random(3))
                scene.add_lambertian_sphere(center, SMALL_SPHERE_RADIUS, albedo)
            elif choose_mat < METAL_THRESHOLD:
                albedo = tuple(float(x) for x in rng.uniform(0.5, 1.0, size=3))
                fuzz = float(rng.random()) / 2.0
                scene.add_metal_sphere(center, SMALL_SPHERE_RADIUS, albedo, fuzz)
            else:
                scene.add_dielectric_sphere(center, SMALL_SPHERE_RADIUS, GLASS_INDEX)

    scene.add_dielectric_sphere((0.0, 1.0, 0.0), 1.0, GLASS_INDEX)
    scene.add_lambertian_sphere((-4.0, 1.0, 0.0), 1.0, (0.4, 0.2, 0.1))
    scene.add_metal_sphere((4.0, 1.0, 0.0), 1.0, (0.7, 0.6, 0.5), 0.0)

    camera = ThinLensCamera(
        look_from=(13.0, 2.0, 3.0),
        look_at=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=RANDOM_SCENE_ASPECT_RATIO,
        aperture=0.1,
        focus_distance=10.0,
    )

    return scene, camera


def create_three_spheres_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the three spheres test scene.

    Scene contents:
        - Ground: sphere at (0, -100.5, -1), radius 100, diffuse (0.8, 0.8, 0.0)
        - Center: sphere at (0, 0, -1), radius 0.5, diffuse (0.1, 0.2, 0.5)
        - Left: hollow glass ball at (-1, 0, -1), an outer sphere of radius
          0.5 and an inner sphere of radius -0.45 sharing one material
        - Right: sphere at (1, 0, -1), radius 0.5, metal (0.8, 0.6, 0.2)
          with fuzz 0.3

    The camera sits at the origin looking down -z with a 90 degree vertical
    field of view and a pinhole lens.

    Args:
        aspect_ratio: Aspect ratio for the returned camera.

    Returns:
        Tuple of (scene_manager, camera).
    """
    scene = SceneManager()

    scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, (0.8, 0.8, 0.0))
    scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.1, 0.2, 0.5))

    # Negative radius flips the normals, making the inner surface of the shell
    glass_id = scene.add_dielectric_material(GLASS_INDEX)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass_id)
    scene.add_sphere((-1.0, 0.0, -1.0), -0.45, glass_id)

    scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), 0.3)

    camera = ThinLensCamera(
        look_from=(0.0, 0.0, 0.0),
        look_at=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_distance=1.0,
    )

    return scene, camera

