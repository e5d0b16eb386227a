"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before fields are declared
    from src.lenstracer.materials.dielectric import clear_dielectric_materials
    from src.lenstracer.materials.lambertian import clear_lambertian_materials
    from src.lenstracer.materials.metal import clear_metal_materials
    from src.lenstracer.scene.intersection import clear_scene
    from src.lenstracer.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()

        try:
            from src.lenstracer.core.integrator import clear_render_target

            clear_render_target()
        except (ImportError, RuntimeError):
            pass

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def pinhole_camera():
    """A camera at the origin looking down -z with no depth of field."""
    from src.lenstracer.camera.thin_lens import ThinLensCamera, setup_camera

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
    return camera
