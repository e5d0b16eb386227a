"""Unit tests for the metal material.

Tests cover:
- Perfect mirror reflection (fuzz = 0)
- Fuzzy reflection bounded by the fuzz radius
- Absorption of directions pointing into the surface
- Fuzz clamping and the material registry
"""

import math

import numpy as np
import taichi as ti


class TestMetalScatter:
    """Tests for scatter_metal."""

    def test_perfect_reflection_45_degrees(self):
        """Test fuzz 0 mirrors the unit incident direction."""
        from src.lenstracer.materials.metal import scatter_metal, vec3

        direction = ti.field(dtype=ti.math.vec3, shape=())
        attenuation = ti.field(dtype=ti.math.vec3, shape=())
        did_scatter = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            d, a, s = scatter_metal(
                vec3(0.9, 0.8, 0.7), 0.0, vec3(2.0, -2.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            direction[None] = d
            attenuation[None] = a
            did_scatter[None] = s

        test_kernel()
        inv_sqrt2 = 1.0 / math.sqrt(2.0)
        assert np.allclose(direction[None].to_numpy(), [inv_sqrt2, inv_sqrt2, 0.0], atol=1e-5)
        assert np.allclose(attenuation[None].to_numpy(), [0.9, 0.8, 0.7], atol=1e-6)
        assert did_scatter[None] == 1

    def test_fuzzy_reflection_bounded_by_fuzz(self):
        """Test fuzzed directions stay within fuzz of the mirror direction."""
        from src.lenstracer.materials.metal import scatter_metal, vec3

        n_samples = 2000
        fuzz = 0.3
        offsets = ti.field(dtype=ti.f32, shape=n_samples)

        @ti.kernel
        def test_kernel():
            for i in range(n_samples):
                d, _, _ = scatter_metal(
                    vec3(1.0, 1.0, 1.0), fuzz, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
                )
                offsets[i] = (d - vec3(0.0, 1.0, 0.0)).norm()

        test_kernel()
        values = offsets.to_numpy()
        assert np.all(values < fuzz + 1e-5)
        assert np.max(values) > 0.1

    def test_grazing_fuzzy_reflection_absorbs_some(self):
        """Test fuzz can push grazing reflections below the surface, which absorbs them."""
        from src.lenstracer.materials.metal import scatter_metal, vec3

        n_samples = 2000
        scattered = ti.field(dtype=ti.i32, shape=n_samples)
        dots = ti.field(dtype=ti.f32, shape=n_samples)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            for i in range(n_samples):
                d, _, s = scatter_metal(vec3(1.0, 1.0, 1.0), 1.0, vec3(1.0, -0.05, 0.0), normal)
                scattered[i] = s
                dots[i] = ti.math.dot(d, normal)

        test_kernel()
        flags = scattered.to_numpy()
        d = dots.to_numpy()
        assert 0 < flags.sum() < n_samples
        assert np.all((flags == 1) == (d > 0.0))

    def test_clamp_fuzz(self):
        """Test fuzz values are clamped into [0, 1]."""
        from src.lenstracer.materials.metal import clamp_fuzz

        assert clamp_fuzz(-0.5) == 0.0
        assert clamp_fuzz(0.25) == 0.25
        assert clamp_fuzz(3.0) == 1.0


class TestMetalRegistry:
    """Tests for the metal material registry."""

    def test_add_and_get_material(self):
        """Test stored albedo and fuzz are read back by index."""
        from src.lenstracer.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
            get_metal_material_count,
        )

        idx = add_metal_material((0.7, 0.6, 0.5), 0.2)
        assert get_metal_material_count() == 1

        albedo = ti.field(dtype=ti.math.vec3, shape=())
        fuzz = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            albedo[None] = get_metal_albedo(mat_idx)
            fuzz[None] = get_metal_fuzz(mat_idx)

        test_kernel(idx)
        assert np.allclose(albedo[None].to_numpy(), [0.7, 0.6, 0.5], atol=1e-6)
        assert abs(fuzz[None] - 0.2) < 1e-6

    def test_fuzz_clamped_on_add(self):
        """Test fuzz above 1 is stored as 1."""
        from src.lenstracer.materials.metal import add_metal_material, get_metal_fuzz

        idx = add_metal_material((0.5, 0.5, 0.5), 5.0)
        fuzz = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            fuzz[None] = get_metal_fuzz(mat_idx)

        test_kernel(idx)
        assert abs(fuzz[None] - 1.0) < 1e-6

    def test_scatter_by_id(self):
        """Test scatter_metal_by_id mirrors with the registered albedo."""
        from src.lenstracer.materials.metal import add_metal_material, scatter_metal_by_id, vec3

        idx = add_metal_material((0.2, 0.4, 0.6))
        direction = ti.field(dtype=ti.math.vec3, shape=())
        attenuation = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            d, a, _ = scatter_metal_by_id(mat_idx, vec3(0.0, 0.0, -3.0), vec3(0.0, 0.0, 1.0))
            direction[None] = d
            attenuation[None] = a

        test_kernel(idx)
        assert np.allclose(direction[None].to_numpy(), [0.0, 0.0, 1.0], atol=1e-6)
        assert np.allclose(attenuation[None].to_numpy(), [0.2, 0.4, 0.6], atol=1e-6)
