"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Negative radius (inward-facing shell)
- Interval bounds and root selection
"""

import math

import taichi as ti


def _hit(origin, direction, center, radius, t_min=0.0, t_max=math.inf):
    """Run hit_sphere once and return the record as a Python dict."""
    from src.lenstracer.geometry.sphere import Sphere, hit_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f32, lo: ti.f32, hi: ti.f32):
        record = hit_sphere(o, d, Sphere(center=c, radius=r), lo, hi)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": tuple(point[None].to_numpy().tolist()),
        "normal": tuple(normal[None].to_numpy().tolist()),
        "front_face": front_face[None],
    }


def _close(a, b, tol=1e-5):
    return all(abs(x - y) < tol for x, y in zip(a, b))


class TestSphereBasics:
    """Tests for Sphere dataclass and basic operations."""

    def test_make_sphere(self):
        """Test make_sphere convenience function."""
        from src.lenstracer.geometry.sphere import make_sphere, vec3

        center_result = ti.field(dtype=ti.math.vec3, shape=())
        radius_result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius

        test_kernel()
        assert _close(center_result[None].to_numpy().tolist(), (1.0, 2.0, 3.0), 1e-6)
        assert abs(radius_result[None] - 0.5) < 1e-6

    def test_set_face_normal(self):
        """Test the normal is flipped to oppose the ray."""
        from src.lenstracer.geometry.sphere import set_face_normal, vec3

        faces = ti.field(dtype=ti.i32, shape=2)
        normals = ti.field(dtype=ti.math.vec3, shape=2)

        @ti.kernel
        def test_kernel():
            outward = vec3(0.0, 0.0, 1.0)
            front, n_front = set_face_normal(vec3(0.0, 0.0, -1.0), outward)
            back, n_back = set_face_normal(vec3(0.0, 0.0, 1.0), outward)
            faces[0] = front
            normals[0] = n_front
            faces[1] = back
            normals[1] = n_back

        test_kernel()
        assert faces[0] == 1
        assert _close(normals[0].to_numpy().tolist(), (0.0, 0.0, 1.0))
        assert faces[1] == 0
        assert _close(normals[1].to_numpy().tolist(), (0.0, 0.0, -1.0))


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_hit_from_outside(self):
        """Test a ray from (0,0,3) along -z hits at t = 3 - r with outward normal +z."""
        for radius in (0.5, 1.0, 2.0):
            record = _hit((0.0, 0.0, 3.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), radius)
            assert record["hit"] == 1
            assert abs(record["t"] - (3.0 - radius)) < 1e-5
            assert _close(record["point"], (0.0, 0.0, radius))
            assert _close(record["normal"], (0.0, 0.0, 1.0))
            assert record["front_face"] == 1

    def test_negative_radius_flips_orientation(self):
        """Test a negative radius reports the same hit with reversed face orientation."""
        record = _hit((0.0, 0.0, 3.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), -1.0)

        assert record["hit"] == 1
        assert abs(record["t"] - 2.0) < 1e-5
        assert _close(record["point"], (0.0, 0.0, 1.0))
        # Outward normal is (0,0,-1), which already points along the ray
        assert record["front_face"] == 0
        # Stored normal still opposes the ray
        assert _close(record["normal"], (0.0, 0.0, 1.0))

    def test_miss(self):
        """Test a ray passing beside the sphere."""
        record = _hit((0.0, 2.0, 3.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert record["hit"] == 0

    def test_hit_from_inside(self):
        """Test a ray starting inside hits the far side as a back face."""
        record = _hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0, 0.001)

        assert record["hit"] == 1
        assert abs(record["t"] - 1.0) < 1e-5
        assert record["front_face"] == 0
        assert _close(record["normal"], (0.0, 0.0, -1.0))

    def test_sphere_behind_ray(self):
        """Test no hit when both roots are negative."""
        record = _hit((0.0, 0.0, 3.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0, 0.001)
        assert record["hit"] == 0

    def test_t_max_excludes_far_hits(self):
        """Test both roots beyond t_max are rejected."""
        record = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, 0.001, 3.0)
        assert record["hit"] == 0

    def test_t_min_selects_far_root(self):
        """Test the far root is used when the near root is below t_min."""
        record = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, 4.5, 100.0)

        assert record["hit"] == 1
        assert abs(record["t"] - 6.0) < 1e-5
        assert record["front_face"] == 0

    def test_unnormalized_direction(self):
        """Test t scales with the direction length."""
        record = _hit((0.0, 0.0, 3.0), (0.0, 0.0, -2.0), (0.0, 0.0, 0.0), 1.0)

        assert record["hit"] == 1
        assert abs(record["t"] - 1.0) < 1e-5
        assert _close(record["point"], (0.0, 0.0, 1.0))

    def test_oblique_normal_is_unit(self):
        """Test the normal at an off-axis hit has unit length and is radial."""
        record = _hit((0.5, 0.5, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, 0.001)

        assert record["hit"] == 1
        n = record["normal"]
        p = record["point"]
        assert abs(math.sqrt(sum(c * c for c in n)) - 1.0) < 1e-5
        assert _close(n, p)

    def test_large_ground_sphere(self):
        """Test the radius-1000 ground sphere is hit from just above."""
        record = _hit((0.0, 1.0, 0.0), (0.0, -1.0, 0.0), (0.0, -1000.0, 0.0), 1000.0, 0.001)

        assert record["hit"] == 1
        assert abs(record["t"] - 1.0) < 1e-3
        assert _close(record["normal"], (0.0, 1.0, 0.0), 1e-4)
