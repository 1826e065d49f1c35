"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside
- Ray missing sphere, or pointing away from it
- Ray starting inside sphere
- Surface normals and spherical texture coordinates
"""

import math

import pytest
import taichi as ti


def _intersect(center, radius, origin, direction):
    from glimmer.geometry.sphere import intersect_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    distance = ti.field(dtype=ti.f32, shape=())

    cx, cy, cz = center
    ox, oy, oz = origin
    dx, dy, dz = direction

    @ti.kernel
    def test_kernel():
        h, d = intersect_sphere(
            vec3(cx, cy, cz), radius, vec3(ox, oy, oz), vec3(dx, dy, dz).normalized()
        )
        hit[None] = h
        distance[None] = d

    test_kernel()
    return hit[None], distance[None]


class TestSphereBasics:
    """Tests for the Sphere dataclass."""

    def test_center_is_coerced_to_point(self, red_material):
        from glimmer.core.vector import Point
        from glimmer.geometry.sphere import Sphere

        sphere = Sphere(center=(1, 2, 3), radius=0.5, material=red_material)
        assert sphere.center == Point(1.0, 2.0, 3.0)
        assert sphere.get_material() is red_material

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_radius_must_be_positive(self, red_material, radius):
        from glimmer.geometry.sphere import Sphere

        with pytest.raises(ValueError, match="radius"):
            Sphere(center=(0, 0, 0), radius=radius, material=red_material)


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit_distance(self):
        hit, distance = _intersect((0.0, 0.0, -5.0), 1.0, (0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        # Distance from the origin to the centre minus the radius
        assert distance == pytest.approx(4.0, abs=1e-5)

    def test_miss_to_the_side(self):
        hit, _ = _intersect((0.0, 0.0, -5.0), 1.0, (0.0, 2.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0

    def test_ray_pointing_away_misses(self):
        hit, _ = _intersect((0.0, 0.0, -5.0), 1.0, (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 0

    def test_origin_inside_hits_far_side(self):
        hit, distance = _intersect((0.0, 0.0, 0.0), 2.0, (0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert hit == 1
        assert distance == pytest.approx(2.0, abs=1e-5)

    def test_oblique_hit_is_nearest_root(self):
        # Line y = 0.6 through a unit sphere at z = -5 enters at z = -5 + 0.8
        hit, distance = _intersect((0.0, 0.0, -5.0), 1.0, (0.0, 0.6, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert distance == pytest.approx(4.2, abs=1e-4)


class TestSphereSurface:
    """Tests for normals and texture coordinates."""

    def test_normal_is_unit_and_outward(self):
        from glimmer.geometry.sphere import sphere_normal, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = sphere_normal(vec3(1.0, 1.0, 1.0), vec3(1.0, 1.0, 3.0))

        test_kernel()
        assert tuple(result.to_numpy()) == pytest.approx((0.0, 0.0, 1.0))

    @pytest.mark.parametrize(
        "offset,expected",
        [
            ((0.0, 1.0, 0.0), (None, 0.0)),
            ((0.0, -1.0, 0.0), (None, 1.0)),
            ((1.0, 0.0, 0.0), (0.5, 0.5)),
            ((0.0, 0.0, 1.0), (0.75, 0.5)),
            ((0.0, 0.0, -1.0), (0.25, 0.5)),
        ],
    )
    def test_texture_coords(self, offset, expected):
        from glimmer.geometry.sphere import sphere_texture_coords, vec3

        result = ti.Vector.field(2, dtype=ti.f32, shape=())
        radius = 2.0
        x, y, z = offset

        @ti.kernel
        def test_kernel():
            center = vec3(0.0, 0.0, -5.0)
            point = center + vec3(x, y, z) * radius
            result[None] = sphere_texture_coords(center, radius, point)

        test_kernel()
        u, v = result.to_numpy()
        assert 0.0 <= u <= 1.0
        assert v == pytest.approx(expected[1], abs=1e-5)
        if expected[0] is not None:
            assert u == pytest.approx(expected[0], abs=1e-5)

    def test_texture_coords_in_unit_square(self):
        from glimmer.geometry.sphere import sphere_texture_coords, vec3

        n = 64
        results = ti.Vector.field(2, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                angle = ti.cast(i, ti.f32) * (2.0 * math.pi / n)
                point = vec3(ti.cos(angle), ti.sin(angle) * 0.6, ti.sin(angle) * 0.8)
                results[i] = sphere_texture_coords(vec3(0.0, 0.0, 0.0), 1.0, point)

        test_kernel()
        uv = results.to_numpy()
        assert (uv >= 0.0).all()
        assert (uv <= 1.0).all()
