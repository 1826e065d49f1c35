"""Tests for nearest-hit and any-hit traversal over the item registry."""

import pytest
import taichi as ti


def _trace(origin, direction):
    from glimmer.scene.intersection import trace, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t = ti.field(dtype=ti.f32, shape=())
    item = ti.field(dtype=ti.i32, shape=())
    ox, oy, oz = origin
    dx, dy, dz = direction

    @ti.kernel
    def test_kernel():
        record = trace(vec3(ox, oy, oz), vec3(dx, dy, dz).normalized())
        hit[None] = record.hit
        t[None] = record.t
        item[None] = record.item

    test_kernel()
    return hit[None], t[None], item[None]


def _occluded(origin, direction, max_distance):
    from glimmer.scene.intersection import occluded, vec3

    result = ti.field(dtype=ti.i32, shape=())
    ox, oy, oz = origin
    dx, dy, dz = direction

    @ti.kernel
    def test_kernel():
        result[None] = occluded(vec3(ox, oy, oz), vec3(dx, dy, dz).normalized(), max_distance)

    test_kernel()
    return result[None]


class TestRegistry:
    def test_add_items_returns_slots(self):
        from glimmer.scene.intersection import add_plane, add_sphere, get_item_count

        assert add_sphere((0.0, 0.0, -5.0), 1.0) == 0
        assert add_plane((0.0, -1.0, 0.0), (0.0, -1.0, 0.0)) == 1
        assert get_item_count() == 2

    def test_capacity(self):
        from glimmer.core.config import MAX_ITEMS
        from glimmer.scene.intersection import add_sphere, clear_items, get_item_count

        for i in range(MAX_ITEMS):
            add_sphere((float(i), 0.0, -5.0), 0.5)
        with pytest.raises(RuntimeError, match="Maximum number of scene items"):
            add_sphere((0.0, 0.0, 0.0), 1.0)
        clear_items()
        assert get_item_count() == 0


class TestTrace:
    def test_empty_scene_misses(self):
        hit, _, item = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0
        assert item == -1

    def test_nearest_item_wins_regardless_of_order(self):
        from glimmer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -10.0), 1.0)
        add_sphere((0.0, 0.0, -5.0), 1.0)
        hit, t, item = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert item == 1
        assert t == pytest.approx(4.0, abs=1e-5)

    def test_equidistant_items_first_wins(self):
        from glimmer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0)
        add_sphere((0.0, 0.0, -5.0), 1.0)
        hit, _, item = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert item == 0

    def test_plane_behind_sphere(self):
        from glimmer.scene.intersection import add_plane, add_sphere

        add_plane((0.0, 0.0, -20.0), (0.0, 0.0, -1.0))
        add_sphere((0.0, 0.0, -5.0), 1.0)
        _, _, item = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert item == 1
        _, t, item = _trace((0.0, 3.0, 0.0), (0.0, 0.0, -1.0))
        assert item == 0
        assert t == pytest.approx(20.0, abs=1e-4)


class TestOccluded:
    def test_blocker_closer_than_light(self):
        from glimmer.scene.intersection import add_sphere

        add_sphere((0.0, 5.0, 0.0), 1.0)
        assert _occluded((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 100.0) == 1

    def test_blocker_beyond_light(self):
        from glimmer.scene.intersection import add_sphere

        add_sphere((0.0, 5.0, 0.0), 1.0)
        assert _occluded((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 3.0) == 0

    def test_nothing_in_the_way(self):
        from glimmer.scene.intersection import add_sphere

        add_sphere((0.0, 5.0, 0.0), 1.0)
        assert _occluded((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), 100.0) == 0


class TestSurfaceQueries:
    def test_normal_and_uv_dispatch(self):
        from glimmer.scene.intersection import (
            add_plane,
            add_sphere,
            surface_normal,
            texture_coords,
            vec3,
        )

        add_sphere((0.0, 0.0, -5.0), 1.0)
        add_plane((0.0, -2.0, 0.0), (0.0, -1.0, 0.0))
        normals = ti.Vector.field(3, dtype=ti.f32, shape=2)
        uvs = ti.Vector.field(2, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            normals[0] = surface_normal(0, vec3(0.0, 0.0, -4.0))
            uvs[0] = texture_coords(0, vec3(0.0, 0.0, -4.0))
            normals[1] = surface_normal(1, vec3(1.0, -2.0, -3.0))
            uvs[1] = texture_coords(1, vec3(1.0, -2.0, -3.0))

        test_kernel()
        n = normals.to_numpy()
        uv = uvs.to_numpy()
        assert tuple(n[0]) == pytest.approx((0.0, 0.0, 1.0))
        assert tuple(uv[0]) == pytest.approx((0.75, 0.5), abs=1e-5)
        assert tuple(n[1]) == pytest.approx((0.0, 1.0, 0.0))
        # Floor axes are (-1, 0, 0) and (0, 0, -1)
        assert tuple(uv[1]) == pytest.approx((-1.0, 3.0), abs=1e-5)
