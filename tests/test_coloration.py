"""Tests for solid colours, textures and the texel atlas."""

import numpy as np
import pytest
import taichi as ti

WRAP_VALUES = [-1.3, -0.25, 0.0, 0.3, 0.999, 1.0, 2.5, 7.3]


class TestWrap:
    def test_known_values(self):
        from glimmer.materials.coloration import wrap

        assert wrap(-0.25, 4) == 3
        assert wrap(0.3, 10) == 3
        assert wrap(1.0, 4) == 0
        assert wrap(2.5, 4) == 2

    def test_negative_values_truncate_before_wrapping(self):
        from glimmer.materials.coloration import wrap

        # -0.1 * 4 truncates to 0, not floor -1
        assert wrap(-0.1, 4) == 0
        # -1.75 * 4 = -7, remainder -3, plus 4
        assert wrap(-1.75, 4) == 1
        assert wrap(-1.0, 4) == 0

    @pytest.mark.parametrize("bound", [1, 4, 7, 64])
    def test_range_and_floor_on_unit_interval(self, bound):
        from glimmer.materials.coloration import wrap

        for value in np.linspace(-3.0, 3.0, 97):
            assert 0 <= wrap(float(value), bound) < bound
        for value in np.linspace(0.0, 0.99, 34):
            assert wrap(float(value), bound) == int(np.floor(value * bound))

    def test_kernel_matches_python(self):
        from glimmer.materials.coloration import wrap, wrap_coord

        values = ti.field(dtype=ti.f32, shape=len(WRAP_VALUES))
        results = ti.field(dtype=ti.i32, shape=(len(WRAP_VALUES), 2))
        values.from_numpy(np.array(WRAP_VALUES, dtype=np.float32))
        n = len(WRAP_VALUES)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                results[i, 0] = wrap_coord(values[i], 4)
                results[i, 1] = wrap_coord(values[i], 7)

        test_kernel()
        out = results.to_numpy()
        for i, value in enumerate(WRAP_VALUES):
            assert out[i, 0] == wrap(value, 4)
            assert out[i, 1] == wrap(value, 7)


class TestTextureValidation:
    def test_accepts_rgb_and_rgba(self):
        from glimmer.materials.coloration import Texture

        rgb = Texture(np.zeros((2, 3, 3), dtype=np.uint8))
        rgba = Texture(np.zeros((2, 3, 4), dtype=np.uint8))
        assert (rgb.width, rgb.height) == (3, 2)
        assert (rgba.width, rgba.height) == (3, 2)

    def test_rejects_non_uint8(self):
        from glimmer.materials.coloration import Texture

        with pytest.raises(ValueError, match="uint8"):
            Texture(np.zeros((2, 2, 4), dtype=np.float32))

    def test_rejects_bad_shape(self):
        from glimmer.materials.coloration import Texture

        with pytest.raises(ValueError, match="shape"):
            Texture(np.zeros((2, 2), dtype=np.uint8))

    def test_rejects_empty(self):
        from glimmer.materials.coloration import Texture

        with pytest.raises(ValueError, match="at least one texel"):
            Texture(np.zeros((0, 2, 4), dtype=np.uint8))

    def test_rejects_zero_scale(self):
        from glimmer.materials.coloration import Texture

        with pytest.raises(ValueError, match="scale"):
            Texture(np.zeros((2, 2, 4), dtype=np.uint8), scale=0.0)

    def test_python_lookup_tiles(self):
        from glimmer.core.color import Color
        from glimmer.materials.coloration import Texture

        texels = np.zeros((1, 2, 4), dtype=np.uint8)
        texels[0, 1] = (255, 255, 255, 255)
        texture = Texture(texels)
        assert texture.color_at(0.75, 0.0) == Color.from_rgba8((255, 255, 255))
        # Negative coordinates wrap back into range
        assert texture.color_at(-0.5, 0.0) == texture.color_at(0.75, 0.0)
        assert texture.color_at(0.25, 0.0) == Color.black()


class TestColorationFields:
    """Kernel-side lookups through the item slots."""

    def _lookup(self, slot, uvs):
        from glimmer.materials.coloration import coloration_at

        uv_field = ti.Vector.field(2, dtype=ti.f32, shape=len(uvs))
        colors = ti.Vector.field(3, dtype=ti.f32, shape=len(uvs))
        uv_field.from_numpy(np.array(uvs, dtype=np.float32))
        n = len(uvs)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                colors[i] = coloration_at(slot, uv_field[i])

        test_kernel()
        return colors.to_numpy()

    def test_solid_color(self):
        from glimmer.core.color import Color
        from glimmer.materials.coloration import SolidColor, set_coloration

        set_coloration(0, SolidColor(Color(0.2, 0.5, 0.9)))
        colors = self._lookup(0, [(0.0, 0.0), (12.5, -3.0)])
        assert np.allclose(colors, [[0.2, 0.5, 0.9]] * 2)

    def test_texture_lookup_matches_python(self):
        from glimmer.materials.coloration import Texture, set_coloration

        rng = np.random.default_rng(3)
        texels = rng.integers(0, 256, size=(3, 5, 4), dtype=np.uint8)
        texture = Texture(texels, offset_x=0.1, offset_y=-0.2, scale=0.5)
        set_coloration(2, texture)

        uvs = [(0.05, 0.3), (0.61, 0.93), (-0.37, 1.71), (2.13, -0.58)]
        colors = self._lookup(2, uvs)
        for (u, v), color in zip(uvs, colors):
            expected = texture.color_at(u, v).to_tuple()
            assert np.allclose(color, expected, rtol=1e-4, atol=1e-6)

    def test_shared_texels_uploaded_once(self):
        from glimmer.materials.coloration import Texture, num_atlas_texels, set_coloration

        texels = np.full((4, 4, 4), 200, dtype=np.uint8)
        near = Texture(texels, scale=0.1)
        far = Texture(texels, scale=5.0)
        uploaded: dict[int, int] = {}
        set_coloration(0, near, uploaded)
        set_coloration(1, far, uploaded)
        assert num_atlas_texels[None] == 16

    def test_atlas_capacity(self):
        from glimmer.core.config import MAX_TEXELS
        from glimmer.materials.coloration import Texture, upload_texture

        side = int(np.sqrt(MAX_TEXELS)) + 1
        texture = Texture(np.zeros((side, side, 3), dtype=np.uint8))
        with pytest.raises(RuntimeError, match="atlas full"):
            upload_texture(texture)

    def test_unknown_coloration_rejected(self):
        from glimmer.materials.coloration import set_coloration

        with pytest.raises(ValueError, match="Unsupported coloration"):
            set_coloration(0, "red")
