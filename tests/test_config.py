"""Tests for RenderSettings validation."""

import pytest

from glimmer.core.config import (
    DEFAULT_RECURSION_LIMIT,
    DEFAULT_SHADOW_BIAS,
    MAX_RECURSION_LIMIT,
    BackgroundPolicy,
    RenderSettings,
)


class TestRenderSettings:
    def test_defaults(self):
        settings = RenderSettings()
        assert settings.recursion_limit == DEFAULT_RECURSION_LIMIT
        assert settings.samples_per_pixel == 1
        assert settings.shadow_bias == DEFAULT_SHADOW_BIAS
        assert settings.background == BackgroundPolicy.BLACK
        assert settings.jitter is False

    @pytest.mark.parametrize("limit", [0, -1, MAX_RECURSION_LIMIT + 1])
    def test_recursion_limit_out_of_range(self, limit):
        with pytest.raises(ValueError, match="recursion_limit"):
            RenderSettings(recursion_limit=limit)

    def test_recursion_limit_bounds_accepted(self):
        assert RenderSettings(recursion_limit=1).recursion_limit == 1
        assert RenderSettings(recursion_limit=MAX_RECURSION_LIMIT).recursion_limit == 32

    def test_samples_per_pixel_must_be_positive(self):
        with pytest.raises(ValueError, match="samples_per_pixel"):
            RenderSettings(samples_per_pixel=0)

    def test_negative_bias_rejected(self):
        with pytest.raises(ValueError, match="shadow_bias"):
            RenderSettings(shadow_bias=-1e-3)

    @pytest.mark.parametrize("seed", [-1, 2**31])
    def test_seed_out_of_range(self, seed):
        with pytest.raises(ValueError, match="seed"):
            RenderSettings(seed=seed)

    def test_background_accepts_int(self):
        settings = RenderSettings(background=1)
        assert settings.background is BackgroundPolicy.SKY

    def test_settings_are_immutable(self):
        settings = RenderSettings()
        with pytest.raises(AttributeError):
            settings.seed = 3
