"""Progressive renderer and the one-call ``render`` entry point.

``ProgressiveRenderer`` loads a scene, owns the render target and adds
samples in batches. Each sample is one parallel pass over every pixel and
is folded into a per-pixel running average, so the image can be inspected
between batches. Reading the buffers back is the only synchronisation
point: an image is complete once ``render`` returns.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.core.config import RenderSettings
    >>> from glimmer.core.progressive import render
    >>> from glimmer.scene.demo import create_demo_scene
    >>> result = render(create_demo_scene(192, 108), RenderSettings())
    >>> result.rgba8.shape
    (108, 192, 4)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from glimmer.core.color import encode_image
from glimmer.core.config import BackgroundPolicy, RenderSettings, ShadingModel
from glimmer.core.integrator import (
    clear_render_target,
    get_coverage_numpy,
    get_linear_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from glimmer.scene.manager import Scene, load_scene

logger = logging.getLogger(__name__)

# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class RenderResult:
    """A finished render.

    Attributes:
        linear: (height, width, 3) averaged linear radiance, unclamped.
        coverage: (height, width) fraction of samples whose primary ray hit.
        rgba8: (height, width, 4) clamped, gamma-encoded pixels. Alpha is
            the coverage, or opaque under the sky background.
        samples_per_pixel: Samples averaged into each pixel.
    """

    linear: npt.NDArray[np.float32]
    coverage: npt.NDArray[np.float32]
    rgba8: npt.NDArray[np.uint8]
    samples_per_pixel: int

    @property
    def width(self) -> int:
        return int(self.rgba8.shape[1])

    @property
    def height(self) -> int:
        return int(self.rgba8.shape[0])


class ProgressiveRenderer:
    """Accumulates samples of one scene over time.

    The renderer uploads the scene on construction and delegates to the
    global integrator buffers (Taichi fields), so only one renderer is
    active at a time.

    Attributes:
        scene: The scene being rendered.
        settings: Integrator settings.
        shading_model: Shading model inferred from the scene's materials.
    """

    def __init__(self, scene: Scene, settings: RenderSettings | None = None) -> None:
        """Load the scene and prepare an empty render target.

        Raises:
            ValueError: If the scene or its dimensions are invalid.
            RuntimeError: If the scene exceeds a registry capacity.
        """
        self.scene = scene
        self.settings = settings if settings is not None else RenderSettings()
        self.shading_model: ShadingModel = load_scene(scene)
        setup_render_target(scene.width, scene.height)

    @property
    def width(self) -> int:
        return self.scene.width

    @property
    def height(self) -> int:
        return self.scene.height

    @property
    def sample_count(self) -> int:
        """Samples accumulated per pixel so far."""
        return get_total_samples()

    def reset(self) -> None:
        """Discard the accumulated samples, keeping the loaded scene."""
        clear_render_target()

    def render(
        self,
        num_samples: int | None = None,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Add samples to the image.

        Args:
            num_samples: Samples to add. Defaults to
                ``settings.samples_per_pixel``.
            batch_size: Samples rendered between callbacks.
            callback: Called after each batch with
                ``(current_total_samples, target_total_samples)``.
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int | None = None,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Add samples, yielding progress after each batch.

        Yields:
            Tuple of (current_total_samples, target_total_samples).
        """
        if num_samples is None:
            num_samples = self.settings.samples_per_pixel
        if num_samples <= 0:
            return
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")

        target_samples = self.sample_count + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(self.scene.fov, self.shading_model, self.settings, batch)
            remaining -= batch
            logger.debug("Rendered %d/%d samples", self.sample_count, target_samples)
            yield (self.sample_count, target_samples)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """The averaged linear radiance, (height, width, 3), unclamped."""
        return get_linear_image_numpy()

    def get_coverage_numpy(self) -> npt.NDArray[np.float32]:
        return get_coverage_numpy()

    def get_image_rgba8(self) -> npt.NDArray[np.uint8]:
        """The image as clamped, gamma-encoded 8-bit RGBA, row 0 at the top."""
        coverage = None
        if self.settings.background == BackgroundPolicy.BLACK:
            coverage = self.get_coverage_numpy()
        return encode_image(self.get_image_numpy(), coverage)

    def result(self) -> RenderResult:
        """Snapshot the current image."""
        linear = self.get_image_numpy()
        coverage = self.get_coverage_numpy()
        alpha = coverage if self.settings.background == BackgroundPolicy.BLACK else None
        return RenderResult(
            linear=linear,
            coverage=coverage,
            rgba8=encode_image(linear, alpha),
            samples_per_pixel=self.sample_count,
        )

    def save_image(self, filepath: str) -> None:
        """Save the current image as an RGBA PNG."""
        from glimmer.preview.export import save_png

        save_png(self.get_image_rgba8(), filepath)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"model={self.shading_model.name}, samples={self.sample_count})"
        )


def render(scene: Scene, settings: RenderSettings | None = None) -> RenderResult:
    """Render a scene to completion.

    Validates the scene (``width > height`` among other checks), runs
    ``settings.samples_per_pixel`` parallel passes and returns the image.

    Raises:
        ValueError: If the scene or settings are invalid.
        RuntimeError: If the scene exceeds a registry capacity.
    """
    renderer = ProgressiveRenderer(scene, settings)
    logger.info(
        "Rendering %dx%d, %d spp, %s shading",
        scene.width,
        scene.height,
        renderer.settings.samples_per_pixel,
        renderer.shading_model.name,
    )
    start = time.perf_counter()
    renderer.render()
    result = renderer.result()
    logger.info("Render finished in %.2fs", time.perf_counter() - start)
    return result
