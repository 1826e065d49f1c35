"""Image file adapters built on Pillow.

The renderer itself only deals in arrays: textures come in as decoded
(height, width, 4) uint8 texels and images go out as (height, width, 4)
uint8 RGBA. This module converts between those arrays and image files.

Example:
    >>> from glimmer.preview.export import load_texture, save_png
    >>> checker = load_texture("checkerboard.png", scale=0.1)
    >>> save_png(result.rgba8, "render.png")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from glimmer.materials.coloration import Texture

logger = logging.getLogger(__name__)


def save_png(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit image as PNG.

    Args:
        image: (height, width, 4) RGBA or (height, width, 3) RGB uint8
            array, row 0 at the top.
        filepath: Output file path.

    Raises:
        ValueError: If the array is not an 8-bit RGB or RGBA image.
    """
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(
            f"Expected a (height, width, 3|4) uint8 image, got {image.shape} {image.dtype}"
        )
    # Mode is inferred from the channel count: RGBA or RGB
    pil_image = PILImage.fromarray(np.ascontiguousarray(image))
    pil_image.save(filepath)
    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], filepath)


def load_texels(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Decode an image file into (height, width, 4) RGBA texels."""
    with PILImage.open(filepath) as pil_image:
        texels = np.asarray(pil_image.convert("RGBA"), dtype=np.uint8)
    logger.debug("Loaded %dx%d texture from %s", texels.shape[1], texels.shape[0], filepath)
    return texels


def load_texture(
    filepath: str | Path,
    *,
    offset_x: float = 0.0,
    offset_y: float = 0.0,
    scale: float = 1.0,
) -> Texture:
    """Load an image file as a tiled texture.

    Args:
        filepath: Image file readable by Pillow.
        offset_x: Added to ``u`` before scaling.
        offset_y: Added to ``v`` before scaling.
        scale: Size of one texture tile in surface units.

    Returns:
        The texture.
    """
    return Texture(load_texels(filepath), offset_x=offset_x, offset_y=offset_y, scale=scale)
