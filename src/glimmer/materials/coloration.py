"""Surface colorations: a constant colour or a tiled texture.

A texture is an addressable grid of 8-bit RGBA texels. Lookups offset and
scale the surface (u, v), then map each coordinate onto the grid with
``wrap``, which tiles in both the positive and negative directions. Texels
are gamma-decoded into linear colour on lookup.

Texels of every texture in the scene live in one shared atlas field; each
item slot records where its texture starts and how large it is.

Example:
    >>> import numpy as np
    >>> from glimmer.materials.coloration import Texture, wrap
    >>> checker = Texture(np.zeros((2, 2, 4), dtype=np.uint8), scale=0.5)
    >>> wrap(-0.25, 4)
    3
"""

import logging
import math
from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from glimmer.core.color import GAMMA, Color
from glimmer.core.config import MAX_ITEMS, MAX_TEXELS

logger = logging.getLogger(__name__)

vec3 = tm.vec3


class ColorationKind(IntEnum):
    SOLID = 0
    TEXTURE = 1


def wrap(value: float, bound: int) -> int:
    """Map a texture coordinate onto ``[0, bound)``.

    Scales by ``bound``, truncates toward zero and reduces modulo ``bound``,
    adding ``bound`` back when the truncated value was negative. For
    ``value`` in [0, 1) this is ``floor(value * bound)``.
    """
    wrapped = int(math.fmod(int(value * bound), bound))
    if wrapped < 0:
        wrapped += bound
    return wrapped


@dataclass(frozen=True)
class SolidColor:
    """A constant colour."""

    color: Color

    def color_at(self, u: float, v: float) -> Color:
        return self.color


@dataclass(frozen=True, eq=False)
class Texture:
    """A tiled image.

    Attributes:
        texels: (height, width, 4) or (height, width, 3) uint8 array, row 0
            at the top.
        offset_x: Added to ``u`` before scaling.
        offset_y: Added to ``v`` before scaling.
        scale: Size of one texture tile in surface units. Must be non-zero.
    """

    texels: npt.NDArray[np.uint8]
    offset_x: float = 0.0
    offset_y: float = 0.0
    scale: float = 1.0

    def __post_init__(self) -> None:
        texels = np.ascontiguousarray(self.texels)
        if texels.dtype != np.uint8:
            raise ValueError(f"Texture texels must be uint8, got {texels.dtype}")
        if texels.ndim != 3 or texels.shape[2] not in (3, 4):
            raise ValueError(
                f"Texture texels must have shape (height, width, 3|4), got {texels.shape}"
            )
        if texels.shape[0] == 0 or texels.shape[1] == 0:
            raise ValueError("Texture must contain at least one texel")
        if self.scale == 0.0:
            raise ValueError("Texture scale must be non-zero")
        object.__setattr__(self, "texels", texels)

    @property
    def width(self) -> int:
        return int(self.texels.shape[1])

    @property
    def height(self) -> int:
        return int(self.texels.shape[0])

    def color_at(self, u: float, v: float) -> Color:
        """Return the linear colour of the texel covering (u, v)."""
        x = wrap((u + self.offset_x) / self.scale, self.width)
        y = wrap((v + self.offset_y) / self.scale, self.height)
        return Color.from_rgba8(tuple(int(c) for c in self.texels[y, x]))


Coloration = SolidColor | Texture


# =============================================================================
# Field Storage
# =============================================================================

coloration_kinds = ti.field(dtype=ti.i32, shape=MAX_ITEMS)
coloration_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_ITEMS)
texture_starts = ti.field(dtype=ti.i32, shape=MAX_ITEMS)
texture_widths = ti.field(dtype=ti.i32, shape=MAX_ITEMS)
texture_heights = ti.field(dtype=ti.i32, shape=MAX_ITEMS)
texture_offsets = ti.Vector.field(2, dtype=ti.f32, shape=MAX_ITEMS)
texture_scales = ti.field(dtype=ti.f32, shape=MAX_ITEMS)

# Shared 8-bit texel storage for all textures
texel_atlas = ti.Vector.field(3, dtype=ti.u8, shape=MAX_TEXELS)
num_atlas_texels = ti.field(dtype=ti.i32, shape=())


def clear_colorations() -> None:
    """Release the texel atlas. Slot data is overwritten on the next upload."""
    num_atlas_texels[None] = 0


@ti.kernel
def _copy_texels(texels: ti.types.ndarray(), start: ti.i32, width: ti.i32, height: ti.i32):
    for row, col in ti.ndrange(height, width):
        idx = start + row * width + col
        for k in ti.static(range(3)):
            texel_atlas[idx][k] = texels[row, col, k]


def upload_texture(texture: Texture) -> int:
    """Copy a texture's texels into the atlas.

    Returns:
        The atlas index of the texture's first texel.

    Raises:
        RuntimeError: If the atlas has no room left.
    """
    start = int(num_atlas_texels[None])
    count = texture.width * texture.height
    if start + count > MAX_TEXELS:
        raise RuntimeError(
            f"Texture atlas full: {count} texels requested, "
            f"{MAX_TEXELS - start} of {MAX_TEXELS} available"
        )
    _copy_texels(texture.texels, start, texture.width, texture.height)
    num_atlas_texels[None] = start + count
    logger.debug("Uploaded %dx%d texture at atlas offset %d", texture.width, texture.height, start)
    return start


def set_coloration(
    slot: int,
    coloration: Coloration,
    uploaded: dict[int, int] | None = None,
) -> None:
    """Write the coloration of one item slot.

    Args:
        slot: Item index.
        coloration: Solid colour or texture.
        uploaded: Optional cache of ``id(texels) -> atlas start`` so texels
            shared between items are uploaded once.

    Raises:
        ValueError: If ``coloration`` is not a known coloration type.
    """
    if isinstance(coloration, SolidColor):
        coloration_kinds[slot] = int(ColorationKind.SOLID)
        coloration_colors[slot] = list(coloration.color)
    elif isinstance(coloration, Texture):
        if uploaded is None:
            uploaded = {}
        key = id(coloration.texels)
        if key not in uploaded:
            uploaded[key] = upload_texture(coloration)
        coloration_kinds[slot] = int(ColorationKind.TEXTURE)
        coloration_colors[slot] = [0.0, 0.0, 0.0]
        texture_starts[slot] = uploaded[key]
        texture_widths[slot] = coloration.width
        texture_heights[slot] = coloration.height
        texture_offsets[slot] = [coloration.offset_x, coloration.offset_y]
        texture_scales[slot] = coloration.scale
    else:
        raise ValueError(f"Unsupported coloration: {coloration!r}")


@ti.func
def wrap_coord(value: ti.f32, bound: ti.i32) -> ti.i32:
    """Kernel counterpart of ``wrap``."""
    wrapped = ti.raw_mod(ti.cast(value * ti.cast(bound, ti.f32), ti.i32), bound)
    if wrapped < 0:
        wrapped += bound
    return wrapped


@ti.func
def coloration_at(slot: ti.i32, uv: tm.vec2) -> vec3:
    """Linear colour of an item's coloration at surface coordinates ``uv``."""
    color = coloration_colors[slot]
    if coloration_kinds[slot] == int(ColorationKind.TEXTURE):
        width = texture_widths[slot]
        height = texture_heights[slot]
        offset = texture_offsets[slot]
        scale = texture_scales[slot]
        x = wrap_coord((uv.x + offset.x) / scale, width)
        y = wrap_coord((uv.y + offset.y) / scale, height)
        texel = texel_atlas[texture_starts[slot] + y * width + x]
        color = tm.pow(ti.cast(texel, ti.f32) / 255.0, GAMMA)
    return color
