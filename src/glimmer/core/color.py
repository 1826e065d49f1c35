"""Linear RGB colour model and 8-bit conversion.

Colours stay unbounded while light is being accumulated. Clamping to
[0, 1] and gamma encoding happen only when a value is converted to an
8-bit channel, so reflection, refraction and multi-sample averaging keep
their full dynamic range.

Whole images are encoded with ``encode_image``; kernels decode texels with
the ``GAMMA`` constant exported here.

Example:
    >>> from glimmer.core.color import Color
    >>> c = Color(0.2, 0.4, 0.8) * 0.5 + Color.black()
    >>> c.to_rgba8()
    (89, 122, 168, 255)
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

GAMMA = 2.2


def gamma_encode(linear: float) -> float:
    return linear ** (1.0 / GAMMA)


def gamma_decode(encoded: float) -> float:
    return encoded**GAMMA


@dataclass(frozen=True)
class Color:
    """A linear RGB triple.

    Arithmetic is component-wise. Multiplying by a number scales every
    channel; multiplying by another ``Color`` filters channel by channel.

    Attributes:
        r: Red channel.
        g: Green channel.
        b: Blue channel.
    """

    r: float
    g: float
    b: float

    @classmethod
    def black(cls) -> Color:
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def sum(cls, colors: Iterable[Color]) -> Color:
        """Sum colours starting from black, so an empty input gives black."""
        total = cls.black()
        for color in colors:
            total = total + color
        return total

    def __iter__(self) -> Iterator[float]:
        return iter((self.r, self.g, self.b))

    def __add__(self, other: Color) -> Color:
        if not isinstance(other, Color):
            return NotImplemented
        return Color(self.r + other.r, self.g + other.g, self.b + other.b)

    def __radd__(self, other: object) -> Color:
        # Lets the builtin sum() start from its integer zero.
        if other == 0:
            return self
        return NotImplemented

    def __mul__(self, other: Color | float) -> Color:
        if isinstance(other, Color):
            return Color(self.r * other.r, self.g * other.g, self.b * other.b)
        return Color(self.r * other, self.g * other, self.b * other)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Color:
        return Color(self.r / scalar, self.g / scalar, self.b / scalar)

    def clamp(self) -> Color:
        """Return a copy with every channel clamped to [0, 1]."""
        return Color(
            min(max(self.r, 0.0), 1.0),
            min(max(self.g, 0.0), 1.0),
            min(max(self.b, 0.0), 1.0),
        )

    def to_rgba8(self) -> tuple[int, int, int, int]:
        """Clamp, gamma-encode and truncate to an opaque 8-bit RGBA pixel."""
        c = self.clamp()
        return (
            int(gamma_encode(c.r) * 255.0),
            int(gamma_encode(c.g) * 255.0),
            int(gamma_encode(c.b) * 255.0),
            255,
        )

    @classmethod
    def from_rgba8(cls, rgba: tuple[int, ...]) -> Color:
        """Decode an 8-bit pixel into linear colour. Alpha is ignored."""
        return cls(
            gamma_decode(rgba[0] / 255.0),
            gamma_decode(rgba[1] / 255.0),
            gamma_decode(rgba[2] / 255.0),
        )

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)


def encode_image(
    linear: npt.NDArray[np.float32],
    coverage: npt.NDArray[np.float32] | None = None,
) -> npt.NDArray[np.uint8]:
    """Convert a linear (H, W, 3) image to gamma-encoded 8-bit RGBA.

    Args:
        linear: Unclamped linear radiance.
        coverage: Optional (H, W) fraction of samples whose primary ray hit
            geometry, used as alpha. When omitted every pixel is opaque.

    Returns:
        An (H, W, 4) uint8 array.
    """
    height, width = linear.shape[:2]
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    encoded = np.power(np.clip(linear, 0.0, 1.0), 1.0 / GAMMA)
    rgba[..., :3] = (encoded * 255.0).astype(np.uint8)
    if coverage is None:
        rgba[..., 3] = 255
    else:
        rgba[..., 3] = (np.clip(coverage, 0.0, 1.0) * 255.0).astype(np.uint8)
    return rgba

