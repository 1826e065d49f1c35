"""Spherical (point) light with inverse-square falloff."""

from __future__ import annotations

import math
from dataclasses import dataclass

from glimmer.core.color import Color
from glimmer.core.vector import Point, Vector3, as_point


@dataclass
class SphericalLight:
    """A point light radiating equally in all directions.

    The intensity received at distance ``r`` is ``intensity / (4 pi r^2)``.

    Attributes:
        position: Light position.
        color: Light colour.
        intensity: Emitted power scale.
    """

    position: Point
    color: Color
    intensity: float

    def __post_init__(self) -> None:
        self.position = as_point(self.position)
        if self.intensity < 0.0:
            raise ValueError(f"Light intensity must be non-negative, got {self.intensity}")

    def direction_from(self, point: Point) -> Vector3:
        """Unit vector from ``point`` toward the light."""
        return (self.position - point).normalize()

    def intensity_at(self, point: Point) -> float:
        r2 = (self.position - point).norm()
        return self.intensity / (4.0 * math.pi * r2)

    def distance(self, point: Point) -> float:
        return (self.position - point).length()
