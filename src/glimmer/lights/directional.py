"""Directional light: parallel rays from infinitely far away."""

from __future__ import annotations

import math
from dataclasses import dataclass

from glimmer.core.color import Color
from glimmer.core.vector import Point, Vector3, as_vector


@dataclass
class DirectionalLight:
    """A light arriving from a single direction everywhere in the scene.

    Attributes:
        direction: Direction the light travels in. Normalized on construction.
        color: Light colour.
        intensity: Constant irradiance scale.
    """

    direction: Vector3
    color: Color
    intensity: float

    def __post_init__(self) -> None:
        direction = as_vector(self.direction)
        if direction.length() == 0.0:
            raise ValueError("Directional light direction must have non-zero length")
        if self.intensity < 0.0:
            raise ValueError(f"Light intensity must be non-negative, got {self.intensity}")
        self.direction = direction.normalize()

    def direction_from(self, point: Point) -> Vector3:
        """Unit vector from ``point`` toward the light."""
        return -self.direction

    def intensity_at(self, point: Point) -> float:
        return self.intensity

    def distance(self, point: Point) -> float:
        return math.inf
