"""Host-side 3D vector and point types.

Scene descriptions are assembled from these immutable value types before
being uploaded into Taichi fields. Inside kernels the same quantities are
plain ``ti.math.vec3`` values (see ``glimmer.core.ray``).

Points and vectors are kept distinct so that the affine rules hold:

    Point - Point   -> Vector3
    Point + Vector3 -> Point
    Point - Vector3 -> Point

Example:
    >>> from glimmer.core.vector import Point, Vector3
    >>> offset = Point(1.0, 2.0, 3.0) - Point.zero()
    >>> offset.length()
    3.7416573867739413
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class Vector3:
    """A direction or displacement in 3D space.

    Attributes:
        x: X component.
        y: Y component.
        z: Z component.
    """

    x: float
    y: float
    z: float

    @classmethod
    def zero(cls) -> Vector3:
        return cls(0.0, 0.0, 0.0)

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    def __add__(self, other: Vector3) -> Vector3:
        if not isinstance(other, Vector3):
            return NotImplemented
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        if not isinstance(other, Vector3):
            return NotImplemented
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector3:
        if isinstance(scalar, (Vector3, Point)):
            return NotImplemented
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vector3:
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def dot(self, other: Vector3) -> float:
        """Return the dot product with another vector."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector3) -> Vector3:
        """Return the right-handed cross product ``self x other``."""
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def norm(self) -> float:
        """Return the squared length."""
        return self.dot(self)

    def length(self) -> float:
        return math.sqrt(self.norm())

    def normalize(self) -> Vector3:
        """Return a unit vector pointing the same way.

        Raises:
            ValueError: If the vector has zero length.
        """
        length = self.length()
        if length == 0.0:
            raise ValueError("Cannot normalize a zero-length vector")
        return self / length


@dataclass(frozen=True)
class Point:
    """A position in 3D space.

    Attributes:
        x: X coordinate.
        y: Y coordinate.
        z: Z coordinate.
    """

    x: float
    y: float
    z: float

    @classmethod
    def zero(cls) -> Point:
        return cls(0.0, 0.0, 0.0)

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    def __add__(self, other: Vector3) -> Point:
        if not isinstance(other, Vector3):
            return NotImplemented
        return Point(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Point | Vector3) -> Point | Vector3:
        if isinstance(other, Point):
            return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)
        if isinstance(other, Vector3):
            return Point(self.x - other.x, self.y - other.y, self.z - other.z)
        return NotImplemented


def as_vector(value: Vector3 | Point | tuple[float, float, float]) -> Vector3:
    """Coerce a point, vector or 3-tuple into a ``Vector3``."""
    x, y, z = value
    return Vector3(float(x), float(y), float(z))


def as_point(value: Vector3 | Point | tuple[float, float, float]) -> Point:
    """Coerce a point, vector or 3-tuple into a ``Point``."""
    x, y, z = value
    return Point(float(x), float(y), float(z))
