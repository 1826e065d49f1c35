"""Infinite plane primitive.

A plane is stored as a point on it and a unit normal that points away from
the side it is seen from. Only rays travelling along that normal
(``normal . direction > EPSILON``) hit it, and the shading normal is the
stored normal negated, facing back toward the viewer.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from glimmer.core.vector import Point, Vector3, as_point, as_vector

if TYPE_CHECKING:
    from glimmer.materials.surface import Material
    from glimmer.materials.universal import UniversalMaterial

vec3 = tm.vec3

# Rays closer to parallel than this are treated as missing the plane
EPSILON = 1e-6


@dataclass
class Plane:
    """A plane scene item.

    Attributes:
        origin: Any point on the plane.
        normal: Direction the plane faces away from. Normalized on
            construction.
        material: The material owned by this item.
    """

    origin: Point
    normal: Vector3
    material: "Material | UniversalMaterial"

    def __post_init__(self) -> None:
        self.origin = as_point(self.origin)
        normal = as_vector(self.normal)
        if normal.length() == 0.0:
            raise ValueError("Plane normal must have non-zero length")
        self.normal = normal.normalize()

    def get_material(self) -> "Material | UniversalMaterial":
        return self.material


@ti.func
def intersect_plane(position: vec3, normal: vec3, origin: vec3, direction: vec3):
    """Intersect a ray with a plane.

    Returns:
        A tuple ``(hit, distance)``. Back-facing and grazing rays, and
        planes behind the ray origin, are misses.
    """
    denom = tm.dot(normal, direction)
    hit = 0
    distance = 0.0
    if denom > EPSILON:
        d = tm.dot(position - origin, normal) / denom
        if d >= 0.0:
            hit = 1
            distance = d
    return hit, distance


@ti.func
def plane_normal(normal: vec3) -> vec3:
    return -normal


@ti.func
def plane_basis(normal: vec3):
    """Build two in-plane axes from the plane normal.

    The first axis is ``normal x +z``, or ``normal x +y`` when the normal is
    parallel to z. The second is ``normal x first``.
    """
    x_axis = tm.cross(normal, vec3(0.0, 0.0, 1.0))
    if tm.length(x_axis) < EPSILON:
        x_axis = tm.cross(normal, vec3(0.0, 1.0, 0.0))
    x_axis = tm.normalize(x_axis)
    y_axis = tm.normalize(tm.cross(normal, x_axis))
    return x_axis, y_axis


@ti.func
def plane_texture_coords(position: vec3, normal: vec3, point: vec3) -> tm.vec2:
    """Project the offset from the plane origin onto the in-plane axes."""
    x_axis, y_axis = plane_basis(normal)
    hit_vec = point - position
    return tm.vec2(tm.dot(hit_vec, x_axis), tm.dot(hit_vec, y_axis))
