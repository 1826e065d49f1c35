"""Sphere primitive.

Intersection uses the perpendicular-foot construction: project the vector
from the ray origin to the centre onto the ray direction, and compare the
squared distance from the centre to that foot point against the squared
radius. The nearer non-negative root is the hit; a sphere entirely behind
the ray origin is a miss.

Example:
    >>> from glimmer.core.color import Color
    >>> from glimmer.core.vector import Point
    >>> from glimmer.materials.coloration import SolidColor
    >>> from glimmer.materials.surface import Material
    >>> red = Material(coloration=SolidColor(Color(1.0, 0.0, 0.0)), albedo=0.18)
    >>> sphere = Sphere(center=Point(0.0, 0.0, -5.0), radius=1.0, material=red)
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from glimmer.core.vector import Point, as_point

if TYPE_CHECKING:
    from glimmer.materials.surface import Material
    from glimmer.materials.universal import UniversalMaterial

vec3 = tm.vec3


@dataclass
class Sphere:
    """A sphere scene item.

    Attributes:
        center: Centre of the sphere.
        radius: Radius, strictly positive.
        material: The material owned by this item.
    """

    center: Point
    radius: float
    material: "Material | UniversalMaterial"

    def __post_init__(self) -> None:
        self.center = as_point(self.center)
        if self.radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")

    def get_material(self) -> "Material | UniversalMaterial":
        return self.material


@ti.func
def intersect_sphere(center: vec3, radius: ti.f32, origin: vec3, direction: vec3):
    """Intersect a ray with a sphere.

    Args:
        center: Sphere centre.
        radius: Sphere radius.
        origin: Ray origin.
        direction: Ray direction (unit length).

    Returns:
        A tuple ``(hit, distance)``. ``hit`` is 1 if the sphere is in front
        of the ray; ``distance`` is the nearest non-negative root.
    """
    line = center - origin
    adj = tm.dot(line, direction)
    d2 = tm.dot(line, line) - adj * adj
    radius2 = radius * radius

    hit = 0
    distance = 0.0
    if d2 <= radius2:
        thc = ti.sqrt(radius2 - d2)
        t0 = adj - thc
        t1 = adj + thc
        if t0 >= 0.0:
            hit = 1
            distance = t0
        elif t1 >= 0.0:
            # Origin inside the sphere
            hit = 1
            distance = t1
    return hit, distance


@ti.func
def sphere_normal(center: vec3, point: vec3) -> vec3:
    """Outward unit normal at a point on the sphere."""
    return tm.normalize(point - center)


@ti.func
def sphere_texture_coords(center: vec3, radius: ti.f32, point: vec3) -> tm.vec2:
    """Spherical (u, v) coordinates of a point on the sphere.

    ``u`` follows the azimuth around +y and ``v`` the polar angle from +y,
    both mapped to [0, 1].
    """
    hit_vec = point - center
    phi = ti.atan2(hit_vec.z, hit_vec.x)
    theta = ti.acos(tm.clamp(hit_vec.y / radius, -1.0, 1.0))
    u = (tm.pi + phi) / (2.0 * tm.pi)
    v = theta / tm.pi
    return tm.vec2(u, v)
