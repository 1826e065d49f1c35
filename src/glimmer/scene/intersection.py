"""Scene-level ray intersection over all items.

Items are kept in structure-of-arrays fields indexed by item slot; the slot
also indexes the item's material and coloration. Traversal is a linear scan
with no acceleration structure.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.scene.intersection import add_sphere, clear_items, trace
    >>> clear_items()
    >>> add_sphere((0.0, 0.0, -5.0), 1.0)
    0
    >>> # Use trace(origin, direction) within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from glimmer.core.config import MAX_ITEMS
from glimmer.geometry.plane import intersect_plane, plane_normal, plane_texture_coords
from glimmer.geometry.sphere import intersect_sphere, sphere_normal, sphere_texture_coords
from glimmer.lights.registry import INFINITE_DISTANCE

vec3 = tm.vec3

ITEM_SPHERE = 0
ITEM_PLANE = 1


@ti.dataclass
class SceneHit:
    """Nearest intersection of a ray with the scene.

    Attributes:
        hit: 1 if any item was hit, 0 otherwise.
        t: Distance along the ray. Only valid if hit == 1.
        item: Slot of the hit item, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    item: ti.i32


# Item storage: Structure of Arrays layout
item_kinds = ti.field(dtype=ti.i32, shape=MAX_ITEMS)
# Sphere centre or a point on the plane
item_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_ITEMS)
item_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_ITEMS)
item_radii = ti.field(dtype=ti.f32, shape=MAX_ITEMS)
num_items = ti.field(dtype=ti.i32, shape=())


def clear_items() -> None:
    """Remove all items. Field data is overwritten by later additions."""
    num_items[None] = 0


def _next_slot() -> int:
    idx = num_items[None]
    if idx >= MAX_ITEMS:
        raise RuntimeError(f"Maximum number of scene items ({MAX_ITEMS}) exceeded")
    return idx


def add_sphere(center, radius: float) -> int:
    """Append a sphere.

    Returns:
        The slot of the added sphere.

    Raises:
        RuntimeError: If the maximum number of items is exceeded.
    """
    idx = _next_slot()
    item_kinds[idx] = ITEM_SPHERE
    item_positions[idx] = list(center)
    item_normals[idx] = [0.0, 0.0, 0.0]
    item_radii[idx] = radius
    num_items[None] = idx + 1
    return idx


def add_plane(origin, normal) -> int:
    """Append a plane. ``normal`` must already be unit length.

    Returns:
        The slot of the added plane.

    Raises:
        RuntimeError: If the maximum number of items is exceeded.
    """
    idx = _next_slot()
    item_kinds[idx] = ITEM_PLANE
    item_positions[idx] = list(origin)
    item_normals[idx] = list(normal)
    item_radii[idx] = 0.0
    num_items[None] = idx + 1
    return idx


def get_item_count() -> int:
    return int(num_items[None])


@ti.func
def intersect_item(idx: ti.i32, origin: vec3, direction: vec3):
    """Intersect one item. Returns ``(hit, distance)``."""
    hit = 0
    distance = 0.0
    if item_kinds[idx] == ITEM_SPHERE:
        hit, distance = intersect_sphere(item_positions[idx], item_radii[idx], origin, direction)
    else:
        hit, distance = intersect_plane(item_positions[idx], item_normals[idx], origin, direction)
    return hit, distance


@ti.func
def trace(origin: vec3, direction: vec3) -> SceneHit:
    """Find the nearest item along a ray.

    Only a strictly nearer hit replaces the current one, so among
    equidistant items the first in scene order wins.
    """
    best_t = INFINITE_DISTANCE
    best_item = -1
    for i in range(num_items[None]):
        hit, distance = intersect_item(i, origin, direction)
        if hit == 1 and distance < best_t:
            best_t = distance
            best_item = i
    found = 0
    if best_item >= 0:
        found = 1
    return SceneHit(hit=found, t=best_t, item=best_item)


@ti.func
def occluded(origin: vec3, direction: vec3, max_distance: ti.f32) -> ti.i32:
    """Return 1 if any item lies along the ray closer than ``max_distance``.

    Stops testing items after the first blocker.
    """
    blocked = 0
    for i in range(num_items[None]):
        if blocked == 0:
            hit, distance = intersect_item(i, origin, direction)
            if hit == 1 and distance < max_distance:
                blocked = 1
    return blocked


@ti.func
def surface_normal(idx: ti.i32, point: vec3) -> vec3:
    """Outward shading normal of item ``idx`` at ``point``."""
    normal = vec3(0.0, 0.0, 0.0)
    if item_kinds[idx] == ITEM_SPHERE:
        normal = sphere_normal(item_positions[idx], point)
    else:
        normal = plane_normal(item_normals[idx])
    return normal


@ti.func
def texture_coords(idx: ti.i32, point: vec3) -> tm.vec2:
    """Surface (u, v) of item ``idx`` at ``point``."""
    uv = tm.vec2(0.0, 0.0)
    if item_kinds[idx] == ITEM_SPHERE:
        uv = sphere_texture_coords(item_positions[idx], item_radii[idx], point)
    else:
        uv = plane_texture_coords(item_positions[idx], item_normals[idx], point)
    return uv
