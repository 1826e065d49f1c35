"""Geometry module.

Components:
    sphere: Sphere item, perpendicular-foot intersection and spherical UVs
    plane: One-sided infinite plane item and planar UVs
"""

from .plane import Plane, intersect_plane, plane_basis, plane_normal, plane_texture_coords
from .sphere import Sphere, intersect_sphere, sphere_normal, sphere_texture_coords

__all__ = [
    "Plane",
    "Sphere",
    "intersect_plane",
    "intersect_sphere",
    "plane_basis",
    "plane_normal",
    "plane_texture_coords",
    "sphere_normal",
    "sphere_texture_coords",
]
