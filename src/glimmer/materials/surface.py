"""Direct-lit surface materials.

A ``Material`` pairs a coloration and an albedo with one of three surface
behaviours:

- ``Diffuse``: Lambertian response to the scene lights, with shadows.
- ``Reflective``: the diffuse term blended with a mirror reflection,
  weighted by ``reflectivity``.
- ``Refractive``: a Fresnel-weighted blend of reflection and transmission,
  scaled by ``transparency`` and the surface coloration.

The shading itself is done by the integrator; this module holds the
host-side types, their validation and the per-item field storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

import taichi as ti

from glimmer.core.config import MAX_ITEMS
from glimmer.materials.coloration import Coloration


class SurfaceType(IntEnum):
    DIFFUSE = 0
    REFLECTIVE = 1
    REFRACTIVE = 2


@dataclass(frozen=True)
class Diffuse:
    pass


@dataclass(frozen=True)
class Reflective:
    """Mirror blend. ``reflectivity`` must be in [0, 1]."""

    reflectivity: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.reflectivity <= 1.0:
            raise ValueError(f"reflectivity must be in [0, 1], got {self.reflectivity}")


@dataclass(frozen=True)
class Refractive:
    """Dielectric. ``index`` must be positive and ``transparency`` in [0, 1]."""

    index: float
    transparency: float

    def __post_init__(self) -> None:
        if self.index <= 0.0:
            raise ValueError(f"Refractive index must be positive, got {self.index}")
        if not 0.0 <= self.transparency <= 1.0:
            raise ValueError(f"transparency must be in [0, 1], got {self.transparency}")


Surface = Diffuse | Reflective | Refractive


@dataclass(frozen=True)
class Material:
    """A direct-lit material.

    Attributes:
        coloration: Surface colour or texture.
        albedo: Diffuse reflectance scale. Non-negative; values above 1
            brighten the diffuse term.
        surface: Surface behaviour, diffuse by default.
    """

    coloration: Coloration
    albedo: float
    surface: Surface = field(default_factory=Diffuse)

    def __post_init__(self) -> None:
        if self.albedo < 0.0:
            raise ValueError(f"albedo must be non-negative, got {self.albedo}")

    @property
    def surface_type(self) -> SurfaceType:
        if isinstance(self.surface, Reflective):
            return SurfaceType.REFLECTIVE
        if isinstance(self.surface, Refractive):
            return SurfaceType.REFRACTIVE
        return SurfaceType.DIFFUSE


# =============================================================================
# Field Storage (indexed by item slot)
# =============================================================================

surface_types = ti.field(dtype=ti.i32, shape=MAX_ITEMS)
surface_albedos = ti.field(dtype=ti.f32, shape=MAX_ITEMS)
surface_reflectivities = ti.field(dtype=ti.f32, shape=MAX_ITEMS)
surface_indices = ti.field(dtype=ti.f32, shape=MAX_ITEMS)
surface_transparencies = ti.field(dtype=ti.f32, shape=MAX_ITEMS)


def set_surface_material(slot: int, material: Material) -> None:
    """Write the surface parameters of one item slot.

    The coloration is stored separately by ``coloration.set_coloration``.
    """
    surface = material.surface
    surface_types[slot] = int(material.surface_type)
    surface_albedos[slot] = material.albedo
    surface_reflectivities[slot] = 0.0
    surface_indices[slot] = 1.0
    surface_transparencies[slot] = 0.0
    if isinstance(surface, Reflective):
        surface_reflectivities[slot] = surface.reflectivity
    elif isinstance(surface, Refractive):
        surface_indices[slot] = surface.index
        surface_transparencies[slot] = surface.transparency
