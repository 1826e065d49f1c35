"""Scatter/emit material for the path tracer.

Every surface may emit light and scatter the incoming ray. A surface flagged
``is_light`` only emits: the path ends there. Any other surface picks one
continuation per bounce:

- with probability ``reflectivity``, a mirror reflection;
- with probability ``transparency``, a dielectric event that reflects or
  refracts according to the Fresnel reflectance for ``index``;
- otherwise a diffuse bounce toward ``normal + random_in_unit_sphere()``.

The attenuation is always the surface coloration scaled by ``albedo``.
With ``reflectivity == transparency == 0`` every bounce is diffuse.

Example:
    >>> from glimmer.core.color import Color
    >>> from glimmer.materials.coloration import SolidColor
    >>> lamp = UniversalMaterial(
    ...     coloration=SolidColor(Color(1.0, 1.0, 1.0)),
    ...     emission=4.0,
    ...     is_light=True,
    ... )
"""

from dataclasses import dataclass, field

import taichi as ti
import taichi.math as tm

from glimmer.core.color import Color
from glimmer.core.config import MAX_ITEMS
from glimmer.core.ray import create_transmission, fresnel, near_zero, reflect
from glimmer.core.sampling import next_random, random_in_unit_sphere
from glimmer.materials.coloration import Coloration, coloration_at

vec3 = tm.vec3


@dataclass(frozen=True)
class UniversalMaterial:
    """Material record shared by every surface of a path-traced scene.

    Attributes:
        coloration: Surface colour or texture.
        albedo: Scale applied to the coloration for the attenuation.
        index: Refractive index used by the dielectric branch.
        transparency: Probability of the dielectric branch.
        reflectivity: Probability of the mirror branch.
        emission: Emission strength.
        is_light: If True the surface only emits and never scatters.
        emission_color: Colour of the emitted light, white by default.
    """

    coloration: Coloration
    albedo: float = 1.0
    index: float = 1.0
    transparency: float = 0.0
    reflectivity: float = 0.0
    emission: float = 0.0
    is_light: bool = False
    emission_color: Color = field(default_factory=lambda: Color(1.0, 1.0, 1.0))

    def __post_init__(self) -> None:
        if self.albedo < 0.0:
            raise ValueError(f"albedo must be non-negative, got {self.albedo}")
        if self.index <= 0.0:
            raise ValueError(f"Refractive index must be positive, got {self.index}")
        if not 0.0 <= self.transparency <= 1.0:
            raise ValueError(f"transparency must be in [0, 1], got {self.transparency}")
        if not 0.0 <= self.reflectivity <= 1.0:
            raise ValueError(f"reflectivity must be in [0, 1], got {self.reflectivity}")
        if self.reflectivity + self.transparency > 1.0:
            raise ValueError(
                "reflectivity + transparency must not exceed 1, got "
                f"{self.reflectivity} + {self.transparency}"
            )
        if self.emission < 0.0:
            raise ValueError(f"emission must be non-negative, got {self.emission}")

    def emit(self) -> Color:
        """Emitted colour: ``emission_color * emission``."""
        return self.emission_color * self.emission


# =============================================================================
# Field Storage (indexed by item slot)
# =============================================================================

universal_albedos = ti.field(dtype=ti.f32, shape=MAX_ITEMS)
universal_indices = ti.field(dtype=ti.f32, shape=MAX_ITEMS)
universal_transparencies = ti.field(dtype=ti.f32, shape=MAX_ITEMS)
universal_reflectivities = ti.field(dtype=ti.f32, shape=MAX_ITEMS)
universal_emissions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_ITEMS)
universal_is_light = ti.field(dtype=ti.i32, shape=MAX_ITEMS)


def set_universal_material(slot: int, material: UniversalMaterial) -> None:
    """Write the material parameters of one item slot."""
    universal_albedos[slot] = material.albedo
    universal_indices[slot] = material.index
    universal_transparencies[slot] = material.transparency
    universal_reflectivities[slot] = material.reflectivity
    universal_emissions[slot] = list(material.emit())
    universal_is_light[slot] = int(material.is_light)


@ti.func
def emitted(slot: ti.i32) -> vec3:
    return universal_emissions[slot]


@ti.func
def scatter_universal(
    slot: ti.i32,
    incident: vec3,
    normal: vec3,
    uv: tm.vec2,
    state: ti.u32,
):
    """Choose the continuation direction for a path bounce.

    Args:
        slot: Item index of the hit surface.
        incident: Incoming ray direction (unit length).
        normal: Outward surface normal (unit length).
        uv: Surface texture coordinates.
        state: Random state of the current sample.

    Returns:
        A tuple ``(scattered, direction, attenuation, new_state)``.
        ``scattered`` is 0 for light sources.
    """
    s = state
    scattered = 0
    direction = vec3(0.0, 0.0, 0.0)
    attenuation = coloration_at(slot, uv) * universal_albedos[slot]

    if universal_is_light[slot] == 0:
        scattered = 1
        lobe, s = next_random(s)
        reflectivity = universal_reflectivities[slot]
        transparency = universal_transparencies[slot]
        if lobe < reflectivity:
            direction = reflect(incident, normal)
        elif lobe < reflectivity + transparency:
            index = universal_indices[slot]
            kr = fresnel(incident, normal, index)
            pick, s = next_random(s)
            direction = reflect(incident, normal)
            if pick >= kr:
                origin = vec3(0.0, 0.0, 0.0)
                ok, _, refracted = create_transmission(normal, incident, origin, 0.0, index)
                if ok == 1:
                    direction = refracted
        else:
            offset, s = random_in_unit_sphere(s)
            # Diffuse bounce toward the side the ray came from
            facing = normal
            if tm.dot(incident, normal) > 0.0:
                facing = -normal
            target = facing + offset
            direction = facing
            if near_zero(target) == 0:
                direction = tm.normalize(target)

    return scattered, direction, attenuation, s
