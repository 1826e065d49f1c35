"""Scene light storage and kernel-side light evaluation.

Lights are stored in structure-of-arrays fields. ``light_sample`` returns,
for a surface point, everything the diffuse shading needs: the unit
direction toward the light, the distance to it, the received intensity and
the light colour. Directional lights report ``INFINITE_DISTANCE`` so no
occluder is ever beyond them.
"""

import taichi as ti
import taichi.math as tm

from glimmer.core.config import MAX_LIGHTS
from glimmer.lights.directional import DirectionalLight
from glimmer.lights.spherical import SphericalLight

vec3 = tm.vec3

LIGHT_DIRECTIONAL = 0
LIGHT_SPHERICAL = 1

# Stand-in for an infinite distance in 32-bit float kernels
INFINITE_DISTANCE = 1e30

Light = DirectionalLight | SphericalLight

light_kinds = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
# Travel direction for directional lights, position for spherical lights
light_vectors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    num_lights[None] = 0


def add_light(light: Light) -> int:
    """Append a light to the registry.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
        ValueError: If ``light`` is not a supported light type.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    if isinstance(light, DirectionalLight):
        light_kinds[idx] = LIGHT_DIRECTIONAL
        light_vectors[idx] = list(light.direction)
    elif isinstance(light, SphericalLight):
        light_kinds[idx] = LIGHT_SPHERICAL
        light_vectors[idx] = list(light.position)
    else:
        raise ValueError(f"Unsupported light: {light!r}")
    light_colors[idx] = list(light.color)
    light_intensities[idx] = light.intensity
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    return int(num_lights[None])


@ti.func
def light_sample(idx: ti.i32, point: vec3):
    """Evaluate light ``idx`` as seen from ``point``.

    Returns:
        A tuple ``(direction, distance, intensity, color)``.
    """
    direction = -light_vectors[idx]
    distance = INFINITE_DISTANCE
    intensity = light_intensities[idx]
    if light_kinds[idx] == LIGHT_SPHERICAL:
        to_light = light_vectors[idx] - point
        r2 = tm.dot(to_light, to_light)
        distance = ti.sqrt(r2)
        direction = to_light / distance
        intensity = light_intensities[idx] / (4.0 * tm.pi * r2)
    return direction, distance, intensity, light_colors[idx]
