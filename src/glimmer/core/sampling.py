"""Per-sample random streams for stochastic scattering.

Each sample owns a 32-bit PCG hash state derived from its pixel, its sample
index and the render seed. The state is passed into every sampling call and
the advanced state is returned, so no generator is shared between the
parallel pixel iterations and a render is reproducible for a given seed.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# PCG-RXS-M-XS constants
_PCG_MULTIPLIER = 747796405
_PCG_INCREMENT = 2891336453
_PCG_OUTPUT = 277803737

# 2^32 / golden ratio, decorrelates consecutive seeds
_SEED_MIX = 0x9E3779B9

_INV_2_24 = 1.0 / 16777216.0


@ti.func
def _u32(value):
    return ti.cast(value, ti.u32)


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Permute a 32-bit value with the PCG-RXS-M-XS output function."""
    state = value * ti.u32(_PCG_MULTIPLIER) + ti.u32(_PCG_INCREMENT)
    shift = (state >> ti.u32(28)) + ti.u32(4)
    word = ((state >> shift) ^ state) * ti.u32(_PCG_OUTPUT)
    return (word >> ti.u32(22)) ^ word


@ti.func
def seed_state(pixel_index: ti.i32, sample_index: ti.i32, seed: ti.i32) -> ti.u32:
    """Derive the initial random state for one sample of one pixel."""
    stream = pcg_hash(_u32(sample_index) ^ (_u32(seed) * ti.u32(_SEED_MIX)))
    return pcg_hash(_u32(pixel_index) ^ stream)


@ti.func
def next_random(state: ti.u32):
    """Draw a float in [0, 1).

    Returns:
        A tuple ``(value, new_state)``.
    """
    new_state = pcg_hash(state)
    value = ti.cast(new_state >> ti.u32(8), ti.f32) * _INV_2_24
    return value, new_state


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Rejection-sample a point inside the unit ball.

    Draws triples in [0, 1)^3, rescales them to [-1, 1)^3 and keeps the first
    one with squared length at most 1. The loop is bounded; each draw is
    accepted with probability pi/6.

    Returns:
        A tuple ``(point, new_state)``.
    """
    s = state
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(64):
        if not found:
            x, s = next_random(s)
            y, s = next_random(s)
            z, s = next_random(s)
            candidate = vec3(x, y, z) * 2.0 - vec3(1.0, 1.0, 1.0)
            if tm.dot(candidate, candidate) <= 1.0:
                p = candidate
                found = True
    return p, s
