"""Render configuration.

``RenderSettings`` carries everything the integrator needs besides the scene
itself (image size and field of view live on ``Scene``). Settings are
validated when constructed so that a bad configuration fails before any
kernel is launched.
"""

from dataclasses import dataclass
from enum import IntEnum

# Upper bound for the recursion limit. Sizes the integrator's ray stack.
MAX_RECURSION_LIMIT = 32

# Preallocated registry capacities (fields are sized once to avoid
# kernel recompilation)
MAX_ITEMS = 256
MAX_LIGHTS = 64
MAX_TEXELS = 1 << 22

DEFAULT_RECURSION_LIMIT = 25

# Suited to 32-bit floats; smaller offsets let secondary rays re-hit
# the surface that spawned them.
DEFAULT_SHADOW_BIAS = 1e-4


class ShadingModel(IntEnum):
    """Material family a scene is shaded with.

    DIRECT uses explicit lights with shadow rays, mirror reflection and
    refraction. PATH uses emissive geometry and stochastic scattering.
    """

    DIRECT = 0
    PATH = 1


class BackgroundPolicy(IntEnum):
    """What a ray that escapes the scene returns."""

    BLACK = 0
    SKY = 1


@dataclass(frozen=True)
class RenderSettings:
    """Integrator parameters.

    Attributes:
        recursion_limit: Maximum ray depth. A ray at this depth contributes
            black. Must be in [1, MAX_RECURSION_LIMIT].
        samples_per_pixel: Number of independent samples averaged per pixel.
        shadow_bias: Offset applied to secondary and shadow ray origins.
        seed: Seed for the per-sample random streams.
        background: Colour returned by escaping rays.
        jitter: If True, primary rays are jittered inside the pixel;
            otherwise every sample goes through the pixel centre.
    """

    recursion_limit: int = DEFAULT_RECURSION_LIMIT
    samples_per_pixel: int = 1
    shadow_bias: float = DEFAULT_SHADOW_BIAS
    seed: int = 0
    background: BackgroundPolicy = BackgroundPolicy.BLACK
    jitter: bool = False

    def __post_init__(self) -> None:
        if not 1 <= self.recursion_limit <= MAX_RECURSION_LIMIT:
            raise ValueError(
                f"recursion_limit must be in [1, {MAX_RECURSION_LIMIT}], "
                f"got {self.recursion_limit}"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.shadow_bias < 0.0:
            raise ValueError(f"shadow_bias must be non-negative, got {self.shadow_bias}")
        if not 0 <= self.seed < 2**31:
            raise ValueError(f"seed must be in [0, 2**31), got {self.seed}")
        # Accept plain ints for the policy.
        object.__setattr__(self, "background", BackgroundPolicy(self.background))
