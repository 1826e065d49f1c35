"""Core rendering module.

Components:
    vector: Host-side Vector3 and Point value types
    color: Linear RGB colour, gamma conversion and image encoding
    config: RenderSettings and the shading/background enums
    ray: Ray dataclass, reflection, transmission and Fresnel (Taichi)
    sampling: Explicit per-sample PCG random streams (Taichi)
    integrator: Render target and the per-sample rendering kernel
    progressive: Progressive sample accumulation and the render() entry point
"""

from .color import GAMMA, Color, encode_image, gamma_decode, gamma_encode
from .config import (
    DEFAULT_RECURSION_LIMIT,
    DEFAULT_SHADOW_BIAS,
    MAX_RECURSION_LIMIT,
    BackgroundPolicy,
    RenderSettings,
    ShadingModel,
)
from .vector import Point, Vector3

# Note: integrator and progressive declare Taichi fields and are NOT imported
# here. Import them directly once ti.init() has been called:
#   from glimmer.core.progressive import ProgressiveRenderer, render

__all__ = [
    "BackgroundPolicy",
    "Color",
    "DEFAULT_RECURSION_LIMIT",
    "DEFAULT_SHADOW_BIAS",
    "GAMMA",
    "MAX_RECURSION_LIMIT",
    "Point",
    "RenderSettings",
    "ShadingModel",
    "Vector3",
    "encode_image",
    "gamma_decode",
    "gamma_encode",
]
