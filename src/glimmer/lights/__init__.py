"""Lights module (direct-lit scenes only).

Components:
    directional: Parallel light from an infinitely distant source
    spherical: Point light with inverse-square falloff
    registry: Light fields and kernel-side evaluation (import after ti.init())
"""

from .directional import DirectionalLight
from .spherical import SphericalLight

__all__ = ["DirectionalLight", "SphericalLight"]
