"""Taichi-accelerated ray tracer for scenes built from analytic geometry.

The package renders spheres and planes either with a Whitted-style integrator
(direct lighting with shadows, mirror reflection and Fresnel-weighted
refraction) or with a stochastic scatter/emit path tracer.

Subpackages:
    core: Vector and colour types, ray math, sampling, configuration,
        the integrator kernels and the progressive sampler
    camera: Primary ray generation
    geometry: Sphere and plane primitives
    materials: Colorations, direct-lit surfaces and universal materials
    lights: Directional and spherical lights
    scene: Scene description, upload and nearest-hit traversal
    preview: Image loading and saving

Modules that declare Taichi fields must be imported after ``ti.init()``.
Only the pure-Python value types are re-exported here.
"""

from glimmer.core.color import Color
from glimmer.core.config import BackgroundPolicy, RenderSettings, ShadingModel
from glimmer.core.vector import Point, Vector3

__version__ = "0.1.0"

__all__ = [
    "BackgroundPolicy",
    "Color",
    "Point",
    "RenderSettings",
    "ShadingModel",
    "Vector3",
]
