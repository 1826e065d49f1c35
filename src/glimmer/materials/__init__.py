"""Materials module.

Components:
    coloration: Solid colours, tiled textures and the texel atlas
    surface: Direct-lit materials (diffuse, reflective, refractive)
    universal: Scatter/emit materials for the path tracer

Coloration and materials are stored per item slot in Taichi fields, so this
package must be imported after ``ti.init()``.
"""

from .coloration import Coloration, SolidColor, Texture, wrap
from .surface import Diffuse, Material, Reflective, Refractive, SurfaceType
from .universal import UniversalMaterial

__all__ = [
    "Coloration",
    "Diffuse",
    "Material",
    "Reflective",
    "Refractive",
    "SolidColor",
    "SurfaceType",
    "Texture",
    "UniversalMaterial",
    "wrap",
]
