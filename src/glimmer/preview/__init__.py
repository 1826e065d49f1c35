"""Preview module.

Components:
    export: Pillow-based texture loading and PNG saving
"""

from .export import load_texels, load_texture, save_png

__all__ = ["load_texels", "load_texture", "save_png"]
