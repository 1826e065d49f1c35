"""Camera module.

Components:
    primary: Primary ray generation for the fixed origin camera
"""

from .primary import PIXEL_CENTER, fov_adjustment, primary_ray, validate_dimensions

__all__ = [
    "PIXEL_CENTER",
    "fov_adjustment",
    "primary_ray",
    "validate_dimensions",
]
