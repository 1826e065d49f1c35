"""Primary ray generation for a camera fixed at the origin.

The camera sits at the world origin and looks down -z with +y up. Pixel
(0, 0) is the top-left corner of the image. The horizontal extent is scaled
by the aspect ratio, so images must be wider than they are tall.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.camera.primary import fov_adjustment, primary_ray
    >>> adj = fov_adjustment(90.0)
    >>> @ti.kernel
    ... def centre_ray() -> ti.math.vec3:
    ...     return primary_ray(4, 2, 8, 4, adj, 0.5, 0.5).direction
"""

import math

import taichi as ti
import taichi.math as tm

from glimmer.core.ray import Ray, vec3

# Pixel-centre offset inside a pixel
PIXEL_CENTER = 0.5


def validate_dimensions(width: int, height: int, fov: float) -> None:
    """Check the camera preconditions.

    Raises:
        ValueError: If a dimension is not positive, if ``width <= height``,
            or if ``fov`` is not in (0, 180) degrees.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width <= height:
        raise ValueError(
            f"Image width must be greater than its height, got {width}x{height}"
        )
    if not 0.0 < fov < 180.0:
        raise ValueError(f"Field of view must be in (0, 180) degrees, got {fov}")


def fov_adjustment(fov: float) -> float:
    """Return ``tan(fov / 2)`` for a field of view in degrees."""
    return math.tan(math.radians(fov) / 2.0)


@ti.func
def primary_ray(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    fov_adj: ti.f32,
    jitter_x: ti.f32,
    jitter_y: ti.f32,
) -> Ray:
    """Generate the camera ray through a point inside pixel (x, y).

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        fov_adj: ``fov_adjustment(fov)`` for the scene.
        jitter_x: Horizontal position inside the pixel in [0, 1).
        jitter_y: Vertical position inside the pixel in [0, 1).
            Use ``PIXEL_CENTER`` for both to go through the pixel centre.

    Returns:
        A ray from the origin with a normalized direction.
    """
    w = ti.cast(width, ti.f32)
    h = ti.cast(height, ti.f32)
    aspect_ratio = w / h
    sensor_x = (((ti.cast(x, ti.f32) + jitter_x) / w) * 2.0 - 1.0) * aspect_ratio * fov_adj
    sensor_y = (1.0 - ((ti.cast(y, ti.f32) + jitter_y) / h) * 2.0) * fov_adj
    direction = tm.normalize(vec3(sensor_x, sensor_y, -1.0))
    return Ray(origin=vec3(0.0, 0.0, 0.0), direction=direction)
