"""Built-in demo scenes.

``create_demo_scene`` is a direct-lit still life: a glass sphere in front of
a textured mirror sphere and a large blue sphere, on a textured reflective
floor with a textured back wall, lit by a sun-like directional light and a
point light.

``create_path_traced_scene`` arranges similar objects with universal
materials and a glowing sphere as the only light source. It is meant to be
rendered with several samples per pixel and the sky background.

Both use a procedural checkerboard when no texture is supplied.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from glimmer.core.color import Color
from glimmer.core.vector import Point, Vector3
from glimmer.geometry.plane import Plane
from glimmer.geometry.sphere import Sphere
from glimmer.lights.directional import DirectionalLight
from glimmer.lights.spherical import SphericalLight
from glimmer.materials.coloration import SolidColor, Texture
from glimmer.materials.surface import Diffuse, Material, Reflective, Refractive
from glimmer.materials.universal import UniversalMaterial
from glimmer.scene.manager import Scene

WHITE = Color(1.0, 1.0, 1.0)


def checkerboard_texels(
    size: int = 64,
    tiles: int = 8,
    light: tuple[int, int, int] = (230, 230, 230),
    dark: tuple[int, int, int] = (40, 40, 40),
) -> npt.NDArray[np.uint8]:
    """Build a (size, size, 4) RGBA checkerboard with ``tiles`` squares per side."""
    if size <= 0 or tiles <= 0:
        raise ValueError(f"size and tiles must be positive, got {size} and {tiles}")
    cell = np.arange(size) * tiles // size
    mask = (cell[:, None] + cell[None, :]) % 2 == 0
    texels = np.empty((size, size, 4), dtype=np.uint8)
    texels[mask, :3] = light
    texels[~mask, :3] = dark
    texels[..., 3] = 255
    return texels


def create_demo_scene(
    width: int = 1920,
    height: int = 1080,
    texels: npt.NDArray[np.uint8] | None = None,
) -> Scene:
    """Create the direct-lit demo scene.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        texels: Optional (H, W, 4) texture shared by the textured surfaces.

    Returns:
        The scene (not yet loaded).
    """
    if texels is None:
        texels = checkerboard_texels()

    scene = Scene(width=width, height=height, fov=90.0)
    scene.add(
        Sphere(
            center=Point(0.0, 0.5, -3.0),
            radius=1.2,
            material=Material(
                coloration=SolidColor(WHITE),
                albedo=0.18,
                surface=Refractive(index=1.5, transparency=0.9),
            ),
        )
    )
    scene.add(
        Sphere(
            center=Point(4.0, 2.0, -7.5),
            radius=3.5,
            material=Material(
                coloration=Texture(texels, scale=0.1),
                albedo=0.5,
                surface=Reflective(reflectivity=0.4),
            ),
        )
    )
    scene.add(
        Sphere(
            center=Point(-7.5, 2.0, -7.5),
            radius=5.0,
            material=Material(
                coloration=SolidColor(Color(0.0, 0.0, 1.0)),
                albedo=2.0,
                surface=Diffuse(),
            ),
        )
    )
    for origin, normal in (
        (Point(0.0, -7.0, -5.0), Vector3(0.0, -1.0, 0.0)),
        (Point(0.0, 0.0, -15.0), Vector3(0.0, 0.0, -1.0)),
    ):
        scene.add(
            Plane(
                origin=origin,
                normal=normal,
                material=Material(
                    coloration=Texture(texels, scale=5.0),
                    albedo=0.5,
                    surface=Reflective(reflectivity=0.4),
                ),
            )
        )

    scene.add_light(
        DirectionalLight(direction=Vector3(-0.5, -1.0, -1.0), color=WHITE, intensity=2.0)
    )
    scene.add_light(SphericalLight(position=Point(3.0, 2.0, -3.0), color=WHITE, intensity=255.0))
    return scene


def create_path_traced_scene(
    width: int = 640,
    height: int = 360,
    texels: npt.NDArray[np.uint8] | None = None,
) -> Scene:
    """Create the scatter/emit demo scene.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        texels: Optional (H, W, 4) texture for the floor.

    Returns:
        The scene (not yet loaded).
    """
    if texels is None:
        texels = checkerboard_texels()

    scene = Scene(width=width, height=height, fov=90.0)
    # Floor
    scene.add(
        Plane(
            origin=Point(0.0, -1.5, -5.0),
            normal=Vector3(0.0, -1.0, 0.0),
            material=UniversalMaterial(coloration=Texture(texels, scale=2.0), albedo=0.8),
        )
    )
    # Glass
    scene.add(
        Sphere(
            center=Point(0.0, -0.3, -3.0),
            radius=1.2,
            material=UniversalMaterial(
                coloration=SolidColor(WHITE), albedo=1.0, index=1.5, transparency=1.0
            ),
        )
    )
    # Brushed mirror
    scene.add(
        Sphere(
            center=Point(3.0, 0.5, -6.0),
            radius=2.0,
            material=UniversalMaterial(
                coloration=SolidColor(Color(0.9, 0.8, 0.6)), albedo=0.9, reflectivity=0.7
            ),
        )
    )
    # Matte
    scene.add(
        Sphere(
            center=Point(-3.5, 0.5, -6.0),
            radius=2.0,
            material=UniversalMaterial(coloration=SolidColor(Color(0.2, 0.3, 0.9)), albedo=0.7),
        )
    )
    # Lamp
    scene.add(
        Sphere(
            center=Point(0.0, 4.5, -5.0),
            radius=1.0,
            material=UniversalMaterial(
                coloration=SolidColor(WHITE),
                emission=6.0,
                is_light=True,
                emission_color=Color(1.0, 0.9, 0.7),
            ),
        )
    )
    return scene
