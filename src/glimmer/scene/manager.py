"""Scene description and upload to the GPU-side registries.

A ``Scene`` is an in-memory description built in code: image size, field
of view, an ordered list of items and, for direct-lit scenes, an ordered
list of lights. ``load_scene`` validates it and writes every item, material,
coloration and light into the Taichi fields the integrator reads.

All items of a scene must use the same material family. The family decides
the shading model:

- ``Material`` items -> ``ShadingModel.DIRECT`` (lights, shadows, mirrors,
  refraction)
- ``UniversalMaterial`` items -> ``ShadingModel.PATH`` (emissive geometry,
  stochastic scattering; lights are not allowed)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.scene.manager import Scene, load_scene
    >>> scene = Scene(width=8, height=4, fov=90.0)
    >>> scene.add(sphere).add_light(sun)
    >>> load_scene(scene)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from glimmer.camera.primary import validate_dimensions
from glimmer.core.config import MAX_ITEMS, MAX_LIGHTS, ShadingModel
from glimmer.geometry.plane import Plane
from glimmer.geometry.sphere import Sphere
from glimmer.lights.registry import Light, add_light, clear_lights
from glimmer.materials.coloration import clear_colorations, set_coloration
from glimmer.materials.surface import Material, set_surface_material
from glimmer.materials.universal import UniversalMaterial, set_universal_material
from glimmer.scene.intersection import add_plane, add_sphere, clear_items

logger = logging.getLogger(__name__)

Item = Sphere | Plane


@dataclass
class Scene:
    """A renderable scene.

    Attributes:
        width: Image width in pixels. Must exceed ``height``.
        height: Image height in pixels.
        fov: Horizontal-scaled field of view in degrees.
        items: Scene items, in traversal order.
        lights: Lights, for direct-lit scenes only.
    """

    width: int
    height: int
    fov: float = 90.0
    items: list[Item] = field(default_factory=list)
    lights: list[Light] = field(default_factory=list)

    def add(self, item: Item) -> Scene:
        """Append an item and return the scene for chaining."""
        self.items.append(item)
        return self

    def add_light(self, light: Light) -> Scene:
        """Append a light and return the scene for chaining."""
        self.lights.append(light)
        return self

    @property
    def shading_model(self) -> ShadingModel:
        """Shading model implied by the items' material family.

        An empty scene is shaded as direct-lit.

        Raises:
            ValueError: If items mix material families.
        """
        universal = [isinstance(item.material, UniversalMaterial) for item in self.items]
        if any(universal) and not all(universal):
            raise ValueError(
                "A scene must use a single material family: "
                "found both Material and UniversalMaterial items"
            )
        if universal and all(universal):
            return ShadingModel.PATH
        return ShadingModel.DIRECT

    def validate(self) -> None:
        """Check the scene can be rendered.

        Raises:
            ValueError: On bad dimensions or field of view, mixed material
                families, unknown item or material types, or lights in a
                path-traced scene.
            RuntimeError: If the scene exceeds the item or light capacity.
        """
        validate_dimensions(self.width, self.height, self.fov)
        for item in self.items:
            if not isinstance(item, (Sphere, Plane)):
                raise ValueError(f"Unsupported scene item: {item!r}")
            if not isinstance(item.material, (Material, UniversalMaterial)):
                raise ValueError(f"Unsupported material: {item.material!r}")
        if self.shading_model == ShadingModel.PATH and self.lights:
            raise ValueError("Path-traced scenes light themselves with emissive items")
        if len(self.items) > MAX_ITEMS:
            raise RuntimeError(f"Maximum number of scene items ({MAX_ITEMS}) exceeded")
        if len(self.lights) > MAX_LIGHTS:
            raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    def summary(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "fov": self.fov,
            "items": len(self.items),
            "lights": len(self.lights),
            "shading_model": self.shading_model.name,
        }


def clear_scene_data() -> None:
    """Empty every scene registry."""
    clear_items()
    clear_lights()
    clear_colorations()


def load_scene(scene: Scene) -> ShadingModel:
    """Validate a scene and upload it into the Taichi fields.

    Previously loaded data is discarded.

    Returns:
        The shading model the scene must be rendered with.

    Raises:
        ValueError: If the scene fails validation.
        RuntimeError: If a registry capacity is exceeded.
    """
    scene.validate()
    clear_scene_data()

    uploaded_textures: dict[int, int] = {}
    for item in scene.items:
        if isinstance(item, Sphere):
            slot = add_sphere(item.center, item.radius)
        else:
            slot = add_plane(item.origin, item.normal)

        material = item.material
        if isinstance(material, UniversalMaterial):
            set_universal_material(slot, material)
        else:
            set_surface_material(slot, material)
        set_coloration(slot, material.coloration, uploaded_textures)

    for light in scene.lights:
        add_light(light)

    model = scene.shading_model
    logger.debug(
        "Loaded scene: %d items, %d lights, %d textures, %s shading",
        len(scene.items),
        len(scene.lights),
        len(uploaded_textures),
        model.name,
    )
    return model
