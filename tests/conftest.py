"""Pytest configuration for glimmer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear the scene registries and the render target around each test."""
    # Import here so the fields are created after ti.init()
    from glimmer.core.integrator import clear_render_target
    from glimmer.scene.manager import clear_scene_data

    def _clear_all():
        clear_scene_data()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def red_material():
    """A plain red diffuse material."""
    from glimmer.core.color import Color
    from glimmer.materials.coloration import SolidColor
    from glimmer.materials.surface import Material

    return Material(coloration=SolidColor(Color(1.0, 0.0, 0.0)), albedo=0.18)


@pytest.fixture
def red_sphere_scene(red_material):
    """An 8x4 scene with a red sphere covering the four central pixels, lit along -z."""
    from glimmer.core.color import Color
    from glimmer.core.vector import Point, Vector3
    from glimmer.geometry.sphere import Sphere
    from glimmer.lights.directional import DirectionalLight
    from glimmer.scene.manager import Scene

    scene = Scene(width=8, height=4, fov=90.0)
    scene.add(Sphere(center=Point(0.0, 0.0, -5.0), radius=2.0, material=red_material))
    scene.add_light(
        DirectionalLight(
            direction=Vector3(0.0, 0.0, -1.0), color=Color(1.0, 1.0, 1.0), intensity=20.0
        )
    )
    return scene
