"""Ray-tracing integrators and the per-sample rendering kernel.

Two integrators share the render target and the sampling kernel:

``cast_ray`` (direct-lit scenes) evaluates, for each ray,

    miss        -> background(direction)
    diffuse     -> diffuse(p)
    reflective  -> diffuse(p) * (1 - r) + cast(reflection) * r
    refractive  -> (cast(reflection) * kr + cast(transmission) * (1 - kr))
                   * transparency * coloration(p)

and returns black for any ray at depth >= recursion_limit. Taichi functions
cannot recurse, so the recursion is unrolled onto a fixed-size stack of
pending rays, each carrying the weight its radiance contributes to the
pixel. Every rule above is linear in the recursive results, so summing
``weight * local term`` over all popped rays gives the recursive value.

``trace_path`` (path-traced scenes) follows one stochastic bounce per depth:

    radiance = emission + attenuation * cast(continuation)

with the random stream of the sample threaded through every scatter.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.core.config import RenderSettings
    >>> from glimmer.core.integrator import render_image, setup_render_target
    >>> from glimmer.scene.manager import load_scene
    >>> model = load_scene(scene)
    >>> setup_render_target(scene.width, scene.height)
    >>> render_image(scene.fov, model, RenderSettings(), num_samples=1)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from glimmer.camera.primary import PIXEL_CENTER, fov_adjustment, primary_ray
from glimmer.core.config import (
    MAX_RECURSION_LIMIT,
    BackgroundPolicy,
    RenderSettings,
    ShadingModel,
)
from glimmer.core.ray import create_reflection, create_transmission, fresnel, offset_origin
from glimmer.core.sampling import next_random, seed_state
from glimmer.lights.registry import light_sample, num_lights
from glimmer.materials.coloration import coloration_at
from glimmer.materials.surface import (
    SurfaceType,
    surface_albedos,
    surface_indices,
    surface_reflectivities,
    surface_transparencies,
    surface_types,
)
from glimmer.materials.universal import emitted, scatter_universal
from glimmer.scene.intersection import occluded, surface_normal, texture_coords, trace

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Pending-ray stack depth: one pending sibling per level plus the top
STACK_SIZE = MAX_RECURSION_LIMIT + 2

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Running average of linear radiance, indexed [x, y] with y = 0 at the top
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Running average of primary-ray hits (becomes the alpha channel)
_coverage_buffer = ti.field(dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the buffers.

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Zero the accumulation buffers."""
    _color_buffer.fill(0.0)
    _coverage_buffer.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Return the active ``(width, height)``."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Shading
# =============================================================================


@ti.func
def background(direction: vec3, policy: ti.i32) -> vec3:
    """Radiance of a ray that leaves the scene."""
    color = vec3(0.0, 0.0, 0.0)
    if policy == int(BackgroundPolicy.SKY):
        t = 0.5 * (direction.y + 1.0)
        color = (1.0 - t) * vec3(1.0, 1.0, 1.0) + t * vec3(0.5, 0.7, 1.0)
    return color


@ti.func
def shade_diffuse(slot: ti.i32, point: vec3, normal: vec3, uv: tm.vec2, bias: ti.f32) -> vec3:
    """Lambertian response of a direct-lit surface to every scene light.

    Each light contributes ``color * intensity * max(0, n . l)`` unless a
    shadow ray toward it hits an item nearer than the light. The sum is
    scaled by ``albedo / pi`` and the surface coloration.
    """
    shadow_origin = point + normal * bias
    light_sum = vec3(0.0, 0.0, 0.0)
    for light_idx in range(num_lights[None]):
        direction, distance, intensity, color = light_sample(light_idx, point)
        cos_theta = tm.max(tm.dot(normal, direction), 0.0)
        if cos_theta > 0.0:
            if occluded(shadow_origin, direction, distance) == 0:
                light_sum += color * intensity * cos_theta
    albedo = surface_albedos[slot]
    return light_sum * (albedo / tm.pi) * coloration_at(slot, uv)


@ti.func
def cast_ray(origin: vec3, direction: vec3, recursion_limit: ti.i32, bias: ti.f32, policy: ti.i32):
    """Whitted-style radiance along a ray.

    Args:
        origin: Ray origin.
        direction: Ray direction (unit length).
        recursion_limit: Rays at this depth or deeper contribute black.
        bias: Secondary and shadow ray origin offset.
        policy: ``BackgroundPolicy`` value for escaping rays.

    Returns:
        A tuple ``(color, covered)`` where ``covered`` is 1 if the ray
        itself hit an item.
    """
    stack_origin = ti.Matrix.zero(ti.f32, STACK_SIZE, 3)
    stack_direction = ti.Matrix.zero(ti.f32, STACK_SIZE, 3)
    stack_weight = ti.Matrix.zero(ti.f32, STACK_SIZE, 3)
    stack_depth = ti.Vector.zero(ti.i32, STACK_SIZE)

    for k in ti.static(range(3)):
        stack_origin[0, k] = origin[k]
        stack_direction[0, k] = direction[k]
        stack_weight[0, k] = 1.0
    stack_depth[0] = 0
    top = 1

    color = vec3(0.0, 0.0, 0.0)
    covered = 0

    while top > 0:
        top -= 1
        ray_origin = vec3(stack_origin[top, 0], stack_origin[top, 1], stack_origin[top, 2])
        ray_dir = vec3(stack_direction[top, 0], stack_direction[top, 1], stack_direction[top, 2])
        weight = vec3(stack_weight[top, 0], stack_weight[top, 1], stack_weight[top, 2])
        depth = stack_depth[top]

        # Up to two continuation rays per hit: reflection and transmission
        child_origin = ti.Matrix.zero(ti.f32, 2, 3)
        child_direction = ti.Matrix.zero(ti.f32, 2, 3)
        child_weight = ti.Matrix.zero(ti.f32, 2, 3)
        num_children = 0

        if depth < recursion_limit:
            hit = trace(ray_origin, ray_dir)
            if hit.hit == 0:
                color += weight * background(ray_dir, policy)
            else:
                if depth == 0:
                    covered = 1
                slot = hit.item
                point = ray_origin + hit.t * ray_dir
                normal = surface_normal(slot, point)
                uv = texture_coords(slot, point)
                surface = surface_types[slot]

                if surface == int(SurfaceType.DIFFUSE):
                    color += weight * shade_diffuse(slot, point, normal, uv, bias)

                elif surface == int(SurfaceType.REFLECTIVE):
                    r = surface_reflectivities[slot]
                    color += weight * shade_diffuse(slot, point, normal, uv, bias) * (1.0 - r)
                    reflection = create_reflection(normal, ray_dir, point, bias)
                    for k in ti.static(range(3)):
                        child_origin[0, k] = reflection.origin[k]
                        child_direction[0, k] = reflection.direction[k]
                        child_weight[0, k] = weight[k] * r
                    num_children = 1

                else:
                    index = surface_indices[slot]
                    surface_color = coloration_at(slot, uv)
                    tinted = weight * surface_transparencies[slot] * surface_color
                    kr = fresnel(ray_dir, normal, index)
                    reflection = create_reflection(normal, ray_dir, point, bias)
                    for k in ti.static(range(3)):
                        child_origin[0, k] = reflection.origin[k]
                        child_direction[0, k] = reflection.direction[k]
                        child_weight[0, k] = tinted[k] * kr
                    num_children = 1
                    if kr < 1.0:
                        ok, t_origin, t_dir = create_transmission(normal, ray_dir, point, bias, index)
                        if ok == 1:
                            for k in ti.static(range(3)):
                                child_origin[1, k] = t_origin[k]
                                child_direction[1, k] = t_dir[k]
                                child_weight[1, k] = tinted[k] * (1.0 - kr)
                            num_children = 2

        for c in ti.static(range(2)):
            if c < num_children and top < STACK_SIZE:
                w = vec3(child_weight[c, 0], child_weight[c, 1], child_weight[c, 2])
                if w.max() > 0.0:
                    for k in ti.static(range(3)):
                        stack_origin[top, k] = child_origin[c, k]
                        stack_direction[top, k] = child_direction[c, k]
                        stack_weight[top, k] = child_weight[c, k]
                    stack_depth[top] = depth + 1
                    top += 1

    return color, covered


@ti.func
def trace_path(
    origin: vec3,
    direction: vec3,
    recursion_limit: ti.i32,
    bias: ti.f32,
    policy: ti.i32,
    state: ti.u32,
):
    """Stochastic scatter/emit radiance along a ray.

    Returns:
        A tuple ``(radiance, covered, new_state)``.
    """
    s = state
    ray_origin = origin
    ray_dir = direction
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    covered = 0

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for depth in range(MAX_RECURSION_LIMIT):
        if active == 1:
            if depth >= recursion_limit:
                active = 0
            else:
                hit = trace(ray_origin, ray_dir)
                if hit.hit == 0:
                    radiance += throughput * background(ray_dir, policy)
                    active = 0
                else:
                    if depth == 0:
                        covered = 1
                    slot = hit.item
                    point = ray_origin + hit.t * ray_dir
                    normal = surface_normal(slot, point)
                    uv = texture_coords(slot, point)

                    radiance += throughput * emitted(slot)

                    scattered, new_dir, attenuation, s = scatter_universal(
                        slot, ray_dir, normal, uv, s
                    )
                    if scattered == 0:
                        # Light sources end the path
                        active = 0
                    else:
                        throughput *= attenuation
                        ray_origin = offset_origin(point, normal, new_dir, bias)
                        ray_dir = new_dir

    return radiance, covered, s


@ti.func
def render_sample_impl(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    fov_adj: ti.f32,
    model: ti.i32,
    recursion_limit: ti.i32,
    bias: ti.f32,
    policy: ti.i32,
    jitter: ti.i32,
    seed: ti.i32,
    sample_index: ti.i32,
):
    """Render one sample of one pixel.

    Returns:
        A tuple ``(color, covered)``.
    """
    state = seed_state(pixel_j * width + pixel_i, sample_index, seed)
    jitter_x = PIXEL_CENTER
    jitter_y = PIXEL_CENTER
    if jitter == 1:
        jitter_x, state = next_random(state)
        jitter_y, state = next_random(state)
    ray = primary_ray(pixel_i, pixel_j, width, height, fov_adj, jitter_x, jitter_y)

    color = vec3(0.0, 0.0, 0.0)
    covered = 0
    if model == int(ShadingModel.DIRECT):
        color, covered = cast_ray(ray.origin, ray.direction, recursion_limit, bias, policy)
    else:
        color, covered, state = trace_path(
            ray.origin, ray.direction, recursion_limit, bias, policy, state
        )
    return color, covered


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_pass(
    width: ti.i32,
    height: ti.i32,
    fov_adj: ti.f32,
    model: ti.i32,
    recursion_limit: ti.i32,
    bias: ti.f32,
    policy: ti.i32,
    jitter: ti.i32,
    seed: ti.i32,
    sample_index: ti.i32,
):
    """Render one sample for every pixel and fold it into the running average.

    Each pixel is written by exactly one iteration of the parallel loop.
    """
    for i, j in ti.ndrange(width, height):
        color, covered = render_sample_impl(
            i, j, width, height, fov_adj, model, recursion_limit, bias, policy, jitter, seed,
            sample_index,
        )

        # Check for NaN/Inf and replace with zero
        for c in ti.static(range(3)):
            if tm.isnan(color[c]) or tm.isinf(color[c]):
                color[c] = 0.0

        _sample_count[i, j] += 1
        n = ti.cast(_sample_count[i, j], ti.f32)

        # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
        _color_buffer[i, j] += (color - _color_buffer[i, j]) / n
        _coverage_buffer[i, j] += (ti.cast(covered, ti.f32) - _coverage_buffer[i, j]) / n


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    fov_adj: ti.f32,
    model: ti.i32,
    recursion_limit: ti.i32,
    bias: ti.f32,
    policy: ti.i32,
    jitter: ti.i32,
    seed: ti.i32,
    sample_index: ti.i32,
) -> vec3:
    color, _ = render_sample_impl(
        pixel_i, pixel_j, width, height, fov_adj, model, recursion_limit, bias, policy, jitter,
        seed, sample_index,
    )
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def _kernel_settings(fov: float, model: ShadingModel, settings: RenderSettings) -> tuple:
    return (
        fov_adjustment(fov),
        int(model),
        settings.recursion_limit,
        settings.shadow_bias,
        int(settings.background),
        int(settings.jitter),
        settings.seed,
    )


def render_image(
    fov: float,
    model: ShadingModel,
    settings: RenderSettings,
    num_samples: int = 1,
) -> None:
    """Accumulate ``num_samples`` more samples for every pixel.

    Each sample is one parallel pass over the image. Sample indices continue
    from the samples already accumulated, so repeated calls extend the same
    random sequence.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    params = _kernel_settings(fov, model, settings)
    start = get_total_samples()
    for sample_index in range(start, start + num_samples):
        _render_one_pass(width, height, *params, sample_index)


def render_sample(
    pixel_i: int,
    pixel_j: int,
    fov: float,
    model: ShadingModel,
    settings: RenderSettings,
    sample_index: int = 0,
) -> tuple[float, float, float]:
    """Render one sample of one pixel without touching the buffers.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        fov: Field of view in degrees.
        model: Shading model of the loaded scene.
        settings: Integrator settings.
        sample_index: Index selecting the sample's random stream.

    Returns:
        The linear ``(r, g, b)`` radiance.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    params = _kernel_settings(fov, model, settings)
    color = _render_single_pixel(pixel_i, pixel_j, width, height, *params, sample_index)
    return (float(color[0]), float(color[1]), float(color[2]))


def get_total_samples() -> int:
    """Number of samples accumulated per pixel so far.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_linear_image_numpy() -> npt.NDArray[np.float32]:
    """The averaged, unclamped radiance as an (height, width, 3) array.

    Row 0 is the top of the image.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(full_image[:width, :height, :], (1, 0, 2))
    return np.ascontiguousarray(image, dtype=np.float32)


def get_coverage_numpy() -> npt.NDArray[np.float32]:
    """Fraction of samples whose primary ray hit an item, as (height, width).

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    coverage = _coverage_buffer.to_numpy()[:width, :height]
    return np.ascontiguousarray(coverage.T, dtype=np.float32)
