"""Ray data structure and the vector math used by shading.

Everything here runs inside Taichi kernels. Secondary rays are built with
``create_reflection`` and ``create_transmission``; the split between the two
at a dielectric boundary is given by ``fresnel``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def point() -> vec3:
    ...     ray = Ray(origin=vec3(0.0), direction=vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of travel (vec3, normalized).
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Return the point ``origin + t * direction``."""
    return ray.origin + t * ray.direction


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def normalize(v: vec3) -> vec3:
    return tm.normalize(v)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if every component of ``v`` is close to zero."""
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror ``incident`` about ``normal`` (which must be unit length)."""
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def offset_origin(point: vec3, normal: vec3, direction: vec3, bias: ti.f32) -> vec3:
    """Push a ray origin off the surface it starts on.

    The offset goes along the normal on the side the new ray travels into:
    outward for reflections, inward for transmissions.

    Args:
        point: The hit point.
        normal: The outward surface normal.
        direction: Direction of the ray that will start at ``point``.
        bias: Offset distance.

    Returns:
        The offset origin.
    """
    offset_dir = normal
    if tm.dot(direction, normal) < 0.0:
        offset_dir = -normal
    return point + bias * offset_dir


@ti.func
def create_reflection(normal: vec3, incident: vec3, point: vec3, bias: ti.f32) -> Ray:
    """Build the mirror-reflection ray leaving ``point``."""
    direction = reflect(incident, normal)
    return Ray(origin=offset_origin(point, normal, direction, bias), direction=direction)


@ti.func
def create_transmission(normal: vec3, incident: vec3, point: vec3, bias: ti.f32, index: ti.f32):
    """Build the refracted ray through a dielectric boundary.

    Uses the vector form of Snell's law. The relative index is ``index`` when
    the ray leaves the medium (``incident . normal > 0``) and ``1 / index``
    when it enters; the normal is flipped to face the incident side.

    Args:
        normal: The outward surface normal (unit length).
        incident: The incoming ray direction (unit length).
        point: The hit point.
        bias: Origin offset distance.
        index: Refractive index of the medium behind the surface.

    Returns:
        A tuple ``(ok, origin, direction)``. ``ok`` is 0 under total
        internal reflection, in which case the other two are meaningless.
    """
    ref_n = normal
    eta_t = index
    eta_i = 1.0
    i_dot_n = tm.dot(incident, normal)
    if i_dot_n < 0.0:
        # Outside the surface
        i_dot_n = -i_dot_n
    else:
        # Inside the surface; invert the normal and swap the indices
        ref_n = -normal
        eta_t = 1.0
        eta_i = index

    eta = eta_i / eta_t
    k = 1.0 - (eta * eta) * (1.0 - i_dot_n * i_dot_n)

    ok = 0
    direction = vec3(0.0, 0.0, 0.0)
    origin = point
    if k >= 0.0:
        ok = 1
        direction = tm.normalize((incident + i_dot_n * ref_n) * eta - ref_n * ti.sqrt(k))
        origin = offset_origin(point, normal, direction, bias)
    return ok, origin, direction


@ti.func
def fresnel(incident: vec3, normal: vec3, index: ti.f32) -> ti.f32:
    """Unpolarised Fresnel reflectance at a dielectric boundary.

    Averages the s- and p-polarised reflectances. The media are swapped when
    the ray is leaving the denser medium (``incident . normal > 0``).

    Args:
        incident: The incoming ray direction (unit length).
        normal: The outward surface normal (unit length).
        index: Refractive index of the medium behind the surface.

    Returns:
        The reflected fraction in [0, 1]. Exactly 1.0 under total internal
        reflection.
    """
    i_dot_n = tm.dot(incident, normal)
    eta_i = 1.0
    eta_t = index
    if i_dot_n > 0.0:
        eta_i = index
        eta_t = 1.0

    sin_t = eta_i / eta_t * ti.sqrt(tm.max(1.0 - i_dot_n * i_dot_n, 0.0))
    result = 1.0
    if sin_t <= 1.0:
        cos_t = ti.sqrt(tm.max(1.0 - sin_t * sin_t, 0.0))
        cos_i = ti.abs(i_dot_n)
        r_s = ((eta_t * cos_i) - (eta_i * cos_t)) / ((eta_t * cos_i) + (eta_i * cos_t))
        r_p = ((eta_i * cos_i) - (eta_t * cos_t)) / ((eta_i * cos_i) + (eta_t * cos_t))
        result = (r_s * r_s + r_p * r_p) / 2.0
    return result
