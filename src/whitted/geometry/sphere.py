"""Sphere primitive with analytic ray-sphere intersection.

The ray-sphere intersection is found by solving

    |origin + t * direction - center|^2 = radius^2

which expands to the quadratic a*t^2 + b*t + c = 0 with

    a = dot(direction, direction)
    b = 2 * dot(direction, origin - center)
    c = dot(origin - center, origin - center) - radius^2

The roots are computed with the cancellation-free form
q = -0.5 * (b + sign(b) * sqrt(discriminant)), t0 = q / a, t1 = c / q.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.geometry.sphere import make_sphere, intersect_sphere
    >>> # Use intersect_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import normalize

# Type aliases for vectors using Taichi's math module
vec3 = tm.vec3
vec2 = tm.vec2


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        radius2: radius * radius, derived once when the sphere is built.
    """

    center: vec3
    radius: ti.f32
    radius2: ti.f32


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere, deriving the cached squared radius."""
    return Sphere(center=center, radius=radius, radius2=radius * radius)


@ti.func
def solve_quadratic(a: ti.f32, b: ti.f32, c: ti.f32):
    """Solve a*t^2 + b*t + c = 0 for real roots.

    Args:
        a: Quadratic coefficient.
        b: Linear coefficient.
        c: Constant term.

    Returns:
        Tuple of (found, t0, t1) where found is 1 if real roots exist and
        t0 <= t1. A tangent ray yields t0 == t1.
    """
    discriminant = b * b - 4.0 * a * c
    found = 0
    t0 = 0.0
    t1 = 0.0

    if discriminant >= 0.0:
        found = 1
        if discriminant == 0.0:
            t0 = -0.5 * b / a
            t1 = t0
        else:
            sqrt_d = ti.sqrt(discriminant)
            q = -0.5 * (b - sqrt_d)
            if b > 0.0:
                q = -0.5 * (b + sqrt_d)
            t0 = q / a
            t1 = c / q

        if t0 > t1:
            temp = t0
            t0 = t1
            t1 = temp

    return found, t0, t1


@ti.func
def intersect_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_near: ti.f32,
):
    """Test a ray against a sphere.

    Hits behind the ray origin are rejected; when only the nearer root is
    behind the origin (the origin is inside the sphere) the far root is
    used. Hits at or beyond t_near are rejected so callers can pass the
    closest distance found so far.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        sphere: The sphere to test.
        t_near: Current nearest hit distance.

    Returns:
        Tuple of (hit, t, index, uv). Spheres have a single primitive, so
        index is always 0 and uv is always (0, 0).
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    b = 2.0 * tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius2

    found, t0, t1 = solve_quadratic(a, b, c)

    hit = 0
    t = 0.0
    if found == 1:
        t = t0
        if t < 0.0:
            t = t1
        if t >= 0.0 and t < t_near:
            hit = 1

    return hit, t, 0, vec2(0.0, 0.0)


@ti.func
def sphere_surface_properties(sphere: Sphere, hit_point: vec3):
    """Compute the outward unit normal at a point on the sphere.

    Returns:
        Tuple of (normal, st). Spheres carry no texture coordinates, so st
        is always (0, 0).
    """
    return normalize(hit_point - sphere.center), vec2(0.0, 0.0)
