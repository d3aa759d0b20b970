"""Ray data structure and vector utilities for the Whitted ray tracer.

This module provides the fundamental Ray dataclass and the small set of
vector operations the shading pipeline is built on. All operations are
Taichi functions so they can be inlined into the traversal and shading
kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import numpy as np
import taichi as ti
import taichi.math as tm

# Type aliases for vectors using Taichi's math module
vec3 = tm.vec3
vec2 = tm.vec2

# Sentinel for "no intersection yet" distances (largest finite f32)
INFINITY = float(np.finfo(np.float32).max)


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Expected to be
            normalized by every caller in the shading pipeline.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Used for distance comparisons (e.g. occluder vs. light distance) where
    the square root is unnecessary.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v. A zero-length vector is
        returned unchanged instead of producing NaNs.
    """
    result = v
    len2 = tm.dot(v, v)
    if len2 > 0.0:
        result = v / ti.sqrt(len2)
    return result


@ti.func
def mix(a: vec3, b: vec3, t: ti.f32) -> vec3:
    """Linearly interpolate between a (t = 0) and b (t = 1)."""
    return a * (1.0 - t) + b * t


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes I - 2 (I . N) N. The angle between the result and the normal
    equals the angle of incidence, so dot(reflect(I, N), N) == -dot(I, N).

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def offset_ray_origin(point: vec3, normal: vec3, direction: vec3, bias: ti.f32) -> vec3:
    """Offset a secondary ray origin to avoid self-intersection.

    Pushes the point by bias along the normal, onto the side of the surface
    the new direction travels into (below the surface for rays that enter
    it, above it otherwise).

    Args:
        point: The intersection point.
        normal: The geometric surface normal.
        direction: The direction of the secondary ray.
        bias: The offset distance.

    Returns:
        The offset origin point.
    """
    result = point + normal * bias
    if tm.dot(direction, normal) < 0.0:
        result = point - normal * bias
    return result
