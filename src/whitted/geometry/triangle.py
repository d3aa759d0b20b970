"""Triangle primitive with Moller-Trumbore ray-triangle intersection.

Triangles are only ever rendered as part of a mesh: the scene stores mesh
vertices, per-vertex texture coordinates and per-triangle index triples in
Taichi fields, and the scene traversal feeds each triangle's vertices
through the functions in this module.

Intersection uses the Moller-Trumbore algorithm with back-face culling:
triangles whose winding faces away from the ray (det <= 0) are never hit.
The barycentric tests are performed on values scaled by det so that the
single division happens only once a hit is certain.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.geometry.triangle import intersect_triangle
    >>> # Use intersect_triangle within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import normalize

# Type aliases for vectors using Taichi's math module
vec3 = tm.vec3
vec2 = tm.vec2


@ti.func
def intersect_triangle(
    v0: vec3,
    v1: vec3,
    v2: vec3,
    ray_origin: vec3,
    ray_direction: vec3,
):
    """Test a ray against a single counter-clockwise triangle.

    Args:
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex.
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.

    Returns:
        Tuple of (hit, t, u, v) where (u, v) are the barycentric weights of
        v1 and v2 at the hit point. Hits behind the ray origin are rejected.
    """
    edge1 = v1 - v0
    edge2 = v2 - v0
    pvec = tm.cross(ray_direction, edge2)
    det = tm.dot(edge1, pvec)

    hit = 0
    t = 0.0
    u = 0.0
    v = 0.0

    # Back-facing and parallel triangles are both treated as misses
    if det > 0.0:
        tvec = ray_origin - v0
        u = tm.dot(tvec, pvec)
        if u >= 0.0 and u <= det:
            qvec = tm.cross(tvec, edge1)
            v = tm.dot(ray_direction, qvec)
            if v >= 0.0 and u + v <= det:
                inv_det = 1.0 / det
                t = tm.dot(edge2, qvec) * inv_det
                u *= inv_det
                v *= inv_det
                if t >= 0.0:
                    hit = 1

    return hit, t, u, v


@ti.func
def triangle_normal(v0: vec3, v1: vec3, v2: vec3) -> vec3:
    """Flat geometric normal of a triangle.

    Computed from the normalized edges v1 - v0 and v2 - v1, so the normal
    faces the side from which the vertices appear counter-clockwise.
    """
    e0 = normalize(v1 - v0)
    e1 = normalize(v2 - v1)
    return normalize(tm.cross(e0, e1))


@ti.func
def interpolate_st(st0: vec2, st1: vec2, st2: vec2, uv: vec2) -> vec2:
    """Barycentric interpolation of per-vertex texture coordinates.

    Args:
        st0: Texture coordinates at v0.
        st1: Texture coordinates at v1.
        st2: Texture coordinates at v2.
        uv: Barycentric weights (u, v) of v1 and v2.

    Returns:
        st0 * (1 - u - v) + st1 * u + st2 * v
    """
    return st0 * (1.0 - uv.x - uv.y) + st1 * uv.x + st2 * uv.y
