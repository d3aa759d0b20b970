"""Scene object storage and ray-scene traversal.

This module stores every scene object (spheres and triangle meshes) in
Taichi fields and provides the traversal queries used by the integrator:

- trace: linear search over all objects for the nearest intersection
- trace_any: shadow-ray query, any occluder closer than a given distance
- surface_properties / eval_diffuse_color: per-object dispatch on the
  object kind and diffuse pattern

Objects are kept in insertion order. When two objects report the same hit
distance the one added first wins, so results are deterministic for a
fixed scene.

Mesh data is pooled: all meshes share one vertex field, one texture
coordinate field and one triangle field, and each mesh object records the
offsets and triangle count of its slice.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.materials.material import Material
    >>> from whitted.scene.intersection import add_sphere, clear_scene, trace_ray
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -5.0), 2.0, Material())
    >>> result = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
    >>> result.t
    3.0
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from whitted.core.ray import INFINITY
from whitted.geometry.sphere import Sphere, intersect_sphere, sphere_surface_properties
from whitted.geometry.triangle import intersect_triangle, interpolate_st, triangle_normal
from whitted.materials.material import DiffusePattern, Material
from whitted.materials.texture import checkerboard

# Type aliases for vectors using Taichi's math module
vec3 = tm.vec3
vec2 = tm.vec2


class ObjectKind(IntEnum):
    """Geometric variant of a scene object."""

    SPHERE = 0
    MESH = 1


@ti.dataclass
class SceneHitRecord:
    """Record of the nearest ray-scene intersection.

    Attributes:
        hit: 1 if any object was hit, 0 otherwise.
        t: Distance along the ray to the hit point. Only valid if hit == 1.
        object_id: Index of the hit object, -1 on a miss.
        index: Index of the hit triangle within a mesh (0 for spheres).
        uv: Barycentric coordinates of the hit within the triangle
            ((0, 0) for spheres).
    """

    hit: ti.i32
    t: ti.f32
    object_id: ti.i32
    index: ti.i32
    uv: vec2


# Capacities (preallocated to avoid kernel recompilation)
MAX_OBJECTS = 256
MAX_MESH_VERTICES = 65536
MAX_MESH_TRIANGLES = 65536

# Per-object data: Structure of Arrays layout
object_kinds = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_material_types = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_patterns = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_diffuse_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_kd = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
object_ks = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
object_ior = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
object_specular_exponents = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
num_objects = ti.field(dtype=ti.i32, shape=())

# Sphere geometry, indexed by object id
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
sphere_radii2 = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)

# Mesh slices, indexed by object id
mesh_vertex_offsets = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
mesh_triangle_offsets = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
mesh_triangle_counts = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)

# Pooled mesh data; triangle indices are local to their mesh's vertex slice
mesh_vertices = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MESH_VERTICES)
mesh_st = ti.Vector.field(2, dtype=ti.f32, shape=MAX_MESH_VERTICES)
mesh_triangles = ti.Vector.field(3, dtype=ti.i32, shape=MAX_MESH_TRIANGLES)
num_mesh_vertices = ti.field(dtype=ti.i32, shape=())
num_mesh_triangles = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Scene Storage (Python-side)
# =============================================================================


def clear_scene() -> None:
    """Remove all objects from the scene.

    Resets the object and mesh pool counts to zero. The field data is not
    cleared but will be overwritten when new objects are added.
    """
    num_objects[None] = 0
    num_mesh_vertices[None] = 0
    num_mesh_triangles[None] = 0


def _next_object_index() -> int:
    idx = num_objects[None]
    if idx >= MAX_OBJECTS:
        raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")
    return idx


def _store_material(idx: int, material: Material, pattern: DiffusePattern) -> None:
    color = material.diffuse_color
    object_material_types[idx] = int(material.material_type)
    object_patterns[idx] = int(pattern)
    object_diffuse_colors[idx] = [color[0], color[1], color[2]]
    object_kd[idx] = material.kd
    object_ks[idx] = material.ks
    object_ior[idx] = material.ior
    object_specular_exponents[idx] = material.specular_exponent


def add_sphere(
    center: Sequence[float],
    radius: float,
    material: Material,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere as (x, y, z).
        radius: The radius of the sphere (should be positive).
        material: The material parameters of the sphere.

    Returns:
        The object index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    idx = _next_object_index()
    object_kinds[idx] = int(ObjectKind.SPHERE)
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_radii2[idx] = radius * radius
    _store_material(idx, material, DiffusePattern.SOLID)
    num_objects[None] = idx + 1
    return idx


def add_mesh(
    vertices: Sequence[Sequence[float]],
    indices: Sequence[int],
    st: Sequence[Sequence[float]],
    material: Material,
    pattern: DiffusePattern = DiffusePattern.CHECKERBOARD,
) -> int:
    """Add a triangle mesh to the scene.

    Args:
        vertices: Vertex positions, one (x, y, z) per vertex.
        indices: Flat list of vertex indices, three per triangle.
        st: Texture coordinates, one (s, t) per vertex.
        material: The material parameters of the mesh.
        pattern: How the diffuse color is evaluated. Meshes are
            checkerboard textured unless told otherwise.

    Returns:
        The object index of the added mesh.

    Raises:
        RuntimeError: If the object, vertex or triangle capacity is exceeded.
    """
    idx = _next_object_index()
    vertex_offset = num_mesh_vertices[None]
    triangle_offset = num_mesh_triangles[None]
    num_triangles = len(indices) // 3

    if vertex_offset + len(vertices) > MAX_MESH_VERTICES:
        raise RuntimeError(f"Maximum number of mesh vertices ({MAX_MESH_VERTICES}) exceeded")
    if triangle_offset + num_triangles > MAX_MESH_TRIANGLES:
        raise RuntimeError(f"Maximum number of mesh triangles ({MAX_MESH_TRIANGLES}) exceeded")

    for k, (vertex, coord) in enumerate(zip(vertices, st)):
        mesh_vertices[vertex_offset + k] = [vertex[0], vertex[1], vertex[2]]
        mesh_st[vertex_offset + k] = [coord[0], coord[1]]
    for k in range(num_triangles):
        mesh_triangles[triangle_offset + k] = [
            int(indices[3 * k]),
            int(indices[3 * k + 1]),
            int(indices[3 * k + 2]),
        ]

    object_kinds[idx] = int(ObjectKind.MESH)
    mesh_vertex_offsets[idx] = vertex_offset
    mesh_triangle_offsets[idx] = triangle_offset
    mesh_triangle_counts[idx] = num_triangles
    _store_material(idx, material, pattern)

    num_mesh_vertices[None] = vertex_offset + len(vertices)
    num_mesh_triangles[None] = triangle_offset + num_triangles
    num_objects[None] = idx + 1
    return idx


def get_object_count() -> int:
    """Get the number of objects in the scene."""
    return int(num_objects[None])


def get_mesh_triangle_count() -> int:
    """Get the total number of mesh triangles in the scene."""
    return int(num_mesh_triangles[None])


# =============================================================================
# Per-Object Queries (Taichi-side)
# =============================================================================


@ti.func
def _stored_sphere(obj: ti.i32) -> Sphere:
    return Sphere(center=sphere_centers[obj], radius=sphere_radii[obj], radius2=sphere_radii2[obj])


@ti.func
def _triangle_vertices(obj: ti.i32, index: ti.i32):
    """Fetch the three vertex positions of a mesh triangle."""
    base = mesh_vertex_offsets[obj]
    tri = mesh_triangles[mesh_triangle_offsets[obj] + index]
    return (
        mesh_vertices[base + tri[0]],
        mesh_vertices[base + tri[1]],
        mesh_vertices[base + tri[2]],
    )


@ti.func
def _triangle_st(obj: ti.i32, index: ti.i32):
    """Fetch the three texture coordinates of a mesh triangle."""
    base = mesh_vertex_offsets[obj]
    tri = mesh_triangles[mesh_triangle_offsets[obj] + index]
    return mesh_st[base + tri[0]], mesh_st[base + tri[1]], mesh_st[base + tri[2]]


@ti.func
def intersect_object(obj: ti.i32, ray_origin: vec3, ray_direction: vec3, t_near: ti.f32):
    """Intersect a ray with one scene object.

    Meshes scan every triangle and keep the closest hit.

    Args:
        obj: Object index.
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_near: Only hits strictly closer than this are reported.

    Returns:
        Tuple of (hit, t, index, uv).
    """
    hit = 0
    t = t_near
    index = 0
    uv = vec2(0.0, 0.0)

    if object_kinds[obj] == int(ObjectKind.SPHERE):
        sphere = _stored_sphere(obj)
        hit, t, index, uv = intersect_sphere(ray_origin, ray_direction, sphere, t_near)
    else:
        for k in range(mesh_triangle_counts[obj]):
            v0, v1, v2 = _triangle_vertices(obj, k)
            tri_hit, tri_t, u, v = intersect_triangle(v0, v1, v2, ray_origin, ray_direction)
            if tri_hit == 1 and tri_t < t:
                hit = 1
                t = tri_t
                index = k
                uv = vec2(u, v)

    return hit, t, index, uv


@ti.func
def surface_properties(obj: ti.i32, hit_point: vec3, ray_direction: vec3, index: ti.i32, uv: vec2):
    """Compute the surface normal and texture coordinates at a hit.

    Args:
        obj: Object index.
        hit_point: The intersection point.
        ray_direction: The direction of the ray that produced the hit.
        index: Triangle index within a mesh (ignored for spheres).
        uv: Barycentric coordinates within the triangle.

    Returns:
        Tuple of (normal, st). Sphere normals point away from the center;
        mesh normals are flat per triangle.
    """
    normal = vec3(0.0, 0.0, 0.0)
    st = vec2(0.0, 0.0)

    if object_kinds[obj] == int(ObjectKind.SPHERE):
        sphere = _stored_sphere(obj)
        normal, st = sphere_surface_properties(sphere, hit_point)
    else:
        v0, v1, v2 = _triangle_vertices(obj, index)
        st0, st1, st2 = _triangle_st(obj, index)
        normal = triangle_normal(v0, v1, v2)
        st = interpolate_st(st0, st1, st2, uv)

    return normal, st


@ti.func
def eval_diffuse_color(obj: ti.i32, st: vec2) -> vec3:
    """Evaluate an object's diffuse color at texture coordinates st."""
    color = object_diffuse_colors[obj]
    if object_patterns[obj] == int(DiffusePattern.CHECKERBOARD):
        color = checkerboard(st)
    return color


@ti.func
def get_material_type(obj: ti.i32) -> ti.i32:
    """Get the MaterialType value of an object."""
    return object_material_types[obj]


# =============================================================================
# Scene Traversal
# =============================================================================


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(hit=0, t=INFINITY, object_id=-1, index=0, uv=vec2(0.0, 0.0))


@ti.func
def trace(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest object hit by a ray.

    Tests every object in insertion order. A later object replaces the
    current best only if it is strictly closer.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record.
    """
    result = _make_miss_record()
    closest_t = INFINITY

    for obj in range(num_objects[None]):
        hit, t, index, uv = intersect_object(obj, ray_origin, ray_direction, closest_t)
        if hit == 1:
            closest_t = t
            result = SceneHitRecord(hit=1, t=t, object_id=obj, index=index, uv=uv)

    return result


@ti.func
def trace_any(ray_origin: vec3, ray_direction: vec3, max_distance2: ti.f32) -> ti.i32:
    """Test whether any object blocks a ray before a given distance.

    Used for shadow rays: an object occludes the light only if it is hit
    at a distance t with t * t < max_distance2.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (normalized).
        max_distance2: Squared distance to the light.

    Returns:
        1 if an occluder was found, 0 otherwise.
    """
    occluded = 0
    for obj in range(num_objects[None]):
        if occluded == 0:
            hit, t, _index, _uv = intersect_object(obj, ray_origin, ray_direction, INFINITY)
            if hit == 1 and t * t < max_distance2:
                occluded = 1
    return occluded


# =============================================================================
# Python Query API
# =============================================================================


@dataclass
class TraceResult:
    """Nearest hit of a ray, read back to Python.

    Attributes:
        object_id: Index of the hit object.
        t: Distance along the ray to the hit point.
        index: Triangle index within a mesh (0 for spheres).
        uv: Barycentric coordinates within the triangle.
        normal: Surface normal at the hit point.
        st: Texture coordinates at the hit point.
    """

    object_id: int
    t: float
    index: int
    uv: tuple[float, float]
    normal: tuple[float, float, float]
    st: tuple[float, float]


_query_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_record = SceneHitRecord.field(shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_st = ti.Vector.field(2, dtype=ti.f32, shape=())


@ti.kernel
def _trace_query():
    # Serialized so the traversal loops inside run in order
    ti.loop_config(serialize=True)
    for _ in range(1):
        origin = _query_origin[None]
        direction = _query_direction[None]
        rec = trace(origin, direction)
        _query_record[None] = rec
        if rec.hit == 1:
            normal, st = surface_properties(
                rec.object_id, origin + rec.t * direction, direction, rec.index, rec.uv
            )
            _query_normal[None] = normal
            _query_st[None] = st


def trace_ray(
    origin: Sequence[float],
    direction: Sequence[float],
) -> TraceResult | None:
    """Find the nearest object hit by a ray from Python.

    Args:
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z). Used as given.

    Returns:
        A TraceResult for the nearest hit, or None if nothing is hit.
    """
    _query_origin[None] = [origin[0], origin[1], origin[2]]
    _query_direction[None] = [direction[0], direction[1], direction[2]]
    _trace_query()

    rec = _query_record[None]
    if rec.hit == 0:
        return None

    normal = _query_normal[None]
    st = _query_st[None]
    return TraceResult(
        object_id=int(rec.object_id),
        t=float(rec.t),
        index=int(rec.index),
        uv=(float(rec.uv[0]), float(rec.uv[1])),
        normal=(float(normal[0]), float(normal[1]), float(normal[2])),
        st=(float(st[0]), float(st[1])),
    )
