"""Scene module for scene storage, traversal and management.

Components:
    intersection: Object storage in Taichi fields and nearest-hit traversal
    lights: Point light storage
    manager: SceneManager with validation and JSON serialization
    default_scene: The demo scene of two spheres over a checkerboard floor

Scene data is organized for Taichi access:
    - Structure-of-Arrays layout for per-object data
    - Pooled mesh vertex, texture coordinate and triangle arrays
"""

from .default_scene import create_default_scene
from .intersection import (
    MAX_MESH_TRIANGLES,
    MAX_MESH_VERTICES,
    MAX_OBJECTS,
    ObjectKind,
    SceneHitRecord,
    TraceResult,
    add_mesh,
    add_sphere,
    clear_scene,
    get_mesh_triangle_count,
    get_object_count,
    trace,
    trace_any,
    trace_ray,
)
from .lights import MAX_LIGHTS, add_light, clear_lights, get_light_count
from .manager import LightInfo, MeshInfo, SceneConfig, SceneManager, SphereInfo

__all__ = [
    # Intersection module
    "ObjectKind",
    "SceneHitRecord",
    "TraceResult",
    "add_sphere",
    "add_mesh",
    "clear_scene",
    "get_object_count",
    "get_mesh_triangle_count",
    "trace",
    "trace_any",
    "trace_ray",
    "MAX_OBJECTS",
    "MAX_MESH_VERTICES",
    "MAX_MESH_TRIANGLES",
    # Lights module
    "add_light",
    "clear_lights",
    "get_light_count",
    "MAX_LIGHTS",
    # Manager module
    "SceneManager",
    "SphereInfo",
    "MeshInfo",
    "LightInfo",
    "SceneConfig",
    # Default scene
    "create_default_scene",
]
