"""Scene manager for building and serializing scenes.

This module provides a high-level scene management API on top of the
object and light storage in Taichi fields. It validates parameters before
anything reaches the fields, and keeps a Python-side record of every object
and light so a scene can be exported and reloaded.

The SceneManager maintains:
- Ordered object records (spheres and meshes) with their materials
- Ordered light records
- Scene serialization to dictionaries and JSON files

Object order matters: when two objects are hit at exactly the same
distance, the one added first wins.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.materials.material import Material, MaterialType
    >>> from whitted.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_sphere((0, 0, -5), 1.0, Material(diffuse_color=(0.6, 0.7, 0.8)))
    0
    >>> scene.add_light((0, 10, 0), 1.0)
    0
"""

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from whitted.core.options import RenderOptions
from whitted.materials.material import DiffusePattern, Material
from whitted.scene.intersection import (
    MAX_MESH_TRIANGLES,
    MAX_MESH_VERTICES,
    MAX_OBJECTS,
    add_mesh,
    add_sphere,
    clear_scene,
    get_object_count,
)
from whitted.scene.lights import MAX_LIGHTS, add_light, clear_lights, get_light_count

logger = logging.getLogger(__name__)

Vector3 = tuple[float, float, float]
Vector2 = tuple[float, float]


def _as_vec3(values: Sequence[float], name: str) -> Vector3:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


def _as_vec2(values: Sequence[float], name: str) -> Vector2:
    if len(values) != 2:
        raise ValueError(f"{name} must have 2 components, got {len(values)}")
    return (float(values[0]), float(values[1]))


def _check_sphere(center: Sequence[float], radius: float, material: Material) -> Vector3:
    center_vec = _as_vec3(center, "Sphere center")
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    material.validate()
    return center_vec


def _check_mesh(
    vertices: Sequence[Sequence[float]],
    indices: Sequence[int],
    st: Sequence[Sequence[float]] | None,
    material: Material,
) -> tuple[list[Vector3], list[int], list[Vector2]]:
    vertex_list = [_as_vec3(v, "Mesh vertex") for v in vertices]
    if st is None:
        st_list = [(0.0, 0.0)] * len(vertex_list)
    else:
        st_list = [_as_vec2(coord, "Texture coordinate") for coord in st]
    index_list = [int(i) for i in indices]

    if not index_list:
        raise ValueError("Mesh must contain at least one triangle")
    if len(index_list) % 3 != 0:
        raise ValueError(f"Mesh index count must be a multiple of 3, got {len(index_list)}")
    if len(st_list) != len(vertex_list):
        raise ValueError(
            f"Mesh needs one texture coordinate per vertex: "
            f"{len(st_list)} coordinates for {len(vertex_list)} vertices"
        )
    for i in index_list:
        if i < 0 or i >= len(vertex_list):
            raise ValueError(f"Mesh index {i} out of range for {len(vertex_list)} vertices")
    material.validate()
    return vertex_list, index_list, st_list


def _check_light(
    position: Sequence[float], intensity: float | Sequence[float]
) -> tuple[Vector3, Vector3]:
    position_vec = _as_vec3(position, "Light position")
    if isinstance(intensity, (int, float)):
        intensity_vec: Vector3 = (float(intensity),) * 3
    else:
        intensity_vec = _as_vec3(intensity, "Light intensity")
    if min(intensity_vec) < 0.0:
        raise ValueError(f"Light intensity must be non-negative, got {intensity_vec}")
    return position_vec, intensity_vec


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        object_index: The index in the object storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material: The material of the sphere.
    """

    object_index: int
    center: Vector3
    radius: float
    material: Material


@dataclass
class MeshInfo:
    """Information about a triangle mesh in the scene.

    Attributes:
        object_index: The index in the object storage arrays.
        vertices: Vertex positions.
        indices: Flat vertex index list, three per triangle.
        st: Texture coordinates, one per vertex.
        material: The material of the mesh.
        pattern: How the mesh's diffuse color is evaluated.
    """

    object_index: int
    vertices: list[Vector3]
    indices: list[int]
    st: list[Vector2]
    material: Material
    pattern: DiffusePattern

    @property
    def triangle_count(self) -> int:
        """Number of triangles in the mesh."""
        return len(self.indices) // 3


@dataclass
class LightInfo:
    """Information about a point light in the scene.

    Attributes:
        light_index: The index in the light storage arrays.
        position: The light position.
        intensity: The RGB light intensity.
    """

    light_index: int
    position: Vector3
    intensity: Vector3


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        objects: List of object configurations (spheres and meshes).
        lights: List of light configurations.
    """

    objects: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Scene manager coordinating objects, materials and lights.

    Each manager resets the global scene storage when created, so only one
    manager should be in use at a time.

    Attributes:
        objects: SphereInfo and MeshInfo records in insertion order.
        lights: LightInfo records in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> glass = Material(material_type=MaterialType.REFLECTION_AND_REFRACTION, ior=1.5)
        >>> scene.add_sphere((0.5, -0.5, -8), 1.5, glass)
        >>> scene.add_mesh(
        ...     vertices=[(-5, -3, -6), (5, -3, -6), (5, -3, -16), (-5, -3, -16)],
        ...     indices=[0, 1, 3, 1, 2, 3],
        ...     st=[(0, 0), (1, 0), (1, 1), (0, 1)],
        ... )
        >>> scene.add_light((-20, 70, 20), 0.5)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.objects: list[SphereInfo | MeshInfo] = []
        self.lights: list[LightInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_lights()
        self.objects.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear the entire scene (objects and lights).

        Resets all Taichi fields and internal tracking structures.
        """
        self._clear_all()
        logger.debug("Scene cleared")

    # =========================================================================
    # Object Management
    # =========================================================================

    def add_sphere(
        self,
        center: Sequence[float],
        radius: float,
        material: Material | None = None,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material: The sphere's material. Defaults to Material().

        Returns:
            The object index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of objects is exceeded.
            ValueError: If the radius or material is invalid.
        """
        if material is None:
            material = Material()
        center_vec = _check_sphere(center, radius, material)

        object_index = add_sphere(center_vec, radius, material)
        self.objects.append(
            SphereInfo(
                object_index=object_index,
                center=center_vec,
                radius=float(radius),
                material=material,
            )
        )
        logger.debug(
            "Added sphere %d: center=%s radius=%g type=%s",
            object_index,
            center_vec,
            radius,
            material.material_type.name,
        )
        return object_index

    def add_mesh(
        self,
        vertices: Sequence[Sequence[float]],
        indices: Sequence[int],
        st: Sequence[Sequence[float]] | None = None,
        material: Material | None = None,
        pattern: DiffusePattern = DiffusePattern.CHECKERBOARD,
    ) -> int:
        """Add a triangle mesh to the scene.

        Triangles are one-sided: only triangles whose vertices appear
        counter-clockwise from the ray origin are hit.

        Args:
            vertices: Vertex positions, one (x, y, z) per vertex.
            indices: Flat list of vertex indices, three per triangle.
            st: Texture coordinates, one (s, t) per vertex. Defaults to
                (0, 0) for every vertex.
            material: The mesh's material. Defaults to Material().
            pattern: How the diffuse color is evaluated. Defaults to the
                checkerboard.

        Returns:
            The object index of the added mesh.

        Raises:
            RuntimeError: If the object, vertex or triangle capacity is exceeded.
            ValueError: If the mesh data or material is invalid.
        """
        if material is None:
            material = Material()
        vertex_list, index_list, st_list = _check_mesh(vertices, indices, st, material)

        object_index = add_mesh(vertex_list, index_list, st_list, material, pattern)
        info = MeshInfo(
            object_index=object_index,
            vertices=vertex_list,
            indices=index_list,
            st=st_list,
            material=material,
            pattern=DiffusePattern(pattern),
        )
        self.objects.append(info)
        logger.debug(
            "Added mesh %d: %d vertices, %d triangles, type=%s",
            object_index,
            len(vertex_list),
            info.triangle_count,
            material.material_type.name,
        )
        return object_index

    # =========================================================================
    # Light Management
    # =========================================================================

    def add_light(
        self,
        position: Sequence[float],
        intensity: float | Sequence[float] = 1.0,
    ) -> int:
        """Add a point light to the scene.

        Args:
            position: The light position as (x, y, z).
            intensity: RGB intensity, or a scalar applied to all channels.

        Returns:
            The index of the added light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If any intensity component is negative.
        """
        position_vec, intensity_vec = _check_light(position, intensity)

        light_index = add_light(position_vec, intensity_vec)
        self.lights.append(
            LightInfo(light_index=light_index, position=position_vec, intensity=intensity_vec)
        )
        logger.debug(
            "Added light %d: position=%s intensity=%s", light_index, position_vec, intensity_vec
        )
        return light_index

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_object_count(self) -> int:
        """Get the number of objects in the scene."""
        return get_object_count()

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return sum(1 for obj in self.objects if isinstance(obj, SphereInfo))

    def get_mesh_count(self) -> int:
        """Get the number of meshes in the scene."""
        return sum(1 for obj in self.objects if isinstance(obj, MeshInfo))

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    def get_object_info(self, object_index: int) -> SphereInfo | MeshInfo | None:
        """Get information about an object by index.

        Args:
            object_index: The object index returned by add_sphere/add_mesh.

        Returns:
            The object's record, or None if not found.
        """
        if 0 <= object_index < len(self.objects):
            return self.objects[object_index]
        return None

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all objects and lights.
        """
        config = SceneConfig()

        for obj in self.objects:
            if isinstance(obj, SphereInfo):
                config.objects.append(
                    {
                        "type": "sphere",
                        "center": list(obj.center),
                        "radius": obj.radius,
                        "material": obj.material.to_dict(),
                    }
                )
            else:
                config.objects.append(
                    {
                        "type": "mesh",
                        "vertices": [list(v) for v in obj.vertices],
                        "indices": list(obj.indices),
                        "st": [list(coord) for coord in obj.st],
                        "pattern": obj.pattern.name.lower(),
                        "material": obj.material.to_dict(),
                    }
                )

        for light in self.lights:
            config.lights.append(
                {"position": list(light.position), "intensity": list(light.intensity)}
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Every object and light is validated before the current scene is
        cleared, so an invalid configuration leaves the scene untouched.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data or does
                not fit in the scene capacity.
        """
        staged: list[tuple[str, tuple[Any, ...]]] = []
        vertex_total = 0
        triangle_total = 0

        for obj_config in config.objects:
            obj_type = obj_config.get("type", "").lower()
            material = Material.from_dict(obj_config.get("material", {}))
            if obj_type == "sphere":
                radius = float(obj_config.get("radius", 1.0))
                center = _check_sphere(obj_config.get("center", [0.0, 0.0, 0.0]), radius, material)
                staged.append(("sphere", (center, radius, material)))
            elif obj_type == "mesh":
                pattern_name = obj_config.get("pattern", "checkerboard").upper()
                if pattern_name not in DiffusePattern.__members__:
                    raise ValueError(f"Unknown diffuse pattern: {obj_config.get('pattern')}")
                vertices, indices, st = _check_mesh(
                    obj_config.get("vertices", []),
                    obj_config.get("indices", []),
                    obj_config.get("st"),
                    material,
                )
                vertex_total += len(vertices)
                triangle_total += len(indices) // 3
                staged.append(
                    ("mesh", (vertices, indices, st, material, DiffusePattern[pattern_name]))
                )
            else:
                raise ValueError(f"Unknown object type: {obj_type}")

        lights = [
            _check_light(
                light_config.get("position", [0.0, 0.0, 0.0]),
                light_config.get("intensity", 1.0),
            )
            for light_config in config.lights
        ]

        if len(config.objects) > MAX_OBJECTS:
            raise ValueError(f"Scene has {len(config.objects)} objects, maximum is {MAX_OBJECTS}")
        if vertex_total > MAX_MESH_VERTICES:
            raise ValueError(
                f"Scene has {vertex_total} mesh vertices, maximum is {MAX_MESH_VERTICES}"
            )
        if triangle_total > MAX_MESH_TRIANGLES:
            raise ValueError(
                f"Scene has {triangle_total} mesh triangles, maximum is {MAX_MESH_TRIANGLES}"
            )
        if len(lights) > MAX_LIGHTS:
            raise ValueError(f"Scene has {len(lights)} lights, maximum is {MAX_LIGHTS}")

        self.clear()

        for kind, args in staged:
            if kind == "sphere":
                self.add_sphere(*args)
            else:
                self.add_mesh(*args)

        for position_vec, intensity_vec in lights:
            self.add_light(position_vec, intensity_vec)

    def to_dict(self, options: RenderOptions | None = None) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Args:
            options: Optional render options stored under "options".

        Returns:
            A dictionary representation of the scene.
        """
        config = self.to_config()
        data: dict[str, Any] = {"objects": config.objects, "lights": config.lights}
        if options is not None:
            data["options"] = options.to_dict()
        return data

    def from_dict(self, data: dict[str, Any]) -> RenderOptions | None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'objects' and 'lights' keys and an
                optional 'options' key.

        Returns:
            The render options stored in the dictionary, if any.

        Raises:
            ValueError: If the data contains invalid objects, lights or options.
        """
        options = None
        if "options" in data:
            options = RenderOptions.from_dict(data["options"])
            options.validate()

        config = SceneConfig(
            objects=data.get("objects", []),
            lights=data.get("lights", []),
        )
        self.from_config(config)
        return options

    def save_json(self, filepath: str | Path, options: RenderOptions | None = None) -> None:
        """Write the scene (and optionally render options) to a JSON file."""
        Path(filepath).write_text(json.dumps(self.to_dict(options), indent=2))
        logger.info("Saved scene with %d objects to %s", len(self.objects), filepath)

    def load_json(self, filepath: str | Path) -> RenderOptions | None:
        """Load a scene from a JSON file written by save_json().

        Args:
            filepath: Path of the JSON file.

        Returns:
            The render options stored in the file, if any.

        Raises:
            ValueError: If the file contents are not a valid scene.
        """
        data = json.loads(Path(filepath).read_text())
        if not isinstance(data, dict):
            raise ValueError(f"Scene file {filepath} must contain a JSON object")
        options = self.from_dict(data)
        logger.info(
            "Loaded scene with %d objects and %d lights from %s",
            len(self.objects),
            len(self.lights),
            filepath,
        )
        return options

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_objects() -> int:
        """Get the maximum number of objects supported."""
        return MAX_OBJECTS

    @staticmethod
    def get_max_mesh_vertices() -> int:
        """Get the maximum number of mesh vertices supported."""
        return MAX_MESH_VERTICES

    @staticmethod
    def get_max_mesh_triangles() -> int:
        """Get the maximum number of mesh triangles supported."""
        return MAX_MESH_TRIANGLES

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS
